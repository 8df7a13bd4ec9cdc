# maps whatever an upstream SDK raised into our closed ErrorKind taxonomy
# rules are checked in a fixed order and the first match wins: an upstream message
# can mention several things at once ("maximum quota"), so order decides the kind

import asyncio
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Tuple

import httpx

from flash_ui.core.errors import ErrorKind, GenerationError
from flash_ui.providers.catalog import get_models_by_provider

_SECRET_RE = re.compile(r"\b(sk-[A-Za-z0-9_\-]{8,}|sk-ant-[A-Za-z0-9_\-]{8,}|AIza[0-9A-Za-z_\-]{20,})")


@dataclass(frozen=True)
class ClassifiedError:
    kind: ErrorKind
    status: int
    message: str
    provider: str


def fault_message(fault: Any) -> str:
    message = getattr(fault, "message", None)
    if not isinstance(message, str) or not message:
        body = getattr(fault, "body", None)
        if isinstance(body, dict):
            inner = body.get("error")
            message = inner.get("message") if isinstance(inner, dict) else None
    if not isinstance(message, str) or not message:
        message = str(fault)
    return redact(message)


def fault_status(fault: Any) -> int:
    for attr in ("status_code", "status", "code"):
        value = getattr(fault, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return 500


def redact(text: str) -> str:
    return _SECRET_RE.sub("[redacted]", text)


def _key_env(provider: str) -> str:
    models = get_models_by_provider(provider)
    return models[0].api_key_env if models else f"{provider.upper()}_API_KEY"


def _has(message: str, *phrases: str) -> bool:
    return any(p in message for p in phrases)


Rule = Tuple[ErrorKind, int, Callable[[str, int, Any], bool], Callable[[str], str]]

_RULES: List[Rule] = [
    (
        ErrorKind.AUTH, 401,
        lambda m, s, f: s == 401 or _has(m, "api key", "api_key", "unauthorized"),
        lambda p: f"Invalid or missing {p} API key. Check your {_key_env(p)} environment variable.",
    ),
    (
        ErrorKind.RATE_LIMITED, 429,
        lambda m, s, f: s == 429 or _has(m, "quota", "rate limit"),
        lambda p: f"{p} rate limit exceeded. Please wait a moment and try again.",
    ),
    (
        ErrorKind.MODEL_NOT_FOUND, 404,
        lambda m, s, f: s == 404 or _has(m, "not found", "does not exist", "could not find model"),
        lambda p: f"{p} model not found. The model ID may be incorrect or not available in your region.",
    ),
    (
        ErrorKind.REQUEST_TOO_LARGE, 400,
        lambda m, s, f: _has(m, "context length", "too long", "maximum"),
        lambda p: f"{p} request too large. Try a shorter prompt or reduce the content.",
    ),
    (
        ErrorKind.BILLING, 402,
        lambda m, s, f: _has(m, "billing", "payment", "insufficient"),
        lambda p: f"{p} billing issue. Check your account billing settings.",
    ),
    (
        ErrorKind.TIMEOUT, 504,
        lambda m, s, f: isinstance(f, (asyncio.TimeoutError, httpx.TimeoutException))
        or _has(m, "timeout", "timed out", "etimedout", "econnreset", "connection reset"),
        lambda p: f"Request timed out. The {p} API is slow or unreachable. Try again.",
    ),
]


def classify(fault: Any, provider: str) -> ClassifiedError:
    if isinstance(fault, GenerationError):
        return ClassifiedError(fault.kind, fault.status, fault.message, fault.provider or provider)

    message = fault_message(fault)
    status = fault_status(fault)
    lowered = message.lower()
    for kind, code, matches, render in _RULES:
        if matches(lowered, status, fault):
            return ClassifiedError(kind, code, render(provider), provider)

    return ClassifiedError(
        ErrorKind.UNKNOWN,
        status if status >= 400 else 500,
        f"{provider} error: {message}",
        provider,
    )
