# HTTP client for the /generate and /variations endpoints
# used by the session orchestrator; the streaming calls go through consume()

from typing import Any, AsyncIterator, Dict, Optional

import httpx

from flash_ui.client.stream import consume
from flash_ui.core import config
from flash_ui.core.errors import (
    STATUS_BY_KIND,
    ErrorKind,
    GenerationError,
    StreamTimeoutError,
    TransportError,
)

_KIND_BY_STATUS = {status: kind for kind, status in STATUS_BY_KIND.items() if status != 400}


def _error_from_response(response: httpx.Response) -> GenerationError:
    message = f"API error: {response.status_code} {response.reason_phrase}"
    kind: Optional[ErrorKind] = None
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        if data.get("error"):
            message = str(data["error"])
        if data.get("kind"):
            kind = ErrorKind.parse(data["kind"])
    if kind is None:
        kind = _KIND_BY_STATUS.get(response.status_code, ErrorKind.UNKNOWN)
    return GenerationError(message, kind=kind, status=response.status_code)


class ApiClient:
    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        *,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        stream_timeout: float = config.STREAM_TIMEOUT_S,
        request_timeout: float = config.REQUEST_TIMEOUT_S,
    ) -> None:
        self.base_url = base_url
        self.model = model
        self._transport = transport
        self._stream_timeout = stream_timeout
        self._timeout = httpx.Timeout(request_timeout, connect=10.0)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self._timeout, transport=self._transport)

    def _body(self, prompt: str, model: Optional[str], **extra: Any) -> Dict[str, Any]:
        body: Dict[str, Any] = {"prompt": prompt, **extra}
        model = model or self.model
        if model:
            body["model"] = model
        return body

    async def generate(self, prompt: str, *, model: Optional[str] = None) -> str:
        try:
            async with self._client() as client:
                r = await client.post("/generate", json=self._body(prompt, model, stream=False))
        except httpx.TimeoutException as e:
            raise StreamTimeoutError(f"Request timeout: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Network error: {str(e) or 'failed to connect to API'}") from e
        if r.status_code >= 400:
            raise _error_from_response(r)
        data = r.json()
        if data.get("error"):
            raise GenerationError(f"API error: {data['error']}")
        return data.get("text") or ""

    def stream_generate(
        self,
        prompt: str,
        *,
        temperature: Optional[float] = None,
        model: Optional[str] = None,
    ) -> AsyncIterator[str]:
        body = self._body(prompt, model, stream=True)
        if temperature is not None:
            body["temperature"] = temperature
        return self._stream("/generate", body)

    def stream_variations(self, prompt: str, *, model: Optional[str] = None) -> AsyncIterator[str]:
        return self._stream("/variations", self._body(prompt, model))

    async def _stream(self, path: str, body: Dict[str, Any]) -> AsyncIterator[str]:
        try:
            async with self._client() as client:
                async with client.stream("POST", path, json=body) as r:
                    if r.status_code >= 400:
                        await r.aread()
                        raise _error_from_response(r)
                    async for text in consume(r.aiter_bytes(), timeout=self._stream_timeout):
                        yield text
        except httpx.TimeoutException as e:
            raise StreamTimeoutError(f"Request timeout: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Network error: {str(e) or 'failed to connect to API'}") from e
