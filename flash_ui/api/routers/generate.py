import logging
from typing import AsyncIterator, Optional, cast

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse

from flash_ui.api.errors import error_response
from flash_ui.core import config
from flash_ui.providers.base import GenerationRequest
from flash_ui.providers.factory import get_provider
from flash_ui.schemas.generate import ErrorResponse, GenerateRequest, GenerateResponse, VariationsRequest
from flash_ui.services.error_classifier import classify
from flash_ui.services.framing import encode_stream
from flash_ui.services.prompts import variations_prompt

router = APIRouter(tags=["generate"])
logger = logging.getLogger(__name__)

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}
ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _provider_failure(e: Exception, provider: str) -> JSONResponse:
    logger.exception("%s API error", provider)
    classified = classify(e, provider)
    return error_response(classified.status, classified.message, classified.kind.value)


async def _stream_response(increments: AsyncIterator[str], provider: str, request: Request):
    # pull the first increment before answering, so a failure that happens up front
    # (bad key, unknown model upstream, quota) still gets its own HTTP status
    first: Optional[str] = None
    try:
        first = await increments.__anext__()
    except StopAsyncIteration:
        pass
    except Exception as e:
        return _provider_failure(e, provider)

    async def rest() -> AsyncIterator[str]:
        try:
            if first is not None:
                yield first
            async for text in increments:
                if await request.is_disconnected():
                    logger.info("client disconnected, stopping stream")
                    break
                yield text
        finally:
            aclose = getattr(increments, "aclose", None)
            if aclose is not None:
                await aclose()

    return StreamingResponse(
        encode_stream(rest(), provider=provider),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/generate", response_model=GenerateResponse, responses=ERROR_RESPONSES)
async def generate(req: GenerateRequest, request: Request):
    if not req.prompt:
        raise HTTPException(status_code=400, detail="Prompt is required")

    model, provider = get_provider(req.model)
    gen_request = GenerationRequest(
        prompt=req.prompt,
        model_id=model.id,
        stream=req.stream,
        temperature=req.temperature,
    )
    try:
        result = await provider.generate(gen_request)
    except Exception as e:
        return _provider_failure(e, model.provider)

    if not req.stream:
        return GenerateResponse(text=cast(str, result))
    return await _stream_response(cast(AsyncIterator[str], result), model.provider, request)


@router.post("/variations", responses=ERROR_RESPONSES)
async def variations(req: VariationsRequest, request: Request):
    if not req.prompt:
        raise HTTPException(status_code=400, detail="Prompt is required")

    model, provider = get_provider(req.model)
    gen_request = GenerationRequest(
        prompt=variations_prompt(req.prompt),
        model_id=model.id,
        stream=True,
        temperature=config.VARIATION_TEMPERATURE,
    )
    return await _stream_response(provider.stream(gen_request), model.provider, request)
