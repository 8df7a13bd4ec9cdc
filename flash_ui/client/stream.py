# reads a framed response body and turns it back into text increments
# the only await is the chunk read; everything between reads is plain parsing

import asyncio
from typing import AsyncIterable, AsyncIterator

from flash_ui.core import config
from flash_ui.core.errors import GenerationError, StreamTimeoutError, TransportError
from flash_ui.services.framing import Frame, FrameDecoder


async def consume(
    chunks: AsyncIterable[bytes],
    *,
    timeout: float = config.STREAM_TIMEOUT_S,
) -> AsyncIterator[str]:
    """Yield each Data frame's text until the terminal frame.

    Raises GenerationError for an in-band error frame, StreamTimeoutError when
    the whole consumption outlives `timeout` seconds, and TransportError when
    the channel closes before a single frame arrived.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    decoder = FrameDecoder()
    iterator = chunks.__aiter__()
    frames_seen = 0

    while True:
        remaining = deadline - loop.time()
        if remaining <= 0:
            raise StreamTimeoutError(_timeout_message(timeout))
        try:
            chunk = await asyncio.wait_for(iterator.__anext__(), remaining)
        except StopAsyncIteration:
            break
        except asyncio.TimeoutError as e:
            raise StreamTimeoutError(_timeout_message(timeout)) from e

        for frame in decoder.feed(chunk):
            frames_seen += 1
            if frame.terminal:
                return
            yield _text_or_raise(frame)

    for frame in decoder.flush():
        frames_seen += 1
        if frame.terminal:
            return
        yield _text_or_raise(frame)

    if frames_seen == 0:
        raise TransportError("No data received from API. The server may not be responding correctly.")


def _text_or_raise(frame: Frame) -> str:
    if frame.error is not None:
        raise GenerationError.from_payload(frame.error)
    return frame.text or ""


def _timeout_message(timeout: float) -> str:
    return f"Request timeout: the API took longer than {timeout:g}s to respond. Please try again."
