# wire format for streamed generations (server-sent-events shaped):
#   data: {"text": "..."}\n\n                       one per increment
#   data: {"error": "...", "kind": ..., "status": ...}\n\n   in-band failure
#   data: [DONE]\n\n                                 terminal, always last

import codecs
import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional

from flash_ui.core.errors import MalformedStreamError
from flash_ui.services.error_classifier import classify

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE = "[DONE]"
TERMINAL_FRAME = f"{DATA_PREFIX}{DONE}\n\n".encode("utf-8")


@dataclass(frozen=True)
class Frame:
    text: Optional[str] = None
    error: Optional[Dict[str, Any]] = None
    terminal: bool = False


def encode_data(text: str) -> bytes:
    return f"{DATA_PREFIX}{json.dumps({'text': text}, ensure_ascii=False)}\n\n".encode("utf-8")


def encode_error(payload: Dict[str, Any]) -> bytes:
    return f"{DATA_PREFIX}{json.dumps(payload, ensure_ascii=False)}\n\n".encode("utf-8")


async def encode_stream(increments: AsyncIterator[str], *, provider: str) -> AsyncIterator[bytes]:
    """Frame every increment, then exactly one terminal frame.

    A failure while pulling increments is classified and written as an error
    frame; the terminal frame still follows so the reader never waits for more.
    """
    try:
        async for text in increments:
            yield encode_data(text)
    except Exception as e:
        logger.exception("%s stream failed mid-generation", provider)
        classified = classify(e, provider)
        yield encode_error({
            "error": classified.message,
            "kind": classified.kind.value,
            "status": classified.status,
        })
    yield TERMINAL_FRAME


def decode_line(line: str) -> Optional[Frame]:
    """Turn one `data: ...` line into a Frame; other lines (comments, blanks, event names) give None."""
    if not line.startswith(DATA_PREFIX):
        return None
    data = line[len(DATA_PREFIX):]
    if data == DONE:
        return Frame(terminal=True)
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError as e:
        raise MalformedStreamError(f"Malformed stream frame: {data[:80]!r}") from e
    if not isinstance(parsed, dict):
        raise MalformedStreamError(f"Unexpected frame payload: {data[:80]!r}")
    if parsed.get("error"):
        return Frame(error=parsed)
    text = parsed.get("text")
    if not isinstance(text, str):
        raise MalformedStreamError(f"Frame without text: {data[:80]!r}")
    return Frame(text=text)


class FrameDecoder:
    """Reassembles frames from arbitrarily split byte chunks."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
        self._buffer = ""

    def _decode(self, chunk: bytes, final: bool = False) -> str:
        try:
            return self._decoder.decode(chunk, final)
        except UnicodeDecodeError as e:
            raise MalformedStreamError(f"Stream is not valid UTF-8: {e.reason}") from e

    def feed(self, chunk: bytes) -> List[Frame]:
        self._buffer += self._decode(chunk)
        lines = self._buffer.split("\n")
        # last piece is an incomplete line (or "") until the next newline arrives
        self._buffer = lines.pop()
        frames: List[Frame] = []
        for line in lines:
            frame = decode_line(line.rstrip("\r"))
            if frame is not None:
                frames.append(frame)
        return frames

    def flush(self) -> List[Frame]:
        tail = self._buffer + self._decode(b"", final=True)
        self._buffer = ""
        frame = decode_line(tail.rstrip("\r"))
        return [frame] if frame is not None else []
