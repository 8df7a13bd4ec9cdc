# pulls JSON objects out of free-form streamed text as soon as their braces balance
# chunk boundaries don't matter: scan state survives between feed() calls

import json
from typing import Any, AsyncIterable, AsyncIterator, Dict, List

# _scan results other than an end index
_PENDING = -1
_BROKEN = -2


class ObjectExtractor:
    """Incremental brace-depth scanner over a growing text buffer.

    Braces inside JSON string literals are ignored (escapes honoured), so a
    record such as {"html": "<div>{}</div>"} is found as one record. A span
    that can't be a record is skipped from its opening brace only, and the
    scan restarts at the next "{". That covers a balanced span that fails to
    parse, and a string literal that runs into a raw newline (JSON strings
    never contain one, so the quote that opened it was stray).
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._start = -1     # index of the "{" being matched, -1 when searching
        self._pos = 0        # next index to scan
        self._depth = 0
        self._in_string = False
        self._escaped = False

    def feed(self, text: str) -> List[Dict[str, Any]]:
        self._buffer += text
        records: List[Dict[str, Any]] = []
        while True:
            if self._start < 0 and not self._find_start():
                break
            end = self._scan()
            if end == _PENDING:
                break
            if end == _BROKEN:
                self._consume(self._start + 1)
                continue
            candidate = self._buffer[self._start:end + 1]
            try:
                record = json.loads(candidate)
            except json.JSONDecodeError:
                # retry from the next "{" after the failed start
                self._consume(self._start + 1)
                continue
            records.append(record)
            self._consume(end + 1)
        return records

    def flush(self) -> List[Dict[str, Any]]:
        """End of input: a span still open can never close, so give up on it and rescan what follows."""
        records: List[Dict[str, Any]] = []
        while self._start >= 0:
            self._consume(self._start + 1)
            records.extend(self.feed(""))
        return records

    def _find_start(self) -> bool:
        start = self._buffer.find("{", self._pos)
        if start < 0:
            # nothing left that could open a record
            self._buffer = ""
            self._pos = 0
            return False
        self._start = start
        self._pos = start
        self._depth = 0
        self._in_string = False
        self._escaped = False
        return True

    def _scan(self) -> int:
        buf = self._buffer
        for i in range(self._pos, len(buf)):
            ch = buf[i]
            if self._in_string:
                if self._escaped:
                    self._escaped = False
                elif ch == "\\":
                    self._escaped = True
                elif ch == '"':
                    self._in_string = False
                elif ch == "\n":
                    return _BROKEN
            elif ch == '"':
                self._in_string = True
            elif ch == "{":
                self._depth += 1
            elif ch == "}":
                self._depth -= 1
                if self._depth == 0:
                    self._pos = i + 1
                    return i
        self._pos = len(buf)
        return _PENDING

    def _consume(self, upto: int) -> None:
        self._buffer = self._buffer[upto:]
        self._start = -1
        self._pos = 0


async def extract_objects(increments: AsyncIterable[str]) -> AsyncIterator[Dict[str, Any]]:
    extractor = ObjectExtractor()
    async for text in increments:
        if not isinstance(text, str):
            continue
        for record in extractor.feed(text):
            yield record
    for record in extractor.flush():
        yield record
