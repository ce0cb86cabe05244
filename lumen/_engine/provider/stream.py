"""
Line framing for streamed provider responses.

Every supported backend frames its stream as newline-terminated lines
(server-sent events or newline-delimited JSON). ``StreamDecoder`` owns the
byte buffer: a chunk may end in the middle of a line, or in the middle of a
multi-byte UTF-8 character, so only complete lines are decoded and handed to
the variant's line parser. The tail waits for the next chunk.
"""

import logging
from typing import Callable, List, Optional

from lumen._types.errors import ProviderProtocolError
from lumen._types.model import StreamFragment

logger = logging.getLogger(__name__)

LineParser = Callable[[str], Optional[StreamFragment]]


class StreamDecoder:
    """Incremental decoder for one response body. Not reusable."""

    def __init__(self, parse_line: LineParser):
        self._parse_line = parse_line
        self._buffer = b""
        self.done = False

    def feed(self, raw: bytes) -> List[StreamFragment]:
        """Consume ``raw`` and return the fragments completed by it."""
        self._buffer += raw
        *lines, self._buffer = self._buffer.split(b"\n")
        fragments: List[StreamFragment] = []
        for line in lines:
            fragment = self._decode_line(line)
            if fragment is not None:
                fragments.append(fragment)
        return fragments

    def finish(self) -> List[StreamFragment]:
        """Flush the trailing line once the body is exhausted."""
        tail, self._buffer = self._buffer, b""
        fragment = self._decode_line(tail)
        return [fragment] if fragment is not None else []

    def _decode_line(self, raw_line: bytes) -> Optional[StreamFragment]:
        try:
            line = raw_line.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            raise ProviderProtocolError(f"stream is not valid UTF-8: {e}")
        if not line:
            return None

        fragment = self._parse_line(line)
        if fragment is None:
            return None

        if self.done:
            raise ProviderProtocolError(
                f"backend sent data after end of stream: {line[:80]!r}"
            )
        if fragment.done:
            logger.debug("end of stream signalled")
            self.done = True
        return fragment
