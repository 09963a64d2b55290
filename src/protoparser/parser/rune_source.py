"""Character reader that tracks the source position of every code point."""

from __future__ import annotations

import codecs
from typing import IO, Optional, Union

from .errors import ProtoScanError
from .proto_meta import Position

EOF_RUNE = ""

_CHUNK_SIZE = 4096


def _utf8_width(ch: str) -> int:
    if ch < "\x80":
        return 1
    if ch < "\u0800":
        return 2
    if ch < "\U00010000":
        return 3
    return 4


class RuneSource:
    """Lazily decodes a byte (or text) stream one code point at a time.

    ``pos`` is always the position of the next code point. ``unread`` steps back
    over the last consumed code point; ``mark``/``reset`` let the scanner rewind
    to the start of the last token.
    """

    def __init__(self, reader: Union[IO[bytes], IO[str]], filename: str = ""):
        self._reader = reader
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
        self._text = ""
        self._idx = 0
        self._eof = False
        self._decode_error: Optional[str] = None
        self.filename = filename
        self.pos = Position(filename, 0, 1, 1)
        self.prev_pos = self.pos
        self._mark_idx = 0
        self._mark_pos = self.pos

    def _fill(self) -> bool:
        """Append the next decoded chunk; returns False once input is exhausted."""
        while not self._eof:
            chunk = self._reader.read(_CHUNK_SIZE)
            final = not chunk
            if isinstance(chunk, str):
                decoded = chunk
            else:
                try:
                    decoded = self._decoder.decode(chunk or b"", final=final)
                except UnicodeDecodeError as e:
                    # Keep the valid text in front of the bad byte; peek raises
                    # once the reader gets there.
                    decoded = e.object[: e.start].decode("utf-8")
                    self._decode_error = f"invalid UTF-8 encoding: {e.reason}"
                    final = True
            if final:
                self._eof = True
            if decoded:
                self._text += decoded
                return True
        return False

    def peek(self) -> str:
        if self._idx >= len(self._text) and not self._fill():
            if self._decode_error is not None:
                raise ProtoScanError(self._decode_error, self.pos)
            return EOF_RUNE
        return self._text[self._idx]

    def next(self) -> str:
        ch = self.peek()
        if ch == EOF_RUNE:
            return EOF_RUNE
        self._idx += 1
        self.prev_pos = self.pos
        offset = self.pos.offset + _utf8_width(ch)
        if ch == "\n":
            self.pos = Position(self.filename, offset, self.pos.line + 1, 1)
        else:
            self.pos = Position(self.filename, offset, self.pos.line, self.pos.column + 1)
        return ch

    def unread(self) -> None:
        """Push back the most recently consumed code point (one level only)."""
        if self._idx == 0 or self.pos == self.prev_pos:
            raise RuntimeError("unread without a preceding next")
        self._idx -= 1
        self.pos = self.prev_pos

    def mark(self) -> Position:
        # Drop consumed text so long inputs are not held in memory.
        if self._idx > _CHUNK_SIZE:
            self._text = self._text[self._idx:]
            self._idx = 0
        self._mark_idx = self._idx
        self._mark_pos = self.pos
        self.prev_pos = self.pos
        return self.pos

    def reset(self) -> None:
        """Rewind to the last mark."""
        self._idx = self._mark_idx
        self.pos = self._mark_pos
        self.prev_pos = self.pos
