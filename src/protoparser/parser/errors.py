"""Exceptions raised while parsing .proto sources."""

from __future__ import annotations

from typing import Optional

from .proto_meta import Position


class ProtoParseError(Exception):
    """Raised when the parser encounters unexpected input."""

    def __init__(self, message: str, pos: Optional[Position] = None):
        self.pos = pos
        if pos:
            super().__init__(f"{pos}: {message}")
        else:
            super().__init__(message)


class ProtoScanError(ProtoParseError):
    """Raised for malformed lexemes: bad strings, comments, numbers or UTF-8."""
