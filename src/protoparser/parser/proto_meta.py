"""Source positions attached to tokens and AST nodes."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Position:
    """A location in the source: 0-based byte offset, 1-based line and column."""

    filename: str = ""
    offset: int = 0
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.filename or '<input>'}:{self.line}:{self.column}"

    @property
    def is_valid(self) -> bool:
        return self.line > 0


@dataclass
class Meta:
    """Source range of a node; ``last`` is the zero Position when unset."""

    start: Position = field(default_factory=Position)
    last: Position = field(default_factory=Position)
