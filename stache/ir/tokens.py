"""
Positioned tokens — the flat stream the compiler consumes.
"""

from __future__ import annotations

from dataclasses import dataclass

from stache.ir.enums import TokenKind


@dataclass(frozen=True)
class Position:
    """Location of a token in a template source."""

    source_name: str
    line: int    # 1-based
    column: int  # 1-based
    offset: int  # 0-based character offset

    def describe(self) -> str:
        return f"{self.source_name}:{self.line}:{self.column}"


@dataclass(frozen=True)
class PositionedToken:
    """
    A template token and where it came from.

    `value` holds the literal text for TEXT, the single character for
    SPECIAL_CHARACTER, the referenced name for variables and sections,
    and is empty for END_OF_FILE.
    """

    kind: TokenKind
    value: str
    position: Position

    @classmethod
    def end_of_file(cls, position: Position) -> "PositionedToken":
        return cls(kind=TokenKind.END_OF_FILE, value="", position=position)

    def describe(self) -> str:
        if self.kind == TokenKind.END_OF_FILE:
            return f"{self.position.describe()} {self.kind.value}"
        return f"{self.position.describe()} {self.kind.value} {self.value!r}"
