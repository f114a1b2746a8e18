"""
Errors — Positioned diagnostics raised by the compiler.

Every error detected while processing a token carries that token's
position. Compilation is fail-fast: the first error aborts the run.
"""

from __future__ import annotations

from typing import Optional

from stache.ir.tokens import Position


class StacheError(Exception):
    """Base class for all errors surfaced to template authors."""

    hint: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        position: Optional[Position] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.position = position
        if hint is not None:
            self.hint = hint

    def locate(self, position: Position) -> "StacheError":
        """Attach a position unless one is already known."""
        if self.position is None:
            self.position = position
        return self

    def format(self) -> str:
        text = self.message
        if self.position is not None:
            text = f"{self.position.describe()}: {text}"
        if self.hint:
            text = f"{text} Hint: {self.hint}"
        return text

    def __str__(self) -> str:
        return self.format()


class TemplateSyntaxError(StacheError):
    """Structural violation: unbalanced sections, misplaced yield, bad tags."""


class ResolutionError(StacheError):
    """A template name does not match any member of the bound type."""

    def __init__(
        self,
        message: str,
        *,
        type_name: Optional[str] = None,
        member_name: Optional[str] = None,
        position: Optional[Position] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message, position=position, hint=hint)
        self.type_name = type_name
        self.member_name = member_name


class ConfigurationError(StacheError):
    """Invalid settings, or a layout template without its yield marker."""


__all__ = [
    "ConfigurationError",
    "ResolutionError",
    "StacheError",
    "TemplateSyntaxError",
]
