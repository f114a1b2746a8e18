"""
Runtime helpers imported by generated render modules.

Kept deliberately small: generated code only needs escaping, an escaping
writer for self-rendering values, and the marker types the classifier
recognises.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import NewType, Protocol

# Declares a member holding exactly one character
Char = NewType("Char", str)


class Writer(Protocol):
    """Anything generated code can write text to."""

    def write(self, text: str) -> object:
        ...


def escape_html(text: str) -> str:
    """Escape text for HTML element content and quoted attribute values."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
    )


class HtmlEscapingWriter:
    """Writer wrapper escaping everything written through it."""

    def __init__(self, writer: Writer) -> None:
        self._writer = writer

    def write(self, text: str) -> int:
        self._writer.write(escape_html(text))
        return len(text)


class Renderable(ABC):
    """
    A value that renders itself.

    Members declared with a Renderable subclass are not stringified: the
    generated code calls render() with the output writer, wrapped in an
    HtmlEscapingWriter for escaped references.
    """

    @abstractmethod
    def render(self, writer: Writer) -> None:
        ...


__all__ = [
    "Char",
    "HtmlEscapingWriter",
    "Renderable",
    "Writer",
    "escape_html",
]
