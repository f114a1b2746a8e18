"""Template — Scanning template text into positioned tokens."""

from stache.template.tokenizer import tokenize

__all__ = ["tokenize"]
