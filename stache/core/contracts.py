"""
Contracts — Interfaces between the tokenizer and token consumers.
"""

from typing import Iterable, Optional, Protocol

from stache.ir.enums import TokenKind
from stache.ir.tokens import Position, PositionedToken


class TokenProcessor(Protocol):
    """Anything consuming a positioned token stream one token at a time."""

    def process_token(self, token: PositionedToken) -> None:
        """Handle one token; raise to abort the stream."""
        ...


def drive(
    tokens: Iterable[PositionedToken],
    processor: TokenProcessor,
    source_name: str = "<template>",
) -> Position:
    """
    Feed a token stream to a processor until END_OF_FILE.

    A stream that stops without END_OF_FILE gets one synthesised at the
    last seen position, so processors can rely on always receiving it.

    Returns:
        Position of the END_OF_FILE token
    """
    last: Optional[Position] = None
    for token in tokens:
        processor.process_token(token)
        last = token.position
        if token.kind == TokenKind.END_OF_FILE:
            return last

    if last is None:
        last = Position(source_name=source_name, line=1, column=1, offset=0)
    processor.process_token(PositionedToken.end_of_file(last))
    return last
