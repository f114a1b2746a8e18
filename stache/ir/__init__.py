"""
IR — Tokens, classifications and compile results shared by all stages.
"""

from stache.ir.enums import SectionShape, TokenKind, TypeClassification
from stache.ir.schema import CompiledFragment, CompileResult
from stache.ir.tokens import Position, PositionedToken

__all__ = [
    "CompiledFragment",
    "CompileResult",
    "Position",
    "PositionedToken",
    "SectionShape",
    "TokenKind",
    "TypeClassification",
]
