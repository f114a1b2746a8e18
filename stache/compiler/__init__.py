"""Compiler — Type-checked translation of template tokens to Python code."""

from stache.compiler.classifier import TypeClassifier
from stache.compiler.compiler import (
    FOOTER,
    FULL,
    HEADER,
    VARIANTS,
    CompilerVariant,
    TemplateCompiler,
    compile_variant,
)
from stache.compiler.resolver import Member, MemberResolver
from stache.compiler.scope import ScopeContext
from stache.compiler.sink import CodeSink

__all__ = [
    "FOOTER",
    "FULL",
    "HEADER",
    "VARIANTS",
    "CodeSink",
    "CompilerVariant",
    "Member",
    "MemberResolver",
    "ScopeContext",
    "TemplateCompiler",
    "TypeClassifier",
    "compile_variant",
]
