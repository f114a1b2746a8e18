"""Codegen — Assembling compiled fragments into Python modules."""

from stache.codegen.assembler import function_name, generate_module

__all__ = ["function_name", "generate_module"]
