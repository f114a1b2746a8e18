"""
Compile results — Pydantic models for what a compilation produces.

A result holds one generated code fragment per compiled variant, plus
enough metadata for the assembler to import the bound data type.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class CompiledFragment(BaseModel):
    """Generated Python statements for one compiler variant."""

    variant: str = Field(..., description="Variant name: full, header or footer")
    code: str = Field(..., description="Indented Python statements (function body)")
    found_yield: bool = Field(
        default=False,
        description="Whether the yield marker was found during this run",
    )

    def is_empty(self) -> bool:
        return not self.code.strip()


class CompileResult(BaseModel):
    """Output of compiling one template against one data type."""

    request_id: str = Field(..., description="Identifier of the compile request")
    template_name: str = Field(..., description="Source name of the template")
    data_module: str = Field(..., description="Module declaring the data type")
    data_qualname: str = Field(..., description="Qualified name of the data type")
    layout: bool = Field(
        default=False,
        description="True when compiled as a header/footer layout",
    )
    fragments: list[CompiledFragment] = Field(default_factory=list)

    def fragment(self, variant: str) -> Optional[CompiledFragment]:
        for fragment in self.fragments:
            if fragment.variant == variant:
                return fragment
        return None

    def code(self, variant: str) -> str:
        """Code of a variant's fragment; KeyError if it was not compiled."""
        fragment = self.fragment(variant)
        if fragment is None:
            raise KeyError(f"Variant '{variant}' was not compiled")
        return fragment.code
