"""
CompileContext — State carried through the variant runs of one request.

The sink is shared by every run of the request: each run receives it in
the suppression state it was left in and must leave it that way.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union
from uuid import uuid4

from stache.compiler.sink import CodeSink
from stache.core.config import CompilerSettings
from stache.ir.schema import CompiledFragment, CompileResult


@dataclass
class CompileRequest:
    """Input to the compiler engine."""

    text: str
    data_type: Any
    source_name: str = "<template>"
    layout: bool = False
    request_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.request_id is None:
            self.request_id = str(uuid4())

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        data_type: Any,
        layout: bool = False,
    ) -> "CompileRequest":
        path = Path(path)
        return cls(
            text=path.read_text(encoding="utf-8"),
            data_type=data_type,
            source_name=str(path),
            layout=layout,
        )


@dataclass
class CompileContext:
    """Mutable state of one compile request."""

    request: CompileRequest
    sink: CodeSink
    fragments: list[CompiledFragment] = field(default_factory=list)

    @classmethod
    def from_request(
        cls,
        request: CompileRequest,
        settings: CompilerSettings,
    ) -> "CompileContext":
        return cls(request=request, sink=CodeSink(indent=settings.indent, level=1))

    def add_fragment(self, variant: str, found_yield: bool) -> CompiledFragment:
        """Move what the sink collected into a fragment for `variant`."""
        fragment = CompiledFragment(
            variant=variant,
            code=self.sink.drain(),
            found_yield=found_yield,
        )
        self.fragments.append(fragment)
        return fragment

    def to_result(self) -> CompileResult:
        data_type = self.request.data_type
        return CompileResult(
            request_id=self.request.request_id,
            template_name=self.request.source_name,
            data_module=getattr(data_type, "__module__", "builtins"),
            data_qualname=getattr(data_type, "__qualname__", repr(data_type)),
            layout=self.request.layout,
            fragments=list(self.fragments),
        )
