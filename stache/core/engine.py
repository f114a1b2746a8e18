"""
Engine — Compile orchestration.

The engine selects the variants a request needs, runs them in order over
fresh token streams of the same source, and packages the fragments.
A plain template compiles once (full); a layout compiles twice (header,
footer) around its yield marker.

The engine is NOT where compilation logic lives.
"""

from typing import Any, Optional

from stache.compiler.classifier import TypeClassifier, get_classifier
from stache.compiler.compiler import (
    FOOTER,
    FULL,
    HEADER,
    CompilerVariant,
    TemplateCompiler,
    compile_variant,
)
from stache.compiler.resolver import MemberResolver, get_resolver
from stache.core.config import CompilerSettings, get_settings
from stache.core.context import CompileContext, CompileRequest
from stache.core.errors import ConfigurationError
from stache.core.logging import CompileLogger, clear_request_context
from stache.ir.schema import CompileResult


class Engine:
    """
    Variant orchestrator.

    Runs variants in order, fails fast, and packages results.
    """

    def __init__(
        self,
        settings: Optional[CompilerSettings] = None,
        resolver: Optional[MemberResolver] = None,
        classifier: Optional[TypeClassifier] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.resolver = resolver or get_resolver()
        self.classifier = classifier or get_classifier()

    def variants_for(self, request: CompileRequest) -> tuple[CompilerVariant, ...]:
        if request.layout:
            return (HEADER, FOOTER)
        return (FULL,)

    def compile(self, request: CompileRequest) -> CompileResult:
        """
        Compile a template.

        Args:
            request: The compile request

        Returns:
            CompileResult with one fragment per variant

        Raises:
            StacheError: The first error of the first failing variant
        """
        ctx = CompileContext.from_request(request, self.settings)
        clog = CompileLogger(request.request_id, request.source_name)

        try:
            for variant in self.variants_for(request):
                clog.variant_start(variant.name)
                try:
                    compiler = self._run_variant(request, ctx, variant)
                except Exception as e:
                    clog.variant_error(variant.name, e)
                    raise

                fragment = ctx.add_fragment(variant.name, compiler.found_yield)
                clog.variant_end(
                    variant.name,
                    lines=fragment.code.count("\n"),
                    found_yield=compiler.found_yield,
                )

            clog.compile_complete(variants=len(ctx.fragments), layout=request.layout)
        finally:
            clear_request_context()
        return ctx.to_result()

    def _run_variant(
        self,
        request: CompileRequest,
        ctx: CompileContext,
        variant: CompilerVariant,
    ) -> TemplateCompiler:
        compiler = compile_variant(
            request.source_name,
            request.text,
            request.data_type,
            ctx.sink,
            variant=variant,
            settings=self.settings,
            resolver=self.resolver,
            classifier=self.classifier,
        )
        if (
            variant.expects_yield
            and not compiler.found_yield
            and self.settings.require_yield_in_layout
        ):
            raise ConfigurationError(
                f"Layout template has no {{{{{{{self.settings.yield_marker}}}}}}} marker",
                position=compiler.end_position,
            )
        return compiler


# Global engine instance
_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """Get or create the global engine instance."""
    global _engine
    if _engine is None:
        _engine = Engine()
    return _engine


def compile_template(
    text: str,
    data_type: Any,
    source_name: str = "<template>",
    layout: bool = False,
) -> CompileResult:
    """
    Convenience function for simple compilations.

    Args:
        text: Template source
        data_type: Class the template's names resolve against
        source_name: Name used in diagnostics
        layout: Compile header and footer around the yield marker

    Returns:
        CompileResult
    """
    request = CompileRequest(text=text, data_type=data_type, source_name=source_name, layout=layout)
    return get_engine().compile(request)
