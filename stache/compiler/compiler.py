"""
Template Compiler — Turn a token stream into Python render statements.

One algorithm, three variants:
- full: renders the whole template; the yield marker is an ordinary name
- header: output enabled until the yield marker, suppressed after it
- footer: output suppressed until the yield marker, enabled after it

Compiling a layout once as header and once as footer yields two fragments
that, written around a page body, reconstruct the layout.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from stache.compiler.classifier import TypeClassifier
from stache.compiler.resolver import MemberResolver
from stache.compiler.scope import ScopeContext
from stache.compiler.sink import CodeSink
from stache.core.config import CompilerSettings
from stache.core.contracts import drive
from stache.core.errors import StacheError, TemplateSyntaxError
from stache.core.logging import LogChannel, get_logger
from stache.ir.enums import TokenKind
from stache.ir.tokens import Position, PositionedToken
from stache.template.tokenizer import tokenize

log = get_logger(LogChannel.COMPILE)

# Escapes keeping generated string literals well-formed
SPECIAL_CHARACTER_CODE = {
    "\n": "\\n",
    "\r": "\\r",
    '"': '\\"',
    "\\": "\\\\",
}
_LITERAL_ESCAPES = str.maketrans({
    # Control characters and lone surrogates cannot appear raw in source
    **{chr(code): f"\\x{code:02x}" for code in (*range(0x20), 0x7F)},
    **{chr(code): f"\\u{code:04x}" for code in range(0xD800, 0xE000)},
    **SPECIAL_CHARACTER_CODE,
})


@dataclass(frozen=True)
class CompilerVariant:
    """How a compiler run treats the yield marker and initial output."""

    name: str
    expects_yield: bool
    initially_suppressed: bool


FULL = CompilerVariant("full", expects_yield=False, initially_suppressed=False)
HEADER = CompilerVariant("header", expects_yield=True, initially_suppressed=False)
FOOTER = CompilerVariant("footer", expects_yield=True, initially_suppressed=True)

VARIANTS = {variant.name: variant for variant in (FULL, HEADER, FOOTER)}


class TemplateCompiler:
    """
    Single-pass, fail-fast compiler over one token stream.

    The sink's suppression state is restored after the run, and the run
    always ends the last generated line.
    """

    def __init__(
        self,
        tokens: Iterable[PositionedToken],
        sink: CodeSink,
        context: ScopeContext,
        variant: CompilerVariant = FULL,
        source_name: str = "<template>",
    ) -> None:
        self.tokens = tokens
        self.sink = sink
        self.context = context
        self.variant = variant
        self.source_name = source_name
        self.yield_marker = context.settings.yield_marker
        self.found_yield = False
        self.end_position: Optional[Position] = None
        self._handlers = {
            TokenKind.TEXT: self._text,
            TokenKind.SPECIAL_CHARACTER: self._special_character,
            TokenKind.VARIABLE: self._variable,
            TokenKind.UNESCAPED_VARIABLE: self._unescaped_variable,
            TokenKind.SECTION_OPEN: self._section_open,
            TokenKind.INVERTED_SECTION_OPEN: self._inverted_section_open,
            TokenKind.SECTION_CLOSE: self._section_close,
            TokenKind.END_OF_FILE: self._end_of_file,
        }

    def run(self) -> None:
        mark = self.sink.mark()
        was_suppressing = self.sink.is_suppressing()
        self.found_yield = False
        if self.variant.initially_suppressed:
            self.sink.disable_output()
        else:
            self.sink.enable_output()

        try:
            self.end_position = drive(self.tokens, self, self.source_name)
            self.sink.finish()
        except BaseException:
            # A failed run leaves no partial code behind
            self.sink.rollback(mark)
            raise
        if was_suppressing:
            self.sink.disable_output()
        else:
            self.sink.enable_output()

    def process_token(self, token: PositionedToken) -> None:
        try:
            self._handlers[token.kind](token)
        except StacheError as exc:
            raise exc.locate(token.position)

    # -- literals ------------------------------------------------------------

    def _text(self, token: PositionedToken) -> None:
        self._write_literal(token.value.translate(_LITERAL_ESCAPES))

    def _special_character(self, token: PositionedToken) -> None:
        char = token.value
        self._write_literal(char.translate(_LITERAL_ESCAPES))
        if char == "\n":
            self.sink.println()

    def _write_literal(self, code: str) -> None:
        self.sink.write(f'{self.context.unescaped_writer_expression()}.write("{code}")')

    # -- variables -----------------------------------------------------------

    def _is_yield(self, name: str) -> bool:
        return self.variant.expects_yield and name == self.yield_marker

    def _check_yield_placement(self) -> None:
        if self.found_yield:
            raise TemplateSyntaxError("Yield can be used only once")
        if self.context.is_enclosed():
            raise TemplateSyntaxError(
                f"Unclosed {self.context.current_enclosed_context_name()} block before yield"
            )

    def _variable(self, token: PositionedToken) -> None:
        if self._is_yield(token.value):
            self._check_yield_placement()
            raise TemplateSyntaxError(
                "Yield should be unescaped variable",
                hint=f"Write {{{{{{{self.yield_marker}}}}}}} instead.",
            )
        variable = self.context.get_child(token.value)
        self.sink.write(variable.rendering_code())

    def _unescaped_variable(self, token: PositionedToken) -> None:
        if not self._is_yield(token.value):
            variable = self.context.get_child(token.value)
            self.sink.write(variable.unescaped_rendering_code())
            return

        self._check_yield_placement()
        self.found_yield = True
        if self.sink.is_suppressing():
            self.sink.enable_output()
        else:
            self.sink.disable_output()
        log.verbose(
            "yield_toggled",
            variant=self.variant.name,
            line=token.position.line,
            suppressing=self.sink.is_suppressing(),
        )

    # -- sections ------------------------------------------------------------

    def _section_open(self, token: PositionedToken) -> None:
        self.context = self.context.get_child(token.value)
        self.sink.begin_block(self.context.begin_section_rendering_code())
        log.debug("section_opened", name=token.value, depth=self.context.depth)

    def _inverted_section_open(self, token: PositionedToken) -> None:
        self.context = self.context.get_inverted_child(token.value)
        self.sink.begin_block(self.context.begin_section_rendering_code())
        log.debug("inverted_section_opened", name=token.value, depth=self.context.depth)

    def _section_close(self, token: PositionedToken) -> None:
        name = token.value
        if not self.context.is_enclosed():
            raise TemplateSyntaxError(f"Closing {name} block when no block is currently open")
        expected = self.context.current_enclosed_context_name()
        if expected != name:
            raise TemplateSyntaxError(f"Closing {name} block instead of {expected}")
        self.sink.end_block(self.context.end_section_rendering_code())
        self.context = self.context.parent_context()
        log.debug("section_closed", name=name, depth=self.context.depth)

    def _end_of_file(self, token: PositionedToken) -> None:
        if self.context.is_enclosed():
            raise TemplateSyntaxError(
                f"Unclosed {self.context.current_enclosed_context_name()} block at end of file"
            )


def compile_variant(
    source_name: str,
    text: str,
    data_type: Any,
    sink: CodeSink,
    variant: CompilerVariant = FULL,
    settings: Optional[CompilerSettings] = None,
    resolver: Optional[MemberResolver] = None,
    classifier: Optional[TypeClassifier] = None,
) -> TemplateCompiler:
    """
    Tokenize `text` and run one compiler variant into `sink`.

    Returns:
        The finished compiler, for found_yield and end_position

    Raises:
        StacheError: On the first tokenizer, structural or resolution error
    """
    context = ScopeContext.root(data_type, settings, resolver, classifier)
    compiler = TemplateCompiler(
        tokenize(source_name, text),
        sink,
        context,
        variant=variant,
        source_name=source_name,
    )
    compiler.run()
    return compiler
