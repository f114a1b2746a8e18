"""
Scope Context — Which section the compiler is in and what type is bound.

A ScopeContext is an immutable stack of frames. Entering a section returns
a new context with one more frame; leaving it returns the parent. The root
frame binds the template's data type to the data parameter and can never
be popped.

Guard frames (boolean and inverted sections) render their body with the
enclosing value, so names inside them resolve against the nearest frame
that binds a value. No other upward search is done.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from stache.compiler.classifier import TypeClassifier, get_classifier
from stache.compiler.resolver import MemberResolver, get_resolver, type_name
from stache.core.config import CompilerSettings
from stache.core.errors import ResolutionError
from stache.ir.enums import SectionShape, TypeClassification

ESCAPING_WRITER = "HtmlEscapingWriter"


@dataclass(frozen=True)
class Frame:
    """One open section (or the root)."""

    name: Optional[str]
    declared_type: Any        # Type of the member that opened the frame
    expression: str           # Expression reading that member
    bound_type: Any           # Type names resolve against inside the frame
    bound_expression: str     # Expression of the value bound inside the frame
    binds: bool = True
    inverted: bool = False
    shape: Optional[SectionShape] = None
    loop_depth: int = 0


class ScopeContext:
    """Immutable section stack with name resolution and code fragments."""

    def __init__(
        self,
        frames: tuple[Frame, ...],
        settings: CompilerSettings,
        resolver: MemberResolver,
        classifier: TypeClassifier,
    ) -> None:
        self._frames = frames
        self.settings = settings
        self.resolver = resolver
        self.classifier = classifier

    @classmethod
    def root(
        cls,
        data_type: Any,
        settings: Optional[CompilerSettings] = None,
        resolver: Optional[MemberResolver] = None,
        classifier: Optional[TypeClassifier] = None,
    ) -> "ScopeContext":
        settings = settings or CompilerSettings()
        frame = Frame(
            name=None,
            declared_type=data_type,
            expression=settings.data_name,
            bound_type=data_type,
            bound_expression=settings.data_name,
        )
        return cls(
            (frame,),
            settings,
            resolver or get_resolver(),
            classifier or get_classifier(),
        )

    @property
    def frame(self) -> Frame:
        return self._frames[-1]

    @property
    def depth(self) -> int:
        """Number of open sections."""
        return len(self._frames) - 1

    # -- stack ---------------------------------------------------------------

    def get_child(self, name: str) -> "ScopeContext":
        """
        Enter a section over member `name`.

        Raises:
            ResolutionError: If `name` is not a member of the bound type
        """
        return self._push(name, inverted=False)

    def get_inverted_child(self, name: str) -> "ScopeContext":
        """Enter an inverted section over member `name`."""
        return self._push(name, inverted=True)

    def parent_context(self) -> "ScopeContext":
        if not self.is_enclosed():
            raise ValueError("The root scope has no parent")
        return ScopeContext(self._frames[:-1], self.settings, self.resolver, self.classifier)

    def is_enclosed(self) -> bool:
        return len(self._frames) > 1

    def current_enclosed_context_name(self) -> str:
        if not self.is_enclosed():
            raise ValueError("Not inside a section")
        return self.frame.name

    def _push(self, name: str, inverted: bool) -> "ScopeContext":
        declared_type, expression = self._lookup(name)
        shape, inner = self.classifier.section_shape(declared_type)
        base = self._binding_frame()
        depth = self.frame.loop_depth

        bound_type, bound_expression, binds = base.bound_type, base.bound_expression, False
        if not inverted:
            if shape == SectionShape.ITERATION:
                depth += 1
                bound_type, bound_expression, binds = inner, f"item{depth}", True
            elif shape in (SectionShape.OPTIONAL, SectionShape.OBJECT):
                bound_type, bound_expression, binds = inner, expression, True

        frame = Frame(
            name=name,
            declared_type=declared_type,
            expression=expression,
            bound_type=bound_type,
            bound_expression=bound_expression,
            binds=binds,
            inverted=inverted,
            shape=shape,
            loop_depth=depth,
        )
        return ScopeContext(self._frames + (frame,), self.settings, self.resolver, self.classifier)

    def _binding_frame(self) -> Frame:
        for frame in reversed(self._frames):
            if frame.binds:
                return frame
        return self._frames[0]

    def _lookup(self, name: str) -> tuple[Any, str]:
        base = self._binding_frame()
        if name == ".":
            return base.bound_type, base.bound_expression

        current_type, expression = base.bound_type, base.bound_expression
        parts = name.split(".")
        for index, part in enumerate(parts):
            if index > 0 and self.classifier.is_optional(current_type):
                traversed = ".".join(parts[:index])
                raise ResolutionError(
                    f"Cannot read '{part}' through optional member '{traversed}'",
                    type_name=type_name(current_type),
                    member_name=part,
                    hint=f"Open a {{{{#{traversed}}}}} section first.",
                )
            member = self.resolver.resolve(current_type, part)
            current_type = member.declared_type
            expression = member.access_expression(expression)
        return current_type, expression

    # -- code fragments ------------------------------------------------------

    def unescaped_writer_expression(self) -> str:
        return self.settings.writer_name

    def rendering_code(self) -> str:
        """Statement writing the current frame's value, HTML-escaped."""
        return self._rendering_code(escaped=True)

    def unescaped_rendering_code(self) -> str:
        """Statement writing the current frame's value as-is."""
        return self._rendering_code(escaped=False)

    def _rendering_code(self, escaped: bool) -> str:
        frame = self.frame
        expr = frame.expression
        writer = self.unescaped_writer_expression()
        escape = self.settings.escape_function
        optional = self.classifier.is_optional(frame.declared_type)
        classification = self.classifier.classify(frame.declared_type)

        if classification == TypeClassification.RENDERABLE:
            target = f"{ESCAPING_WRITER}({writer})" if escaped else writer
            call = f"{expr}.render({target})"
            if optional:
                return f"None if {expr} is None else {call}"
            return call

        if classification == TypeClassification.NUMERIC:
            value = f"str({expr})"
        elif classification == TypeClassification.BOOLEAN:
            value = f'("true" if {expr} else "false")'
        elif classification in (TypeClassification.STRING, TypeClassification.CHARACTER):
            value = f"{escape}({expr})" if escaped else expr
        else:
            value = f"{escape}(str({expr}))" if escaped else f"str({expr})"

        if optional:
            value = f'"" if {expr} is None else {value}'
        return f"{writer}.write({value})"

    def begin_section_rendering_code(self) -> str:
        """Block header opening the current frame's section."""
        frame = self.frame
        expr = frame.expression
        if frame.inverted:
            if frame.shape == SectionShape.OPTIONAL:
                return f"if {expr} is None:"
            return f"if not {expr}:"
        if frame.shape == SectionShape.ITERATION:
            iterable = expr
            if self.classifier.is_optional(frame.declared_type):
                iterable = f"{expr} or ()"
            return f"for {frame.bound_expression} in {iterable}:"
        if frame.shape == SectionShape.OPTIONAL:
            return f"if {expr} is not None:"
        return f"if {expr}:"

    def end_section_rendering_code(self) -> str:
        """Marker written after the current frame's block is closed."""
        return f"# /{self.frame.name}"
