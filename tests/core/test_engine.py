"""
Unit tests for compile orchestration.
"""

import pytest

from sample_models import Cart, Greeting, Page
from stache.compiler.resolver import MemberResolver
from stache.core.config import CompilerSettings
from stache.core.context import CompileRequest
from stache.core.engine import Engine
from stache.core.errors import ConfigurationError, ResolutionError
from stache.core.logging import _request_context


class TestEngine:
    """Tests for variant selection and packaging."""

    def test_plain_template_compiles_once(self, engine):
        """Verify a non-layout request yields a single full fragment."""
        request = CompileRequest(text="Hi {{name}}", data_type=Greeting, source_name="hi.mustache")
        result = engine.compile(request)

        assert [fragment.variant for fragment in result.fragments] == ["full"]
        assert result.template_name == "hi.mustache"
        assert result.data_module == "sample_models"
        assert result.data_qualname == "Greeting"
        assert result.layout is False
        assert result.request_id == request.request_id

    def test_layout_compiles_header_and_footer(self, engine):
        """Verify a layout request yields header then footer."""
        request = CompileRequest(
            text="<head>{{{yield}}}</head>",
            data_type=Page,
            layout=True,
        )
        result = engine.compile(request)

        assert [fragment.variant for fragment in result.fragments] == ["header", "footer"]
        assert result.code("header") == '    writer.write("<head>")\n'
        assert result.code("footer") == '    writer.write("</head>")\n'
        assert all(fragment.found_yield for fragment in result.fragments)

    def test_layout_without_yield_is_rejected(self, engine):
        """Verify a layout with no marker fails at end of file."""
        request = CompileRequest(text="<p>\n</p>", data_type=Page, layout=True)

        with pytest.raises(ConfigurationError) as info:
            engine.compile(request)

        assert "{{{yield}}}" in info.value.message
        assert info.value.position.line == 2

    def test_layout_without_yield_allowed_by_settings(self):
        """Verify the yield requirement can be switched off."""
        engine = Engine(settings=CompilerSettings(require_yield_in_layout=False))
        result = engine.compile(CompileRequest(text="<p>hi</p>", data_type=Page, layout=True))

        assert result.code("header") == '    writer.write("<p>hi</p>")\n'
        assert result.fragment("footer").is_empty()

    def test_errors_propagate(self, engine):
        """Verify the first error aborts the request."""
        with pytest.raises(ResolutionError):
            engine.compile(CompileRequest(text="{{missing}}", data_type=Cart))

    def test_missing_variant(self, engine):
        """Verify asking for an uncompiled variant is a KeyError."""
        result = engine.compile(CompileRequest(text="x", data_type=Greeting))

        assert result.fragment("header") is None
        with pytest.raises(KeyError):
            result.code("header")


class TestCompileRequest:
    """Tests for request construction."""

    def test_request_ids_are_unique(self):
        """Verify each request gets its own id."""
        first = CompileRequest(text="", data_type=Greeting)
        second = CompileRequest(text="", data_type=Greeting)

        assert first.request_id != second.request_id

    def test_from_file(self, tmp_path):
        """Verify templates are read from disk with the path as name."""
        path = tmp_path / "page.mustache"
        path.write_text("<h1>{{title}}</h1>", encoding="utf-8")

        request = CompileRequest.from_file(path, Page, layout=True)

        assert request.text == "<h1>{{title}}</h1>"
        assert request.source_name == str(path)
        assert request.layout is True


class TestRequestContext:
    """Tests for request-scoped log context around failures."""

    def test_broken_annotation_is_a_located_resolution_error(self, engine):
        """Verify annotations that fail to evaluate are reported at the tag."""

        class Broken:
            value: "list[int"  # noqa: F722

        with pytest.raises(ResolutionError) as info:
            engine.compile(CompileRequest(text="ab {{value}}", data_type=Broken))

        assert "Cannot evaluate annotations" in info.value.message
        assert info.value.position.column == 4
        assert _request_context.get() == {}

    def test_context_cleared_on_unexpected_error(self, settings):
        """Verify errors outside the StacheError family do not leak log context."""

        class ExplodingResolver(MemberResolver):
            def resolve(self, owner, name):
                raise RuntimeError("boom")

        engine = Engine(settings=settings, resolver=ExplodingResolver())

        with pytest.raises(RuntimeError):
            engine.compile(CompileRequest(text="{{name}}", data_type=Greeting))

        assert _request_context.get() == {}

    def test_context_cleared_after_success(self, engine):
        """Verify a completed request unbinds its id."""
        engine.compile(CompileRequest(text="x", data_type=Greeting))

        assert _request_context.get() == {}
