"""
Unit tests for compiler settings.
"""

import pytest
from pydantic import ValidationError

from stache.core.config import CompilerSettings, load_settings
from stache.core.errors import ConfigurationError


class TestCompilerSettings:
    """Tests for defaults and validation."""

    def test_defaults(self):
        """Verify the default names used in generated code."""
        settings = CompilerSettings()

        assert settings.yield_marker == "yield"
        assert settings.writer_name == "writer"
        assert settings.data_name == "data"
        assert settings.escape_function == "escape_html"
        assert settings.indent == "    "
        assert settings.require_yield_in_layout is True

    def test_keywords_are_rejected(self):
        """Verify generated parameter names must be usable identifiers."""
        with pytest.raises(ValidationError):
            CompilerSettings(writer_name="class")
        with pytest.raises(ValidationError):
            CompilerSettings(data_name="not valid")

    def test_escape_function_must_exist_in_runtime(self):
        """Verify only escaping functions generated modules can import are accepted."""
        with pytest.raises(ValidationError):
            CompilerSettings(escape_function="my_escape")
        with pytest.raises(ValidationError):
            CompilerSettings(escape_function="HtmlEscapingWriter")

        assert CompilerSettings(escape_function="escape_html").escape_function == "escape_html"

    def test_indent_must_be_whitespace(self):
        """Verify indentation cannot be empty or visible."""
        with pytest.raises(ValidationError):
            CompilerSettings(indent="")
        with pytest.raises(ValidationError):
            CompilerSettings(indent="--")


class TestLoadSettings:
    """Tests for loading settings from YAML and the environment."""

    def test_explicit_file(self, tmp_path):
        """Verify values are read from a YAML mapping."""
        path = tmp_path / "stache.yaml"
        path.write_text('yield_marker: content\nindent: "\\t"\n', encoding="utf-8")

        settings = load_settings(path)

        assert settings.yield_marker == "content"
        assert settings.indent == "\t"

    def test_missing_explicit_file(self, tmp_path):
        """Verify a named file that does not exist is an error."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_settings(tmp_path / "absent.yaml")

    def test_default_file_is_optional(self, tmp_path, monkeypatch):
        """Verify defaults apply when ./stache.yaml is absent."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("STACHE_YIELD_MARKER", raising=False)

        assert load_settings() == CompilerSettings()

    def test_default_file_is_used(self, tmp_path, monkeypatch):
        """Verify ./stache.yaml is picked up automatically."""
        (tmp_path / "stache.yaml").write_text("writer_name: out\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        assert load_settings().writer_name == "out"

    def test_non_mapping_file(self, tmp_path):
        """Verify a YAML list is rejected."""
        path = tmp_path / "stache.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_settings(path)

    def test_invalid_values(self, tmp_path):
        """Verify validation failures surface as ConfigurationError."""
        path = tmp_path / "stache.yaml"
        path.write_text("data_name: '1abc'\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid settings"):
            load_settings(path)

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        """Verify STACHE_YIELD_MARKER wins over the file."""
        path = tmp_path / "stache.yaml"
        path.write_text("yield_marker: content\n", encoding="utf-8")
        monkeypatch.setenv("STACHE_YIELD_MARKER", "body")

        assert load_settings(path).yield_marker == "body"
