"""
Compiler Settings — Names used in generated code and layout rules.

Settings come from, in increasing priority:
1. Defaults declared on CompilerSettings
2. A YAML file (stache.yaml in the working directory, or an explicit path)
3. Environment: STACHE_YIELD_MARKER
"""

from __future__ import annotations

import inspect
import keyword
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from stache import runtime
from stache.core.errors import ConfigurationError

DEFAULT_SETTINGS_FILE = "stache.yaml"


class CompilerSettings(BaseModel):
    """Knobs of the template compiler and the code assembler."""

    yield_marker: str = Field(
        default="yield",
        description="Unescaped variable name splitting a layout into header and footer",
    )
    writer_name: str = Field(default="writer", description="Writer parameter of render functions")
    data_name: str = Field(default="data", description="Data parameter of render functions")
    escape_function: str = Field(
        default="escape_html",
        description="Escaping helper imported from stache.runtime",
    )
    indent: str = Field(default="    ", description="One indentation level of generated code")
    require_yield_in_layout: bool = Field(
        default=True,
        description="Fail layout compilation when the template has no yield marker",
    )

    @field_validator("writer_name", "data_name")
    @classmethod
    def _must_be_identifier(cls, value: str) -> str:
        if not value.isidentifier() or keyword.iskeyword(value):
            raise ValueError(f"'{value}' is not a usable Python identifier")
        return value

    @field_validator("escape_function")
    @classmethod
    def _must_be_runtime_function(cls, value: str) -> str:
        if value not in runtime.__all__ or not inspect.isfunction(getattr(runtime, value)):
            raise ValueError(f"'{value}' is not an escaping function of stache.runtime")
        return value

    @field_validator("indent")
    @classmethod
    def _must_be_whitespace(cls, value: str) -> str:
        if not value or value.strip():
            raise ValueError("indent must be non-empty whitespace")
        return value


def load_settings(path: Union[str, Path, None] = None) -> CompilerSettings:
    """
    Load compiler settings.

    Args:
        path: YAML file to read; defaults to ./stache.yaml when it exists

    Returns:
        Validated CompilerSettings

    Raises:
        ConfigurationError: If the file is missing (explicit path only),
            is not a YAML mapping, or holds invalid values
    """
    data: dict = {}

    if path is not None:
        settings_path = Path(path)
        if not settings_path.exists():
            raise ConfigurationError(f"Settings file not found: {settings_path}")
    else:
        settings_path = Path(DEFAULT_SETTINGS_FILE)

    if settings_path.exists():
        with open(settings_path) as f:
            loaded = yaml.safe_load(f)
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigurationError(f"Settings file must contain a mapping: {settings_path}")
        data = dict(loaded or {})

    env_marker = os.environ.get("STACHE_YIELD_MARKER")
    if env_marker:
        data["yield_marker"] = env_marker

    try:
        return CompilerSettings(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc


_default_settings: Optional[CompilerSettings] = None


def get_settings() -> CompilerSettings:
    """Get or load the process-wide settings."""
    global _default_settings
    if _default_settings is None:
        _default_settings = load_settings()
    return _default_settings
