"""
Assembler — Stitch compiled fragments into an importable Python module.

Each fragment becomes one render function taking the data value and a
writer. Names follow the variant: render, render_header, render_footer,
optionally prefixed (render_page, render_page_header, ...).
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from stache import __version__
from stache.compiler.scope import ESCAPING_WRITER
from stache.core.config import CompilerSettings, get_settings
from stache.core.logging import LogChannel, get_logger
from stache.ir.schema import CompiledFragment, CompileResult

log = get_logger(LogChannel.CODEGEN)

RUNTIME_MODULE = "stache.runtime"

_NON_IDENTIFIER_RE = re.compile(r"\W+")


def function_name(variant: str, prefix: Optional[str] = None) -> str:
    """Render function name for a variant."""
    parts = ["render"]
    if prefix:
        parts.append(_NON_IDENTIFIER_RE.sub("_", prefix).strip("_").lower())
    if variant != "full":
        parts.append(variant)
    return "_".join(part for part in parts if part)


def _import_lines(results: Iterable[CompileResult], settings: CompilerSettings) -> list[str]:
    helpers = sorted({ESCAPING_WRITER, "Writer", settings.escape_function})
    lines = [f"from {RUNTIME_MODULE} import {', '.join(helpers)}"]

    by_module: dict[str, set[str]] = {}
    for result in results:
        if result.data_module == "builtins":
            continue
        # Nested classes are imported through their outermost class
        by_module.setdefault(result.data_module, set()).add(result.data_qualname.split(".")[0])
    for module in sorted(by_module):
        lines.append(f"from {module} import {', '.join(sorted(by_module[module]))}")
    return lines


def render_function(
    fragment: CompiledFragment,
    result: CompileResult,
    settings: CompilerSettings,
    prefix: Optional[str] = None,
) -> str:
    """Source of one render function around a fragment."""
    name = function_name(fragment.variant, prefix)
    signature = (
        f"def {name}({settings.data_name}: {result.data_qualname}, "
        f"{settings.writer_name}: Writer) -> None:"
    )
    body = fragment.code.rstrip("\n") if not fragment.is_empty() else f"{settings.indent}pass"
    docstring = f'{settings.indent}"""Render {result.template_name} ({fragment.variant})."""'
    return "\n".join([signature, docstring, body]) + "\n"


def generate_module(
    results: Iterable[CompileResult],
    settings: Optional[CompilerSettings] = None,
    prefixes: Optional[dict[str, str]] = None,
) -> str:
    """
    Generate a module for one or more compile results.

    Args:
        results: Compiled templates
        settings: Names used by the fragments (defaults to global settings)
        prefixes: Optional function-name prefix per template name; needed
            when several templates share a module

    Returns:
        Python module source
    """
    settings = settings or get_settings()
    results = list(results)
    prefixes = prefixes or {}

    sources = ", ".join(result.template_name for result in results)
    imports = _import_lines(results, settings)

    parts = [
        f"# Generated by stache {__version__} from {sources}. Do not edit.",
        "# flake8: noqa",
        "",
        *imports,
        "",
    ]

    functions = 0
    for result in results:
        prefix = prefixes.get(result.template_name)
        for fragment in result.fragments:
            parts.append("")
            parts.append(render_function(fragment, result, settings, prefix))
            functions += 1

    log.verbose("module_generated", templates=len(results), functions=functions)
    return "\n".join(parts)
