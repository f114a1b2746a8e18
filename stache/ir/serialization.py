"""
Result Serialization — Compile results as JSON documents.

`stache compile --format json` saves a result; `stache assemble` loads
one or more saved results and turns them into a single render module, so
templates can be compiled separately and assembled later.
"""

from pathlib import Path
from typing import Iterable, Union

from pydantic import ValidationError

from stache.core.errors import ConfigurationError
from stache.ir.schema import CompileResult


def to_json(result: CompileResult, indent: int = 2) -> str:
    return result.model_dump_json(indent=indent)


def from_json(document: str, source: str = "<json>") -> CompileResult:
    """
    Parse a saved compile result.

    Raises:
        ConfigurationError: If the document is not a valid compile result
    """
    try:
        return CompileResult.model_validate_json(document)
    except ValidationError as exc:
        raise ConfigurationError(
            f"{source} is not a compile result ({exc.error_count()} problems)",
            hint="Produce it with `stache compile --format json`.",
        ) from exc


def save(result: CompileResult, path: Union[str, Path]) -> None:
    Path(path).write_text(to_json(result), encoding="utf-8")


def load(path: Union[str, Path]) -> CompileResult:
    path = Path(path)
    return from_json(path.read_text(encoding="utf-8"), source=str(path))


def load_all(paths: Iterable[Union[str, Path]]) -> list[CompileResult]:
    """Load saved results in order; the first invalid file aborts."""
    return [load(path) for path in paths]
