"""
Stache CLI — Command-line interface for compiling templates.
"""

import argparse
import importlib
import sys
from pathlib import Path
from typing import Any

from stache import __version__
from stache.codegen.assembler import generate_module
from stache.core.config import load_settings
from stache.core.context import CompileRequest
from stache.core.engine import Engine
from stache.core.errors import StacheError
from stache.ir.serialization import load_all, save, to_json
from stache.ir.tokens import PositionedToken
from stache.template.tokenizer import tokenize


def load_model(reference: str) -> Any:
    """
    Import a data type from a "package.module:QualName" reference.

    Raises:
        ValueError: If the reference is malformed or does not name a class
    """
    module_name, _, qualname = reference.partition(":")
    if not module_name or not qualname:
        raise ValueError(f"Model must look like 'package.module:ClassName', got '{reference}'")

    target: Any = importlib.import_module(module_name)
    for part in qualname.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise ValueError(f"'{module_name}' has no attribute '{qualname}'") from exc
    if not isinstance(target, type):
        raise ValueError(f"'{reference}' is not a class")
    return target


class TokenDumper:
    """Token processor printing one line per token."""

    def __init__(self, stream=None) -> None:
        self.stream = stream or sys.stdout

    def process_token(self, token: PositionedToken) -> None:
        print(token.describe(), file=self.stream)


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="stache",
        description="Compile Mustache templates into typed Python render functions",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"stache {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    compile_parser = subparsers.add_parser("compile", help="Compile a template")
    compile_parser.add_argument("template", type=str, help="Path to the template file")
    compile_parser.add_argument(
        "-m",
        "--model",
        type=str,
        required=True,
        help="Data type the template binds to, as package.module:ClassName",
    )
    compile_parser.add_argument(
        "--layout",
        action="store_true",
        help="Compile header and footer around the yield marker",
    )
    compile_parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Output file path (default: stdout)",
    )
    compile_parser.add_argument(
        "--format",
        choices=["module", "json"],
        default="module",
        help="Output format: module (default, Python source) or json (compile result)",
    )
    compile_parser.add_argument(
        "--prefix",
        type=str,
        default=None,
        help="Prefix for generated function names (render_<prefix>...)",
    )
    compile_parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Settings YAML file (default: ./stache.yaml when present)",
    )
    compile_parser.add_argument(
        "--log-level",
        type=str,
        choices=["silent", "info", "verbose", "debug"],
        default=None,
        help="Log verbosity level (default: info, or STACHE_LOG_LEVEL env var)",
    )
    compile_parser.add_argument(
        "--log-channel",
        type=str,
        default=None,
        help="Comma-separated log channels to show (compile,resolve,tokenize,codegen,system). Default: all",
    )

    assemble_parser = subparsers.add_parser(
        "assemble",
        help="Build one render module from results saved with --format json",
    )
    assemble_parser.add_argument("results", nargs="+", help="Saved compile result files")
    assemble_parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Output file path (default: stdout)",
    )
    assemble_parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Settings YAML file (default: ./stache.yaml when present)",
    )

    tokens_parser = subparsers.add_parser("tokens", help="[DEBUG] Print the token stream of a template")
    tokens_parser.add_argument("template", type=str, help="Path to the template file")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "compile":
        return run_compile(args)
    if args.command == "assemble":
        return run_assemble(args)
    if args.command == "tokens":
        return run_tokens(args)

    return 0


def run_compile(args: argparse.Namespace) -> int:
    """Run the compile command."""
    from stache.core.logging import configure_logging

    channels = None
    if args.log_channel:
        channels = [ch.strip() for ch in args.log_channel.split(",")]
    configure_logging(level=args.log_level, channels=channels, force=True)

    try:
        data_type = load_model(args.model)
    except (ImportError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        settings = load_settings(args.config)
        engine = Engine(settings=settings)
        request = CompileRequest.from_file(args.template, data_type, layout=args.layout)
        result = engine.compile(request)
    except StacheError as exc:
        print(f"error: {exc.format()}", file=sys.stderr)
        return 1

    if args.format == "json":
        if args.output:
            save(result, args.output)
        else:
            sys.stdout.write(to_json(result))
        return 0

    prefixes = {result.template_name: args.prefix} if args.prefix else None
    _write_output(generate_module([result], settings=settings, prefixes=prefixes), args.output)
    return 0


def run_assemble(args: argparse.Namespace) -> int:
    """Run the assemble command."""
    try:
        settings = load_settings(args.config)
        results = load_all(args.results)
    except StacheError as exc:
        print(f"error: {exc.format()}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    prefixes = None
    if len(results) > 1:
        # Functions of several templates are told apart by template file name
        prefixes = {result.template_name: Path(result.template_name).stem for result in results}
        if len(set(prefixes.values())) < len(results):
            print("error: assembled templates must have distinct file names", file=sys.stderr)
            return 1

    _write_output(generate_module(results, settings=settings, prefixes=prefixes), args.output)
    return 0


def _write_output(text: str, output) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)


def run_tokens(args: argparse.Namespace) -> int:
    """Run the tokens command."""
    from stache.core.contracts import drive

    path = Path(args.template)
    try:
        drive(tokenize(str(path), path.read_text(encoding="utf-8")), TokenDumper())
    except StacheError as exc:
        print(f"error: {exc.format()}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
