"""
Logging — structlog channels for the compiler stages.

Each stage logs through its own channel so a run can be narrowed to, say,
member resolution only:
- COMPILE: variant runs, sections, yield toggles
- RESOLVE: member lookups against data types
- TOKENIZE: template scanning
- CODEGEN: module assembly
- SYSTEM: failures and status

Verbosity is one of silent, info, verbose, debug. Environment:
- STACHE_LOG_LEVEL: verbosity (default info)
- STACHE_LOG_FORMAT: console or json
- STACHE_LOG_CHANNELS: comma-separated channels to keep (default all)

Everything goes to stderr; stdout is reserved for generated code.
"""

import logging
import os
import sys
import time
from contextvars import ContextVar
from enum import Enum, IntEnum
from typing import Any, Iterable, Optional, Union

import structlog


class LogLevel(IntEnum):
    SILENT = 0
    INFO = 1
    VERBOSE = 2
    DEBUG = 3

    @classmethod
    def from_string(cls, name: str) -> "LogLevel":
        """Level for a name; unknown names and stdlib names map to INFO."""
        try:
            return cls[name.upper()]
        except KeyError:
            return cls.INFO


class LogChannel(str, Enum):
    COMPILE = "COMPILE"
    RESOLVE = "RESOLVE"
    TOKENIZE = "TOKENIZE"
    CODEGEN = "CODEGEN"
    SYSTEM = "SYSTEM"

    @classmethod
    def all(cls) -> list["LogChannel"]:
        return list(cls)

    @classmethod
    def from_string(cls, name: str) -> Optional["LogChannel"]:
        try:
            return cls(name.strip().upper())
        except ValueError:
            return None


# Fields merged into every event of the current compile request
_request_context: ContextVar[dict] = ContextVar("stache_log_context", default={})

_config = {
    "level": LogLevel.INFO,
    "format": "console",
    "channels": set(LogChannel.all()),
    "configured": False,
}

_STDLIB_LEVELS = {
    LogLevel.SILENT: logging.CRITICAL + 10,
    LogLevel.INFO: logging.INFO,
    LogLevel.VERBOSE: logging.DEBUG,
    LogLevel.DEBUG: logging.DEBUG,
}


def _channels_from(names: Iterable[Union[LogChannel, str]]) -> set[LogChannel]:
    channels = set()
    for name in names:
        channel = name if isinstance(name, LogChannel) else LogChannel.from_string(name)
        if channel is not None:
            channels.add(channel)
    return channels


def _renderer(format: str) -> list:
    if format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(
    level: Union[LogLevel, str, None] = None,
    format: Optional[str] = None,
    channels: Optional[Iterable[Union[LogChannel, str]]] = None,
    force: bool = False,
) -> None:
    """
    Set up structlog and the channel filter.

    Arguments left as None fall back to the STACHE_LOG_* variables. Only
    the first call takes effect unless `force` is set.
    """
    if _config["configured"] and not force:
        return

    if level is None:
        level = os.environ.get("STACHE_LOG_LEVEL", "info")
    if isinstance(level, str):
        level = LogLevel.from_string(level)
    format = format or os.environ.get("STACHE_LOG_FORMAT", "console")

    if channels is None:
        raw = os.environ.get("STACHE_LOG_CHANNELS", "")
        enabled = _channels_from(raw.split(",")) if raw else set()
    else:
        enabled = _channels_from(channels)

    _config.update(
        level=level,
        format=format,
        channels=enabled or set(LogChannel.all()),
        configured=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=_STDLIB_LEVELS[level],
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            *_renderer(format),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class ChannelLogger:
    """
    structlog logger tied to one channel.

    info/verbose/debug are dropped when the channel is filtered out or the
    level is too low; warning and error only respect SILENT.
    """

    def __init__(self, channel: LogChannel, name: Optional[str] = None):
        self.channel = channel
        self.name = name or f"stache.{channel.value.lower()}"
        self._logger = structlog.get_logger(self.name)

    def _should_log(self, level: LogLevel) -> bool:
        return self.channel in _config["channels"] and _config["level"] >= level

    def _make_event(self, **fields: Any) -> dict:
        return {"channel": self.channel.value, **fields, **_request_context.get()}

    def info(self, event: str, **fields: Any) -> None:
        if self._should_log(LogLevel.INFO):
            self._logger.info(event, **self._make_event(**fields))

    def verbose(self, event: str, **fields: Any) -> None:
        if self._should_log(LogLevel.VERBOSE):
            self._logger.debug(event, **self._make_event(verbosity="verbose", **fields))

    def debug(self, event: str, **fields: Any) -> None:
        if self._should_log(LogLevel.DEBUG):
            self._logger.debug(event, **self._make_event(verbosity="debug", **fields))

    def warning(self, event: str, **fields: Any) -> None:
        if _config["level"] != LogLevel.SILENT:
            self._logger.warning(event, **self._make_event(**fields))

    def error(self, event: str, **fields: Any) -> None:
        if _config["level"] != LogLevel.SILENT:
            self._logger.error(event, **self._make_event(**fields))

    def bind(self, **fields: Any) -> "ChannelLogger":
        bound = ChannelLogger(self.channel, self.name)
        bound._logger = self._logger.bind(**fields)
        return bound


def get_logger(channel: Union[LogChannel, str] = LogChannel.SYSTEM) -> ChannelLogger:
    """Logger for a channel; unknown channel names log on SYSTEM."""
    configure_logging()
    if isinstance(channel, str) and not isinstance(channel, LogChannel):
        channel = LogChannel.from_string(channel) or LogChannel.SYSTEM
    return ChannelLogger(channel)


def bind_request_context(**fields: Any) -> None:
    _request_context.set({**_request_context.get(), **fields})


def clear_request_context() -> None:
    _request_context.set({})


class CompileLogger:
    """
    Logs the variant runs of one compile request.

    The request id and template name are bound for the duration of the
    request and cleared when it completes or fails.
    """

    def __init__(self, request_id: str, template_name: str):
        self.request_id = request_id
        self._log = get_logger(LogChannel.COMPILE)
        self._started = time.perf_counter()
        self._variant_started: dict[str, float] = {}
        bind_request_context(request_id=request_id, template=template_name)

    def variant_start(self, variant: str) -> None:
        self._variant_started[variant] = time.perf_counter()
        self._log.verbose("variant_started", variant=variant)

    def variant_end(self, variant: str, **metrics: Any) -> None:
        started = self._variant_started.get(variant, time.perf_counter())
        self._log.info(
            "variant_compiled",
            variant=variant,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            **metrics,
        )

    def variant_error(self, variant: str, error: Exception) -> None:
        get_logger(LogChannel.SYSTEM).error(
            "variant_failed",
            variant=variant,
            error=str(error),
            error_type=type(error).__name__,
        )
        clear_request_context()

    def compile_complete(self, **metrics: Any) -> None:
        self._log.info(
            "compile_complete",
            total_duration_ms=round((time.perf_counter() - self._started) * 1000, 2),
            **metrics,
        )
        clear_request_context()


def get_current_config() -> dict:
    """Current level, format and channels, by name."""
    return {
        "level": _config["level"].name,
        "format": _config["format"],
        "channels": sorted(channel.value for channel in _config["channels"]),
    }
