"""Structured logging with bound context.

Key-value logging for the multiplexer runtime:
- Immutable loggers, bind() returns a new logger with merged context
- Human-readable console output for development, JSON lines for production
- Scoped context that follows the current task

Quick Start:
    >>> from streamplex.runtime.observability import get_logger, configure_logging
    >>> configure_logging(format="console", level="DEBUG")
    >>> log = get_logger("ingest")
    >>> log.info("member inserted", members=3)

    >>> with log_context(feed="quotes"):
    ...     log.debug("member ended")  # includes feed="quotes"
"""

from __future__ import annotations

import logging
import sys
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, TextIO, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from streamplex.foundation.config import StreamplexSettings

JsonDict = dict[str, Any]

# Context added to every entry logged from the current task
_log_context: ContextVar[JsonDict] = ContextVar("streamplex_log_context", default={})


# ─────────────────────────────────────────────────────────────────────────────
# Logger
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class BoundLogger:
    """Structured logger with bound context.

    Example:
        >>> log = BoundLogger(context={"component": "mux"})
        >>> log.info("member ended", members=2)
        # => 10:30:45.120 [info] member ended component="mux" members=2
    """

    context: JsonDict = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int | None = None

    def bind(self, **kw: Any) -> BoundLogger:
        """Create new logger with additional bound context."""
        return BoundLogger(context={**self.context, **kw}, _renderer=self._renderer, _level=self._level)

    def unbind(self, *keys: str) -> BoundLogger:
        return BoundLogger(context={k: v for k, v in self.context.items() if k not in keys},
                           _renderer=self._renderer, _level=self._level)

    def is_enabled_for(self, level: int) -> bool:
        return level >= (_state.level if self._level is None else self._level)

    def _log(self, level: int, event: str, **kw: Any) -> None:
        if not self.is_enabled_for(level):
            return
        merged = {**_log_context.get(), **self.context, **kw}
        (self._renderer or _get_renderer()).render(LogEntry(time.time(), _level_name(level), event, merged))

    def debug(self, event: str, **kw: Any) -> None: self._log(logging.DEBUG, event, **kw)
    def info(self, event: str, **kw: Any) -> None: self._log(logging.INFO, event, **kw)
    def warning(self, event: str, **kw: Any) -> None: self._log(logging.WARNING, event, **kw)
    def error(self, event: str, **kw: Any) -> None: self._log(logging.ERROR, event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        """Log error with the active exception's traceback."""
        import traceback
        self._log(logging.ERROR, event, exc_info=traceback.format_exc(), **kw)


@dataclass(slots=True)
class LogEntry:
    """A single rendered log record."""

    timestamp: float
    level: str
    event: str
    context: JsonDict

    @property
    def ts_iso(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()

    @property
    def ts_human(self) -> str:
        """HH:MM:SS.mmm"""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    """Protocol for log output renderers."""

    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class ConsoleRenderer:
    """Human-readable output. Format: timestamp [level] event key=value ..."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None  # None = auto-detect
    show_timestamp: bool = True

    def __post_init__(self) -> None:
        if self.colors is None:
            self.colors = getattr(self.output, "isatty", lambda: False)()

    def render(self, entry: LogEntry) -> None:
        c = _COLORS if self.colors else _NO_COLORS
        parts = [f"{c['dim']}{entry.ts_human}{c['reset']}"] if self.show_timestamp else []
        parts += [f"{_LEVEL_COLORS.get(entry.level, c['dim']) if self.colors else ''}[{entry.level}]{c['reset']}",
                  f"{c['bold']}{entry.event}{c['reset']}"]
        parts += [f"{c['cyan']}{k}{c['reset']}={_format_value(v, c)}"
                  for k, v in sorted(entry.context.items()) if k != "exc_info"]
        print(" ".join(parts), file=self.output)
        if "exc_info" in entry.context:
            print(f"{c['red']}{entry.context['exc_info']}{c['reset']}", file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines output for log aggregation."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        import orjson
        payload = {"timestamp": entry.ts_iso, "level": entry.level, "event": entry.event, **entry.context}
        print(orjson.dumps(payload, option=orjson.OPT_NON_STR_KEYS, default=repr).decode(), file=self.output)


@dataclass(slots=True)
class NoOpRenderer:
    """Silent renderer for testing."""

    def render(self, entry: LogEntry) -> None:
        pass


@dataclass(slots=True)
class CaptureRenderer:
    """Keeps entries in memory. Used by tests to assert on emitted events."""

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def events(self, level: str | None = None) -> list[str]:
        return [e.event for e in self.entries if level is None or e.level == level]


# ─────────────────────────────────────────────────────────────────────────────
# Global Configuration
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class _LogState:
    renderer: LogRenderer | None = None
    level: int = logging.INFO


_state = _LogState()


def configure_logging(
    format: str = "console",  # noqa: A002 - shadows builtin but matches stdlib
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Configure global structured logging. Format: "console" (human), "json" (machine), "none"."""
    _state.level = getattr(logging, level.upper(), logging.INFO)
    match format:
        case "console": renderer: LogRenderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
        case "json": renderer = JsonRenderer(output=output or sys.stdout)
        case "none": renderer = NoOpRenderer()
        case _: raise ValueError(f"Unknown format: {format}. Use 'console', 'json', or 'none'")
    _state.renderer = renderer
    return renderer


def configure_from_settings(settings: StreamplexSettings | None = None, *, output: TextIO | None = None) -> LogRenderer:
    """Configure logging from STREAMPLEX_LOG_* settings."""
    if settings is None:
        from streamplex.foundation.config import get_settings
        settings = get_settings()
    return configure_logging(settings.logging.format, settings.log_level, output=output,
                             colors=settings.logging.colors)


def set_renderer(renderer: LogRenderer, level: str | None = None) -> LogRenderer:
    """Install a renderer directly (e.g. a CaptureRenderer in tests)."""
    _state.renderer = renderer
    if level is not None:
        _state.level = getattr(logging, level.upper(), logging.INFO)
    return renderer


def get_logger(name: str | None = None, **initial_context: Any) -> BoundLogger:
    """Get a structured logger. Name is added to context as 'logger'."""
    ctx = {**initial_context, **({"logger": name} if name else {})}
    return BoundLogger(context=ctx)


def _get_renderer() -> LogRenderer:
    if _state.renderer is None:
        _state.renderer = ConsoleRenderer()
    return _state.renderer


class log_context:
    """Context manager adding key-value pairs to every entry logged within the scope."""

    __slots__ = ("_ctx", "_token")

    def __init__(self, **kw: Any) -> None:
        self._ctx: JsonDict = dict(kw)
        self._token: object | None = None

    def __enter__(self) -> log_context:
        self._token = _log_context.set({**_log_context.get(), **self._ctx})
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        if self._token is not None:
            _log_context.reset(self._token)  # type: ignore[arg-type]


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


_COLORS = {"reset": "\033[0m", "bold": "\033[1m", "dim": "\033[2m", "red": "\033[31m",
           "green": "\033[32m", "yellow": "\033[33m", "blue": "\033[34m", "cyan": "\033[36m", "white": "\033[37m"}
_NO_COLORS = {k: "" for k in _COLORS}
_LEVEL_COLORS = {"debug": _COLORS["dim"], "info": _COLORS["green"], "warning": _COLORS["yellow"], "error": _COLORS["red"]}


def _level_name(level: int) -> str:
    return logging.getLevelName(level).lower()


def _format_value(v: object, c: dict[str, str]) -> str:
    match v:
        case str(): return f'{c["yellow"]}"{v}"{c["reset"]}'
        case bool(): return f'{c["blue"]}{str(v).lower()}{c["reset"]}'
        case int() | float(): return f'{c["blue"]}{v}{c["reset"]}'
        case dict(): return f'{c["dim"]}{{{len(v)} items}}{c["reset"]}'
        case list() | tuple(): return f'{c["dim"]}[{len(v)} items]{c["reset"]}'
        case _: return f'{c["white"]}{v!r}{c["reset"]}'
