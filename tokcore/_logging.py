"""
Structured logging for tokcore.

Records follow the OpenTelemetry Logging Data Model when rendered as JSON,
and a compact one-line layout on a terminal. Every record carries a
``scope`` attribute naming the subsystem that emitted it (``normalizer``,
``vocab``, ``model``, ``bpe``, ``unigram``).

Usage::

    from ._logging import scoped_logger

    log = scoped_logger("model")
    log.debug("Model created", extra={"kind": "BPE", "vocab_size": 32000})
    log.warning("Ignored unknown option", extra={"option": "dropuot"})

Environment::

    TOKCORE_LOG_LEVEL=trace|debug|info|warn|error|fatal|off (default: info)
    TOKCORE_LOG_FORMAT=json|human (default: human if tty, json if piped)

Tokenization and normalization never log; only construction, configuration
and file IO do.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import MutableMapping
from datetime import datetime, timezone
from typing import Any

from ._version import __version__

__all__ = ["logger", "setup_logging", "scoped_logger"]

# =============================================================================
# Levels
# =============================================================================

_OFF = logging.CRITICAL + 10

# OpenTelemetry severity text per Python level
_LEVEL_TO_SEVERITY = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "FATAL",
}

_NAME_TO_LEVEL = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "err": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
    "off": _OFF,
    "none": _OFF,
}

# Levels that carry the emitting file and line
_CODE_LOCATION_LEVELS = frozenset({logging.DEBUG, logging.ERROR, logging.CRITICAL})

# Logger-name fragments and the scope they imply, checked in order
_SCOPE_HINTS = (
    ("normaliz", "normalizer"),
    ("precompiled", "normalizer"),
    ("vocab", "vocab"),
    ("bpe", "bpe"),
    ("unigram", "unigram"),
    ("wordpiece", "model"),
    ("wordlevel", "model"),
    ("model", "model"),
)

# LogRecord attributes that are never copied into "attributes"
_RECORD_FIELDS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "scope", "taskName"}


def _level_from_name(name: str, default: int = logging.INFO) -> int:
    return _NAME_TO_LEVEL.get(name.lower(), default)


def _scope_of(record: logging.LogRecord) -> str:
    """Return the record's scope, inferring one from the logger name if unset."""
    scope = getattr(record, "scope", None)
    if scope:
        return scope
    for fragment, inferred in _SCOPE_HINTS:
        if fragment in record.name:
            return inferred
    return record.name.rsplit(".", 1)[-1] if record.name else "tokcore"


def _code_path(pathname: str) -> str:
    """Path relative to the package root, for compact code locations."""
    marker = "tokcore/"
    if marker in pathname:
        return pathname[pathname.rindex(marker) + len(marker) :]
    return pathname


# =============================================================================
# Formatters
# =============================================================================


class JsonFormatter(logging.Formatter):
    """One JSON object per record, OpenTelemetry log data model."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        # RFC3339 with nanosecond precision; Python only has microseconds
        timestamp = created.strftime("%Y-%m-%dT%H:%M:%S") + f".{created.microsecond * 1000:09d}Z"

        attributes: dict[str, Any] = {"scope": _scope_of(record)}
        attributes.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_FIELDS and not key.startswith("_")
        )
        if record.levelno in _CODE_LOCATION_LEVELS:
            attributes["code.filepath"] = _code_path(record.pathname)
            attributes["code.lineno"] = record.lineno

        payload = {
            "timestamp": timestamp,
            "severityText": _LEVEL_TO_SEVERITY.get(record.levelno, "INFO"),
            "body": record.getMessage(),
            "attributes": attributes,
            "resource": {"service.name": "tokcore", "service.version": __version__},
        }
        return json.dumps(payload, separators=(",", ":"), default=str)


class HumanFormatter(logging.Formatter):
    """
    Terminal formatter.

    Layout is ``HH:MM:SS LEVEL [scope] message (kind)``, with the code
    location appended for DEBUG, ERROR and FATAL records.
    """

    _RESET = "\x1b[0m"
    _DIM = "\x1b[2m"
    _RED = "\x1b[31m"
    _YELLOW = "\x1b[33m"
    _CYAN = "\x1b[36m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self._use_colors = use_colors

    def _paint(self, text: str, color: str) -> str:
        if self._use_colors and color:
            return f"{color}{text}{self._RESET}"
        return text

    def _level_color(self, levelno: int) -> str:
        if levelno <= logging.DEBUG:
            return self._DIM
        if levelno >= logging.ERROR:
            return self._RED
        if levelno >= logging.WARNING:
            return self._YELLOW
        return ""

    def format(self, record: logging.LogRecord) -> str:
        clock = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%H:%M:%S")
        severity = _LEVEL_TO_SEVERITY.get(record.levelno, "INFO")

        line = (
            f"{clock} "
            f"{self._paint(f'{severity:<5}', self._level_color(record.levelno))} "
            f"{self._paint(f'[{_scope_of(record)}]', self._CYAN)} "
            f"{record.getMessage()}"
        )

        kind = getattr(record, "kind", None)
        if kind:
            line += f" ({kind})"
        if record.levelno in _CODE_LOCATION_LEVELS:
            location = f"[{_code_path(record.pathname)}:{record.lineno}]"
            line += " " + self._paint(location, self._DIM)
        return line


# =============================================================================
# Logger Setup
# =============================================================================


def _get_log_level() -> int:
    """Read the level from TOKCORE_LOG_LEVEL (or its short form TOKCORE_LOG)."""
    name = os.environ.get("TOKCORE_LOG_LEVEL") or os.environ.get("TOKCORE_LOG", "info")
    return _level_from_name(name)


def _get_log_format() -> str:
    """Read the format from TOKCORE_LOG_FORMAT, else pick one from the stream."""
    fmt = os.environ.get("TOKCORE_LOG_FORMAT")
    if fmt:
        return fmt.lower()
    return "human" if sys.stderr.isatty() else "json"


def _create_handler(fmt: str | None = None) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    if (fmt or _get_log_format()) == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(HumanFormatter(use_colors=sys.stderr.isatty()))
    return handler


logger = logging.getLogger("tokcore")


def setup_logging(level: str | int = "INFO", format: str | None = None) -> None:
    """
    Configure tokcore logging.

    Removes any handlers on the ``tokcore`` logger and installs a single
    stderr handler.

    Parameters
    ----------
    level : str or int, default "INFO"
        Level name (``"debug"``, ``"warn"``, ``"off"``, ...) or a
        ``logging`` constant.
    format : str, optional
        ``"json"`` or ``"human"``. Defaults to TOKCORE_LOG_FORMAT, then to
        human on a terminal and json otherwise. An explicit format is also
        exported to TOKCORE_LOG_FORMAT for child processes.

    Examples
    --------
    ::

        >>> from tokcore import setup_logging
        >>> setup_logging("debug", format="human")
    """
    if isinstance(level, str):
        level = _level_from_name(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    if format:
        os.environ["TOKCORE_LOG_FORMAT"] = format

    logger.addHandler(_create_handler(format.lower() if format else None))
    logger.setLevel(level)


class _ScopedLoggerAdapter(logging.LoggerAdapter):
    """Adds a fixed scope to each record, keeping per-call extras."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def scoped_logger(scope: str) -> logging.LoggerAdapter:
    """Return an adapter over the tokcore logger that stamps ``scope``."""
    return _ScopedLoggerAdapter(logger, {"scope": scope})


# User-installed handlers take precedence over the environment defaults
if not logger.handlers:
    logger.addHandler(_create_handler())
    logger.setLevel(_get_log_level())
