"""
Logging helpers for the Sheets connector.

The helpers wrap :mod:`logging` so that every module formats diagnostics the
same way and can attach structured extras (phase, sheet id, row counts) to a
record. Obtain loggers through :func:`get_logger` instead of creating handlers.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from copy import copy
from logging import Logger, LoggerAdapter
from typing import Any, Iterable, Mapping, MutableMapping, Optional, Sequence

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LEVEL = "INFO"
_ENV_LEVEL = "SHEETS_FDW_LOG_LEVEL"
_ENV_COLOR = "SHEETS_FDW_LOG_COLOR"
_EXTRA_FOCUS_ORDER: Sequence[str] = (
    "phase",
    "step",
    "status",
    "table",
    "sheet_id",
    "rows",
    "cursor",
    "column",
    "method",
    "url",
    "status_code",
    "tags",
)

_LEVEL_STYLES = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[95m",
}
_RESET = "\033[0m"

_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

_configured = False


def _resolve_level(level: Optional[int | str]) -> int:
    if isinstance(level, int):
        return level
    candidate = (level or os.getenv(_ENV_LEVEL) or DEFAULT_LEVEL).upper()
    resolved = logging.getLevelName(candidate)
    return resolved if isinstance(resolved, int) else logging.INFO


def _supports_color(stream: Any) -> bool:
    preference = (os.getenv(_ENV_COLOR) or "").strip().lower()
    if preference in {"1", "true", "yes", "on"}:
        return True
    if preference in {"0", "false", "no", "off"}:
        return False
    return hasattr(stream, "isatty") and bool(stream.isatty())


def _iter_extras(record: logging.LogRecord) -> Iterable[tuple[str, Any]]:
    payload = {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS and not key.startswith("_") and value is not None}

    for key in _EXTRA_FOCUS_ORDER:
        if key in payload:
            yield key, payload.pop(key)

    for key in sorted(payload):
        yield key, payload[key]


def _format_extra_value(value: Any) -> str:
    if isinstance(value, (list, tuple, set)):
        return "[" + ", ".join(_format_extra_value(item) for item in value) + "]"
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


class StructuredLogFormatter(logging.Formatter):
    """Formatter that appends ``key=value`` extras and optionally colours the level."""

    def __init__(self, *, use_color: bool = False) -> None:
        super().__init__(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        working = copy(record)
        if self.use_color:
            style = _LEVEL_STYLES.get(working.levelname)
            if style:
                working.levelname = f"{style}{working.levelname}{_RESET}"
        base = super().format(working)
        extras = " ".join(f"{key}={_format_extra_value(value)}" for key, value in _iter_extras(record))
        if extras:
            return f"{base} | {extras}"
        return base


def _build_handler(level: Optional[int | str]) -> logging.Handler:
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(_resolve_level(level))
    handler.setFormatter(StructuredLogFormatter(use_color=_supports_color(handler.stream)))
    return handler


def configure_logging(level: Optional[int | str] = None, *, force: bool = False) -> None:
    """
    Install the structured stderr handler on the root logger.

    Parameters
    ----------
    level:
        Optional level override. Falls back to ``SHEETS_FDW_LOG_LEVEL`` or ``INFO``.
    force:
        Reinstall the handler even if logging was configured before.
    """

    global _configured
    if _configured and not force:
        return
    logging.basicConfig(level=_resolve_level(level), handlers=[_build_handler(level)], force=force)
    _configured = True


def get_logger(
    name: str,
    *,
    tags: Optional[Sequence[str]] = None,
    extra: Optional[Mapping[str, object]] = None,
) -> LoggerAdapter:
    """
    Return a :class:`logging.LoggerAdapter` carrying structured extras.

    Parameters
    ----------
    name:
        Logger namespace, usually ``__name__``.
    tags:
        Optional tags attached to every record.
    extra:
        Additional metadata recorded with each entry.
    """

    configure_logging()
    payload: MutableMapping[str, object] = {}
    if tags:
        payload["tags"] = tuple(tags)
    if extra:
        payload.update({key: value for key, value in extra.items() if value is not None})
    return LoggerAdapter(logging.getLogger(name), payload)


def log_progress(
    logger: LoggerAdapter | Logger,
    message: str,
    *,
    phase: Optional[str] = None,
    step: Optional[str] = None,
    status: Optional[str] = None,
    level: int = logging.INFO,
    extra: Optional[Mapping[str, object]] = None,
) -> None:
    """Emit a log record tagged with the current phase, step and status."""

    payload: MutableMapping[str, object] = {}
    if isinstance(logger, LoggerAdapter) and isinstance(logger.extra, Mapping):
        payload.update({key: value for key, value in logger.extra.items() if value is not None})
        logger = logger.logger
    if extra:
        payload.update(extra)
    if phase:
        payload["phase"] = phase
    if step:
        payload["step"] = step
    if status:
        payload["status"] = status
    if payload:
        logger.log(level, message, extra=dict(payload))
    else:
        logger.log(level, message)
