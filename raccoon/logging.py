"""femtologging setup and percent-style logging helpers.

Every Raccoon module logs through :func:`log_at` or one of its per-level
wrappers. Templates are interpolated here, before the record reaches
femtologging, so callers pass values rather than pre-built strings::

    logger = get_logger(__name__)
    log_info(logger, "Joined %s", "#raccoon")

The process-wide level comes from ``log_level`` in the settings (or
``RACCOON_LOG_LEVEL``); unknown names fall back to ``INFO``.
"""

from __future__ import annotations

import enum
import typing as typ

from femtologging import basicConfig, get_logger


class LogLevel(enum.StrEnum):
    """Level names femtologging accepts."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def parse(cls, raw: str | None) -> LogLevel | None:
        """Return the level named by ``raw``, ignoring case and padding."""
        if not raw:
            return None
        return cls.__members__.get(raw.strip().upper())


DEFAULT_LEVEL: typ.Final = LogLevel.INFO


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Map a configured level name onto a femtologging level.

    Parameters
    ----------
    level : str | None
        Level name as configured, e.g. ``"debug"``.

    Returns
    -------
    tuple[str, bool]
        The level to use and whether ``level`` had to be replaced by
        ``INFO`` because it was empty or unknown.

    """
    parsed = LogLevel.parse(level)
    if parsed is None:
        return (DEFAULT_LEVEL.value, True)
    return (parsed.value, False)


def configure_logging(level: str | None, *, force: bool = False) -> tuple[str, bool]:
    """Install femtologging's default handler at ``level``.

    Returns the result of :func:`normalize_log_level` so the caller can warn
    about a rejected level once logging works.
    """
    normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


def format_log_message(template: str, *args: object) -> str:
    """Interpolate ``args`` into ``template``; without args it is left as is."""
    return template % args if args else template


class _SupportsLog(typ.Protocol):
    """The subset of the femtologging logger API used here."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def log_at(
    logger: _SupportsLog,
    level: LogLevel,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Format ``template`` with ``args`` and log it at ``level``.

    Parameters
    ----------
    logger : _SupportsLog
        femtologging logger, usually the module's ``logger``.
    level : LogLevel
        Level of the record.
    template : str
        Percent-style message template.
    *args : object
        Values for the template placeholders.
    exc_info : object | None, optional
        Exception to attach to the record.

    """
    logger.log(
        level.value,
        format_log_message(template, *args),
        exc_info=exc_info,
        stack_info=False,
    )


def log_debug(
    logger: _SupportsLog, template: str, *args: object, exc_info: object | None = None
) -> None:
    """Log at DEBUG."""
    log_at(logger, LogLevel.DEBUG, template, *args, exc_info=exc_info)


def log_info(
    logger: _SupportsLog, template: str, *args: object, exc_info: object | None = None
) -> None:
    """Log at INFO."""
    log_at(logger, LogLevel.INFO, template, *args, exc_info=exc_info)


def log_warning(
    logger: _SupportsLog, template: str, *args: object, exc_info: object | None = None
) -> None:
    """Log at WARNING."""
    log_at(logger, LogLevel.WARNING, template, *args, exc_info=exc_info)


def log_error(
    logger: _SupportsLog, template: str, *args: object, exc_info: object | None = None
) -> None:
    """Log at ERROR."""
    log_at(logger, LogLevel.ERROR, template, *args, exc_info=exc_info)


def log_exception(logger: _SupportsLog, message: str, exc: BaseException) -> None:
    """Log ``message`` at ERROR with ``exc`` and its traceback attached."""
    log_at(logger, LogLevel.ERROR, "%s", message, exc_info=exc)


__all__ = [
    "DEFAULT_LEVEL",
    "LogLevel",
    "configure_logging",
    "format_log_message",
    "get_logger",
    "log_at",
    "log_debug",
    "log_error",
    "log_exception",
    "log_info",
    "log_warning",
    "normalize_log_level",
]
