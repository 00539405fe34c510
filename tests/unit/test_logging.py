"""Unit tests for the femtologging helpers in raccoon.logging.

Run with:
    pytest tests/unit/test_logging.py
"""

from __future__ import annotations

import typing as typ

import pytest

from raccoon.logging import (
    LogLevel,
    configure_logging,
    format_log_message,
    log_at,
    log_debug,
    log_error,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_Record = tuple[str, str, object | None, bool]


class _RecordingLogger:
    """Logger double keeping ``(level, message, exc_info, stack_info)``."""

    def __init__(self) -> None:
        self.records: list[_Record] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.records.append((level, message, exc_info, stack_info))
        return message


class TestLevels:
    """Tests for level parsing and normalisation."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("error", LogLevel.ERROR),
            (" Warn ", LogLevel.WARN),
            ("TRACE", LogLevel.TRACE),
            (None, None),
            ("  ", None),
            ("loud", None),
        ],
    )
    def test_parse(self, raw: str | None, expected: LogLevel | None) -> None:
        """Names match case-insensitively; anything else parses to None."""
        assert LogLevel.parse(raw) is expected, f"unexpected level for {raw!r}"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("debug", ("DEBUG", False)),
            ("warning", ("WARNING", False)),
            ("", ("INFO", True)),
            ("verbose", ("INFO", True)),
        ],
    )
    def test_normalize(self, raw: str, expected: tuple[str, bool]) -> None:
        """Unknown names fall back to INFO and are flagged."""
        assert normalize_log_level(raw) == expected, f"unexpected result for {raw!r}"

    def test_configure_logging_installs_normalized_level(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """configure_logging hands the normalised level to basicConfig."""
        calls: list[dict[str, object]] = []
        monkeypatch.setattr(
            "raccoon.logging.basicConfig", lambda **kwargs: calls.append(kwargs)
        )

        result = configure_logging("chatty", force=True)

        assert result == ("INFO", True), "expected INFO fallback to be reported"
        assert calls == [{"level": "INFO", "force": True}], "unexpected basicConfig"


class TestFormatting:
    """Tests for template interpolation."""

    def test_interpolates_args(self) -> None:
        """Arguments are applied with percent formatting."""
        assert format_log_message("joined %s (%d users)", "#dev", 3) == (
            "joined #dev (3 users)"
        ), "unexpected interpolation"

    def test_template_without_args_is_literal(self) -> None:
        """A template without args keeps its percent signs."""
        assert format_log_message("100% delivered") == "100% delivered", (
            "template should be left as is"
        )


@pytest.mark.parametrize(
    ("helper", "level"),
    [
        (log_debug, "DEBUG"),
        (log_info, "INFO"),
        (log_warning, "WARNING"),
        (log_error, "ERROR"),
    ],
)
def test_level_helpers(helper: cabc.Callable[..., None], level: str) -> None:
    """Each helper formats its template and logs at its own level."""
    logger = _RecordingLogger()
    exc = ValueError("boom")

    helper(logger, "posted to %s", "#dev")
    helper(logger, "failed on %s", "#ops", exc_info=exc)

    assert logger.records == [
        (level, "posted to #dev", None, False),
        (level, "failed on #ops", exc, False),
    ], f"unexpected records for {level}"


def test_log_at_uses_given_level() -> None:
    """log_at accepts any LogLevel."""
    logger = _RecordingLogger()

    log_at(logger, LogLevel.CRITICAL, "lost %s", "#dev")

    assert logger.records == [("CRITICAL", "lost #dev", None, False)], (
        "expected a CRITICAL record"
    )


def test_log_exception_attaches_exception_verbatim() -> None:
    """log_exception logs at ERROR without interpolating its message."""
    logger = _RecordingLogger()
    exc = RuntimeError("boom")

    log_exception(logger, "100% broken", exc)

    assert logger.records == [("ERROR", "100% broken", exc, False)], (
        "expected the literal message with exc_info"
    )
