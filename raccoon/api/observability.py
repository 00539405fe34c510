"""Structured log events for webhook handling.

Every webhook outcome is logged as a ``[webhook.*]`` event followed by
``key=value`` fields, so log aggregators can count them without parsing the
free-form text.
"""

from __future__ import annotations

import enum

from raccoon.logging import get_logger, log_debug, log_error, log_info, log_warning

logger = get_logger(__name__)


class WebhookEventType(enum.StrEnum):
    """Structured log event types for webhook handling."""

    FORWARDED = "webhook.forwarded"
    IGNORED = "webhook.ignored"
    REJECTED = "webhook.rejected"
    INVALID_BODY = "webhook.invalid_body"
    MALFORMED = "webhook.malformed"
    DELIVERY_FAILED = "webhook.delivery_failed"
    UNDELIVERED = "webhook.undelivered"


class WebhookEventLogger:
    """Emit structured webhook events through femtologging.

    Forwards are logged at INFO once the writer has posted them, ignored kinds
    at DEBUG, drops for lack of a joined channel at WARNING, and rejections
    or failures at ERROR.
    """

    def log_forwarded(self, kind: str, message: str, channels: int) -> None:
        """Log a notification the writer posted to ``channels`` channels."""
        log_info(
            logger,
            "[%s] object_kind=%s channels=%d message=%r",
            WebhookEventType.FORWARDED,
            kind,
            channels,
            message,
        )

    def log_undelivered(self, kind: str, message: str) -> None:
        """Log a notification dropped because no channel was joined."""
        log_warning(
            logger,
            "[%s] object_kind=%s No joined IRC channels; dropped message=%r",
            WebhookEventType.UNDELIVERED,
            kind,
            message,
        )

    def log_ignored(self, kind: str | None) -> None:
        """Log a payload dropped because its kind is not supported."""
        log_debug(logger, "[%s] object_kind=%s", WebhookEventType.IGNORED, kind)

    def log_rejected(self, reason: str) -> None:
        """Log a request rejected by the token check."""
        log_error(
            logger,
            "[%s] Failed to validate Gitlab token: %s",
            WebhookEventType.REJECTED,
            reason,
        )

    def log_invalid_body(self, reason: str) -> None:
        """Log a request whose body is not a JSON object."""
        log_error(logger, "[%s] reason=%s", WebhookEventType.INVALID_BODY, reason)

    def log_malformed(self, kind: str, details: str) -> None:
        """Log a known event kind that failed schema validation."""
        log_error(
            logger,
            "[%s] object_kind=%s details=%s",
            WebhookEventType.MALFORMED,
            kind,
            details,
        )

    def log_delivery_failed(self, kind: str, channel: str, cause: object) -> None:
        """Log a rendered notification the writer could not deliver."""
        log_error(
            logger,
            "[%s] object_kind=%s channel=%s Failed to post message to IRC: %s",
            WebhookEventType.DELIVERY_FAILED,
            kind,
            channel,
            cause,
        )


__all__ = ["WebhookEventLogger", "WebhookEventType"]
