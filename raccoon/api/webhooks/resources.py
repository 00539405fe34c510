"""GitLab webhook resource.

``POST /gitlab`` authenticates the request against the shared token,
decodes the JSON payload, renders the notification for its ``object_kind``
and hands it to the notification writer. The response is an empty 200 once
the payload was either forwarded or dropped as an unsupported kind;
delivery failures to IRC do not change the response. The blocking writer runs
in a worker thread so a slow IRC send never stalls the event loop.

Usage
-----
Register the resource on the Falcon app::

    app.add_route(
        "/gitlab",
        GitLabWebhookResource(GitLabWebhookDependencies(writer=writer, token=token)),
    )

"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import hmac
import typing as typ

import falcon
import msgspec

from raccoon.api.errors import AuthenticationRejectedError, InvalidRequestBodyError
from raccoon.api.observability import WebhookEventLogger
from raccoon.chat.errors import OutboundDeliveryError
from raccoon.gitlab import MalformedPayloadError, dispatch, object_kind

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from raccoon.chat.writer import NotificationWriter

__all__ = [
    "GITLAB_TOKEN_HEADER",
    "GitLabWebhookDependencies",
    "GitLabWebhookResource",
]

GITLAB_TOKEN_HEADER: typ.Final = "X-Gitlab-Token"


@dc.dataclass(frozen=True, slots=True)
class GitLabWebhookDependencies:
    """Collaborators for ``GitLabWebhookResource``.

    Attributes
    ----------
    writer
        Delivers rendered notifications to the chat session.
    token
        Shared secret expected in ``X-Gitlab-Token``. When empty or ``None``
        every request is rejected.
    event_logger
        Structured logger for webhook outcomes.

    """

    writer: NotificationWriter
    token: str | None = None
    event_logger: WebhookEventLogger = dc.field(default_factory=WebhookEventLogger)


class GitLabWebhookResource:
    """Receive GitLab webhooks and forward them as chat notifications."""

    def __init__(self, dependencies: GitLabWebhookDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._writer = dependencies.writer
        self._token = dependencies.token
        self._events = dependencies.event_logger

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle a GitLab webhook delivery.

        Parameters
        ----------
        req
            Falcon request carrying the token header and JSON payload.
        resp
            Falcon response; an empty 200 on success.

        Raises
        ------
        AuthenticationRejectedError
            If no token is configured, or the header is missing or wrong.
        InvalidRequestBodyError
            If the body is not a JSON object.
        MalformedPayloadError
            If a supported event kind does not match its schema.

        """
        self._authenticate(req.get_header(GITLAB_TOKEN_HEADER))
        payload = await self._read_payload(req)

        kind = object_kind(payload)
        try:
            message = dispatch(kind, payload)
        except MalformedPayloadError as exc:
            self._events.log_malformed(exc.kind, exc.details)
            raise

        if message is None:
            self._events.log_ignored(kind)
        else:
            await self._deliver(typ.cast("str", kind), message)

        resp.status = falcon.HTTP_200

    def _authenticate(self, header: str | None) -> None:
        if not self._token:
            error = AuthenticationRejectedError.unconfigured()
        elif header is None:
            error = AuthenticationRejectedError.missing()
        # Falcon decodes header bytes as latin-1, so re-encoding restores them.
        elif hmac.compare_digest(header.encode("latin-1"), self._token.encode()):
            return
        else:
            error = AuthenticationRejectedError.mismatch()
        self._events.log_rejected(str(error))
        raise error

    async def _read_payload(self, req: Request) -> dict[str, typ.Any]:
        body = await req.stream.read()
        try:
            payload = msgspec.json.decode(body)
        except msgspec.DecodeError as exc:
            self._events.log_invalid_body(str(exc))
            raise InvalidRequestBodyError(str(exc)) from exc

        if not isinstance(payload, dict):
            reason = "expected a JSON object"
            self._events.log_invalid_body(reason)
            raise InvalidRequestBodyError(reason)
        return payload

    async def _deliver(self, kind: str, message: str) -> None:
        # The writer blocks on its lock and the IRC socket.
        try:
            delivered = await asyncio.to_thread(self._writer.write, message)
        except OutboundDeliveryError as exc:
            self._events.log_delivery_failed(kind, exc.channel, exc.cause)
            return
        if delivered:
            self._events.log_forwarded(kind, message, delivered)
        else:
            self._events.log_undelivered(kind, message)
