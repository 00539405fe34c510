"""Application factory for the Raccoon Falcon ASGI application.

This module provides ``create_app()`` which builds the Falcon ASGI
application with health endpoints and, when a notification writer is
available, the GitLab webhook endpoint.

Usage
-----
Create a health-only app (no chat session)::

    app = create_app()

Create a full app forwarding webhooks to IRC::

    from raccoon.api.app import AppDependencies, create_app

    deps = AppDependencies(
        writer=IrcWriter(session),
        gitlab_token=settings.gitlab.token,
        ready_probe=manager.is_ready,
    )
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from raccoon.api.errors import (
    AuthenticationRejectedError,
    InvalidRequestBodyError,
    handle_authentication_rejected,
    handle_invalid_request_body,
    handle_malformed_payload,
)
from raccoon.api.health.resources import HealthResource, ReadyResource
from raccoon.gitlab.errors import MalformedPayloadError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from raccoon.chat.writer import NotificationWriter

__all__ = ["GITLAB_ROUTE", "AppDependencies", "create_app"]

GITLAB_ROUTE: typ.Final = "/gitlab"


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    writer
        Notification writer; the webhook route is registered only when set.
    gitlab_token
        Shared secret expected in the ``X-Gitlab-Token`` header.
    ready_probe
        Callable reporting whether the chat session can deliver messages.

    """

    writer: NotificationWriter | None = None
    gitlab_token: str | None = None
    ready_probe: cabc.Callable[[], bool] | None = None


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None`` or without a
        writer, only ``/health`` and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    deps = dependencies or AppDependencies()
    app = falcon.asgi.App()

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(deps.ready_probe))

    if deps.writer is not None:
        from raccoon.api.webhooks.resources import (
            GitLabWebhookDependencies,
            GitLabWebhookResource,
        )

        app.add_route(
            GITLAB_ROUTE,
            GitLabWebhookResource(
                GitLabWebhookDependencies(writer=deps.writer, token=deps.gitlab_token)
            ),
        )

    app.add_error_handler(AuthenticationRejectedError, handle_authentication_rejected)
    app.add_error_handler(InvalidRequestBodyError, handle_invalid_request_body)
    app.add_error_handler(MalformedPayloadError, handle_malformed_payload)

    return app
