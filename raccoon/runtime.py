"""Raccoon runtime entrypoint.

This module provides the ASGI application factory served by Granian. The
factory resolves the settings, bootstraps the IRC session, waits for the
server to accept it and then builds the Falcon app around a writer bound to
that session. Failing to bring the session up is fatal: the process exits
instead of serving webhooks it cannot deliver.

Configuration is driven by :func:`raccoon.config.load_settings`, so a TOML
file, ``RACCOON_*`` environment variables, or both can be used. The CLI in
:mod:`raccoon.cli` exports its resolved settings to the environment before
starting Granian, whose worker then calls :func:`create_app`.

Run the service directly with ``python -m raccoon.runtime``.
"""

from __future__ import annotations

import typing as typ

from raccoon.api.app import AppDependencies
from raccoon.api.app import create_app as _create_api_app
from raccoon.chat.errors import SessionBootstrapError
from raccoon.chat.session import SessionManager
from raccoon.chat.writer import IrcWriter
from raccoon.config import ConfigError, RaccoonSettings, load_settings
from raccoon.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    import falcon.asgi

    from raccoon.config import IrcSettings

__all__ = ["create_app", "main", "resolve_settings"]

logger = get_logger(__name__)

# Granian's ASGI factory path
APP_FACTORY: typ.Final = "raccoon.runtime:create_app"


def resolve_settings() -> RaccoonSettings:
    """Load settings, exiting the process when they are invalid.

    Raises
    ------
    SystemExit
        If the configuration cannot be loaded.

    """
    try:
        return load_settings()
    except ConfigError as exc:
        log_error(logger, "%s", exc)
        raise SystemExit(1) from exc


def _configure_logging(settings: RaccoonSettings) -> None:
    normalized_level, invalid_level = configure_logging(settings.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid RACCOON_LOG_LEVEL %r, falling back to %s",
            settings.log_level,
            normalized_level,
        )


def create_app(
    *,
    settings: RaccoonSettings | None = None,
    manager_factory: cabc.Callable[[IrcSettings], SessionManager] = SessionManager,
) -> falcon.asgi.App:
    """Bootstrap the IRC session and create the Falcon ASGI application.

    Blocks until the IRC server welcomes the session, or until
    ``irc.ready_timeout`` elapses when one is configured.

    Parameters
    ----------
    settings
        Pre-resolved settings; loaded from file and environment when omitted.
    manager_factory
        Builds the session manager for the IRC settings.

    Returns
    -------
    falcon.asgi.App
        Application forwarding ``POST /gitlab`` deliveries to IRC.

    Raises
    ------
    SystemExit
        If the configuration is invalid or the IRC session cannot be
        established.

    """
    if settings is None:
        settings = resolve_settings()
        _configure_logging(settings)

    if not settings.gitlab.token:
        log_warning(
            logger, "No gitlab.token configured; every webhook request will be rejected"
        )

    manager = manager_factory(settings.irc)
    manager.start()
    try:
        session = manager.wait_ready(settings.irc.ready_timeout)
    except SessionBootstrapError as exc:
        log_error(logger, "Could not establish IRC session: %s", exc)
        manager.stop()
        raise SystemExit(1) from exc

    deps = AppDependencies(
        writer=IrcWriter(session),
        gitlab_token=settings.gitlab.token,
        ready_probe=manager.is_ready,
    )
    return _create_api_app(deps)


def main() -> None:
    """Start the Raccoon server using Granian.

    Resolves the settings once to validate them and pick the listen address;
    the Granian worker resolves them again inside :func:`create_app`.
    """
    from granian import Granian
    from granian.constants import Interfaces

    settings = resolve_settings()
    _configure_logging(settings)

    log_info(
        logger,
        "Listening for requests at http://%s:%d (log_level=%s)",
        settings.service.bind,
        settings.service.port,
        settings.log_level,
    )

    # One worker: each worker process would open its own IRC session.
    server = Granian(
        APP_FACTORY,
        address=settings.service.bind,
        port=settings.service.port,
        interface=Interfaces.ASGI,
        factory=True,
        workers=1,
    )
    server.serve()


if __name__ == "__main__":
    main()
