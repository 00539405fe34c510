"""Command-line entry point for the Raccoon service.

Raccoon accepts GitLab HTTP hooks as described at
https://docs.gitlab.com/ee/user/project/integrations/webhooks.html and posts
the resulting formatted text to IRC.

Usage:
    raccoon                         # read raccoon.toml from the usual places
    raccoon --config ./raccoon.toml --port 8080 --bind 0.0.0.0

Environment variables:
    RACCOON_CONFIG             - Configuration file path
    RACCOON_<SECTION>_<KEY>    - Any setting, e.g. RACCOON_IRC_SERVER
    RACCOON_LOG_LEVEL          - Log level (default: INFO)
"""

from __future__ import annotations

import os
import sys
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter

from raccoon import __version__
from raccoon.config import ConfigError, load_settings, settings_environment

app = App(
    name="raccoon",
    help="Forward GitLab webhooks to IRC channels",
    version=__version__,
)


@app.default
def serve(
    *,
    config: typ.Annotated[Path | None, Parameter(name=["--config", "-c"])] = None,
    port: typ.Annotated[int | None, Parameter(name=["--port", "-p"])] = None,
    bind: typ.Annotated[str | None, Parameter(name=["--bind", "-b"])] = None,
    log_level: str | None = None,
) -> int:
    """Connect to IRC and serve the GitLab webhook endpoint.

    Args:
        config: Config file to use instead of the standard resolution
            (``$XDG_CONFIG_HOME/raccoon/raccoon.toml``, then
            ``./raccoon.toml``).
        port: Port to bind the service to, default is 7878. Overrides
            ``service.port``.
        bind: Address to bind the service to, default is 127.0.0.1.
            Overrides ``service.bind``.
        log_level: Log level, overriding ``log_level``.

    Returns:
        Exit code (0 for success, non-zero for failure).

    """
    if config is not None and not config.is_file():
        print(f"Config file {config} does not exist.", file=sys.stderr)
        return 1

    try:
        settings = load_settings(
            config,
            overrides={
                "service": {"port": port, "bind": bind},
                "log_level": log_level,
            },
        )
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1

    # The Granian worker re-resolves settings from this environment.
    os.environ.update(settings_environment(settings))
    if config is not None:
        os.environ["RACCOON_CONFIG"] = str(config)

    from raccoon.runtime import main as run_server

    run_server()
    return 0


def main() -> int:
    """Entry point for the CLI."""
    return app()


if __name__ == "__main__":
    sys.exit(main())
