"""Raccoon HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application receiving GitLab webhooks.

Usage
-----
Create and run the application::

    from raccoon.api import create_app

    app = create_app()              # health-only mode
    app = create_app(dependencies)  # webhook forwarding enabled

Public API
----------
create_app
    Application factory that registers health endpoints and, when a
    notification writer is provided, the ``POST /gitlab`` webhook endpoint.
"""

from raccoon.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
