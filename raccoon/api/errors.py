"""Request-level exceptions and Falcon error handlers for the webhook API.

Resources raise these exceptions; the handlers registered by
:func:`raccoon.api.app.create_app` translate them into HTTP responses.

Usage
-----
Register error handlers on the Falcon app::

    app.add_error_handler(AuthenticationRejectedError, handle_authentication_rejected)
    app.add_error_handler(InvalidRequestBodyError, handle_invalid_request_body)
    app.add_error_handler(MalformedPayloadError, handle_malformed_payload)

"""

from __future__ import annotations

import typing as typ

import falcon

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from raccoon.gitlab.errors import MalformedPayloadError

__all__ = [
    "AuthenticationRejectedError",
    "InvalidRequestBodyError",
    "error_body",
    "handle_authentication_rejected",
    "handle_invalid_request_body",
    "handle_malformed_payload",
]


class AuthenticationRejectedError(Exception):
    """Raised when the webhook token is missing, wrong, or not configured.

    The message never contains the configured token.
    """

    @classmethod
    def unconfigured(cls) -> AuthenticationRejectedError:
        """Return an error for a service started without ``gitlab.token``."""
        return cls("no gitlab.token in configuration")

    @classmethod
    def missing(cls) -> AuthenticationRejectedError:
        """Return an error for a request without a token header."""
        return cls("no gitlab token in headers")

    @classmethod
    def mismatch(cls) -> AuthenticationRejectedError:
        """Return an error for a token that does not match."""
        return cls("mismatching gitlab token")


class InvalidRequestBodyError(Exception):
    """Raised when the request body is not a JSON object."""


def error_body(message: str) -> dict[str, typ.Any]:
    """Return the JSON error envelope used for 400 responses."""
    return {"code": 400, "error": {"message": message}}


async def handle_authentication_rejected(
    _req: Request,
    resp: Response,
    _ex: AuthenticationRejectedError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``AuthenticationRejectedError`` to an empty HTTP 400 response."""
    resp.status = falcon.HTTP_400
    resp.text = ""


async def handle_invalid_request_body(
    _req: Request,
    resp: Response,
    ex: InvalidRequestBodyError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidRequestBodyError`` to an HTTP 400 JSON error envelope."""
    resp.status = falcon.HTTP_400
    resp.media = error_body(f"Failed to decode request body: {ex}")


async def handle_malformed_payload(
    _req: Request,
    resp: Response,
    ex: MalformedPayloadError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``MalformedPayloadError`` to an HTTP 400 JSON error envelope.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        The decoding failure, carrying the event kind and cause.
    _params
        URI template parameters (unused).

    """
    resp.status = falcon.HTTP_400
    resp.media = error_body(f"Failed to parse Gitlab payload: {ex}")
