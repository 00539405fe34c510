"""Unit tests for the liveness and readiness resources."""

from __future__ import annotations

import falcon
import falcon.asgi
import falcon.testing

from raccoon.api.health.resources import HealthResource, ReadyResource


def _client(probe: object = None) -> falcon.testing.TestClient:
    app = falcon.asgi.App()
    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(probe))  # type: ignore[arg-type]
    return falcon.testing.TestClient(app)


def test_health_is_always_ok() -> None:
    """Liveness does not consult the readiness probe."""
    result = _client(lambda: False).simulate_get("/health")

    assert result.status == falcon.HTTP_200, "expected HTTP 200"
    assert result.json == {"status": "ok"}, "wrong /health body"


def test_ready_follows_probe_transitions() -> None:
    """Readiness is evaluated on every request."""
    state = {"ready": True}
    client = _client(lambda: state["ready"])

    first = client.simulate_get("/ready")
    state["ready"] = False
    second = client.simulate_get("/ready")

    assert first.status == falcon.HTTP_200, "expected HTTP 200 while ready"
    assert first.json == {"status": "ready"}, "wrong ready body"
    assert second.status == falcon.HTTP_503, "expected HTTP 503 when not ready"
    assert second.json == {"status": "unavailable"}, "wrong unavailable body"


def test_ready_without_probe() -> None:
    """Without a probe the service reports ready."""
    result = _client().simulate_get("/ready")
    assert result.status == falcon.HTTP_200, "expected HTTP 200"
