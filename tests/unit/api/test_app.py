from __future__ import annotations

import pytest

pytestmark = pytest.mark.unit

HEADERS = {"X-Client-Id": "acme"}


def test_health_reports_disabled_cache(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": "0.1.0", "cache": "disabled"}


def test_metrics_exposes_prometheus_text(client) -> None:
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "whatsapp_provider_sends_total" in response.text


def test_missing_client_id_is_rejected(client) -> None:
    response = client.get("/api/v1/session")

    assert response.status_code == 400
    assert response.json() == {
        "error": "X-Client-Id header is required",
        "code": "validation_error",
    }


def test_unknown_client_id_is_unauthorized(client) -> None:
    response = client.get("/api/v1/session", headers={"X-Client-Id": "nobody"})

    assert response.status_code == 401
    assert response.json()["code"] == "unauthorized"


def test_request_id_is_echoed(client) -> None:
    response = client.get("/api/v1/session", headers={**HEADERS, "X-Request-ID": "req-1"})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "req-1"
