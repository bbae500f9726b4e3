import importlib

import dotenv

from clinic_api import config
from clinic_api.domain.appointments.service import AppointmentService
from clinic_api.errors import Internal


def test_health_reports_database(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert body["timestamp"]


def test_unknown_route_uses_error_shape(client):
    response = client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_malformed_json_is_a_400(client, auth_headers):
    response = client.post(
        "/api/patients",
        content="{not json",
        headers={**auth_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"


def test_internal_errors_hide_details_outside_development(client, auth_headers, monkeypatch):
    def fail(self, appointment_id):
        raise Internal("Failed to load appointment: connection reset")

    monkeypatch.setattr(AppointmentService, "get_appointment", fail)

    response = client.get("/api/appointments/1", headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_environment_defaults_to_production(monkeypatch):
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.setattr(dotenv, "load_dotenv", lambda *args, **kwargs: False)
    try:
        reloaded = importlib.reload(config)
        assert reloaded.ENVIRONMENT == "production"
        assert not reloaded.IS_DEVELOPMENT
    finally:
        monkeypatch.undo()
        importlib.reload(config)
