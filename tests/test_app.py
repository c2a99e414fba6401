"""
Tests for the bind-model probe API
"""

from urllib.parse import urlencode

import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile

from bindprobe.app import app, get_binding_mode
from bindprobe.core.config import Config
from bindprobe.services.shapes import BindingMode


client = TestClient(app)

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


@pytest.fixture(autouse=True)
def required_mode(monkeypatch):
    """Run every test against the second shape version unless overridden"""
    monkeypatch.setattr(Config, "BINDING_MODE", "required")
    yield
    app.dependency_overrides.clear()


def post_form(pairs):
    return client.post("/bindModel", content=urlencode(pairs), headers=FORM_HEADERS)


class TestBindModel:
    """Test the /bindModel endpoint"""

    def test_echoes_status_code(self, sample_payload):
        response = post_form(sample_payload)
        assert response.status_code == 418
        assert response.content == b""

    def test_other_status_code(self, sample_payload):
        payload = [(k, "202" if k == "StatusCode" else v) for k, v in sample_payload]
        response = post_form(payload)
        assert response.status_code == 202
        assert response.content == b""

    def test_multipart_form(self, sample_payload):
        files = {key: (None, value) for key, value in sample_payload}
        response = client.post("/bindModel", files=files)
        assert response.status_code == 418

    def test_missing_field_is_400(self, sample_payload):
        response = post_form([(k, v) for k, v in sample_payload if k != "LastName"])
        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "MissingFieldError"
        assert data["field"] == "LastName"

    def test_conversion_error_is_400(self, sample_payload):
        payload = [(k, "abc" if k == "Children[0].Age" else v) for k, v in sample_payload]
        response = post_form(payload)
        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "ConversionError"
        assert data["field"] == "Children[0].Age"
        assert data["raw_value"] == "abc"

    def test_permissive_mode_override(self):
        app.dependency_overrides[get_binding_mode] = lambda: BindingMode.PERMISSIVE
        response = post_form([("StatusCode", "201")])
        assert response.status_code == 201

    def test_permissive_mode_from_config(self, monkeypatch):
        monkeypatch.setattr(Config, "BINDING_MODE", "permissive")
        response = post_form([("StatusCode", "204"), ("FirstName", "")])
        assert response.status_code == 204

    def test_status_code_out_of_range(self, sample_payload):
        payload = [(k, "42" if k == "StatusCode" else v) for k, v in sample_payload]
        response = post_form(payload)
        assert response.status_code == 400

    @pytest.mark.parametrize("status_code", ["100", "101", "199"])
    def test_informational_status_code_rejected(self, sample_payload, status_code):
        payload = [(k, status_code if k == "StatusCode" else v) for k, v in sample_payload]
        response = post_form(payload)
        assert response.status_code == 400
        assert "StatusCode" in response.json()["detail"]

    def test_json_body_rejected(self):
        response = client.post("/bindModel", json={"StatusCode": 200})
        assert response.status_code == 415

    def test_file_part_rejected(self, sample_payload):
        response = client.post(
            "/bindModel",
            data=dict(sample_payload),
            files={"Avatar": ("avatar.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400
        assert "Avatar" in response.json()["detail"]

    def test_rejected_upload_is_closed(self, sample_payload, monkeypatch):
        closed = []

        async def record_close(upload):
            closed.append(upload.filename)

        monkeypatch.setattr(UploadFile, "close", record_close)
        response = client.post(
            "/bindModel",
            data=dict(sample_payload),
            files={"Avatar": ("avatar.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400
        assert "avatar.txt" in closed


class TestServiceEndpoints:
    """Test health and info endpoints"""

    def test_health(self):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["binding_mode"] == "required"
        assert data["environment"] == Config.ENVIRONMENT

    def test_health_reports_bad_config(self, monkeypatch):
        monkeypatch.setattr(Config, "BINDING_MODE", "lenient")
        data = client.get("/health").json()
        assert data["status"] == "unhealthy"
        assert "BINDING_MODE" in data["error"]

    def test_root(self):
        data = client.get("/").json()
        assert data["endpoints"]["bind_model"] == "/bindModel"
