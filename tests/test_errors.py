import xml.etree.ElementTree as ET

from fastapi.testclient import TestClient
from app.main import app

raw_client = TestClient(app)


def _envelope(response):
    root = ET.fromstring(response.content)
    assert root.tag == "response"
    return root


def test_404_not_found():
    response = raw_client.get("/non-existent-route")
    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/xml")
    root = _envelope(response)
    assert root.findtext("status") == "error"
    assert root.findtext("message")
    assert root.findtext("timestamp")


def test_405_method_not_allowed():
    response = raw_client.post("/api/users/active")
    assert response.status_code == 405
    assert _envelope(response).findtext("status") == "error"


def test_non_integer_id_is_rejected(client):
    response = client.get("/api/users/not-a-number")
    assert response.status_code == 422
    root = _envelope(response)
    assert root.findtext("status") == "error"
    assert "user_id" in root.findtext("message")


def test_missing_search_parameter(client):
    response = client.get("/api/users/search")
    assert response.status_code == 422
    assert "name" in _envelope(response).findtext("message")


def test_custom_exception():
    from app.core.exceptions import UserNotFoundError

    @app.get("/test-custom-error")
    def trigger_custom_error():
        raise UserNotFoundError(7)

    response = raw_client.get("/test-custom-error")
    assert response.status_code == 404
    root = _envelope(response)
    assert root.findtext("status") == "error"
    assert root.findtext("message") == "User not found with id: 7"


def test_authentication_error_carries_challenge():
    from app.core.exceptions import AuthenticationError

    @app.get("/test-auth-error")
    def trigger_auth_error():
        raise AuthenticationError()

    response = raw_client.get("/test-auth-error")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Basic"


def test_unhandled_exception_becomes_500_envelope():
    @app.get("/test-unhandled-error")
    def trigger_unhandled():
        raise RuntimeError("boom")

    safe_client = TestClient(app, raise_server_exceptions=False)
    response = safe_client.get("/test-unhandled-error")
    assert response.status_code == 500
    assert _envelope(response).findtext("status") == "error"
