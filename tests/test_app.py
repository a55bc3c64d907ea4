"""Application-level behaviour: health check and the error envelope."""


def test_health_endpoint(client) -> None:
    """Ensure the health check returns the expected response."""
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_validation_errors_use_error_envelope(client) -> None:
    response = client.post("/api/auth/login", json={"email": "not-an-email"})
    assert response.status_code == 400
    error = response.get_json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert "email" in error["fields"]
    assert "password" in error["fields"]


def test_missing_token_is_unauthenticated(client) -> None:
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "UNAUTHENTICATED"


def test_garbage_token_is_unauthenticated(client) -> None:
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "UNAUTHENTICATED"
