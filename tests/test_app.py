def test_root_and_health(client):
    assert client.get("/").json() == {"message": "BoatBook API is running"}
    assert client.get("/health").json() == {"status": "healthy"}


def test_redis_health_degraded_without_redis(client, monkeypatch):
    monkeypatch.setattr("boatbook.main.get_redis_client", lambda: None)
    assert client.get("/health/redis").json() == {"status": "degraded", "redis": {"connected": False}}


def test_security_headers(client):
    response = client.get("/")
    assert response.headers["x-frame-options"] == "SAMEORIGIN"
    assert response.headers["x-content-type-options"] == "nosniff"
    assert "frame-ancestors 'self' https://book.example.test" in response.headers["content-security-policy"]
    assert response.headers["cache-control"] == "no-store, no-cache, must-revalidate"


def test_health_is_excluded_from_security_headers(client):
    assert "x-frame-options" not in client.get("/health").headers


def test_cors_preflight_for_booking_frontend(client):
    response = client.options(
        "/api/bookings",
        headers={"Origin": "https://book.example.test", "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://book.example.test"


def test_validation_errors_are_json(client):
    response = client.post("/api/bookings", json={"customerEmail": 123})
    assert response.status_code == 422
    assert isinstance(response.json()["detail"], list)
