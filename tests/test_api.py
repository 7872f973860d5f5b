from fastapi.testclient import TestClient

from main import create_app


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert "timestamp" in body


def test_root_welcome(client):
    assert client.get("/").json() == {"message": "Welcome to Electric Cars API"}


def test_docs_are_served(client):
    assert client.get("/api-docs").status_code == 200
    assert "/api/electric-cars/filter" in client.get("/openapi.json").json()["paths"]


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_cors_headers(client):
    response = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
    assert response.headers.get("access-control-allow-origin") in ("*", "http://localhost:5173")


def test_unexpected_error_returns_generic_500(engine):
    app = create_app(engine=engine)

    @app.get("/api/boom")
    async def boom():
        raise RuntimeError("kaboom")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/api/boom")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}
