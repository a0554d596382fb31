import time

from fastapi import FastAPI
from fastapi.testclient import TestClient
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from mapchat.core.middleware import (
    RATE_LIMIT_MESSAGE,
    build_rate_limiter,
    limit_only_prefix,
    log_requests,
    rate_limit_exceeded_handler,
)


def build_app(max_requests, window_seconds=900):
    app = FastAPI()
    limiter = build_rate_limiter(max_requests, window_seconds)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    app.middleware("http")(log_requests)

    @app.get("/api/ping")
    async def ping():
        return {"pong": True}

    @app.get("/api/other")
    async def other():
        return {"other": True}

    @app.get("/")
    async def root():
        return {"ok": True}

    limit_only_prefix(app, limiter)
    return app


def test_requests_over_limit_get_429_with_retry_after():
    client = TestClient(build_app(max_requests=2))

    assert client.get("/api/ping").status_code == 200
    assert client.get("/api/ping").status_code == 200
    response = client.get("/api/ping")

    assert response.status_code == 429
    assert response.json() == {"error": RATE_LIMIT_MESSAGE}
    assert 0 <= int(response.headers["Retry-After"]) <= 900


def test_allowed_responses_carry_limit_headers():
    client = TestClient(build_app(max_requests=5))

    response = client.get("/api/ping")

    assert response.headers["X-RateLimit-Limit"] == "5"
    assert response.headers["X-RateLimit-Remaining"] == "4"


def test_only_api_paths_are_limited():
    client = TestClient(build_app(max_requests=1))

    for _ in range(3):
        assert client.get("/").status_code == 200
    assert client.get("/api/ping").status_code == 200
    assert client.get("/api/ping").status_code == 429


def test_window_resets_after_it_expires():
    client = TestClient(build_app(max_requests=1, window_seconds=1))

    assert client.get("/api/ping").status_code == 200
    assert client.get("/api/ping").status_code == 429
    time.sleep(1.1)

    assert client.get("/api/ping").status_code == 200


def test_limit_is_shared_across_api_routes():
    client = TestClient(build_app(max_requests=1))

    assert client.get("/api/ping").status_code == 200
    assert client.get("/api/other").status_code == 429
