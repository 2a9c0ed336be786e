from fastapi.testclient import TestClient

from main import create_app
from middleware import FixedWindowRateLimiter

from conftest import make_settings


def test_limiter_counts_per_key_and_resets_each_window():
    now = [0.0]
    limiter = FixedWindowRateLimiter(2, 60, clock=lambda: now[0])

    assert limiter.hit("a")
    assert limiter.hit("a")
    assert not limiter.hit("a")
    assert limiter.hit("b")

    now[0] = 61.0
    assert limiter.hit("a")


def test_app_rejects_requests_over_the_limit(db):
    client = TestClient(create_app(make_settings(rate_limit_max=2), db))
    assert client.get("/").status_code == 200
    assert client.get("/").status_code == 200

    res = client.get("/")
    assert res.status_code == 429
    assert res.json() == {"error": "Too many requests"}
    assert res.headers["X-Content-Type-Options"] == "nosniff"


def test_security_headers_present(client):
    res = client.get("/")
    assert res.headers["X-Content-Type-Options"] == "nosniff"
    assert res.headers["X-Frame-Options"] == "SAMEORIGIN"
    assert res.headers["Referrer-Policy"] == "no-referrer"
