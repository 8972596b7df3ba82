"""Middleware pipeline — request id, access log, CORS, auth and panic isolation.

Tests cover:
    - X-Request-ID on every response (success, error, short-circuit, panic)
    - CORS origin echo, policy headers, and preflight short-circuit ahead of auth
    - bearer auth codes, public paths, constant-time comparison
    - one access log line per request with the status actually sent
    - unhandled exceptions answered with a sanitized 500 and logged
"""

import hmac
import logging
import uuid

import pytest
from fastapi import Request

ACCESS_KEY = "test-access-key"
ALLOWED_ORIGIN = "http://localhost:5173"

ACCESS_LOGGER = "drawboard.api.middleware.access_log"
ERROR_LOGGER = "drawboard.api.error_handlers"


def _bearer(key=ACCESS_KEY):
    return {"Authorization": f"Bearer {key}"}


# ─── request id ─────────────────────────────────────────────────

async def test_generated_request_id(client):
    resp = await client.get("/health")
    uuid.UUID(resp.headers["X-Request-ID"])


async def test_wellformed_inbound_request_id_is_echoed(client):
    resp = await client.get("/health", headers={"X-Request-ID": "trace-42.a:b_c"})
    assert resp.headers["X-Request-ID"] == "trace-42.a:b_c"


@pytest.mark.parametrize("inbound", ["has space", "x" * 129, "semi;colon"])
async def test_malformed_inbound_request_id_is_replaced(client, inbound):
    resp = await client.get("/health", headers={"X-Request-ID": inbound})
    assert resp.headers["X-Request-ID"] != inbound
    uuid.UUID(resp.headers["X-Request-ID"])


async def test_request_id_available_to_handlers(build_app, client_for):
    app = build_app()

    @app.get("/whoami")
    async def whoami(request: Request):
        return {"request_id": request.state.request_id}

    async with client_for(app) as client:
        resp = await client.get("/whoami", headers={"X-Request-ID": "abc-123"})
    assert resp.json() == {"request_id": "abc-123"}


async def test_request_id_on_error_responses(client):
    resp = await client.get("/drawings/not-a-uuid")
    assert resp.status_code == 400
    assert "X-Request-ID" in resp.headers


# ─── CORS ───────────────────────────────────────────────────────

async def test_allowed_origin_is_echoed(client):
    resp = await client.get("/health", headers={"Origin": ALLOWED_ORIGIN})
    assert resp.headers["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN
    assert "Origin" in resp.headers["Vary"]
    assert resp.headers["Access-Control-Max-Age"] == "3600"
    assert "X-Request-ID" in resp.headers["Access-Control-Expose-Headers"]


async def test_disallowed_origin_gets_policy_but_no_allow_origin(client):
    resp = await client.get("/health", headers={"Origin": "https://evil.example"})
    assert resp.status_code == 200
    assert "Access-Control-Allow-Origin" not in resp.headers
    assert "PUT" in resp.headers["Access-Control-Allow-Methods"]
    assert "Authorization" in resp.headers["Access-Control-Allow-Headers"]


async def test_wildcard_allows_any_origin(build_app, client_for):
    app = build_app(cors_allowed_origins=["*"])
    async with client_for(app) as client:
        resp = await client.get("/health", headers={"Origin": "https://any.example"})
    assert resp.headers["Access-Control-Allow-Origin"] == "https://any.example"


async def test_preflight_short_circuits_before_auth_and_routes(build_app, client_for):
    app = build_app(auth_enabled=True, auth_access_key=ACCESS_KEY)
    calls = []

    @app.api_route("/probe", methods=["GET", "OPTIONS"])
    async def probe():
        calls.append(1)
        return {}

    async with client_for(app) as client:
        resp = await client.options(
            "/probe",
            headers={
                "Origin": ALLOWED_ORIGIN,
                "Access-Control-Request-Method": "GET",
            },
        )
    assert resp.status_code == 204
    assert resp.headers["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN
    assert "X-Request-ID" in resp.headers
    assert calls == []


async def test_preflight_from_disallowed_origin_is_still_204(client):
    resp = await client.options("/drawings", headers={"Origin": "https://evil.example"})
    assert resp.status_code == 204
    assert "Access-Control-Allow-Origin" not in resp.headers


# ─── auth ───────────────────────────────────────────────────────

@pytest.mark.parametrize("headers, code", [
    ({}, "AUTH_REQUIRED"),
    ({"Authorization": f"Basic {ACCESS_KEY}"}, "INVALID_AUTH_FORMAT"),
    ({"Authorization": ACCESS_KEY}, "INVALID_AUTH_FORMAT"),
    ({"Authorization": "Bearer wrong-key"}, "INVALID_ACCESS_KEY"),
])
async def test_auth_rejections(auth_client, headers, code):
    resp = await auth_client.get("/drawings", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["error"] == code
    assert resp.headers["WWW-Authenticate"] == "Bearer"
    assert "X-Request-ID" in resp.headers


async def test_valid_key_passes(auth_client):
    resp = await auth_client.get("/drawings", headers=_bearer())
    assert resp.status_code == 200


async def test_auth_validate_endpoint(auth_client):
    resp = await auth_client.get("/auth/validate", headers=_bearer())
    assert resp.status_code == 200
    assert resp.json() == {"authenticated": True}


@pytest.mark.parametrize("path", ["/health", "/health/ready"])
async def test_public_paths_skip_auth(auth_client, path):
    resp = await auth_client.get(path)
    assert resp.status_code == 200


async def test_auth_disabled_admits_everything(client):
    resp = await client.get("/drawings")
    assert resp.status_code == 200


async def test_key_comparison_is_constant_time(auth_client, monkeypatch):
    seen = []
    real = hmac.compare_digest

    def spy(a, b):
        seen.append((a, b))
        return real(a, b)

    monkeypatch.setattr(hmac, "compare_digest", spy)
    await auth_client.get("/drawings", headers=_bearer("nope"))
    assert seen == [(b"nope", ACCESS_KEY.encode())]


# ─── access log ─────────────────────────────────────────────────

def _access_records(caplog):
    return [r for r in caplog.records if r.name == ACCESS_LOGGER]


async def test_access_log_line_per_request(client, caplog):
    caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)
    await client.get("/health", headers={"X-Request-ID": "log-me"})

    [record] = _access_records(caplog)
    assert record.method == "GET"
    assert record.path == "/health"
    assert record.status == 200
    assert record.duration_ms >= 0
    assert record.getMessage().startswith("GET /health 200")


async def test_access_log_records_error_and_no_content(client, caplog):
    caplog.set_level(logging.INFO, logger=ACCESS_LOGGER)
    await client.get(f"/drawings/{uuid.uuid4()}")
    await client.options("/drawings")

    statuses = [r.status for r in _access_records(caplog)]
    assert statuses == [404, 204]


# ─── panic isolation ────────────────────────────────────────────

async def test_unhandled_exception_becomes_sanitized_500(build_app, client_for, caplog):
    app = build_app()

    @app.get("/boom")
    async def boom():
        raise RuntimeError("connection string leaked")

    caplog.set_level(logging.INFO)
    async with client_for(app) as client:
        resp = await client.get("/boom", headers={"X-Request-ID": "panic-1"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "INTERNAL_ERROR", "message": "Internal server error"}
    assert "leaked" not in resp.text
    assert resp.headers["X-Request-ID"] == "panic-1"

    [panic] = [r for r in caplog.records if r.name == ERROR_LOGGER]
    assert panic.levelno >= logging.ERROR
    assert panic.status == 500
    assert panic.error_code == "INTERNAL_ERROR"
    assert panic.method == "GET"
    assert panic.path == "/boom"
    assert panic.request_id == "panic-1"
    assert panic.exc_info[0] is RuntimeError
    assert "connection string leaked" in panic.getMessage()
    assert [r.status for r in _access_records(caplog)] == [500]


async def test_server_keeps_serving_after_panic(build_app, client_for):
    app = build_app()

    @app.get("/boom")
    async def boom():
        raise ValueError("bad")

    async with client_for(app) as client:
        assert (await client.get("/boom")).status_code == 500
        assert (await client.get("/health")).status_code == 200


async def test_panic_response_carries_cors_headers(build_app, client_for):
    app = build_app()

    @app.get("/boom")
    async def boom():
        raise RuntimeError("bad")

    async with client_for(app) as client:
        resp = await client.get("/boom", headers={"Origin": ALLOWED_ORIGIN})
    assert resp.status_code == 500
    assert resp.headers["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN
    assert "X-Request-ID" in resp.headers["Access-Control-Expose-Headers"]


async def test_handled_client_error_logged_at_warning(client, caplog):
    caplog.set_level(logging.INFO, logger=ERROR_LOGGER)
    await client.get(f"/drawings/{uuid.uuid4()}", headers={"X-Request-ID": "nf-1"})

    [record] = [r for r in caplog.records if r.name == ERROR_LOGGER]
    assert record.levelno == logging.WARNING
    assert record.status == 404
    assert record.error_code == "NOT_FOUND"
    assert record.request_id == "nf-1"
