import pytest
from aiohttp import DummyCookieJar

from gift_exchange.core.config import Settings
from gift_exchange.db import Base, init_engine
from gift_exchange.web import create_app


@pytest.fixture
def app(tmp_path):
    database_url = f"sqlite+pysqlite:///{tmp_path / 'web.db'}"
    engine = init_engine(database_url)
    Base.metadata.create_all(engine)
    settings = Settings(
        database_url=database_url,
        log_level="DEBUG",
        log_path=str(tmp_path / "web.log"),
        base_url="http://gifts.test",
    )
    yield create_app(settings)
    engine.dispose()


@pytest.fixture
async def client(aiohttp_client, app):
    # Each call carries its own Cookie header so several users can share one client.
    return await aiohttp_client(app, cookie_jar=DummyCookieJar())


@pytest.fixture
async def browser(aiohttp_client, app):
    return await aiohttp_client(app)


async def signup(client, name, exchange_code=None):
    payload = {
        "email": f"{name.lower()}@example.com",
        "password": "password123",
        "name": name,
    }
    if exchange_code:
        payload["exchangeCode"] = exchange_code
    resp = await client.post("/api/auth/signup", json=payload)
    assert resp.status == 201, await resp.text()
    return {"Cookie": f"session_token={resp.cookies['session_token'].value}"}


async def create_exchange(client, headers, **overrides):
    payload = {"name": "Office party", "exchange_date": "2026-12-20", "gift_budget": 25}
    payload.update(overrides)
    resp = await client.post("/api/exchange/create", json=payload, headers=headers)
    assert resp.status == 201, await resp.text()
    return (await resp.json())["exchange"]


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status == 200
    assert await resp.json() == {"success": True, "database": "ok"}


async def test_cookie_session_round_trip(browser):
    resp = await browser.post(
        "/api/auth/signup",
        json={"email": "Alice@Example.com", "password": "password123", "name": "Alice"},
    )
    assert resp.status == 201
    assert resp.cookies["session_token"]["httponly"]
    body = await resp.json()
    assert body["user"]["email"] == "alice@example.com"

    resp = await browser.get("/api/auth/me")
    assert resp.status == 200
    assert (await resp.json())["user"]["name"] == "Alice"

    resp = await browser.post("/api/auth/logout")
    assert resp.status == 200

    resp = await browser.get("/api/auth/me")
    assert resp.status == 401
    assert (await resp.json())["code"] == "AUTHENTICATION_REQUIRED"

    resp = await browser.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "password123"}
    )
    assert resp.status == 200
    resp = await browser.get("/api/auth/me")
    assert resp.status == 200


async def test_signup_validation_errors(client):
    resp = await client.post(
        "/api/auth/signup", json={"email": "nope", "password": "short", "name": ""}
    )
    assert resp.status == 400
    body = await resp.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"] == [
        "Email format is invalid",
        "Password must be at least 8 characters",
        "Name is required",
    ]


async def test_non_text_fields_are_validation_errors(client):
    resp = await client.post(
        "/api/auth/signup",
        json={"email": "ivan@example.com", "password": "password123", "name": 42},
    )
    assert resp.status == 400
    body = await resp.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"] == ["Name must be text"]

    headers = await signup(client, "Ivan")
    resp = await client.post(
        "/api/auth/login", json={"email": "ivan@example.com", "password": 12345678}
    )
    assert resp.status == 400
    assert (await resp.json())["details"] == ["Password must be text"]

    resp = await client.post(
        "/api/exchange/create",
        json={"name": 7, "exchange_date": "2026-12-20"},
        headers=headers,
    )
    assert resp.status == 400
    assert (await resp.json())["details"] == ["Exchange name must be text"]


async def test_duplicate_signup_conflicts(client):
    await signup(client, "Bob")
    resp = await client.post(
        "/api/auth/signup",
        json={"email": "bob@example.com", "password": "password123", "name": "Bob again"},
    )
    assert resp.status == 409
    assert (await resp.json())["code"] == "CONFLICT"


async def test_login_with_wrong_password(client):
    await signup(client, "Carol")
    resp = await client.post(
        "/api/auth/login", json={"email": "carol@example.com", "password": "wrong-password"}
    )
    assert resp.status == 401
    assert (await resp.json())["error"] == "Invalid email or password"


async def test_malformed_json(client):
    resp = await client.post("/api/auth/login", data="{not json", headers={"Content-Type": "application/json"})
    assert resp.status == 400
    assert (await resp.json())["code"] == "BAD_REQUEST"


async def test_protected_routes_need_a_session(client):
    resp = await client.post("/api/exchange/create", json={"name": "x", "exchange_date": "2026-12-20"})
    assert resp.status == 401
    resp = await client.get("/api/exchanges", headers={"Cookie": "session_token=forged"})
    assert resp.status == 401


async def test_create_exchange_validation(client):
    headers = await signup(client, "Dave")
    resp = await client.post(
        "/api/exchange/create",
        json={"name": "", "exchange_date": "soon", "gift_budget": -5},
        headers=headers,
    )
    assert resp.status == 400
    assert (await resp.json())["details"] == [
        "Exchange name is required",
        "Exchange date is invalid",
        "Gift budget must be a non-negative number",
    ]


async def test_join_errors(client):
    organizer = await signup(client, "Erin")
    exchange = await create_exchange(client, organizer)

    resp = await client.post("/api/exchange/join", json={"code": "ZZZZZZZZ"}, headers=organizer)
    assert resp.status == 404

    resp = await client.post("/api/exchange/join", json={"code": exchange["code"]}, headers=organizer)
    assert resp.status == 409
    assert (await resp.json())["error"] == "You are already a participant in this exchange"

    resp = await client.post("/api/exchange/join", json={"code": "  "}, headers=organizer)
    assert resp.status == 400


async def test_signup_with_stale_code_still_succeeds(client):
    headers = await signup(client, "Frank", exchange_code="BADCODE1")
    resp = await client.get("/api/exchanges", headers=headers)
    assert (await resp.json())["exchanges"] == []


async def test_assignment_needs_three_participants(client):
    organizer = await signup(client, "Grace")
    exchange = await create_exchange(client, organizer)
    await signup(client, "Heidi", exchange_code=exchange["code"])

    resp = await client.post(f"/api/exchange/{exchange['id']}/assign", headers=organizer)
    assert resp.status == 400
    assert "At least 3 participants" in (await resp.json())["error"]


async def test_full_exchange_flow(client):
    organizer = await signup(client, "Olivia")
    exchange = await create_exchange(
        client, organizer, invitee_emails=["pat@example.com", "", "quinn@example.com"]
    )
    assert exchange["gift_budget"] == 25.0
    assert exchange["assignments_generated"] is False

    members = {"Olivia": organizer}
    for name in ("Pat", "Quinn"):
        headers = await signup(client, name)
        resp = await client.post(
            "/api/exchange/join", json={"code": exchange["code"].lower()}, headers=headers
        )
        assert resp.status == 200
        members[name] = headers
    members["Rita"] = await signup(client, "Rita", exchange_code=exchange["code"])
    outsider = await signup(client, "Sam")

    resp = await client.get(f"/api/exchange/{exchange['id']}", headers=members["Pat"])
    detail = await resp.json()
    assert [p["name"] for p in detail["participants"]] == ["Olivia", "Pat", "Quinn", "Rita"]
    assert detail["is_organizer"] is False

    resp = await client.get(f"/api/assignment/{exchange['id']}", headers=members["Pat"])
    assert resp.status == 404

    resp = await client.post(f"/api/exchange/{exchange['id']}/assign", headers=members["Pat"])
    assert resp.status == 403

    resp = await client.post(f"/api/exchange/{exchange['id']}/assign", headers=organizer)
    assert resp.status == 200
    assert (await resp.json())["count"] == 4

    resp = await client.post(f"/api/exchange/{exchange['id']}/assign", headers=organizer)
    assert resp.status == 400
    assert "already been generated" in (await resp.json())["error"]

    receivers = {}
    for name, headers in members.items():
        resp = await client.get(f"/api/assignment/{exchange['id']}", headers=headers)
        assert resp.status == 200
        assignment = (await resp.json())["assignment"]
        assert set(assignment) == {"receiver_name", "receiver_email"}
        receivers[name] = assignment["receiver_name"]

    assert all(giver != receiver for giver, receiver in receivers.items())
    assert sorted(receivers.values()) == sorted(members)

    # Following the chain from anyone visits all four people.
    current, visited = "Olivia", []
    for _ in range(len(members)):
        visited.append(current)
        current = receivers[current]
    assert current == "Olivia"
    assert sorted(visited) == sorted(members)

    resp = await client.get(f"/api/assignment/{exchange['id']}", headers=outsider)
    assert resp.status == 403

    resp = await client.post("/api/exchange/join", json={"code": exchange["code"]}, headers=outsider)
    assert resp.status == 400

    resp = await client.get(f"/api/exchange/{exchange['id']}", headers=outsider)
    assert resp.status == 403


async def test_unknown_exchange(client):
    headers = await signup(client, "Trent")
    resp = await client.post("/api/exchange/999/assign", headers=headers)
    assert resp.status == 404
    assert (await resp.json())["code"] == "NOT_FOUND"
