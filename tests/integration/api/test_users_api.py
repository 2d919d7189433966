"""Integration tests for the users API."""

import re

import pytest
from httpx import AsyncClient

from flowtokens.core.hooks import HookEvent
from flowtokens.domain.entities import AbortHookException

TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]{12}$")


@pytest.mark.asyncio
async def test_register_user_issues_token(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/users", json={"email": "ada@example.com", "display_name": "Ada"}
    )

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "ada@example.com"
    assert body["display_name"] == "Ada"
    assert TOKEN_RE.match(body["meta"]["flow_rand_tok"])


@pytest.mark.asyncio
async def test_get_user_includes_token(client: AsyncClient) -> None:
    created = (await client.post("/api/v1/users", json={"email": "bo@example.com"})).json()

    response = await client.get(f"/api/v1/users/{created['id']}")

    assert response.status_code == 200
    assert response.json()["meta"]["flow_rand_tok"] == created["meta"]["flow_rand_tok"]


@pytest.mark.asyncio
async def test_get_unknown_user(client: AsyncClient) -> None:
    response = await client.get("/api/v1/users/999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(client: AsyncClient) -> None:
    await client.post("/api/v1/users", json={"email": "dup@example.com"})

    response = await client.post("/api/v1/users", json={"email": "dup@example.com"})

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_invalid_email_rejected(client: AsyncClient) -> None:
    response = await client.post("/api/v1/users", json={"email": "not-an-email"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_keeps_token(client: AsyncClient) -> None:
    created = (await client.post("/api/v1/users", json={"email": "cy@example.com"})).json()

    response = await client.patch(
        f"/api/v1/users/{created['id']}", json={"display_name": "Cyrus"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["display_name"] == "Cyrus"
    assert body["meta"]["flow_rand_tok"] == created["meta"]["flow_rand_tok"]


@pytest.mark.asyncio
async def test_update_fills_in_missing_token(client: AsyncClient, make_user) -> None:
    """Users created before tokens existed get one on their next update."""
    user_id = await make_user(email="legacy@example.com")
    assert (await client.get(f"/api/v1/users/{user_id}")).json()["meta"]["flow_rand_tok"] is None

    response = await client.patch(f"/api/v1/users/{user_id}", json={"display_name": "Legacy"})

    assert response.status_code == 200
    assert TOKEN_RE.match(response.json()["meta"]["flow_rand_tok"])


@pytest.mark.asyncio
async def test_update_email_conflict(client: AsyncClient) -> None:
    await client.post("/api/v1/users", json={"email": "one@example.com"})
    second = (await client.post("/api/v1/users", json={"email": "two@example.com"})).json()

    response = await client.patch(
        f"/api/v1/users/{second['id']}", json={"email": "one@example.com"}
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_update_unknown_user(client: AsyncClient) -> None:
    response = await client.patch("/api/v1/users/999", json={"display_name": "Nobody"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_before_create_hook_can_abort(app, client: AsyncClient) -> None:
    @app.state.hook.on_user_before_create()
    async def block_domain(event, data, context):
        if data["email"].endswith("@blocked.com"):
            raise AbortHookException("Domain not allowed", 403)
        return data

    response = await client.post("/api/v1/users", json={"email": "eve@blocked.com"})

    assert response.status_code == 403
    assert response.json()["detail"] == "Domain not allowed"


@pytest.mark.asyncio
async def test_before_create_hook_can_modify_data(app, client: AsyncClient) -> None:
    @app.state.hook.on_user_before_create()
    async def default_name(event, data, context):
        return {**data, "display_name": data["display_name"] or "Anonymous"}

    response = await client.post("/api/v1/users", json={"email": "anon@example.com"})

    assert response.json()["display_name"] == "Anonymous"


@pytest.mark.asyncio
async def test_after_create_hooks_see_token(app, client: AsyncClient) -> None:
    seen = []

    @app.state.hook.on_user_after_create()
    async def welcome(event, data, context):
        seen.append(data["flow_rand_tok"])

    response = await client.post("/api/v1/users", json={"email": "wel@example.com"})

    assert seen == [response.json()["meta"]["flow_rand_tok"]]


@pytest.mark.asyncio
async def test_failed_token_hook_returns_500(app, client: AsyncClient) -> None:
    app.state.token_handler.issuer.max_attempts = 1
    app.state.token_handler.issuer.generator.generate = lambda num_bytes=None: "sameToken123"

    first = await client.post("/api/v1/users", json={"email": "first@example.com"})
    second = await client.post("/api/v1/users", json={"email": "second@example.com"})

    assert first.status_code == 201
    assert second.status_code == 500


@pytest.mark.asyncio
async def test_hook_events_fired(app, client: AsyncClient) -> None:
    fired = []

    for event in (HookEvent.ON_USER_BEFORE_UPDATE, HookEvent.ON_USER_AFTER_UPDATE):
        async def record(event, data, context):
            fired.append(event)

        app.state.hook_registry.register(event, record)

    created = (await client.post("/api/v1/users", json={"email": "ev@example.com"})).json()
    await client.patch(f"/api/v1/users/{created['id']}", json={"display_name": "Ev"})

    assert fired == [HookEvent.ON_USER_BEFORE_UPDATE, HookEvent.ON_USER_AFTER_UPDATE]


@pytest.mark.asyncio
async def test_before_create_hook_may_return_partial_data(app, client: AsyncClient) -> None:
    @app.state.hook.on_user_before_create()
    async def rename(event, data, context):
        return {"display_name": "Renamed"}

    response = await client.post(
        "/api/v1/users", json={"email": "partial@example.com", "display_name": "Original"}
    )

    assert response.status_code == 201
    assert response.json()["email"] == "partial@example.com"
    assert response.json()["display_name"] == "Renamed"


@pytest.mark.asyncio
async def test_hook_context_carries_correlation_id(app, client: AsyncClient) -> None:
    seen = []

    @app.state.hook.on_user_after_create()
    async def record(event, data, context):
        seen.append(context.request_id)

    await client.post(
        "/api/v1/users",
        json={"email": "cid@example.com"},
        headers={"X-Correlation-ID": "cid_fromclient"},
    )

    assert seen == ["cid_fromclient"]
