import uuid

import pytest
from unittest.mock import AsyncMock, patch

from app.core.errors import UpstreamError
from app.models.chat_message import ChatMessage
from app.models.user import Role


pytestmark = pytest.mark.asyncio


async def _goal(client, ic, headers):
    resp = await client.post(
        "/api/goals",
        headers=headers,
        json={
            "userId": str(ic.id),
            "weekStart": "2024-06-03",
            "weekEnd": "2024-06-09",
            "goalsContent": "<p>Ship <b>v2</b></p>",
        },
    )
    return resp.json()["goal"]["id"]


async def test_chat_round_trip_keeps_history(client, create_user, auth_header_factory):
    ic = await create_user(Role.IC)
    headers = await auth_header_factory(ic)
    goal_id = await _goal(client, ic, headers)

    llm = AsyncMock(side_effect=["You shipped v2.", "Docs are next."])
    with patch("app.services.chat.send_llm_request", llm):
        first = await client.post(
            "/api/chat/results", headers=headers,
            json={"goalId": goal_id, "userId": str(ic.id), "message": "What did I do?"},
        )
        second = await client.post(
            "/api/chat/results", headers=headers,
            json={"goalId": goal_id, "userId": str(ic.id), "message": "And next?"},
        )

    assert first.status_code == 200, first.text
    assert first.json()["success"] is True
    assert first.json()["message"]["role"] == "assistant"
    assert first.json()["message"]["content"] == "You shipped v2."

    # Second prompt carries the whole conversation, including the new question
    provider, model, prompt = llm.await_args_list[1].args
    assert "Goals for this week:\nShip v2\n" in prompt
    assert "User: What did I do?\nAssistant: You shipped v2.\nUser: And next?\n" in prompt
    assert prompt.count("And next?") == 2

    history = await client.get(f"/api/chat/results/{goal_id}", headers=headers)
    assert history.status_code == 200
    assert [(m["role"], m["content"]) for m in history.json()["messages"]] == [
        ("user", "What did I do?"),
        ("assistant", "You shipped v2."),
        ("user", "And next?"),
        ("assistant", "Docs are next."),
    ]


async def test_provider_exhaustion_returns_502_and_keeps_question(client, create_user, auth_header_factory):
    ic = await create_user(Role.IC)
    headers = await auth_header_factory(ic)
    goal_id = await _goal(client, ic, headers)

    failing = AsyncMock(side_effect=UpstreamError("Anthropic request failed after 3 attempts: timeout"))
    with patch("app.services.chat.send_llm_request", failing):
        resp = await client.post(
            "/api/chat/results", headers=headers,
            json={"goalId": goal_id, "userId": str(ic.id), "message": "Hello?"},
        )

    assert resp.status_code == 502
    assert "failed after 3 attempts" in resp.json()["error"]
    rows = await ChatMessage.filter(goal_id=goal_id)
    assert [(r.role.value, r.content) for r in rows] == [("user", "Hello?")]


async def test_chat_for_missing_goal(client, create_user, auth_header_factory):
    ic = await create_user(Role.IC)
    headers = await auth_header_factory(ic)

    with patch("app.services.chat.send_llm_request", AsyncMock()) as llm:
        resp = await client.post(
            "/api/chat/results", headers=headers,
            json={"goalId": str(uuid.uuid4()), "userId": str(ic.id), "message": "Hi"},
        )

    assert resp.status_code == 404
    assert resp.json() == {"error": "Goal not found"}
    llm.assert_not_awaited()


async def test_chat_as_another_user_is_rejected(client, create_user, auth_header_factory):
    ic = await create_user(Role.IC)
    other = await create_user(Role.IC)
    headers = await auth_header_factory(ic)
    goal_id = await _goal(client, ic, headers)

    resp = await client.post(
        "/api/chat/results", headers=headers,
        json={"goalId": goal_id, "userId": str(other.id), "message": "Hi"},
    )
    assert resp.status_code == 403
    assert resp.json() == {"error": "Unauthorized to send messages as this user"}


async def test_empty_history(client, create_user, auth_header_factory):
    ic = await create_user(Role.IC)
    headers = await auth_header_factory(ic)
    goal_id = await _goal(client, ic, headers)

    resp = await client.get(f"/api/chat/results/{goal_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"messages": []}
