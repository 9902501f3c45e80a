"""Tests for the HTTP surface."""

import asyncio
import json

import pytest

from tests.conftest import QUIET_PERIOD, make_client

WAIT = 2.0


class TestRootEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, app):
        async with make_client(app) as client:
            r = await client.get("/health")

        assert r.status_code == 200
        assert r.json() == {"status": "ok", "version": "0.1.0"}

    @pytest.mark.asyncio
    async def test_config_reflects_settings(self, app):
        async with make_client(app) as client:
            r = await client.get("/api/config")

        data = r.json()
        assert data["max_rounds"] == 3
        assert data["quiet_period_seconds"] == 0.1
        assert data["inline_responses_on_submit"] is False
        assert "register-participant" in data["tools"]


class TestToolEndpoints:
    @pytest.mark.asyncio
    async def test_connection_header_required(self, app):
        async with make_client(app) as client:
            r = await client.post("/api/tools/get-session-status", json={})

        assert r.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_tool_is_404(self, app):
        async with make_client(app) as client:
            r = await client.post(
                "/api/tools/shout", json={}, headers={"X-Connection-ID": "c1"}
            )

        assert r.status_code == 404
        assert r.json()["tool"] == "shout"

    @pytest.mark.asyncio
    async def test_list_tools(self, app):
        async with make_client(app) as client:
            r = await client.get("/api/tools")

        assert r.status_code == 200
        assert {t["name"] for t in r.json()} >= {"register-participant", "get-responses"}
        assert all("inputSchema" in t for t in r.json())

    @pytest.mark.asyncio
    async def test_concurrent_registrations_resolve_together(self, app):
        async with make_client(app) as client:

            async def register(connection_id: str, name: str):
                return await client.post(
                    "/api/tools/register-participant",
                    json={"name": name, "prompt": "X", "initial_response": f"{name} says"},
                    headers={"X-Connection-ID": connection_id},
                )

            first, second = await asyncio.wait_for(
                asyncio.gather(register("c1", "A"), register("c2", "B")), timeout=WAIT
            )

            submitted = await client.post(
                "/api/tools/submit-response",
                json={"response": "A again"},
                headers={"X-Connection-ID": "c1"},
            )

        assert first.status_code == 200
        assert first.json()["participantCount"] == 2
        assert first.json()["responses"] == second.json()["responses"]
        assert submitted.json()["currentRound"] == 2

    @pytest.mark.asyncio
    async def test_tool_errors_are_payloads(self, app):
        async with make_client(app) as client:
            r = await client.post(
                "/api/tools/get-responses", json={}, headers={"X-Connection-ID": "c9"}
            )

        assert r.status_code == 200
        assert r.json()["status"] == "error"
        assert r.json()["error"] == "SessionNotFound"

    @pytest.mark.asyncio
    async def test_round_limit_is_a_payload_not_a_status(self, app, coordinator):
        await asyncio.wait_for(coordinator.register("c1", "A", "X", "one"), timeout=WAIT)
        await coordinator.submit("c1", "two")
        await coordinator.submit("c1", "three")

        async with make_client(app) as client:
            r = await client.post(
                "/api/tools/submit-response",
                json={"response": "four"},
                headers={"X-Connection-ID": "c1"},
            )

        assert r.status_code == 200
        assert r.json()["error"] == "RoundLimitExceeded"
        assert r.json()["roundsRemaining"] == 0


class TestSessionEndpoints:
    @pytest.mark.asyncio
    async def test_list_and_get_sessions(self, app, coordinator):
        await asyncio.wait_for(coordinator.register("c1", "A", "X", "hi"), timeout=WAIT)

        async with make_client(app) as client:
            listing = await client.get("/api/sessions")
            filtered = await client.get("/api/sessions", params={"topic": "Y"})
            [summary] = listing.json()
            detail = await client.get(f"/api/sessions/{summary['session_id']}")

        assert summary["phase"] == "active"
        assert summary["participant_count"] == 1
        assert summary["response_count"] == 1
        assert summary["pending_waiters"] == 0
        assert filtered.json() == []
        assert detail.json()["participants"][0]["identity"] == "A"
        assert detail.json()["responses"][0]["text"] == "hi"

    @pytest.mark.asyncio
    async def test_unknown_session_is_404(self, app):
        async with make_client(app) as client:
            r = await client.get("/api/sessions/00000000-0000-0000-0000-000000000000")

        assert r.status_code == 404


class TestMessageEndpoint:
    @pytest.mark.asyncio
    async def test_session_id_required(self, app):
        async with make_client(app) as client:
            r = await client.post("/messages", json={"jsonrpc": "2.0", "id": 1, "method": "ping"})

        assert r.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_connection_is_404(self, app):
        async with make_client(app) as client:
            r = await client.post(
                "/messages",
                params={"sessionId": "missing"},
                json={"jsonrpc": "2.0", "id": 1, "method": "ping"},
            )

        assert r.status_code == 404

    @pytest.mark.asyncio
    async def test_reply_is_pushed_onto_stream(self, app, connection_manager):
        connection = await connection_manager.open()
        events = connection.events()

        endpoint = await asyncio.wait_for(anext(events), timeout=WAIT)
        assert endpoint["event"] == "endpoint"
        assert endpoint["data"] == f"/messages?sessionId={connection.connection_id}"

        async with make_client(app) as client:
            r = await client.post(
                "/messages",
                headers={"X-Session-ID": connection.connection_id},
                json={
                    "jsonrpc": "2.0",
                    "id": 1,
                    "method": "tools/call",
                    "params": {
                        "name": "register-participant",
                        "arguments": {"name": "A", "prompt": "X", "initial_response": "hi"},
                    },
                },
            )
        assert r.status_code == 202

        # The reply arrives once registration closes
        message = await asyncio.wait_for(anext(events), timeout=WAIT)
        assert message["event"] == "message"
        reply = json.loads(message["data"])
        payload = json.loads(reply["result"]["content"][0]["text"])
        assert payload["participantId"] == "A"
        assert payload["participantCount"] == 1

        await connection_manager.close(connection.connection_id)
        assert len(connection_manager) == 0
        assert connection.closed

    @pytest.mark.asyncio
    async def test_closing_stream_cancels_parked_call(
        self, app, coordinator, connection_manager
    ):
        connection = await connection_manager.open()

        async with make_client(app) as client:
            r = await client.post(
                "/messages",
                params={"sessionId": connection.connection_id},
                json={
                    "jsonrpc": "2.0",
                    "id": 1,
                    "method": "tools/call",
                    "params": {
                        "name": "register-participant",
                        "arguments": {"name": "A", "prompt": "X", "initial_response": "hi"},
                    },
                },
            )
        assert r.status_code == 202
        await asyncio.sleep(0.01)

        session = coordinator.session_for(connection.connection_id)
        [waiter] = session.pending["A"]
        assert not waiter.done()

        await connection_manager.close(connection.connection_id)
        await asyncio.sleep(0.01)

        assert waiter.cancelled()

        # Registration still closes for the rest of the session
        await asyncio.sleep(QUIET_PERIOD * 2)
        assert session.registration_open is False
        assert session.pending == {}
