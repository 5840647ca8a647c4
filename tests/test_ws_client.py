# Conduit - WebSocket Engine Client Tests
# Copyright (C) 2025 maigre - Hemisphere Project
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

import asyncio
import contextlib
import json
import socket

import pytest
import websockets

from conduit.engine import ENGINE_STATUS, WebSocketEngineClient
from conduit.exceptions import EngineCallError, EngineUnavailable
from conduit.models import Settings, default_mapping


def _free_port() -> int:
    s = socket.socket()
    s.bind(("127.0.0.1", 0))
    addr, port = s.getsockname()
    s.close()
    return port


class ScriptedEngine:
    """Answers a few commands the way the bridge engine does"""

    def __init__(self):
        self.received = []

    async def handler(self, ws, *_path):
        async for raw in ws:
            msg = json.loads(raw)
            self.received.append(msg)
            command = msg["command"]
            if command == "get_engine_status":
                await ws.send(json.dumps({"type": "event", "event": ENGINE_STATUS, "payload": {"running": True}}))
                await ws.send(json.dumps({"type": "result", "id": msg["id"], "payload": {"running": True}}))
            elif command == "add_mapping":
                await ws.send(json.dumps({"type": "result", "id": msg["id"], "payload": "m42"}))
            elif command == "delete_mapping":
                error = f"Mapping not found: {msg['args']['id']}"
                await ws.send(json.dumps({"type": "error", "id": msg["id"], "payload": {"error": error}}))
            elif command == "get_mappings":
                await ws.send(json.dumps({"type": "result", "id": msg["id"], "payload": [{"id": "x"}]}))
            elif command == "stop_engine":
                await ws.close()
                return
            elif command == "get_settings":
                # Garbage first, then the real answer
                await ws.send(json.dumps({"type": "result", "id": [msg["id"]], "payload": {}}))
                await ws.send(json.dumps({"type": "result", "id": {"n": msg["id"]}, "payload": {}}))
                await ws.send(json.dumps({"type": "event", "event": ["engine-status"], "payload": {}}))
                await ws.send(json.dumps({"type": "result", "id": msg["id"], "payload": Settings().to_dict()}))
            elif command == "list_midi_inputs":
                await ws.send(json.dumps({"type": "error", "id": msg["id"], "payload": ["not", "a", "dict"]}))
            # start_engine is never answered


@contextlib.asynccontextmanager
async def running_engine(timeout=2.0):
    engine = ScriptedEngine()
    port = _free_port()
    async with websockets.serve(engine.handler, "127.0.0.1", port):
        client = WebSocketEngineClient(f"ws://127.0.0.1:{port}", timeout=timeout)
        await client.connect()
        try:
            yield engine, client
        finally:
            await client.close()


@pytest.mark.asyncio
async def test_call_result_and_events():
    async with running_engine() as (engine, client):
        events = []
        client.subscribe(ENGINE_STATUS, events.append)

        status = await client.get_engine_status()

        assert status.running is True
        assert events == [{"running": True}]
        assert engine.received[0]["type"] == "call"
        assert engine.received[0]["command"] == "get_engine_status"


@pytest.mark.asyncio
async def test_add_mapping_sends_wire_format():
    async with running_engine() as (engine, client):
        assert await client.add_mapping(default_mapping()) == "m42"
        assert engine.received[0]["args"] == {"mapping": default_mapping().to_dict()}


@pytest.mark.asyncio
async def test_error_frame_raises_call_error():
    async with running_engine() as (_, client):
        with pytest.raises(EngineCallError) as info:
            await client.delete_mapping("gone")
        assert info.value.command == "delete_mapping"
        assert info.value.message == "Mapping not found: gone"


@pytest.mark.asyncio
async def test_malformed_payload_raises_call_error():
    async with running_engine() as (_, client):
        with pytest.raises(EngineCallError):
            await client.get_mappings()


@pytest.mark.asyncio
async def test_unanswered_call_times_out():
    async with running_engine(timeout=0.2) as (_, client):
        with pytest.raises(EngineUnavailable):
            await client.start_engine()
        # The connection is still usable afterwards
        assert await client.add_mapping(default_mapping()) == "m42"


@pytest.mark.asyncio
async def test_dropped_connection_fails_pending_call():
    async with running_engine() as (_, client):
        with pytest.raises(EngineUnavailable):
            await client.stop_engine()
        await asyncio.sleep(0.05)
        assert not client.connected
        with pytest.raises(EngineUnavailable):
            await client.get_engine_status()


@pytest.mark.asyncio
async def test_connect_to_nothing():
    client = WebSocketEngineClient(f"ws://127.0.0.1:{_free_port()}", timeout=1.0)
    with pytest.raises(EngineUnavailable):
        await client.connect()
    assert not client.connected


@pytest.mark.asyncio
async def test_call_before_connect():
    client = WebSocketEngineClient()
    with pytest.raises(EngineUnavailable):
        await client.get_settings()


@pytest.mark.asyncio
async def test_frames_with_bad_ids_are_skipped():
    async with running_engine() as (_, client):
        assert await client.get_settings() == Settings()
        assert client.connected
        assert await client.add_mapping(default_mapping()) == "m42"


@pytest.mark.asyncio
async def test_error_frame_without_object_payload():
    async with running_engine() as (_, client):
        with pytest.raises(EngineCallError) as info:
            await client.list_midi_inputs()
        assert info.value.command == "list_midi_inputs"
        assert client.connected
