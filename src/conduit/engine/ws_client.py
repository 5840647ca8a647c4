# Conduit - WebSocket Engine Transport
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

"""JSON-over-websocket transport to the bridge engine.

Frames (one JSON object per text frame):

    client -> engine   {"type": "call", "id": 7, "command": "get_mappings", "args": {}}
    engine -> client   {"type": "result", "id": 7, "payload": [...]}
                       {"type": "error", "id": 7, "payload": {"error": "..."}}
                       {"type": "event", "event": "mapping-activity", "payload": {...}}
"""

from __future__ import annotations

import asyncio
import itertools
import json
from typing import Any, Dict, Optional, Tuple

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..exceptions import EngineCallError, EngineUnavailable
from .client import EngineClient


class WebSocketEngineClient(EngineClient):
    def __init__(self, url: str = "ws://127.0.0.1:9870", timeout: float = 5.0):
        super().__init__()
        self.url = url
        self.timeout = timeout
        self._ws = None
        self._reader: Optional[asyncio.Task] = None
        self._ids = itertools.count(1)
        self._pending: Dict[int, Tuple[str, asyncio.Future]] = {}

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def connect(self) -> None:
        """Open the websocket and start reading responses and events"""
        try:
            self._ws = await websockets.connect(self.url, open_timeout=self.timeout)
        except (OSError, WebSocketException, asyncio.TimeoutError) as e:
            raise EngineUnavailable(f"Could not connect to engine at {self.url}: {e}") from e
        self._reader = asyncio.create_task(self._read_loop())
        print(f"Connected to engine at {self.url}")

    async def close(self) -> None:
        ws, self._ws = self._ws, None
        if ws is not None:
            await ws.close()
        if self._reader is not None:
            await self._reader
            self._reader = None

    async def call(self, command: str, **args) -> Any:
        ws = self._ws
        if ws is None:
            raise EngineUnavailable(f"{command}: not connected to engine")

        req_id = next(self._ids)
        future = asyncio.get_running_loop().create_future()
        self._pending[req_id] = (command, future)
        try:
            await ws.send(json.dumps({"type": "call", "id": req_id, "command": command, "args": args}))
            return await asyncio.wait_for(future, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise EngineUnavailable(f"{command}: no answer from engine within {self.timeout}s") from None
        except ConnectionClosed as e:
            raise EngineUnavailable(f"{command}: connection to engine closed ({e})") from e
        finally:
            self._pending.pop(req_id, None)

    async def _read_loop(self) -> None:
        ws = self._ws
        try:
            async for raw in ws:
                try:
                    self._handle_frame(raw)
                except Exception as e:
                    # A bad frame must not take the connection down with it
                    print(f"Error handling frame from engine: {e!r}")
        except ConnectionClosed as e:
            print(f"Engine connection lost: {e}")
        finally:
            if self._ws is ws:
                self._ws = None
            self._fail_pending(EngineUnavailable("connection to engine closed"))

    def _handle_frame(self, raw) -> None:
        try:
            message = json.loads(raw)
        except ValueError as e:
            print(f"Ignoring malformed frame from engine: {e}")
            return
        if not isinstance(message, dict):
            print(f"Ignoring unexpected frame from engine: {raw!r}")
            return

        kind = message.get("type")
        if kind == "event":
            event = message.get("event")
            if not isinstance(event, str):
                print(f"Ignoring event frame without a name: {raw!r}")
                return
            self.dispatch(event, message.get("payload"))
            return

        req_id = message.get("id")
        if isinstance(req_id, bool) or not isinstance(req_id, int):
            print(f"Ignoring frame with invalid id: {raw!r}")
            return
        pending = self._pending.get(req_id)
        if pending is None:
            # Answer to a call that already timed out
            return
        command, future = pending
        if future.done():
            return
        if kind == "result":
            future.set_result(message.get("payload"))
        elif kind == "error":
            payload = message.get("payload")
            if not isinstance(payload, dict):
                print(f"Malformed error frame from engine: {raw!r}")
                future.set_exception(EngineCallError(command, "malformed error response"))
                return
            future.set_exception(EngineCallError(command, str(payload.get("error") or "unknown error")))
        else:
            print(f"Ignoring frame of unknown type {kind!r}")

    def _fail_pending(self, error: Exception) -> None:
        for _, future in list(self._pending.values()):
            if not future.done():
                future.set_exception(error)
