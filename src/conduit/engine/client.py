# Conduit - Engine Client
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

from __future__ import annotations

from typing import Any, Callable, Dict, List

from ..exceptions import EngineCallError
from ..models import EngineStatus, Mapping, MidiPort, Settings

# Events pushed by the engine
ENGINE_STATUS = "engine-status"
MIDI_DEVICES_CHANGED = "midi-devices-changed"
MAPPING_ACTIVITY = "mapping-activity"
UNMATCHED_MESSAGE = "unmatched-message"


def _decode(command, parse, payload):
    """Parse a response payload, reporting malformed data as a failed call"""
    try:
        return parse(payload)
    except (KeyError, TypeError, ValueError) as e:
        raise EngineCallError(command, f"malformed response: {e!r}") from e


def _ports(items):
    return [MidiPort.from_dict(p) for p in items]


class EngineClient:
    """Request/response and event boundary with the bridge engine.

    Subclasses provide the transport by implementing ``call``; everything
    else (typed commands, event fan-out) lives here. Event handlers receive the
    raw JSON payload and are invoked on the event loop, in arrival order.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Callable[[Any], None]]] = {}

    @property
    def connected(self) -> bool:
        return True

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def call(self, command: str, **args) -> Any:
        raise NotImplementedError

    # --- events ---

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> Callable[[], None]:
        """Register a handler for one event; returns a function that unsubscribes it"""
        self._handlers.setdefault(event, []).append(handler)

        def unsubscribe():
            handlers = self._handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)
        return unsubscribe

    def dispatch(self, event: str, payload: Any = None) -> None:
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(payload)
            except Exception as e:
                # One broken handler must not starve the others
                print(f"Error in '{event}' handler: {e}")

    # --- settings ---

    async def get_settings(self) -> Settings:
        payload = await self.call("get_settings")
        return _decode("get_settings", Settings.from_dict, payload)

    async def update_settings(self, settings: Settings) -> None:
        await self.call("update_settings", settings=settings.to_dict())

    # --- mappings ---

    async def get_mappings(self) -> List[Mapping]:
        payload = await self.call("get_mappings")
        return _decode("get_mappings", lambda items: [Mapping.from_dict(m) for m in items], payload)

    async def add_mapping(self, mapping: Mapping) -> str:
        return str(await self.call("add_mapping", mapping=mapping.to_dict()))

    async def update_mapping(self, mapping: Mapping) -> None:
        await self.call("update_mapping", mapping=mapping.to_dict())

    async def delete_mapping(self, mapping_id: str) -> None:
        await self.call("delete_mapping", id=mapping_id)

    async def reorder_mappings(self, ids: List[str]) -> None:
        await self.call("reorder_mappings", ids=list(ids))

    # --- MIDI devices ---

    async def list_midi_inputs(self) -> List[MidiPort]:
        payload = await self.call("list_midi_inputs")
        return _decode("list_midi_inputs", _ports, payload)

    async def list_midi_outputs(self) -> List[MidiPort]:
        payload = await self.call("list_midi_outputs")
        return _decode("list_midi_outputs", _ports, payload)

    # --- engine lifecycle ---

    async def get_engine_status(self) -> EngineStatus:
        payload = await self.call("get_engine_status")
        return _decode("get_engine_status", EngineStatus.from_dict, payload)

    async def start_engine(self) -> None:
        await self.call("start_engine")

    async def stop_engine(self) -> None:
        await self.call("stop_engine")
