# Conduit - Test Fixtures
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
import copy

import pytest

from conduit.engine.client import EngineClient
from conduit.exceptions import EngineCallError, EngineUnavailable
from conduit.models import Settings
from conduit.notify import Notifier


class FakeEngine(EngineClient):
    """In-memory engine: answers calls from plain dicts and records every call.

    ``fail`` maps a command to an error message, ``delay`` maps a command to a
    number of seconds to wait before answering.
    """

    def __init__(self):
        super().__init__()
        self.mappings = []
        self.settings = Settings().to_dict()
        self.status = {"running": False}
        self.inputs = [{"name": "IAC Bus 1", "index": 0}]
        self.outputs = [{"name": "IAC Bus 1", "index": 0}, {"name": "USB Midi", "index": 1}]
        self.calls = []
        self.fail = {}
        self.delay = {}
        self.reachable = True
        self.is_connected = False
        self._next_id = 1

    @property
    def connected(self):
        return self.is_connected

    async def connect(self):
        if not self.reachable:
            raise EngineUnavailable("Could not connect to engine")
        self.is_connected = True

    async def close(self):
        self.is_connected = False

    async def call(self, command, **args):
        self.calls.append((command, copy.deepcopy(args)))
        if command in self.delay:
            await asyncio.sleep(self.delay[command])
        if command in self.fail:
            raise EngineCallError(command, self.fail[command])
        return getattr(self, f"_{command}")(**args)

    def sent(self, command):
        """Arguments of every call of one command, in order"""
        return [args for name, args in self.calls if name == command]

    # --- command handlers ---

    def _get_settings(self):
        return copy.deepcopy(self.settings)

    def _update_settings(self, settings):
        self.settings = settings

    def _get_mappings(self):
        return copy.deepcopy(self.mappings)

    def _add_mapping(self, mapping):
        mapping = dict(mapping, id=f"m{self._next_id}")
        self._next_id += 1
        self.mappings.append(mapping)
        return mapping["id"]

    def _update_mapping(self, mapping):
        for i, current in enumerate(self.mappings):
            if current["id"] == mapping["id"]:
                self.mappings[i] = mapping
                return None
        raise EngineCallError("update_mapping", f"Mapping not found: {mapping['id']}")

    def _delete_mapping(self, id):
        self.mappings = [m for m in self.mappings if m["id"] != id]

    def _reorder_mappings(self, ids):
        by_id = {m["id"]: m for m in self.mappings}
        self.mappings = [by_id[i] for i in ids]

    def _list_midi_inputs(self):
        return copy.deepcopy(self.inputs)

    def _list_midi_outputs(self):
        return copy.deepcopy(self.outputs)

    def _get_engine_status(self):
        return dict(self.status)

    def _start_engine(self):
        self.status = {"running": True}

    def _stop_engine(self):
        self.status = {"running": False}


class RecordingNotifier(Notifier):
    def __init__(self):
        super().__init__()
        self.messages = []
        self.add_listener(lambda level, message: self.messages.append((level, message)))

    def errors(self):
        return [message for level, message in self.messages if level == "error"]


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def notifier():
    return RecordingNotifier()
