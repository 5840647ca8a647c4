# Conduit - Engine Status and MIDI Devices
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

from ..engine.client import ENGINE_STATUS, MIDI_DEVICES_CHANGED
from ..exceptions import EngineError
from ..models import EngineStatus
from .store import Store


class EngineStatusStore(Store):
    """Tracks whether the engine is running.

    Follows ``engine-status`` events; start/stop are sent straight away and the
    local status only changes once the engine has accepted them.
    """

    def __init__(self, client, notifier):
        super().__init__()
        self.client = client
        self.notifier = notifier
        self.status = EngineStatus(running=False)
        self._unsubscribe = None

    @property
    def running(self):
        return self.status.running

    def attach(self):
        if self._unsubscribe is None:
            self._unsubscribe = self.client.subscribe(ENGINE_STATUS, self._on_status_event)

    def detach(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def load(self):
        try:
            status = await self.client.get_engine_status()
        except EngineError as e:
            print(f"Error getting engine status: {e}")
            self.notifier.error("Failed to get engine status")
            return False
        self._set(status)
        return True

    async def start(self):
        try:
            await self.client.start_engine()
        except EngineError as e:
            print(f"Error starting engine: {e}")
            self.notifier.error(f"Failed to start engine: {getattr(e, 'message', e)}")
            return False
        self._set(EngineStatus(running=True))
        print("Engine started")
        return True

    async def stop(self):
        try:
            await self.client.stop_engine()
        except EngineError as e:
            print(f"Error stopping engine: {e}")
            self.notifier.error(f"Failed to stop engine: {getattr(e, 'message', e)}")
            return False
        self._set(EngineStatus(running=False))
        print("Engine stopped")
        return True

    def _on_status_event(self, payload):
        try:
            status = EngineStatus.from_dict(payload)
        except (KeyError, TypeError, ValueError) as e:
            print(f"Ignoring malformed engine-status event: {e!r}")
            return
        if status.error:
            self.notifier.error(status.error)
        self._set(status)

    def _set(self, status):
        self.status = status
        self.notify_listeners()


class MidiDeviceStore(Store):
    """MIDI input/output ports as enumerated by the engine"""

    def __init__(self, client, notifier):
        super().__init__()
        self.client = client
        self.notifier = notifier
        self.inputs = []
        self.outputs = []
        self._unsubscribe = None
        self._refresh_task = None

    def attach(self):
        if self._unsubscribe is None:
            self._unsubscribe = self.client.subscribe(MIDI_DEVICES_CHANGED, self._on_devices_changed)

    def detach(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def refresh(self):
        try:
            inputs, outputs = await asyncio.gather(
                self.client.list_midi_inputs(),
                self.client.list_midi_outputs(),
            )
        except EngineError as e:
            print(f"Error listing MIDI devices: {e}")
            self.notifier.error("Failed to list MIDI devices")
            return False
        self.inputs = inputs
        self.outputs = outputs
        self.notify_listeners()
        return True

    def input_names(self):
        return [p.name for p in self.inputs]

    def output_names(self):
        return [p.name for p in self.outputs]

    def _on_devices_changed(self, payload=None):
        self._refresh_task = asyncio.get_running_loop().create_task(self.refresh())
