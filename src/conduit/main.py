# Conduit - Application
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

import argparse
import asyncio
import functools
import threading

from .activity_log import ActivityLogBuffer
from .config import get_config_path, load_config
from .engine import WebSocketEngineClient
from .exceptions import EngineUnavailable
from .notify import Notifier
from .sync import EngineStatusStore, MappingStore, MidiDeviceStore, SettingsStore

SHUTDOWN_TIMEOUT_S = 5.0


class ConduitApp:
    """Wires the engine client, the local stores and the GUI together.

    All store state lives on one asyncio loop running in a background thread;
    the GUI thread hands work over with ``call`` (plain functions) and ``post``
    (coroutines).
    """

    def __init__(self, config, client=None):
        self.config = config
        self.notifier = Notifier()
        self.client = client or WebSocketEngineClient(config["engine_url"], timeout=config["call_timeout_s"])

        self.engine = EngineStatusStore(self.client, self.notifier)
        self.devices = MidiDeviceStore(self.client, self.notifier)
        self.settings = SettingsStore(self.client, self.notifier,
                                      debounce=config["settings_debounce_ms"] / 1000.0)
        self.mappings = MappingStore(self.client, self.notifier,
                                     debounce=config["mapping_debounce_ms"] / 1000.0)
        self.activity = ActivityLogBuffer(capacity=config["log_capacity"])

        self.loop = None
        self.loop_thread = None

    # --- event loop thread ---

    def start_loop(self):
        """Start the asyncio loop in a daemon thread"""
        self.loop = asyncio.new_event_loop()

        def runner():
            asyncio.set_event_loop(self.loop)
            self.loop.run_forever()

        self.loop_thread = threading.Thread(target=runner, daemon=True)
        self.loop_thread.start()

    def stop_loop(self):
        if self.loop is None:
            return
        self.loop.call_soon_threadsafe(self.loop.stop)
        self.loop_thread.join(timeout=SHUTDOWN_TIMEOUT_S)
        self.loop.close()
        self.loop = None

    def call(self, fn, *args, **kwargs):
        """Run a plain function on the loop thread"""
        self.loop.call_soon_threadsafe(functools.partial(fn, *args, **kwargs))

    def post(self, coro):
        """Schedule a coroutine on the loop thread; returns a concurrent Future"""
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        future.add_done_callback(self._report_failure)
        return future

    @staticmethod
    def _report_failure(future):
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            print(f"Error in background task: {error!r}")

    # --- engine session ---

    async def connect(self):
        """Connect to the engine and load everything; failures leave empty panels"""
        self.engine.attach()
        self.devices.attach()
        self.activity.attach(self.client)

        if not self.client.connected:
            try:
                await self.client.connect()
            except EngineUnavailable as e:
                print(f"Error connecting to engine: {e}")
                self.notifier.error("Engine not reachable")
                for store in (self.mappings, self.settings):
                    store.loading = False
                    store.notify_listeners()
                return False

        await asyncio.gather(
            self.engine.load(),
            self.settings.load(),
            self.mappings.load(),
            self.devices.refresh(),
        )
        return True

    async def shutdown(self):
        """Send edits still waiting for their debounce window, then disconnect"""
        await self.mappings.flush()
        await self.settings.flush()
        self.activity.detach()
        self.devices.detach()
        self.engine.detach()
        await self.client.close()

    def run(self):
        from .gui.main_window import MainWindow

        window = MainWindow(self)
        self.start_loop()
        self.post(self.connect())
        try:
            window.run()
        finally:
            try:
                self.post(self.shutdown()).result(timeout=SHUTDOWN_TIMEOUT_S)
            except Exception as e:
                print(f"Error during shutdown: {e!r}")
            self.stop_loop()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Conduit - OSC <-> MIDI bridge client")
    parser.add_argument("--config", default=None,
                        help=f"Config file (default: {get_config_path()})")
    parser.add_argument("--engine-url", default=None, help="Engine websocket URL")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.engine_url:
        config["engine_url"] = args.engine_url

    app = ConduitApp(config)
    app.run()


if __name__ == "__main__":
    main()
