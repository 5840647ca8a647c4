# Conduit - Settings Store
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

from ..exceptions import EngineError
from .debounce import DebouncedCommitter
from .store import Store

SETTINGS_DEBOUNCE_S = 0.5
SETTINGS_KEY = "settings"


class SettingsStore(Store):
    """The engine's settings singleton, edited locally and committed after 500 ms of quiet"""

    def __init__(self, client, notifier, debounce=SETTINGS_DEBOUNCE_S):
        super().__init__()
        self.client = client
        self.notifier = notifier
        self.settings = None
        self.loading = True
        self.committer = DebouncedCommitter(self._commit, debounce, on_error=self._on_commit_error)

    async def load(self):
        try:
            settings = await self.client.get_settings()
            # An edit still waiting to be sent wins over what the engine has
            if self.settings is None or self.committer.is_idle():
                self.settings = settings
            print("Settings loaded")
            return True
        except EngineError as e:
            # The settings panel stays empty until the next successful load
            print(f"Error loading settings: {e}")
            self.notifier.error("Failed to load settings")
            return False
        finally:
            self.loading = False
            self.notify_listeners()

    def update(self, settings):
        self.settings = settings
        self.notify_listeners()
        self.committer.submit(SETTINGS_KEY, settings)

    def edit(self, **changes):
        if self.settings is None:
            raise RuntimeError("Settings have not been loaded")
        updated = self.settings.with_changes(**changes)
        self.update(updated)
        return updated

    async def flush(self):
        await self.committer.flush()

    async def _commit(self, key, settings):
        await self.client.update_settings(settings)

    def _on_commit_error(self, key, settings, error):
        print(f"Error saving settings: {error}")
        self.notifier.error("Failed to save settings")
