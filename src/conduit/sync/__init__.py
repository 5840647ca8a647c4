# Conduit - State Sync
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

"""Local state kept in step with the engine (optimistic edits, debounced commits)."""
from .debounce import COMMITTING, IDLE, PENDING, DebouncedCommitter
from .engine import EngineStatusStore, MidiDeviceStore
from .mappings import MAPPING_DEBOUNCE_S, MappingStore
from .settings import SETTINGS_DEBOUNCE_S, SettingsStore

__all__ = [
    "COMMITTING",
    "IDLE",
    "PENDING",
    "DebouncedCommitter",
    "EngineStatusStore",
    "MidiDeviceStore",
    "MAPPING_DEBOUNCE_S",
    "MappingStore",
    "SETTINGS_DEBOUNCE_S",
    "SettingsStore",
]
