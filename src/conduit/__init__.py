# Conduit - Package
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

"""Conduit - configuration and monitoring client for an OSC <-> MIDI bridge."""
from .activity_log import ActivityLogBuffer, LogEntry
from .models import Mapping, Settings, default_mapping
from .notes import name_to_note, note_to_name

__all__ = [
    "ActivityLogBuffer",
    "LogEntry",
    "Mapping",
    "Settings",
    "default_mapping",
    "name_to_note",
    "note_to_name",
]

__version__ = "1.0.0"
