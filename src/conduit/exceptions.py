# Conduit - Exceptions
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


class ConduitError(Exception):
    """Base exception for the Conduit client."""


class ConfigError(ConduitError):
    """Client configuration could not be read or written."""


class EngineError(ConduitError):
    """A call to the bridge engine failed."""


class EngineCallError(EngineError):
    """The engine answered a call with an error."""

    def __init__(self, command, message):
        super().__init__(f"{command}: {message}")
        self.command = command
        self.message = message


class EngineUnavailable(EngineError):
    """The engine could not be reached, timed out, or dropped the connection."""
