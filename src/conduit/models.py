# Conduit - Data Models
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

"""Mapping, settings and engine event models.

Field names match the engine's JSON payloads verbatim; ``to_dict`` and
``from_dict`` convert between the two. Mappings and settings are frozen, every
edit returns a new value.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Direction(str, Enum):
    OSC_TO_MIDI = "osc_to_midi"
    MIDI_TO_OSC = "midi_to_osc"


class MidiMessageType(str, Enum):
    NOTE_ON = "note_on"
    NOTE_OFF = "note_off"
    CC = "cc"
    PROGRAM_CHANGE = "program_change"


class OscArgType(str, Enum):
    INT = "int"
    FLOAT = "float"
    STRING = "string"


class OscListenProtocol(str, Enum):
    UDP = "udp"
    TCP = "tcp"
    BOTH = "both"


class OscSendProtocol(str, Enum):
    UDP = "udp"
    TCP = "tcp"


class Protocol(str, Enum):
    OSC = "osc"
    MIDI = "midi"


@dataclass(frozen=True)
class ValueSource:
    """Where a MIDI output takes its velocity/value from.

    ``static`` sends ``value`` as-is, ``osc_arg`` forwards the incoming OSC
    argument at ``index``.
    """

    STATIC = "static"
    OSC_ARG = "osc_arg"

    type: str = STATIC
    value: int = 127
    index: int = 0

    @classmethod
    def static(cls, value: int) -> "ValueSource":
        return cls(type=cls.STATIC, value=value)

    @classmethod
    def osc_arg(cls, index: int) -> "ValueSource":
        return cls(type=cls.OSC_ARG, index=index)

    def to_dict(self) -> Dict[str, Any]:
        if self.type == self.OSC_ARG:
            return {"type": self.OSC_ARG, "index": self.index}
        return {"type": self.STATIC, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValueSource":
        kind = data.get("type")
        if kind == cls.OSC_ARG:
            return cls.osc_arg(int(data["index"]))
        if kind == cls.STATIC:
            return cls.static(int(data["value"]))
        raise ValueError(f"Unknown value source: {kind!r}")


@dataclass(frozen=True)
class OscArgSource:
    """Where an outgoing OSC argument takes its value from"""

    STATIC = "static"
    MIDI_VALUE = "midi_value"
    MIDI_NOTE = "midi_note"
    KINDS = (STATIC, MIDI_VALUE, MIDI_NOTE)

    type: str = MIDI_VALUE
    value: Any = None

    @classmethod
    def static(cls, value) -> "OscArgSource":
        return cls(type=cls.STATIC, value=value)

    @classmethod
    def midi_value(cls) -> "OscArgSource":
        return cls(type=cls.MIDI_VALUE)

    @classmethod
    def midi_note(cls) -> "OscArgSource":
        return cls(type=cls.MIDI_NOTE)

    def to_dict(self) -> Dict[str, Any]:
        if self.type == self.STATIC:
            return {"type": self.STATIC, "value": self.value}
        return {"type": self.type}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OscArgSource":
        kind = data.get("type")
        if kind == cls.STATIC:
            return cls.static(data.get("value"))
        if kind in (cls.MIDI_VALUE, cls.MIDI_NOTE):
            return cls(type=kind)
        raise ValueError(f"Unknown OSC argument source: {kind!r}")


@dataclass(frozen=True)
class OscArgDef:
    """One outgoing OSC argument; position in the list is the wire order"""

    type: OscArgType = OscArgType.FLOAT
    source: OscArgSource = field(default_factory=OscArgSource.midi_value)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "source": self.source.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OscArgDef":
        return cls(type=OscArgType(data["type"]), source=OscArgSource.from_dict(data["source"]))


def _static_seed(arg_type: OscArgType):
    return "" if arg_type == OscArgType.STRING else 0


# Fields that are live for each direction: (input group, output group)
_ACTIVE_FIELDS = {
    Direction.OSC_TO_MIDI: (
        ("osc_address",),
        ("midi_message_type", "midi_channel", "midi_note_or_cc", "midi_velocity_or_value"),
    ),
    Direction.MIDI_TO_OSC: (
        ("midi_message_type", "midi_channel", "midi_note_or_cc", "midi_input_velocity"),
        ("osc_address", "osc_args"),
    ),
}


@dataclass(frozen=True)
class Mapping:
    """One routing rule between an OSC message shape and a MIDI message shape.

    ``direction`` decides which field group is read as input and which as
    output. Fields of the other group are kept so switching direction back and
    forth doesn't lose what the user typed, but the engine ignores them.
    """

    id: str = ""
    enabled: bool = True
    direction: Direction = Direction.OSC_TO_MIDI
    osc_address: str = ""
    osc_arg_types: Tuple[OscArgType, ...] = ()
    midi_message_type: MidiMessageType = MidiMessageType.NOTE_ON
    midi_channel: int = 1
    midi_note_or_cc: int = 60
    midi_velocity_or_value: ValueSource = field(default_factory=lambda: ValueSource.static(127))
    midi_input_velocity: Optional[int] = None
    osc_args: Tuple[OscArgDef, ...] = ()

    # --- edits (each returns a new Mapping) ---

    def with_changes(self, **changes) -> "Mapping":
        if "osc_args" in changes:
            changes["osc_args"] = tuple(changes["osc_args"])
        if "osc_arg_types" in changes:
            changes["osc_arg_types"] = tuple(changes["osc_arg_types"])
        return dataclasses.replace(self, **changes)

    def with_direction(self, direction) -> "Mapping":
        return dataclasses.replace(self, direction=Direction(direction))

    def with_velocity_filter(self, exact: bool) -> "Mapping":
        """Switch the MIDI input velocity filter between 'exact' (seeded at 100) and 'any'"""
        if exact:
            current = self.midi_input_velocity
            return dataclasses.replace(self, midi_input_velocity=100 if current is None else current)
        return dataclasses.replace(self, midi_input_velocity=None)

    def add_osc_arg(self, arg: Optional[OscArgDef] = None) -> "Mapping":
        arg = arg if arg is not None else OscArgDef()
        return dataclasses.replace(self, osc_args=self.osc_args + (arg,))

    def update_osc_arg(self, index: int, arg: OscArgDef) -> "Mapping":
        args = list(self.osc_args)
        args[index] = arg
        return dataclasses.replace(self, osc_args=tuple(args))

    def remove_osc_arg(self, index: int) -> "Mapping":
        args = tuple(a for i, a in enumerate(self.osc_args) if i != index)
        return dataclasses.replace(self, osc_args=args)

    def with_arg_type(self, index: int, arg_type) -> "Mapping":
        arg = self.osc_args[index]
        return self.update_osc_arg(index, dataclasses.replace(arg, type=OscArgType(arg_type)))

    def with_arg_source(self, index: int, kind: str) -> "Mapping":
        """Change the source kind of one argument, seeding a static value when needed"""
        arg = self.osc_args[index]
        if kind == OscArgSource.STATIC:
            source = OscArgSource.static(_static_seed(arg.type))
        elif kind in (OscArgSource.MIDI_VALUE, OscArgSource.MIDI_NOTE):
            source = OscArgSource(type=kind)
        else:
            raise ValueError(f"Unknown OSC argument source: {kind!r}")
        return self.update_osc_arg(index, dataclasses.replace(arg, source=source))

    def with_arg_value(self, index: int, value) -> "Mapping":
        """Set the static value of one argument"""
        arg = self.osc_args[index]
        return self.update_osc_arg(index, dataclasses.replace(arg, source=OscArgSource.static(value)))

    # --- active field groups ---

    def input_fields(self) -> Dict[str, Any]:
        names, _ = _ACTIVE_FIELDS[self.direction]
        return {name: getattr(self, name) for name in names}

    def output_fields(self) -> Dict[str, Any]:
        _, names = _ACTIVE_FIELDS[self.direction]
        return {name: getattr(self, name) for name in names}

    # --- wire format ---

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "enabled": self.enabled,
            "direction": self.direction.value,
            "osc_address": self.osc_address,
            "osc_arg_types": [t.value for t in self.osc_arg_types],
            "midi_message_type": self.midi_message_type.value,
            "midi_channel": self.midi_channel,
            "midi_note_or_cc": self.midi_note_or_cc,
            "midi_velocity_or_value": self.midi_velocity_or_value.to_dict(),
            "midi_input_velocity": self.midi_input_velocity,
            "osc_args": [a.to_dict() for a in self.osc_args],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Mapping":
        return cls(
            id=data["id"],
            enabled=bool(data["enabled"]),
            direction=Direction(data["direction"]),
            osc_address=data.get("osc_address", ""),
            osc_arg_types=tuple(OscArgType(t) for t in data.get("osc_arg_types", [])),
            midi_message_type=MidiMessageType(data["midi_message_type"]),
            midi_channel=int(data["midi_channel"]),
            midi_note_or_cc=int(data["midi_note_or_cc"]),
            midi_velocity_or_value=ValueSource.from_dict(data["midi_velocity_or_value"]),
            midi_input_velocity=data.get("midi_input_velocity"),
            osc_args=tuple(OscArgDef.from_dict(a) for a in data.get("osc_args", [])),
        )


def default_mapping() -> Mapping:
    """A fresh mapping as sent to ``add_mapping``; the engine assigns the id"""
    return Mapping()


@dataclass(frozen=True)
class Settings:
    osc_listen_port: int = 8000
    osc_listen_protocol: OscListenProtocol = OscListenProtocol.UDP
    osc_send_host: str = "127.0.0.1"
    osc_send_port: int = 9000
    osc_send_protocol: OscSendProtocol = OscSendProtocol.UDP
    osc_tcp_send_timeout_ms: int = 3000
    midi_input_port_name: Optional[str] = None
    midi_output_port_name: Optional[str] = None
    engine_auto_start: bool = False
    launch_on_startup: bool = False

    def with_changes(self, **changes) -> "Settings":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        data["osc_listen_protocol"] = self.osc_listen_protocol.value
        data["osc_send_protocol"] = self.osc_send_protocol.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        return cls(
            osc_listen_port=int(data["osc_listen_port"]),
            osc_listen_protocol=OscListenProtocol(data["osc_listen_protocol"]),
            osc_send_host=data["osc_send_host"],
            osc_send_port=int(data["osc_send_port"]),
            osc_send_protocol=OscSendProtocol(data["osc_send_protocol"]),
            osc_tcp_send_timeout_ms=int(data["osc_tcp_send_timeout_ms"]),
            midi_input_port_name=data.get("midi_input_port_name"),
            midi_output_port_name=data.get("midi_output_port_name"),
            engine_auto_start=bool(data.get("engine_auto_start", False)),
            # Older engines don't send this one
            launch_on_startup=bool(data.get("launch_on_startup", False)),
        )


@dataclass(frozen=True)
class MidiPort:
    name: str
    index: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MidiPort":
        return cls(name=data["name"], index=int(data["index"]))


@dataclass(frozen=True)
class EngineStatus:
    running: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"running": self.running}
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineStatus":
        return cls(running=bool(data["running"]), error=data.get("error"))


@dataclass(frozen=True)
class MappingActivity:
    """Payload of a ``mapping-activity`` event: one message the engine translated"""

    timestamp: str
    input_protocol: Protocol
    input_display: str
    output_protocol: Protocol
    output_display: str
    mapping_id: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MappingActivity":
        return cls(
            timestamp=data["timestamp"],
            input_protocol=Protocol(data["input_protocol"]),
            input_display=data["input_display"],
            output_protocol=Protocol(data["output_protocol"]),
            output_display=data["output_display"],
            mapping_id=data["mapping_id"],
        )


@dataclass(frozen=True)
class UnmatchedMessage:
    """Payload of an ``unmatched-message`` event: a message no mapping picked up"""

    timestamp: str
    protocol: Protocol
    display: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UnmatchedMessage":
        return cls(
            timestamp=data["timestamp"],
            protocol=Protocol(data["protocol"]),
            display=data["display"],
        )
