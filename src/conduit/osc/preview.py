# Conduit - OSC Output Preview
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

"""Build the OSC message a MIDI -> OSC mapping would send, for display.

Argument values follow the engine's rules: a forwarded MIDI value becomes
value/127 for float arguments, a forwarded note number is sent as-is, and a
static value of the wrong JSON type falls back to 0 / "".
"""

from pythonosc.osc_message_builder import BuildError, OscMessageBuilder

from ..models import Direction, OscArgSource, OscArgType
from ..validators import is_valid_osc_address

_BUILDER_TYPES = {
    OscArgType.INT: OscMessageBuilder.ARG_TYPE_INT,
    OscArgType.FLOAT: OscMessageBuilder.ARG_TYPE_FLOAT,
    OscArgType.STRING: OscMessageBuilder.ARG_TYPE_STRING,
}


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def resolve_arg(arg, midi_value, midi_note):
    """Value one argument definition produces for the given MIDI input"""
    source = arg.source
    if source.type == OscArgSource.MIDI_VALUE:
        if arg.type == OscArgType.FLOAT:
            return midi_value / 127.0
        if arg.type == OscArgType.INT:
            return int(midi_value)
        return str(midi_value)

    if source.type == OscArgSource.MIDI_NOTE:
        if arg.type == OscArgType.FLOAT:
            return float(midi_note)
        if arg.type == OscArgType.INT:
            return int(midi_note)
        return str(midi_note)

    value = source.value
    if arg.type == OscArgType.FLOAT:
        return float(value) if _is_number(value) else 0.0
    if arg.type == OscArgType.INT:
        return value if isinstance(value, int) and not isinstance(value, bool) else 0
    return value if isinstance(value, str) else ""


def build_preview(mapping, midi_value=127, midi_note=None):
    """Build the OscMessage for one incoming MIDI message.

    Raises ValueError if the mapping doesn't send OSC or the message can't be
    encoded (bad address, int argument outside 32 bits).
    """
    if mapping.direction != Direction.MIDI_TO_OSC:
        raise ValueError("Only MIDI -> OSC mappings send OSC messages")
    if not is_valid_osc_address(mapping.osc_address):
        raise ValueError(f"Invalid OSC address: {mapping.osc_address!r}")
    if midi_note is None:
        midi_note = mapping.midi_note_or_cc

    builder = OscMessageBuilder(address=mapping.osc_address)
    for arg in mapping.osc_args:
        builder.add_arg(resolve_arg(arg, midi_value, midi_note), _BUILDER_TYPES[arg.type])
    try:
        return builder.build()
    except (BuildError, OverflowError) as e:
        raise ValueError(f"Cannot encode OSC message: {e}") from e


def describe_preview(mapping, midi_value=127, midi_note=None):
    """Short text like '/cue/go 1.000 60', or the reason no message can be built"""
    try:
        message = build_preview(mapping, midi_value, midi_note)
    except ValueError as e:
        return str(e)
    parts = [message.address]
    for param in message.params:
        parts.append(f"{param:.3f}" if isinstance(param, float) else str(param))
    return " ".join(parts)
