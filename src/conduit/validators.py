# Conduit - Field Validators
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

"""Parse/validate functions for user-entered text.

Every validator takes the raw field text and returns the parsed value, or
None when the text is rejected. Surrounding whitespace is ignored.
"""

import math
import re
from typing import List, Tuple

from .models import Direction, Mapping, OscArgSource, OscArgType, ValueSource
from .notes import name_to_note

PORT_MIN = 1024
PORT_MAX = 65535

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_DECIMAL_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")

# Leading slash, then literal path characters and OSC pattern wildcards
_OSC_ADDRESS_RE = re.compile(r"/[a-zA-Z0-9_/.*?\[\]{},# -]*")


def _parse_number(raw):
    """Parse decimal text into an int or float, None if it isn't a finite number"""
    text = raw.strip()
    if not text:
        return None
    if _INTEGER_RE.fullmatch(text):
        return int(text)
    if not _DECIMAL_RE.fullmatch(text):
        return None
    try:
        value = float(text)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(value):
        return None
    return value


def _parse_integer(raw):
    value = _parse_number(raw)
    if value is None:
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    return value


def validate_port(raw):
    """Network port: integer in 1024..65535"""
    value = _parse_integer(raw)
    if value is None or not PORT_MIN <= value <= PORT_MAX:
        return None
    return value


def validate_midi_value(raw):
    """7-bit MIDI data value: integer in 0..127"""
    value = _parse_integer(raw)
    if value is None or not 0 <= value <= 127:
        return None
    return value


def validate_midi_note(raw):
    """MIDI note as a number (0..127) or a note name such as C3 or Bb4"""
    value = validate_midi_value(raw)
    if value is not None:
        return value
    text = raw.strip()
    if not text:
        return None
    return name_to_note(text)


def validate_osc_float(raw):
    """Finite number for a float OSC argument"""
    value = _parse_number(raw)
    if value is None:
        return None
    return float(value)


def validate_osc_int(raw):
    """Finite, integer-valued number for an int OSC argument"""
    return _parse_integer(raw)


def is_valid_osc_address(address):
    """True if the address starts with / and only holds OSC address characters.

    Covers literal path segments and the pattern syntax (*, ?, [...], {...})
    plus the '#' bundle marker. Control characters are never accepted.
    """
    if not isinstance(address, str):
        return False
    return _OSC_ADDRESS_RE.fullmatch(address) is not None


Issue = Tuple[str, str]  # (severity, message)


def validate_mapping(mapping: Mapping) -> List[Issue]:
    """List what the engine would ignore or reject in a mapping.

    Only the fields that are active for the mapping's direction are checked.
    The result is advisory; mappings are committed regardless.
    """
    issues: List[Issue] = []

    if not mapping.osc_address:
        issues.append(("warn", "OSC address is empty"))
    elif not is_valid_osc_address(mapping.osc_address):
        issues.append(("error", f"Invalid OSC address: {mapping.osc_address!r}"))

    if not 1 <= mapping.midi_channel <= 16:
        issues.append(("error", f"MIDI channel out of range: {mapping.midi_channel}"))
    if not 0 <= mapping.midi_note_or_cc <= 127:
        issues.append(("error", f"Note/CC number out of range: {mapping.midi_note_or_cc}"))

    if mapping.direction == Direction.OSC_TO_MIDI:
        source = mapping.midi_velocity_or_value
        if source.type == ValueSource.STATIC and not 0 <= source.value <= 127:
            issues.append(("error", f"Static MIDI value out of range: {source.value}"))
        elif source.type == ValueSource.OSC_ARG and source.index < 0:
            issues.append(("error", f"OSC argument index is negative: {source.index}"))
        return issues

    velocity = mapping.midi_input_velocity
    if velocity is not None and not 0 <= velocity <= 127:
        issues.append(("error", f"Input velocity filter out of range: {velocity}"))

    for i, arg in enumerate(mapping.osc_args):
        if arg.source.type != OscArgSource.STATIC:
            continue
        value = arg.source.value
        if arg.type == OscArgType.STRING:
            ok = isinstance(value, str)
        elif arg.type == OscArgType.INT:
            ok = isinstance(value, int) and not isinstance(value, bool)
        else:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
        if not ok:
            issues.append(("error", f"[arg {i}] static value {value!r} is not a valid {arg.type.value}"))

    return issues
