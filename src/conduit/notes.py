# Conduit - MIDI Note Names
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

import re

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# e.g. C3, F#4, Bb4, G-1
_NOTE_NAME_RE = re.compile(r"([A-Ga-g])([#b])?(-?[0-9]+)")

# Semitone offsets of the natural notes relative to C
_BASE_NOTES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}


def note_to_name(note):
    """Convert a MIDI note number (0-127) to a note name. Middle C = C3 = 60.

    Integer-valued floats (60.0) count as notes. Values outside 0-127 (or
    non-integers) come back as their plain string.
    """
    if isinstance(note, float) and note.is_integer():
        if not 0 <= note <= 127:
            return f"{note}"
        note = int(note)
    if isinstance(note, bool) or not isinstance(note, int) or not 0 <= note <= 127:
        return f"{note}"
    octave = note // 12 - 2
    return f"{NOTE_NAMES[note % 12]}{octave}"


def name_to_note(name):
    """Convert a note name like 'C3', 'F#4' or 'Db3' to a MIDI note number.

    Returns None if the name doesn't parse or lands outside 0-127.
    """
    match = _NOTE_NAME_RE.fullmatch(name)
    if not match:
        return None

    letter = match.group(1).upper()
    accidental = match.group(2) or ""
    octave = int(match.group(3))

    semitone = _BASE_NOTES[letter]
    if accidental == "#":
        semitone += 1
    elif accidental == "b":
        semitone -= 1

    note = (octave + 2) * 12 + semitone
    if not 0 <= note <= 127:
        return None
    return note
