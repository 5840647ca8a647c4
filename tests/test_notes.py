# Conduit - Note Name Tests
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

import pytest

from conduit.notes import name_to_note, note_to_name


@pytest.mark.parametrize("note,name", [
    (0, "C-2"),
    (60, "C3"),
    (61, "C#3"),
    (69, "A3"),
    (127, "G8"),
])
def test_note_to_name(note, name):
    assert note_to_name(note) == name


def test_every_note_survives_name_round_trip():
    for note in range(128):
        assert name_to_note(note_to_name(note)) == note


@pytest.mark.parametrize("name,note", [
    ("C3", 60),
    ("c3", 60),
    ("Db3", 61),
    ("Bb4", 82),
    ("G-1", 19),
    ("C-2", 0),
])
def test_name_to_note(name, note):
    assert name_to_note(name) == note


@pytest.mark.parametrize("name", ["", "H3", "C", "C#", "3C", "C3 ", "C#b3", "G#8", "Cb-2"])
def test_name_to_note_rejects(name):
    assert name_to_note(name) is None


@pytest.mark.parametrize("value", [-1, 128, 1000])
def test_out_of_range_note_shown_as_number(value):
    assert note_to_name(value) == str(value)


@pytest.mark.parametrize("name", ["C٣", "C３", "F#٤"])
def test_name_to_note_rejects_non_ascii_digits(name):
    assert name_to_note(name) is None


def test_integer_valued_float_is_a_note():
    assert note_to_name(60.0) == "C3"
    assert note_to_name(127.0) == "G8"
    assert note_to_name(60.5) == "60.5"
    assert note_to_name(128.0) == "128.0"
    assert note_to_name(True) == "True"
