# Conduit - Validated Field Tests
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

from conduit.gui.fields import RowSync, ValidatedField
from conduit.models import Mapping
from conduit.validators import validate_midi_note, validate_port


def make_port_field(notifier):
    committed = []
    field = ValidatedField(8000, validate_port, committed.append, "Port must be 1024-65535", notifier)
    return field, committed


def test_valid_text_commits(notifier):
    field, committed = make_port_field(notifier)
    field.set_text("9001")
    assert field.commit() == 9001
    assert committed == [9001]
    assert field.text == "9001"
    assert notifier.messages == []


def test_rejected_text_reverts_and_notifies(notifier):
    field, committed = make_port_field(notifier)
    field.set_text("80")
    assert field.invalid
    assert field.commit() is None

    assert committed == []
    assert field.text == "8000"
    assert not field.invalid
    assert notifier.errors() == ["Port must be 1024-65535"]


def test_empty_text_is_not_flagged_but_not_committed(notifier):
    field, committed = make_port_field(notifier)
    field.set_text("  ")
    assert not field.invalid
    assert field.commit() is None
    assert field.text == "8000"


def test_sync_waits_for_focus_loss(notifier):
    field, _ = make_port_field(notifier)
    field.set_text("90")
    assert field.sync(8500) is False
    assert field.text == "90"

    field.commit()
    assert field.sync(8500) is True
    assert field.text == "8500"


def test_note_names_are_normalized(notifier):
    committed = []
    field = ValidatedField(60, validate_midi_note, committed.append, "Bad note", notifier)
    field.set_text("D3")
    field.commit()
    assert committed == [62]
    assert field.text == "62"


class FakeWidgets:
    def __init__(self):
        self.values = {}
        self.active = set()

    def set_value(self, tag, value):
        self.values[tag] = value

    def is_active(self, tag):
        return tag in self.active


def make_row(notifier):
    note = ValidatedField(60, validate_midi_note, lambda v: None, "Bad note", notifier)
    row = RowSync()
    row.follow("enabled", lambda m: m.enabled)
    row.follow("address", lambda m: m.osc_address)
    row.follow_field("note", note, lambda m: m.midi_note_or_cc)
    return row, note


def test_row_follows_reloaded_mapping(notifier):
    row, note = make_row(notifier)
    widgets = FakeWidgets()

    reloaded = Mapping(id="a", enabled=False, osc_address="/from/engine", midi_note_or_cc=72)
    row.sync(reloaded, widgets.set_value, widgets.is_active)

    assert widgets.values == {"enabled": False, "address": "/from/engine", "note": "72"}
    assert note.committed == 72


def test_row_sync_leaves_edits_in_progress_alone(notifier):
    row, note = make_row(notifier)
    widgets = FakeWidgets()
    widgets.active.add("address")
    note.set_text("C4")

    row.sync(Mapping(id="a", osc_address="/other", midi_note_or_cc=50), widgets.set_value, widgets.is_active)

    assert "address" not in widgets.values
    assert "note" not in widgets.values
    assert note.text == "C4"
    assert widgets.values["enabled"] is True
