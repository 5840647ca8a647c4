# Conduit - Model Tests
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

from conduit.models import (
    Direction,
    EngineStatus,
    Mapping,
    MappingActivity,
    MidiMessageType,
    OscArgDef,
    OscArgSource,
    OscArgType,
    OscListenProtocol,
    Protocol,
    Settings,
    ValueSource,
    default_mapping,
)


def test_default_mapping_values():
    mapping = default_mapping()
    assert mapping.enabled is True
    assert mapping.direction == Direction.OSC_TO_MIDI
    assert mapping.osc_address == ""
    assert mapping.midi_message_type == MidiMessageType.NOTE_ON
    assert mapping.midi_channel == 1
    assert mapping.midi_note_or_cc == 60
    assert mapping.midi_velocity_or_value == ValueSource.static(127)
    assert mapping.midi_input_velocity is None
    assert mapping.osc_args == ()


def test_default_mapping_wire_format():
    data = default_mapping().to_dict()
    assert data == {
        "id": "",
        "enabled": True,
        "direction": "osc_to_midi",
        "osc_address": "",
        "osc_arg_types": [],
        "midi_message_type": "note_on",
        "midi_channel": 1,
        "midi_note_or_cc": 60,
        "midi_velocity_or_value": {"type": "static", "value": 127},
        "midi_input_velocity": None,
        "osc_args": [],
    }


def test_mapping_from_engine_payload():
    mapping = Mapping.from_dict({
        "id": "abc",
        "enabled": False,
        "direction": "midi_to_osc",
        "osc_address": "/fader",
        "osc_arg_types": [],
        "midi_message_type": "cc",
        "midi_channel": 3,
        "midi_note_or_cc": 7,
        "midi_velocity_or_value": {"type": "osc_arg", "index": 1},
        "midi_input_velocity": 100,
        "osc_args": [
            {"type": "float", "source": {"type": "midi_value"}},
            {"type": "string", "source": {"type": "static", "value": "go"}},
        ],
    })
    assert mapping.id == "abc"
    assert mapping.direction == Direction.MIDI_TO_OSC
    assert mapping.midi_message_type == MidiMessageType.CC
    assert mapping.midi_velocity_or_value == ValueSource.osc_arg(1)
    assert mapping.osc_args[1] == OscArgDef(OscArgType.STRING, OscArgSource.static("go"))


def test_unknown_value_source_is_rejected():
    with pytest.raises(ValueError):
        ValueSource.from_dict({"type": "random"})
    with pytest.raises(ValueError):
        OscArgSource.from_dict({"type": "random"})


def test_mappings_are_immutable():
    mapping = default_mapping()
    with pytest.raises(AttributeError):
        mapping.osc_address = "/x"


def test_with_changes_keeps_args_as_tuples():
    mapping = default_mapping().with_changes(osc_args=[OscArgDef()], osc_address="/a")
    assert mapping.osc_args == (OscArgDef(),)
    assert mapping.osc_address == "/a"


def test_switching_direction_keeps_both_field_groups():
    mapping = Mapping(osc_address="/a", midi_input_velocity=90)
    switched = mapping.with_direction("midi_to_osc").with_direction(Direction.OSC_TO_MIDI)
    assert switched == mapping


def test_active_fields_follow_direction():
    mapping = Mapping(osc_address="/a")
    assert mapping.input_fields() == {"osc_address": "/a"}
    assert "midi_velocity_or_value" in mapping.output_fields()

    reverse = mapping.with_direction(Direction.MIDI_TO_OSC)
    assert "midi_input_velocity" in reverse.input_fields()
    assert set(reverse.output_fields()) == {"osc_address", "osc_args"}


def test_velocity_filter_seeds_exact_value():
    mapping = default_mapping()
    assert mapping.with_velocity_filter(True).midi_input_velocity == 100
    assert mapping.with_changes(midi_input_velocity=64).with_velocity_filter(True).midi_input_velocity == 64
    assert mapping.with_velocity_filter(True).with_velocity_filter(False).midi_input_velocity is None


def test_osc_arg_editing():
    mapping = default_mapping().add_osc_arg().add_osc_arg()
    assert mapping.osc_args == (OscArgDef(), OscArgDef())
    assert mapping.osc_args[0].type == OscArgType.FLOAT
    assert mapping.osc_args[0].source == OscArgSource.midi_value()

    mapping = mapping.with_arg_type(1, "int").with_arg_source(1, OscArgSource.STATIC)
    assert mapping.osc_args[1] == OscArgDef(OscArgType.INT, OscArgSource.static(0))

    mapping = mapping.with_arg_value(1, 42)
    assert mapping.osc_args[1].source.value == 42

    mapping = mapping.remove_osc_arg(0)
    assert mapping.osc_args == (OscArgDef(OscArgType.INT, OscArgSource.static(42)),)


def test_static_string_arg_seeds_empty_string():
    mapping = default_mapping().add_osc_arg(OscArgDef(OscArgType.STRING))
    mapping = mapping.with_arg_source(0, OscArgSource.STATIC)
    assert mapping.osc_args[0].source.value == ""
    with pytest.raises(ValueError):
        mapping.with_arg_source(0, "nope")


def test_settings_defaults_and_wire_format():
    settings = Settings()
    assert settings.to_dict() == {
        "osc_listen_port": 8000,
        "osc_listen_protocol": "udp",
        "osc_send_host": "127.0.0.1",
        "osc_send_port": 9000,
        "osc_send_protocol": "udp",
        "osc_tcp_send_timeout_ms": 3000,
        "midi_input_port_name": None,
        "midi_output_port_name": None,
        "engine_auto_start": False,
        "launch_on_startup": False,
    }
    assert Settings.from_dict(settings.to_dict()) == settings


def test_settings_without_launch_on_startup():
    data = Settings().to_dict()
    del data["launch_on_startup"]
    data["osc_listen_protocol"] = "both"
    settings = Settings.from_dict(data)
    assert settings.launch_on_startup is False
    assert settings.osc_listen_protocol == OscListenProtocol.BOTH


def test_engine_status_omits_missing_error():
    assert EngineStatus(running=True).to_dict() == {"running": True}
    assert EngineStatus.from_dict({"running": False, "error": "MIDI port busy"}).error == "MIDI port busy"


def test_mapping_activity_payload():
    event = MappingActivity.from_dict({
        "timestamp": "2025-01-01T12:00:00.000Z",
        "input_protocol": "osc",
        "input_display": "/cue/go 1.0",
        "output_protocol": "midi",
        "output_display": "NoteOn ch1 C3 vel127",
        "mapping_id": "m1",
    })
    assert event.input_protocol == Protocol.OSC
    assert event.output_protocol == Protocol.MIDI
