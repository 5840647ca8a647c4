# Conduit - GUI Main Window
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

import dearpygui.dearpygui as dpg

from ..activity_log import format_entry
from ..models import (
    Direction,
    MidiMessageType,
    OscArgSource,
    OscArgType,
    OscListenProtocol,
    OscSendProtocol,
    ValueSource,
)
from ..notes import note_to_name
from ..notify import ERROR
from ..osc.preview import describe_preview
from ..validators import (
    validate_mapping,
    validate_midi_note,
    validate_midi_value,
    validate_osc_float,
    validate_osc_int,
    validate_port,
)
from .fields import RowSync, ValidatedField

HEADER_COLOR = (150, 200, 255)
GREEN = (0, 255, 0)
RED = (255, 0, 0)
GREY = (150, 150, 150)

NO_DEVICE = "No device"

DIRECTION_LABELS = {
    Direction.OSC_TO_MIDI: "OSC -> MIDI",
    Direction.MIDI_TO_OSC: "MIDI -> OSC",
}
MESSAGE_TYPE_LABELS = {
    MidiMessageType.NOTE_ON: "Note On",
    MidiMessageType.NOTE_OFF: "Note Off",
    MidiMessageType.CC: "CC",
    MidiMessageType.PROGRAM_CHANGE: "Program Change",
}
ARG_SOURCE_LABELS = {
    OscArgSource.MIDI_VALUE: "MIDI Value",
    OscArgSource.MIDI_NOTE: "MIDI Note",
    OscArgSource.STATIC: "Static",
}
CHANNEL_LABELS = [f"Ch {i}" for i in range(1, 17)]

SETTINGS_WIDGETS = [
    "osc_listen_port_input", "osc_listen_protocol_combo", "osc_send_host_input",
    "osc_send_port_input", "osc_send_protocol_combo", "osc_tcp_timeout_input",
    "midi_input_combo", "midi_output_combo", "engine_auto_start_check",
    "launch_on_startup_check",
]


def _label_key(labels, label):
    for key, value in labels.items():
        if value == label:
            return key
    raise KeyError(label)


def _shape(mapping):
    """What decides which widgets a mapping row has; rows are rebuilt when it changes"""
    return (
        mapping.id,
        mapping.direction,
        mapping.midi_message_type,
        mapping.midi_input_velocity is None,
        mapping.midi_velocity_or_value.type,
        tuple((a.type, a.source.type) for a in mapping.osc_args),
    )


def _channel_label(channel):
    return CHANNEL_LABELS[channel - 1] if 1 <= channel <= 16 else CHANNEL_LABELS[0]


def _issues_text(mapping):
    return "  ".join(message for severity, message in validate_mapping(mapping) if severity == "error")


class MainWindow:
    def __init__(self, app):
        self.app = app
        self.notifier = app.notifier
        self._dirty = {"engine", "settings", "devices", "mappings", "log"}
        self._notice = None
        self._row_shapes = None
        self._row_handlers = []
        self._row_syncs = {}

        app.engine.add_listener(lambda _: self._mark("engine"))
        app.settings.add_listener(lambda _: self._mark("settings"))
        app.devices.add_listener(lambda _: self._mark("devices"))
        app.mappings.add_listener(lambda _: self._mark("mappings"))
        app.activity.add_listener(lambda _: self._mark("log"))
        self.notifier.add_listener(self._on_notification)

        self.settings_fields = {
            "osc_listen_port": ValidatedField(
                8000, validate_port, lambda v: self._edit_settings(osc_listen_port=v),
                "Port must be 1024-65535", self.notifier),
            "osc_send_port": ValidatedField(
                9000, validate_port, lambda v: self._edit_settings(osc_send_port=v),
                "Port must be 1024-65535", self.notifier),
        }

        dpg.create_context()
        self.setup_gui()

    # --- cross-thread plumbing ---

    def _mark(self, what):
        # Store listeners fire on the loop thread; widgets are only touched from the render loop
        self._dirty.add(what)

    def _on_notification(self, level, message):
        self._notice = (level, message)

    def _edit_settings(self, **changes):
        if self.app.settings.settings is None:
            return
        self.app.call(self.app.settings.edit, **changes)

    def _apply(self, mapping_id, change):
        store = self.app.mappings

        def run():
            # The row may have been deleted before the edit reached the loop
            if store.get(mapping_id) is not None:
                store.apply(mapping_id, change)

        self.app.call(run)

    # --- layout ---

    def setup_gui(self):
        """Setup the DearPyGUI interface"""
        with dpg.window(label="Conduit", tag="primary_window", no_close=True):
            # Engine status
            with dpg.group(horizontal=True):
                dpg.add_text("Engine:", color=HEADER_COLOR)
                dpg.add_text("[X]", tag="engine_indicator", color=RED)
                dpg.add_text("Stopped", tag="engine_status_text", color=GREY)
                dpg.add_button(label="Start", tag="engine_toggle_btn", width=80,
                               callback=self.on_engine_toggle)
                dpg.add_button(label="Reconnect", width=100, callback=self.on_reconnect)

            dpg.add_separator()

            with dpg.collapsing_header(label="Settings", default_open=False):
                dpg.add_text("Stop engine to edit settings", tag="settings_locked_text",
                             color=RED, show=False)
                dpg.add_text("Settings unavailable", tag="settings_unavailable_text", color=GREY)
                with dpg.group(tag="settings_group", show=False):
                    self.setup_settings()

            dpg.add_separator()

            with dpg.group(horizontal=True):
                dpg.add_text("Mappings", color=HEADER_COLOR)
                dpg.add_button(label="Add Mapping", width=120, callback=self.on_add_mapping)
            dpg.add_text("Loading mappings...", tag="mappings_loading_text", color=GREY)
            with dpg.child_window(tag="mappings_window", width=-1, height=300, border=True):
                dpg.add_group(tag="mappings_list")

            dpg.add_separator()

            with dpg.group(horizontal=True):
                dpg.add_text("Activity", color=HEADER_COLOR)
                dpg.add_button(label="Pause", tag="log_pause_btn", width=80,
                               callback=self.on_toggle_pause)
                dpg.add_button(label="Clear", width=80, callback=self.on_clear_log)
            with dpg.child_window(tag="log_window", width=-1, height=180, border=True):
                dpg.add_text("Waiting for activity...", tag="log_text")

            dpg.add_separator()
            dpg.add_text("", tag="notice_text", color=GREY)

    def setup_settings(self):
        with dpg.group(horizontal=True):
            dpg.add_text("OSC Listen Port:")
            self._add_validated_input("osc_listen_port_input", self.settings_fields["osc_listen_port"], 80)
            dpg.add_combo([p.value for p in OscListenProtocol], tag="osc_listen_protocol_combo",
                          width=80, callback=lambda s, a: self._edit_settings(
                              osc_listen_protocol=OscListenProtocol(a)))

        with dpg.group(horizontal=True):
            dpg.add_text("OSC Send:")
            dpg.add_input_text(tag="osc_send_host_input", width=150, hint="127.0.0.1",
                               callback=lambda s, a: self._edit_settings(osc_send_host=a.strip()))
            dpg.add_text(":")
            self._add_validated_input("osc_send_port_input", self.settings_fields["osc_send_port"], 80)
            dpg.add_combo([p.value for p in OscSendProtocol], tag="osc_send_protocol_combo",
                          width=80, callback=lambda s, a: self._edit_settings(
                              osc_send_protocol=OscSendProtocol(a)))
            dpg.add_text("TCP timeout (ms):")
            dpg.add_input_int(tag="osc_tcp_timeout_input", width=100, step=0, min_value=1,
                              min_clamped=True, on_enter=True,
                              callback=lambda s, a: self._edit_settings(osc_tcp_send_timeout_ms=a))

        with dpg.group(horizontal=True):
            dpg.add_text("MIDI Input:")
            dpg.add_combo([NO_DEVICE], tag="midi_input_combo", width=220,
                          callback=lambda s, a: self._edit_settings(
                              midi_input_port_name=None if a == NO_DEVICE else a))
            dpg.add_text("MIDI Output:")
            dpg.add_combo([NO_DEVICE], tag="midi_output_combo", width=220,
                          callback=lambda s, a: self._edit_settings(
                              midi_output_port_name=None if a == NO_DEVICE else a))
            dpg.add_button(label="Refresh", width=80,
                           callback=lambda: self.app.post(self.app.devices.refresh()))

        with dpg.group(horizontal=True):
            dpg.add_checkbox(label="Start engine automatically", tag="engine_auto_start_check",
                             callback=lambda s, a: self._edit_settings(engine_auto_start=a))
            dpg.add_checkbox(label="Launch on startup", tag="launch_on_startup_check",
                             callback=lambda s, a: self._edit_settings(launch_on_startup=a))

    def _add_validated_input(self, tag, field, width):
        """Text input backed by a ValidatedField: commit on focus loss, revert if rejected"""
        dpg.add_input_text(tag=tag, default_value=field.text, width=width,
                           callback=lambda s, a: field.set_text(a))
        with dpg.item_handler_registry() as handlers:
            dpg.add_item_deactivated_after_edit_handler(
                callback=lambda s, a: self._commit_field(tag, field))
        dpg.bind_item_handler_registry(tag, handlers)
        return handlers

    def _commit_field(self, tag, field):
        field.commit()
        if dpg.does_item_exist(tag):
            dpg.set_value(tag, field.text)

    # --- mapping rows ---

    def rebuild_mappings(self, mappings):
        dpg.delete_item("mappings_list", children_only=True)
        for handlers in self._row_handlers:
            if dpg.does_item_exist(handlers):
                dpg.delete_item(handlers)
        self._row_handlers = []
        self._row_syncs = {}

        for index, mapping in enumerate(mappings):
            self.add_mapping_row(index, mapping)
        self._row_shapes = [_shape(m) for m in mappings]

    def add_mapping_row(self, index, mapping):
        mid = mapping.id
        row = f"mapping_{index}"
        self._row_syncs[row] = RowSync()
        with dpg.group(parent="mappings_list"):
            with dpg.group(horizontal=True):
                dpg.add_checkbox(default_value=mapping.enabled, tag=f"{row}_enabled",
                                 callback=lambda s, a: self._apply(mid, lambda m: m.with_changes(enabled=a)))
                self._row_syncs[row].follow(f"{row}_enabled", lambda m: m.enabled)
                dpg.add_combo(list(DIRECTION_LABELS.values()), width=110,
                              default_value=DIRECTION_LABELS[mapping.direction],
                              callback=lambda s, a: self._apply(
                                  mid, lambda m: m.with_direction(_label_key(DIRECTION_LABELS, a))))

                if mapping.direction == Direction.OSC_TO_MIDI:
                    self.add_osc_address_input(row, mapping)
                    dpg.add_text("->")
                    self.add_midi_fields(row, mapping, output=True)
                else:
                    self.add_midi_fields(row, mapping, output=False)
                    dpg.add_text("->")
                    self.add_osc_address_input(row, mapping)
                    dpg.add_button(label="+ Arg", width=60,
                                   callback=lambda: self._apply(mid, lambda m: m.add_osc_arg()))

                dpg.add_button(label="^", width=24,
                               callback=lambda: self.app.post(self.app.mappings.move(mid, -1)))
                dpg.add_button(label="v", width=24,
                               callback=lambda: self.app.post(self.app.mappings.move(mid, 1)))
                dpg.add_button(label="Delete", width=60,
                               callback=lambda: self.app.post(self.app.mappings.delete(mid)))

            if mapping.direction == Direction.MIDI_TO_OSC:
                for i, arg in enumerate(mapping.osc_args):
                    self.add_osc_arg_row(row, mapping, i, arg)
                dpg.add_text(describe_preview(mapping), tag=f"{row}_preview", color=GREY, indent=40)
            dpg.add_text(_issues_text(mapping), tag=f"{row}_issues", color=RED, indent=40)

    def add_osc_address_input(self, row, mapping):
        mid = mapping.id
        # Sent on every keystroke, the store debounces
        dpg.add_input_text(default_value=mapping.osc_address, hint="/osc/address", width=160,
                           tag=f"{row}_address",
                           callback=lambda s, a: self._apply(mid, lambda m: m.with_changes(osc_address=a)))
        self._row_syncs[row].follow(f"{row}_address", lambda m: m.osc_address)

    def add_midi_fields(self, row, mapping, output):
        mid = mapping.id
        kind = mapping.midi_message_type
        dpg.add_combo(list(MESSAGE_TYPE_LABELS.values()), width=120,
                      default_value=MESSAGE_TYPE_LABELS[kind],
                      callback=lambda s, a: self._apply(mid, lambda m: m.with_changes(
                          midi_message_type=_label_key(MESSAGE_TYPE_LABELS, a))))

        def note_label(value):
            if kind == MidiMessageType.CC:
                return "CC"
            if kind == MidiMessageType.PROGRAM_CHANGE:
                return "Pgm"
            return note_to_name(value)

        def on_note(value):
            self._apply(mid, lambda m: m.with_changes(midi_note_or_cc=value))
            dpg.set_value(f"{row}_note_label", note_label(value))

        note = ValidatedField(mapping.midi_note_or_cc, validate_midi_note, on_note,
                              "Note must be 0-127 or a note name (e.g. C3)", self.notifier)
        self._row_handlers.append(self._add_validated_input(f"{row}_note", note, 50))
        dpg.add_text(note_label(mapping.midi_note_or_cc), tag=f"{row}_note_label")
        sync = self._row_syncs[row]
        sync.follow_field(f"{row}_note", note, lambda m: m.midi_note_or_cc)
        sync.follow(f"{row}_note_label", lambda m: note_label(m.midi_note_or_cc))

        if kind != MidiMessageType.PROGRAM_CHANGE:
            if output:
                self.add_value_source_fields(row, mapping)
            else:
                self.add_velocity_filter_fields(row, mapping)

        dpg.add_combo(CHANNEL_LABELS, width=70, default_value=_channel_label(mapping.midi_channel),
                      tag=f"{row}_channel",
                      callback=lambda s, a: self._apply(mid, lambda m: m.with_changes(
                          midi_channel=CHANNEL_LABELS.index(a) + 1)))
        sync.follow(f"{row}_channel", lambda m: _channel_label(m.midi_channel))

    def add_velocity_filter_fields(self, row, mapping):
        mid = mapping.id
        exact = mapping.midi_input_velocity is not None
        dpg.add_combo(["Vel Any", "Vel Exact"], width=90, default_value="Vel Exact" if exact else "Vel Any",
                      callback=lambda s, a: self._apply(mid, lambda m: m.with_velocity_filter(a == "Vel Exact")))
        if exact:
            velocity = ValidatedField(
                mapping.midi_input_velocity, validate_midi_value,
                lambda v: self._apply(mid, lambda m: m.with_changes(midi_input_velocity=v)),
                "Value must be 0-127", self.notifier)
            self._row_handlers.append(self._add_validated_input(f"{row}_velocity", velocity, 50))
            self._row_syncs[row].follow_field(f"{row}_velocity", velocity, lambda m: m.midi_input_velocity)

    def add_value_source_fields(self, row, mapping):
        mid = mapping.id
        source = mapping.midi_velocity_or_value
        labels = {ValueSource.STATIC: "Value", ValueSource.OSC_ARG: "OSC Arg"}
        dpg.add_combo(list(labels.values()), width=80, default_value=labels[source.type],
                      callback=lambda s, a: self._apply(mid, lambda m: m.with_changes(
                          midi_velocity_or_value=ValueSource.static(127) if a == "Value"
                          else ValueSource.osc_arg(0))))
        if source.type == ValueSource.STATIC:
            value = ValidatedField(
                source.value, validate_midi_value,
                lambda v: self._apply(mid, lambda m: m.with_changes(
                    midi_velocity_or_value=ValueSource.static(v))),
                "Value must be 0-127", self.notifier)
            self._row_handlers.append(self._add_validated_input(f"{row}_value", value, 50))
            self._row_syncs[row].follow_field(f"{row}_value", value, lambda m: m.midi_velocity_or_value.value)
        else:
            dpg.add_input_int(default_value=source.index, width=80, min_value=0, min_clamped=True,
                              tag=f"{row}_value_index",
                              callback=lambda s, a: self._apply(mid, lambda m: m.with_changes(
                                  midi_velocity_or_value=ValueSource.osc_arg(a))))
            self._row_syncs[row].follow(f"{row}_value_index", lambda m: m.midi_velocity_or_value.index)

    def add_osc_arg_row(self, row, mapping, i, arg):
        mid = mapping.id
        tag = f"{row}_arg_{i}"
        with dpg.group(horizontal=True, indent=40):
            dpg.add_combo([t.value for t in OscArgType], width=80, default_value=arg.type.value,
                          callback=lambda s, a: self._apply(mid, lambda m: m.with_arg_type(i, a)))
            dpg.add_combo(list(ARG_SOURCE_LABELS.values()), width=100,
                          default_value=ARG_SOURCE_LABELS[arg.source.type],
                          callback=lambda s, a: self._apply(mid, lambda m: m.with_arg_source(
                              i, _label_key(ARG_SOURCE_LABELS, a))))

            if arg.source.type == OscArgSource.STATIC:
                if arg.type == OscArgType.STRING:
                    dpg.add_input_text(default_value=str(arg.source.value), width=100, tag=tag,
                                       callback=lambda s, a: self._apply(mid, lambda m: m.with_arg_value(i, a)))
                    self._row_syncs[row].follow(tag, lambda m: str(m.osc_args[i].source.value))
                else:
                    is_float = arg.type == OscArgType.FLOAT
                    value = ValidatedField(
                        arg.source.value, validate_osc_float if is_float else validate_osc_int,
                        lambda v: self._apply(mid, lambda m: m.with_arg_value(i, v)),
                        "Must be a valid number" if is_float else "Must be a valid integer",
                        self.notifier)
                    self._row_handlers.append(self._add_validated_input(tag, value, 100))
                    self._row_syncs[row].follow_field(tag, value, lambda m: m.osc_args[i].source.value)

            dpg.add_button(label="x", width=24,
                           callback=lambda: self._apply(mid, lambda m: m.remove_osc_arg(i)))

    # --- refresh from stores (render thread) ---

    def refresh(self):
        dirty, self._dirty = self._dirty, set()
        if "engine" in dirty:
            self.update_engine_status()
            self.update_settings_lock()
        if "devices" in dirty:
            self.update_device_combos()
        if "settings" in dirty:
            self.update_settings()
        if "mappings" in dirty:
            self.update_mappings()
        if "log" in dirty:
            self.update_log()
        if self._notice is not None:
            level, message = self._notice
            self._notice = None
            dpg.set_value("notice_text", message)
            dpg.configure_item("notice_text", color=RED if level == ERROR else GREY)

    def update_engine_status(self):
        status = self.app.engine.status
        dpg.configure_item("engine_indicator", color=GREEN if status.running else RED)
        dpg.set_value("engine_status_text", "Running" if status.running else "Stopped")
        dpg.configure_item("engine_toggle_btn", label="Stop" if status.running else "Start")

    def update_settings_lock(self):
        locked = self.app.engine.running
        dpg.configure_item("settings_locked_text", show=locked)
        for tag in SETTINGS_WIDGETS:
            dpg.configure_item(tag, enabled=not locked)

    def update_device_combos(self):
        devices = self.app.devices
        dpg.configure_item("midi_input_combo", items=[NO_DEVICE] + devices.input_names())
        dpg.configure_item("midi_output_combo", items=[NO_DEVICE] + devices.output_names())

    def update_settings(self):
        settings = self.app.settings.settings
        dpg.configure_item("settings_unavailable_text", show=settings is None)
        dpg.configure_item("settings_group", show=settings is not None)
        if settings is None:
            return

        for name, tag in (("osc_listen_port", "osc_listen_port_input"),
                          ("osc_send_port", "osc_send_port_input")):
            field = self.settings_fields[name]
            if field.sync(getattr(settings, name)):
                dpg.set_value(tag, field.text)

        dpg.set_value("osc_listen_protocol_combo", settings.osc_listen_protocol.value)
        dpg.set_value("osc_send_protocol_combo", settings.osc_send_protocol.value)
        if not dpg.is_item_active("osc_send_host_input"):
            dpg.set_value("osc_send_host_input", settings.osc_send_host)
        dpg.set_value("osc_tcp_timeout_input", settings.osc_tcp_send_timeout_ms)
        dpg.set_value("midi_input_combo", settings.midi_input_port_name or NO_DEVICE)
        dpg.set_value("midi_output_combo", settings.midi_output_port_name or NO_DEVICE)
        dpg.set_value("engine_auto_start_check", settings.engine_auto_start)
        dpg.set_value("launch_on_startup_check", settings.launch_on_startup)

    def update_mappings(self):
        store = self.app.mappings
        dpg.configure_item("mappings_loading_text", show=store.loading)
        mappings = list(store.mappings)
        if [_shape(m) for m in mappings] != self._row_shapes:
            self.rebuild_mappings(mappings)
            return
        # Same widgets: bring their values in line with the store
        for index, mapping in enumerate(mappings):
            row_sync = self._row_syncs.get(f"mapping_{index}")
            if row_sync is not None:
                row_sync.sync(mapping, dpg.set_value, dpg.is_item_active)
            dpg.set_value(f"mapping_{index}_issues", _issues_text(mapping))
            tag = f"mapping_{index}_preview"
            if dpg.does_item_exist(tag):
                dpg.set_value(tag, describe_preview(mapping))

    def update_log(self):
        log = self.app.activity
        dpg.configure_item("log_pause_btn", label="Resume" if log.paused else "Pause")
        entries = log.entries
        if not entries:
            dpg.set_value("log_text", "Waiting for activity...")
            return
        dpg.set_value("log_text", "\n".join(format_entry(e) for e in entries))
        # Auto-scroll to bottom
        dpg.set_y_scroll("log_window", dpg.get_y_scroll_max("log_window"))

    # --- callbacks ---

    def on_engine_toggle(self):
        if self.app.engine.running:
            self.app.post(self.app.engine.stop())
        else:
            self.app.post(self.app.engine.start())

    def on_reconnect(self):
        self.app.post(self.app.connect())

    def on_add_mapping(self):
        self.app.post(self.app.mappings.add())

    def on_toggle_pause(self):
        self.app.call(self.app.activity.toggle_pause)

    def on_clear_log(self):
        self.app.call(self.app.activity.clear)

    def run(self):
        """Run the DearPyGUI application"""
        width, height = self.app.config.get("window_size", [1000, 720])
        dpg.create_viewport(title="Conduit - OSC <-> MIDI Bridge", width=width, height=height)
        dpg.setup_dearpygui()
        dpg.set_primary_window("primary_window", True)
        dpg.show_viewport()

        while dpg.is_dearpygui_running():
            self.refresh()
            dpg.render_dearpygui_frame()

        dpg.destroy_context()
