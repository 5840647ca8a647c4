# Conduit - Validated Text Fields
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


class ValidatedField:
    """State behind a text input that only ever commits validated values.

    The widget feeds keystrokes into ``set_text`` and calls ``commit`` when it
    loses focus. A rejected value is never passed on: the text snaps back to
    the last committed value and the user gets an error notification.
    """

    def __init__(self, value, validate, on_commit, error_message, notifier=None, display=str):
        self.validate = validate
        self.on_commit = on_commit
        self.error_message = error_message
        self.notifier = notifier
        self.display = display
        self.committed = value
        self.text = display(value)
        self.focused = False

    @property
    def invalid(self):
        """True while the typed text wouldn't pass validation (empty text isn't flagged)"""
        return self.text.strip() != "" and self.validate(self.text) is None

    def set_text(self, text):
        self.text = text
        self.focused = True

    def commit(self):
        """Validate the typed text; returns the committed value or None if it was rejected"""
        self.focused = False
        value = self.validate(self.text)
        if value is None:
            if self.notifier is not None:
                self.notifier.error(self.error_message)
            self.text = self.display(self.committed)
            return None
        self.committed = value
        self.text = self.display(value)
        self.on_commit(value)
        return value

    def sync(self, value):
        """Follow the model value, unless the user is in the middle of typing"""
        if self.focused:
            return False
        self.committed = value
        self.text = self.display(value)
        return True


class RowSync:
    """Keeps the widgets of one mapping row in step with the stored mapping.

    Rows are only rebuilt when their shape changes; every other change (a
    reload after reconnecting, an edit from elsewhere) goes through ``sync``.
    Plain widgets are skipped while active, validated fields while focused.
    """

    def __init__(self):
        self.bindings = []

    def follow(self, tag, value_of):
        self.bindings.append((tag, value_of, None))

    def follow_field(self, tag, field, value_of):
        self.bindings.append((tag, value_of, field))

    def sync(self, mapping, set_value, is_active):
        for tag, value_of, field in self.bindings:
            value = value_of(mapping)
            if field is not None:
                if field.sync(value):
                    set_value(tag, field.text)
            elif not is_active(tag):
                set_value(tag, value)
