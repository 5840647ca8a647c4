# Conduit - User Notifications
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

ERROR = "error"
INFO = "info"


class Notifier:
    """Fan-out for user-visible messages (status bar, toasts).

    Every message is echoed to the console too, so nothing is lost when no
    window is listening.
    """

    def __init__(self):
        self.listeners = []

    def add_listener(self, listener):
        """Register listener(level, message); returns a function that removes it"""
        self.listeners.append(listener)

        def remove():
            if listener in self.listeners:
                self.listeners.remove(listener)
        return remove

    def notify(self, level, message):
        prefix = "Error: " if level == ERROR else ""
        print(f"{prefix}{message}")
        for listener in list(self.listeners):
            try:
                listener(level, message)
            except Exception as e:
                print(f"Error in notification listener: {e}")

    def error(self, message):
        self.notify(ERROR, message)

    def info(self, message):
        self.notify(INFO, message)
