# Conduit - Store Listeners
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


class Store:
    """Base for the local state holders: keeps change listeners.

    Listeners are called with the store itself after every local change.
    """

    def __init__(self):
        self.listeners = []

    def add_listener(self, listener):
        """Register listener(store); returns a function that removes it"""
        self.listeners.append(listener)

        def remove():
            if listener in self.listeners:
                self.listeners.remove(listener)
        return remove

    def notify_listeners(self):
        for listener in list(self.listeners):
            try:
                listener(self)
            except Exception as e:
                print(f"Error in {type(self).__name__} listener: {e}")
