# Conduit - Debounced Commits
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

import asyncio

IDLE = "idle"
PENDING = "pending"
COMMITTING = "committing"


class _Entity:
    __slots__ = ("state", "value", "task", "dirty")

    def __init__(self):
        self.state = IDLE
        self.value = None
        self.task = None
        self.dirty = False


class DebouncedCommitter:
    """Send only the last value of each burst of edits, per key.

    Each key runs its own small state machine:

        idle -> pending (timer armed) -> committing -> idle

    - submit() while pending re-arms the timer; the superseded value is never sent.
    - submit() while committing waits for the in-flight commit, then starts a
      fresh pending cycle that sends whatever value is current at that point.
    - Keys never wait on each other.

    ``commit(key, value)`` is a coroutine. Failures are handed to
    ``on_error(key, value, exc)`` and are not retried. Must be used from the
    event loop thread.
    """

    def __init__(self, commit, delay, on_error=None):
        self.commit = commit
        self.delay = delay
        self.on_error = on_error
        self._entities = {}

    def state(self, key):
        entity = self._entities.get(key)
        return entity.state if entity else IDLE

    def is_idle(self):
        return not self._entities

    def submit(self, key, value):
        entity = self._entities.setdefault(key, _Entity())
        entity.value = value

        if entity.state == COMMITTING:
            entity.dirty = True
            return

        if entity.task is not None:
            entity.task.cancel()
        self._arm(key, entity, self.delay)

    def cancel(self, key):
        """Drop a not-yet-sent commit. An in-flight commit still runs to completion."""
        entity = self._entities.get(key)
        if entity is None:
            return False
        if entity.state == COMMITTING:
            entity.dirty = False
            return False
        entity.task.cancel()
        del self._entities[key]
        return True

    def cancel_all(self):
        for key in list(self._entities):
            self.cancel(key)

    async def flush(self):
        """Send every pending value now instead of waiting for its timer"""
        for key, entity in list(self._entities.items()):
            if entity.state == PENDING:
                entity.task.cancel()
                self._arm(key, entity, 0)
        await self.drain()

    async def drain(self):
        """Wait until every key is back to idle"""
        while self._entities:
            tasks = [e.task for e in self._entities.values() if e.task is not None]
            await asyncio.gather(*tasks, return_exceptions=True)

    def _arm(self, key, entity, delay):
        entity.state = PENDING
        entity.task = asyncio.get_running_loop().create_task(self._run(key, entity, delay))

    async def _run(self, key, entity, delay):
        if delay > 0:
            await asyncio.sleep(delay)

        entity.state = COMMITTING
        entity.dirty = False
        value = entity.value
        try:
            await self.commit(key, value)
        except asyncio.CancelledError:
            self._forget(key, entity)
            raise
        except Exception as e:
            self._report(key, value, e)

        if entity.dirty:
            self._arm(key, entity, self.delay)
        else:
            self._forget(key, entity)

    def _report(self, key, value, error):
        if self.on_error is None:
            print(f"Error committing {key!r}: {error}")
            return
        try:
            self.on_error(key, value, error)
        except Exception as e:
            print(f"Error in commit error handler for {key!r}: {e}")

    def _forget(self, key, entity):
        entity.state = IDLE
        entity.task = None
        if self._entities.get(key) is entity:
            del self._entities[key]
