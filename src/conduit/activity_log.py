# Conduit - Activity Log
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

"""Bounded log of what the engine translated (and what it couldn't route).

Two event streams, ``mapping-activity`` and ``unmatched-message``, feed one
buffer in arrival order. Timestamps come from the engine and are only shown,
never used for ordering.
"""

from __future__ import annotations

import itertools
from collections import deque
from dataclasses import dataclass
from typing import Optional

from .engine.client import MAPPING_ACTIVITY, UNMATCHED_MESSAGE
from .models import MappingActivity, UnmatchedMessage
from .sync.store import Store

MAX_ENTRIES = 500

ACTIVITY = "activity"
UNMATCHED = "unmatched"


@dataclass(frozen=True)
class LogEntry:
    id: int
    timestamp: str
    kind: str
    input_protocol: Optional[str] = None
    input_display: Optional[str] = None
    output_protocol: Optional[str] = None
    output_display: Optional[str] = None
    mapping_id: Optional[str] = None
    protocol: Optional[str] = None
    display: Optional[str] = None


class ActivityLogBuffer(Store):
    """Ring buffer of the last ``capacity`` log entries.

    While paused, incoming events are dropped, not queued: resuming does not
    replay anything that arrived in between.
    """

    def __init__(self, capacity=MAX_ENTRIES):
        super().__init__()
        self.capacity = capacity
        self._entries = deque(maxlen=capacity)
        self._ids = itertools.count()
        self.paused = False
        self._unsubscribers = []

    @property
    def entries(self):
        return list(self._entries)

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))

    # --- subscriptions ---

    def attach(self, client):
        """Start listening to both engine event streams"""
        self.detach()
        self._unsubscribers = [
            client.subscribe(MAPPING_ACTIVITY, self.ingest_activity),
            client.subscribe(UNMATCHED_MESSAGE, self.ingest_unmatched),
        ]

    def detach(self):
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    # --- ingestion ---

    def ingest_activity(self, payload):
        if self.paused:
            return None
        try:
            event = payload if isinstance(payload, MappingActivity) else MappingActivity.from_dict(payload)
        except (KeyError, TypeError, ValueError) as e:
            print(f"Ignoring malformed mapping-activity event: {e!r}")
            return None
        return self._append(
            timestamp=event.timestamp,
            kind=ACTIVITY,
            input_protocol=event.input_protocol.value,
            input_display=event.input_display,
            output_protocol=event.output_protocol.value,
            output_display=event.output_display,
            mapping_id=event.mapping_id,
        )

    def ingest_unmatched(self, payload):
        if self.paused:
            return None
        try:
            event = payload if isinstance(payload, UnmatchedMessage) else UnmatchedMessage.from_dict(payload)
        except (KeyError, TypeError, ValueError) as e:
            print(f"Ignoring malformed unmatched-message event: {e!r}")
            return None
        return self._append(
            timestamp=event.timestamp,
            kind=UNMATCHED,
            protocol=event.protocol.value,
            display=event.display,
        )

    def _append(self, **fields):
        entry = LogEntry(id=next(self._ids), **fields)
        self._entries.append(entry)
        self.notify_listeners()
        return entry

    # --- controls ---

    def clear(self):
        self._entries.clear()
        self.notify_listeners()

    def pause(self):
        self.paused = True
        self.notify_listeners()

    def resume(self):
        self.paused = False
        self.notify_listeners()

    def toggle_pause(self):
        if self.paused:
            self.resume()
        else:
            self.pause()
        return self.paused


def format_time(timestamp):
    """Cut 'HH:MM:SS' out of an ISO timestamp; anything else is shown as-is"""
    time_part = timestamp.split("T")[-1].split(".")[0]
    return time_part or timestamp


def format_entry(entry):
    """One display line for a log entry"""
    time_part = format_time(entry.timestamp)
    if entry.kind == UNMATCHED:
        return f"{time_part} ? {(entry.protocol or '').upper()} {entry.display}"
    return (
        f"{time_part} {(entry.input_protocol or '').upper()} {entry.input_display}"
        f" → {(entry.output_protocol or '').upper()} {entry.output_display}"
    )
