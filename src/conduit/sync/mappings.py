# Conduit - Mapping Store
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

from ..exceptions import EngineError
from ..models import default_mapping
from .debounce import IDLE, DebouncedCommitter
from .store import Store

MAPPING_DEBOUNCE_S = 0.3


class MappingStore(Store):
    """Local copy of the engine's mapping list.

    Field edits are applied locally right away and sent with ``update_mapping``
    once the mapping has been quiet for the debounce window. Add, delete and
    reorder go to the engine first and only touch the local list once the
    engine has accepted them.
    """

    def __init__(self, client, notifier, debounce=MAPPING_DEBOUNCE_S):
        super().__init__()
        self.client = client
        self.notifier = notifier
        self.mappings = []
        self.loading = True
        self.committer = DebouncedCommitter(self._commit, debounce, on_error=self._on_commit_error)

    def get(self, mapping_id):
        for mapping in self.mappings:
            if mapping.id == mapping_id:
                return mapping
        return None

    def ids(self):
        return [m.id for m in self.mappings]

    async def load(self):
        """Fetch the full list from the engine; failures leave the current list in place"""
        try:
            mappings = await self.client.get_mappings()
        except EngineError as e:
            print(f"Error loading mappings: {e}")
            self.notifier.error("Failed to load mappings")
            self.notify_listeners()
            return False
        finally:
            self.loading = False
        self._replace_all(mappings)
        print(f"Mappings loaded: {len(self.mappings)}")
        return True

    # --- debounced field edits ---

    def update(self, mapping):
        """Replace one mapping locally and schedule its commit"""
        self.mappings = [mapping if m.id == mapping.id else m for m in self.mappings]
        self.notify_listeners()
        self.committer.submit(mapping.id, mapping)

    def edit(self, mapping_id, **changes):
        return self.apply(mapping_id, lambda m: m.with_changes(**changes))

    def apply(self, mapping_id, change):
        """Run change(mapping) -> mapping on the current local value and commit the result"""
        current = self.get(mapping_id)
        if current is None:
            raise KeyError(mapping_id)
        updated = change(current)
        self.update(updated)
        return updated

    async def _commit(self, mapping_id, mapping):
        await self.client.update_mapping(mapping)

    def _on_commit_error(self, mapping_id, mapping, error):
        # Local state stays as the user left it; the next edit sends it again
        print(f"Error saving mapping {mapping_id}: {error}")
        self.notifier.error("Failed to save mapping")

    async def flush(self):
        await self.committer.flush()

    # --- structural operations ---

    async def add(self):
        """Create a mapping with default values; returns the engine-assigned id or None"""
        try:
            mapping_id = await self.client.add_mapping(default_mapping())
        except EngineError as e:
            print(f"Error adding mapping: {e}")
            self.notifier.error("Failed to add mapping")
            return None

        # Take the engine's list rather than appending locally, it decides id and position
        try:
            mappings = await self.client.get_mappings()
        except EngineError as e:
            print(f"Error reloading mappings after add: {e}")
            self.notifier.error("Mapping added but the list could not be refreshed")
            return mapping_id

        self._replace_all(mappings)
        return mapping_id

    async def delete(self, mapping_id):
        try:
            await self.client.delete_mapping(mapping_id)
        except EngineError as e:
            print(f"Error deleting mapping {mapping_id}: {e}")
            self.notifier.error("Failed to delete mapping")
            return False

        self.committer.cancel(mapping_id)
        self.mappings = [m for m in self.mappings if m.id != mapping_id]
        self.notify_listeners()
        return True

    async def reorder(self, ids):
        ids = list(ids)
        try:
            await self.client.reorder_mappings(ids)
        except EngineError as e:
            print(f"Error reordering mappings: {e}")
            self.notifier.error("Failed to reorder mappings")
            return False

        by_id = {m.id: m for m in self.mappings}
        self.mappings = [by_id[i] for i in ids if i in by_id]
        self.notify_listeners()
        return True

    async def move(self, mapping_id, offset):
        """Move one mapping up (negative offset) or down the list"""
        ids = self.ids()
        if mapping_id not in ids:
            return False
        old = ids.index(mapping_id)
        new = max(0, min(len(ids) - 1, old + offset))
        if new == old:
            return False
        ids.insert(new, ids.pop(old))
        return await self.reorder(ids)

    def _replace_all(self, mappings):
        # Edits that haven't reached the engine yet win over what it just sent
        local = {m.id: m for m in self.mappings}
        merged = []
        for mapping in mappings:
            if self.committer.state(mapping.id) != IDLE and mapping.id in local:
                merged.append(local[mapping.id])
            else:
                merged.append(mapping)
        self.mappings = merged
        self.notify_listeners()
