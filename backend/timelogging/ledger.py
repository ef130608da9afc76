# backend/timelogging/ledger.py
"""
Pending-change ledger for one resource's week.

Edits are recorded as diffs keyed by "{allocation_id}-{day}" and only reach
the server on an explicit save. A save upserts the whole TimeEntry of every
affected allocation. Allocations save concurrently; saves of the same
allocation are serialised behind a per-allocation lock so they land in the
order they were issued.

`store` is any object with these coroutines (TimeLoggingClient is one):

    create_time_entry(payload) -> dict
    update_time_entry(entry_id, payload) -> dict
    get_week_entries(resource_id, week_start) -> list[dict]
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from decimal import Decimal

from .entries import WeekEntry
from .hours import quantize_hours
from .weeks import week_key

logger = logging.getLogger(__name__)

SAVED_INDICATOR_SECONDS = 3.0


def cell_key(allocation_id, day) -> str:
    return f"{allocation_id}-{day}"


def split_key(key):
    allocation_id, day = key.rsplit("-", 1)
    return int(allocation_id), day


@dataclass
class PendingChange:
    allocation_id: int
    day: str
    old_value: Decimal
    new_value: Decimal
    resource_id: int
    week_key: str

    @property
    def key(self):
        return cell_key(self.allocation_id, self.day)


class PendingChangeLedger:

    def __init__(self, store, resource_id, week_start, clock=time.monotonic):
        self.store = store
        self.resource_id = resource_id
        self.week_start = week_start
        self.clock = clock

        self.pending_changes = {}
        self.saving_cells = set()
        self.failed_cells = {}
        self._saved_at = {}

        self._snapshot = {}
        self._rows = {}
        self._locks = {}
        self._in_flight = set()
        self._frozen = False
        self._locked = False

    def __repr__(self):
        return (
            f"<PendingChangeLedger resource={self.resource_id} week={week_key(self.week_start)} "
            f"pending={self.pending_count} failed={len(self.failed_cells)}>"
        )

    # ---- state --------------------------------------------------------------

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self.pending_changes)

    @property
    def pending_count(self) -> int:
        return len(self.pending_changes)

    @property
    def saved_cells(self) -> set:
        now = self.clock()
        for key, saved_at in list(self._saved_at.items()):
            if now - saved_at >= SAVED_INDICATOR_SECONDS:
                del self._saved_at[key]
        return set(self._saved_at)

    @property
    def failure_reasons(self) -> dict:
        return dict(self.failed_cells)

    @property
    def is_busy(self) -> bool:
        return bool(self._in_flight)

    @property
    def accepting_edits(self) -> bool:
        return not (self._frozen or self._locked)

    def rows(self):
        return [row.copy() for row in self._rows.values()]

    def row(self, allocation_id) -> WeekEntry:
        return self._rows[allocation_id]

    def value(self, allocation_id, day) -> Decimal:
        return self._rows[allocation_id].hours_for(day)

    # ---- snapshot -----------------------------------------------------------

    def load(self, entries, allocation_ids=()):
        """Replace server snapshot and working rows. Drops all ledger state."""
        self._snapshot = {}
        for entry in entries:
            self._snapshot[entry.allocation_id] = entry.copy()
        for allocation_id in allocation_ids:
            self._snapshot.setdefault(allocation_id, WeekEntry(allocation_id=allocation_id))
        self._rows = {aid: row.copy() for aid, row in self._snapshot.items()}
        self.pending_changes.clear()
        self.failed_cells.clear()
        self._saved_at.clear()

    async def reload(self):
        payload = await self.store.get_week_entries(self.resource_id, self.week_start)
        allocation_ids = list(self._snapshot)
        self.load([WeekEntry.from_payload(item) for item in payload], allocation_ids)

    # ---- edits --------------------------------------------------------------

    def lock(self):
        self._locked = True

    def unlock(self):
        self._locked = False

    def freeze(self):
        """Stop accepting new edits (navigation in progress)."""
        self._frozen = True

    def thaw(self):
        self._frozen = False

    def record_edit(self, allocation_id, day, new_value) -> bool:
        """
        Record a committed cell value. Returns True if a pending change now
        exists for the cell. Re-entering the current value is a no-op, and
        returning a cell to its server value drops its pending change.
        """
        if not self.accepting_edits:
            return False
        new_value = quantize_hours(new_value)
        key = cell_key(allocation_id, day)
        row = self._rows.setdefault(allocation_id, WeekEntry(allocation_id=allocation_id))
        if row.hours_for(day) == new_value:
            return key in self.pending_changes

        server_value = self._server_value(allocation_id, day)
        if new_value == server_value:
            row.set_hours(day, new_value)
            self.pending_changes.pop(key, None)
            self.failed_cells.pop(key, None)
            return False

        self.add_pending_change(key, PendingChange(
            allocation_id=allocation_id,
            day=day,
            old_value=server_value,
            new_value=new_value,
            resource_id=self.resource_id,
            week_key=week_key(self.week_start),
        ))
        return True

    def add_pending_change(self, key, change: PendingChange):
        if not self.accepting_edits:
            return
        self.pending_changes[key] = change
        row = self._rows.setdefault(change.allocation_id, WeekEntry(allocation_id=change.allocation_id))
        row.set_hours(change.day, change.new_value)
        self._saved_at.pop(key, None)
        self.failed_cells.pop(key, None)

    def set_notes(self, allocation_id, notes):
        if not self.accepting_edits:
            return
        self._rows.setdefault(allocation_id, WeekEntry(allocation_id=allocation_id)).notes = notes

    def _server_value(self, allocation_id, day) -> Decimal:
        snapshot = self._snapshot.get(allocation_id)
        return snapshot.hours_for(day) if snapshot else Decimal("0.00")

    # ---- discard ------------------------------------------------------------

    def discard_all_changes(self):
        self.pending_changes.clear()
        self.failed_cells.clear()
        self._saved_at.clear()
        self._rows = {aid: row.copy() for aid, row in self._snapshot.items()}

    def discard_specific_changes(self, keys):
        for key in keys:
            self.pending_changes.pop(key, None)
            self.failed_cells.pop(key, None)
            self._saved_at.pop(key, None)
            allocation_id, day = split_key(key)
            if allocation_id in self._rows:
                self._rows[allocation_id].set_hours(day, self._server_value(allocation_id, day))

    # ---- save ---------------------------------------------------------------

    async def save_all_changes(self) -> bool:
        return await self.save_specific_changes(list(self.pending_changes))

    async def retry_failed_saves(self) -> bool:
        keys = [key for key in self.failed_cells if key in self.pending_changes]
        if not keys:
            return True
        return await self.save_specific_changes(keys)

    async def save_specific_changes(self, keys) -> bool:
        """Flush the given cells. Returns True if every affected save succeeded."""
        groups = {}
        for key in keys:
            change = self.pending_changes.get(key)
            if change is None:
                continue
            groups.setdefault(change.allocation_id, []).append(key)
        if not groups:
            return True

        tasks = [
            asyncio.ensure_future(self._save_allocation(allocation_id, group))
            for allocation_id, group in groups.items()
        ]
        self._in_flight.update(tasks)
        try:
            results = await asyncio.gather(*tasks)
        finally:
            self._in_flight.difference_update(tasks)
        return all(results)

    async def wait_idle(self):
        """Await saves that are already in flight."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    def _lock_for(self, allocation_id):
        lock = self._locks.get(allocation_id)
        if lock is None:
            lock = self._locks[allocation_id] = asyncio.Lock()
        return lock

    async def _save_allocation(self, allocation_id, keys) -> bool:
        async with self._lock_for(allocation_id):
            sent = {key: self.pending_changes[key].new_value for key in keys if key in self.pending_changes}
            if not sent:
                return True
            # server state plus only the cells being flushed
            row = self._snapshot.get(allocation_id, WeekEntry(allocation_id=allocation_id)).copy()
            row.notes = self._rows[allocation_id].notes
            for key, value in sent.items():
                row.set_hours(split_key(key)[1], value)
            self.saving_cells.update(sent)
            payload = row.to_payload(self.resource_id, self.week_start)
            try:
                if row.id is None:
                    result = await self.store.create_time_entry(payload)
                else:
                    result = await self.store.update_time_entry(row.id, payload)
            except Exception as exc:
                reason = str(exc) or exc.__class__.__name__
                logger.warning(
                    "Saving allocation %s for week %s failed: %s",
                    allocation_id, week_key(self.week_start), reason,
                )
                for key in sent:
                    self.failed_cells[key] = reason
                return False
            finally:
                self.saving_cells.difference_update(sent)

            self._apply_saved(allocation_id, row, result, sent)
            return True

    def _apply_saved(self, allocation_id, row, result, sent):
        saved = WeekEntry.from_payload(result) if result else row
        saved.allocation_id = allocation_id
        if saved.id is None:
            saved.id = row.id
        saved.project_name = saved.project_name or row.project_name
        self._snapshot[allocation_id] = saved.copy()

        working = self._rows.setdefault(allocation_id, saved.copy())
        working.id = saved.id
        now = self.clock()
        for key, value in sent.items():
            self.failed_cells.pop(key, None)
            change = self.pending_changes.get(key)
            # a newer edit made while this save was in flight stays pending and unsaved
            if change is not None and change.new_value != value:
                continue
            self.pending_changes.pop(key, None)
            # nothing pending for the cell (saved, or discarded mid-save): show the server value
            day = split_key(key)[1]
            working.set_hours(day, saved.hours_for(day))
            self._saved_at[key] = now
        logger.info(
            "Saved allocation %s for week %s (%d cells)",
            allocation_id, week_key(self.week_start), len(sent),
        )
