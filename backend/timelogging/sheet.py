# backend/timelogging/sheet.py
"""
Editing session for one resource's week: the grid of HourCells, the
pending-change ledger, live validation and the submit / unsubmit flow,
driven against the time-logging API.
"""
import logging
import time

from .client import TimeLoggingAPIError
from .entries import AllocationRef, WeekEntry
from .hours import HourCell
from .ledger import PendingChangeLedger, cell_key
from .validation import (
    SubmissionValidation,
    allocation_warnings,
    compute_allocation_status,
    compute_daily_validation,
    compute_submission_validation,
    violated_cell_keys,
    weekly_summary,
)
from .weeks import DAYS, DAY_NAMES, WEEKDAYS, parse_week_start, week_key
from .workflow import (
    WeekStateMachine,
    WeekStatus,
    can_edit_week,
    can_submit_week,
    can_unsubmit_week,
    derive_week_status,
    needs_unsubmit_confirmation,
)

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Some changes failed to save. Please try again."
DISCARDED_AFTER_SUBMIT_MESSAGE = "The week was submitted; changes made while submitting were discarded."


class WeekSheet:
    """
    `confirm(message) -> bool` is asked before an admin reopens someone
    else's week; without it the unsubmit goes ahead.
    """

    def __init__(self, client, actor, resource_id, week_start, confirm=None, clock=time.monotonic):
        self.client = client
        self.actor = actor
        self.resource_id = resource_id
        self.week_start = parse_week_start(week_start)
        self.confirm = confirm

        self.ledger = PendingChangeLedger(client, resource_id, self.week_start, clock=clock)
        self.machine = WeekStateMachine(resource_id)
        self.allocations = []
        self.cells = {}
        self.submission = None

        self.last_error = ""
        self.highlighted_cells = []
        self.focus_cell = None

    def __repr__(self):
        return f"<WeekSheet resource={self.resource_id} week={week_key(self.week_start)} {self.status.value}>"

    @property
    def status(self) -> WeekStatus:
        return self.machine.status

    @property
    def edit_decision(self):
        return can_edit_week(self.actor, self.resource_id, self.status)

    @property
    def can_edit(self) -> bool:
        return self.edit_decision.allowed

    # ---- loading ------------------------------------------------------------

    async def load(self):
        allocations = await self.client.get_allocations(self.resource_id)
        entries = await self.client.get_week_entries(self.resource_id, self.week_start)
        self.submission = await self.client.get_weekly_submission(self.resource_id, self.week_start)

        week_entries = [WeekEntry.from_payload(item) for item in entries]
        logged = {entry.allocation_id for entry in week_entries}
        # active allocations running that week, plus any allocation that already has time logged in it
        self.allocations = [
            ref for ref in (AllocationRef.from_payload(item) for item in allocations)
            if ref.id in logged or (ref.status == "active" and ref.overlaps(self.week_start))
        ]
        names = {a.id: a.project_name for a in self.allocations}
        for entry in week_entries:
            entry.project_name = entry.project_name or names.get(entry.allocation_id, "")

        self.ledger.load(week_entries, [a.id for a in self.allocations])
        is_submitted = bool(self.submission and self.submission.get("isSubmitted"))
        self.machine.status = derive_week_status(is_submitted, week_entries)
        self._sync_lock()
        self._build_cells()
        return self

    def _build_cells(self):
        disabled = not self.can_edit
        self.cells = {}
        for row in self.ledger.rows():
            for day in DAYS:
                cell = HourCell(
                    row.allocation_id, day, row.hours_for(day),
                    on_change=self._on_cell_change, disabled=disabled,
                )
                self.cells[cell.key] = cell

    def _refresh_cells(self):
        disabled = not self.can_edit
        for cell in self.cells.values():
            cell.disabled = disabled
            cell.reset(self.ledger.value(cell.allocation_id, cell.day))

    def _sync_lock(self):
        if self.machine.is_locked:
            self.ledger.lock()
        else:
            self.ledger.unlock()

    # ---- editing ------------------------------------------------------------

    def cell(self, allocation_id, day) -> HourCell:
        return self.cells[cell_key(allocation_id, day)]

    def type(self, allocation_id, day, text) -> str:
        return self.cell(allocation_id, day).type(text)

    def commit(self, allocation_id, day) -> str:
        return self.cell(allocation_id, day).commit()

    def set_hours(self, allocation_id, day, text) -> str:
        """Type a full value and commit it (tab out of the cell)."""
        cell = self.cell(allocation_id, day)
        cell.type(text)
        return cell.commit()

    def copy_to_weekdays(self, allocation_id, source_day="monday"):
        value = self.cell(allocation_id, source_day).value
        for day in WEEKDAYS:
            if day != source_day:
                self.cell(allocation_id, day).preset(value)

    def set_notes(self, allocation_id, notes):
        self.ledger.set_notes(allocation_id, notes)

    def _on_cell_change(self, cell, old_value, new_value):
        self.ledger.record_edit(cell.allocation_id, cell.day, new_value)

    # ---- derived ------------------------------------------------------------

    def entries(self):
        return self.ledger.rows()

    def daily_validation(self, day, allocation_id):
        """Validation of `day` using what is currently typed in the cell."""
        candidate = self.cell(allocation_id, day).text
        return compute_daily_validation(day, allocation_id, candidate, self.entries())

    def submission_validation(self):
        return compute_submission_validation(self.entries())

    def allocation_status(self, allocation_id):
        """None when the allocation is not part of this week's grid."""
        allocation = next((a for a in self.allocations if a.id == allocation_id), None)
        if allocation is None:
            return None
        return compute_allocation_status(allocation_id, allocation.allocated_hours, self.entries())

    def allocation_warnings(self):
        return allocation_warnings(self.allocations, self.entries())

    def summary(self):
        return weekly_summary(self.entries(), self.allocations)

    # ---- save ---------------------------------------------------------------

    async def save(self) -> bool:
        if not self.can_edit:
            self.last_error = self.edit_decision.reason
            return False
        ok = await self.ledger.save_all_changes()
        self.last_error = "" if ok else SAVE_FAILED_MESSAGE
        self.machine.record_hours(self.entries())
        return ok

    async def retry_failed(self) -> bool:
        ok = await self.ledger.retry_failed_saves()
        self.last_error = "" if ok else SAVE_FAILED_MESSAGE
        self.machine.record_hours(self.entries())
        return ok

    def discard(self):
        self.ledger.discard_all_changes()
        self._refresh_cells()

    # ---- submit / unsubmit --------------------------------------------------

    def _highlight(self, validation):
        self.highlighted_cells = violated_cell_keys(validation, self.entries())
        self.focus_cell = self.highlighted_cells[0] if self.highlighted_cells else None

    async def submit(self) -> bool:
        self.highlighted_cells = []
        self.focus_cell = None

        decision = can_submit_week(self.actor, self.resource_id, self.status)
        if not decision:
            self.last_error = decision.reason
            return False

        validation = self.submission_validation()
        if not validation.can_submit:
            self.last_error = validation.error_message
            self._highlight(validation)
            return False

        # no edits while the flush and the submit request are in flight
        self._hold_edits()

        if self.ledger.has_unsaved_changes and not await self.ledger.save_all_changes():
            self._release_edits()
            self.last_error = SAVE_FAILED_MESSAGE
            return False

        try:
            self.submission = await self.client.submit_week(self.resource_id, self.week_start)
        except TimeLoggingAPIError as exc:
            self._release_edits()
            self.last_error = str(exc)
            days = [name for name in exc.violated_days if name in DAY_NAMES.values()]
            if days:
                self._highlight(SubmissionValidation(False, days, str(exc)))
            return False

        # the server has locked the week; anything still pending can no longer be saved
        self.last_error = ""
        if self.ledger.has_unsaved_changes:
            logger.warning(
                "Discarding %d unsaved changes for resource %s week %s after submit",
                self.ledger.pending_count, self.resource_id, week_key(self.week_start),
            )
            self.ledger.discard_all_changes()
            self.last_error = DISCARDED_AFTER_SUBMIT_MESSAGE
        self.machine.submit(validation)
        self.ledger.thaw()
        self._sync_lock()
        self._refresh_cells()
        return True

    def _hold_edits(self):
        self.ledger.freeze()
        for cell in self.cells.values():
            cell.disabled = True
            cell.text = cell.value

    def _release_edits(self):
        self.ledger.thaw()
        self._refresh_cells()

    async def unsubmit(self) -> bool:
        decision = can_unsubmit_week(self.actor, self.resource_id, self.status)
        if not decision:
            self.last_error = decision.reason
            return False

        if needs_unsubmit_confirmation(self.actor, self.resource_id) and self.confirm is not None:
            message = (
                f"Reopen week of {week_key(self.week_start)} for resource {self.resource_id}? "
                "They will be able to edit their time entries again."
            )
            if not self.confirm(message):
                return False

        try:
            self.submission = await self.client.unsubmit_week(self.resource_id, self.week_start)
        except TimeLoggingAPIError as exc:
            self.last_error = str(exc)
            return False

        self.machine.unsubmit(self.actor)
        self._sync_lock()
        self._refresh_cells()
        self.last_error = ""
        return True
