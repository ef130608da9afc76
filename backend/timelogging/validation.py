# backend/timelogging/validation.py
"""
Derived checks over one resource's week of entries.

All functions are pure and take explicit inputs, so callers recompute them
on every change instead of caching results.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from .hours import parse_hours
from .weeks import DAYS, DAY_NAMES

DAILY_CAP = Decimal("8")
SEVERE_THRESHOLD = Decimal("10")
ALLOCATION_MODERATE_PCT = Decimal("100")
ALLOCATION_EXCEEDED_PCT = Decimal("125")

ZERO = Decimal("0")


class Severity(str, Enum):
    NONE = "none"
    MODERATE = "moderate"
    SEVERE = "severe"


class AllocationState(str, Enum):
    WITHIN = "within"
    MODERATE = "moderate"
    EXCEEDED = "exceeded"


@dataclass(frozen=True)
class DailyValidation:
    total_hours: Decimal
    remaining_hours: Decimal
    severity: Severity
    warning_message: str = ""
    # entry-time checks never block
    is_valid: bool = True

    @property
    def overage(self) -> Decimal:
        return max(self.total_hours - DAILY_CAP, ZERO)


@dataclass(frozen=True)
class SubmissionValidation:
    can_submit: bool
    violated_days: list = field(default_factory=list)
    error_message: str = ""

    @property
    def violation_count(self) -> int:
        return len(self.violated_days)


@dataclass(frozen=True)
class AllocationStatus:
    allocation_id: int
    weekly_hours: Decimal
    allocated_hours: Decimal
    percentage: Decimal
    status: AllocationState
    message: str


def daily_total(day, entries, substitute=None) -> Decimal:
    """
    Sum `day` across all entries. `substitute` is an (allocation_id, value)
    pair that replaces that allocation's own value for the day.
    """
    total = ZERO
    seen_substitute = False
    for entry in entries:
        if substitute is not None and entry.allocation_id == substitute[0]:
            total += parse_hours(substitute[1])
            seen_substitute = True
        else:
            total += entry.hours_for(day)
    if substitute is not None and not seen_substitute:
        # candidate typed into a row that has no entry yet
        total += parse_hours(substitute[1])
    return total


def daily_totals(entries) -> dict:
    entries = list(entries)
    return {day: daily_total(day, entries) for day in DAYS}


def classify_daily(total: Decimal) -> Severity:
    if total > SEVERE_THRESHOLD:
        return Severity.SEVERE
    if total > DAILY_CAP:
        return Severity.MODERATE
    return Severity.NONE


def compute_daily_validation(day, current_allocation_id, candidate_value, all_entries) -> DailyValidation:
    total = daily_total(day, all_entries, substitute=(current_allocation_id, candidate_value))
    severity = classify_daily(total)
    overage = max(total - DAILY_CAP, ZERO)

    message = ""
    if severity is Severity.SEVERE:
        message = f"{total:.1f}h significantly exceeds daily cap of 8h (+{overage:.1f}h)"
    elif severity is Severity.MODERATE:
        message = f"{total:.1f}h exceeds daily cap of 8h (+{overage:.1f}h)"

    return DailyValidation(
        total_hours=total,
        remaining_hours=max(DAILY_CAP - total, ZERO),
        severity=severity,
        warning_message=message,
    )


def compute_submission_validation(all_entries) -> SubmissionValidation:
    totals = daily_totals(all_entries)
    violated = [DAY_NAMES[day] for day in DAYS if totals[day] > DAILY_CAP]

    if not violated:
        return SubmissionValidation(can_submit=True)

    if len(violated) == 1:
        message = (
            f"You have 1 day ({violated[0]}) with >8h logged. "
            "Please correct before submitting."
        )
    else:
        message = (
            f"You have {len(violated)} days with >8h logged ({', '.join(violated)}). "
            "Please correct before submitting."
        )
    return SubmissionValidation(can_submit=False, violated_days=violated, error_message=message)


def violated_cell_keys(validation: SubmissionValidation, all_entries) -> list:
    """
    Cell keys to highlight after a blocked submit, ordered by day then by
    allocation. The first key is the one to focus.
    """
    lookup = {name: day for day, name in DAY_NAMES.items()}
    keys = []
    for name in validation.violated_days:
        day = lookup[name]
        for entry in all_entries:
            if entry.hours_for(day) > 0:
                keys.append(f"{entry.allocation_id}-{day}")
    return keys


def classify_allocation(percentage: Decimal) -> AllocationState:
    if percentage > ALLOCATION_EXCEEDED_PCT:
        return AllocationState.EXCEEDED
    if percentage > ALLOCATION_MODERATE_PCT:
        return AllocationState.MODERATE
    return AllocationState.WITHIN


_STATUS_PREFIX = {
    AllocationState.WITHIN: "Within allocation",
    AllocationState.MODERATE: "Over allocation",
    AllocationState.EXCEEDED: "Significantly over allocation",
}


def compute_allocation_status(allocation_id, allocated_hours, entries) -> AllocationStatus:
    allocated = parse_hours(allocated_hours)
    weekly = sum(
        (e.total for e in entries if e.allocation_id == allocation_id),
        ZERO,
    )
    percentage = weekly / allocated * 100 if allocated > 0 else ZERO
    state = classify_allocation(percentage)
    message = (
        f"{_STATUS_PREFIX[state]}: "
        f"{weekly:.1f} / {allocated:.1f} hours ({percentage:.0f}%)"
    )
    return AllocationStatus(
        allocation_id=allocation_id,
        weekly_hours=weekly,
        allocated_hours=allocated,
        percentage=percentage,
        status=state,
        message=message,
    )


def allocation_warnings(allocations, entries) -> list:
    """Banner lines for every allocation whose status is `exceeded`."""
    entries = list(entries)
    lines = []
    for allocation in allocations:
        status = compute_allocation_status(allocation.id, allocation.allocated_hours, entries)
        if status.status is AllocationState.EXCEEDED:
            name = allocation.project_name or f"Allocation {allocation.id}"
            lines.append(
                f"{name}: {status.weekly_hours:.1f}h logged "
                f"({status.allocated_hours:.1f}h allocated)"
            )
    return lines


def expected_hours(allocations) -> Decimal:
    return sum((parse_hours(a.allocated_hours) for a in allocations), ZERO)


def weekly_summary(entries, allocations=()) -> dict:
    """Totals for the week header: overall, per project, per day."""
    entries = list(entries)
    names = {a.id: a.project_name for a in allocations}
    by_project = {}
    for entry in entries:
        name = entry.project_name or names.get(entry.allocation_id) or f"Allocation {entry.allocation_id}"
        by_project[name] = by_project.get(name, ZERO) + entry.total
    return {
        "total_hours": sum((e.total for e in entries), ZERO),
        "expected_hours": expected_hours(allocations),
        "by_project": by_project,
        "by_day": daily_totals(entries),
    }
