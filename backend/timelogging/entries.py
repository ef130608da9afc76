# backend/timelogging/entries.py
"""Plain in-memory rows the engine works on, plus their wire (camelCase) form."""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from .hours import parse_hours, quantize_hours
from .weeks import DAYS, api_field, day_date, week_key


def _zero_week():
    return {day: Decimal("0.00") for day in DAYS}


@dataclass
class WeekEntry:
    """One TimeEntry: an allocation's seven day values for one week."""
    allocation_id: int
    hours: dict = field(default_factory=_zero_week)
    id: Optional[int] = None
    notes: str = ""
    project_name: str = ""

    def hours_for(self, day) -> Decimal:
        return parse_hours(self.hours.get(day))

    def set_hours(self, day, value):
        self.hours[day] = quantize_hours(value)

    @property
    def total(self) -> Decimal:
        return sum((self.hours_for(d) for d in DAYS), Decimal("0"))

    @property
    def has_hours(self) -> bool:
        return any(self.hours_for(d) > 0 for d in DAYS)

    def copy(self):
        return WeekEntry(
            allocation_id=self.allocation_id,
            hours=dict(self.hours),
            id=self.id,
            notes=self.notes,
            project_name=self.project_name,
        )

    @classmethod
    def from_payload(cls, data):
        allocation = data.get("allocation") or {}
        project = allocation.get("project") or {}
        return cls(
            allocation_id=data.get("allocationId") or allocation.get("id"),
            hours={day: quantize_hours(data.get(api_field(day))) for day in DAYS},
            id=data.get("id"),
            notes=data.get("notes") or "",
            project_name=project.get("name", ""),
        )

    def to_payload(self, resource_id, week_start) -> dict:
        payload = {
            "resourceId": resource_id,
            "allocationId": self.allocation_id,
            "weekStartDate": week_key(week_start),
            "notes": self.notes,
        }
        for day in DAYS:
            payload[api_field(day)] = f"{self.hours_for(day):.2f}"
        return payload


def _parse_date(value):
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass(frozen=True)
class AllocationRef:
    """What the engine needs to know about a ResourceAllocation."""
    id: int
    allocated_hours: Decimal
    project_name: str = ""
    status: str = "active"
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def overlaps(self, week_start) -> bool:
        """True if the allocation runs on any day of the week starting `week_start`."""
        week_end = day_date(week_start, DAYS[-1])
        if self.start_date is not None and self.start_date > week_end:
            return False
        return self.end_date is None or self.end_date >= week_start

    @classmethod
    def from_payload(cls, data):
        project = data.get("project") or {}
        return cls(
            id=data["id"],
            allocated_hours=parse_hours(data.get("allocatedHours")),
            project_name=project.get("name", ""),
            status=data.get("status", "active"),
            start_date=_parse_date(data.get("startDate")),
            end_date=_parse_date(data.get("endDate")),
        )
