# backend/timelogging/weeks.py
"""Week and weekday helpers shared by the engine, the API and the client."""
from datetime import date, datetime, timedelta

DAYS = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)
WEEKDAYS = DAYS[:5]

DAY_NAMES = {day: day.title() for day in DAYS}

WEEK_FORMAT = "%Y-%m-%d"


def api_field(day):
    """`monday` -> `mondayHours` (wire name)."""
    return f"{day}Hours"


def model_field(day):
    """`monday` -> `monday_hours` (column name)."""
    return f"{day}_hours"


API_FIELDS = tuple(api_field(d) for d in DAYS)
MODEL_FIELDS = tuple(model_field(d) for d in DAYS)


def week_start_for(value: date) -> date:
    """Monday of the ISO week containing `value`."""
    return value - timedelta(days=value.weekday())


def parse_week_start(value) -> date:
    """
    Accept a `yyyy-MM-dd` string (or a date) naming a Monday.
    Raises ValueError for anything else.
    """
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        parsed = value
    else:
        try:
            parsed = datetime.strptime(str(value).strip(), WEEK_FORMAT).date()
        except ValueError:
            raise ValueError(f"Invalid week start '{value}', expected yyyy-MM-dd")
    if parsed.weekday() != 0:
        raise ValueError(f"Week start {parsed.isoformat()} is not a Monday")
    return parsed


def week_key(value: date) -> str:
    return value.strftime(WEEK_FORMAT)


def day_date(week_start: date, day: str) -> date:
    return week_start + timedelta(days=DAYS.index(day))
