# backend/timelogging/hours.py
"""
Single-cell hour input handling.

A cell accepts keystrokes that look like a partial decimal number and
self-corrects on commit: empty or garbage becomes 0, the value is clamped
to [0, 24] and re-serialised with two fractional digits. Nothing here
raises on bad input.
"""
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

HOURS_MIN = Decimal("0")
HOURS_MAX = Decimal("24")
STEP = Decimal("0.5")
PRESETS = (Decimal("8"), Decimal("4"), Decimal("0"))
TWO_PLACES = Decimal("0.01")

_KEYSTROKE_RE = re.compile(r"^[0-9]*\.?[0-9]*$")


def filter_keystroke(current: str, proposed: str) -> str:
    """Return `proposed` if it is digits with at most one dot, else `current`."""
    if proposed is None:
        return current
    return proposed if _KEYSTROKE_RE.match(proposed) else current


def parse_hours(value) -> Decimal:
    """Lenient parse: None, blank, malformed and non-finite all read as 0."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return Decimal("0")
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return Decimal("0")
    if not parsed.is_finite():
        return Decimal("0")
    return parsed


def clamp_hours(value: Decimal) -> Decimal:
    return max(HOURS_MIN, min(HOURS_MAX, value))


def quantize_hours(value) -> Decimal:
    return clamp_hours(parse_hours(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def normalize_hours(text) -> str:
    """'7' -> '7.00', '30' -> '24.00', '' -> '0.00', 'abc' -> '0.00'."""
    return f"{quantize_hours(text):.2f}"


class HourCell:
    """
    Editable value for one (allocation, day) pair.

    `text` is what the user sees while typing; `value` is the last committed,
    normalised string. `on_change(old, new)` fires only when a commit actually
    changes the committed value.
    """

    def __init__(self, allocation_id, day, value="0.00", on_change=None, disabled=False):
        self.allocation_id = allocation_id
        self.day = day
        self.value = normalize_hours(value)
        self.text = self.value
        self.on_change = on_change
        self.disabled = disabled

    def __repr__(self):
        return f"<HourCell {self.key} {self.value}{' disabled' if self.disabled else ''}>"

    @property
    def key(self):
        return f"{self.allocation_id}-{self.day}"

    def type(self, proposed: str) -> str:
        if self.disabled:
            return self.text
        self.text = filter_keystroke(self.text, proposed)
        return self.text

    def commit(self) -> str:
        if self.disabled:
            self.text = self.value
            return self.value
        return self._set(normalize_hours(self.text))

    def step(self, direction: int) -> str:
        """Ctrl+Up / Ctrl+Down: move by half an hour within the cell bounds."""
        if self.disabled:
            return self.value
        current = parse_hours(self.value)
        return self._set(normalize_hours(current + STEP * (1 if direction > 0 else -1)))

    def preset(self, hours) -> str:
        if self.disabled:
            return self.value
        return self._set(normalize_hours(hours))

    def reset(self, value):
        """Overwrite from server state without emitting a change."""
        self.value = normalize_hours(value)
        self.text = self.value

    def _set(self, new_value: str) -> str:
        old_value = self.value
        self.value = new_value
        self.text = new_value
        if new_value != old_value and self.on_change is not None:
            self.on_change(self, old_value, new_value)
        return new_value
