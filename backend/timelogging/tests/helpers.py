"""
In-memory stand-ins for the time-logging API used by engine tests.
"""
import asyncio
from copy import deepcopy


async def settle(rounds=5):
    """Let scheduled tasks run up to their next real suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeClock:

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeStore:
    """
    Records every write as ("start"|"end", allocation_id, mondayHours).
    `gates` holds an asyncio.Event per allocation that writes wait on;
    allocations in `fail` raise ConnectionError.
    """

    def __init__(self):
        self.entries = {}
        self.calls = []
        self.payloads = []
        self.gates = {}
        self.fail = set()
        self._next_id = 1

    async def create_time_entry(self, payload):
        return await self._write(None, payload)

    async def update_time_entry(self, entry_id, payload):
        return await self._write(entry_id, payload)

    async def get_week_entries(self, resource_id, week_start):
        return [deepcopy(e) for e in self.entries.values() if e["resourceId"] == resource_id]

    async def _write(self, entry_id, payload):
        allocation_id = payload["allocationId"]
        self.payloads.append(deepcopy(payload))
        self.calls.append(("start", allocation_id, payload["mondayHours"]))
        gate = self.gates.get(allocation_id)
        if gate is not None:
            await gate.wait()
        if allocation_id in self.fail:
            raise ConnectionError("store unavailable")
        if entry_id is None:
            entry_id = self._next_id
            self._next_id += 1
        stored = dict(deepcopy(payload), id=entry_id)
        self.entries[entry_id] = stored
        self.calls.append(("end", allocation_id, payload["mondayHours"]))
        return deepcopy(stored)


class FakeClient(FakeStore):
    """FakeStore plus the read and workflow calls WeekSheet makes."""

    def __init__(self, allocations=(), submission=None):
        super().__init__()
        self.allocations = list(allocations)
        self.submission = submission
        self.submit_error = None
        self.submit_gate = None
        self.workflow_calls = []

    def add_entry(self, resource_id, allocation_id, week_key, **hours):
        entry_id = self._next_id
        self._next_id += 1
        payload = {
            "id": entry_id,
            "resourceId": resource_id,
            "allocationId": allocation_id,
            "weekStartDate": week_key,
            "notes": "",
        }
        for day in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"):
            payload[f"{day}Hours"] = f"{hours.get(day, 0):.2f}"
        self.entries[entry_id] = payload
        return payload

    async def get_allocations(self, resource_id, status=None):
        return [deepcopy(a) for a in self.allocations if status is None or a.get("status") == status]

    async def get_weekly_submission(self, resource_id, week_start):
        return deepcopy(self.submission)

    async def submit_week(self, resource_id, week_start):
        self.workflow_calls.append(("submit", resource_id))
        if self.submit_gate is not None:
            await self.submit_gate.wait()
        if self.submit_error is not None:
            raise self.submit_error
        self.submission = dict(self.submission or {}, isSubmitted=True)
        return deepcopy(self.submission)

    async def unsubmit_week(self, resource_id, week_start):
        self.workflow_calls.append(("unsubmit", resource_id))
        self.submission = dict(self.submission or {}, isSubmitted=False)
        return deepcopy(self.submission)
