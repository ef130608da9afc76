# backend/timelogging/client.py
"""
Async HTTP client for the time-logging API.

Used by WeekSheet to load a week and as the store behind the
PendingChangeLedger. HTTP errors are raised as TimeLoggingAPIError so the
ledger can record them per cell.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from .weeks import week_key

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(connect=5.0, read=30.0, write=30.0, pool=5.0)


class TimeLoggingAPIError(Exception):
    """Non-2xx response or transport failure talking to the API."""

    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload if payload is not None else {}

    @property
    def violated_days(self) -> list:
        if isinstance(self.payload, dict):
            return list(self.payload.get("violatedDays") or [])
        return []


def _week(value) -> str:
    return value if isinstance(value, str) else week_key(value)


class TimeLoggingClient:

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self.token = token
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
            follow_redirects=False,
        )

    async def close(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> TimeLoggingClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ---- plumbing -----------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = await self._http.request(
                method, endpoint, json=data, params=params, headers=self._headers(),
            )
        except httpx.TransportError as exc:
            logger.warning("API %s %s transport error: %s", method, endpoint, exc)
            raise TimeLoggingAPIError("Time logging service temporarily unavailable.") from exc

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {"detail": response.text[:500]}

        if response.status_code >= 400:
            logger.warning("API %s %s returned status=%d", method, endpoint, response.status_code)
            message = f"API error: {response.status_code}"
            if isinstance(body, dict):
                message = str(body.get("detail") or body.get("error") or message)
            raise TimeLoggingAPIError(message, status_code=response.status_code, payload=body)
        return body

    # ---- auth ---------------------------------------------------------------

    async def login(self, username: str, password: str) -> dict[str, Any]:
        body = await self._request(
            "POST", "/accounts/login/", data={"username": username, "password": password},
        )
        self.token = body["tokens"]["access"]
        return body

    # ---- reads --------------------------------------------------------------

    async def get_allocations(self, resource_id: int, status: str | None = None) -> list[dict]:
        params = {"status": status} if status else None
        return await self._request("GET", f"/resources/{resource_id}/allocations", params=params)

    async def get_week_entries(self, resource_id: int, week_start) -> list[dict]:
        return await self._request(
            "GET", f"/resources/{resource_id}/time-entries/week/{_week(week_start)}",
        )

    async def get_time_entry(self, entry_id: int) -> dict:
        return await self._request("GET", f"/time-entries/{entry_id}")

    async def get_weekly_submission(self, resource_id: int, week_start) -> dict | None:
        """The week's submission record, or None when the server has none (404)."""
        try:
            return await self._request(
                "GET", f"/resources/{resource_id}/weekly-submissions/week/{_week(week_start)}",
            )
        except TimeLoggingAPIError as exc:
            if exc.status_code == 404:
                return None
            raise

    # ---- writes -------------------------------------------------------------

    async def create_time_entry(self, payload: dict[str, Any]) -> dict:
        return await self._request("POST", "/time-entries", data=payload)

    async def update_time_entry(self, entry_id: int, payload: dict[str, Any]) -> dict:
        return await self._request("PUT", f"/time-entries/{entry_id}", data=payload)

    async def submit_week(self, resource_id: int, week_start) -> dict:
        return await self._request("POST", f"/time-logging/submit/{resource_id}/{_week(week_start)}")

    async def unsubmit_week(self, resource_id: int, week_start) -> dict:
        return await self._request("POST", f"/time-logging/unsubmit/{resource_id}/{_week(week_start)}")

    # ---- admin reporting ----------------------------------------------------

    async def submission_overview(self, week_start, department: str | None = None) -> dict:
        params = {"week": _week(week_start)}
        if department:
            params["department"] = department
        return await self._request("GET", "/time-logging/submission-overview", params=params)

    async def unsubmitted_resources(self, week_start) -> list[dict]:
        return await self._request("GET", f"/time-logging/unsubmitted/{_week(week_start)}")
