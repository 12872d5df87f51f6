"""HTTP client for talking with the BusinessTracker REST API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

import requests

from business_tracker.config import Settings
from business_tracker.engine.categories import ExpenseCategory, category_label
from business_tracker.engine.logging import setup_logger

__all__ = ["ApiError", "ExpenseClient"]

LOG = setup_logger(__name__)

DEFAULT_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class ApiError(RuntimeError):
    """Raised when the API rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ExpenseClient:
    """Thin wrapper over the expense endpoints.

    Every call unwraps the ``{"success", "message", "data"}`` envelope and
    returns ``data``; a ``success: false`` reply or a transport failure raises
    :class:`ApiError`.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)

    @classmethod
    def from_settings(cls, settings: Settings, session: requests.Session | None = None) -> ExpenseClient:
        """Build a client from the ``api_url`` and ``api_timeout`` settings."""

        return cls(base_url=settings.api_url, timeout=settings.api_timeout, session=session)

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            LOG.warning("%s %s failed: %s", method, url, exc)
            raise ApiError(f"Could not reach {url}: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(
                f"Invalid response from {url} (HTTP {response.status_code})",
                response.status_code,
            ) from exc

        if not isinstance(payload, dict):
            raise ApiError(f"Unexpected payload from {url}", response.status_code)
        if not response.ok or not payload.get("success", False):
            message = payload.get("message") or f"HTTP {response.status_code}"
            raise ApiError(message, response.status_code)
        return payload

    def _data(self, method: str, path: str, **kwargs: Any) -> Any:
        return self._request(method, path, **kwargs).get("data")

    def health(self) -> dict:
        return self._request("GET", "/health")

    def test_connection(self) -> bool:
        try:
            return self.health().get("status") == "UP"
        except ApiError:
            return False

    def list_expenses(self) -> list[dict]:
        return self._data("GET", "/expenses")

    def get_expense(self, expense_id: int) -> dict:
        return self._data("GET", f"/expenses/{expense_id}")

    def create_expense(self, payload: dict) -> dict:
        return self._data("POST", "/expenses", json=_encode(payload))

    def update_expense(self, expense_id: int, payload: dict) -> dict:
        return self._data("PUT", f"/expenses/{expense_id}", json=_encode(payload))

    def delete_expense(self, expense_id: int) -> None:
        self._request("DELETE", f"/expenses/{expense_id}")

    def expenses_by_category(self, category: ExpenseCategory | str) -> list[dict]:
        return self._data("GET", f"/expenses/category/{category_label(category)}")

    def search(self, term: str) -> list[dict]:
        return self._data("GET", "/expenses/search", params={"term": term})

    def expenses_between(self, start: datetime, end: datetime) -> list[dict]:
        params = {"start": start.isoformat(), "end": end.isoformat()}
        return self._data("GET", "/expenses/range", params=params)

    def overview(self, threshold: float | None = None) -> dict:
        params = {"threshold": threshold} if threshold is not None else None
        return self._data("GET", "/expenses/stats", params=params)

    def quarterly_statistics(self, year: int | None = None) -> dict:
        params = {"year": year} if year is not None else None
        return self._data("GET", "/expenses/stats/quarterly", params=params)

    def yearly_statistics(self) -> dict:
        return self._data("GET", "/expenses/stats/yearly")


def _encode(payload: dict) -> dict:
    """Make enum, datetime and decimal values JSON friendly."""

    encoded: dict = {}
    for key, value in payload.items():
        if isinstance(value, ExpenseCategory):
            value = value.value
        elif isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, Decimal):
            value = str(value)
        encoded[key] = value
    return encoded
