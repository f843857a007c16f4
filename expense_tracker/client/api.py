import logging
from typing import Any, Optional

import requests

from expense_tracker.core.config import settings

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """The request never produced a usable JSON envelope."""


class ApiResponse:
    def __init__(self, status_code: int, data: Any):
        self.status_code = status_code
        self.data = data

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def message(self) -> Optional[str]:
        """Server-supplied message, if the envelope carries one."""
        if isinstance(self.data, dict):
            if self.data.get("message"):
                return self.data["message"]
            errors = self.data.get("errors")
            if errors:
                return "; ".join(
                    e.get("message", "") if isinstance(e, dict) else str(e) for e in errors
                )
        return None


class ApiClient:
    """
    Thin JSON client for the expense API.

    `http` is anything with a requests-style ``request(method, url, json=, headers=)``;
    a plain ``requests.Session`` by default. No timeout or retry is applied.
    """

    def __init__(self, base_url: str = None, http=None):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.http = http or requests.Session()

    def request(self, method: str, path: str, payload: dict = None, token: str = None) -> ApiResponse:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, json=payload, headers=headers)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise TransportError(str(e)) from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error("%s %s returned a non-JSON body (status %s)", method, path, response.status_code)
            raise TransportError("Response was not valid JSON") from e

        return ApiResponse(response.status_code, data)

    # ---------- Auth ----------
    def register(self, username: str, email: str, password: str) -> ApiResponse:
        return self.request("POST", "/register", {"username": username, "email": email, "password": password})

    def login(self, email: str, password: str) -> ApiResponse:
        return self.request("POST", "/login", {"email": email, "password": password})

    # ---------- Expenses ----------
    def add_expense(self, token: str, fields: dict) -> ApiResponse:
        return self.request("POST", "/add-expense", fields, token=token)

    def list_expenses(self, token: str) -> ApiResponse:
        return self.request("GET", "/expenses", token=token)

    def get_expense(self, token: str, expense_id: int) -> ApiResponse:
        return self.request("GET", f"/expenses/{expense_id}", token=token)

    def update_expense(self, token: str, expense_id: int, fields: dict) -> ApiResponse:
        return self.request("PUT", f"/expenses/{expense_id}", fields, token=token)

    def delete_expense(self, token: str, expense_id: int) -> ApiResponse:
        return self.request("DELETE", f"/expenses/{expense_id}", token=token)
