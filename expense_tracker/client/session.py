import json
import logging
import os
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class SessionStore:
    """Client-local storage for the session, a small JSON file."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, data: dict) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f)


class SessionManager:
    """
    Owns the logged-in flag and the token; both change together.

    Listeners are called with the new logged-in state after every change,
    which is how the view refreshes its restricted sections.
    """

    def __init__(self, store: SessionStore):
        self._store = store
        data = store.load()
        self._token: Optional[str] = data.get("token") or None
        self._logged_in: bool = bool(data.get("loggedIn")) and self._token is not None
        self._listeners: List[Callable[[bool], None]] = []

    @property
    def token(self) -> Optional[str]:
        return self._token

    def is_logged_in(self) -> bool:
        return self._logged_in

    def subscribe(self, listener: Callable[[bool], None]) -> None:
        self._listeners.append(listener)

    def set_session(self, token: str) -> None:
        self._token = token
        self._logged_in = True
        self._persist()

    def clear_session(self) -> None:
        self._token = None
        self._logged_in = False
        self._persist()

    def _persist(self) -> None:
        self._store.save({"loggedIn": self._logged_in, "token": self._token})
        for listener in self._listeners:
            listener(self._logged_in)
