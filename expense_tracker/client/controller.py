"""
View Controller for the expense client.

One method per user action. Each one collects input, calls the API,
reads the envelope and updates the screen. Every outcome ends in exactly
one notice; nothing is retried.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from expense_tracker.client.api import ApiClient, ApiResponse, TransportError
from expense_tracker.client.session import SessionManager
from expense_tracker.client.view import ENTRY_SECTION, RESTRICTED_SECTIONS, Screen

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreateMode:
    pass


@dataclass(frozen=True)
class EditingMode:
    expense_id: int


CREATE = CreateMode()


class ViewController:
    FORMS = ("login", "register", "expense")

    def __init__(self, session: SessionManager, api: ApiClient, screen: Optional[Screen] = None):
        self.session = session
        self.api = api
        self.screen = screen or Screen()
        self.mode = CREATE
        self._in_flight = {form: False for form in self.FORMS}
        session.subscribe(self._on_session_change)

    # ---------- Lifecycle ----------
    def start(self) -> None:
        """Initial render from the persisted session."""
        logged_in = self.session.is_logged_in()
        self.screen.toggle_sections(logged_in)
        if logged_in:
            self.screen.show_section("home")
            self.load_expenses()
        else:
            self.screen.show_section(ENTRY_SECTION)
            self.screen.show_form("login-form")

    def _on_session_change(self, logged_in: bool) -> None:
        self.screen.toggle_sections(logged_in)
        if not logged_in:
            self.mode = CREATE
            self.screen.reset_expense_form()
            self.screen.expense_rows = []
            self.screen.show_section(ENTRY_SECTION)

    def is_in_flight(self, form: str) -> bool:
        return self._in_flight[form]

    # ---------- Plumbing ----------
    def _submit(self, form: str, action: Callable[[], bool]) -> bool:
        # A second submit of the same form is dropped until the first resolves
        if self._in_flight[form]:
            logger.debug("Ignoring resubmit of %s form", form)
            return False
        self._in_flight[form] = True
        try:
            return action()
        finally:
            self._in_flight[form] = False

    def _call(self, fallback: str, fn: Callable[[], ApiResponse]) -> Optional[ApiResponse]:
        try:
            return fn()
        except TransportError as e:
            logger.error("Transport failure: %s", e)
            self.screen.notify(fallback, "error")
            return None

    def _fail(self, response: ApiResponse, fallback: str) -> bool:
        self.screen.notify(response.message or fallback, "error")
        return False

    def _require_login(self) -> bool:
        if self.session.is_logged_in():
            return True
        self.screen.notify("Please log in to access this section.", "error")
        self.screen.show_section(ENTRY_SECTION)
        return False

    @staticmethod
    def _succeeded(response: ApiResponse) -> bool:
        data = response.data
        return response.ok and isinstance(data, dict) and bool(data.get("success") or data.get("token"))

    # ---------- Navigation ----------
    def open_section(self, section_id: str) -> bool:
        if section_id in RESTRICTED_SECTIONS and not self._require_login():
            return False
        self.screen.show_section(section_id)
        return True

    def show_register_form(self) -> None:
        self.screen.show_form("register-form")

    def show_login_form(self) -> None:
        self.screen.show_form("login-form")

    # ---------- Auth ----------
    def login(self, email: str, password: str) -> bool:
        def action():
            response = self._call(
                "An error occurred during login. Please try again.",
                lambda: self.api.login(email, password),
            )
            if response is None:
                return False
            if not self._succeeded(response):
                return self._fail(response, "Invalid email or password. Please try again.")

            self.session.set_session(response.data["token"])
            self.screen.notify("Login successful!", "success")
            self.screen.show_section("home")
            self.load_expenses()
            return True

        return self._submit("login", action)

    def register(self, username: str, email: str, password: str) -> bool:
        def action():
            response = self._call(
                "An error occurred during registration. Please try again.",
                lambda: self.api.register(username, email, password),
            )
            if response is None:
                return False
            if not self._succeeded(response):
                return self._fail(response, "Registration failed. Please try again.")

            self.screen.notify(f"Registration successful! Welcome, {username}.", "success")
            self.screen.show_form("login-form")
            return True

        return self._submit("register", action)

    def logout(self) -> None:
        # Stateless sessions: nothing to tell the server
        self.session.clear_session()
        self.screen.notify("Logged out successfully!", "success")

    # ---------- Expenses ----------
    def submit_expense(self) -> bool:
        """Submit the expense form as a create or an update, per the current mode."""
        if not self._require_login():
            return False
        fields = dict(self.screen.expense_form)
        mode = self.mode

        if isinstance(mode, EditingMode):
            return self._submit("expense", lambda: self._update_expense(mode.expense_id, fields))
        return self._submit("expense", lambda: self._add_expense(fields))

    def _add_expense(self, fields: dict) -> bool:
        response = self._call(
            "An error occurred while adding the expense. Please try again.",
            lambda: self.api.add_expense(self.session.token, fields),
        )
        if response is None:
            return False
        if not self._succeeded(response):
            return self._fail(response, "Failed to add expense. Please try again.")

        self.screen.notify("Expense added successfully!", "success")
        self.screen.reset_expense_form()
        self.load_expenses()
        return True

    def _update_expense(self, expense_id: int, fields: dict) -> bool:
        response = self._call(
            "An error occurred while updating the expense. Please try again.",
            lambda: self.api.update_expense(self.session.token, expense_id, fields),
        )
        if response is None:
            return False
        if not self._succeeded(response):
            return self._fail(response, "Failed to update expense. Please try again.")

        self.screen.notify("Expense updated successfully!", "success")
        self.cancel_edit()
        self.load_expenses()
        return True

    def start_edit(self, expense_id: int) -> bool:
        """Prefill the expense form from the server and switch to editing mode."""
        if not self._require_login():
            return False
        response = self._call(
            "An error occurred while loading expense details. Please try again.",
            lambda: self.api.get_expense(self.session.token, expense_id),
        )
        if response is None:
            return False
        if not self._succeeded(response) or not response.data.get("expense"):
            return self._fail(response, "Failed to load expense details.")

        expense = response.data["expense"]
        self.screen.fill_expense_form(
            title=expense["title"],
            amount=expense["amount"],
            description=expense["description"],
            # ISO calendar date only, no time of day
            date=str(expense["date"])[:10],
        )
        self.mode = EditingMode(expense_id)
        self.screen.show_section("add-expense")
        self.screen.notify(f"Editing \"{expense['title']}\".", "success")
        return True

    def cancel_edit(self) -> None:
        self.mode = CREATE
        self.screen.reset_expense_form()

    def delete_expense(self, expense_id: int) -> bool:
        if not self._require_login():
            return False
        response = self._call(
            "An error occurred while deleting the expense. Please try again.",
            lambda: self.api.delete_expense(self.session.token, expense_id),
        )
        if response is None:
            return False
        if not self._succeeded(response):
            return self._fail(response, "Failed to delete expense. Please try again.")

        self.screen.notify("Expense deleted successfully!", "success")
        if isinstance(self.mode, EditingMode):
            self.cancel_edit()
        self.load_expenses()
        return True

    def load_expenses(self) -> bool:
        """Fetch the caller's expenses and fully re-render the list."""
        response = self._call(
            "An error occurred while loading expenses. Please try again.",
            lambda: self.api.list_expenses(self.session.token),
        )
        if response is None:
            return False
        if not response.ok or not isinstance(response.data, list):
            return self._fail(response, "Failed to load expenses.")

        rows = self.screen.render_expenses(response.data)
        # Fresh rows get fresh handlers on every refresh
        for row in rows:
            row.on_edit = lambda expense_id=row.expense_id: self.start_edit(expense_id)
            row.on_delete = lambda expense_id=row.expense_id: self.delete_expense(expense_id)
        return True
