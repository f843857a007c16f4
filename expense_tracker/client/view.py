"""
Headless screen state for the single-page client.

Holds what a user would see: which sections are visible, which auth form
is shown, the expense form fields, the rendered expense rows and any
transient notices. The View Controller is the only writer.
"""
import logging
import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

SECTIONS = ("home", "get-started", "add-expense", "expenses")
RESTRICTED_SECTIONS = ("add-expense", "expenses")
ENTRY_SECTION = "get-started"
NOTICE_SECONDS = 3.0

EXPENSE_FIELDS = ("title", "amount", "description", "date")


@dataclass(eq=False)
class Notice:
    message: str
    kind: str  # "success" | "error"


@dataclass
class ExpenseRow:
    expense_id: int
    title: str
    amount_text: str
    date_text: str
    description: str
    on_edit: Optional[Callable[[], None]] = field(default=None, repr=False)
    on_delete: Optional[Callable[[], None]] = field(default=None, repr=False)

    def click_edit(self) -> None:
        if self.on_edit:
            self.on_edit()

    def click_delete(self) -> None:
        if self.on_delete:
            self.on_delete()


def format_local_date(iso_value: str) -> str:
    """Render an ISO date in the viewer's locale date format."""
    try:
        return date.fromisoformat(iso_value[:10]).strftime("%x")
    except (TypeError, ValueError):
        return str(iso_value)


class Screen:
    def __init__(self, notice_seconds: float = NOTICE_SECONDS):
        self.notice_seconds = notice_seconds
        self.hidden = set(RESTRICTED_SECTIONS)
        self.current_section = ENTRY_SECTION
        self.logout_visible = False
        self.auth_form = "login-form"
        self.expense_form: Dict[str, str] = {name: "" for name in EXPENSE_FIELDS}
        self.expense_rows: List[ExpenseRow] = []
        self.notices: List[Notice] = []
        self._lock = threading.Lock()

    # ---------- Sections ----------
    def toggle_sections(self, logged_in: bool) -> None:
        for section in RESTRICTED_SECTIONS:
            if logged_in:
                self.hidden.discard(section)
            else:
                self.hidden.add(section)
        if logged_in:
            self.hidden.add(ENTRY_SECTION)
        else:
            self.hidden.discard(ENTRY_SECTION)
        self.logout_visible = logged_in

    def show_section(self, section_id: str) -> None:
        if section_id not in SECTIONS:
            raise ValueError(f"Unknown section: {section_id}")
        self.current_section = section_id

    def show_form(self, form_id: str) -> None:
        self.auth_form = form_id

    # ---------- Expense form ----------
    def fill_expense_form(self, **values) -> None:
        for name, value in values.items():
            if name not in self.expense_form:
                raise KeyError(name)
            self.expense_form[name] = "" if value is None else str(value)

    def reset_expense_form(self) -> None:
        self.expense_form = {name: "" for name in EXPENSE_FIELDS}

    # ---------- Expense list ----------
    def render_expenses(self, expenses: List[dict]) -> List[ExpenseRow]:
        # Full replace, no diffing
        self.expense_rows = [
            ExpenseRow(
                expense_id=item["id"],
                title=item.get("title", ""),
                amount_text=f"${item.get('amount')}",
                date_text=format_local_date(item.get("date", "")),
                description=item.get("description", ""),
            )
            for item in expenses
        ]
        return self.expense_rows

    # ---------- Notices ----------
    def notify(self, message: str, kind: str) -> Notice:
        """Show a notice that dismisses itself; notices may stack."""
        notice = Notice(message, kind)
        with self._lock:
            self.notices.append(notice)
        log = logger.error if kind == "error" else logger.info
        log("notice: %s", message)

        timer = threading.Timer(self.notice_seconds, self._dismiss, args=(notice,))
        timer.daemon = True
        timer.start()
        return notice

    def _dismiss(self, notice: Notice) -> None:
        with self._lock:
            self.notices = [n for n in self.notices if n is not notice]
