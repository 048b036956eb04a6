# -*- coding: utf-8 -*-
"""Per-view controllers.

Each controller validates the input of one view and answers with the
``NavEvent`` the view should emit. Controllers never touch widgets, and
constructing one performs no I/O; ``initialize()`` is the only step that may
read from storage.
"""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, List, Optional, Union
import logging

from .dal import JournalDAO, validate_date, validate_time_part
from .errors import AuthError, ValidationError
from .models import JournalEntry
from .navigation import NavEvent, View, ViewRoute
from .session import Session

logger = logging.getLogger(__name__)

CONFIRM_LEAVE_MESSAGE = "Are you sure? Progress will be lost"


class ViewController:
    """Base class: holds the session slice and the journal DAO."""

    view: View

    def __init__(self, session: Session, journals: JournalDAO) -> None:
        self.session = session
        self.journals = journals

    async def initialize(self) -> None:
        """Load whatever the view needs to display. Default: nothing."""

    def back(self) -> NavEvent:
        return NavEvent.BACK


# ---------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------

class LoginController(ViewController):
    view = View.LOGIN

    def submit(self, entered: str) -> NavEvent:
        """Check the password; first-time users go on to set a real one."""
        password = self.session.password
        if not password.is_correct_password(entered):
            logger.warning("Rejected login attempt")
            raise AuthError("Incorrect password")
        if password.is_first_time_user():
            return NavEvent.FIRST_TIME
        return NavEvent.LOGIN_OK

    def forgot_password(self) -> NavEvent:
        return NavEvent.FORGOT_PASSWORD


class ChangePasswordController(ViewController):
    view = View.CHANGE_PASSWORD

    @property
    def is_first_time(self) -> bool:
        return self.session.password.is_first_time_user()

    @property
    def current_question(self) -> str:
        return self.session.user.security_question

    def submit(self, new_password: str, confirmation: str, question: str = "", answer: str = "") -> NavEvent:
        """Validate and store a new password, plus an optional security question."""
        if not new_password:
            raise ValidationError("New password required", field="new_password")
        if not self.session.password.is_valid_new_password(new_password):
            raise ValidationError("Choose a password other than the default", field="new_password")
        if new_password != confirmation:
            raise ValidationError("Passwords do not match", field="confirmation")
        question = question.strip()
        if bool(question) != bool(answer):
            raise ValidationError("Enter both a security question and its answer", field="question")

        if question:
            self.session.user.set_security_question(question)
            self.session.user.set_security_question_answer(answer)
        self.session.password.set_password(new_password)
        return NavEvent.OK


class ResetPasswordController(ViewController):
    view = View.RESET_PASSWORD

    def __init__(self, session: Session, journals: JournalDAO) -> None:
        super().__init__(session, journals)
        self.question = ""

    async def initialize(self) -> None:
        self.question = self.session.user.security_question

    def submit(self, answer: str) -> NavEvent:
        user = self.session.user
        if not user.has_security_answer():
            raise AuthError("No security question has been set up")
        if not user.is_correct_security_question_answer(answer):
            logger.warning("Rejected security answer")
            raise AuthError("Incorrect answer")
        return NavEvent.ANSWERED


# ---------------------------------------------------------------------
# Journals
# ---------------------------------------------------------------------

class HomeController(ViewController):
    view = View.HOME

    RECENT_LIMIT = 10

    def __init__(self, session: Session, journals: JournalDAO) -> None:
        super().__init__(session, journals)
        self.recent: List[JournalEntry] = []
        self.total = 0

    async def initialize(self) -> None:
        entries = await JournalEntry.get_journals(self.journals)
        self.total = len(entries)
        self.recent = entries[: self.RECENT_LIMIT]

    def new_entry(self) -> NavEvent:
        return NavEvent.NEW_ENTRY

    def search(self) -> NavEvent:
        return NavEvent.SEARCH

    def change_password(self) -> NavEvent:
        return NavEvent.CHANGE_PASSWORD

    def logout(self) -> NavEvent:
        return NavEvent.LOGOUT


def _parse_time_part(value: Union[int, str], name: str, upper: int) -> int:
    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise ValidationError(f"{name.capitalize()} must be a whole number", field=name)
        value = int(text)
    return validate_time_part(value, name, upper)


class CreateController(ViewController):
    """Create a fresh entry, or edit one handed over by the Search view."""

    view = View.CREATE

    def __init__(
        self,
        session: Session,
        journals: JournalDAO,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__(session, journals)
        self.clock = clock
        self.journal: Optional[JournalEntry] = None
        self.title = ""
        self.date = ""
        self.hour = 0
        self.minute = 0
        self.context = ""

    @property
    def is_edit(self) -> bool:
        return self.journal is not None

    def initialize_old_journal(self, journal: JournalEntry) -> None:
        """Switch to edit mode and fill every field from *journal*."""
        self.view = View.EDIT
        self.journal = journal
        self.title = journal.title
        self.date = journal.date
        self.hour = journal.hour
        self.minute = journal.minute
        self.context = journal.context

    async def initialize(self) -> None:
        if self.journal is None:
            now = self.clock()
            self.date = now.date().isoformat()
            self.hour = now.hour
            self.minute = now.minute

    @staticmethod
    def is_dirty(title: str, context: str) -> bool:
        return title != "" or context != ""

    def needs_confirmation(self, title: str, context: str) -> bool:
        """Leaving with anything typed asks the user first."""
        return self.is_dirty(title, context)

    async def save(
        self,
        title: str,
        date: str,
        hour: Union[int, str],
        minute: Union[int, str],
        context: str,
    ) -> NavEvent:
        """Validate the form, then create or update the entry."""
        if not title or not title.strip():
            raise ValidationError("Title required", field="title")
        date = validate_date(date.strip() if isinstance(date, str) else date)
        hour = _parse_time_part(hour, "hour", 23)
        minute = _parse_time_part(minute, "minute", 59)
        context = context or ""

        if self.journal is None:
            self.journal = await JournalEntry.create_journal(
                self.journals, title, date, hour, minute, context
            )
        else:
            await self.journal.update_self(title, date, hour, minute, context)
        self.title, self.date, self.hour, self.minute, self.context = title, date, hour, minute, context
        return NavEvent.SAVE


class SearchController(ViewController):
    view = View.SEARCH

    def __init__(self, session: Session, journals: JournalDAO) -> None:
        super().__init__(session, journals)
        self.keyword = ""
        self.results: List[JournalEntry] = []

    async def initialize(self) -> None:
        await self.search("")

    async def search(self, keyword: str) -> List[JournalEntry]:
        self.keyword = keyword
        self.results = await JournalEntry.get_journals(self.journals, keyword)
        return self.results

    def edit_entry(self, entry: JournalEntry) -> NavEvent:
        return NavEvent.EDIT_ENTRY

    async def delete_entry(self, entry: JournalEntry) -> List[JournalEntry]:
        """Delete *entry* and rerun the current search."""
        await entry.delete_self()
        return await self.search(self.keyword)


# ---------------------------------------------------------------------
# View registry
# ---------------------------------------------------------------------

ROUTES: Dict[View, ViewRoute] = {
    View.LOGIN: ViewRoute(View.LOGIN.layout_path, LoginController),
    View.HOME: ViewRoute(View.HOME.layout_path, HomeController),
    View.CHANGE_PASSWORD: ViewRoute(View.CHANGE_PASSWORD.layout_path, ChangePasswordController),
    View.RESET_PASSWORD: ViewRoute(View.RESET_PASSWORD.layout_path, ResetPasswordController),
    View.CREATE: ViewRoute(View.CREATE.layout_path, CreateController),
    View.EDIT: ViewRoute(View.EDIT.layout_path, CreateController),
    View.SEARCH: ViewRoute(View.SEARCH.layout_path, SearchController),
}
