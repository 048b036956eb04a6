# -*- coding: utf-8 -*-
"""Domain models: journal entries, the password and the user profile.

Models hold values and hand every write to their DAO. In-memory state only
changes after the DAO call has returned.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date as Date, datetime
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .dal import JournalDAO, PasswordDAO, UserDAO


@dataclass
class JournalEntry:
    """A single dated journal record."""

    id: int
    title: str
    date: str
    hour: int
    minute: int
    context: str
    dao: Optional["JournalDAO"] = field(default=None, repr=False, compare=False)

    @property
    def time(self) -> str:
        """Entry time as ``HH:MM``."""
        return f"{self.hour:02d}:{self.minute:02d}"

    @property
    def date_value(self) -> Date:
        return datetime.strptime(self.date, "%Y-%m-%d").date()

    async def update_self(self, title: str, date: str, hour: int, minute: int, context: str) -> None:
        """Persist new field values, then adopt them.

        If the DAO raises, this entry keeps its old values.
        """
        candidate = replace(self, title=title, date=date, hour=hour, minute=minute, context=context)
        await self.dao.update(candidate)
        self.title = title
        self.date = date
        self.hour = hour
        self.minute = minute
        self.context = context

    async def delete_self(self) -> None:
        await self.dao.delete(self)

    @classmethod
    async def create_journal(
        cls,
        dao: "JournalDAO",
        title: str,
        date: str,
        hour: int,
        minute: int,
        context: str,
    ) -> "JournalEntry":
        """Insert a new entry and return it with its assigned id."""
        entry_id = await dao.create(title, date, hour, minute, context)
        return cls(id=entry_id, title=title, date=date, hour=hour, minute=minute, context=context, dao=dao)

    @staticmethod
    async def get_journals(dao: "JournalDAO", keyword: Optional[str] = None) -> List["JournalEntry"]:
        """All entries, or those containing *keyword*, newest first."""
        if keyword is None:
            return await dao.list_all()
        return await dao.list_matching(keyword)


class Password:
    """The application password and the rules for changing it."""

    DEFAULT_VALUE = "p"

    def __init__(self, dao: "PasswordDAO", value: str) -> None:
        self._dao = dao
        self.value = value

    @classmethod
    def load(cls, dao: "PasswordDAO") -> "Password":
        return cls(dao, dao.load())

    def set_password(self, new_password: str) -> None:
        self._dao.store(new_password)
        self.value = new_password

    def is_first_time_user(self) -> bool:
        return self.value == self.DEFAULT_VALUE

    def is_correct_password(self, entered: str) -> bool:
        return self.value == entered

    @classmethod
    def is_valid_new_password(cls, new_password: str) -> bool:
        return new_password != cls.DEFAULT_VALUE


class UserProfile:
    """Security question and answer used to recover a forgotten password."""

    def __init__(self, dao: "UserDAO", security_question: str = "", security_question_answer: str = "") -> None:
        self._dao = dao
        self.security_question = security_question
        self.security_question_answer = security_question_answer

    @classmethod
    def load(cls, dao: "UserDAO") -> "UserProfile":
        return cls(dao, dao.load_question(), dao.load_answer())

    def set_security_question(self, question: str) -> None:
        self._dao.store_question(question)
        self.security_question = question

    def set_security_question_answer(self, answer: str) -> None:
        self._dao.store_answer(answer)
        self.security_question_answer = answer

    def has_security_answer(self) -> bool:
        return bool(self.security_question_answer)

    def is_correct_security_question_answer(self, entered: str) -> bool:
        return entered == self.security_question_answer
