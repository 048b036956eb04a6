# -*- coding: utf-8 -*-
"""Data access objects mapping domain operations onto the storage adapter."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional
import logging
import re

from .errors import NotFound, ValidationError
from .models import JournalEntry, Password
from .storage import EntriesStore, SecretsStore

logger = logging.getLogger(__name__)

PASSWORD_KEY = "password"
QUESTION_KEY = "security_question"
ANSWER_KEY = "security_answer"

ISO_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

ORDER_BY = "ORDER BY date DESC, hour DESC, minute DESC, id DESC"


# ---------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------

def validate_date(date: object) -> str:
    """Return *date* if it is a real ``YYYY-MM-DD`` calendar date."""
    if not isinstance(date, str) or not ISO_DATE_RE.match(date):
        raise ValidationError("Date must look like YYYY-MM-DD", field="date")
    try:
        datetime.strptime(date, "%Y-%m-%d")
    except ValueError as exc:
        raise ValidationError(f"Not a calendar date: {date}", field="date") from exc
    return date


def validate_time_part(value: object, name: str, upper: int) -> int:
    """Return *value* if it is an int in ``[0, upper]``."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name.capitalize()} must be a whole number", field=name)
    if not 0 <= value <= upper:
        raise ValidationError(f"{name.capitalize()} must be between 0 and {upper}", field=name)
    return value


def validate_entry_fields(title, date, hour, minute, context) -> None:
    if title is None:
        raise ValidationError("Title is required", field="title")
    validate_date(date)
    validate_time_part(hour, "hour", 23)
    validate_time_part(minute, "minute", 59)
    if context is None:
        raise ValidationError("Context must be text", field="context")


# ---------------------------------------------------------------------
# Journal entries
# ---------------------------------------------------------------------

class JournalDAO:
    """CRUD and search over the ``journals`` table."""

    def __init__(self, store: EntriesStore) -> None:
        self.store = store

    def _to_entry(self, row) -> JournalEntry:
        return JournalEntry(
            id=int(row["id"]),
            title=row["title"] if row["title"] is not None else "",
            date=row["date"],
            hour=int(row["hour"]),
            minute=int(row["minute"]),
            context=row["context"] if row["context"] is not None else "",
            dao=self,
        )

    async def create(self, title: str, date: str, hour: int, minute: int, context: str) -> int:
        """Insert an entry and return its new id."""
        validate_entry_fields(title, date, hour, minute, context)
        result = await self.store.execute(
            """
            INSERT INTO journals (title, date, hour, minute, context)
            VALUES (?, ?, ?, ?, ?)
            """,
            (title, date, hour, minute, context),
        )
        entry_id = int(result.lastrowid)
        logger.info("Created journal %d for %s", entry_id, date)
        return entry_id

    async def update(self, entry: JournalEntry) -> None:
        """Overwrite every mutable field of the row with ``entry.id``."""
        validate_entry_fields(entry.title, entry.date, entry.hour, entry.minute, entry.context)
        result = await self.store.execute(
            """
            UPDATE journals
               SET title = ?, date = ?, hour = ?, minute = ?, context = ?
             WHERE id = ?
            """,
            (entry.title, entry.date, entry.hour, entry.minute, entry.context, entry.id),
        )
        if result.rowcount == 0:
            raise NotFound(f"Journal {entry.id} does not exist")
        logger.info("Updated journal %d", entry.id)

    async def delete(self, entry: JournalEntry) -> None:
        """Remove the row with ``entry.id``; deleting twice is fine."""
        result = await self.store.execute("DELETE FROM journals WHERE id = ?", (entry.id,))
        if result.rowcount:
            logger.info("Deleted journal %d", entry.id)
        else:
            logger.debug("Journal %d already absent", entry.id)

    async def get(self, entry_id: int) -> JournalEntry:
        rows = [
            row
            async for row in self.store.stream(
                "SELECT id, title, date, hour, minute, context FROM journals WHERE id = ?",
                (entry_id,),
            )
        ]
        if not rows:
            raise NotFound(f"Journal {entry_id} does not exist")
        return self._to_entry(rows[0])

    async def list_all(self) -> List[JournalEntry]:
        """Every entry, newest first."""
        return [
            self._to_entry(row)
            async for row in self.store.stream(
                f"SELECT id, title, date, hour, minute, context FROM journals {ORDER_BY}"
            )
        ]

    async def list_matching(self, keyword: Optional[str]) -> List[JournalEntry]:
        """Entries whose title or context contains *keyword*, ignoring case."""
        if not keyword:
            return await self.list_all()
        needle = keyword.casefold()
        return [
            self._to_entry(row)
            async for row in self.store.stream(
                f"""
                SELECT id, title, date, hour, minute, context
                  FROM journals
                 WHERE instr(casefold(title), ?) > 0
                    OR instr(casefold(context), ?) > 0
                 {ORDER_BY}
                """,
                (needle, needle),
            )
        ]


# ---------------------------------------------------------------------
# Secrets
# ---------------------------------------------------------------------

class PasswordDAO:
    """Reads and writes the ``password`` key of the secrets file."""

    def __init__(self, secrets: SecretsStore) -> None:
        self.secrets = secrets

    def load(self) -> str:
        """Return the stored password, writing the default one if absent."""
        value = self.secrets.get(PASSWORD_KEY)
        if value is None:
            logger.info("No password stored yet; writing the default")
            self.secrets.set(PASSWORD_KEY, Password.DEFAULT_VALUE)
            return Password.DEFAULT_VALUE
        return value

    def store(self, value: str) -> None:
        self.secrets.set(PASSWORD_KEY, value)
        logger.info("Password updated")


class UserDAO:
    """Security question and answer in the secrets file."""

    def __init__(self, secrets: SecretsStore) -> None:
        self.secrets = secrets

    def load_question(self) -> str:
        return self.secrets.get(QUESTION_KEY) or ""

    def load_answer(self) -> str:
        return self.secrets.get(ANSWER_KEY) or ""

    def store_question(self, question: str) -> None:
        self.secrets.set(QUESTION_KEY, question)
        logger.info("Security question updated")

    def store_answer(self, answer: str) -> None:
        self.secrets.set(ANSWER_KEY, answer)
        logger.info("Security answer updated")


def bootstrap_secrets(secrets: SecretsStore) -> None:
    """Make sure every required key is present in the secrets file."""
    secrets.ensure({
        PASSWORD_KEY: Password.DEFAULT_VALUE,
        QUESTION_KEY: "",
        ANSWER_KEY: "",
    })
