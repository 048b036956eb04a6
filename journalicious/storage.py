# -*- coding: utf-8 -*-
"""Persistence adapter: SQLite entries store and flat-file secrets store.

Both stores open a fresh handle per operation and release it on every exit
path. Every low-level failure is re-raised as ``StorageError``.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Dict, List, Mapping, Optional, Sequence, Union
import logging
import os
import tempfile

import aiosqlite

from .errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# ---------------------------------------------------------------------
# Entries (SQLite)
# ---------------------------------------------------------------------

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS journals (
    id       INTEGER PRIMARY KEY AUTOINCREMENT,
    title    TEXT,
    date     TEXT,
    hour     INTEGER,
    minute   INTEGER,
    context  TEXT
);
"""


def _casefold(value):
    """SQL ``casefold(x)``; SQLite's own ``lower()`` only folds ASCII."""
    if value is None:
        return None
    return str(value).casefold()


@dataclass(frozen=True)
class StatementResult:
    """What a write statement reports back."""

    lastrowid: Optional[int]
    rowcount: int


class EntriesStore:
    """Parameterised SQL against the ``journals`` database."""

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)

    async def init(self) -> None:
        """Create the database file and schema if they don't exist."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Cannot create data directory %s", self.path.parent, exc_info=True)
            raise StorageError(f"Cannot create data directory: {exc}") from exc
        async with self.connect() as db:
            await db.executescript(SCHEMA_SQL)
            await db.commit()
        logger.info("Entries store ready at %s", self.path)

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield a fresh connection; translate driver errors to StorageError."""
        try:
            async with aiosqlite.connect(self.path) as db:
                db.row_factory = aiosqlite.Row
                await db.create_function("casefold", 1, _casefold)
                yield db
        except (aiosqlite.Error, OSError) as exc:
            logger.error("Entries store failure on %s", self.path, exc_info=True)
            raise StorageError(f"Journal database unavailable: {exc}") from exc

    async def execute(self, sql: str, params: Sequence[object] = ()) -> StatementResult:
        """Run one write statement and commit it."""
        async with self.connect() as db:
            cur = await db.execute(sql, tuple(params))
            await db.commit()
            result = StatementResult(lastrowid=cur.lastrowid, rowcount=cur.rowcount)
            await cur.close()
        logger.debug("executed %r -> %s", sql.split()[0], result)
        return result

    async def stream(self, sql: str, params: Sequence[object] = ()) -> AsyncIterator[aiosqlite.Row]:
        """Yield result rows one at a time."""
        async with self.connect() as db:
            async with db.execute(sql, tuple(params)) as cur:
                async for row in cur:
                    yield row


# ---------------------------------------------------------------------
# Secrets (key=value flat file)
# ---------------------------------------------------------------------

class SecretsStore:
    """Line-oriented ``key=value`` file with atomic rewrites.

    Lines that are not ours (unknown keys, blanks, anything without ``=``)
    are kept verbatim and in place when the file is rewritten.
    """

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)

    def _read_lines(self) -> List[str]:
        try:
            # only "\n" ends a line; other Unicode separators belong to the value
            with self.path.open("r", encoding="utf-8", newline="") as f:
                lines = f.read().split("\n")
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.error("Cannot read secrets file %s", self.path, exc_info=True)
            raise StorageError(f"Secrets file unreadable: {exc}") from exc
        if lines and lines[-1] == "":
            lines.pop()
        # tolerate hand-edited CRLF files; values never hold "\r"
        return [line[:-1] if line.endswith("\r") else line for line in lines]

    @staticmethod
    def _split(line: str):
        if "=" not in line:
            return None
        key, value = line.split("=", 1)
        return key, value

    def read(self) -> Dict[str, str]:
        """Return every key/value pair in file order. A missing file is empty."""
        out: Dict[str, str] = {}
        for line in self._read_lines():
            pair = self._split(line)
            if pair is not None:
                out[pair[0]] = pair[1]
        return out

    def get(self, key: str) -> Optional[str]:
        return self.read().get(key)

    def set(self, key: str, value: str) -> None:
        self.update({key: value})

    def update(self, values: Mapping[str, str]) -> None:
        """Replace or append *values*, keeping every other line as it was."""
        for key, value in values.items():
            if "=" in key or any(c in key + value for c in "\r\n"):
                raise ValidationError("Secrets cannot contain line breaks", field=key)

        written = set()
        lines: List[str] = []
        for line in self._read_lines():
            pair = self._split(line)
            if pair is None or pair[0] not in values:
                lines.append(line)
            elif pair[0] not in written:
                # later duplicates of a rewritten key are dropped
                lines.append(f"{pair[0]}={values[pair[0]]}")
                written.add(pair[0])
        lines.extend(f"{k}={v}" for k, v in values.items() if k not in written)
        self._atomic_write("\n".join(lines) + "\n")
        logger.debug("secrets updated: %s", ", ".join(values))

    def ensure(self, defaults: Mapping[str, str]) -> None:
        """Write any of *defaults* whose key is not in the file yet."""
        current = self.read()
        missing = {k: v for k, v in defaults.items() if k not in current}
        if missing:
            self.update(missing)

    def _atomic_write(self, text: str) -> None:
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as exc:
            logger.error("Cannot write secrets file %s", self.path, exc_info=True)
            raise StorageError(f"Secrets file unwritable: {exc}") from exc
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
