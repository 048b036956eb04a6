# -*- coding: utf-8 -*-
"""Process-wide session: the loaded user, the password and Back memory."""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Tuple
import logging

from .config import AppPaths
from .dal import JournalDAO, PasswordDAO, UserDAO, bootstrap_secrets
from .errors import NavigationError
from .models import Password, UserProfile
from .storage import EntriesStore, SecretsStore

if TYPE_CHECKING:
    from .navigation import View

logger = logging.getLogger(__name__)


class Session:
    """Shared by reference with every view controller.

    ``previous_view`` is a single slot, not a stack: Back returns to the
    most recent origin only.
    """

    def __init__(self, user: UserProfile, password: Password) -> None:
        self.user = user
        self.password = password
        self.previous_view: Optional["View"] = None
        self.closed = False

    @classmethod
    def open(cls, password_dao: PasswordDAO, user_dao: UserDAO) -> "Session":
        """Load the password and profile from storage."""
        session = cls(UserProfile.load(user_dao), Password.load(password_dao))
        logger.info("Session opened (first time user: %s)", session.password.is_first_time_user())
        return session

    def remember(self, view: "View") -> None:
        self.previous_view = view

    def recall(self) -> "View":
        if self.previous_view is None:
            raise NavigationError("There is no previous view to go back to")
        return self.previous_view

    def close(self) -> None:
        self.previous_view = None
        self.closed = True
        logger.info("Session closed")


async def bootstrap(paths: AppPaths) -> Tuple[Session, JournalDAO]:
    """Prepare both stores in *paths* and open the session.

    Raises StorageError when the data directory cannot be used.
    """
    entries = EntriesStore(paths.db_path)
    await entries.init()
    secrets = SecretsStore(paths.secrets_path)
    bootstrap_secrets(secrets)
    session = Session.open(PasswordDAO(secrets), UserDAO(secrets))
    return session, JournalDAO(entries)
