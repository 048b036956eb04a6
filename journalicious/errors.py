# -*- coding: utf-8 -*-
"""Error kinds shared by every layer of Journalicious.

DAOs translate low-level failures into one of these; models let them
propagate; the UI layer is the only place that turns them into feedback.
"""
from __future__ import annotations

from typing import Optional


class JournaliciousError(Exception):
    """Base class for all application errors."""


class StorageError(JournaliciousError):
    """The entries database or the secrets file could not be read or written."""


class ValidationError(JournaliciousError, ValueError):
    """Invalid domain input.

    ``field`` names the offending input when there is one, so a screen can
    point the user at it.
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field: Optional[str] = field


class NotFound(JournaliciousError, LookupError):
    """An entry id that is not present in the store."""


class AuthError(JournaliciousError):
    """Wrong password or wrong security answer."""


class NavigationError(JournaliciousError):
    """A transition the navigation state machine does not allow."""
