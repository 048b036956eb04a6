# -*- coding: utf-8 -*-
"""Journalicious package.

Modules:
    errors:      Error kinds shared by every layer.
    config:      JSON config, data-directory paths, logging setup.
    storage:     SQLite entries store + key=value secrets file.
    dal:         JournalDAO, PasswordDAO, UserDAO.
    models:      JournalEntry, Password, UserProfile.
    session:     Process-wide session and startup bootstrap.
    navigation:  View/event state machine and navigation controller.
    controllers: Per-view controllers and the view registry.
    ui:          Textual-based UI (screens, modals, app).
    views/:      Textual CSS layout for each view (loaded by ui.py).
"""

__all__ = ["errors", "config", "storage", "dal", "models", "session", "navigation", "controllers", "ui"]
