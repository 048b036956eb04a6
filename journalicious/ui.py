# -*- coding: utf-8 -*-
"""Textual UI for Journalicious.

This file contains ONLY the UI: screens, modals, and the App wrapper.
Every decision (validation, persistence, where to go next) belongs to the
view controllers; screens read widget values, call their controller and hand
the returned event to ``JournaliciousApp.transition``.

Each View is drawn by one Screen class whose layout is the view's ``.tcss``
resource; ``SCREENS`` below is the View -> Screen registry.

Theme switching:
    views/theme.tcss defines two variants implemented as CSS class scopes,
    `.theme-ink` and `.theme-paper`. The app sets one of these classes at
    startup based on the saved config.
"""
from __future__ import annotations

from typing import Dict, Optional, Type

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen, Screen
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    Static,
    TextArea,
)

from .controllers import (
    CONFIRM_LEAVE_MESSAGE,
    ROUTES,
    ChangePasswordController,
    CreateController,
    HomeController,
    LoginController,
    ResetPasswordController,
    SearchController,
)
from .dal import JournalDAO
from .errors import AuthError, JournaliciousError, ValidationError
from .models import JournalEntry
from .navigation import ActiveView, NavEvent, NavigationController, View, VIEWS_DIR
from .session import Session

THEME_CSS_PATH = str(VIEWS_DIR / "theme.tcss")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _apply_app_theme(app: App, theme_key: str) -> None:
    """Apply one of ('ink', 'paper') to the App."""
    valid = {
        "ink": "theme-ink",
        "paper": "theme-paper",
    }
    target = valid.get(theme_key, "theme-ink")
    for cls in valid.values():
        app.set_class(False, cls)
    app.set_class(True, target)


def _entry_label(entry: JournalEntry) -> str:
    return f"{entry.date} {entry.time} — {entry.title}"


# ---------------------------------------------------------------------------
# Modals
# ---------------------------------------------------------------------------

class ConfirmLeaveModal(ModalScreen[bool]):
    """Ask before throwing away a half-written entry. Dismisses with True on OK."""

    def compose(self) -> ComposeResult:
        yield Container(
            Static("CONFIRM LEAVING PAGE", classes="title"),
            Static(CONFIRM_LEAVE_MESSAGE),
            Horizontal(
                Button("OK", id="ok", classes="-primary"),
                Button("Cancel", id="cancel"),
            ),
            id="modal-card",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "ok")


class AlertModal(ModalScreen[None]):
    """Blocking error message for storage failures."""

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        yield Container(
            Static("ERROR", classes="title"),
            Static(self.message, markup=False),
            Horizontal(Button("Close", id="close", classes="-primary")),
            id="modal-card",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(None)


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------

class ViewScreen(Screen):
    """A screen bound to one view controller."""

    def __init__(self, controller) -> None:
        super().__init__()
        self.controller = controller

    def report(self, exc: JournaliciousError) -> None:
        """Input problems become a notification; anything else a modal alert."""
        if isinstance(exc, (ValidationError, AuthError)):
            self.app.notify(str(exc), severity="error")
        else:
            self.app.push_screen(AlertModal(str(exc)))

    def value_of(self, selector: str) -> str:
        return self.query_one(selector, Input).value


class LoginScreen(ViewScreen):
    """Password prompt. ESC from here quits the app."""

    CSS_PATH = str(View.LOGIN.layout_path)
    BINDINGS = [Binding("escape", "app.quit", "Quit")]
    controller: LoginController

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Static("LOGIN", classes="title"),
            Input(placeholder="password", password=True, id="password"),
            Horizontal(
                Button("Login", id="do_login", classes="-primary"),
                Button("Forgot Password", id="forgot"),
                Button("Exit", id="exit"),
            ),
            id="modal-card",
        )
        yield Footer()

    async def _login(self) -> None:
        try:
            event = self.controller.submit(self.value_of("#password"))
        except JournaliciousError as exc:
            self.query_one("#password", Input).value = ""
            self.report(exc)
            return
        await self.app.transition(event)

    async def on_input_submitted(self, message: Input.Submitted) -> None:
        await self._login()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid == "do_login":
            await self._login()
        elif bid == "forgot":
            await self.app.transition(self.controller.forgot_password())
        elif bid == "exit":
            self.app.exit()


class HomeScreen(ViewScreen):
    """Landing page after login: recent entries and the main actions."""

    CSS_PATH = str(View.HOME.layout_path)
    controller: HomeController

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="modal-card"):
            yield Static("HOME", classes="title")
            yield Static(f"{self.controller.total} entries", classes="hint")
            recent = ListView(id="recent")
            yield recent
            yield Horizontal(
                Button("New Entry", id="new_entry", classes="-primary"),
                Button("Search", id="search"),
                Button("Change Password", id="change_password"),
                Button("Logout", id="logout"),
            )
        yield Footer()

    async def on_mount(self) -> None:
        recent = self.query_one("#recent", ListView)
        for entry in self.controller.recent:
            await recent.append(ListItem(Label(_entry_label(entry), markup=False)))

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        actions = {
            "new_entry": self.controller.new_entry,
            "search": self.controller.search,
            "change_password": self.controller.change_password,
            "logout": self.controller.logout,
        }
        if bid in actions:
            await self.app.transition(actions[bid]())


class CreateScreen(ViewScreen):
    """New entry form. The edit form is the same screen in edit mode."""

    CSS_PATH = str(View.CREATE.layout_path)
    BINDINGS = [Binding("escape", "back", "Back")]
    HEADING = "NEW ENTRY"
    controller: CreateController

    def compose(self) -> ComposeResult:
        c = self.controller
        yield Header()
        yield Container(
            Static(self.HEADING, classes="title"),
            Input(value=c.title, placeholder="title", id="title"),
            Horizontal(
                Input(value=c.date, placeholder="YYYY-MM-DD", id="date"),
                Input(value=f"{c.hour:02d}", placeholder="HH", id="hour"),
                Input(value=f"{c.minute:02d}", placeholder="MM", id="minute"),
                id="when-row",
            ),
            TextArea(c.context, id="context"),
            Horizontal(
                Button("Save", id="save", classes="-primary"),
                Button("Back", id="back"),
            ),
            id="modal-card",
        )
        yield Footer()

    def _context_text(self) -> str:
        return self.query_one("#context", TextArea).text

    async def action_back(self) -> None:
        if self.controller.needs_confirmation(self.value_of("#title"), self._context_text()):
            self.app.push_screen(ConfirmLeaveModal(), self._leave_confirmed)
        else:
            await self.app.transition(self.controller.back())

    async def _leave_confirmed(self, confirmed: Optional[bool]) -> None:
        if confirmed:
            await self.app.transition(self.controller.back())

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid == "save":
            try:
                nav = await self.controller.save(
                    self.value_of("#title"),
                    self.value_of("#date"),
                    self.value_of("#hour"),
                    self.value_of("#minute"),
                    self._context_text(),
                )
            except JournaliciousError as exc:
                self.report(exc)
                return
            self.app.notify("Entry saved.")
            await self.app.transition(nav)
        elif bid == "back":
            await self.action_back()


class EditScreen(CreateScreen):
    CSS_PATH = str(View.EDIT.layout_path)
    HEADING = "EDIT ENTRY"


class SearchScreen(ViewScreen):
    """Keyword search; pick a result to edit it."""

    CSS_PATH = str(View.SEARCH.layout_path)
    BINDINGS = [Binding("escape", "back", "Back")]
    controller: SearchController

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Static("SEARCH", classes="title"),
            Horizontal(
                Input(value=self.controller.keyword, placeholder="keyword", id="keyword"),
                Button("Search", id="do_search", classes="-primary"),
                id="search-row",
            ),
            ListView(id="results"),
            Horizontal(
                Button("Delete", id="delete"),
                Button("Back", id="back"),
            ),
            id="modal-card",
        )
        yield Footer()

    async def on_mount(self) -> None:
        await self._show(self.controller.results)

    async def _show(self, entries) -> None:
        results = self.query_one("#results", ListView)
        await results.clear()
        if not entries:
            await results.append(ListItem(Label("No results.")))
            return
        for entry in entries:
            item = ListItem(Label(_entry_label(entry), markup=False))
            item.data = entry
            await results.append(item)

    async def _search(self) -> None:
        try:
            entries = await self.controller.search(self.value_of("#keyword"))
        except JournaliciousError as exc:
            self.report(exc)
            return
        await self._show(entries)

    async def on_input_submitted(self, message: Input.Submitted) -> None:
        await self._search()

    async def on_list_view_selected(self, message: ListView.Selected) -> None:
        entry = getattr(message.item, "data", None)
        if entry is not None:
            await self.app.transition(self.controller.edit_entry(entry), entry)

    async def action_back(self) -> None:
        await self.app.transition(self.controller.back())

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid == "do_search":
            await self._search()
        elif bid == "delete":
            item = self.query_one("#results", ListView).highlighted_child
            entry = getattr(item, "data", None)
            if entry is None:
                self.app.notify("Select an entry first")
                return
            try:
                entries = await self.controller.delete_entry(entry)
            except JournaliciousError as exc:
                self.report(exc)
                return
            self.app.notify("Entry deleted.")
            await self._show(entries)
        elif bid == "back":
            await self.action_back()


class ChangePasswordScreen(ViewScreen):
    """New password (twice) and an optional security question."""

    CSS_PATH = str(View.CHANGE_PASSWORD.layout_path)
    BINDINGS = [Binding("escape", "back", "Back")]
    controller: ChangePasswordController

    def compose(self) -> ComposeResult:
        hint = (
            "Welcome! Choose a password to replace the default one."
            if self.controller.is_first_time
            else "Security question is used to reset a forgotten password."
        )
        yield Header()
        yield Container(
            Static("CHANGE PASSWORD", classes="title"),
            Static(hint, classes="hint"),
            Input(placeholder="new password", password=True, id="p1"),
            Input(placeholder="confirm new", password=True, id="p2"),
            Input(value=self.controller.current_question, placeholder="security question (optional)", id="sq"),
            Input(placeholder="security answer", password=True, id="sa"),
            Horizontal(
                Button("Save", id="save", classes="-primary"),
                Button("Back", id="back"),
            ),
            id="modal-card",
        )
        yield Footer()

    async def action_back(self) -> None:
        await self.app.transition(self.controller.back())

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid == "save":
            question = self.value_of("#sq")
            answer = self.value_of("#sa")
            if question.strip() == self.controller.current_question and not answer:
                # Unchanged question with no new answer keeps the stored pair.
                question = ""
            try:
                nav = self.controller.submit(self.value_of("#p1"), self.value_of("#p2"), question, answer)
            except JournaliciousError as exc:
                self.report(exc)
                return
            self.app.notify("Password updated.")
            await self.app.transition(nav)
        elif bid == "back":
            await self.action_back()


class ResetPasswordScreen(ViewScreen):
    """Answer the security question to choose a new password."""

    CSS_PATH = str(View.RESET_PASSWORD.layout_path)
    BINDINGS = [Binding("escape", "back", "Back")]
    controller: ResetPasswordController

    def compose(self) -> ComposeResult:
        question = self.controller.question or "(no security question set)"
        yield Header()
        yield Container(
            Static("RESET PASSWORD", classes="title"),
            Static(f"Security question: {question}", classes="hint", markup=False),
            Input(placeholder="security answer", password=True, id="answer"),
            Horizontal(
                Button("Continue", id="submit", classes="-primary"),
                Button("Back", id="back"),
            ),
            id="modal-card",
        )
        yield Footer()

    async def _submit(self) -> None:
        try:
            nav = self.controller.submit(self.value_of("#answer"))
        except JournaliciousError as exc:
            self.report(exc)
            return
        await self.app.transition(nav)

    async def on_input_submitted(self, message: Input.Submitted) -> None:
        await self._submit()

    async def action_back(self) -> None:
        await self.app.transition(self.controller.back())

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid == "submit":
            await self._submit()
        elif bid == "back":
            await self.action_back()


SCREENS: Dict[View, Type[ViewScreen]] = {
    View.LOGIN: LoginScreen,
    View.HOME: HomeScreen,
    View.CHANGE_PASSWORD: ChangePasswordScreen,
    View.RESET_PASSWORD: ResetPasswordScreen,
    View.CREATE: CreateScreen,
    View.EDIT: EditScreen,
    View.SEARCH: SearchScreen,
}


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

class JournaliciousApp(App):
    """Textual App wrapper. Owns the navigation controller; applies theme."""

    TITLE = "JOURNALICIOUS"
    CSS_PATH = THEME_CSS_PATH

    def __init__(self, session: Session, journals: JournalDAO, theme_key: str = "ink") -> None:
        super().__init__()
        self.session = session
        self.navigation = NavigationController(session, journals, ROUTES)
        self.theme_key = theme_key

    async def on_mount(self) -> None:
        _apply_app_theme(self, self.theme_key)
        active = await self.navigation.start()
        await self.push_screen(self._screen_for(active))

    @staticmethod
    def _screen_for(active: ActiveView) -> ViewScreen:
        return SCREENS[active.view](active.controller)

    async def transition(self, event: NavEvent, entry: Optional[JournalEntry] = None) -> None:
        """Follow *event* and replace the current screen with the target view."""
        try:
            active = await self.navigation.dispatch(event, entry)
        except JournaliciousError as exc:
            self.push_screen(AlertModal(str(exc)))
            return
        # not awaited: callers run inside the handler of the screen being replaced
        self.switch_screen(self._screen_for(active))
