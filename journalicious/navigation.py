# -*- coding: utf-8 -*-
"""Navigation state machine over the application's views.

``Navigator`` is the pure state machine (states, events, the transition
table and the Back memory). ``NavigationController`` drives it and builds
the controller for each view it lands on.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Tuple, Union
import logging

from .errors import NavigationError

if TYPE_CHECKING:
    from .dal import JournalDAO
    from .models import JournalEntry
    from .session import Session

logger = logging.getLogger(__name__)

VIEWS_DIR = Path(__file__).with_name("views")


class View(Enum):
    """Every screen of the application, bound to its layout resource."""

    LOGIN = "Login.tcss"
    HOME = "Home.tcss"
    CHANGE_PASSWORD = "ChangePassword.tcss"
    RESET_PASSWORD = "ResetPassword.tcss"
    CREATE = "Create.tcss"
    EDIT = "Edit.tcss"
    SEARCH = "Search.tcss"

    @property
    def layout(self) -> str:
        return self.value

    @property
    def layout_path(self) -> Path:
        return VIEWS_DIR / self.value


class NavEvent(Enum):
    """Events emitted by view controllers."""

    LOGIN_OK = auto()
    FIRST_TIME = auto()
    FORGOT_PASSWORD = auto()
    NEW_ENTRY = auto()
    SEARCH = auto()
    CHANGE_PASSWORD = auto()
    LOGOUT = auto()
    BACK = auto()
    SAVE = auto()
    EDIT_ENTRY = auto()
    OK = auto()
    ANSWERED = auto()


class _Previous:
    """Transition target meaning "wherever the session says we came from"."""

    def __repr__(self) -> str:
        return "PREVIOUS"


PREVIOUS = _Previous()

Target = Union[View, _Previous]


@dataclass(frozen=True)
class Rule:
    target: Target
    # Store the source view as the session's previous view before moving.
    remember: bool = False


TRANSITIONS: Dict[Tuple[View, NavEvent], Rule] = {
    (View.LOGIN, NavEvent.LOGIN_OK): Rule(View.HOME),
    (View.LOGIN, NavEvent.FIRST_TIME): Rule(View.CHANGE_PASSWORD, remember=True),
    (View.LOGIN, NavEvent.FORGOT_PASSWORD): Rule(View.RESET_PASSWORD, remember=True),
    (View.HOME, NavEvent.NEW_ENTRY): Rule(View.CREATE, remember=True),
    (View.HOME, NavEvent.SEARCH): Rule(View.SEARCH, remember=True),
    (View.HOME, NavEvent.CHANGE_PASSWORD): Rule(View.CHANGE_PASSWORD, remember=True),
    (View.HOME, NavEvent.LOGOUT): Rule(View.LOGIN),
    (View.CREATE, NavEvent.BACK): Rule(PREVIOUS),
    (View.CREATE, NavEvent.SAVE): Rule(PREVIOUS),
    (View.SEARCH, NavEvent.EDIT_ENTRY): Rule(View.EDIT, remember=True),
    # Search is only reachable from Home; after an edit the slot holds SEARCH.
    (View.SEARCH, NavEvent.BACK): Rule(View.HOME),
    (View.EDIT, NavEvent.BACK): Rule(View.SEARCH),
    (View.EDIT, NavEvent.SAVE): Rule(View.SEARCH),
    (View.CHANGE_PASSWORD, NavEvent.OK): Rule(PREVIOUS),
    (View.CHANGE_PASSWORD, NavEvent.BACK): Rule(PREVIOUS),
    (View.RESET_PASSWORD, NavEvent.ANSWERED): Rule(View.CHANGE_PASSWORD),
    (View.RESET_PASSWORD, NavEvent.BACK): Rule(PREVIOUS),
}


@dataclass(frozen=True)
class Transition:
    source: View
    event: NavEvent
    target: View
    entry: Optional["JournalEntry"] = None


class Navigator:
    """Current view plus the transition rules."""

    def __init__(self, session: "Session", initial: View = View.LOGIN) -> None:
        self.session = session
        self.current = initial

    def can_fire(self, event: NavEvent) -> bool:
        return (self.current, event) in TRANSITIONS

    def fire(self, event: NavEvent, entry: Optional["JournalEntry"] = None) -> Transition:
        """Apply *event* to the current view and return what happened."""
        rule = TRANSITIONS.get((self.current, event))
        if rule is None:
            raise NavigationError(f"{event.name} is not allowed from {self.current.name}")
        if rule.target is View.EDIT and entry is None:
            raise NavigationError("Editing needs an entry")

        if rule.target is PREVIOUS:
            target = self.session.recall()
        else:
            target = rule.target
        if rule.remember:
            self.session.remember(self.current)

        transition = Transition(self.current, event, target, entry if target is View.EDIT else None)
        self.current = target
        logger.info("%s --%s--> %s", transition.source.name, event.name, target.name)
        return transition

    def reset(self) -> None:
        self.current = View.LOGIN


# ---------------------------------------------------------------------
# Controller dispatch
# ---------------------------------------------------------------------

ControllerFactory = Callable[["Session", "JournalDAO"], Any]


@dataclass(frozen=True)
class ViewRoute:
    """How to show a view: its layout and a factory for its controller."""

    layout: Path
    controller_factory: ControllerFactory


@dataclass(frozen=True)
class ActiveView:
    view: View
    layout: Path
    controller: Any


class NavigationController:
    """Runs the navigator and hands each new view an initialized controller."""

    def __init__(
        self,
        session: "Session",
        journals: "JournalDAO",
        routes: Mapping[View, ViewRoute],
    ) -> None:
        missing = set(View) - set(routes)
        if missing:
            raise NavigationError(f"No route for {sorted(v.name for v in missing)}")
        self.session = session
        self.journals = journals
        self.routes = routes
        self.navigator = Navigator(session)
        self.active: Optional[ActiveView] = None

    @property
    def current(self) -> View:
        return self.navigator.current

    async def start(self) -> ActiveView:
        """Enter the initial view."""
        self.navigator.reset()
        return await self._enter(self.navigator.current)

    async def dispatch(self, event: NavEvent, entry: Optional["JournalEntry"] = None) -> ActiveView:
        """Fire *event*; if the target view fails to load, nothing moves."""
        current, previous = self.navigator.current, self.session.previous_view
        transition = self.navigator.fire(event, entry)
        try:
            return await self._enter(transition.target, transition.entry)
        except Exception:
            self.navigator.current = current
            self.session.previous_view = previous
            raise

    async def _enter(self, view: View, entry: Optional["JournalEntry"] = None) -> ActiveView:
        route = self.routes[view]
        controller = route.controller_factory(self.session, self.journals)
        if entry is not None:
            controller.initialize_old_journal(entry)
        await controller.initialize()
        self.active = ActiveView(view, route.layout, controller)
        return self.active
