from datetime import datetime

import pytest

from journalicious.controllers import (
    CreateController,
    ChangePasswordController,
    LoginController,
    ResetPasswordController,
)
from journalicious.dal import PasswordDAO, UserDAO
from journalicious.errors import AuthError, ValidationError
from journalicious.navigation import NavEvent, View
from journalicious.storage import SecretsStore


def fixed_clock():
    return datetime(2024, 3, 11, 9, 5, 42)


# ---------------------------------------------------------------------
# End-to-end flows
# ---------------------------------------------------------------------

async def test_first_time_login_flow(nav, journals, secrets_path):
    active = await nav.start()
    assert active.view is View.LOGIN

    event = active.controller.submit("p")
    assert event is NavEvent.FIRST_TIME
    active = await nav.dispatch(event)
    assert active.view is View.CHANGE_PASSWORD
    assert active.controller.is_first_time

    active = await nav.dispatch(active.controller.submit("alpha", "alpha"))
    assert active.view is View.LOGIN
    assert PasswordDAO(SecretsStore(secrets_path)).load() == "alpha"

    with pytest.raises(AuthError):
        active.controller.submit("p")
    active = await nav.dispatch(active.controller.submit("alpha"))
    assert active.view is View.HOME


async def test_create_and_find(home, journals):
    active = await home.dispatch(NavEvent.NEW_ENTRY)
    assert active.view is View.CREATE
    event = await active.controller.save("Monday thoughts", "2024-03-11", "09", "05", "First day")
    assert event is NavEvent.SAVE

    active = await home.dispatch(event)
    assert active.view is View.HOME
    assert active.controller.total == 1

    active = await home.dispatch(NavEvent.SEARCH)
    assert active.view is View.SEARCH
    found = await active.controller.search("Monday")
    assert [(e.title, e.date, e.time, e.context) for e in found] == [
        ("Monday thoughts", "2024-03-11", "09:05", "First day"),
    ]
    assert await active.controller.search("tuesday") == []


async def test_edit_round_trip(home, journals):
    create = await home.dispatch(NavEvent.NEW_ENTRY)
    await home.dispatch(await create.controller.save("Monday thoughts", "2024-03-11", 9, 5, "First day"))
    search = await home.dispatch(NavEvent.SEARCH)
    (entry,) = search.controller.results

    edit = await home.dispatch(search.controller.edit_entry(entry), entry)
    assert edit.view is View.EDIT
    form = edit.controller
    assert form.is_edit
    assert (form.title, form.date, form.hour, form.minute, form.context) == (
        "Monday thoughts", "2024-03-11", 9, 5, "First day",
    )

    active = await home.dispatch(await form.save(form.title, form.date, "10", "30", form.context))
    assert active.view is View.SEARCH

    (saved,) = await journals.list_all()
    assert (saved.id, saved.hour, saved.minute) == (entry.id, 10, 30)
    assert (await home.dispatch(active.controller.back())).view is View.HOME


async def test_back_with_dirty_fields(home, journals):
    active = await home.dispatch(NavEvent.NEW_ENTRY)
    form = active.controller
    assert form.needs_confirmation("draft", "")

    # cancelling the dialog simply does not dispatch anything
    assert home.current is View.CREATE

    active = await home.dispatch(form.back())
    assert active.view is View.HOME
    assert await journals.list_all() == []


async def test_back_with_clean_fields_needs_no_confirmation(home):
    form = (await home.dispatch(NavEvent.NEW_ENTRY)).controller
    assert not form.needs_confirmation("", "")
    assert form.is_dirty("", "only context")


async def test_forgot_password_flow(nav, session):
    session.password.set_password("alpha")
    session.user.set_security_question("Pet name?")
    session.user.set_security_question_answer("Fido")

    login = await nav.start()
    reset = await nav.dispatch(login.controller.forgot_password())
    assert reset.view is View.RESET_PASSWORD
    assert reset.controller.question == "Pet name?"

    with pytest.raises(AuthError):
        reset.controller.submit("Spot")
    assert nav.current is View.RESET_PASSWORD

    change = await nav.dispatch(reset.controller.submit("Fido"))
    assert change.view is View.CHANGE_PASSWORD
    with pytest.raises(ValidationError):
        change.controller.submit("p", "p")

    login = await nav.dispatch(change.controller.submit("beta", "beta"))
    assert login.view is View.LOGIN
    assert (await nav.dispatch(login.controller.submit("beta"))).view is View.HOME


async def test_delete_idempotence_through_search(home, journals):
    create = await home.dispatch(NavEvent.NEW_ENTRY)
    await home.dispatch(await create.controller.save("one", "2024-03-11", 9, 5, ""))
    create = await home.dispatch(NavEvent.NEW_ENTRY)
    await home.dispatch(await create.controller.save("two", "2024-03-12", 9, 5, ""))

    search = (await home.dispatch(NavEvent.SEARCH)).controller
    assert len(search.results) == 2
    victim = search.results[0]

    remaining = await search.delete_entry(victim)
    assert len(remaining) == 1
    remaining = await search.delete_entry(victim)
    assert len(remaining) == 1
    assert [e.title for e in await journals.list_all()] == ["one"]


# ---------------------------------------------------------------------
# Individual controllers
# ---------------------------------------------------------------------

def test_login_rejects_wrong_password(session, journals):
    session.password.set_password("alpha")
    login = LoginController(session, journals)
    with pytest.raises(AuthError):
        login.submit("ALPHA")
    assert login.submit("alpha") is NavEvent.LOGIN_OK


def test_first_time_user_with_wrong_password_is_rejected(session, journals):
    with pytest.raises(AuthError):
        LoginController(session, journals).submit("nope")


async def test_create_defaults_to_now(session, journals):
    form = CreateController(session, journals, clock=fixed_clock)
    assert form.date == ""  # nothing happens before initialize()
    await form.initialize()
    assert (form.date, form.hour, form.minute) == ("2024-03-11", 9, 5)
    assert not form.is_edit
    assert form.view is View.CREATE


async def test_edit_mode_keeps_entry_values(session, journals):
    entry_id = await journals.create("old", "2020-01-02", 23, 59, "body")
    form = CreateController(session, journals, clock=fixed_clock)
    form.initialize_old_journal(await journals.get(entry_id))
    await form.initialize()
    assert (form.date, form.hour, form.minute) == ("2020-01-02", 23, 59)
    assert form.view is View.EDIT


@pytest.mark.parametrize(
    "title, date, hour, minute, field",
    [
        ("", "2024-03-11", "9", "5", "title"),
        ("   ", "2024-03-11", "9", "5", "title"),
        ("t", "2024-13-01", "9", "5", "date"),
        ("t", "2024-03-11", "nine", "5", "hour"),
        ("t", "2024-03-11", "24", "5", "hour"),
        ("t", "2024-03-11", "9", "-5", "minute"),
        ("t", "2024-03-11", "9", "", "minute"),
        ("t", "2024-03-11", "\u00b2", "5", "hour"),
        ("t", "2024-03-11", "9", "\u0663", "minute"),
        ("t", "\uff12\uff10\uff12\uff14-03-11", "9", "5", "date"),
    ],
)
async def test_create_validation(session, journals, title, date, hour, minute, field):
    form = CreateController(session, journals, clock=fixed_clock)
    await form.initialize()
    with pytest.raises(ValidationError) as info:
        await form.save(title, date, hour, minute, "")
    assert info.value.field == field
    assert await journals.list_all() == []


async def test_saving_twice_in_create_mode_updates_the_same_entry(session, journals):
    form = CreateController(session, journals, clock=fixed_clock)
    await form.initialize()
    await form.save("t", "2024-03-11", 9, 5, "a")
    await form.save("t", "2024-03-11", 9, 5, "b")
    (entry,) = await journals.list_all()
    assert entry.context == "b"


def test_change_password_validation(session, journals):
    form = ChangePasswordController(session, journals)
    with pytest.raises(ValidationError):
        form.submit("", "")
    with pytest.raises(ValidationError):
        form.submit("p", "p")
    with pytest.raises(ValidationError) as info:
        form.submit("alpha", "alpah")
    assert info.value.field == "confirmation"
    with pytest.raises(ValidationError):
        form.submit("alpha", "alpha", question="Pet name?")
    assert session.password.is_first_time_user()


def test_change_password_with_security_question(session, journals, secrets_path):
    form = ChangePasswordController(session, journals)
    assert form.submit("alpha", "alpha", "  Pet name? ", "Fido") is NavEvent.OK

    stored = UserDAO(SecretsStore(secrets_path))
    assert stored.load_question() == "Pet name?"
    assert stored.load_answer() == "Fido"
    assert session.user.security_question == "Pet name?"
    assert session.password.value == "alpha"


async def test_reset_without_configured_answer_is_refused(session, journals):
    form = ResetPasswordController(session, journals)
    await form.initialize()
    assert form.question == ""
    with pytest.raises(AuthError):
        form.submit("")


async def test_home_lists_recent_entries(home, journals):
    for day in range(1, 13):
        await journals.create(f"day {day}", f"2024-03-{day:02d}", 9, 0, "")
    active = await home.dispatch(NavEvent.NEW_ENTRY)
    active = await home.dispatch(active.controller.back())
    assert active.controller.total == 12
    assert len(active.controller.recent) == 10
    assert active.controller.recent[0].title == "day 12"


async def test_logout_returns_to_login(home):
    active = await home.dispatch(NavEvent.LOGOUT)
    assert active.view is View.LOGIN
