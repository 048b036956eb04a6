import pytest

from journalicious.controllers import ROUTES
from journalicious.dal import JournalDAO, PasswordDAO, UserDAO, bootstrap_secrets
from journalicious.navigation import NavEvent, NavigationController
from journalicious.session import Session
from journalicious.storage import EntriesStore, SecretsStore


@pytest.fixture
async def entries_store(tmp_path):
    store = EntriesStore(tmp_path / "journals.db")
    await store.init()
    return store


@pytest.fixture
def journals(entries_store):
    return JournalDAO(entries_store)


@pytest.fixture
def secrets_path(tmp_path):
    return tmp_path / "secrets.txt"


@pytest.fixture
def secrets(secrets_path):
    return SecretsStore(secrets_path)


@pytest.fixture
def session(secrets):
    bootstrap_secrets(secrets)
    return Session.open(PasswordDAO(secrets), UserDAO(secrets))


@pytest.fixture
def nav(session, journals):
    return NavigationController(session, journals, ROUTES)


@pytest.fixture
async def home(session, nav):
    """Navigation controller already past the login screen."""
    session.password.set_password("alpha")
    await nav.start()
    await nav.dispatch(NavEvent.LOGIN_OK)
    return nav
