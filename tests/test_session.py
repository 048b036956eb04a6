import json
import logging

import pytest

import app
from journalicious import config
from journalicious.config import AppPaths, load_config, resolve_paths, save_config, setup_logging
from journalicious.errors import NavigationError, StorageError
from journalicious.navigation import View
from journalicious.session import bootstrap


async def test_bootstrap_fresh_data_dir(tmp_path):
    paths = AppPaths(tmp_path / "data")
    session, journals = await bootstrap(paths)

    assert paths.db_path.exists()
    assert paths.secrets_path.read_text(encoding="utf-8").splitlines() == [
        "password=p",
        "security_question=",
        "security_answer=",
    ]
    assert session.password.is_first_time_user()
    assert session.user.security_question == ""
    assert session.previous_view is None
    assert await journals.list_all() == []


async def test_bootstrap_keeps_existing_secrets(tmp_path):
    paths = AppPaths(tmp_path)
    paths.secrets_path.write_text("password=alpha\nextra=1\n", encoding="utf-8")
    session, _ = await bootstrap(paths)
    assert not session.password.is_first_time_user()
    assert paths.secrets_path.read_text(encoding="utf-8").splitlines()[:2] == ["password=alpha", "extra=1"]


async def test_bootstrap_unusable_data_dir(tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(StorageError):
        await bootstrap(AppPaths(blocker))


def test_previous_view_slot(session):
    with pytest.raises(NavigationError):
        session.recall()
    session.remember(View.HOME)
    session.remember(View.SEARCH)
    assert session.recall() is View.SEARCH
    session.close()
    assert session.closed
    assert session.previous_view is None


def test_config_round_trip(tmp_path, monkeypatch):
    path = tmp_path / "cfg" / "config.json"
    monkeypatch.setenv("JOURNALICIOUS_CONFIG", str(path))

    cfg = load_config()
    assert cfg == config.DEFAULT_CONFIG
    assert json.loads(path.read_text(encoding="utf-8")) == config.DEFAULT_CONFIG

    cfg["active_theme"] = "paper"
    save_config(cfg)
    path.write_text(json.dumps({"active_theme": "paper"}), encoding="utf-8")
    assert load_config()["active_theme"] == "paper"
    assert load_config()["log_level"] == "INFO"


def test_resolve_paths_precedence(tmp_path, monkeypatch):
    monkeypatch.delenv("JOURNALICIOUS_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
    if config.os.name != "nt":
        assert resolve_paths({}).data_dir == tmp_path / "xdg" / "journalicious"

    assert resolve_paths({"data_dir": str(tmp_path / "cfg")}).data_dir == tmp_path / "cfg"

    monkeypatch.setenv("JOURNALICIOUS_DATA_DIR", str(tmp_path / "env"))
    paths = resolve_paths({"data_dir": str(tmp_path / "cfg")})
    assert paths.data_dir == tmp_path / "env"
    assert paths.db_path.name == "journals.db"
    assert paths.secrets_path.name == "secrets.txt"


def test_setup_logging_adds_one_file_handler(tmp_path):
    logger = logging.getLogger(config.APP_NAME)
    saved = list(logger.handlers)
    for handler in saved:
        logger.removeHandler(handler)
    try:
        paths = AppPaths(tmp_path / "logs")
        setup_logging(paths, "debug")
        setup_logging(paths, "debug")
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

        logging.getLogger("journalicious.dal").info("hello")
        logger.handlers[0].flush()
        assert "hello" in paths.log_path.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        for handler in saved:
            logger.addHandler(handler)
        logger.setLevel(logging.NOTSET)


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
async def test_run_reports_unreadable_config(tmp_path, monkeypatch, capsys, content):
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    monkeypatch.setenv("JOURNALICIOUS_CONFIG", str(path))

    assert await app.run([]) == 1
    err = capsys.readouterr().err
    assert err.startswith("journalicious: cannot load configuration")
    assert "Traceback" not in err


async def test_run_reports_unwritable_config_dir(tmp_path, monkeypatch, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    monkeypatch.setenv("JOURNALICIOUS_CONFIG", str(blocker / "config.json"))

    assert await app.run([]) == 1
    assert "cannot load configuration" in capsys.readouterr().err
