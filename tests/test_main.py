import mongomock
import pytest
from pymongo.errors import ServerSelectionTimeoutError

import main
from database import connect

from conftest import make_settings

ENV_VARS = [
    "MONGO_URI", "DATABASE_URL", "DATABASE_NAME", "AUTH_ENABLED", "TOKEN_SECRET",
    "JWT_SECRET", "TOKEN_TTL_DAYS", "BCRYPT_ROUNDS", "RATE_LIMIT_MAX",
    "RATE_LIMIT_WINDOW_SECONDS", "CORS_ORIGINS", "HOST", "PORT", "LOG_LEVEL",
]


@pytest.fixture
def empty_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep load_dotenv away from any .env in the working tree
    monkeypatch.chdir(tmp_path)


def test_main_exits_without_configuration(empty_env, monkeypatch):
    def unexpected(*args, **kwargs):
        raise AssertionError("should not connect without configuration")

    monkeypatch.setattr(main, "connect", unexpected)
    with pytest.raises(SystemExit) as exc:
        main.main()
    assert exc.value.code == 1


def test_main_exits_when_store_is_unreachable(empty_env, monkeypatch):
    monkeypatch.setenv("MONGO_URI", "mongodb://unreachable:27017/app")
    monkeypatch.setenv("TOKEN_SECRET", "secret")

    def refuse(settings):
        raise ServerSelectionTimeoutError("no servers available")

    monkeypatch.setattr(main, "create_app", lambda *a, **kw: pytest.fail("app built after failed connect"))
    monkeypatch.setattr(main, "connect", refuse)
    with pytest.raises(SystemExit) as exc:
        main.main()
    assert exc.value.code == 1


def test_connect_uses_default_database_and_creates_indexes():
    db = connect(make_settings(), client=mongomock.MongoClient())
    assert db.name == "scaffolder"

    email_index = [
        info for info in db["user"].index_information().values()
        if info["key"] == [("email", 1)]
    ]
    assert len(email_index) == 1
    assert email_index[0].get("unique") is True


def test_connect_honours_configured_database_name():
    db = connect(make_settings(database_name="custom_db"), client=mongomock.MongoClient())
    assert db.name == "custom_db"
