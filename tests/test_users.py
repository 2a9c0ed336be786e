import pytest

from errors import Conflict, InvalidCredentials, Unauthorized
from security import TokenSigner
from users import UserStore


@pytest.fixture
def signer():
    return TokenSigner("secret")


@pytest.fixture
def users(db, signer):
    return UserStore(db, signer, bcrypt_rounds=4)


def test_register_stores_hashed_user(users, db, signer):
    token = users.register("  Person@Example.com ", "password123")

    doc = db["user"].find_one({"email": "person@example.com"})
    assert doc is not None
    assert doc["plan"] == "free"
    assert doc["password_hash"] != "password123"
    assert signer.verify(token) == str(doc["_id"])


def test_register_twice_conflicts(users):
    users.register("dup@example.com", "password123")
    with pytest.raises(Conflict):
        users.register("DUP@example.com", "another-password")


def test_login_returns_token_for_same_user(users, signer):
    registered = users.register("login@example.com", "password123")
    logged_in = users.login("Login@Example.com", "password123")
    assert signer.verify(logged_in) == signer.verify(registered)


def test_wrong_password_and_unknown_email_look_the_same(users):
    users.register("known@example.com", "password123")

    with pytest.raises(InvalidCredentials) as wrong_password:
        users.login("known@example.com", "nope")
    with pytest.raises(InvalidCredentials) as unknown_email:
        users.login("ghost@example.com", "password123")

    assert isinstance(wrong_password.value, Unauthorized)
    assert wrong_password.value.message == unknown_email.value.message
    assert wrong_password.value.status_code == unknown_email.value.status_code


def test_long_password_registers_and_logs_in(users, signer):
    password = "p" * 100
    token = users.register("long@example.com", password)
    assert signer.verify(users.login("long@example.com", password)) == signer.verify(token)

    # Bytes past bcrypt's 72-byte window still count
    with pytest.raises(InvalidCredentials):
        users.login("long@example.com", "p" * 99 + "q")
