from __future__ import annotations

import pytest

from minitwit import auth as auth_module
from minitwit.auth import AuthService
from minitwit.errors import InvalidCredentials, ValidationError
from minitwit.sessions import Authenticated


def test_register_and_login_scenario(auth: AuthService) -> None:
    user = auth.register("ada", "ada@x.com", "pw1", "pw1")
    assert user.user_id > 0

    with pytest.raises(ValidationError) as excinfo:
        auth.register("ada", "ada@x.com", "pw1", "pw1")
    assert excinfo.value.reason == auth_module.USERNAME_TAKEN

    with pytest.raises(InvalidCredentials):
        auth.login("ada", "wrong")

    assert auth.login("ada", "pw1") == Authenticated(user_id=user.user_id, username="ada")


def test_password_is_stored_hashed(auth: AuthService, store) -> None:
    auth.register("ada", "ada@x.com", "pw1", "pw1")
    stored = store.get_user_by_username("ada")
    assert stored.pw_hash != "pw1"
    assert auth.hasher.verify("pw1", stored.pw_hash)


@pytest.mark.parametrize(
    ("username", "email", "password", "password2", "reason"),
    [
        ("", "a@x.com", "pw", "pw", auth_module.MISSING_USERNAME),
        (None, "a@x.com", "pw", "pw", auth_module.MISSING_USERNAME),
        ("ada", "", "pw", "pw", auth_module.INVALID_EMAIL),
        ("ada", "ada.x.com", "pw", "pw", auth_module.INVALID_EMAIL),
        ("ada", "a@x.com", "", "", auth_module.MISSING_PASSWORD),
        ("ada", "a@x.com", "pw", "other", auth_module.PASSWORD_MISMATCH),
        # short-circuits on the first failing rule
        ("", "", "", "x", auth_module.MISSING_USERNAME),
        ("ada", "bad", "", "x", auth_module.INVALID_EMAIL),
    ],
)
def test_register_validation_order(auth: AuthService, username, email, password,
                                   password2, reason) -> None:
    with pytest.raises(ValidationError) as excinfo:
        auth.register(username, email, password, password2)
    assert excinfo.value.reason == reason


def test_username_taken_regardless_of_other_fields(auth: AuthService) -> None:
    auth.register("ada", "ada@x.com", "pw1", "pw1")
    with pytest.raises(ValidationError) as excinfo:
        auth.register("ada", "someone@else.org", "different", "different")
    assert excinfo.value.reason == auth_module.USERNAME_TAKEN


def test_login_reasons_are_distinguishable(auth: AuthService) -> None:
    auth.register("ada", "ada@x.com", "pw1", "pw1")

    with pytest.raises(InvalidCredentials) as unknown:
        auth.login("bob", "pw1")
    assert unknown.value.reason == auth_module.INVALID_USERNAME

    with pytest.raises(InvalidCredentials) as wrong:
        auth.login("ada", "pw2")
    assert wrong.value.reason == auth_module.INVALID_PASSWORD


def test_login_with_missing_fields(auth: AuthService) -> None:
    auth.register("ada", "ada@x.com", "pw1", "pw1")
    with pytest.raises(InvalidCredentials):
        auth.login(None, None)
    with pytest.raises(InvalidCredentials):
        auth.login("ada", None)
