# tests/test_users_store.py

import pytest

from core.domain import PublicUser, Role
from core.errors import InvalidCredentials, MissingFields, UsernameTaken


def test_register_returns_user_with_requested_role(user_store):
    user = user_store.register("alice", "pw1", "admin")

    assert user.username == "alice"
    assert user.role is Role.ADMIN
    assert user_store.exists("alice")


@pytest.mark.parametrize("requested", [None, "", "superuser", "Admin", "USER"])
def test_register_coerces_unknown_role_to_user(user_store, requested):
    assert user_store.register("alice", "pw1", requested).role is Role.USER


@pytest.mark.parametrize("username,password", [("", "pw"), ("alice", ""), (None, "pw"), ("alice", None)])
def test_register_requires_username_and_password(user_store, username, password):
    with pytest.raises(MissingFields):
        user_store.register(username, password)
    assert user_store.list_safe() == []


def test_register_same_username_twice_conflicts(user_store):
    user_store.register("alice", "pw1")

    with pytest.raises(UsernameTaken):
        user_store.register("alice", "other")

    assert len(user_store.list_safe()) == 1


def test_usernames_are_case_sensitive(user_store):
    user_store.register("alice", "pw1")
    user_store.register("Alice", "pw2")

    assert [u.username for u in user_store.list_safe()] == ["alice", "Alice"]


def test_authenticate_requires_exact_match(user_store):
    user_store.register("alice", "pw1")
    user_store.register("bob", "pw2")

    assert user_store.authenticate("alice", "pw1").username == "alice"

    for username, password in [("alice", "pw2"), ("bob", "pw1"), ("alice", "PW1"), ("carol", "pw1"), (None, None)]:
        with pytest.raises(InvalidCredentials):
            user_store.authenticate(username, password)


def test_list_safe_hides_passwords(user_store):
    user_store.register("alice", "pw1")
    user_store.register("boss", "secret", "admin")

    listed = user_store.list_safe()

    assert listed == [
        PublicUser(username="alice", role=Role.USER),
        PublicUser(username="boss", role=Role.ADMIN),
    ]
    assert all("password" not in u.model_dump() for u in listed)


def test_get_unknown_user(user_store):
    assert user_store.get("nobody") is None
    assert not user_store.exists("nobody")
