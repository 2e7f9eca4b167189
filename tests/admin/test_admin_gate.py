from __future__ import annotations

import pytest

from src.edu_tracker.edu_tracker.admin.service import AdminGate
from src.edu_tracker.edu_tracker.core.exceptions import AuthenticationError, ValidationError


class InMemoryStore:
    def __init__(self, data=None, *, writable=True):
        self.data = dict(data or {})
        self.writable = writable

    def read(self, key, default=None):
        return self.data.get(key, default)

    def write(self, key, value) -> bool:
        if not self.writable:
            return False
        self.data[key] = value
        return True

    def delete(self, key) -> None:
        self.data.pop(key, None)


def test_default_password_unlocks():
    gate = AdminGate(InMemoryStore())

    assert gate.is_default
    gate.authenticate("admin")
    with pytest.raises(AuthenticationError):
        gate.authenticate("wrong")


def test_change_password_persists():
    store = InMemoryStore()
    gate = AdminGate(store)

    gate.change_password(current="admin", new="s3cret", confirm="s3cret")

    assert store.data["adminPassword"] == "s3cret"
    assert not gate.is_default
    assert gate.verify("s3cret")
    assert not gate.verify("admin")


@pytest.mark.parametrize(
    "current,new,confirm,error",
    [
        ("nope", "abcd", "abcd", AuthenticationError),
        ("admin", "abc", "abc", ValidationError),
        ("admin", "abcd", "abce", ValidationError),
    ],
)
def test_change_password_rejections_leave_password_unchanged(current, new, confirm, error):
    store = InMemoryStore()
    gate = AdminGate(store)

    with pytest.raises(error):
        gate.change_password(current=current, new=new, confirm=confirm)

    assert "adminPassword" not in store.data
    assert gate.verify("admin")


def test_change_password_reports_failed_write():
    gate = AdminGate(InMemoryStore(writable=False))

    with pytest.raises(ValidationError):
        gate.change_password(current="admin", new="abcd", confirm="abcd")


def test_blank_stored_password_falls_back_to_default():
    gate = AdminGate(InMemoryStore({"adminPassword": ""}))

    assert gate.verify("admin")
