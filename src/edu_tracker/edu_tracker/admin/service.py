from __future__ import annotations

from ..common.validators import require_min_length
from ..core.constants import ADMIN_PASSWORD_KEY, DEFAULT_ADMIN_PASSWORD, MIN_PASSWORD_LENGTH
from ..core.exceptions import AuthenticationError, ValidationError
from ..storage.repository import KeyValueStore


class AdminGate:
    """Use case: unlock the teacher view with the locally stored password.

    Note: this only keeps students out of the teacher screens. The password is
    stored and compared in plaintext; it is not an authentication mechanism.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store

    def _current(self) -> str:
        stored = self._store.read(ADMIN_PASSWORD_KEY)
        return stored if isinstance(stored, str) and stored else DEFAULT_ADMIN_PASSWORD

    @property
    def is_default(self) -> bool:
        return self._current() == DEFAULT_ADMIN_PASSWORD

    def verify(self, password: str) -> bool:
        return password == self._current()

    def authenticate(self, password: str) -> None:
        if not self.verify(password):
            raise AuthenticationError("Incorrect password")

    def change_password(self, *, current: str, new: str, confirm: str) -> None:
        if current != self._current():
            raise AuthenticationError("Current password is incorrect")
        require_min_length(new, "New password", MIN_PASSWORD_LENGTH)
        if new != confirm:
            raise ValidationError("The two new passwords do not match")

        if not self._store.write(ADMIN_PASSWORD_KEY, new):
            raise ValidationError("Could not save the new password")
