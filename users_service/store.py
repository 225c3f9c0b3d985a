import threading
from typing import List, Optional

from .models import User, now_rfc3339


class UserNotFound(LookupError):
    """No user with the requested id."""


class InvalidUser(ValueError):
    """Name or email missing from a create/update."""


SEED_USERS = [
    ("John Doe", "john@example.com"),
    ("Jane Smith", "jane@example.com"),
]


class UserStore:
    """
    Ordered in-memory collection of users plus the id counter.

    Every operation runs under one lock, so concurrent requests from the
    threaded server never see a half-applied change or share an id.
    Records handed out are copies; callers cannot mutate stored state.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._users: List[User] = []
        self._next_id = 1

    @classmethod
    def seeded(cls) -> "UserStore":
        store = cls()
        for name, email in SEED_USERS:
            store.create(name, email)
        return store

    def list(self) -> List[User]:
        with self._lock:
            return [u.model_copy() for u in self._users]

    def get(self, user_id: int) -> Optional[User]:
        with self._lock:
            user = self._find(user_id)
            return user.model_copy() if user else None

    def create(self, name: Optional[str], email: Optional[str]) -> User:
        _require(name, email)
        with self._lock:
            user = User(
                id=self._next_id,
                name=name,
                email=email,
                created=now_rfc3339(),
            )
            self._next_id += 1
            self._users.append(user)
            return user.model_copy()

    def update(self, user_id: int, name: Optional[str], email: Optional[str]) -> User:
        with self._lock:
            for i, user in enumerate(self._users):
                if user.id == user_id:
                    _require(name, email)
                    updated = User(
                        id=user.id, name=name, email=email, created=user.created
                    )
                    self._users[i] = updated
                    return updated.model_copy()
        raise UserNotFound(user_id)

    def delete(self, user_id: int) -> None:
        with self._lock:
            for i, user in enumerate(self._users):
                if user.id == user_id:
                    del self._users[i]
                    return
        raise UserNotFound(user_id)

    def __len__(self):
        with self._lock:
            return len(self._users)

    def _find(self, user_id: int) -> Optional[User]:
        return next((u for u in self._users if u.id == user_id), None)


def _require(name: Optional[str], email: Optional[str]) -> None:
    if not name or not email:
        raise InvalidUser("Name and email are required")
