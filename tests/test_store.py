"""
Unit tests for the in-memory user store.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

from users_service.store import InvalidUser, UserNotFound, UserStore


def parse_rfc3339(text):
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


class TestSeeding:

    def test_empty_store(self):
        store = UserStore()
        assert store.list() == []
        assert len(store) == 0

    def test_seeded_store(self, store):
        users = store.list()
        assert [(u.id, u.name, u.email) for u in users] == [
            (1, "John Doe", "john@example.com"),
            (2, "Jane Smith", "jane@example.com"),
        ]


class TestCreate:

    def test_assigns_next_id(self, store):
        user = store.create("Ann", "ann@x.com")
        assert user.id == 3
        assert user.name == "Ann"
        assert user.email == "ann@x.com"

    def test_created_is_rfc3339_with_offset(self, store):
        user = store.create("Ann", "ann@x.com")
        parsed = parse_rfc3339(user.created)
        assert parsed.tzinfo is not None
        assert parsed.microsecond == 0

    def test_ids_strictly_increase(self, store):
        seen = [u.id for u in store.list()]
        for i in range(5):
            user = store.create(f"user{i}", f"user{i}@x.com")
            assert user.id > max(seen)
            seen.append(user.id)

    def test_ids_not_reused_after_delete(self, store):
        store.delete(2)
        user = store.create("Ann", "ann@x.com")
        assert user.id == 3

    @pytest.mark.parametrize("name,email", [
        ("", "ann@x.com"),
        ("Ann", ""),
        (None, "ann@x.com"),
        ("Ann", None),
    ])
    def test_missing_fields_rejected(self, store, name, email):
        with pytest.raises(InvalidUser):
            store.create(name, email)
        assert len(store) == 2

    def test_rejected_create_does_not_consume_id(self, store):
        with pytest.raises(InvalidUser):
            store.create("", "")
        assert store.create("Ann", "ann@x.com").id == 3

    def test_insertion_order(self, store):
        store.create("Ann", "ann@x.com")
        store.create("Bob", "bob@x.com")
        assert [u.id for u in store.list()] == [1, 2, 3, 4]


class TestGet:

    def test_get_existing(self, store):
        assert store.get(2).name == "Jane Smith"

    def test_get_missing(self, store):
        assert store.get(99) is None

    def test_returned_record_is_a_copy(self, store):
        user = store.get(1)
        user.name = "Changed"
        assert store.get(1).name == "John Doe"


class TestUpdate:

    def test_replaces_name_and_email(self, store):
        original = store.get(1)
        updated = store.update(1, "Johnny", "johnny@x.com")
        assert updated.id == 1
        assert updated.name == "Johnny"
        assert updated.email == "johnny@x.com"
        assert updated.created == original.created
        assert store.get(1) == updated

    def test_keeps_position(self, store):
        store.update(1, "Johnny", "johnny@x.com")
        assert [u.id for u in store.list()] == [1, 2]

    def test_missing_user(self, store):
        with pytest.raises(UserNotFound):
            store.update(99, "X", "x@x.com")

    def test_missing_fields_leave_record_untouched(self, store):
        with pytest.raises(InvalidUser):
            store.update(1, "", "johnny@x.com")
        assert store.get(1).name == "John Doe"


class TestDelete:

    def test_removes_record(self, store):
        store.delete(1)
        assert store.get(1) is None
        assert [u.id for u in store.list()] == [2]

    def test_missing_user(self, store):
        with pytest.raises(UserNotFound):
            store.delete(99)
        assert len(store) == 2

    def test_delete_twice(self, store):
        store.delete(1)
        with pytest.raises(UserNotFound):
            store.delete(1)


class TestConcurrency:

    def test_concurrent_creates_get_unique_ids(self):
        store = UserStore()
        n = 200

        with ThreadPoolExecutor(max_workers=16) as pool:
            users = list(pool.map(
                lambda i: store.create(f"user{i}", f"user{i}@x.com"), range(n)
            ))

        ids = [u.id for u in users]
        assert len(set(ids)) == n
        assert sorted(ids) == list(range(1, n + 1))
        assert len(store) == n

    def test_concurrent_create_and_delete(self, store):
        with ThreadPoolExecutor(max_workers=8) as pool:
            created = list(pool.map(
                lambda i: store.create(f"user{i}", f"user{i}@x.com"), range(50)
            ))
            list(pool.map(lambda u: store.delete(u.id), created[:25]))

        remaining = [u.id for u in store.list()]
        assert len(remaining) == 2 + 25
        assert len(set(remaining)) == len(remaining)
