from __future__ import annotations

from datetime import timedelta

import pytest

from memstore.domain.exceptions import ConflictError, InvalidFieldError, NotFoundError
from memstore.domain.models import User
from memstore.repository import InMemoryRepository, Repository

ALICE = {"username": "alice", "email": "a@x.com"}
BOB = {"username": "bob", "email": "b@x.com"}


def test_in_memory_repository_satisfies_protocol(user_repo):
    assert isinstance(user_repo, Repository)


def test_create_assigns_strictly_increasing_ids(widget_repo):
    ids = [widget_repo.create({"sku": f"sku-{i}", "name": "w"}).id for i in range(10)]
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)
    assert ids[0] == 1


def test_create_sets_equal_timestamps(user_repo, clock):
    start = clock.current
    user = user_repo.create(ALICE)
    assert user.created_at == user.updated_at == start


def test_create_duplicate_unique_value_conflicts(user_repo):
    user_repo.create(ALICE)
    with pytest.raises(ConflictError) as excinfo:
        user_repo.create({"username": "alice", "email": "b@x.com"})

    assert excinfo.value.field == "username"
    assert user_repo.count() == 1
    assert user_repo.get_by_unique_field("username", "alice").email == "a@x.com"


def test_uniqueness_is_case_sensitive(user_repo):
    user_repo.create(ALICE)
    other = user_repo.create({"username": "Alice", "email": "A@x.com"})
    assert other.id == 2


def test_failed_create_does_not_consume_an_id(user_repo):
    user_repo.create(ALICE)
    with pytest.raises(ConflictError):
        user_repo.create({"username": "carol", "email": "a@x.com"})
    assert user_repo.create(BOB).id == 2


def test_create_rejects_system_and_unknown_fields(user_repo):
    with pytest.raises(InvalidFieldError) as excinfo:
        user_repo.create({**ALICE, "id": 99})
    assert excinfo.value.field == "id"

    with pytest.raises(InvalidFieldError) as excinfo:
        user_repo.create({**ALICE, "nickname": "al"})
    assert excinfo.value.field == "nickname"

    assert user_repo.count() == 0
    assert user_repo.create(ALICE).id == 1


def test_create_with_invalid_value_raises_invalid_field(widget_repo):
    with pytest.raises(InvalidFieldError) as excinfo:
        widget_repo.create({"sku": "sku-1", "name": "w", "quantity": "many"})
    assert excinfo.value.field == "quantity"
    assert widget_repo.create({"sku": "sku-1", "name": "w"}).id == 1


def test_create_accepts_pydantic_payload(book_repo):
    from memstore.domain.models import BookCreate

    book = book_repo.create(
        BookCreate(title="Go", author="Rob", isbn="978-0134190440", price=30.0)
    )
    assert book.id == 1
    assert book.published_at is None


def test_get_by_id_returns_fresh_copy(user_repo):
    created = user_repo.create(ALICE)
    first = user_repo.get_by_id(created.id)
    second = user_repo.get_by_id(created.id)
    assert first == second == created
    assert first is not second


def test_get_by_id_reflects_latest_update(user_repo):
    user = user_repo.create(ALICE)
    user_repo.update(user.id, {"email": "new@x.com"})
    assert user_repo.get_by_id(user.id).email == "new@x.com"


def test_get_by_id_missing_raises_not_found(user_repo):
    with pytest.raises(NotFoundError) as excinfo:
        user_repo.get_by_id(42)
    assert excinfo.value.details == {"resource": "User", "key": "id", "value": 42}


def test_get_by_unique_field(user_repo):
    user = user_repo.create(ALICE)
    assert user_repo.get_by_unique_field("email", "a@x.com") == user
    with pytest.raises(NotFoundError):
        user_repo.get_by_unique_field("email", "nobody@x.com")


def test_get_by_unique_field_rejects_non_unique_field(widget_repo):
    widget_repo.create({"sku": "sku-1", "name": "w"})
    with pytest.raises(InvalidFieldError):
        widget_repo.get_by_unique_field("name", "w")
    with pytest.raises(InvalidFieldError):
        widget_repo.get_by_unique_field("color", "red")


def test_declaring_unknown_or_system_field_unique_fails():
    with pytest.raises(InvalidFieldError):
        InMemoryRepository(User, unique_fields=("nickname",))
    with pytest.raises(InvalidFieldError):
        InMemoryRepository(User, unique_fields=("id",))


def test_update_changes_only_supplied_field(user_repo):
    user = user_repo.create(ALICE)
    updated = user_repo.update(user.id, {"email": "c@x.com"})

    assert updated.email == "c@x.com"
    assert updated.username == "alice"
    assert updated.created_at == user.created_at
    assert updated.updated_at > user.updated_at


def test_update_with_empty_patch_refreshes_updated_at_only(user_repo):
    user = user_repo.create(ALICE)
    updated = user_repo.update(user.id, {})
    assert updated.model_dump(exclude={"updated_at"}) == user.model_dump(exclude={"updated_at"})
    assert updated.updated_at >= user.updated_at


def test_update_distinguishes_absent_from_explicit_none(book_repo):
    from memstore.domain.models import BookUpdate

    book = book_repo.create(
        {
            "title": "Go",
            "author": "Rob",
            "isbn": "978-0134190440",
            "price": 30.0,
            "published_at": "2015-10-26T00:00:00Z",
        }
    )

    untouched = book_repo.update(book.id, BookUpdate(price=25.0))
    assert untouched.published_at == book.published_at
    assert untouched.title == "Go"

    cleared = book_repo.update(book.id, BookUpdate(published_at=None))
    assert cleared.published_at is None
    assert cleared.price == 25.0


def test_update_keeping_own_unique_value_is_not_a_conflict(user_repo):
    user = user_repo.create(ALICE)
    updated = user_repo.update(user.id, {"username": "alice", "email": "z@x.com"})
    assert updated.username == "alice"


def test_update_conflict_applies_nothing(user_repo):
    alice = user_repo.create(ALICE)
    user_repo.create(BOB)

    with pytest.raises(ConflictError) as excinfo:
        user_repo.update(alice.id, {"username": "alicia", "email": "b@x.com"})

    assert excinfo.value.field == "email"
    assert user_repo.get_by_id(alice.id) == alice
    # "alicia" was never claimed.
    with pytest.raises(NotFoundError):
        user_repo.get_by_unique_field("username", "alicia")


def test_update_releases_old_unique_value(user_repo):
    alice = user_repo.create(ALICE)
    user_repo.update(alice.id, {"email": "c@x.com"})

    bob = user_repo.create({"username": "bob", "email": "a@x.com"})
    assert user_repo.get_by_unique_field("email", "a@x.com").id == bob.id
    assert user_repo.get_by_unique_field("email", "c@x.com").id == alice.id


def test_update_rejects_system_fields_and_missing_ids(user_repo):
    user = user_repo.create(ALICE)
    for field in ("id", "created_at", "updated_at"):
        with pytest.raises(InvalidFieldError):
            user_repo.update(user.id, {field: None})
    with pytest.raises(NotFoundError):
        user_repo.update(99, {"email": "c@x.com"})
    assert user_repo.get_by_id(user.id) == user


def test_update_with_invalid_value_applies_nothing(widget_repo):
    widget = widget_repo.create({"sku": "sku-1", "name": "w", "quantity": 3})
    with pytest.raises(InvalidFieldError):
        widget_repo.update(widget.id, {"name": "renamed", "quantity": "lots"})
    assert widget_repo.get_by_id(widget.id) == widget


def test_delete_then_get_and_delete_again_raise_not_found(user_repo):
    user = user_repo.create(ALICE)
    user_repo.delete(user.id)

    with pytest.raises(NotFoundError):
        user_repo.get_by_id(user.id)
    with pytest.raises(NotFoundError):
        user_repo.delete(user.id)
    assert not user_repo.exists(user.id)


def test_deleted_ids_are_never_reused(user_repo):
    first = user_repo.create(ALICE)
    second = user_repo.create(BOB)
    user_repo.delete(second.id)
    user_repo.delete(first.id)

    again = user_repo.create(ALICE)
    assert again.id == 3
    assert len(user_repo) == 1


def test_optional_unique_field_allows_many_unset(make_widget_repo):
    repo = make_widget_repo(unique_fields=("sku", "note"))
    repo.create({"sku": "sku-1", "name": "a"})
    repo.create({"sku": "sku-2", "name": "b"})
    repo.create({"sku": "sku-3", "name": "c", "note": "x"})
    with pytest.raises(ConflictError):
        repo.create({"sku": "sku-4", "name": "d", "note": "x"})
    assert repo.count() == 3


def test_backwards_clock_never_breaks_timestamp_order(user_repo, clock):
    user = user_repo.create(ALICE)
    clock.rewind(timedelta(hours=1))
    updated = user_repo.update(user.id, {"email": "c@x.com"})
    assert updated.updated_at >= updated.created_at


def test_list_orders_newest_first_and_pages(user_repo):
    a = user_repo.create({"username": "aaa", "email": "a@x.com"})
    b = user_repo.create({"username": "bbb", "email": "b@x.com"})
    c = user_repo.create({"username": "ccc", "email": "c@x.com"})

    first = user_repo.list(page=1, page_size=2)
    assert first.items == [c, b]
    assert first.total == 3
    assert first.total_pages == 2

    second = user_repo.list(page=2, page_size=2)
    assert second.items == [a]
    assert second.total == 3

    beyond = user_repo.list(page=5, page_size=2)
    assert beyond.items == []
    assert beyond.total == 3


def test_list_breaks_timestamp_ties_by_id(make_widget_repo, frozen_clock):
    repo = make_widget_repo(clock=frozen_clock)
    widgets = [repo.create({"sku": f"sku-{i}", "name": "w"}) for i in range(4)]
    assert [w.id for w in repo.list(page=1, page_size=10).items] == [4, 3, 2, 1]
    assert len({w.created_at for w in widgets}) == 1


def test_list_order_ignores_updates(user_repo):
    a = user_repo.create({"username": "aaa", "email": "a@x.com"})
    user_repo.create({"username": "bbb", "email": "b@x.com"})
    user_repo.update(a.id, {"email": "z@x.com"})
    assert [u.username for u in user_repo.list().items] == ["bbb", "aaa"]


def test_list_coerces_page_arguments(make_widget_repo):
    repo = make_widget_repo(default_page_size=10, max_page_size=100)
    for i in range(105):
        repo.create({"sku": f"sku-{i}", "name": "w"})

    coerced = repo.list(page=0, page_size=0)
    assert coerced.page == 1
    assert coerced.page_size == 10
    assert len(coerced.items) == 10

    clamped = repo.list(page=-3, page_size=1000)
    assert clamped.page_size == 100
    assert len(clamped.items) == 100
    assert clamped.total == 105
    assert clamped.items[0].id == 105


def test_list_serializes_concrete_record_fields(user_repo):
    user_repo.create(ALICE)
    dumped = user_repo.list().model_dump()
    assert dumped["items"][0]["username"] == "alice"
    assert "password_hash" not in dumped["items"][0]


def test_end_to_end_user_lifecycle(user_repo):
    alice = user_repo.create({"username": "alice", "email": "a@x.com"})
    assert alice.id == 1

    with pytest.raises(ConflictError) as excinfo:
        user_repo.create({"username": "alice", "email": "b@x.com"})
    assert excinfo.value.field == "username"

    updated = user_repo.update(1, {"email": "c@x.com"})
    assert updated.username == "alice"
    assert updated.email == "c@x.com"

    user_repo.delete(1)
    with pytest.raises(NotFoundError):
        user_repo.get_by_id(1)
