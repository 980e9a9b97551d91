from __future__ import annotations

import pytest
from sqlalchemy import text

from taskdesk.db import Store
from taskdesk.errors import ConstraintViolationError, ErrorKind, NotFoundError, StoreFailureError
from taskdesk.repositories import UserRepository

pytestmark = pytest.mark.asyncio


async def test_create_returns_stored_user(user_repository: UserRepository) -> None:
    user = await user_repository.create("John", "john@x.com")

    assert user.id == 1
    assert user.name == "John"
    assert user.email == "john@x.com"


async def test_duplicate_email_scenario(user_repository: UserRepository) -> None:
    original = await user_repository.create("John", "john@x.com")

    with pytest.raises(ConstraintViolationError) as excinfo:
        await user_repository.create("Jane", "john@x.com")

    assert excinfo.value.kind is ErrorKind.CONFLICT
    assert excinfo.value.field == "email"
    assert excinfo.value.details == {"field": "email"}
    assert excinfo.value.message == "User with this email already exists."

    users = await user_repository.list()
    assert len(users) == 1
    assert users[0].model_dump() == original.model_dump()


async def test_update_to_taken_email_conflicts_and_keeps_row(user_repository: UserRepository) -> None:
    await user_repository.create("John", "john@x.com")
    jane = await user_repository.create("Jane", "jane@x.com")

    with pytest.raises(ConstraintViolationError):
        await user_repository.update(jane.id, email="john@x.com")

    assert (await user_repository.get(jane.id)).email == "jane@x.com"


async def test_update_with_own_email_is_allowed(user_repository: UserRepository) -> None:
    john = await user_repository.create("John", "john@x.com")

    updated = await user_repository.update(john.id, name="Johnny", email="john@x.com")
    assert updated.name == "Johnny"
    assert updated.email == "john@x.com"


@pytest.mark.parametrize(
    "changes",
    [{"name": "Jack"}, {"email": "jack@x.com"}, {"name": "Jack", "email": "jack@x.com"}, {}],
)
async def test_update_changes_exactly_the_supplied_fields(
    user_repository: UserRepository,
    changes: dict[str, str],
) -> None:
    created = await user_repository.create("John", "john@x.com")

    updated = await user_repository.update(created.id, **changes)

    assert updated.model_dump() == {**created.model_dump(), **changes}


async def test_get_and_update_unknown_user(user_repository: UserRepository) -> None:
    with pytest.raises(NotFoundError, match="User with id 7 not found."):
        await user_repository.get(7)
    with pytest.raises(NotFoundError):
        await user_repository.update(7, name="Nobody")


async def test_delete_then_get(user_repository: UserRepository) -> None:
    user = await user_repository.create("John", "john@x.com")

    assert await user_repository.delete(user.id) is True
    assert await user_repository.delete(user.id) is False
    with pytest.raises(NotFoundError):
        await user_repository.get(user.id)

    # the email is free again once its owner is gone
    again = await user_repository.create("John", "john@x.com")
    assert again.id > user.id


async def test_list_is_newest_first(user_repository: UserRepository) -> None:
    for index in range(3):
        await user_repository.create(f"User {index}", f"user{index}@x.com")

    ids = [user.id for user in await user_repository.list()]
    assert ids == [3, 2, 1]


async def test_store_failure_is_generic(store: Store) -> None:
    async with store.engine.begin() as connection:
        await connection.execute(text("DROP TABLE users"))

    with pytest.raises(StoreFailureError) as excinfo:
        await store.users.create("John", "john@x.com")

    assert "users" not in excinfo.value.message
