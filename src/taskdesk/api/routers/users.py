"""Routes handling user CRUD operations."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from ...deps import UserRepositoryDependency
from ...errors import NotFoundError
from ...models import User
from ...schemas import UserCreate, UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])


def _map_user(user: User) -> UserRead:
    return UserRead.model_validate(user)


@router.get("", response_model=list[UserRead], summary="List every user, newest first")
async def list_users(users: UserRepositoryDependency) -> list[UserRead]:
    return [_map_user(user) for user in await users.list()]


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def create_user(payload: UserCreate, users: UserRepositoryDependency) -> UserRead:
    """Create a user; a duplicate email answers ``409 Conflict``."""

    user = await users.create(payload.name, payload.email)
    return _map_user(user)


@router.get("/{user_id}", response_model=UserRead, summary="Retrieve a user by id")
async def get_user(user_id: int, users: UserRepositoryDependency) -> UserRead:
    return _map_user(await users.get(user_id))


@router.api_route(
    "/{user_id}",
    methods=["PUT", "PATCH"],
    response_model=UserRead,
    summary="Update the supplied fields of a user",
)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    users: UserRepositoryDependency,
) -> UserRead:
    user = await users.update(user_id, name=payload.name, email=payload.email)
    return _map_user(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a user",
)
async def delete_user(user_id: int, users: UserRepositoryDependency) -> Response:
    if not await users.delete(user_id):
        raise NotFoundError("user", user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
