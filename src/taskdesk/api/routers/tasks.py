"""Routes handling task CRUD operations."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from ...deps import TaskRepositoryDependency
from ...errors import NotFoundError
from ...models import Task
from ...schemas import TaskCreate, TaskRead, TaskUpdate

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _map_task(task: Task) -> TaskRead:
    return TaskRead.model_validate(task)


@router.get(
    "",
    response_model=list[TaskRead],
    summary="List every task, newest first",
)
async def list_tasks(tasks: TaskRepositoryDependency) -> list[TaskRead]:
    return [_map_task(task) for task in await tasks.list()]


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task",
)
async def create_task(payload: TaskCreate, tasks: TaskRepositoryDependency) -> TaskRead:
    task = await tasks.create(payload.title, payload.description)
    return _map_task(task)


@router.get(
    "/{task_id}",
    response_model=TaskRead,
    summary="Retrieve a task by id",
)
async def get_task(task_id: int, tasks: TaskRepositoryDependency) -> TaskRead:
    return _map_task(await tasks.get(task_id))


@router.api_route(
    "/{task_id}",
    methods=["PUT", "PATCH"],
    response_model=TaskRead,
    summary="Update the supplied fields of a task",
)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    tasks: TaskRepositoryDependency,
) -> TaskRead:
    """Both verbs behave as a partial update; omitted fields are kept."""

    task = await tasks.update(
        task_id,
        title=payload.title,
        description=payload.description,
        completed=payload.completed,
    )
    return _map_task(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a task",
)
async def delete_task(task_id: int, tasks: TaskRepositoryDependency) -> Response:
    if not await tasks.delete(task_id):
        raise NotFoundError("task", task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
