from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlmodel import Session, col, select

from app.api.dependencies import CallerDep, CurrentUserDep, SessionDep
from app.core.events import EventType, TaskEvent
from app.core.exceptions import NotAuthorized, NotFoundError
from app.core.kafka import publish_domain_event
from app.core.logging import get_logger
from app.core.notification_service import notify_users
from app.core.scoping import ELEVATED_ROLES, can_manage, scope_tasks
from app.core.security import TokenData, require_role
from app.core.user_service import get_user_or_404
from app.models.notification import NotificationType
from app.models.task import Task, TaskCreate, TaskPublic, TaskStatus, TaskUpdate

logger = get_logger(__name__)

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    responses={404: {"description": "Task not found"}},
)


async def _publish_task_event(
    event_type: EventType,
    task: Task,
    current_user: TokenData,
    previous_status: TaskStatus | None = None,
) -> None:
    try:
        await publish_domain_event(
            event_type,
            TaskEvent(
                task_id=task.id,
                title=task.title,
                assigned_to=task.assigned_to,
                assigned_by=task.assigned_by,
                department=task.department,
                status=task.status.value,
                previous_status=previous_status.value if previous_status else None,
            ),
            actor_user_id=current_user.sub,
            actor_role=current_user.role.value,
            key=str(task.id),
        )
    except Exception as e:
        logger.warning(f"Failed to publish {event_type.value} event: {e}")


def _get_task_or_404(session: Session, task_id: int) -> Task:
    task = session.get(Task, task_id)
    if not task:
        logger.warning(f"Task {task_id} not found")
        raise NotFoundError("Task not found")
    return task


@router.get("", response_model=list[TaskPublic])
async def list_tasks(
    session: SessionDep,
    caller: CallerDep,
    department: str | None = None,
    assigned_to: int | None = None,
) -> list[Task]:
    """
    List tasks.

    **RBAC:** Employees see tasks assigned to them, Directors see their own
    department, CEO and Admin may filter freely.
    """
    scope = scope_tasks(caller, assigned_to=assigned_to, department=department)
    statement = select(Task)
    if scope.department:
        statement = statement.where(Task.department == scope.department)
    if scope.assigned_to is not None:
        statement = statement.where(Task.assigned_to == scope.assigned_to)
    statement = statement.order_by(col(Task.created_at).desc())
    return session.exec(statement).all()


@router.post("", response_model=TaskPublic, status_code=201)
async def create_task(
    task_in: TaskCreate,
    session: SessionDep,
    caller: CallerDep,
    current_user: Annotated[TokenData, Depends(require_role(*ELEVATED_ROLES))],
) -> Task:
    """
    Assign a new task. The task belongs to the caller's department.

    **RBAC:** CEO and Director only.

    Raises:
        NotFoundError: 404 if the assignee does not exist
    """
    get_user_or_404(session, task_in.assigned_to)

    task = Task(
        **task_in.model_dump(),
        assigned_by=caller.user_id,
        department=caller.department,
    )
    session.add(task)
    session.commit()
    session.refresh(task)
    logger.info(f"Task {task.id} assigned to {task.assigned_to} by {caller.user_id}")

    notify_users(
        session,
        [task.assigned_to],
        NotificationType.TASK_ASSIGNED,
        "New Task Assigned",
        f"You have been assigned a new task: {task.title}",
        task.id,
    )
    await _publish_task_event(EventType.TASK_ASSIGNED, task, current_user)

    session.refresh(task)
    return task


@router.patch("/{task_id}", response_model=TaskPublic)
async def update_task(
    task_id: int,
    task_update: TaskUpdate,
    session: SessionDep,
    caller: CallerDep,
    current_user: CurrentUserDep,
) -> Task:
    """
    Update a task. Fields sent as null are left unchanged.

    **RBAC:** The assignee, the assigner or the CEO.

    The assigner is notified when the task first moves to COMPLETED; failing
    to write that notification does not fail the update.

    Raises:
        NotFoundError: 404 if the task or a new assignee does not exist
        NotAuthorized: 403 if the caller may not change the task
    """
    task = _get_task_or_404(session, task_id)
    if not can_manage(caller, {task.assigned_to, task.assigned_by}):
        logger.warning(f"User {caller.user_id} attempted to update task {task_id}")
        raise NotAuthorized()

    updates = task_update.model_dump(exclude_unset=True, exclude_none=True)
    if updates.get("assigned_to") is not None:
        get_user_or_404(session, updates["assigned_to"])

    previous_status = task.status
    for key, value in updates.items():
        setattr(task, key, value)
    task.updated_at = datetime.utcnow()

    session.add(task)
    session.commit()
    session.refresh(task)
    logger.info(f"Task {task_id} updated by user {caller.user_id}")

    if previous_status != TaskStatus.COMPLETED and task.status == TaskStatus.COMPLETED:
        notify_users(
            session,
            [task.assigned_by],
            NotificationType.TASK_UPDATED,
            "Task Completed",
            f'Task "{task.title}" has been completed',
            task.id,
        )
        session.refresh(task)

    await _publish_task_event(
        EventType.TASK_UPDATED, task, current_user, previous_status=previous_status
    )
    return task


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    session: SessionDep,
    current_user: Annotated[TokenData, Depends(require_role(*ELEVATED_ROLES))],
) -> dict[str, str]:
    """
    Delete a task.

    **RBAC:** CEO and Director only.
    """
    task = _get_task_or_404(session, task_id)
    session.delete(task)
    session.commit()
    logger.info(f"Task {task_id} deleted by {current_user.sub}")
    return {"message": "Task deleted"}
