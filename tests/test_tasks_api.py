"""
API tests for task assignment, updates and completion notifications.
"""

import pytest
from sqlmodel import select

from app.models.notification import Notification, NotificationType
from app.models.task import Task


def notifications_for(session, user):
    statement = select(Notification).where(Notification.recipient_id == user.id)
    return session.exec(statement).all()


@pytest.fixture
def task(client, director, employee, headers_for):
    response = client.post(
        "/api/tasks",
        json={"title": "Write report", "assigned_to": employee.id, "priority": "HIGH"},
        headers=headers_for(director),
    )
    assert response.status_code == 201
    return response.json()


def test_create_task_notifies_assignee(client, session, task, director, employee):
    assert task["assigned_by"] == director.id
    assert task["department"] == "Engineering"
    assert task["status"] == "PENDING"
    assert task["priority"] == "HIGH"

    notes = notifications_for(session, employee)
    assert len(notes) == 1
    assert notes[0].type == NotificationType.TASK_ASSIGNED
    assert notes[0].message == "You have been assigned a new task: Write report"


def test_employees_cannot_create_tasks(client, employee, headers_for):
    response = client.post(
        "/api/tasks",
        json={"title": "Self task", "assigned_to": employee.id},
        headers=headers_for(employee),
    )

    assert response.status_code == 403


def test_assignee_must_exist(client, director, headers_for):
    response = client.post(
        "/api/tasks",
        json={"title": "Ghost task", "assigned_to": 9999},
        headers=headers_for(director),
    )

    assert response.status_code == 404


def test_completion_notifies_assigner_once(client, session, task, director, employee, headers_for):
    url = f"/api/tasks/{task['id']}"

    first = client.patch(url, json={"status": "COMPLETED"}, headers=headers_for(employee))
    second = client.patch(url, json={"status": "COMPLETED"}, headers=headers_for(employee))

    assert first.status_code == 200
    assert first.json()["status"] == "COMPLETED"
    assert second.status_code == 200
    notes = notifications_for(session, director)
    assert [(n.type, n.title) for n in notes] == [
        (NotificationType.TASK_UPDATED, "Task Completed")
    ]


def test_unrelated_user_cannot_update(client, task, sales_employee, ceo, headers_for):
    url = f"/api/tasks/{task['id']}"

    denied = client.patch(url, json={"status": "IN_PROGRESS"}, headers=headers_for(sales_employee))
    allowed = client.patch(url, json={"status": "IN_PROGRESS"}, headers=headers_for(ceo))

    assert denied.status_code == 403
    assert allowed.status_code == 200


def test_null_fields_leave_task_unchanged(client, task, employee, headers_for):
    response = client.patch(
        f"/api/tasks/{task['id']}",
        json={"status": None, "title": None, "priority": None},
        headers=headers_for(employee),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "PENDING"
    assert body["title"] == "Write report"
    assert body["priority"] == "HIGH"


def test_task_list_is_scoped(client, task, employee, sales_employee, director, ceo, headers_for):
    mine = client.get("/api/tasks", headers=headers_for(employee)).json()
    theirs = client.get("/api/tasks", headers=headers_for(sales_employee)).json()
    sales_for_director = client.get(
        "/api/tasks", params={"department": "Sales"}, headers=headers_for(director)
    ).json()
    everything = client.get("/api/tasks", headers=headers_for(ceo)).json()

    assert [t["id"] for t in mine] == [task["id"]]
    assert theirs == []
    assert [t["id"] for t in sales_for_director] == [task["id"]]
    assert len(everything) == 1


def test_delete_task(client, session, task, director, employee, headers_for):
    denied = client.delete(f"/api/tasks/{task['id']}", headers=headers_for(employee))
    response = client.delete(f"/api/tasks/{task['id']}", headers=headers_for(director))
    missing = client.delete(f"/api/tasks/{task['id']}", headers=headers_for(director))

    assert denied.status_code == 403
    assert response.status_code == 200
    assert session.get(Task, task["id"]) is None
    assert missing.status_code == 404
