"""
API tests for reading notifications and marking them read.
"""

from datetime import datetime, timedelta

from sqlmodel import select

from app.core.notification_service import notify_users
from app.models.notification import Notification, NotificationType


def add_notification(session, user, title, created_at, read=False):
    notification = Notification(
        recipient_id=user.id,
        type=NotificationType.TASK_ASSIGNED,
        title=title,
        message=f"Message for {title}",
        related_id=1,
        read=read,
        created_at=created_at,
        updated_at=created_at,
    )
    session.add(notification)
    session.commit()
    session.refresh(notification)
    return notification


def test_lists_own_notifications_newest_first(client, session, employee, director, headers_for):
    base = datetime(2026, 3, 1, 9, 0)
    add_notification(session, employee, "older", base)
    add_notification(session, employee, "newer", base + timedelta(hours=1))
    add_notification(session, director, "not mine", base + timedelta(hours=2))

    response = client.get("/api/notifications", headers=headers_for(employee))

    assert response.status_code == 200
    assert [n["title"] for n in response.json()] == ["newer", "older"]


def test_list_is_capped_at_fifty(client, session, employee, headers_for):
    base = datetime(2026, 3, 1, 9, 0)
    for i in range(55):
        add_notification(session, employee, f"n{i}", base + timedelta(minutes=i))

    response = client.get("/api/notifications", headers=headers_for(employee))

    titles = [n["title"] for n in response.json()]
    assert len(titles) == 50
    assert titles[0] == "n54"


def test_mark_read(client, session, employee, headers_for):
    notification = add_notification(session, employee, "hello", datetime(2026, 3, 1))

    response = client.patch(
        f"/api/notifications/{notification.id}/read", headers=headers_for(employee)
    )

    assert response.status_code == 200
    assert response.json()["read"] is True


def test_mark_read_is_recipient_only(client, session, employee, director, headers_for):
    notification = add_notification(session, employee, "hello", datetime(2026, 3, 1))

    response = client.patch(
        f"/api/notifications/{notification.id}/read", headers=headers_for(director)
    )
    missing = client.patch("/api/notifications/999/read", headers=headers_for(employee))

    assert response.status_code == 403
    assert missing.status_code == 404


def test_mark_all_read(client, session, employee, director, headers_for):
    add_notification(session, employee, "a", datetime(2026, 3, 1))
    add_notification(session, employee, "b", datetime(2026, 3, 2))
    other = add_notification(session, director, "c", datetime(2026, 3, 3))

    response = client.patch("/api/notifications/mark-all-read", headers=headers_for(employee))

    assert response.status_code == 200
    assert response.json() == {"message": "All notifications marked as read"}
    session.expire_all()
    mine = session.exec(
        select(Notification).where(Notification.recipient_id == employee.id)
    ).all()
    assert all(n.read for n in mine)
    assert session.get(Notification, other.id).read is False


def test_notify_users_deduplicates_recipients(session, employee, director):
    written = notify_users(
        session,
        [employee.id, director.id, employee.id],
        NotificationType.MEETING_REMINDER,
        "Reminder",
        "Starts soon",
        42,
    )

    assert written == 2
    assert len(session.exec(select(Notification)).all()) == 2


def test_notify_users_without_recipients(session):
    assert notify_users(session, [], NotificationType.TASK_UPDATED, "t", "m", 1) == 0
