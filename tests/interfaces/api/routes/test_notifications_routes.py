"""Integration tests for the notification API endpoints."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi import Depends
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from studity.application.use_cases.notifications import (
    NotificationService,
    ReminderService,
)
from studity.domain.entities import ROLE_ADMIN
from studity.infrastructure.database import get_db
from studity.infrastructure.repositories import NotificationRepository
from studity.infrastructure.scheduler import Scheduler
from studity.infrastructure.security import create_user_token
from studity.interfaces.api.dependencies import get_notification_service
from studity.main import create_app


@pytest.fixture
def client(session_factory, service_factory, publisher, mailer):
    app = create_app(
        reminder_service=ReminderService(
            session_factory, service_factory=service_factory, scheduler=Scheduler()
        ),
        reminders_enabled=False,
    )

    def override_service(db=Depends(get_db)) -> NotificationService:
        return NotificationService(db, publisher=publisher, mailer=mailer)

    app.dependency_overrides[get_notification_service] = override_service
    return TestClient(app)


def _auth(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_user_token(user.id)}"}


def _notify(service, user, **overrides):
    values = dict(
        recipient_id=user.id,
        title="Class Booking Approved! 🎉",
        message="Great news!",
        type="booking_approved",
        category="booking",
    )
    values.update(overrides)
    return service.create_notification(**values)


def test_requires_bearer_token(client):
    assert client.get("/notifications/").status_code == 401
    response = client.get("/notifications/", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_inactive_user_is_rejected(client, make_user):
    user = make_user(is_active=False)

    response = client.get("/notifications/", headers=_auth(user))

    assert response.status_code == 400


def test_list_notifications_returns_only_own_page(client, service, student, teacher):
    for _ in range(3):
        _notify(service, student)
    _notify(service, student, category="payment", type="payment_received")
    _notify(service, teacher)

    response = client.get("/notifications/?limit=2&page=1", headers=_auth(student))

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 4
    assert body["unread_count"] == 4
    assert body["pages"] == 2
    assert len(body["notifications"]) == 2
    assert {item["recipient_id"] for item in body["notifications"]} == {student.id}

    filtered = client.get("/notifications/?category=payment", headers=_auth(student))
    assert [item["type"] for item in filtered.json()["notifications"]] == ["payment_received"]


def test_unread_count_and_mark_read_ignore_foreign_ids(client, service, student, teacher):
    own = _notify(service, student)
    _notify(service, student)
    foreign = _notify(service, teacher)

    response = client.patch(
        "/notifications/mark-read",
        json={"ids": [own.id, own.id, foreign.id]},
        headers=_auth(student),
    )

    assert response.status_code == 200
    assert response.json() == {"updated": 1}
    assert client.get("/notifications/unread-count", headers=_auth(student)).json() == {
        "unread_count": 1
    }
    assert service.get_unread_count(teacher.id) == 1


def test_mark_read_requires_ids(client, student):
    response = client.patch("/notifications/mark-read", json={"ids": []}, headers=_auth(student))

    assert response.status_code == 422


def test_mark_all_read(client, service, student):
    _notify(service, student)
    _notify(service, student)

    response = client.patch("/notifications/mark-all-read", headers=_auth(student))

    assert response.json() == {"updated": 2}
    assert service.get_unread_count(student.id) == 0


def test_delete_is_scoped_to_owner(client, service, session, student, teacher):
    notification = _notify(service, student)

    foreign = client.delete(f"/notifications/{notification.id}", headers=_auth(teacher))
    assert foreign.status_code == 204
    assert NotificationRepository(session).get(notification.id) is not None

    own = client.delete(f"/notifications/{notification.id}", headers=_auth(student))
    assert own.status_code == 204
    session.expire_all()
    assert NotificationRepository(session).get(notification.id) is None


def test_stats_and_recent_activity(client, service, student):
    _notify(service, student)
    _notify(service, student, category="payment", type="payment_received")

    stats = client.get("/notifications/stats", headers=_auth(student)).json()
    recent = client.get("/notifications/recent", headers=_auth(student)).json()

    assert stats["total"] == 2
    assert stats["categories"]["payment"] == {"total": 1, "unread": 1}
    assert len(recent) == 2


def test_websocket_init_ping_and_ack(client, service, session, student):
    pending = _notify(service, student)
    token = create_user_token(student.id)

    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        init = websocket.receive_json()
        assert init["type"] == "init"
        assert [item["id"] for item in init["data"]] == [pending.id]
        assert init["data"][0]["actionRequired"] is False

        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

        websocket.send_json({"type": "ack", "ids": [pending.id]})
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

    assert service.get_unread_count(student.id) == 0


def test_websocket_rejects_invalid_token(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/notifications/ws?token=invalid") as websocket:
            websocket.receive_json()


def test_admin_can_read_reminder_stats(client, make_user, student):
    admin = make_user("Admin", ROLE_ADMIN)

    assert client.get("/reminders/stats", headers=_auth(student)).status_code == 403
    response = client.get("/reminders/stats", headers=_auth(admin))
    assert response.status_code == 200
    assert set(response.json()) == {
        "upcoming_today",
        "upcoming_tomorrow",
        "upcoming_this_week",
        "last_checked",
    }
