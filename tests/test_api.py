from datetime import date, datetime, timedelta

import pytest

from worktrack.models import BreakRecord, WorkSession
from worktrack.services import clock

CRON_HEADERS = {"Authorization": "Bearer test-cron-key"}


def _work(db, user_id, start, end):
    session = WorkSession(
        user_id=user_id,
        started_at=start,
        ended_at=end,
        duration_seconds=int((end - start).total_seconds()),
    )
    db.add(session)
    db.commit()
    return session


@pytest.mark.parametrize(
    "method, path",
    [
        ("post", "/api/time/start"),
        ("post", "/api/time/stop"),
        ("get", "/api/time/current"),
        ("get", "/api/time/entries"),
        ("post", "/api/time/manual-entry"),
        ("delete", "/api/time/entries/1"),
        ("post", "/api/vacation"),
        ("get", "/api/vacation"),
        ("get", "/api/admin/vacation"),
        ("get", "/api/admin/breaks"),
    ],
)
def test_requires_login(client, method, path):
    response = getattr(client, method)(path)

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_login_rejects_bad_password(client, make_user):
    user = make_user()

    response = client.post("/api/auth/login", data={"email": user.email, "password": "nope"})

    assert response.status_code == 400


def test_logout_clears_session(client, make_user, login):
    login(make_user())

    client.post("/api/auth/logout")

    assert client.get("/api/time/current").status_code == 401


def test_start_current_stop_cycle(client, make_user, login):
    login(make_user())

    started = client.post("/api/time/start")
    assert started.status_code == 200
    assert started.json()["startTime"].endswith("Z")

    again = client.post("/api/time/start")
    assert again.status_code == 400
    assert "error" in again.json()

    current = client.get("/api/time/current").json()["currentSession"]
    assert current["endTime"] is None
    assert current["elapsedSeconds"] >= 0

    stopped = client.post("/api/time/stop")
    assert stopped.status_code == 200
    session = stopped.json()["session"]
    assert session["endTime"] is not None
    assert session["duration"] >= 0

    assert client.get("/api/time/current").json() == {"currentSession": None}
    assert client.post("/api/time/stop").status_code == 400


def test_entries_for_date_split_across_midnight(client, db, make_user, login):
    user = make_user()
    _work(db, user.id, datetime(2026, 10, 13, 23, 0), datetime(2026, 10, 14, 1, 0))
    db.add(
        BreakRecord(
            user_id=user.id,
            date=date(2026, 10, 14),
            minutes=30,
            started_at=datetime(2026, 10, 14, 0, 15),
            ended_at=datetime(2026, 10, 14, 0, 45),
        )
    )
    db.commit()
    login(user)

    body = client.get("/api/time/entries", params={"date": "2026-10-14"}).json()

    assert body["date"] == "2026-10-14"
    [entry] = body["entries"]
    assert entry["duration"] == 7200
    assert entry["dayDuration"] == 3600
    assert entry["isMultiDay"] is True
    assert entry["isStartDay"] is False
    assert entry["isEndDay"] is True
    assert entry["displayDate"] == "2026-10-14"
    assert body["summary"] == {"workedSeconds": 3600, "breakSeconds": 1800, "netSeconds": 1800}


def test_entries_rejects_bad_date(client, make_user, login):
    login(make_user())

    assert client.get("/api/time/entries", params={"date": "14/10/2026"}).status_code == 400
    assert client.get("/api/time/entries", params={"date": "2026-10-12garbage"}).status_code == 400
    instant = client.get("/api/time/entries", params={"date": "2026-10-12T08:00:00Z"})
    assert instant.status_code == 200
    assert instant.json()["date"] == "2026-10-12"


def test_manual_entry(client, make_user, login):
    login(make_user())
    now = clock.utcnow().replace(microsecond=0)

    response = client.post(
        "/api/time/manual-entry",
        json={
            "startTime": clock.to_iso(now - timedelta(hours=3)),
            "endTime": clock.to_iso(now - timedelta(hours=1)),
        },
    )

    assert response.status_code == 200
    assert response.json()["timeEntry"]["duration"] == 7200


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"startTime": "2026-10-14T09:00:00Z"},
        {"startTime": "yesterday", "endTime": "today"},
    ],
)
def test_manual_entry_rejects_bad_input(client, make_user, login, payload):
    login(make_user())

    response = client.post("/api/time/manual-entry", json=payload)

    assert response.status_code == 400


def test_manual_entry_rejects_future_and_old(client, make_user, login):
    login(make_user())
    now = clock.utcnow().replace(microsecond=0)

    future = client.post(
        "/api/time/manual-entry",
        json={"startTime": clock.to_iso(now), "endTime": clock.to_iso(now + timedelta(hours=2))},
    )
    stale = client.post(
        "/api/time/manual-entry",
        json={
            "startTime": clock.to_iso(now - timedelta(days=9)),
            "endTime": clock.to_iso(now - timedelta(days=9) + timedelta(hours=1)),
        },
    )

    assert future.status_code == 400
    assert stale.status_code == 400


def test_delete_entry_rules(client, db, make_user, login):
    owner, other = make_user(), make_user()
    mine_id = _work(db, owner.id, datetime(2026, 10, 14, 9), datetime(2026, 10, 14, 10)).id
    theirs_id = _work(db, other.id, datetime(2026, 10, 14, 9), datetime(2026, 10, 14, 10)).id
    login(owner)

    assert client.delete("/api/time/entries/abc").status_code == 400
    assert client.delete("/api/time/entries/9999").status_code == 404
    assert client.delete(f"/api/time/entries/{theirs_id}").status_code == 403
    assert client.delete(f"/api/time/entries/{mine_id}").status_code == 200

    db.expire_all()
    assert db.get(WorkSession, mine_id) is None
    assert db.get(WorkSession, theirs_id) is not None


def test_vacation_request_and_review(client, make_user, login):
    member, admin = make_user(), make_user(role="ADMIN")
    login(member)

    created = client.post(
        "/api/vacation",
        json={"startDate": "2026-10-12", "endDate": "2026-10-18", "description": "hiking"},
    )
    assert created.status_code == 200
    vacation = created.json()["vacation"]
    assert vacation["days"] == 5
    assert vacation["status"] == "pending"

    assert client.get("/api/admin/vacation").status_code == 403
    assert client.put(f"/api/admin/vacation/{vacation['id']}", json={"status": "approved"}).status_code == 403

    login(admin)
    listed = client.get("/api/admin/vacation", params={"status": "pending"}).json()["vacations"]
    assert [item["id"] for item in listed] == [vacation["id"]]
    assert listed[0]["user"]["email"] == member.email

    reviewed = client.put(f"/api/admin/vacation/{vacation['id']}", json={"status": "approved"})
    assert reviewed.status_code == 200
    assert reviewed.json()["vacation"]["reviewedBy"] == admin.id
    assert client.put(f"/api/admin/vacation/{vacation['id']}", json={"status": "maybe"}).status_code == 400
    assert client.put("/api/admin/vacation/9999", json={"status": "approved"}).status_code == 404

    login(member)
    mine = client.get("/api/vacation").json()
    assert mine["totalDays"] == 30
    assert mine["takenDays"] == 5
    assert mine["remainingDays"] == 25
    assert [item["status"] for item in mine["vacations"]] == ["approved"]


def test_vacation_request_validation(client, make_user, login):
    login(make_user())

    assert client.post("/api/vacation", json={"startDate": "2026-10-12"}).status_code == 400
    assert (
        client.post("/api/vacation", json={"startDate": "2026-10-18", "endDate": "2026-10-12"}).status_code
        == 400
    )
    assert client.post("/api/vacation", json={"startDate": "not-a-date", "endDate": "2026-10-12"}).status_code == 400


def test_auto_breaks_with_job_token(client, db, make_user):
    user = make_user()
    _work(db, user.id, datetime(2026, 10, 14, 8), datetime(2026, 10, 14, 16))

    first = client.post("/api/time/auto-breaks", json={"date": "2026-10-14"}, headers=CRON_HEADERS)
    second = client.post("/api/time/auto-breaks", json={"date": "2026-10-14"}, headers=CRON_HEADERS)

    assert first.status_code == 200
    assert first.json()["processedUsers"] == 1
    assert first.json()["breaks"][0]["breakStartTime"] == "2026-10-14T11:45:00Z"
    assert second.json()["processedUsers"] == 0
    assert second.json()["skipped"] == [{"userId": user.id, "reason": "exists"}]


def test_auto_breaks_authorization(client, make_user, login):
    assert client.post("/api/time/auto-breaks", headers={"Authorization": "Bearer wrong"}).status_code == 401
    assert client.post("/api/time/auto-breaks").status_code == 401

    login(make_user())
    assert client.post("/api/time/auto-breaks").status_code == 403

    login(make_user(role="OWNER"))
    response = client.post("/api/time/auto-breaks")
    assert response.status_code == 200
    assert response.json()["date"] == clock.yesterday().isoformat()


def test_admin_break_views(client, db, make_user, login):
    admin = make_user(role="ADMIN")
    member = make_user(break_duration_minutes=45, auto_insert_breaks=False)
    db.add(
        BreakRecord(
            user_id=admin.id,
            date=date(2026, 10, 14),
            minutes=30,
            started_at=datetime(2026, 10, 14, 12),
            ended_at=datetime(2026, 10, 14, 12, 30),
        )
    )
    db.commit()
    login(admin)

    breaks = client.get("/api/admin/breaks", params={"date": "2026-10-14"}).json()
    assert breaks["breaks"] == [
        {
            "id": breaks["breaks"][0]["id"],
            "userId": admin.id,
            "date": "2026-10-14",
            "breakDuration": 30,
            "breakStartTime": "2026-10-14T12:00:00Z",
            "breakEndTime": "2026-10-14T12:30:00Z",
        }
    ]

    member_settings = client.get(f"/api/admin/break-settings/{member.id}").json()["breakSettings"]
    assert member_settings == {"userId": member.id, "breakDuration": 45, "autoInsert": False}
    admin_settings = client.get(f"/api/admin/break-settings/{admin.id}").json()["breakSettings"]
    assert admin_settings["breakDuration"] == 30
    assert admin_settings["autoInsert"] is True
    assert client.get("/api/admin/break-settings/9999").status_code == 404
    assert client.get("/api/admin/breaks", params={"date": "2026-10-14x"}).status_code == 400
