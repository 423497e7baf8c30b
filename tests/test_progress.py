from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy.orm import sessionmaker

from pathfinder.application.progress import completed_entry, overall_from_tasks, summarize_legacy
from pathfinder.infrastructure.models import ProgressORM
from pathfinder.infrastructure.repositories import ProgressRepository, UserRepository


def _update(client, headers, **extra):
    body = {"learningPathId": "lp-1", "domain": "frontend", "currentDay": 1, "totalDays": 10, **extra}
    response = client.post("/api/progress/update", json=body, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def test_update_creates_then_overwrites(client, auth):
    headers, _ = auth
    first = _update(client, headers, overallProgress=10)
    assert first["message"] == "Progress updated successfully"
    assert first["data"]["state"] == "in-progress"

    second = _update(client, headers, overallProgress=100, currentDay=10, score=92)
    assert second["data"]["id"] == first["data"]["id"]
    assert second["data"]["overallProgress"] == 100
    assert second["data"]["state"] == "completed"
    assert second["data"]["score"] == 92

    rows = client.get("/api/progress", headers=headers).json()["data"]
    assert len(rows) == 1
    assert rows[0]["currentDay"] == 10

def test_update_rejects_out_of_range_progress(client, auth):
    headers, _ = auth
    response = client.post(
        "/api/progress/update",
        json={"learningPathId": "lp-1", "overallProgress": 150},
        headers=headers,
    )
    assert response.status_code == 400

def test_complete_task_on_canonical_record(client, auth):
    headers, _ = auth
    _update(client, headers, completedTasks={"day1-task0": {"completed": True, "timeSpent": 20}})
    response = client.post(
        "/api/progress/complete-task",
        json={"taskId": "day2-task0", "learningPathId": "lp-1", "day": 2, "timeSpent": 30},
        headers=headers,
    )
    body = response.json()
    assert body["message"] == "Task marked as complete"
    tasks = body["data"]["completedTasks"]
    assert set(tasks) == {"day1-task0", "day2-task0"}
    assert tasks["day2-task0"]["completed"] is True
    assert tasks["day2-task0"]["timeSpent"] == 30
    assert body["data"]["currentDay"] == 2

    fetched = client.get("/api/progress/lp-1", headers=headers).json()["data"]
    assert set(fetched["completedTasks"]) == {"day1-task0", "day2-task0"}
    assert len(client.get("/api/progress", headers=headers).json()["data"]) == 1

def test_complete_task_without_path_writes_legacy_record(client, auth):
    headers, _ = auth
    for task_id, day, index in (("t-1", 1, 0), ("t-2", 2, 0), ("t-1", 1, 0)):
        response = client.post(
            "/api/progress/complete-task",
            json={"taskId": task_id, "domain": "frontend", "day": day, "taskIndex": index},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["taskId"] == task_id
        assert response.json()["data"]["state"] == "completed"

    assert len(client.get("/api/progress", headers=headers).json()["data"]) == 2

    summary = client.get("/api/progress/lp-legacy?domain=frontend", headers=headers).json()["data"]
    assert summary["learningPathId"] == "lp-legacy"
    assert set(summary["completedTasks"]) == {"t-1", "t-2"}
    assert summary["currentDay"] == 2
    assert summary["overallProgress"] == 100

def test_canonical_record_wins_over_legacy(client, auth):
    headers, _ = auth
    client.post("/api/progress/complete-task", json={"taskId": "t-1", "domain": "frontend"}, headers=headers)
    _update(client, headers, completedTasks={})
    data = client.get("/api/progress/lp-1?domain=frontend", headers=headers).json()["data"]
    assert data["completedTasks"] == {}

def test_unknown_path_without_legacy_records(client, auth):
    headers, _ = auth
    data = client.get("/api/progress/nothing", headers=headers).json()["data"]
    assert data == {
        "learningPathId": "nothing", "currentDay": 1, "totalDays": 1,
        "completedTasks": {}, "overallProgress": 0,
    }

def test_progress_requires_auth(client):
    assert client.get("/api/progress").status_code in (401, 403)


# repository

def test_upsert_path_keeps_single_row(db_session):
    user = UserRepository(db_session).create("Ada", "ada@example.com", "hash")
    repo = ProgressRepository(db_session)
    repo.upsert_path(user.id, "lp-9", {"overall_progress": 20, "state": "in-progress"})
    row = repo.upsert_path(user.id, "lp-9", {"overall_progress": 40, "state": "in-progress"})
    assert row.overall_progress == 40
    assert db_session.query(ProgressORM).count() == 1

def test_legacy_tasks_filter_by_domain(db_session):
    user = UserRepository(db_session).create("Ada", "ada@example.com", "hash")
    repo = ProgressRepository(db_session)
    repo.upsert_task(user.id, "a", {"domain": "frontend", "day": 1, "state": "completed"})
    repo.upsert_task(user.id, "b", {"domain": "backend", "day": 1, "state": "completed"})
    repo.upsert_path(user.id, "lp-1", {"domain": "frontend"})
    assert [r.task_id for r in repo.legacy_tasks(user.id, "frontend")] == ["a"]
    assert len(repo.legacy_tasks(user.id)) == 2

def test_merge_task_keeps_concurrent_completions(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    setup = Session()
    user = UserRepository(setup).create("Ada", "ada@example.com", "hash")
    ProgressRepository(setup).upsert_path(user.id, "lp-1", {"completed_tasks": {"t0": completed_entry(5)}})
    setup.close()

    first, second = Session(), Session()
    # both sessions read the record before either writes
    assert ProgressRepository(first).get_for_path(user.id, "lp-1").completed_tasks.keys() == {"t0"}
    assert ProgressRepository(second).get_for_path(user.id, "lp-1").completed_tasks.keys() == {"t0"}

    ProgressRepository(first).merge_task(user.id, "lp-1", "t1", completed_entry(10), day=2)
    row = ProgressRepository(second).merge_task(user.id, "lp-1", "t2", completed_entry(20), day=1)
    assert set(row.completed_tasks) == {"t0", "t1", "t2"}
    assert row.completed_tasks["t1"]["timeSpent"] == 10
    assert row.current_day == 2
    first.close()
    second.close()

def test_merge_task_creates_record(db_session):
    user = UserRepository(db_session).create("Ada", "ada@example.com", "hash")
    row = ProgressRepository(db_session).merge_task(user.id, "lp-2", "t1", completed_entry(), domain="go", day=3)
    assert row.completed_tasks["t1"]["completed"] is True
    assert (row.domain, row.current_day) == ("go", 3)


# progress maps

def test_completed_entry():
    stamp = datetime(2026, 10, 1, tzinfo=timezone.utc)
    assert completed_entry(5, now=stamp) == {"completed": True, "completedAt": stamp.isoformat(), "timeSpent": 5}

def test_overall_from_tasks():
    tasks = {"a": {"completed": True}, "b": {"completed": False}}
    assert overall_from_tasks(tasks) == 50
    assert overall_from_tasks(tasks, total_tasks=8) == 25
    assert overall_from_tasks({}) == 0

def test_summarize_legacy_tracks_highest_completed_day():
    stamp = datetime(2026, 10, 1, tzinfo=timezone.utc)
    records = [
        SimpleNamespace(task_id="a", state="completed", day=1, time_spent=10, completed_at=stamp, updated_at=stamp),
        SimpleNamespace(task_id="b", state="complete", day=3, time_spent=None, completed_at=None, updated_at=stamp),
        SimpleNamespace(task_id="c", state="incomplete", day=4, time_spent=None, completed_at=None, updated_at=None),
    ]
    summary = summarize_legacy("lp", records)
    assert summary["currentDay"] == 3
    assert summary["totalDays"] == 4
    assert summary["completedTasks"]["b"]["completedAt"] == stamp.isoformat()
    assert summary["completedTasks"]["c"]["completedAt"] is None
    assert summary["overallProgress"] == pytest.approx(66.67, abs=0.01)
