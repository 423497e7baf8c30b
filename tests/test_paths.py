from types import SimpleNamespace

import pytest

from pathfinder.application.paths import complete_module, modules_from_plan, recompute_completion

from conftest import register

MODULES = [{"title": "Variables"}, {"title": "Loops"}, {"title": "Functions"}, {"title": "Classes"}]


def _create(client, headers, **extra):
    body = {"title": "Python basics", "difficulty": "beginner", "modules": MODULES, **extra}
    response = client.post("/api/paths", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_create_and_list(client, auth):
    headers, user = auth
    created = _create(client, headers, tags=["Python"], totalDays=14)
    assert created["userId"] == user["id"]
    assert created["status"] == "not_started"
    assert created["progress"] == 0
    assert created["totalDays"] == 14
    assert [m["order"] for m in created["modules"]] == [0, 1, 2, 3]
    assert created["isAIGenerated"] is False

    listed = client.get("/api/paths", headers=headers).json()["data"]
    assert [p["id"] for p in listed] == [created["id"]]
    assert client.get("/api/paths/completed", headers=headers).json()["data"] == []

def test_create_rejects_unknown_difficulty(client, auth):
    headers, _ = auth
    response = client.post("/api/paths", json={"title": "x", "difficulty": "wizard"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"].startswith("difficulty:")

def test_complete_module_updates_progress(client, auth):
    headers, _ = auth
    path = _create(client, headers)
    body = client.post(f"/api/paths/{path['id']}/modules/1/complete", headers=headers).json()["data"]
    assert body["progress"] == 25
    assert body["status"] == "in_progress"
    assert body["modules"][1]["completed"] is True
    assert body["modules"][1]["completedAt"]

    for index in (0, 2, 3):
        body = client.post(f"/api/paths/{path['id']}/modules/{index}/complete", headers=headers).json()["data"]
    assert body["progress"] == 100
    assert body["status"] == "completed"
    assert body["isCompleted"] is True
    assert body["completedAt"]
    completed = client.get("/api/paths/completed", headers=headers).json()["data"]
    assert [p["id"] for p in completed] == [path["id"]]

def test_complete_unknown_module(client, auth):
    headers, _ = auth
    path = _create(client, headers)
    response = client.post(f"/api/paths/{path['id']}/modules/9/complete", headers=headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Module not found"

def test_update_fields(client, auth):
    headers, _ = auth
    path = _create(client, headers)
    response = client.put(f"/api/paths/{path['id']}", json={"title": "Python 101", "currentDay": 3}, headers=headers)
    body = response.json()["data"]
    assert body["title"] == "Python 101"
    assert body["currentDay"] == 3
    assert body["difficulty"] == "beginner"

def test_update_marks_everything_complete(client, auth):
    headers, _ = auth
    path = _create(client, headers)
    body = client.put(f"/api/paths/{path['id']}", json={"isCompleted": True}, headers=headers).json()["data"]
    assert body["isCompleted"] is True
    assert body["progress"] == 100
    assert all(m["completed"] for m in body["modules"])

def test_other_users_path_is_unauthorized(client, auth):
    headers, _ = auth
    path = _create(client, headers)
    other = register(client, email="eve@example.com", name="Eve")
    other_headers = {"Authorization": f"Bearer {other['access_token']}"}

    response = client.put(f"/api/paths/{path['id']}", json={"title": "mine"}, headers=other_headers)
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized to update this learning path"
    response = client.delete(f"/api/paths/{path['id']}", headers=other_headers)
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized to delete this learning path"
    assert client.get("/api/paths", headers=other_headers).json()["data"] == []

def test_delete_path(client, auth):
    headers, _ = auth
    path = _create(client, headers)
    response = client.delete(f"/api/paths/{path['id']}", headers=headers)
    assert response.json() == {"success": True, "message": "Learning path deleted successfully"}
    assert client.delete(f"/api/paths/{path['id']}", headers=headers).status_code == 404

def test_missing_path(client, auth):
    headers, _ = auth
    response = client.put("/api/paths/999", json={"title": "x"}, headers=headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Learning path not found"


# completion bookkeeping

def _path(modules, is_completed=False):
    return SimpleNamespace(modules=modules, is_completed=is_completed, completed_at=None,
                           progress=0, status="not_started")

def test_recompute_without_modules_keeps_flag():
    path = _path([], is_completed=True)
    recompute_completion(path)
    assert path.progress == 100
    assert path.status == "completed"
    assert path.completed_at is not None

def test_recompute_rounds_progress():
    path = _path([{"completed": True}, {"completed": False}, {"completed": False}])
    recompute_completion(path)
    assert path.progress == 33
    assert path.status == "in_progress"

def test_complete_module_is_idempotent():
    path = _path([{"title": "a", "completed": False}])
    first = complete_module(path, 0)
    stamp = first["completedAt"]
    assert complete_module(path, 0)["completedAt"] == stamp

def test_complete_module_rejects_negative_index():
    with pytest.raises(IndexError):
        complete_module(_path([{"title": "a"}]), -1)

def test_modules_from_plan():
    plan = {"dailyTasks": [
        {"day": 1, "focus": "Setup", "tasks": [{"resources": [{"title": "docs"}]}]},
        {"day": 2, "tasks": []},
    ]}
    modules = modules_from_plan(plan)
    assert [m["title"] for m in modules] == ["Day 1: Setup", "Day 2: Learning"]
    assert modules[0]["resources"] == [{"title": "docs"}]
    assert [m["order"] for m in modules] == [0, 1]
