"""Learning path completion bookkeeping."""
from datetime import datetime, timezone

from ..domain.scoring import round_half_up


def recompute_completion(path, now: datetime | None = None) -> None:
    """Derive progress, status and completion flags from the module list."""
    now = now or datetime.now(timezone.utc)
    modules = path.modules or []
    done = len([m for m in modules if m.get("completed")])
    if modules:
        path.progress = round_half_up(done / len(modules) * 100)
        finished = done == len(modules)
    else:
        finished = bool(path.is_completed)
        path.progress = 100 if finished else 0

    if finished:
        path.status = "completed"
        path.is_completed = True
        path.completed_at = path.completed_at or now
    else:
        path.status = "in_progress" if done else "not_started"
        path.is_completed = False
        path.completed_at = None


def complete_module(path, index: int, now: datetime | None = None) -> dict:
    """Mark one module done; raises IndexError for an unknown position."""
    now = now or datetime.now(timezone.utc)
    modules = [dict(m) for m in path.modules or []]
    if not 0 <= index < len(modules):
        raise IndexError(index)
    if not modules[index].get("completed"):
        modules[index]["completed"] = True
        modules[index]["completedAt"] = now.isoformat()
    path.modules = modules
    recompute_completion(path, now)
    return modules[index]


def normalize_modules(modules: list[dict]) -> list[dict]:
    return [
        {
            "title": m["title"],
            "description": m.get("description"),
            "resources": list(m.get("resources") or []),
            "completed": bool(m.get("completed")),
            "completedAt": m.get("completedAt"),
            "order": m.get("order") if m.get("order") is not None else i,
        }
        for i, m in enumerate(modules)
    ]


def modules_from_plan(plan: dict) -> list[dict]:
    return normalize_modules([
        {
            "title": f"Day {day['day']}: {day.get('focus') or 'Learning'}",
            "description": day.get("description"),
            "resources": [r for task in day.get("tasks") or [] for r in task.get("resources") or []],
            "order": day["day"] - 1,
        }
        for day in plan["dailyTasks"]
    ])


def complete_all(path, now: datetime | None = None) -> None:
    now = now or datetime.now(timezone.utc)
    path.modules = [
        {**m, "completed": True, "completedAt": m.get("completedAt") or now.isoformat()}
        for m in path.modules or []
    ]
    path.is_completed = True
    recompute_completion(path, now)
