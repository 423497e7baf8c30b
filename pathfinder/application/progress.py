"""Progress maps.

The canonical record's ``completedTasks`` map is authoritative. Per-task
legacy records are only consulted when no canonical record exists.
"""
from datetime import datetime, timezone

DONE_STATES = ("complete", "completed")


def completed_entry(time_spent: int = 0, now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    return {"completed": True, "completedAt": now.isoformat(), "timeSpent": time_spent}


def overall_from_tasks(completed_tasks: dict, total_tasks: int | None = None) -> float:
    total = total_tasks or len(completed_tasks)
    if not total:
        return 0
    done = len([t for t in completed_tasks.values() if t.get("completed")])
    return min(100.0, done / total * 100)


def summarize_legacy(learning_path_id: str, records) -> dict:
    """Collapse legacy per-task records into the canonical response shape."""
    tasks = {}
    current_day = max_day = 1
    for record in records:
        done = record.state in DONE_STATES
        stamp = record.completed_at or record.updated_at
        tasks[record.task_id] = {
            "completed": done,
            "completedAt": stamp.isoformat() if stamp else None,
            "timeSpent": record.time_spent or 0,
        }
        if record.day and record.day > max_day:
            max_day = record.day
            if done:
                current_day = max_day
    return {
        "learningPathId": learning_path_id,
        "currentDay": current_day,
        "totalDays": max_day,
        "completedTasks": tasks,
        "overallProgress": overall_from_tasks(tasks),
    }
