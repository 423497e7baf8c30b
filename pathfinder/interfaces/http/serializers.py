"""ORM rows to camelCase response payloads."""
from datetime import datetime


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def user_to_dict(u) -> dict:
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "profile": u.profile or {},
        "createdAt": _iso(u.created_at),
    }


def path_to_dict(p) -> dict:
    return {
        "id": p.id,
        "userId": p.user_id,
        "title": p.title,
        "description": p.description,
        "difficulty": p.difficulty,
        "domain": p.domain,
        "level": p.level,
        "skills": p.skills or [],
        "tags": p.tags or [],
        "modules": p.modules or [],
        "isCompleted": bool(p.is_completed),
        "completedAt": _iso(p.completed_at),
        "status": p.status,
        "progress": p.progress or 0,
        "currentDay": p.current_day,
        "totalDays": p.total_days,
        "isAIGenerated": bool(p.is_ai_generated),
        "createdAt": _iso(p.created_at),
        "updatedAt": _iso(p.updated_at),
    }


def progress_to_dict(r) -> dict:
    data = {
        "id": r.id,
        "userId": r.user_id,
        "learningPathId": r.learning_path_id,
        "domain": r.domain,
        "currentDay": r.current_day,
        "totalDays": r.total_days,
        "completedTasks": r.completed_tasks or {},
        "overallProgress": r.overall_progress or 0,
        "state": r.state,
        "timeSpent": r.time_spent,
        "score": r.score,
        "createdAt": _iso(r.created_at),
        "updatedAt": _iso(r.updated_at),
    }
    if r.task_id:
        data.update(taskId=r.task_id, day=r.day, taskIndex=r.task_index, completedAt=_iso(r.completed_at))
    return data


def certificate_to_dict(c, include_content: bool = True) -> dict:
    data = {
        "certificateId": c.certificate_id,
        "userInfo": c.user_info or {},
        "courseDetails": c.course_details or {},
        "verification": c.verification or {},
        "downloadCount": c.download_count or 0,
        "lastDownloaded": _iso(c.last_downloaded),
        "isRevoked": bool(c.is_revoked),
        "createdAt": _iso(c.created_at),
    }
    if include_content:
        data["content"] = c.content
    return data
