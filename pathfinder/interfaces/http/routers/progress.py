from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ....application.progress import completed_entry, summarize_legacy
from ....infrastructure.db import get_db
from ....infrastructure.models import utcnow
from ....infrastructure.repositories import ProgressRepository
from ..authz import get_current_user_id
from ..schemas import CompleteTaskReq, ProgressUpdateReq
from ..serializers import progress_to_dict

router = APIRouter(prefix="/api/progress", tags=["progress"])
logger = structlog.get_logger(__name__)

def _state_for(overall: float) -> str:
    if overall >= 100:
        return "completed"
    return "in-progress" if overall > 0 else "incomplete"

@router.get("")
def list_progress(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    rows = ProgressRepository(db).list_for(user_id)
    return {"success": True, "data": [progress_to_dict(r) for r in rows]}

@router.get("/{learning_path_id}")
def path_progress(
    learning_path_id: str,
    domain: Optional[str] = Query(None),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    repo = ProgressRepository(db)
    row = repo.get_for_path(user_id, learning_path_id)
    if row:
        return {"success": True, "data": progress_to_dict(row)}
    legacy = repo.legacy_tasks(user_id, domain)
    return {"success": True, "data": summarize_legacy(learning_path_id, legacy)}

@router.post("/update")
def update_progress(
    payload: ProgressUpdateReq,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    values = {
        "domain": payload.domain,
        "current_day": payload.current_day,
        "total_days": payload.total_days,
        "completed_tasks": {
            task_id: state.model_dump(by_alias=True) for task_id, state in payload.completed_tasks.items()
        },
        "overall_progress": payload.overall_progress,
        "state": _state_for(payload.overall_progress),
    }
    if payload.time_spent is not None:
        values["time_spent"] = payload.time_spent
    if payload.score is not None:
        values["score"] = payload.score
    row = ProgressRepository(db).upsert_path(user_id, payload.learning_path_id, values)
    logger.info("progress_updated", user_id=user_id, learning_path_id=payload.learning_path_id,
                overall=payload.overall_progress)
    return {"success": True, "data": progress_to_dict(row), "message": "Progress updated successfully"}

@router.post("/complete-task")
def complete_task(
    payload: CompleteTaskReq,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    repo = ProgressRepository(db)
    if payload.learning_path_id:
        row = repo.merge_task(
            user_id,
            payload.learning_path_id,
            payload.task_id,
            completed_entry(payload.time_spent),
            domain=payload.domain,
            day=payload.day,
        )
    else:
        row = repo.upsert_task(user_id, payload.task_id, {
            "domain": payload.domain,
            "day": payload.day,
            "task_index": payload.task_index,
            "state": "completed",
            "time_spent": payload.time_spent or None,
            "completed_at": utcnow(),
        })
    logger.info("task_completed", user_id=user_id, task_id=payload.task_id,
                learning_path_id=payload.learning_path_id)
    return {"success": True, "message": "Task marked as complete", "data": progress_to_dict(row)}
