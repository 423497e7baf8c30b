import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ....application.paths import complete_all, complete_module, normalize_modules, recompute_completion
from ....infrastructure.db import get_db
from ....infrastructure.models import LearningPathORM
from ....infrastructure.repositories import LearningPathRepository
from ..authz import get_current_user_id
from ..schemas import PathCreateReq, PathUpdateReq
from ..serializers import path_to_dict

router = APIRouter(prefix="/api/paths", tags=["paths"])
logger = structlog.get_logger(__name__)

def _owned(repo: LearningPathRepository, path_id: int, user_id: int, action: str) -> LearningPathORM:
    path = repo.get(path_id)
    if not path:
        raise HTTPException(status_code=404, detail="Learning path not found")
    if path.user_id != user_id:
        raise HTTPException(status_code=401, detail=f"Not authorized to {action} this learning path")
    return path

@router.get("")
def list_paths(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    paths = LearningPathRepository(db).list_for(user_id)
    return {"success": True, "data": [path_to_dict(p) for p in paths]}

@router.get("/completed")
def completed_paths(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    paths = LearningPathRepository(db).list_for(user_id, completed_only=True)
    return {"success": True, "data": [path_to_dict(p) for p in paths]}

@router.post("", status_code=status.HTTP_201_CREATED)
def create_path(
    payload: PathCreateReq,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    fields = payload.model_dump(exclude={"modules"})
    path = LearningPathORM(
        user_id=user_id,
        modules=normalize_modules([m.model_dump(by_alias=True) for m in payload.modules]),
        **fields,
    )
    recompute_completion(path)
    path = LearningPathRepository(db).add(path)
    logger.info("path_created", user_id=user_id, path_id=path.id, modules=len(path.modules))
    return {"success": True, "data": path_to_dict(path)}

@router.put("/{path_id}")
def update_path(
    path_id: int,
    payload: PathUpdateReq,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    repo = LearningPathRepository(db)
    path = _owned(repo, path_id, user_id, "update")
    changes = payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"modules"})
    for field, value in changes.items():
        setattr(path, field, value)
    if payload.modules is not None:
        path.modules = normalize_modules([m.model_dump(by_alias=True) for m in payload.modules])
    if payload.is_completed:
        complete_all(path)
    else:
        recompute_completion(path)
    repo.save(path)
    logger.info("path_updated", user_id=user_id, path_id=path.id, status=path.status)
    return {"success": True, "data": path_to_dict(path)}

@router.post("/{path_id}/modules/{index}/complete")
def complete_path_module(
    path_id: int,
    index: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    repo = LearningPathRepository(db)
    path = _owned(repo, path_id, user_id, "update")
    try:
        complete_module(path, index)
    except IndexError:
        raise HTTPException(status_code=404, detail="Module not found")
    repo.save(path)
    logger.info("module_completed", user_id=user_id, path_id=path.id, index=index, progress=path.progress)
    return {"success": True, "data": path_to_dict(path)}

@router.delete("/{path_id}")
def delete_path(
    path_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    repo = LearningPathRepository(db)
    path = _owned(repo, path_id, user_id, "delete")
    repo.remove(path)
    logger.info("path_deleted", user_id=user_id, path_id=path_id)
    return {"success": True, "message": "Learning path deleted successfully"}
