import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ....application.analytics import build_insights, calculate_user_analytics, fallback_analytics
from ....application.content import ContentGenerator
from ....application.use_cases.delete_account import DeleteAccount
from ....infrastructure.db import get_db
from ....infrastructure.models import UserORM
from ....infrastructure.repositories import LearningPathRepository, ProgressRepository, UserRepository
from ..authz import get_current_user, get_current_user_id
from ..dependencies import get_content_generator
from ..schemas import ProfileUpdateReq
from ..serializers import user_to_dict

router = APIRouter(prefix="/api/users", tags=["users"])
logger = structlog.get_logger(__name__)

@router.put("/profile")
def update_profile(
    payload: ProfileUpdateReq,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    repo = UserRepository(db)
    if payload.email and payload.email.lower() != user.email:
        if repo.get_by_email(payload.email):
            raise HTTPException(status_code=400, detail="Email already in use")
        user.email = payload.email.lower()
    if payload.name:
        user.name = payload.name

    profile = dict(user.profile or {})
    for field in ("bio", "location", "skills", "experience", "goals"):
        value = getattr(payload, field)
        if value is not None:
            profile[field] = value
    if payload.preferences:
        current = profile.get("preferences") or {}
        profile["preferences"] = {
            "learningStyle": payload.preferences.learning_style or current.get("learningStyle", ""),
            "timeCommitment": payload.preferences.time_commitment or current.get("timeCommitment", ""),
        }
    user.profile = profile
    repo.save(user)
    logger.info("profile_updated", user_id=user.id)
    return {"success": True, "data": user_to_dict(user)}

@router.delete("/delete-account")
def delete_account(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    uc = DeleteAccount(
        users=UserRepository(db),
        owned=[ProgressRepository(db), LearningPathRepository(db)],
    )
    if not uc.execute(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("account_deleted", user_id=user_id)
    return {"success": True, "message": "Account deleted successfully"}

@router.get("/progress-analytics")
def progress_analytics(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    generator: ContentGenerator = Depends(get_content_generator),
):
    try:
        user = UserRepository(db).get_row(user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        paths = LearningPathRepository(db).list_for(user_id)
        records = ProgressRepository(db).list_for(user_id)
    except SQLAlchemyError as exc:
        logger.error("analytics_store_failed", user_id=user_id, error=str(exc))
        return {"success": True, **fallback_analytics()}

    analytics = calculate_user_analytics(user, paths, records)
    analytics["aiInsights"] = build_insights(generator, user, analytics, paths)
    return {"success": True, **analytics}
