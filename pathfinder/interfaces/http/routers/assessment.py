import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ....application.assessments import (
    assessment_analytics,
    fallback_analysis,
    format_history,
    log_generated,
    merge_analysis,
    record_result,
    score_attempt,
)
from ....application.content import AIServiceError, ContentGenerator
from ....infrastructure.db import get_db
from ....infrastructure.models import UserORM
from ....infrastructure.repositories import UserRepository
from ..authz import get_current_user
from ..dependencies import get_content_generator
from ..schemas import AnalyzeAssessmentReq, GenerateAssessmentReq

router = APIRouter(prefix="/api/assessment", tags=["assessment"])
logger = structlog.get_logger(__name__)

@router.post("/generate-assessment")
def generate_assessment(
    payload: GenerateAssessmentReq,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
    generator: ContentGenerator = Depends(get_content_generator),
):
    data = generator.generate_assessment(payload.skill_level, payload.domain)
    log_generated(user, data["assessment"]["id"], payload.domain, payload.skill_level)
    UserRepository(db).save(user)
    logger.info("assessment_generated", user_id=user.id, domain=payload.domain,
                questions=len(data["questions"]))
    return {"success": True, "message": "Assessment generated successfully", **data}

@router.post("/analyze-assessment")
def analyze_assessment(
    payload: AnalyzeAssessmentReq,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
    generator: ContentGenerator = Depends(get_content_generator),
):
    result = score_attempt(payload.questions, payload.answers, payload.time_spent)
    try:
        analysis = generator.analyze_assessment(result, payload.time_spent)
    except AIServiceError as exc:
        logger.warning("assessment_analysis_fallback", user_id=user.id, error=str(exc))
        analysis = fallback_analysis(result, payload.time_spent)
    merge_analysis(result, analysis)

    record_result(user, result, payload.domain, payload.assessment_id, difficulty=payload.difficulty)
    UserRepository(db).save(user)
    logger.info("assessment_recorded", user_id=user.id, domain=payload.domain,
                percentage=result["percentage"], passed=result["passed"])
    return {"success": True, "message": "Assessment analyzed successfully", **result}

@router.post("/daily-assessment")
def daily_assessment(
    user: UserORM = Depends(get_current_user),
    generator: ContentGenerator = Depends(get_content_generator),
):
    previous = [
        {"date": (h.get("completedAt") or "")[:10], "percentage": h.get("percentage", 0)}
        for h in (user.assessment_history or [])[-5:]
    ]
    data = generator.daily_assessment(previous)
    return {"success": True, "message": "Daily assessment generated", **data}

@router.get("/history")
def history(user: UserORM = Depends(get_current_user)):
    entries = user.assessment_history or []
    if not entries:
        return {"success": True, "history": [], "message": "No assessment history found"}
    return {"success": True, **format_history(entries)}

@router.get("/analytics")
def analytics(user: UserORM = Depends(get_current_user)):
    return {"success": True, "analytics": assessment_analytics(user.assessment_history or [])}
