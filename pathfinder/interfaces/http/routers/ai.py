from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ....application.content import AIServiceError, ContentGenerator, filter_skills_by_level
from ....application.fallbacks import fallback_domain_analysis
from ....application.paths import modules_from_plan, recompute_completion
from ....infrastructure.cache import analysis_key, get_cache, set_cache
from ....infrastructure.db import get_db
from ....infrastructure.metrics import cache_hits_total, cache_misses_total
from ....infrastructure.models import LearningPathORM
from ....infrastructure.repositories import LearningPathRepository
from ..authz import get_current_user_id
from ..dependencies import get_content_generator
from ..schemas import AnalyzeDomainReq, DailyTasksReq, FeedbackReq, SkillResourcesReq
from ..serializers import path_to_dict

router = APIRouter(prefix="/api/ai", tags=["ai"])
logger = structlog.get_logger(__name__)

@router.post("/analyze-domain")
def analyze_domain(
    payload: AnalyzeDomainReq,
    user_id: int = Depends(get_current_user_id),
    generator: ContentGenerator = Depends(get_content_generator),
):
    key = analysis_key(payload.domain)
    analysis = get_cache(key)
    if analysis:
        cache_hits_total.inc()
    else:
        cache_misses_total.inc()
        try:
            analysis = generator.fetch_domain_analysis(payload.domain)
            set_cache(key, analysis)
        except AIServiceError as exc:
            logger.warning("domain_analysis_fallback", domain=payload.domain, error=str(exc))
            analysis = fallback_domain_analysis(payload.domain)
    analysis = filter_skills_by_level(analysis, payload.level)
    logger.info("domain_analyzed", domain=payload.domain, level=payload.level,
                skills=len(analysis["skills"]))
    return {"success": True, "data": {"analysis": analysis}}

@router.post("/skill-resources")
def skill_resources(
    payload: SkillResourcesReq,
    user_id: int = Depends(get_current_user_id),
    generator: ContentGenerator = Depends(get_content_generator),
):
    resources = generator.skill_resources(payload.skill, payload.level)
    return {"success": True, "data": resources}

@router.post("/generate-daily-tasks")
def generate_daily_tasks(
    payload: DailyTasksReq,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    generator: ContentGenerator = Depends(get_content_generator),
):
    plan = generator.daily_plan(payload.domain, payload.skills, payload.level, payload.duration)
    body = {"success": True, "data": plan}
    if payload.save_path:
        path = LearningPathORM(
            user_id=user_id,
            title=f"{payload.domain} {payload.duration}-day plan",
            description=f"{payload.level} learning plan covering {', '.join(payload.skills)}",
            difficulty=payload.level.lower() if payload.level.lower() in ("beginner", "intermediate", "advanced") else "beginner",
            domain=payload.domain,
            level=payload.level,
            skills=list(payload.skills),
            tags=list(payload.skills),
            modules=modules_from_plan(plan),
            total_days=payload.duration,
            is_ai_generated=True,
        )
        recompute_completion(path)
        path = LearningPathRepository(db).add(path)
        logger.info("plan_saved", user_id=user_id, path_id=path.id, days=payload.duration)
        body["learningPath"] = path_to_dict(path)
    return body

@router.post("/feedback")
def submit_feedback(
    payload: FeedbackReq,
    user_id: int = Depends(get_current_user_id),
):
    now = datetime.now(timezone.utc)
    fb = payload.feedback
    logger.info(
        "feedback_received",
        user_id=user_id,
        rating=fb.rating,
        difficulty=fb.difficulty,
        most_helpful=fb.most_helpful,
        improvements=fb.improvements,
        would_recommend=fb.would_recommend,
        comments=fb.additional_comments,
        domain=fb.domain,
        level=fb.level,
        skills=fb.skills,
        completed_days=fb.completed_days,
        total_tasks=fb.total_tasks,
    )
    return {
        "success": True,
        "message": "Feedback submitted successfully",
        "data": {
            "feedbackId": f"feedback_{int(now.timestamp() * 1000)}_{user_id}",
            "submittedAt": now.isoformat(),
        },
    }
