"""Progress analytics for the dashboard.

Weekly hours are an approximate distribution for display: each bucket gets
``totalStudyTime / 7`` plus up to two hours of jitter from ``rng``.
"""
import random
from collections import Counter
from datetime import datetime, timedelta, timezone

import structlog

from .content import AIServiceError, ContentGenerator
from ..domain.scoring import rank_for, rank_score, round_half_up

logger = structlog.get_logger(__name__)

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
DEFAULT_TASK_MINUTES = 150
PLACEHOLDER_SKILLS = (
    {"name": "Learning Foundation", "progress": 45},
    {"name": "Problem Solving", "progress": 35},
    {"name": "Critical Thinking", "progress": 30},
)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _profile(user) -> dict:
    return user.profile or {}


def learning_streak(records, now: datetime) -> int:
    stamps = [_as_utc(r.updated_at) for r in records if r.updated_at]
    if not stamps:
        return 0
    days = (now - max(stamps)).days
    return max(0, 7 - days)


def recent_achievements(completed_records: int, courses_completed: int, now: datetime) -> list[dict]:
    def day(offset: int) -> str:
        return (now - timedelta(days=offset)).date().isoformat()

    achievements = []
    if courses_completed >= 1:
        achievements.append({"title": "First Course Completed", "date": day(5), "icon": "🎓"})
    if completed_records >= 10:
        achievements.append({"title": "Learning Streak", "date": day(3), "icon": "🔥"})
    if completed_records >= 5:
        achievements.append({"title": "Skill Builder", "date": day(7), "icon": "⚡"})
    achievements.append({"title": "Progress Tracker", "date": day(0), "icon": "📈"})
    return achievements[:4]


def top_skills(skills: list[str]) -> list[dict]:
    counts = Counter(s for s in skills if s and s.strip())
    if not counts:
        return [dict(s) for s in PLACEHOLDER_SKILLS]
    highest = max(counts.values())
    return [
        {"name": name, "progress": max(round_half_up(count / highest * 100), 25), "category": "Learning"}
        for name, count in counts.most_common(5)
    ]


def calculate_user_analytics(user, paths, records, now: datetime | None = None, rng=random) -> dict:
    now = now or datetime.now(timezone.utc)
    completed = [r for r in records if r.state == "completed"]
    study_hours = sum(r.time_spent or DEFAULT_TASK_MINUTES for r in completed) / 60

    completed_paths = [p for p in paths if p.is_completed]
    courses_completed = max(
        len(completed_paths),
        len([r for r in records if (r.overall_progress or 0) >= 100]),
    )

    profile_skills = list(_profile(user).get("skills") or [])
    path_skills = [tag for p in completed_paths for tag in (p.tags or [])]
    skills_learned = len(set(profile_skills) | set(path_skills))

    if records:
        average_score = round_half_up(sum(r.score or 0 for r in records) / len(records))
    else:
        total_tasks = sum(len(p.modules or []) or 1 for p in paths)
        average_score = round_half_up(len(completed) / total_tasks * 100) if total_tasks else 0

    week_ago = now - timedelta(days=7)
    active = any(r.updated_at and _as_utc(r.updated_at) >= week_ago for r in records)
    weekly = []
    for name in WEEKDAYS:
        hours = 0
        if active:
            hours = round_half_up((study_hours / 7 + rng.random() * 2) * 10) / 10
        weekly.append({"day": name, "hours": hours})

    return {
        "totalStudyTime": round_half_up(study_hours * 10) / 10,
        "coursesCompleted": courses_completed,
        "skillsLearned": skills_learned,
        "averageScore": average_score,
        "weeklyProgress": weekly,
        "topSkills": top_skills(profile_skills + path_skills),
        "recentAchievements": recent_achievements(len(completed), courses_completed, now),
        "completionRate": round_half_up(courses_completed / max(len(paths), 1) * 100),
        "learningStreak": learning_streak(records, now),
        "rank": rank_for(rank_score(courses_completed, skills_learned, study_hours)),
    }


def generate_fallback_insights(analytics: dict) -> dict:
    strengths, improvements, next_goals = [], [], []

    if analytics["totalStudyTime"] > 20:
        strengths.append("Excellent dedication with significant study time invested")

    if analytics["averageScore"] >= 80:
        strengths.append("Strong performance with high completion rates")
    elif analytics["averageScore"] >= 60:
        improvements.append("Focus on completing more tasks to improve your success rate")
    else:
        improvements.append("Consider revisiting fundamentals to strengthen your foundation")

    if analytics["coursesCompleted"] >= 3:
        strengths.append("Great progress with multiple completed learning paths")
    else:
        next_goals.append("Complete your current learning path to build momentum")

    recommendations = [
        "Continue your consistent learning schedule",
        "Practice hands-on projects to reinforce concepts",
        "Connect with the learning community for support",
    ]
    next_goals += [
        "Set a target to complete one new course this month",
        "Explore advanced topics in your area of interest",
    ]
    return {
        "strengths": strengths,
        "improvements": improvements,
        "recommendations": recommendations,
        "nextGoals": next_goals,
    }


def insights_context(user, analytics: dict, paths) -> dict:
    profile = _profile(user)
    return {
        "name": user.name,
        "experience": profile.get("experience") or "beginner",
        "skills": list(profile.get("skills") or []),
        "goals": list(profile.get("goals") or []),
        "totalStudyTime": analytics["totalStudyTime"],
        "coursesCompleted": analytics["coursesCompleted"],
        "averageScore": analytics["averageScore"],
        "learningPaths": [
            {
                "title": p.title,
                "difficulty": p.difficulty,
                "isCompleted": bool(p.is_completed),
                "progress": p.progress or 0,
            }
            for p in paths
        ],
    }


def build_insights(generator: ContentGenerator | None, user, analytics: dict, paths) -> dict:
    if generator is None:
        return generate_fallback_insights(analytics)
    try:
        return generator.generate_insights(insights_context(user, analytics, paths))
    except AIServiceError as exc:
        logger.warning("insights_fallback", user_id=user.id, error=str(exc))
        return generate_fallback_insights(analytics)


def fallback_analytics(now: datetime | None = None) -> dict:
    """Static payload for a brand-new user, served when the store is unreachable."""
    today = (now or datetime.now(timezone.utc)).date().isoformat()
    return {
        "totalStudyTime": 0,
        "coursesCompleted": 0,
        "skillsLearned": 0,
        "averageScore": 0,
        "weeklyProgress": [{"day": name, "hours": 0} for name in WEEKDAYS],
        "topSkills": [
            {"name": "Getting Started", "progress": 0},
            {"name": "Learning Foundation", "progress": 0},
            {"name": "Goal Setting", "progress": 0},
        ],
        "recentAchievements": [
            {"title": "Welcome to Learning!", "date": today, "icon": "🎯"},
            {"title": "Profile Created", "date": today, "icon": "👤"},
        ],
        "completionRate": 0,
        "learningStreak": 0,
        "rank": "Beginner",
        "aiInsights": {
            "strengths": [
                "You've taken the first step by joining our learning platform",
                "Your commitment to self-improvement shows great potential",
                "Ready to begin an exciting learning journey",
            ],
            "improvements": [
                "Start by completing your first learning path",
                "Set clear learning goals to track your progress",
                "Establish a consistent daily learning routine",
            ],
            "recommendations": [
                "Explore our domain selection to find your interests",
                "Begin with beginner-friendly courses to build confidence",
                "Join our learning community for support and motivation",
            ],
            "nextGoals": [
                "Complete your first course module",
                "Set up a regular study schedule",
                "Connect with other learners in your area of interest",
            ],
        },
    }
