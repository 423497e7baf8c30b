"""Assessment grading, history and per-user assessment analytics."""
from datetime import datetime, timezone

from ..domain.scoring import PASSING_PERCENTAGE, grade_for, round_half_up, skill_level_for

HISTORY_LIMIT = 10
TREND_WINDOW = 5
TREND_BAND = 5
DIFFICULTIES = ("Easy", "Medium", "Hard")
# grading fields stay server-computed; only these come from the analysis
ANALYSIS_KEYS = ("aiAnalysis", "recommendations", "nextLevelReadiness")


def _answer_index(value) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def score_attempt(questions: list[dict], answers: list, time_spent: float) -> dict:
    """Grade answers by position against the questions' correct indices."""
    detailed = []
    correct_count = earned = total = 0
    for index, question in enumerate(questions):
        answer = _answer_index(answers[index]) if index < len(answers) else None
        max_points = question.get("points") or 0
        is_correct = answer is not None and answer == question.get("correctAnswer")
        points = max_points if is_correct else 0
        correct_count += is_correct
        earned += points
        total += max_points
        detailed.append({
            "questionId": question.get("id"),
            "question": question.get("question"),
            "userAnswer": answer,
            "correctAnswer": question.get("correctAnswer"),
            "isCorrect": is_correct,
            "explanation": question.get("explanation"),
            "points": points,
            "maxPoints": max_points,
            "difficulty": question.get("difficulty"),
        })

    percentage = round_half_up(earned / total * 100) if total else 0
    return {
        "score": earned,
        "totalScore": total,
        "percentage": percentage,
        "correctAnswers": correct_count,
        "totalQuestions": len(questions),
        "grade": grade_for(percentage),
        "timeSpent": round_half_up(time_spent or 0),
        "passed": percentage >= PASSING_PERCENTAGE,
        "detailedResults": detailed,
    }


def _performance_label(percentage: int) -> str:
    if percentage >= 80:
        return "Excellent"
    if percentage >= 70:
        return "Good"
    if percentage >= 60:
        return "Fair"
    return "Needs Improvement"


def fallback_analysis(result: dict, time_spent: float) -> dict:
    pct = result["percentage"]
    passed = pct >= PASSING_PERCENTAGE
    if time_spent < 20:
        pace = "Efficient"
    elif time_spent < 25:
        pace = "Good"
    else:
        pace = "Could be improved"

    if pct >= 80:
        recommendations = ["Advance to more complex topics", "Consider practical projects", "Share knowledge with others"]
    elif passed:
        recommendations = ["Review missed concepts", "Practice with similar problems", "Focus on weak areas"]
    else:
        recommendations = ["Start with fundamental concepts", "Take more practice quizzes", "Seek additional learning resources"]

    return {
        "aiAnalysis": {
            "overallPerformance": _performance_label(pct),
            "keyInsights": [
                f"You answered {result['correctAnswers']} out of {result['totalQuestions']} questions correctly ({pct}%).",
                "You demonstrated solid understanding of the core concepts."
                if passed else "Focus on strengthening fundamental concepts before advancing.",
                f"Time management: {pace} - completed in {time_spent} minutes.",
            ],
            "strengths": ["Good grasp of fundamental concepts", "Solid problem-solving approach"]
            if passed else ["Willingness to learn", "Taking assessment shows commitment"],
            "weaknesses": ["Minor gaps in advanced topics"]
            if passed else ["Core concepts need reinforcement", "More practice needed"],
            "learningPattern": "Shows consistent effort in learning and assessment completion",
            "timeManagement": "Efficient time usage" if time_spent < 25 else "Could benefit from improved time management",
        },
        "recommendations": recommendations,
        "nextLevelReadiness": {
            "ready": pct >= 80,
            "reasoning": "Strong performance indicates readiness for advanced topics"
            if pct >= 80 else "Focus on mastering current level before advancing",
            "prerequisiteAreas": [] if pct >= 80 else ["Core fundamentals", "Problem-solving skills"],
        },
    }


def merge_analysis(result: dict, analysis: dict) -> dict:
    result.update({k: analysis[k] for k in ANALYSIS_KEYS if k in analysis})
    return result


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0


def _generated_level(user, assessment_id: str | None) -> str | None:
    for logged in reversed(getattr(user, "assessments", None) or []):
        if assessment_id and logged.get("assessmentId") == assessment_id:
            return logged.get("skillLevel")
    return None


def record_result(user, result: dict, domain: str, assessment_id: str | None,
                  now: datetime | None = None, difficulty: str | None = None) -> dict:
    """Append a graded attempt to the user's history and refresh skills progress.

    The stored difficulty is the caller's, else the level the assessment was
    generated at.

    JSON columns are reassigned rather than mutated in place so the ORM sees
    the change.
    """
    now = now or datetime.now(timezone.utc)
    level = difficulty or _generated_level(user, assessment_id) or "intermediate"
    entry = {
        "assessmentId": assessment_id,
        "completedAt": now.isoformat(),
        "domain": domain,
        "difficulty": level.capitalize(),
        **{k: result.get(k) for k in (
            "score", "totalScore", "percentage", "grade", "timeSpent", "passed",
            "correctAnswers", "totalQuestions", "aiAnalysis", "recommendations", "detailedResults",
        )},
    }
    history = list(user.assessment_history or []) + [entry]
    progress = dict(user.skills_progress or {})
    previous = progress.get(domain) or {}
    progress[domain] = {
        "level": skill_level_for(result["percentage"]),
        "lastAssessment": result["percentage"],
        "assessmentsCompleted": previous.get("assessmentsCompleted", 0) + 1,
        "averageScore": _mean([h["percentage"] for h in history if h.get("domain") == domain]),
        "lastUpdated": now.isoformat(),
    }
    user.assessment_history = history
    user.skills_progress = progress
    return entry


def log_generated(user, assessment_id: str, domain: str, skill_level: str, now: datetime | None = None) -> None:
    now = now or datetime.now(timezone.utc)
    user.assessments = list(user.assessments or []) + [{
        "assessmentId": assessment_id,
        "generatedAt": now.isoformat(),
        "status": "generated",
        "domain": domain,
        "skillLevel": skill_level,
    }]


def format_history(history: list[dict]) -> dict:
    formatted = [
        {
            "date": (h.get("completedAt") or "")[:10],
            "score": h.get("score"),
            "percentage": h.get("percentage"),
            "totalQuestions": h.get("totalQuestions"),
            "correctAnswers": h.get("correctAnswers"),
            "timeSpent": h.get("timeSpent"),
            "difficulty": h.get("difficulty") or "Intermediate",
            "subject": h.get("domain") or "General Skills",
            "grade": h.get("grade"),
            "passed": h.get("passed"),
        }
        for h in history
    ]
    return {
        "history": formatted[-HISTORY_LIMIT:],
        "totalAssessments": len(history),
        "averageScore": _mean([h.get("percentage", 0) for h in history]),
    }


def performance_areas(history: list[dict]) -> tuple[list[str], list[str]]:
    outcomes = {d: [] for d in DIFFICULTIES}
    for attempt in history:
        for detail in attempt.get("detailedResults") or []:
            if detail.get("difficulty") in outcomes:
                outcomes[detail["difficulty"]].append(1 if detail.get("isCorrect") else 0)

    strong, weak = [], []
    for difficulty, results in outcomes.items():
        if not results:
            continue
        ratio = _mean(results)
        if ratio >= 0.8:
            strong.append(f"{difficulty} level questions")
        elif ratio < 0.6:
            weak.append(f"{difficulty} level concepts")
    return strong, weak


def improvement_trend(history: list[dict]) -> str:
    overall = _mean([h.get("percentage", 0) for h in history])
    recent = _mean([h.get("percentage", 0) for h in history[-TREND_WINDOW:]])
    if len(history) > TREND_WINDOW:
        previous = _mean([h.get("percentage", 0) for h in history[-2 * TREND_WINDOW:-TREND_WINDOW]])
    else:
        previous = overall
    if recent > previous + TREND_BAND:
        return "improving"
    if recent < previous - TREND_BAND:
        return "declining"
    return "stable"


def recommended_focus(weak_areas: list[str], trend: str) -> str:
    if not weak_areas:
        return "Great job! Continue with advanced topics and practical projects."
    advice = {
        "improving": "Keep up the great progress!",
        "declining": "Consider reviewing fundamentals and taking more practice assessments.",
    }.get(trend, "Steady progress - focus on consistent practice.")
    return f"Focus on {weak_areas[0]}. {advice}"


def assessment_analytics(history: list[dict]) -> dict:
    if not history:
        return {
            "totalAssessments": 0,
            "averageScore": 0,
            "improvementTrend": "stable",
            "strongAreas": [],
            "weakAreas": [],
            "recommendedFocus": "Take your first assessment to see personalized analytics",
        }
    trend = improvement_trend(history)
    strong, weak = performance_areas(history)
    return {
        "totalAssessments": len(history),
        "averageScore": round_half_up(_mean([h.get("percentage", 0) for h in history])),
        "improvementTrend": trend,
        "strongAreas": strong,
        "weakAreas": weak,
        "recentPerformance": round_half_up(_mean([h.get("percentage", 0) for h in history[-TREND_WINDOW:]])),
        "passRate": round_half_up(len([h for h in history if h.get("passed")]) / len(history) * 100),
        "recommendedFocus": recommended_focus(weak, trend),
    }
