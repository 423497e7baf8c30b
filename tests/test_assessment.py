import json
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from pathfinder.application.assessments import (
    assessment_analytics,
    fallback_analysis,
    format_history,
    improvement_trend,
    performance_areas,
    record_result,
    score_attempt,
)
from pathfinder.domain.scoring import grade_for

NOW = datetime(2026, 10, 18, tzinfo=timezone.utc)
QUESTIONS = [
    {"id": 1, "question": "q1", "correctAnswer": 1, "points": 10, "difficulty": "Easy"},
    {"id": 2, "question": "q2", "correctAnswer": 0, "points": 10, "difficulty": "Medium"},
    {"id": 3, "question": "q3", "correctAnswer": 2, "points": 20, "difficulty": "Hard"},
]


@pytest.mark.parametrize("percentage,grade", [
    (100, "A+"), (90, "A+"), (89, "A"), (85, "A"), (80, "B+"), (75, "B"),
    (70, "C+"), (65, "C"), (60, "D+"), (55, "D"), (54, "F"), (0, "F"),
])
def test_grade_boundaries(percentage, grade):
    assert grade_for(percentage) == grade

def test_score_attempt():
    result = score_attempt(QUESTIONS, [1, "0", 3], 12.6)
    assert result["score"] == 20
    assert result["totalScore"] == 40
    assert result["percentage"] == 50
    assert result["correctAnswers"] == 2
    assert result["totalQuestions"] == 3
    assert result["grade"] == "F"
    assert result["passed"] is False
    assert result["timeSpent"] == 13
    assert [d["isCorrect"] for d in result["detailedResults"]] == [True, True, False]
    assert result["detailedResults"][1]["userAnswer"] == 0
    assert result["detailedResults"][2]["maxPoints"] == 20

def test_score_attempt_missing_and_invalid_answers():
    result = score_attempt(QUESTIONS, ["b"], 0)
    assert result["correctAnswers"] == 0
    assert [d["userAnswer"] for d in result["detailedResults"]] == [None, None, None]

def test_score_attempt_with_zero_points():
    questions = [{"id": 1, "question": "q", "correctAnswer": 0, "points": 0}]
    result = score_attempt(questions, [0], 5)
    assert result["percentage"] == 0
    assert result["correctAnswers"] == 1

def test_fallback_analysis_for_strong_attempt():
    analysis = fallback_analysis({"percentage": 85, "correctAnswers": 9, "totalQuestions": 10}, 15)
    assert analysis["aiAnalysis"]["overallPerformance"] == "Excellent"
    assert analysis["nextLevelReadiness"]["ready"] is True
    assert analysis["recommendations"][0] == "Advance to more complex topics"
    assert "Efficient" in analysis["aiAnalysis"]["keyInsights"][2]

def test_fallback_analysis_for_failed_attempt():
    analysis = fallback_analysis({"percentage": 40, "correctAnswers": 4, "totalQuestions": 10}, 30)
    assert analysis["aiAnalysis"]["overallPerformance"] == "Needs Improvement"
    assert analysis["nextLevelReadiness"]["prerequisiteAreas"] == ["Core fundamentals", "Problem-solving skills"]
    assert analysis["aiAnalysis"]["timeManagement"] == "Could benefit from improved time management"

def test_record_result_updates_skills_progress():
    user = SimpleNamespace(assessment_history=None, skills_progress=None)
    record_result(user, {"percentage": 60, "detailedResults": []}, "python", "a-1", now=NOW)
    record_result(user, {"percentage": 90, "detailedResults": []}, "python", "a-2", now=NOW)
    record_result(user, {"percentage": 10, "detailedResults": []}, "go", "a-3", now=NOW)
    assert [h["assessmentId"] for h in user.assessment_history] == ["a-1", "a-2", "a-3"]
    python = user.skills_progress["python"]
    assert python["level"] == "Advanced"
    assert python["lastAssessment"] == 90
    assert python["assessmentsCompleted"] == 2
    assert python["averageScore"] == 75
    assert user.skills_progress["go"]["level"] == "Beginner"

def test_record_result_stores_difficulty():
    user = SimpleNamespace(
        assessment_history=None, skills_progress=None,
        assessments=[{"assessmentId": "a-1", "skillLevel": "advanced"}],
    )
    assert record_result(user, {"percentage": 80}, "python", "a-1", now=NOW)["difficulty"] == "Advanced"
    assert record_result(user, {"percentage": 80}, "python", "a-1", now=NOW, difficulty="beginner")["difficulty"] == "Beginner"
    assert record_result(user, {"percentage": 80}, "python", "a-9", now=NOW)["difficulty"] == "Intermediate"
    assert [h["difficulty"] for h in format_history(user.assessment_history)["history"]] == [
        "Advanced", "Beginner", "Intermediate",
    ]

def test_format_history_keeps_last_ten():
    history = [{"percentage": p, "completedAt": NOW.isoformat(), "domain": "python"} for p in range(12)]
    formatted = format_history(history)
    assert len(formatted["history"]) == 10
    assert formatted["history"][0]["percentage"] == 2
    assert formatted["history"][0]["date"] == "2026-10-18"
    assert formatted["history"][0]["subject"] == "python"
    assert formatted["totalAssessments"] == 12
    assert formatted["averageScore"] == 5.5

@pytest.mark.parametrize("scores,trend", [
    ([50, 50, 50, 50, 50, 80, 80, 80, 80, 80], "improving"),
    ([80, 80, 80, 80, 80, 50, 50, 50, 50, 50], "declining"),
    ([70, 72, 68, 71, 69, 70], "stable"),
    ([60], "stable"),
])
def test_improvement_trend(scores, trend):
    assert improvement_trend([{"percentage": s} for s in scores]) == trend

def test_performance_areas():
    history = [{"detailedResults": [
        {"difficulty": "Easy", "isCorrect": True},
        {"difficulty": "Easy", "isCorrect": True},
        {"difficulty": "Hard", "isCorrect": False},
        {"difficulty": "Hard", "isCorrect": True},
    ]}]
    assert performance_areas(history) == (["Easy level questions"], ["Hard level concepts"])

def test_assessment_analytics_empty():
    analytics = assessment_analytics([])
    assert analytics["totalAssessments"] == 0
    assert analytics["recommendedFocus"] == "Take your first assessment to see personalized analytics"

def test_assessment_analytics():
    history = [
        {"percentage": 50, "passed": False, "detailedResults": [{"difficulty": "Medium", "isCorrect": False}]},
        {"percentage": 85, "passed": True, "detailedResults": [{"difficulty": "Medium", "isCorrect": True}]},
    ]
    analytics = assessment_analytics(history)
    assert analytics["averageScore"] == 68
    assert analytics["passRate"] == 50
    assert analytics["weakAreas"] == ["Medium level concepts"]
    assert analytics["recommendedFocus"].startswith("Focus on Medium level concepts.")


# routes

def test_generate_assessment_falls_back(client, auth):
    headers, _ = auth
    response = client.post(
        "/api/assessment/generate-assessment",
        json={"skillLevel": "beginner", "domain": "python"},
        headers=headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["assessment"]["title"] == "python Fundamentals Assessment"
    assert len(body["questions"]) == 10
    assert body["timeLimit"] == 1800

def test_generate_assessment_from_ai(client, auth, text_generator):
    headers, _ = auth
    text_generator.replies = [json.dumps({
        "assessment": {"id": "assessment-1", "title": "Python"},
        "questions": [{"id": 1, "question": "?", "options": ["a", "b"], "correctAnswer": 1}],
        "timeLimit": 300,
    })]
    body = client.post("/api/assessment/generate-assessment", json={"domain": "python"}, headers=headers).json()
    assert body["assessment"]["totalQuestions"] == 1
    assert body["questions"][0]["points"] == 10

def test_analyze_assessment_records_history(client, auth):
    headers, _ = auth
    response = client.post(
        "/api/assessment/analyze-assessment",
        json={"assessmentId": "a-1", "questions": QUESTIONS, "answers": [1, 0, 2], "timeSpent": 10, "domain": "python"},
        headers=headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["percentage"] == 100
    assert body["grade"] == "A+"
    assert body["passed"] is True
    assert body["aiAnalysis"]["overallPerformance"] == "Excellent"

    history = client.get("/api/assessment/history", headers=headers).json()
    assert history["totalAssessments"] == 1
    assert history["history"][0]["subject"] == "python"

    analytics = client.get("/api/assessment/analytics", headers=headers).json()["analytics"]
    assert analytics["totalAssessments"] == 1
    assert analytics["strongAreas"] == ["Easy level questions", "Medium level questions", "Hard level questions"]

def test_analyze_assessment_ignores_grading_from_ai(client, auth, text_generator):
    headers, _ = auth
    text_generator.replies = [json.dumps({
        "aiAnalysis": {"overallPerformance": "Outstanding"},
        "recommendations": [{"type": "review"}],
        "percentage": "high",
        "passed": True,
        "grade": "A+",
        "score": 999,
    })]
    response = client.post(
        "/api/assessment/analyze-assessment",
        json={"questions": QUESTIONS, "answers": [0, 1, 0], "domain": "python"},
        headers=headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["aiAnalysis"]["overallPerformance"] == "Outstanding"
    assert body["recommendations"] == [{"type": "review"}]
    assert (body["percentage"], body["passed"], body["grade"], body["score"]) == (0, False, "F", 0)

    entry = client.get("/api/assessment/history", headers=headers).json()["history"][0]
    assert entry["percentage"] == 0
    assert entry["passed"] is False

def test_history_reports_generated_difficulty(client, auth):
    headers, _ = auth
    assessment = client.post(
        "/api/assessment/generate-assessment",
        json={"skillLevel": "advanced", "domain": "python"},
        headers=headers,
    ).json()["assessment"]
    client.post(
        "/api/assessment/analyze-assessment",
        json={"assessmentId": assessment["id"], "questions": QUESTIONS, "answers": [1, 0, 2], "domain": "python"},
        headers=headers,
    )
    entry = client.get("/api/assessment/history", headers=headers).json()["history"][0]
    assert entry["difficulty"] == "Advanced"

def test_analyze_assessment_requires_questions(client, auth):
    headers, _ = auth
    response = client.post("/api/assessment/analyze-assessment", json={"questions": [], "answers": []}, headers=headers)
    assert response.status_code == 400

def test_empty_history(client, auth):
    headers, _ = auth
    body = client.get("/api/assessment/history", headers=headers).json()
    assert body == {"success": True, "history": [], "message": "No assessment history found"}

def test_daily_assessment_uses_recent_results(client, auth, text_generator):
    headers, _ = auth
    client.post(
        "/api/assessment/analyze-assessment",
        json={"questions": QUESTIONS, "answers": [1, 1, 1]},
        headers=headers,
    )
    body = client.post("/api/assessment/daily-assessment", headers=headers).json()
    assert len(body["questions"]) == 5
    assert body["timeLimit"] == 600
    assert "Score: 25%" in text_generator.prompts[-1]
