import json

import pytest

from pathfinder.application.assessments import score_attempt
from pathfinder.application.content import (
    AIServiceError,
    ContentGenerator,
    extract_json,
    filter_skills_by_level,
)
from pathfinder.application.fallbacks import (
    generate_fallback_daily_tasks,
    get_domain_fallback_skills,
)

from conftest import FakeTextGenerator


def _generator(replies, sleeps=None):
    sleeps = sleeps if sleeps is not None else []
    return ContentGenerator(FakeTextGenerator(replies), max_retries=2, base_delay=2.0, sleep=sleeps.append)


def _plan(days):
    return json.dumps({"dailyTasks": [{"day": d, "focus": f"Day {d}", "tasks": []} for d in days]})


# extract_json

def test_extract_json_strips_wrapper_text():
    text = 'Sure! Here you go:\n```json\n{"a": 1, "b": [1, 2]}\n```\nEnjoy.'
    assert extract_json(text) == {"a": 1, "b": [1, 2]}

def test_extract_json_repairs_trailing_commas():
    assert extract_json('{"a": [1, 2,], "b": {"c": 3,},}') == {"a": [1, 2], "b": {"c": 3}}

@pytest.mark.parametrize("text", ["", "no json here", "} backwards {", '{"a": '])
def test_extract_json_rejects_garbage(text):
    with pytest.raises(ValueError):
        extract_json(text)


# retry policy

def test_retries_with_growing_backoff_then_succeeds():
    sleeps = []
    gen = _generator([AIServiceError("quota"), "not json", '{"resources": [{"name": "Docs"}]}'], sleeps)
    assert gen.skill_resources("Python", "beginner") == [{"name": "Docs"}]
    assert sleeps == [2.0, 4.0]

def test_generate_content_raises_after_exhaustion():
    sleeps = []
    gen = _generator([], sleeps)
    with pytest.raises(AIServiceError):
        gen.generate_content("hello")
    assert len(gen.client.prompts) == 3
    assert sleeps == [2.0, 4.0]

def test_generate_content_returns_text():
    assert _generator(["  a poem  "]).generate_content("write") == "a poem"


# domain analysis

def test_frontend_fallback_when_generator_keeps_failing():
    gen = _generator([AIServiceError("down"), AIServiceError("down")])
    analysis = gen.analyze_domain("frontend", "beginner")
    names = [s["name"] for s in analysis["skills"]]
    assert "HTML/CSS" in names
    assert "JavaScript" in names
    assert all(s["level"] == "beginner" for s in analysis["skills"])
    assert analysis["industryDemand"] == {"level": "medium"}

def test_analysis_defaults_are_filled_and_skills_sorted():
    reply = json.dumps({
        "skills": [
            {"name": "Kubernetes", "level": "advanced"},
            {"name": "Linux", "level": "beginner"},
            {"name": "Terraform", "level": "intermediate"},
        ]
    })
    analysis = _generator([reply]).analyze_domain("DevOps")
    assert [s["name"] for s in analysis["skills"]] == ["Linux", "Terraform", "Kubernetes"]
    assert analysis["industryDemand"] == {"level": "medium"}
    assert analysis["overview"]
    assert set(analysis["progression"]) == {"entry", "intermediate", "advanced"}

def test_analysis_without_skills_uses_domain_table():
    analysis = _generator(['{"overview": "x", "skills": []}']).analyze_domain("backend")
    assert analysis["overview"] == "x"
    assert analysis["skills"][0]["name"] == "Server-side Programming"

def test_level_filter_flags_recommended_when_nothing_matches():
    analysis = {"skills": [{"name": "A", "level": "beginner"}, {"name": "B", "level": "advanced"}]}
    result = filter_skills_by_level(analysis, "expert")
    assert len(result["skills"]) == 2
    assert all(s["recommended"] is False for s in result["skills"])

def test_level_filter_keeps_unlevelled_skills():
    analysis = {"skills": [{"name": "A", "level": "beginner"}, {"name": "B"}, {"name": "C", "level": "advanced"}]}
    assert [s["name"] for s in filter_skills_by_level(analysis, "Beginner")["skills"]] == ["A", "B"]


# fallback tables

@pytest.mark.parametrize("domain", ["frontend", "Cybersecurity", "quantum basket weaving", "", None, "  "])
def test_domain_fallback_skills_never_empty(domain):
    skills = get_domain_fallback_skills(domain)
    assert skills
    for skill in skills:
        assert {"name", "description", "level", "resources"} <= set(skill)

def test_domain_fallback_skills_are_copies():
    get_domain_fallback_skills("frontend")[0]["name"] = "mutated"
    assert get_domain_fallback_skills("frontend")[0]["name"] == "HTML/CSS"

def test_skill_resources_fallback_matches_table():
    resources = _generator([]).skill_resources("JavaScript", "beginner")
    assert resources[0]["url"] == "https://javascript.info/"

def test_skill_resources_fallback_generic():
    resources = _generator([]).skill_resources("Haskell", "advanced")
    assert len(resources) == 2
    assert all(r["difficulty"] == "advanced" for r in resources)


# daily plan

def test_daily_plan_fallback_has_every_day_in_order():
    plan = _generator([]).daily_plan("web", ["a", "b"], "beginner", 10)
    assert [d["day"] for d in plan["dailyTasks"]] == list(range(1, 11))
    assert plan["totalDuration"] == 10
    focuses = [d["focus"] for d in plan["dailyTasks"]]
    assert focuses[0].startswith("a") and focuses[-1].startswith("b")

def test_daily_plan_with_wrong_day_count_falls_back():
    gen = _generator([_plan(range(1, 8))] * 3)
    plan = gen.daily_plan("web", ["a", "b"], "beginner", 10)
    assert len(plan["dailyTasks"]) == 10
    assert plan["dailyTasks"][0]["focus"] == "a - Week 1"

def test_daily_plan_from_generator_is_sorted_and_completed():
    plan = _generator([_plan([2, 1, 3])]).daily_plan("web", ["a"], "beginner", 3)
    assert [d["day"] for d in plan["dailyTasks"]] == [1, 2, 3]
    assert plan["domain"] == "web"
    assert plan["skills"] == ["a"]

def test_fallback_daily_tasks_more_skills_than_days():
    days = generate_fallback_daily_tasks("web", ["a", "b", "c", "d"], "beginner", 2)
    assert [d["day"] for d in days] == [1, 2]


# insights and assessments

def test_insights_require_all_keys():
    gen = _generator(['{"strengths": ["x"]}'] * 3)
    with pytest.raises(AIServiceError):
        gen.generate_insights({
            "name": "Ada", "experience": "beginner", "skills": [], "goals": [],
            "totalStudyTime": 0, "coursesCompleted": 0, "averageScore": 0, "learningPaths": [],
        })

def test_assessment_analysis_keeps_only_analysis_fields():
    reply = json.dumps({"aiAnalysis": {"overallPerformance": "Good"}, "percentage": "high", "grade": "A+"})
    result = score_attempt([{"id": 1, "correctAnswer": 0, "points": 10, "difficulty": "Easy"}], [1], 60)
    analysis = _generator([reply]).analyze_assessment(result, 60)
    assert analysis == {"aiAnalysis": {"overallPerformance": "Good"}}

def test_generate_assessment_fallback_bank():
    data = _generator([]).generate_assessment("beginner", "python")
    assert data["assessment"]["title"] == "python Fundamentals Assessment"
    assert data["assessment"]["totalQuestions"] == len(data["questions"]) == 10
    assert data["timeLimit"] == 1800

def test_generate_assessment_rejects_bad_answer_index():
    bad = json.dumps({
        "assessment": {"id": "x"},
        "questions": [{"id": 1, "question": "?", "options": ["a", "b"], "correctAnswer": 5}],
    })
    data = _generator([bad] * 3).generate_assessment("beginner", "python")
    assert len(data["questions"]) == 10

def test_daily_assessment_fallback():
    data = _generator([]).daily_assessment([{"date": "2026-10-01", "percentage": 40}])
    assert data["timeLimit"] == 600
    assert len(data["questions"]) == 5
