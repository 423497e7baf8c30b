"""Prompt-driven content generation with bounded retries and static fallbacks.

Every call that has a fallback (domain analysis, skill resources, daily plan,
assessments) returns usable content even when the text generator is down.
Calls without one raise :class:`AIServiceError`.
"""
import json
import re
import time
from typing import Any, Callable

import structlog

from . import prompts
from .assessments import ANALYSIS_KEYS
from .fallbacks import (
    fallback_assessment,
    fallback_daily_assessment,
    fallback_daily_plan,
    fallback_domain_analysis,
    fallback_skill_resources,
    get_domain_fallback_skills,
)
from ..infrastructure.metrics import ai_fallbacks_total, ai_requests_total

logger = structlog.get_logger(__name__)

LEVEL_ORDER = {"beginner": 1, "intermediate": 2, "advanced": 3}
INSIGHT_KEYS = ("strengths", "improvements", "recommendations", "nextGoals")

_TRAILING_COMMA = re.compile(r",\s*([\]}])")


class AIServiceError(Exception):
    """The text generator failed or produced unusable output."""


class ITextGenerator:
    def generate(self, prompt: str) -> str: ...


def extract_json(text: str) -> Any:
    """Parse the JSON object embedded in ``text``.

    Everything before the first ``{`` and after the last ``}`` is dropped and
    trailing commas are repaired. Raises ``ValueError`` when nothing parses.
    """
    if not text:
        raise ValueError("Empty response from text generator")
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise ValueError("No JSON object found in response")
    cleaned = _TRAILING_COMMA.sub(r"\1", text[start:end + 1])
    return json.loads(cleaned)


def _level_rank(skill: dict) -> int:
    return LEVEL_ORDER.get(str(skill.get("level", "")).lower(), len(LEVEL_ORDER) + 1)


def filter_skills_by_level(analysis: dict, level: str | None) -> dict:
    if not level:
        return analysis
    wanted = level.lower()
    skills = analysis.get("skills") or []
    matching = [s for s in skills if not s.get("level") or str(s["level"]).lower() == wanted]
    if matching:
        analysis["skills"] = matching
    else:
        for skill in skills:
            skill["recommended"] = str(skill.get("level", "")).lower() == wanted
    return analysis


class ContentGenerator:
    def __init__(
        self,
        client: ITextGenerator,
        max_retries: int = 2,
        base_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.sleep = sleep

    def _generate_json(self, kind: str, prompt: str, parse: Callable[[str], Any]) -> Any:
        last_error: Exception | None = None
        for attempt in range(self.max_retries + 1):
            if attempt:
                delay = attempt * self.base_delay
                logger.info("ai_retry", kind=kind, attempt=attempt, delay_s=delay)
                self.sleep(delay)
            try:
                result = parse(self.client.generate(prompt))
            except (AIServiceError, ValueError) as exc:
                last_error = exc
                ai_requests_total.labels(kind=kind, outcome="error").inc()
                logger.warning("ai_attempt_failed", kind=kind, attempt=attempt + 1, error=str(exc))
                continue
            ai_requests_total.labels(kind=kind, outcome="ok").inc()
            return result
        raise AIServiceError(
            f"Failed to generate {kind} after {self.max_retries} retries: {last_error}"
        ) from last_error

    def _fallback(self, kind: str, exc: Exception) -> None:
        ai_fallbacks_total.labels(kind=kind).inc()
        logger.warning("ai_fallback", kind=kind, error=str(exc))

    # Domain analysis

    def _normalize_analysis(self, domain: str, parsed: Any) -> dict:
        if not isinstance(parsed, dict):
            raise ValueError("Domain analysis is not an object")
        if not parsed.get("overview"):
            parsed["overview"] = f"Overview of {domain} development and its importance in the industry"
        if not parsed.get("progression"):
            parsed["progression"] = {"entry": {}, "intermediate": {}, "advanced": {}}
        if not parsed.get("industryDemand"):
            parsed["industryDemand"] = {"level": "medium"}
        skills = parsed.get("skills")
        if not isinstance(skills, list) or not skills:
            logger.info("ai_skills_missing", domain=domain)
            skills = get_domain_fallback_skills(domain)
        parsed["skills"] = sorted(
            (s for s in skills if isinstance(s, dict)), key=_level_rank
        ) or get_domain_fallback_skills(domain)
        return parsed

    def fetch_domain_analysis(self, domain: str) -> dict:
        """Analysis from the text generator only; raises AIServiceError."""
        return self._generate_json(
            "domain_analysis",
            prompts.domain_analysis_prompt(domain),
            lambda text: self._normalize_analysis(domain, extract_json(text)),
        )

    def analyze_domain(self, domain: str, level: str | None = None) -> dict:
        try:
            analysis = self.fetch_domain_analysis(domain)
        except AIServiceError as exc:
            self._fallback("domain_analysis", exc)
            analysis = fallback_domain_analysis(domain)
        return filter_skills_by_level(analysis, level)

    # Skill resources

    def skill_resources(self, skill: str, level: str) -> list[dict]:
        def parse(text: str) -> list[dict]:
            resources = extract_json(text).get("resources")
            if not isinstance(resources, list) or not resources:
                raise ValueError("Missing resources array")
            return resources

        try:
            return self._generate_json("skill_resources", prompts.skill_resources_prompt(skill, level), parse)
        except AIServiceError as exc:
            self._fallback("skill_resources", exc)
            return fallback_skill_resources(skill, level)

    # Daily plan

    def daily_plan(self, domain: str, skills: list[str], level: str, duration: int) -> dict:
        def parse(text: str) -> dict:
            plan = extract_json(text)
            days = plan.get("dailyTasks")
            if not isinstance(days, list):
                raise ValueError("Invalid response format: missing dailyTasks array")
            days = sorted(days, key=lambda d: d.get("day", 0) if isinstance(d, dict) else 0)
            if [d.get("day") for d in days] != list(range(1, duration + 1)):
                raise ValueError(f"Expected days 1..{duration}, got {len(days)} entries")
            plan["dailyTasks"] = days
            plan.setdefault("totalDuration", duration)
            plan.setdefault("level", level)
            plan.setdefault("domain", domain)
            plan.setdefault("skills", list(skills))
            return plan

        try:
            return self._generate_json(
                "daily_plan", prompts.daily_plan_prompt(domain, skills, level, duration), parse
            )
        except AIServiceError as exc:
            self._fallback("daily_plan", exc)
            return fallback_daily_plan(domain, skills, level, duration)

    # Calls without a fallback

    def generate_content(self, prompt: str) -> str:
        return self._generate_json("content", prompt, _require_text)

    def generate_insights(self, context: dict) -> dict:
        def parse(text: str) -> dict:
            insights = extract_json(text)
            missing = [k for k in INSIGHT_KEYS if not isinstance(insights.get(k), list)]
            if missing:
                raise ValueError(f"Insights missing {', '.join(missing)}")
            return {k: insights[k] for k in INSIGHT_KEYS}

        return self._generate_json("insights", prompts.insights_prompt(context), parse)

    def analyze_assessment(self, result: dict, time_spent: float) -> dict:
        def parse(text: str) -> dict:
            analysis = extract_json(text)
            if not isinstance(analysis.get("aiAnalysis"), dict):
                raise ValueError("Missing aiAnalysis object")
            return {k: analysis[k] for k in ANALYSIS_KEYS if k in analysis}

        return self._generate_json(
            "assessment_analysis", prompts.assessment_analysis_prompt(result, time_spent), parse
        )

    # Assessments

    def generate_assessment(self, skill_level: str, domain: str) -> dict:
        assessment_id = f"assessment-{int(time.time() * 1000)}"
        try:
            return self._generate_json(
                "assessment",
                prompts.assessment_prompt(skill_level, domain, assessment_id),
                _parse_assessment,
            )
        except AIServiceError as exc:
            self._fallback("assessment", exc)
            return fallback_assessment(domain, skill_level)

    def daily_assessment(self, previous_results: list[dict]) -> dict:
        try:
            return self._generate_json(
                "daily_assessment", prompts.daily_assessment_prompt(previous_results), _parse_assessment
            )
        except AIServiceError as exc:
            self._fallback("daily_assessment", exc)
            return fallback_daily_assessment()


def _require_text(text: str) -> str:
    if not text or not text.strip():
        raise ValueError("Empty response from text generator")
    return text.strip()


def _parse_assessment(text: str) -> dict:
    data = extract_json(text)
    questions = data.get("questions")
    if not isinstance(data.get("assessment"), dict) or not isinstance(questions, list) or not questions:
        raise ValueError("Assessment is missing its questions")
    for question in questions:
        options = question.get("options")
        if not isinstance(options, list) or not isinstance(question.get("correctAnswer"), int):
            raise ValueError("Malformed assessment question")
        if not 0 <= question["correctAnswer"] < len(options):
            raise ValueError("Correct answer index out of range")
        question.setdefault("points", 10)
    data["assessment"].setdefault("id", f"assessment-{int(time.time() * 1000)}")
    data["assessment"]["totalQuestions"] = len(questions)
    return data
