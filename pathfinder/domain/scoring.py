"""Pure scoring rules shared by certificates, analytics and assessments."""
import math

RANKS = (
    (50, "Expert"),
    (25, "Advanced"),
    (10, "Intermediate"),
    (5, "Novice"),
)

GRADES = (
    (90, "A+"),
    (85, "A"),
    (80, "B+"),
    (75, "B"),
    (70, "C+"),
    (65, "C"),
    (60, "D+"),
    (55, "D"),
)

PASSING_PERCENTAGE = 70


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (``round`` would bank it)."""
    return int(math.floor(value + 0.5))


def completion_rate(tasks_completed: int | None, total_tasks: int | None, skills_count: int = 0) -> int:
    """Percentage of completed tasks, clamped to 0..100.

    ``total_tasks`` falls back to the skills count and is never below 1;
    ``tasks_completed`` falls back to the skills count as well.
    """
    completed = tasks_completed if tasks_completed is not None else skills_count
    total = total_tasks or skills_count or 1
    total = max(total, 1)
    rate = round_half_up(max(completed, 0) / total * 100)
    return max(0, min(100, rate))


def rank_score(courses_completed: int, skills_learned: int, total_study_time: float) -> int:
    return courses_completed * 3 + skills_learned * 2 + math.floor(total_study_time)


def rank_for(score: int) -> str:
    for threshold, name in RANKS:
        if score >= threshold:
            return name
    return "Beginner"


def grade_for(percentage: float) -> str:
    for threshold, grade in GRADES:
        if percentage >= threshold:
            return grade
    return "F"


def skill_level_for(percentage: float) -> str:
    if percentage >= 80:
        return "Advanced"
    if percentage >= 60:
        return "Intermediate"
    return "Beginner"
