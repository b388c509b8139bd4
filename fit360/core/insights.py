"""
Rule-based dashboard insights.

Fixed threshold bands over the latest metric values; every band carries a
static confidence. No data at all yields a single "sync your data" prompt.
"""
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional

from pydantic import BaseModel

STEP_GOAL = 10_000


class Insight(BaseModel):
    id: str
    type: str  # daily / weekly / recommendation
    title: str
    content: str
    confidence: int
    category: str  # sleep / fitness / nutrition / recovery
    date: str


def _num(value: float) -> str:
    return f"{value:g}"


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def sleep_insight(score: float, when: str) -> Insight:
    if score >= 85:
        content = (
            f"Excellent sleep score of {_num(score)}/100! Your body is well-recovered "
            "and ready for high-intensity training."
        )
        confidence = 95
    elif score >= 70:
        content = (
            f"Good sleep score of {_num(score)}/100. Consider going to bed 30 minutes "
            "earlier to optimize recovery."
        )
        confidence = 88
    else:
        content = (
            f"Sleep score of {_num(score)}/100 indicates poor recovery. "
            "Prioritize 7-9 hours of sleep tonight."
        )
        confidence = 92

    return Insight(
        id="sleep",
        type="daily",
        title="Sleep Analysis",
        content=content,
        confidence=confidence,
        category="sleep",
        date=when,
    )


def readiness_insight(score: float, when: str) -> Insight:
    if score >= 85:
        content = (
            f"Outstanding readiness score of {_num(score)}/100! Perfect day for "
            "challenging workouts or setting PRs."
        )
    elif score >= 70:
        content = f"Moderate readiness of {_num(score)}/100. Light to moderate exercise recommended today."
    else:
        content = (
            f"Low readiness of {_num(score)}/100. Focus on recovery activities like "
            "walking or gentle stretching."
        )

    return Insight(
        id="readiness",
        type="daily",
        title="Training Readiness",
        content=content,
        confidence=90,
        category="recovery",
        date=when,
    )


def activity_insight(steps: float, when: str) -> Insight:
    steps = int(steps)
    if steps >= STEP_GOAL:
        content = f"Great job! You've taken {steps:,} steps today, exceeding the {STEP_GOAL:,} step goal."
    else:
        content = (
            f"You're {STEP_GOAL - steps:,} steps away from your {STEP_GOAL:,} step goal. "
            "A 15-minute walk should get you there!"
        )

    return Insight(
        id="activity",
        type="daily",
        title="Daily Activity",
        content=content,
        confidence=95,
        category="fitness",
        date=when,
    )


def stress_insight(stress: float, when: str) -> Insight:
    if stress <= 25:
        content = (
            f"Low stress level of {_num(stress)}/100. Your body is managing stress "
            "well - great for recovery!"
        )
    elif stress <= 50:
        content = f"Moderate stress level of {_num(stress)}/100. Consider meditation or breathing exercises."
    else:
        content = (
            f"Elevated stress level of {_num(stress)}/100. Prioritize relaxation and "
            "avoid intense training today."
        )

    return Insight(
        id="stress",
        type="daily",
        title="Stress Management",
        content=content,
        confidence=87,
        category="recovery",
        date=when,
    )


def workout_insight(workout: Any, when: str) -> Insight:
    activity = _field(workout, "activity") or "workout"
    calories = _field(workout, "calories")
    intensity = (_field(workout, "intensity") or "").lower()

    calories_str = f"{calories:.0f}" if isinstance(calories, (int, float)) else "unknown"
    if intensity in ("high", "hard"):
        note = "High intensity session - ensure adequate recovery."
    elif intensity == "moderate":
        note = "Good moderate intensity training."
    else:
        note = "Light session - consider increasing intensity when ready."

    return Insight(
        id="workout",
        type="weekly",
        title="Workout Summary",
        content=f"Last workout: {activity} for {calories_str} calories. {note}",
        confidence=83,
        category="fitness",
        date=when,
    )


def sync_prompt(when: str) -> Insight:
    return Insight(
        id="sync",
        type="recommendation",
        title="Sync Your Data",
        content=(
            "Connect your Oura ring and sync your data to get personalized insights "
            "based on your sleep, activity, and recovery metrics."
        ),
        confidence=100,
        category="sleep",
        date=when,
    )


def generate_insights(
    metrics: Optional[Mapping[str, Optional[float]]],
    workouts: Optional[Iterable[Any]] = None,
    now: Optional[datetime] = None,
) -> List[Insight]:
    """
    Build the insight list from a `{metric_type: value}` snapshot.

    `workouts` is expected newest first; only the first one is summarized.
    A zero value counts as no reading (the ring reports 0 when not worn).
    """
    metrics = metrics or {}
    workouts = list(workouts or [])
    when = (now or datetime.utcnow()).isoformat()

    insights: List[Insight] = []

    sleep = metrics.get("sleep_score")
    if sleep:
        insights.append(sleep_insight(sleep, when))

    readiness = metrics.get("readiness_score")
    if readiness:
        insights.append(readiness_insight(readiness, when))

    steps = metrics.get("steps")
    if steps:
        insights.append(activity_insight(steps, when))

    stress = metrics.get("stress_score")
    if stress:
        insights.append(stress_insight(stress, when))

    if workouts:
        insights.append(workout_insight(workouts[0], when))

    if not insights:
        return [sync_prompt(when)]
    return insights
