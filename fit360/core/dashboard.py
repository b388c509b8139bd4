from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel


class Trend(BaseModel):
    direction: str  # up / down / neutral
    value: str


class MetricCard(BaseModel):
    key: str
    title: str
    value: float | None
    unit: str | None = None
    subtitle: str | None = None
    trend: Trend | None = None


# (metric type, title, unit, subtitle, chart series used for the trend)
CARD_LAYOUT = [
    ("sleep_score", "Sleep Score", "/100", None, "sleep"),
    ("readiness_score", "Readiness", "/100", None, "readiness"),
    ("resting_heart_rate", "Resting HR", "bpm", None, None),
    ("steps", "Steps", None, "Goal: 10,000", "steps"),
    ("active_calories", "Active Calories", "kcal", None, None),
    ("stress_score", "Stress", "/100", None, "stress"),
    ("resilience_score", "Resilience", None, None, "resilience"),
    ("vo2_max", "VO2 Max", "ml/kg/min", None, None),
    ("cardiovascular_age", "Cardiovascular Age", "years", None, None),
]


def _format_trend(pct: float | None) -> str:
    if pct is None:
        return "n/a"
    sign = "+" if pct >= 0 else ""
    return f"{sign}{round(pct, 1)}%"


def series_trend(points: List[dict]) -> Optional[Trend]:
    """Last point vs the one before it, as a percentage change."""
    if len(points) < 2:
        return None

    previous = points[-2]["value"]
    current = points[-1]["value"]
    if previous in (None, 0) or current is None:
        return None

    pct = ((current - previous) / previous) * 100.0
    if round(pct, 1) == 0:
        return Trend(direction="neutral", value="stable")
    return Trend(direction="up" if pct > 0 else "down", value=_format_trend(pct))


def build_metric_cards(
    latest: Mapping[str, float],
    charts: Optional[Dict[str, List[dict]]] = None,
) -> List[MetricCard]:
    charts = charts or {}
    cards: List[MetricCard] = []
    for metric_type, title, unit, subtitle, series in CARD_LAYOUT:
        trend = series_trend(charts.get(series, [])) if series else None
        cards.append(
            MetricCard(
                key=metric_type,
                title=title,
                value=latest.get(metric_type),
                unit=unit,
                subtitle=subtitle,
                trend=trend,
            )
        )
    return cards
