"""
Read side of the dashboard: latest values, chart series and recent lists.
"""
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from fit360.core.config import settings
from fit360.models.metric import Metric
from fit360.models.oura import OuraPersonalInfo, OuraSession, OuraTag, OuraWorkout

SOURCE = "oura"

# chart name -> metric type
CHART_SERIES = {
    "sleep": "sleep_score",
    "readiness": "readiness_score",
    "steps": "steps",
    "stress": "stress_score",
    "resilience": "resilience_score",
}


def _window_start(today: Optional[date], days: Optional[int]) -> date:
    today = today or datetime.utcnow().date()
    days = settings.METRICS_LOOKBACK_DAYS if days is None else days
    return today - timedelta(days=days)


def _as_datetime(d: date) -> datetime:
    return datetime(d.year, d.month, d.day)


def latest_metrics(
    db: Session,
    user_id: int,
    days: Optional[int] = None,
    today: Optional[date] = None,
    source: str = SOURCE,
) -> Dict[str, float]:
    """
    Most recent value per metric type inside the lookback window.

    Rows are walked newest timestamp first (then most recently written), so
    the first value seen for a type wins.
    """
    start = _window_start(today, days)
    rows = (
        db.query(Metric.type, Metric.value)
        .filter(Metric.user_id == user_id)
        .filter(Metric.source == source)
        .filter(Metric.timestamp >= _as_datetime(start))
        .filter(Metric.value.isnot(None))
        .order_by(Metric.timestamp.desc(), Metric.updated_at.desc(), Metric.id.desc())
        .all()
    )

    latest: Dict[str, float] = {}
    for metric_type, value in rows:
        if metric_type not in latest:
            latest[metric_type] = value
    return latest


def time_series(
    db: Session,
    user_id: int,
    types: Iterable[str],
    days: Optional[int] = None,
    today: Optional[date] = None,
    source: str = SOURCE,
) -> Dict[str, List[dict]]:
    """Ascending `{date, value}` points per type; missing days stay missing."""
    types = list(types)
    today = today or datetime.utcnow().date()
    start = _window_start(today, days)

    rows = (
        db.query(Metric.type, Metric.value, Metric.timestamp)
        .filter(Metric.user_id == user_id)
        .filter(Metric.source == source)
        .filter(Metric.type.in_(types))
        .filter(Metric.timestamp >= _as_datetime(start))
        .filter(Metric.timestamp < _as_datetime(today + timedelta(days=1)))
        .filter(Metric.value.isnot(None))
        .order_by(Metric.timestamp.asc())
        .all()
    )

    series: Dict[str, List[dict]] = {t: [] for t in types}
    for metric_type, value, ts in rows:
        series[metric_type].append({"date": ts.date().isoformat(), "value": value})
    return series


def chart_data(
    db: Session,
    user_id: int,
    days: Optional[int] = None,
    today: Optional[date] = None,
) -> Dict[str, List[dict]]:
    series = time_series(db, user_id, CHART_SERIES.values(), days=days, today=today)
    return {name: series[metric_type] for name, metric_type in CHART_SERIES.items()}


def personal_info(db: Session, user_id: int) -> Optional[OuraPersonalInfo]:
    return (
        db.query(OuraPersonalInfo)
        .filter(OuraPersonalInfo.user_id == user_id)
        .one_or_none()
    )


def recent_workouts(db: Session, user_id: int, days: Optional[int] = None, today: Optional[date] = None):
    start = _window_start(today, days)
    return (
        db.query(OuraWorkout)
        .filter(OuraWorkout.user_id == user_id)
        .filter(OuraWorkout.day >= start)
        .order_by(OuraWorkout.day.desc(), OuraWorkout.start_datetime.desc())
        .all()
    )


def recent_sessions(db: Session, user_id: int, days: Optional[int] = None, today: Optional[date] = None):
    start = _window_start(today, days)
    return (
        db.query(OuraSession)
        .filter(OuraSession.user_id == user_id)
        .filter(OuraSession.day >= start)
        .order_by(OuraSession.day.desc(), OuraSession.start_datetime.desc())
        .all()
    )


def recent_tags(db: Session, user_id: int, days: Optional[int] = None, today: Optional[date] = None):
    start = _window_start(today, days)
    return (
        db.query(OuraTag)
        .filter(OuraTag.user_id == user_id)
        .filter(OuraTag.day >= start)
        .order_by(OuraTag.day.desc())
        .all()
    )
