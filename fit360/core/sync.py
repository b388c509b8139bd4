"""
Oura -> relational store sync.

Each endpoint is fetched once over its rolling window, mapped onto our tables
and upserted. Endpoints are isolated from each other: a failure is logged,
rolled back and the sync moves on to the next one.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from fit360.core.config import settings
from fit360.core.db import upsert
from fit360.core.errors import UpstreamError
from fit360.core.oura_client import OuraClient
from fit360.models.metric import Metric
from fit360.models.oura import OuraPersonalInfo, OuraSession, OuraTag, OuraWorkout

logger = logging.getLogger(__name__)

SOURCE = "oura"

METRIC_CONFLICT = ("user_id", "type", "source", "timestamp")


def _path(*keys: str) -> Callable[[Dict[str, Any]], Any]:
    def get(record: Dict[str, Any]) -> Any:
        value: Any = record
        for key in keys:
            if not isinstance(value, dict):
                return None
            value = value.get(key)
        return value

    return get


def _first(*getters: Callable[[Dict[str, Any]], Any]) -> Callable[[Dict[str, Any]], Any]:
    def get(record: Dict[str, Any]) -> Any:
        for getter in getters:
            value = getter(record)
            if value is not None:
                return value
        return None

    return get


# endpoint -> {metric type: extractor}
METRIC_ENDPOINTS: Dict[str, Dict[str, Callable[[Dict[str, Any]], Any]]] = {
    "daily_sleep": {
        "sleep_score": _path("score"),
    },
    "daily_readiness": {
        "readiness_score": _path("score"),
    },
    "daily_activity": {
        "steps": _path("steps"),
        "active_calories": _path("active_calories"),
        "total_calories": _path("total_calories"),
        "activity_score": _path("score"),
        "resting_heart_rate": _path("contributors", "resting_heart_rate"),
    },
    "daily_stress": {
        "stress_score": _path("average_stress_score"),
    },
    "daily_resilience": {
        "resilience_score": _path("resilience_score"),
    },
    "daily_cardiovascular_age": {
        "cardiovascular_age": _first(_path("cvo_age"), _path("vascular_age")),
    },
    "vO2_max": {
        "vo2_max": _path("vo2_max"),
    },
}


@dataclass
class SyncResult:
    records: Dict[str, int] = field(default_factory=dict)
    failed: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.records.values())


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _parse_iso8601(dt_str: Any) -> Optional[datetime]:
    """Parse an Oura timestamp into naive UTC."""
    if not dt_str or not isinstance(dt_str, str):
        return None
    try:
        if dt_str.endswith("Z"):
            dt_str = dt_str.replace("Z", "+00:00")
        dt = datetime.fromisoformat(dt_str)
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _parse_day(day_str: Any) -> Optional[date]:
    if not day_str or not isinstance(day_str, str):
        return None
    try:
        return date.fromisoformat(day_str)
    except ValueError:
        return None


def window_for(endpoint: str, today: date) -> tuple[date, date]:
    days = settings.VO2_MAX_WINDOW_DAYS if endpoint == "vO2_max" else settings.SYNC_WINDOW_DAYS
    return today - timedelta(days=days), today


# ---------- per-endpoint writers ----------

def sync_personal_info(db: Session, user_id: int, client: OuraClient) -> int:
    info = client.get_personal_info()
    if not info:
        return 0

    upsert(
        db,
        OuraPersonalInfo,
        {
            "user_id": user_id,
            "oura_user_id": info.get("id"),
            "age": info.get("age"),
            "biological_sex": info.get("biological_sex"),
            "height": _to_float(info.get("height")),
            "weight": _to_float(info.get("weight")),
            "email": info.get("email"),
            "country": info.get("country"),
            "ring_model": info.get("ring_model"),
            "updated_at": datetime.utcnow(),
        },
        ["user_id"],
    )
    return 1


def sync_daily_metrics(db: Session, user_id: int, client: OuraClient, endpoint: str, today: date) -> int:
    extractors = METRIC_ENDPOINTS[endpoint]
    start, end = window_for(endpoint, today)
    records = client.fetch(endpoint, start, end)
    logger.info("Received %d %s records from Oura", len(records), endpoint)

    written = 0
    now = datetime.utcnow()
    for record in records:
        day = _parse_day(record.get("day"))
        if day is None:
            logger.warning("Skipping %s record %s without a day", endpoint, record.get("id"))
            continue

        timestamp = datetime(day.year, day.month, day.day)
        for metric_type, extract in extractors.items():
            value = _to_float(extract(record))
            if value is None:
                continue

            upsert(
                db,
                Metric,
                {
                    "user_id": user_id,
                    "type": metric_type,
                    "source": SOURCE,
                    "timestamp": timestamp,
                    "value": value,
                    "value_json": record,
                    "updated_at": now,
                },
                METRIC_CONFLICT,
            )
            written += 1
    return written


def sync_workouts(db: Session, user_id: int, client: OuraClient, today: date) -> int:
    start, end = window_for("workout", today)
    written = 0
    for workout in client.fetch("workout", start, end):
        workout_id = workout.get("id")
        if not workout_id:
            continue

        upsert(
            db,
            OuraWorkout,
            {
                "user_id": user_id,
                "oura_workout_id": workout_id,
                "activity": workout.get("activity"),
                "intensity": workout.get("intensity"),
                "calories": _to_float(workout.get("calories")),
                "distance": _to_float(workout.get("distance")),
                "label": workout.get("label"),
                "source": workout.get("source"),
                "start_datetime": _parse_iso8601(workout.get("start_datetime")),
                "end_datetime": _parse_iso8601(workout.get("end_datetime")),
                "day": _parse_day(workout.get("day")),
                "workout_data": workout,
                "updated_at": datetime.utcnow(),
            },
            ["user_id", "oura_workout_id"],
        )
        written += 1
    return written


def sync_sessions(db: Session, user_id: int, client: OuraClient, today: date) -> int:
    start, end = window_for("session", today)
    written = 0
    for session in client.fetch("session", start, end):
        session_id = session.get("id")
        if not session_id:
            continue

        upsert(
            db,
            OuraSession,
            {
                "user_id": user_id,
                "oura_session_id": session_id,
                "category": session.get("category") or session.get("type"),
                "start_datetime": _parse_iso8601(session.get("start_datetime")),
                "end_datetime": _parse_iso8601(session.get("end_datetime")),
                "day": _parse_day(session.get("day")),
                "average_hr": _to_float(session.get("average_hr")),
                "session_data": session,
                "updated_at": datetime.utcnow(),
            },
            ["user_id", "oura_session_id"],
        )
        written += 1
    return written


def sync_tags(db: Session, user_id: int, client: OuraClient, today: date) -> int:
    start, end = window_for("enhanced_tag", today)
    written = 0
    for tag in client.fetch("enhanced_tag", start, end):
        tag_id = tag.get("id")
        if not tag_id:
            continue

        labels = tag.get("tags")
        upsert(
            db,
            OuraTag,
            {
                "user_id": user_id,
                "oura_tag_id": tag_id,
                "day": _parse_day(tag.get("day")),
                "timestamp_utc": _parse_iso8601(tag.get("timestamp")),
                "text": tag.get("text"),
                "tags": labels if isinstance(labels, list) else [],
                "comment": tag.get("comment"),
                "start_datetime": _parse_iso8601(tag.get("start_datetime")),
                "end_datetime": _parse_iso8601(tag.get("end_datetime")),
                "repeat_daily": tag.get("repeat_daily"),
                "updated_at": datetime.utcnow(),
            },
            ["user_id", "oura_tag_id"],
        )
        written += 1
    return written


def sync_user_data(
    db: Session,
    user_id: int,
    client: OuraClient,
    today: Optional[date] = None,
) -> SyncResult:
    """
    Pull every Oura category for one user, one endpoint at a time.

    Caller is responsible for authenticating the user and building the client;
    nothing here raises for a single failing endpoint.
    """
    today = today or datetime.utcnow().date()
    result = SyncResult()

    steps: List[tuple[str, Callable[[], int]]] = [
        ("personal_info", lambda: sync_personal_info(db, user_id, client)),
    ]
    for endpoint in METRIC_ENDPOINTS:
        steps.append((endpoint, lambda e=endpoint: sync_daily_metrics(db, user_id, client, e, today)))
    steps += [
        ("workout", lambda: sync_workouts(db, user_id, client, today)),
        ("session", lambda: sync_sessions(db, user_id, client, today)),
        ("enhanced_tag", lambda: sync_tags(db, user_id, client, today)),
    ]

    for name, step in steps:
        try:
            written = step()
            db.commit()
        except UpstreamError as e:
            db.rollback()
            result.failed.append(name)
            logger.error("Oura %s sync failed (status %s): %s", name, e.upstream_status, e.message)
            continue
        except Exception:
            db.rollback()
            result.failed.append(name)
            logger.exception("Oura %s sync failed", name)
            continue

        result.records[name] = written
        logger.info("Synced %d %s records for user %s", written, name, user_id)

    return result
