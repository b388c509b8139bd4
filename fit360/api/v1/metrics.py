from datetime import date, datetime
from typing import Dict, List

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from fit360.api.deps import get_current_user
from fit360.core import metrics as read
from fit360.core.db import get_db
from fit360.core.errors import NotFoundError, ValidationError
from fit360.models.user import User

router = APIRouter(tags=["metrics"])

METRIC_TYPES = (
    "sleep_score",
    "readiness_score",
    "steps",
    "active_calories",
    "total_calories",
    "activity_score",
    "resting_heart_rate",
    "stress_score",
    "resilience_score",
    "cardiovascular_age",
    "vo2_max",
)


class PersonalInfoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    age: int | None = None
    biological_sex: str | None = None
    height: float | None = None
    weight: float | None = None
    country: str | None = None
    ring_model: str | None = None


class WorkoutOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    oura_workout_id: str
    activity: str | None = None
    intensity: str | None = None
    calories: float | None = None
    distance: float | None = None
    label: str | None = None
    day: date | None = None
    start_datetime: datetime | None = None
    end_datetime: datetime | None = None


class OuraSessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    oura_session_id: str
    category: str | None = None
    day: date | None = None
    start_datetime: datetime | None = None
    end_datetime: datetime | None = None
    average_hr: float | None = None


class TagOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    oura_tag_id: str
    day: date | None = None
    text: str | None = None
    tags: List[str] | None = None
    comment: str | None = None


@router.get("/metrics/latest")
def get_latest_metrics(
    days: int | None = Query(None, ge=1, le=365),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Dict[str, float | None]:
    latest = read.latest_metrics(db, user.id, days=days)
    return {metric_type: latest.get(metric_type) for metric_type in METRIC_TYPES}


@router.get("/metrics/series")
def get_metric_series(
    types: List[str] = Query(list(read.CHART_SERIES.values())),
    days: int | None = Query(None, ge=1, le=365),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    unknown = [t for t in types if t not in METRIC_TYPES]
    if unknown:
        raise ValidationError(f"Unknown metric type(s): {', '.join(unknown)}")
    return read.time_series(db, user.id, types, days=days)


@router.get("/personal-info", response_model=PersonalInfoOut)
def get_personal_info(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    info = read.personal_info(db, user.id)
    if info is None:
        raise NotFoundError("No personal info synced yet")
    return info


@router.get("/workouts", response_model=List[WorkoutOut])
def list_workouts(
    days: int | None = Query(None, ge=1, le=365),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return read.recent_workouts(db, user.id, days=days)


@router.get("/sessions", response_model=List[OuraSessionOut])
def list_sessions(
    days: int | None = Query(None, ge=1, le=365),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return read.recent_sessions(db, user.id, days=days)


@router.get("/tags", response_model=List[TagOut])
def list_tags(
    days: int | None = Query(None, ge=1, le=365),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return read.recent_tags(db, user.id, days=days)
