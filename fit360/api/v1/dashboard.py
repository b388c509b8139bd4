from typing import Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from fit360.api.deps import get_current_user
from fit360.api.v1.metrics import PersonalInfoOut, WorkoutOut
from fit360.core import metrics as read
from fit360.core.dashboard import MetricCard, build_metric_cards
from fit360.core.db import get_db
from fit360.core.insights import Insight, generate_insights
from fit360.models.user import User

router = APIRouter(tags=["dashboard"])


class DashboardOut(BaseModel):
    cards: List[MetricCard]
    charts: Dict[str, List[dict]]
    insights: List[Insight]
    personal_info: PersonalInfoOut | None = None
    recent_workouts: List[WorkoutOut]


@router.get("/dashboard", response_model=DashboardOut)
def get_dashboard(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    latest = read.latest_metrics(db, user.id)
    charts = read.chart_data(db, user.id)
    workouts = read.recent_workouts(db, user.id)
    info = read.personal_info(db, user.id)

    return DashboardOut(
        cards=build_metric_cards(latest, charts),
        charts=charts,
        insights=generate_insights(latest, workouts),
        personal_info=PersonalInfoOut.model_validate(info) if info is not None else None,
        recent_workouts=[WorkoutOut.model_validate(w) for w in workouts[:5]],
    )


@router.get("/insights", response_model=List[Insight])
def get_insights(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    latest = read.latest_metrics(db, user.id)
    workouts = read.recent_workouts(db, user.id)
    return generate_insights(latest, workouts)
