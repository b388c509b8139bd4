from datetime import date as DateType, datetime, timedelta

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from fit360.api.deps import get_current_user
from fit360.core.db import get_db, upsert
from fit360.models.journal import MacroLog
from fit360.models.user import User

router = APIRouter(prefix="/macros", tags=["macros"])

# kcal per gram
PROTEIN_KCAL = 4
CARBS_KCAL = 4
FAT_KCAL = 9

# differences smaller than this are rounding noise
DIFF_THRESHOLD_KCAL = 10


class MacroIn(BaseModel):
    calories: float = Field(..., description="Total calories for the day")
    protein: float = Field(0, ge=0)
    carbs: float = Field(0, ge=0)
    fat: float = Field(0, ge=0)
    notes: str | None = None
    date: DateType | None = None

    @field_validator("calories")
    @classmethod
    def validate_calories(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Please enter at least the total calories.")
        return v


class MacroOut(BaseModel):
    date: str
    calories: float | None
    protein: float | None
    carbs: float | None
    fat: float | None
    notes: str | None = None
    macro_calories: float
    difference: float | None = None


def macro_calories(protein: float | None, carbs: float | None, fat: float | None) -> float:
    return (protein or 0) * PROTEIN_KCAL + (carbs or 0) * CARBS_KCAL + (fat or 0) * FAT_KCAL


def _macro_out(entry: MacroLog) -> MacroOut:
    from_macros = macro_calories(entry.protein, entry.carbs, entry.fat)
    diff = (entry.calories or 0) - from_macros
    return MacroOut(
        date=entry.date.isoformat(),
        calories=entry.calories,
        protein=entry.protein,
        carbs=entry.carbs,
        fat=entry.fat,
        notes=entry.notes,
        macro_calories=round(from_macros, 1),
        difference=round(diff, 1) if from_macros > 0 and abs(diff) > DIFF_THRESHOLD_KCAL else None,
    )


@router.post("", response_model=MacroOut)
def log_macros(payload: MacroIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Save the day's macros. Logging the same day again replaces the entry.
    """
    d = payload.date or datetime.utcnow().date()
    upsert(
        db,
        MacroLog,
        {
            "user_id": user.id,
            "date": d,
            "calories": payload.calories,
            "protein": payload.protein,
            "carbs": payload.carbs,
            "fat": payload.fat,
            "notes": payload.notes,
            "updated_at": datetime.utcnow(),
        },
        ["user_id", "date"],
    )
    db.commit()

    entry = (
        db.query(MacroLog)
        .filter(MacroLog.user_id == user.id, MacroLog.date == d)
        .populate_existing()
        .one()
    )
    return _macro_out(entry)


@router.get("", response_model=list[MacroOut])
def list_macros(
    days: int = Query(30, ge=1, le=365),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    start = datetime.utcnow().date() - timedelta(days=days)
    rows = (
        db.query(MacroLog)
        .filter(MacroLog.user_id == user.id)
        .filter(MacroLog.date >= start)
        .order_by(MacroLog.date.desc())
        .all()
    )
    return [_macro_out(r) for r in rows]
