from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from fit360.api.deps import get_current_user
from fit360.core.db import get_db
from fit360.models.journal import Profile
from fit360.models.user import User

router = APIRouter(prefix="/profile", tags=["profile"])


class ProfileIn(BaseModel):
    display_name: str | None = Field(None, max_length=128)
    avatar_url: str | None = None
    goal: str | None = Field(None, max_length=255)
    units: str | None = Field(None, pattern="^(metric|imperial)$")


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    display_name: str | None = None
    avatar_url: str | None = None
    goal: str | None = None
    units: str | None = None
    updated_at: datetime | None = None


def _get_or_create(db: Session, user_id: int) -> Profile:
    profile = db.query(Profile).filter(Profile.user_id == user_id).one_or_none()
    if profile is None:
        profile = Profile(user_id=user_id)
        db.add(profile)
    return profile


@router.get("", response_model=ProfileOut)
def get_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = _get_or_create(db, user.id)
    db.commit()
    db.refresh(profile)
    return profile


@router.put("", response_model=ProfileOut)
def update_profile(payload: ProfileIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Only fields present in the request body are changed."""
    profile = _get_or_create(db, user.id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)

    db.commit()
    db.refresh(profile)
    return profile
