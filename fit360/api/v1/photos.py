from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.orm import Session

from fit360.api.deps import get_current_user
from fit360.core.db import get_db
from fit360.core.errors import NotFoundError
from fit360.models.journal import Photo
from fit360.models.user import User

router = APIRouter(prefix="/photos", tags=["photos"])


class PhotoIn(BaseModel):
    fullres_url: str = Field(..., min_length=1)
    thumbnail_url: str | None = None
    description: str | None = None
    timestamp: datetime | None = None

    @field_validator("timestamp")
    @classmethod
    def to_naive_utc(cls, v: datetime | None) -> datetime | None:
        # stored alongside utcnow() defaults, so offsets must not leak through
        if v is not None and v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class PhotoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    timestamp: datetime
    description: str | None = None
    fullres_url: str | None = None
    thumbnail_url: str | None = None


class PhotoDetailOut(PhotoOut):
    previous_id: int | None = None  # newer photo
    next_id: int | None = None  # older photo


def _timeline(db: Session, user_id: int) -> List[Photo]:
    # newest first
    return (
        db.query(Photo)
        .filter(Photo.user_id == user_id)
        .order_by(Photo.timestamp.desc(), Photo.id.desc())
        .all()
    )


@router.post("", response_model=PhotoOut, status_code=201)
def add_photo(payload: PhotoIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    photo = Photo(
        user_id=user.id,
        timestamp=payload.timestamp or datetime.utcnow(),
        description=payload.description,
        fullres_url=payload.fullres_url,
        thumbnail_url=payload.thumbnail_url or payload.fullres_url,
    )
    db.add(photo)
    db.commit()
    db.refresh(photo)
    return photo


@router.get("", response_model=List[PhotoOut])
def list_photos(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _timeline(db, user.id)


@router.get("/{photo_id}", response_model=PhotoDetailOut)
def get_photo(photo_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Single photo plus its neighbours in the timeline, for prev/next navigation.
    """
    photos = _timeline(db, user.id)
    index = next((i for i, p in enumerate(photos) if p.id == photo_id), None)
    if index is None:
        raise NotFoundError(f"Photo not found: {photo_id}")

    photo = photos[index]
    out = PhotoDetailOut.model_validate(photo)
    out.previous_id = photos[index - 1].id if index > 0 else None
    out.next_id = photos[index + 1].id if index + 1 < len(photos) else None
    return out


@router.delete("/{photo_id}")
def delete_photo(photo_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    photo = (
        db.query(Photo)
        .filter(Photo.id == photo_id, Photo.user_id == user.id)
        .one_or_none()
    )
    if photo is None:
        raise NotFoundError(f"Photo not found: {photo_id}")

    db.delete(photo)
    db.commit()
    return {"status": "ok", "id": photo_id}
