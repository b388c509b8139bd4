from datetime import datetime

import httpx
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from fit360.api.deps import get_bearer_token, get_breach_client, get_current_user
from fit360.core.auth import sign_in, sign_out, sign_up
from fit360.core.db import get_db
from fit360.core.errors import AuthorizationError
from fit360.models.user import User

router = APIRouter(prefix="/auth", tags=["auth"])


class Credentials(BaseModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("invalid email address")
        return v


class SignUpIn(Credentials):
    display_name: str | None = Field(None, max_length=128)


class UserOut(BaseModel):
    id: int
    email: str
    created_at: datetime | None = None


class SessionOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserOut


def _user_out(user: User) -> UserOut:
    return UserOut(id=user.id, email=user.email, created_at=user.created_at)


@router.post("/signup", response_model=SessionOut, status_code=201)
def signup(
    payload: SignUpIn,
    db: Session = Depends(get_db),
    breach_client: httpx.Client = Depends(get_breach_client),
):
    user, session = sign_up(
        db,
        payload.email,
        payload.password,
        display_name=payload.display_name,
        breach_client=breach_client,
    )
    return SessionOut(access_token=session.token, expires_at=session.expires_at, user=_user_out(user))


@router.post("/signin", response_model=SessionOut)
def signin(payload: Credentials, db: Session = Depends(get_db)):
    user, session = sign_in(db, payload.email, payload.password)
    return SessionOut(access_token=session.token, expires_at=session.expires_at, user=_user_out(user))


@router.post("/signout")
def signout(token: str | None = Depends(get_bearer_token), db: Session = Depends(get_db)):
    if not token:
        raise AuthorizationError("Missing bearer token")
    sign_out(db, token)
    return {"status": "ok"}


@router.get("/session", response_model=UserOut)
def current_session(user: User = Depends(get_current_user)):
    return _user_out(user)
