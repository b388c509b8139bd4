"""
Sign-up / sign-in / sign-out and bearer-session lookup.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

import httpx
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fit360.core.config import settings
from fit360.core.errors import AuthorizationError, ConflictError, ValidationError
from fit360.core.password import validate_password
from fit360.core.security import hash_password, new_session_token, verify_password
from fit360.models.journal import Profile
from fit360.models.user import AuthSession, User

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _issue_session(db: Session, user: User) -> AuthSession:
    session = AuthSession(
        user_id=user.id,
        token=new_session_token(),
        expires_at=datetime.utcnow() + timedelta(hours=settings.SESSION_TTL_HOURS),
    )
    db.add(session)
    return session


def sign_up(
    db: Session,
    email: str,
    password: str,
    display_name: Optional[str] = None,
    breach_client: Optional[httpx.Client] = None,
) -> Tuple[User, AuthSession]:
    email = _normalize_email(email)

    check = validate_password(password, breach_client)
    if not check.is_valid:
        raise ValidationError(
            "Password does not meet requirements",
            details={"errors": check.errors, "strength": check.strength},
        )

    if db.query(User).filter(User.email == email).first() is not None:
        raise ConflictError("User already registered")

    user = User(email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        db.flush()
    except IntegrityError as e:
        # concurrent sign-up for the same email won the unique constraint
        db.rollback()
        raise ConflictError("User already registered") from e

    db.add(Profile(user_id=user.id, display_name=display_name or email.split("@")[0]))
    session = _issue_session(db, user)
    db.commit()
    db.refresh(session)

    logger.info("Signed up user %s", user.id)
    return user, session


def sign_in(db: Session, email: str, password: str) -> Tuple[User, AuthSession]:
    user = db.query(User).filter(User.email == _normalize_email(email)).first()
    if user is None or not verify_password(password, user.password_hash):
        raise AuthorizationError("Invalid login credentials")

    session = _issue_session(db, user)
    db.commit()
    db.refresh(session)
    return user, session


def sign_out(db: Session, token: str) -> None:
    db.query(AuthSession).filter(AuthSession.token == token).delete()
    db.commit()


def resolve_session(db: Session, token: Optional[str]) -> User:
    if not token:
        raise AuthorizationError("Missing bearer token")

    session = db.query(AuthSession).filter(AuthSession.token == token).one_or_none()
    if session is None:
        raise AuthorizationError("Invalid session")

    if session.expires_at <= datetime.utcnow():
        db.delete(session)
        db.commit()
        raise AuthorizationError("Session expired")

    user = db.get(User, session.user_id)
    if user is None:
        raise AuthorizationError("Invalid session")
    return user
