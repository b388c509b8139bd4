from typing import Callable, Iterator, Optional

import httpx
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from fit360.core.auth import resolve_session
from fit360.core.config import settings
from fit360.core.db import get_db
from fit360.core.errors import ConfigurationError
from fit360.core.oura_client import OuraClient
from fit360.models.user import User


def get_bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def get_current_user(
    token: Optional[str] = Depends(get_bearer_token),
    db: Session = Depends(get_db),
) -> User:
    return resolve_session(db, token)


def get_oura_client_factory() -> Callable[[str], OuraClient]:
    return OuraClient


def require_oura_token() -> str:
    token = settings.OURA_PERSONAL_ACCESS_TOKEN
    if not token:
        raise ConfigurationError("Oura token not configured")
    return token


def get_breach_client() -> Iterator[httpx.Client]:
    with httpx.Client(base_url=settings.PWNED_API_BASE, timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
        yield client
