from typing import Any, Dict

import httpx
from fastapi import APIRouter, Body, Depends

from fit360.api.deps import get_breach_client
from fit360.core.errors import ValidationError
from fit360.core.password import PasswordCheckResult, validate_password

router = APIRouter(tags=["password"])


@router.post("/validate-password", response_model=PasswordCheckResult)
def validate_password_endpoint(
    payload: Dict[str, Any] = Body(...),
    breach_client: httpx.Client = Depends(get_breach_client),
):
    """
    Check a candidate password against the local rules and the breach corpus.
    Used by the sign-up form while the user types.
    """
    password = payload.get("password")
    if not password or not isinstance(password, str):
        raise ValidationError("Password is required")

    return validate_password(password, breach_client)
