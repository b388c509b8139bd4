"""
Password policy: local complexity rules plus a HaveIBeenPwned range lookup.

The breach check only ever sends the first five hex chars of the SHA-1 hash
(k-anonymity). Any failure talking to the service counts as "not breached".
"""
import hashlib
import logging
import re
from typing import List, Optional

import httpx
from pydantic import BaseModel

from fit360.core.config import settings

logger = logging.getLogger(__name__)

MIN_LENGTH = 8

SPECIAL_CHARS = r'[!@#$%^&*(),.?":{}|<>]'

COMMON_PATTERNS = [
    re.compile(r"(.)\1{2,}"),  # aaa, 111
    re.compile(r"123456"),
    re.compile(r"abcdef"),
    re.compile(r"qwerty", re.IGNORECASE),
    re.compile(r"password", re.IGNORECASE),
]

BREACHED_MESSAGE = "This password has been found in data breaches and should not be used"


class PasswordCheckResult(BaseModel):
    is_valid: bool
    errors: List[str]
    strength: str  # weak / medium / strong
    is_breached: Optional[bool] = None


def password_errors(password: str) -> List[str]:
    errors: List[str] = []

    if len(password) < MIN_LENGTH:
        errors.append(f"Password must be at least {MIN_LENGTH} characters long")

    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")

    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")

    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")

    if not re.search(SPECIAL_CHARS, password):
        errors.append("Password must contain at least one special character")

    if any(p.search(password) for p in COMMON_PATTERNS):
        errors.append("Password contains common patterns that should be avoided")

    return errors


def password_strength(password: str, errors: List[str]) -> str:
    if errors:
        return "weak"
    specials = len(re.findall(SPECIAL_CHARS, password))
    if len(password) >= 14 or (len(password) >= 12 and specials >= 2):
        return "strong"
    if len(password) >= 10:
        return "medium"
    return "weak"


def check_password_strength(password: str) -> PasswordCheckResult:
    errors = password_errors(password)
    return PasswordCheckResult(
        is_valid=not errors,
        errors=errors,
        strength=password_strength(password, errors),
    )


def check_password_breached(password: str, client: Optional[httpx.Client] = None) -> bool:
    digest = hashlib.sha1(password.encode("utf-8")).hexdigest().upper()
    prefix, suffix = digest[:5], digest[5:]

    own_client = client is None
    if own_client:
        client = httpx.Client(base_url=settings.PWNED_API_BASE, timeout=settings.HTTP_TIMEOUT_SECONDS)

    try:
        resp = client.get(f"/range/{prefix}")
    except httpx.HTTPError as e:
        logger.warning("Breach check unavailable: %s", e)
        return False
    finally:
        if own_client:
            client.close()

    if resp.status_code != 200:
        logger.warning("Breach check returned HTTP %s", resp.status_code)
        return False

    for line in resp.text.splitlines():
        hash_suffix = line.split(":", 1)[0].strip().upper()
        if hash_suffix == suffix:
            return True
    return False


def validate_password(password: str, client: Optional[httpx.Client] = None) -> PasswordCheckResult:
    result = check_password_strength(password)
    breached = check_password_breached(password, client)

    errors = list(result.errors)
    if breached:
        errors.append(BREACHED_MESSAGE)

    logger.info(
        "Password validation: strength=%s breached=%s errors=%d",
        result.strength,
        breached,
        len(errors),
    )
    return PasswordCheckResult(
        is_valid=result.is_valid and not breached,
        errors=errors,
        strength=result.strength,
        is_breached=breached,
    )
