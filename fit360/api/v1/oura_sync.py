import logging
from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fit360.api.deps import get_current_user, get_oura_client_factory, require_oura_token
from fit360.core.db import get_db
from fit360.core.errors import Fit360Error
from fit360.core.oura_client import OuraClient
from fit360.core.sync import sync_user_data
from fit360.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["oura"])


@router.post("/oura-sync")
def trigger_sync(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client_factory: Callable[[str], OuraClient] = Depends(get_oura_client_factory),
):
    """
    Pull the rolling Oura window for the calling user and upsert it.

    Individual endpoint failures are only logged; the response reports the
    sync as a whole.
    """
    # after auth, before any outbound call
    token = require_oura_token()

    try:
        with client_factory(token) as client:
            result = sync_user_data(db, user.id, client)
    except Fit360Error:
        raise
    except Exception as e:
        logger.exception("Error syncing Oura data for user %s", user.id)
        raise Fit360Error("Failed to sync Oura data", details=str(e)) from e

    if result.failed:
        logger.warning("Oura sync for user %s skipped: %s", user.id, ", ".join(result.failed))

    return {
        "success": True,
        "message": "Oura data synced successfully",
        "records": result.total,
        "synced_at": datetime.utcnow().isoformat(),
    }
