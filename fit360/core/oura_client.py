"""Thin Oura v2 API client: bearer token, date-range queries, next_token paging."""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from fit360.core.config import settings
from fit360.core.errors import UpstreamError

logger = logging.getLogger(__name__)


class OuraClient:
    def __init__(
        self,
        access_token: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url or settings.OURA_API_BASE
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )

    def __enter__(self) -> "OuraClient":
        return self

    def __exit__(self, *_) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _get(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> Any:
        logger.debug("GET %s params=%s", endpoint, params)
        try:
            resp = self._client.get(endpoint, params=params)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Oura {endpoint} request failed: {e}") from e

        if resp.status_code != 200:
            raise UpstreamError(
                f"Oura {endpoint} fetch failed: {resp.text}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(f"Oura {endpoint} returned invalid JSON") from e

    def get_personal_info(self) -> Dict[str, Any]:
        data = self._get("personal_info")
        return data if isinstance(data, dict) else {}

    def fetch(self, endpoint: str, start_date: date, end_date: date) -> List[Dict[str, Any]]:
        """
        Return every record of `endpoint` between two days (inclusive).

        Follows `next_token` until the API stops returning one or repeats a
        token it already handed out.
        """
        params = {"start_date": start_date.isoformat(), "end_date": end_date.isoformat()}
        records: List[Dict[str, Any]] = []
        seen_tokens = set()
        pages = 0

        while True:
            payload = self._get(endpoint, params)
            pages += 1
            if not isinstance(payload, dict):
                break

            page = payload.get("data") or []
            records.extend(r for r in page if isinstance(r, dict))

            next_token = payload.get("next_token")
            if not next_token:
                break
            if next_token in seen_tokens:
                logger.warning("%s: next_token %r repeated, stopping pagination", endpoint, next_token)
                break
            seen_tokens.add(next_token)
            params = {**params, "next_token": next_token}

        logger.debug("%s: %d records across %d pages", endpoint, len(records), pages)
        return records
