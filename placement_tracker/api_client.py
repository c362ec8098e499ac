"""
Report API Client
=================

Async client for the remote report store and session provider:

  GET  /get_data/   list every submitted report
  POST /add_data/   create a report
  POST /login/      {email, password} -> user
  POST /signup/     {username, email, password} -> user

Every failure (transport error, non-2xx status, error payload) surfaces as
ReportStoreError. Nothing is retried.
"""

import time
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from placement_tracker.config import DEFAULT_API_BASE_URL
from placement_tracker.exceptions import ReportStoreError
from placement_tracker.logging_config import logger
from placement_tracker.models import (
    LoginRequest,
    ReportRecord,
    SignupRequest,
    UserSession,
)


class PlacementAPIClient:
    """Client for the placement report backend"""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.token = token
        self._transport = transport

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers"""
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Make an HTTP request and return the decoded JSON body"""
        started = time.perf_counter()

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport
            ) as client:
                response = await client.request(
                    method, endpoint, json=data, headers=self._get_headers()
                )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {endpoint} failed: {type(e).__name__}: {e}")
            raise ReportStoreError(f"Cannot reach the report server: {e}") from e

        duration_ms = (time.perf_counter() - started) * 1000
        logger.log_request(method, endpoint, response.status_code, duration_ms)

        try:
            payload = response.json()
        except ValueError:
            payload = response.text

        if not response.is_success:
            message = f"Server responded with status: {response.status_code}"
            if isinstance(payload, dict) and payload.get("error"):
                message = str(payload["error"])
            raise ReportStoreError(message, status_code=response.status_code, payload=payload)

        return payload

    # ==================== Reports ====================

    async def list_reports(self) -> List[ReportRecord]:
        """Fetch every submitted report"""
        payload = await self._request("GET", "/get_data/")

        if not isinstance(payload, list):
            raise ReportStoreError("Unexpected response from /get_data/", payload=payload)

        reports = []
        for index, item in enumerate(payload):
            try:
                reports.append(ReportRecord.from_payload(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed report at index {index}: {e.error_count()} errors")
        return reports

    async def create_report(self, record: ReportRecord) -> Any:
        """Submit a finished report; returns the server's reply"""
        return await self._request("POST", "/add_data/", data=record.to_payload())

    # ==================== Authentication ====================

    async def login(self, email: str, password: str) -> UserSession:
        data = LoginRequest(email=email, password=password).model_dump()
        payload = await self._request("POST", "/login/", data=data)
        return self._to_session(payload)

    async def signup(self, username: str, email: str, password: str) -> UserSession:
        data = SignupRequest(username=username, email=email, password=password).model_dump()
        payload = await self._request("POST", "/signup/", data=data)
        return self._to_session(payload)

    @staticmethod
    def _to_session(payload: Any) -> UserSession:
        """A 2xx reply can still carry an error payload instead of a user"""
        if not isinstance(payload, dict) or payload.get("error") or not payload.get("username"):
            message = payload.get("error") if isinstance(payload, dict) else None
            raise ReportStoreError(str(message or "Unexpected response"), payload=payload)
        return UserSession.model_validate(payload)
