"""httpx-based client for the subscription usage API.

``_get`` raises UsageTransientError / UsageNotEligibleError / UsageFetchError.
``fetch`` turns each of those into a FetchResult, so callers never see an
exception from this module.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import httpx

from src.config import settings
from src.usage_tracker.credentials import TokenProvider, default_token_provider
from src.usage_tracker.models import FetchOutcome, FetchResult
from src.usage_tracker.normalizer import normalize_usage

logger = logging.getLogger(__name__)

# 401 = token expired or invalid, 403 = token lacks the subscription scope
NOT_ELIGIBLE_STATUSES = frozenset({401, 403})


class UsageApiError(Exception):
    """Base class for usage API failures."""


class UsageTransientError(UsageApiError):
    """Raised when the API could not be reached or answered garbage."""


class UsageNotEligibleError(UsageApiError):
    """Raised when the credential is not entitled to usage data."""

    def __init__(self, status_code: int | None, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Not eligible for usage data ({status_code}): {detail}")


class UsageFetchError(UsageApiError):
    """Raised when the API returns an unexpected error status."""

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Usage API error {status_code}: {detail}")


class UsageFetcher(Protocol):
    """Anything that can produce one classified usage fetch."""

    async def fetch(self) -> FetchResult: ...


class UsageClient:
    """Async httpx client for the OAuth usage endpoint."""

    def __init__(
        self,
        token_provider: TokenProvider | None = None,
        url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token_provider = token_provider or default_token_provider()
        self._url = url or settings.usage_api_url
        self._timeout = timeout or settings.usage_request_timeout
        self._transport = transport

    @staticmethod
    def build_headers(token: str) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
            "anthropic-beta": settings.usage_beta_header,
            "User-Agent": settings.usage_client_id,
        }

    async def _get(self, token: str) -> Any:
        """Perform the GET and return the decoded JSON body."""
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get(self._url, headers=self.build_headers(token))
        except httpx.TimeoutException as e:
            raise UsageTransientError("Usage request timed out") from e
        except httpx.RequestError as e:
            # Covers transport failures and undecodable bodies (bad gzip etc.)
            raise UsageTransientError(f"Usage API unreachable: {e}") from e

        if resp.status_code in NOT_ELIGIBLE_STATUSES:
            raise UsageNotEligibleError(resp.status_code, resp.text[:200])
        if not resp.is_success:
            raise UsageFetchError(resp.status_code, resp.text[:200])

        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise UsageTransientError(f"Malformed usage response: {e}") from e

    async def fetch(self) -> FetchResult:
        """Fetch and classify the current usage. Never raises."""
        token = self._token_provider()
        if not token:
            logger.debug("No OAuth token available, usage is not eligible")
            return FetchResult(outcome=FetchOutcome.NOT_ELIGIBLE, detail="no token")

        try:
            body = await self._get(token)
        except UsageNotEligibleError as e:
            logger.debug("Usage not available for this account (%s)", e.status_code)
            return FetchResult(
                outcome=FetchOutcome.NOT_ELIGIBLE,
                status_code=e.status_code,
                detail=e.detail,
            )
        except UsageFetchError as e:
            logger.error("Usage fetch failed: %s", e)
            return FetchResult(
                outcome=FetchOutcome.ERROR,
                status_code=e.status_code,
                detail=e.detail,
            )
        except UsageTransientError as e:
            logger.warning("Usage fetch skipped this cycle: %s", e)
            return FetchResult(outcome=FetchOutcome.TRANSIENT_FAILURE, detail=str(e))

        return FetchResult.ok(normalize_usage(body))
