"""HTTP draft store client.

Talks to the draft API:
- POST  /api/drafts              -> {id, resume_url}
- GET   /api/drafts/{id}         -> draft
- PATCH /api/drafts/{id}         {data, step} -> draft
- POST  /api/drafts/{id}/submit  -> draft
- GET   /api/health              -> "ok"

Transport failures, non-success statuses and malformed bodies are mapped onto
the intake exception hierarchy so callers never see httpx types.
"""

import httpx
import structlog
from pydantic import ValidationError

from intake.core.config import get_settings
from intake.core.exceptions import DraftNotFoundError, DraftStoreError, SaveError, SubmitError
from intake.schemas.drafts import DraftRecord, NewDraft, PatchDraft

logger = structlog.get_logger(__name__)


class HttpDraftStore:
    """DraftStore implementation backed by the draft HTTP API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root, defaults to settings.api_base_url
            timeout: Per-request timeout in seconds, defaults to settings.http_timeout_seconds
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    async def _request(
        self,
        method: str,
        path: str,
        error: type[DraftStoreError],
        json: dict | None = None,
        not_found: str | None = None,
    ) -> httpx.Response:
        """Send a request, raising ``error`` on transport failure or non-2xx status.

        When ``not_found`` names a draft id, a 404 raises DraftNotFoundError for it.
        """
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.warning("draft_store_unreachable", method=method, path=path, error=str(e))
            raise error(f"{method} {path} failed: {e}") from e

        if response.is_success:
            return response
        if not_found is not None and response.status_code == 404:
            raise DraftNotFoundError(not_found)

        logger.warning("draft_store_rejected", method=method, path=path, status_code=response.status_code)
        raise error(f"{method} {path} returned {response.status_code}")

    @staticmethod
    def _parse_record(response: httpx.Response, error: type[DraftStoreError]) -> DraftRecord:
        try:
            return DraftRecord.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise error(f"Malformed draft payload: {e}") from e

    async def create(self) -> NewDraft:
        response = await self._request("POST", "/api/drafts", DraftStoreError)
        try:
            return NewDraft.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise DraftStoreError(f"Malformed create payload: {e}") from e

    async def fetch(self, draft_id: str) -> DraftRecord:
        response = await self._request("GET", f"/api/drafts/{draft_id}", DraftStoreError, not_found=draft_id)
        return self._parse_record(response, DraftStoreError)

    async def patch(self, draft_id: str, body: PatchDraft) -> DraftRecord:
        payload = body.model_dump(by_alias=True, exclude_none=True)
        response = await self._request("PATCH", f"/api/drafts/{draft_id}", SaveError, json=payload)
        return self._parse_record(response, SaveError)

    async def submit(self, draft_id: str) -> DraftRecord:
        response = await self._request("POST", f"/api/drafts/{draft_id}/submit", SubmitError)
        return self._parse_record(response, SubmitError)

    async def health(self) -> bool:
        """Return True if the API answers its health check with ``ok``."""
        try:
            response = await self._request("GET", "/api/health", DraftStoreError)
        except DraftStoreError:
            return False
        return response.text.strip() == "ok"
