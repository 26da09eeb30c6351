"""
Client for the static competition site.

The site serves ``problems.json``, one ``<id>.html`` page per challenge and
precomputed rankings under ``rank/``. The HTTP transport is injected so callers
and tests can run without a live network.
"""

from typing import List, Optional, Type, TypeVar

import httpx
import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..config import CONTENT_BASE_URL, CONTENT_TIMEOUT_SECONDS
from .models import ChallengeRecord, LadderRecord, RankingRecord

log = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)


class ContentAPIError(Exception):
    """Base exception for content site errors."""
    pass


class NetworkError(ContentAPIError):
    """The request never produced a response."""
    pass


class ServerError(ContentAPIError):
    """The site answered with a non-2xx status."""

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(f"Server error {status_code} for {url}")


class DecodingError(ContentAPIError):
    """The response body could not be decoded."""
    pass


class ContentClient:
    """Async reader for the competition site."""

    def __init__(
        self,
        base_url: str = CONTENT_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = CONTENT_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "ContentClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: Optional[dict] = None) -> httpx.Response:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            log.warning("content_fetch_failed", path=path, error=str(e))
            raise NetworkError(f"Request to {path} failed: {e}") from e

        if not response.is_success:
            log.warning("content_fetch_status", path=path, status=response.status_code)
            raise ServerError(response.status_code, str(response.url))
        return response

    async def _get_list(self, path: str, model: Type[T], params: Optional[dict] = None) -> List[T]:
        response = await self._get(path, params=params)
        try:
            return TypeAdapter(List[model]).validate_json(response.content)
        except ValidationError as e:
            raise DecodingError(f"Invalid payload from {path}: {e}") from e

    async def fetch_challenges(self) -> List[ChallengeRecord]:
        """All published challenges."""
        return await self._get_list("/problems.json", ChallengeRecord)

    async def fetch_challenge_detail(self, challenge_id: int) -> str:
        """The rendered HTML detail page for a challenge."""
        response = await self._get(f"/{challenge_id}.html")
        try:
            return response.content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodingError(f"Detail page for challenge {challenge_id} is not UTF-8") from e

    async def fetch_ranking(self, problem_id: int) -> List[RankingRecord]:
        """Published leaderboard for one challenge."""
        return await self._get_list("/rank/week.json", RankingRecord, params={"problem": problem_id})

    async def fetch_ladder(self) -> List[LadderRecord]:
        """Published aggregate ladder."""
        return await self._get_list("/rank/ladder.json", LadderRecord)
