"""
ScoreClient - HTTP client for the remote compatibility score service.

The service takes two result ids as a form post and answers
{"score": <0-100>, "partner": "<id>"}.
"""

from typing import Optional, Protocol

import httpx

from matchbot.common.logging import get_logger
from matchbot.core.config import DEFAULT_MATCH_URL
from matchbot.core.errors import ScoreServiceError

logger = get_logger(__name__)

MIN_SCORE = 0
MAX_SCORE = 100


class ScoreService(Protocol):
    """Anything that can score a pair of result ids."""

    async def score(self, person: str, partner: str) -> int: ...


class ScoreClient:
    """
    Score service client over a shared httpx.AsyncClient.

    Usage:
        client = ScoreClient()
        score = await client.score("abc", "def")
        await client.aclose()
    """

    def __init__(
        self,
        url: str = DEFAULT_MATCH_URL,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def score(self, person: str, partner: str) -> int:
        """
        Ask the service for the compatibility of two results.

        Raises:
            ScoreServiceError: transport failure, non-2xx status or a
                response without a valid integer score
        """
        form = {"rauth[rid]": person, "partner": partner}
        try:
            response = await self._client.post(self.url, data=form)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ScoreServiceError(
                "Score service request failed",
                data={"person": person, "partner": partner},
                cause=e,
            ) from e

        score = body.get("score") if isinstance(body, dict) else None
        if isinstance(score, bool) or not isinstance(score, int) \
                or not MIN_SCORE <= score <= MAX_SCORE:
            raise ScoreServiceError(
                "Score service returned a malformed response",
                data={"person": person, "partner": partner, "body": str(body)[:200]},
            )

        logger.debug("Score fetched", data={
            "person": person,
            "partner": partner,
            "score": score,
        })
        return score

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
