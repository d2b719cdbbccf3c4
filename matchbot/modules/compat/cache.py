"""
MatchupCache - symmetric memoization over the score service.

Scores depend only on the unordered pair of result ids, so (a, b) and
(b, a) share one entry. Entries live for the process lifetime.

Locking: the cache lock covers only the dictionary check and insert. The
remote call runs with no lock held. Concurrent misses on the same pair
share one in-flight request: the first caller performs it, the others
await its future. A failed request is not cached; every waiter gets the
error and the next lookup retries.
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, Optional

from matchbot.common.logging import get_logger
from matchbot.core.connectors import ScoreService

logger = get_logger(__name__)


@dataclass(frozen=True)
class Matchup:
    """Unordered pair of result ids, smaller id first."""
    first: str
    second: str

    @classmethod
    def of(cls, a: str, b: str) -> 'Matchup':
        if a < b:
            return cls(a, b)
        return cls(b, a)


class MatchupCache:
    """Process-lifetime score cache keyed by Matchup."""

    def __init__(self, service: ScoreService):
        self._service = service
        self._scores: Dict[Matchup, int] = {}
        self._in_flight: Dict[Matchup, asyncio.Future] = {}
        self._lock = asyncio.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._scores)

    def __contains__(self, key: Matchup) -> bool:
        return key in self._scores

    def peek(self, a: str, b: str) -> Optional[int]:
        """Cached score for a pair, without calling the service."""
        return self._scores.get(Matchup.of(a, b))

    async def lookup_or_compute(self, person: str, partner: str) -> int:
        """
        Score for (person, partner), calling the service only on a miss.

        Raises:
            ScoreServiceError: the remote call failed (nothing is cached)
        """
        key = Matchup.of(person, partner)

        async with self._lock:
            score = self._scores.get(key)
            if score is not None:
                self.hits += 1
                return score

            pending = self._in_flight.get(key)
            owner = pending is None
            if owner:
                pending = asyncio.get_running_loop().create_future()
                self._in_flight[key] = pending
                self.misses += 1

        if not owner:
            # Shield so one cancelled waiter does not cancel the shared request.
            return await asyncio.shield(pending)

        try:
            score = await self._service.score(person, partner)
            async with self._lock:
                self._scores[key] = score
        except Exception as e:
            pending.set_exception(e)
            # Mark retrieved; waiters (if any) still receive it.
            pending.exception()
            raise
        except BaseException:
            pending.cancel()
            raise
        finally:
            self._in_flight.pop(key, None)

        pending.set_result(score)

        logger.debug("Matchup cached", data={
            "first": key.first,
            "second": key.second,
            "score": score,
        })
        return score

    def stats(self) -> Dict[str, int]:
        return {
            "entries": len(self._scores),
            "in_flight": len(self._in_flight),
            "hits": self.hits,
            "misses": self.misses,
        }
