"""
Rate limiting for API endpoints
"""
import time
from collections import defaultdict, deque
from fastapi import Request, HTTPException
from typing import Deque, Dict, Tuple
import logging

from dsalytics.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory sliding window rate limiter

    One timestamp deque per client; the longest window bounds its length.
    State is per process, so limits apply per worker.
    """

    def __init__(self, requests_per_minute: int = 60, requests_per_hour: int = 1000):
        self.windows: Tuple[Tuple[int, int], ...] = (
            (60, requests_per_minute),
            (3600, requests_per_hour),
        )
        self.horizon = max(seconds for seconds, _ in self.windows)
        self.history: Dict[str, Deque[float]] = defaultdict(deque)

    def _client_key(self, request: Request) -> str:
        """Authenticated user id when known, else remote address"""
        user_id = getattr(request.state, "user_id", None)
        if user_id:
            return f"user:{user_id}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    async def check_rate_limit(self, request: Request) -> None:
        """
        Record the request or reject it

        Raises:
            HTTPException: 429 if any window is exhausted
        """
        client = self._client_key(request)
        now = time.monotonic()
        hits = self.history[client]

        while hits and now - hits[0] >= self.horizon:
            hits.popleft()

        for seconds, limit in self.windows:
            recent = sum(1 for ts in hits if now - ts < seconds)
            if recent >= limit:
                logger.warning(f"Rate limit exceeded ({seconds}s window): {client}")
                raise HTTPException(
                    status_code=429,
                    detail={
                        "error": "rate_limit_exceeded",
                        "message": f"Too many requests. Limit: {limit} requests per {seconds} seconds",
                        "retry_after": seconds
                    }
                )

        hits.append(now)

    def reset(self) -> None:
        self.history.clear()


# Global instance
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR
)
