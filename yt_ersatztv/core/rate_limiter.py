"""Rate limiting implementation using token bucket algorithm.

This module provides per-client, per-category rate limiting with burst
support. Bucket state is kept in an injected CacheStore so that it can be
shared or replaced without touching module globals.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import structlog

from yt_ersatztv.core.cache import CacheStore

logger = structlog.get_logger(__name__)


@dataclass
class TokenBucket:
    """Token bucket for rate limiting.

    Attributes:
        capacity: Maximum number of tokens (burst capacity)
        refill_rate: Tokens added per second
        tokens: Current token count
        last_refill: Timestamp of last refill
    """

    capacity: int
    refill_rate: float
    tokens: float
    last_refill: float = field(default=0.0)


@dataclass
class RateLimitConfig:
    """Configuration for a rate limit category.

    Attributes:
        rpm: Requests per minute
        burst_capacity: Maximum burst size (tokens)
    """

    rpm: int
    burst_capacity: int = 20


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate limit check.

    Attributes:
        allowed: True if the request is within the limit
        retry_after: Seconds to wait before retrying (0 if allowed)
        limit: Requests per minute for the category
        remaining: Whole tokens left after this request
    """

    allowed: bool
    retry_after: float
    limit: int
    remaining: int


class RateLimiter:
    """Token bucket rate limiter with per-client, per-category limits.

    Example:
        limiter = RateLimiter(MemoryCacheStore())
        result = await limiter.check_rate_limit("203.0.113.7", "convert")
        if not result.allowed:
            # Return 429 with Retry-After header
            pass
    """

    DEFAULT_LIMITS: Dict[str, RateLimitConfig] = {
        "convert": RateLimitConfig(rpm=60, burst_capacity=20),
    }

    # Endpoint path prefix to category mapping
    ENDPOINT_CATEGORIES: Dict[str, str] = {
        "/api/convert": "convert",
    }

    KEY_PREFIX = "ratelimit"

    def __init__(
        self,
        store: CacheStore,
        limits: Optional[Dict[str, RateLimitConfig]] = None,
        endpoint_categories: Optional[Dict[str, str]] = None,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize rate limiter.

        Args:
            store: Store holding bucket state
            limits: Custom limits per category. Uses DEFAULT_LIMITS if not provided.
            endpoint_categories: Custom endpoint to category mapping.
            timer: Clock used for refills (injectable for tests)
        """
        self.store = store
        self.limits = limits or self.DEFAULT_LIMITS.copy()
        self.endpoint_categories = endpoint_categories or self.ENDPOINT_CATEGORIES.copy()
        self._timer = timer

    @classmethod
    def from_config(cls, store: CacheStore, convert_rpm: int, burst_capacity: int) -> "RateLimiter":
        """Build a limiter from the rate_limiting config section values."""
        return cls(
            store,
            limits={"convert": RateLimitConfig(rpm=convert_rpm, burst_capacity=burst_capacity)},
        )

    def get_endpoint_category(self, path: str) -> Optional[str]:
        """Determine the rate limit category for an endpoint path.

        Args:
            path: The request URL path

        Returns:
            Category name or None if path is not rate limited
        """
        path = path.rstrip("/")

        for endpoint, category in self.endpoint_categories.items():
            if path == endpoint or path.startswith(f"{endpoint}/"):
                return category

        return None

    def _config_for(self, category: str) -> RateLimitConfig:
        config = self.limits.get(category)
        if config is None:
            # Unknown category, fall back to the first configured limit
            config = next(iter(self.limits.values()))
        return config

    def _bucket_key(self, client_id: str, category: str) -> str:
        return f"{self.KEY_PREFIX}:{category}:{client_id}"

    def _bucket_ttl(self, bucket: TokenBucket) -> float:
        # Long enough for an idle bucket to refill completely
        return bucket.capacity / bucket.refill_rate + 1.0

    def _refill_bucket(self, bucket: TokenBucket, now: float) -> None:
        elapsed = max(0.0, now - bucket.last_refill)
        bucket.tokens = min(bucket.capacity, bucket.tokens + elapsed * bucket.refill_rate)
        bucket.last_refill = now

    async def _load_bucket(self, key: str, config: RateLimitConfig, now: float) -> TokenBucket:
        try:
            bucket = await self.store.get(key)
        except Exception as e:
            logger.warning("rate_limit_store_read_failed", key=key, error=str(e))
            bucket = None

        if bucket is None:
            bucket = TokenBucket(
                capacity=config.burst_capacity,
                refill_rate=config.rpm / 60.0,  # Convert RPM to tokens per second
                tokens=float(config.burst_capacity),
                last_refill=now,
            )
        return bucket

    async def _save_bucket(self, key: str, bucket: TokenBucket) -> None:
        try:
            await self.store.put(key, bucket, self._bucket_ttl(bucket))
        except Exception as e:
            logger.warning("rate_limit_store_write_failed", key=key, error=str(e))

    async def check_rate_limit(self, client_id: str, category: str) -> RateLimitResult:
        """Check if a request is allowed under the rate limit.

        Args:
            client_id: Identifier of the caller (client IP)
            category: The rate limit category (e.g., "convert")

        Returns:
            RateLimitResult describing the decision
        """
        config = self._config_for(category)
        key = self._bucket_key(client_id, category)
        now = self._timer()

        bucket = await self._load_bucket(key, config, now)
        self._refill_bucket(bucket, now)

        if bucket.tokens >= 1.0:
            bucket.tokens -= 1.0
            await self._save_bucket(key, bucket)
            logger.debug(
                "rate_limit_check_passed",
                category=category,
                tokens_remaining=bucket.tokens,
            )
            return RateLimitResult(
                allowed=True,
                retry_after=0.0,
                limit=config.rpm,
                remaining=int(bucket.tokens),
            )

        tokens_needed = 1.0 - bucket.tokens
        retry_after = tokens_needed / bucket.refill_rate
        await self._save_bucket(key, bucket)

        logger.info(
            "rate_limit_exceeded",
            category=category,
            retry_after=retry_after,
            tokens_available=bucket.tokens,
        )
        return RateLimitResult(
            allowed=False,
            retry_after=retry_after,
            limit=config.rpm,
            remaining=0,
        )

    async def reset_bucket(self, client_id: str, category: str) -> None:
        """Reset the rate limit bucket for a client and category."""
        await self.store.delete(self._bucket_key(client_id, category))
