"""Pydantic schemas for GitHub API rate limit data.

Rate limit state arrives in two shapes:
- the GET /rate_limit endpoint (all pools at once)
- the x-ratelimit-* headers attached to every response (one pool)
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, Field, computed_field

REMAINING_HEADER = "x-ratelimit-remaining"


class RateLimitPool(StrEnum):
    """GitHub rate limit resource pools.

    Each pool has its own quota. Listing endpoints use 'core',
    issue search uses 'search'.
    See: https://docs.github.com/en/rest/rate-limit/rate-limit
    """

    CORE = "core"
    SEARCH = "search"
    GRAPHQL = "graphql"
    CODE_SEARCH = "code_search"
    INTEGRATION_MANIFEST = "integration_manifest"


class RateLimitStatus(StrEnum):
    """Rate limit health status.

    - HEALTHY: >= 50% remaining
    - WARNING: 20-50% remaining
    - CRITICAL: under 20% remaining
    - EXHAUSTED: 0 remaining
    """

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    EXHAUSTED = "exhausted"


class PoolRateLimit(BaseModel):
    """Quota state for one GitHub API resource pool."""

    pool: RateLimitPool = Field(description="Resource pool name")
    limit: int = Field(ge=0, description="Maximum requests allowed per window")
    remaining: int = Field(ge=0, description="Requests remaining in current window")
    used: int = Field(ge=0, description="Requests used in current window")
    reset_at: datetime = Field(description="UTC datetime when limit resets")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def usage_percent(self) -> float:
        """Percentage of rate limit consumed (0.0 to 100.0)."""
        if self.limit == 0:
            return 100.0
        return (self.used / self.limit) * 100

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining_percent(self) -> float:
        """Percentage of rate limit remaining (0.0 to 100.0)."""
        return 100.0 - self.usage_percent

    @property
    def is_exhausted(self) -> bool:
        """True when no calls are left in the current window."""
        return self.remaining == 0

    def seconds_until_reset(self, now: datetime | None = None) -> float:
        """Seconds from ``now`` until the window resets, clamped to zero."""
        now = now or datetime.now(UTC)
        return max(0.0, (self.reset_at - now).total_seconds())

    def get_status(
        self,
        healthy_threshold: float = 50.0,
        warning_threshold: float = 20.0,
    ) -> RateLimitStatus:
        """Categorize the remaining quota."""
        if self.remaining == 0:
            return RateLimitStatus.EXHAUSTED
        if self.remaining_percent >= healthy_threshold:
            return RateLimitStatus.HEALTHY
        if self.remaining_percent >= warning_threshold:
            return RateLimitStatus.WARNING
        return RateLimitStatus.CRITICAL

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        default_pool: RateLimitPool = RateLimitPool.CORE,
    ) -> Self | None:
        """Parse the x-ratelimit-* header triple of a single response.

        GitHub sends on every response:
        - x-ratelimit-limit
        - x-ratelimit-remaining
        - x-ratelimit-used
        - x-ratelimit-reset (epoch seconds)
        - x-ratelimit-resource (pool name)

        Returns:
            PoolRateLimit, or None when the response carries no rate limit headers
        """
        if REMAINING_HEADER not in headers:
            return None

        resource = headers.get("x-ratelimit-resource", default_pool.value)
        try:
            pool = RateLimitPool(resource)
        except ValueError:
            pool = default_pool

        limit = int(headers.get("x-ratelimit-limit", "0"))
        remaining = int(headers[REMAINING_HEADER])
        used = int(headers.get("x-ratelimit-used", str(max(0, limit - remaining))))
        reset_ts = int(headers.get("x-ratelimit-reset", "0"))
        reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts > 0 else datetime.now(UTC)

        return cls(pool=pool, limit=limit, remaining=remaining, used=used, reset_at=reset_at)


class RateLimitSnapshot(BaseModel):
    """Point-in-time view of all rate limit pools from GET /rate_limit."""

    timestamp: datetime = Field(description="When this snapshot was taken")
    pools: dict[RateLimitPool, PoolRateLimit] = Field(
        default_factory=dict, description="Rate limits by pool"
    )

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Self:
        """Parse from a GitHub /rate_limit API response dict."""
        pools: dict[RateLimitPool, PoolRateLimit] = {}
        resources = data.get("resources", {})

        for pool in RateLimitPool:
            r = resources.get(pool.value)
            if not r:
                continue
            pools[pool] = PoolRateLimit(
                pool=pool,
                limit=r["limit"],
                remaining=r["remaining"],
                used=r["used"],
                reset_at=datetime.fromtimestamp(r["reset"], tz=UTC),
            )

        return cls(timestamp=datetime.now(UTC), pools=pools)

    def get_pool(self, pool: RateLimitPool) -> PoolRateLimit | None:
        """Get rate limit for a specific pool."""
        return self.pools.get(pool)

    def get_core(self) -> PoolRateLimit | None:
        """Convenience accessor for the core pool."""
        return self.pools.get(RateLimitPool.CORE)


class TokenInfo(BaseModel):
    """What kind of credentials the quota implies.

    A personal access token gets 5000 requests/hour, unauthenticated access 60.
    """

    rate_limit: int = Field(description="Core rate limit")
    token_type: str = Field(description="Token type description")

    @property
    def is_pat(self) -> bool:
        return self.rate_limit >= 5000

    @classmethod
    def from_rate_limit(cls, limit: int) -> Self:
        return cls(rate_limit=limit, token_type="PAT" if limit >= 5000 else "unauthenticated")
