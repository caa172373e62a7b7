"""Retry, rate-limit and timeout settings for outbound HTTP clients."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

import httpx

from .env import env_float, env_int

if TYPE_CHECKING:
    from collections.abc import Mapping

ResponseHook = Callable[[httpx.Response], Awaitable[None] | None]

DEFAULT_RETRY_TOTAL: Final[int] = 3
DEFAULT_TIMEOUT_SECONDS: Final[float] = 20.0
DEFAULT_USER_AGENT: Final[str] = "partnerlink (reference-sheet reconciliation)"


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    total: int = DEFAULT_RETRY_TOTAL
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    respect_retry_after_header: bool = True
    # reads only; nothing partnerlink sends over HTTP mutates remote state
    allowed_methods: frozenset[str] = frozenset({"GET", "HEAD"})
    status_forcelist: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )
    backoff_jitter: float = 1.0


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float

    @classmethod
    def per_minute(cls, max_calls: int) -> RateLimit:
        return cls(max_calls=max_calls, per_seconds=60.0)


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    response_hooks: tuple[ResponseHook, ...] = ()
    default_headers: Mapping[str, str] | None = None
    user_agent: str = DEFAULT_USER_AGENT

    def headers(self) -> dict[str, str]:
        """Headers sent on every request; ``default_headers`` override the built-ins."""

        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if self.default_headers:
            headers.update(self.default_headers)
        return headers


def get_retry_policy() -> RetryPolicy:
    return RetryPolicy(total=env_int("PARTNERLINK_HTTP_MAX_RETRIES", DEFAULT_RETRY_TOTAL))


def get_timeout_seconds() -> float:
    return env_float("PARTNERLINK_HTTP_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
