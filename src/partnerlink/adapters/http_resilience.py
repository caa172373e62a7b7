"""Async HTTP access with retries, a client-side rate limit and JSON decoding."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import Retry, RetryTransport

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from partnerlink.config.http_resilience import ResilienceConfig, RetryPolicy

log = getLogger(__name__)


class UpstreamHTTPError(httpx.HTTPError):
    """A request that still failed after the retry budget was spent.

    ``status_code`` is ``None`` when no response arrived at all (timeouts,
    connection errors) or when the response body was not a JSON object.
    """

    def __init__(self, service: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service
        self.status_code = status_code


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_jitter=policy.backoff_jitter,
    )


def _build_async_client(
    config: ResilienceConfig,
    transport: httpx.AsyncBaseTransport | None,
) -> httpx.AsyncClient:
    retrying = RetryTransport(transport=transport, retry=build_retry(config.retry))
    hooks = {"response": list(config.response_hooks)} if config.response_hooks else None
    if config.base_url is None:
        return httpx.AsyncClient(
            timeout=config.timeout_seconds,
            transport=retrying,
            headers=config.headers(),
            event_hooks=hooks,
        )
    return httpx.AsyncClient(
        base_url=config.base_url,
        timeout=config.timeout_seconds,
        transport=retrying,
        headers=config.headers(),
        event_hooks=hooks,
    )


class ResilientClient:
    """Async HTTP client for one upstream service described by ``ResilienceConfig``.

    Requests pass through the rate limiter (when configured) before reaching
    the retrying transport. ``transport`` replaces the network transport
    underneath the retry layer, which is how tests plug in
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )
        self._client = _build_async_client(config, transport)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: str, *, params: Mapping[str, str] | None = None) -> httpx.Response:
        if self._limiter is None:
            return await self._client.get(url, params=params)
        async with self._limiter:
            return await self._client.get(url, params=params)

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
    ) -> dict[str, object]:
        """GET ``url`` and return its JSON object body.

        Raises:
            UpstreamHTTPError: on transport failure, a non-2xx status, or a
                body that is not a JSON object.
        """

        service = self.config.name
        try:
            response = await self.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            log.debug("%s answered HTTP %s for %s", service, status, exc.request.url)
            raise UpstreamHTTPError(
                service, f"HTTP {status} for {url}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamHTTPError(service, f"request to {url} failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamHTTPError(service, f"non-JSON body from {url}") from exc
        if not isinstance(payload, dict):
            raise UpstreamHTTPError(service, f"expected a JSON object from {url}")
        return payload
