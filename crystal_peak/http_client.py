from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx

from .config import HttpConfig
from .logging import get_logger

logger = get_logger(__name__)


class SourceError(Exception):
    """An upstream source could not be fetched or decoded."""

    def __init__(self, message: str, *, source: str | None = None, url: str | None = None) -> None:
        super().__init__(message)
        self.source = source
        self.url = url


class HttpFetcher:
    """Async httpx wrapper with a per-call timeout and a contact user agent.

    No retries: a failed or timed-out call raises :class:`SourceError` and the
    caller falls back to its default value.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        config: Optional[HttpConfig] = None,
    ) -> None:
        self.config = config or HttpConfig()
        self.client = client or httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            headers={"User-Agent": self.config.user_agent},
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def fetch(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        extra_headers: Optional[Dict[str, str]] = None,
        source: str | None = None,
        trace_id: str | None = None,
    ) -> httpx.Response:
        headers: Dict[str, str] = {"User-Agent": self.config.user_agent}
        if extra_headers:
            headers.update(extra_headers)

        logger.debug("http.fetch", trace_id=trace_id, source=source, url=url)
        try:
            response = await self.client.get(
                url,
                params=params,
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise SourceError(f"timed out after {self.config.timeout_seconds}s", source=source, url=url) from exc
        except httpx.HTTPError as exc:
            raise SourceError(f"request failed: {exc}", source=source, url=url) from exc

        if not response.is_success:
            raise SourceError(f"HTTP {response.status_code}", source=source, url=url)
        return response

    async def get_json(self, url: str, **kwargs: Any) -> Any:
        response = await self.fetch(url, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise SourceError("malformed JSON payload", source=kwargs.get("source"), url=url) from exc

    async def get_text(self, url: str, **kwargs: Any) -> str:
        response = await self.fetch(url, **kwargs)
        return response.text
