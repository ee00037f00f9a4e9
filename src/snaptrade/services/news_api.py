"""
newsapi.org client used to gather recent headlines for an asset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://newsapi.org/v2/everything"


class NewsApiArticle(BaseModel):
    title: str | None = None
    description: str | None = None
    summary: str | None = None
    url: str | None = None
    source: dict[str, Any] | str | None = None
    publishedAt: str | None = None

    def source_name(self) -> str | None:
        if isinstance(self.source, dict):
            name = self.source.get("name")
            return name if isinstance(name, str) else None
        return self.source

    def summary_text(self) -> str | None:
        return self.summary or self.description

    def prompt_block(self) -> str:
        """Render the article the way the sentiment prompt expects it."""
        return (
            f"Title: {self.title or 'No title available'}\n"
            f"Summary: {self.summary_text() or 'No summary available'}\n"
            f"Source: {self.source_name() or 'Unknown source'}\n"
        )


class NewsApiResponse(BaseModel):
    status: str | None = None
    totalResults: int | None = None
    articles: list[NewsApiArticle] = Field(default_factory=list)


def search_query(asset: str) -> str:
    """
    Turn an asset symbol into a search phrase, e.g. "EUR/USD" -> "EUR USD".
    """
    return asset.replace("/", " ", 1).replace("-", " ", 1)


@dataclass
class NewsApiClient:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0
    _http_client: Optional[httpx.AsyncClient] = field(default=None, repr=False)

    async def fetch_for_asset(self, asset: str, *, page_size: int = 10) -> list[NewsApiArticle]:
        """
        Fetch the most recent English-language articles mentioning the asset.
        """

        params = {
            "q": search_query(asset),
            "sortBy": "publishedAt",
            "language": "en",
            "pageSize": page_size,
            "apiKey": self.api_key,
        }

        if self._http_client is not None:
            response = await self._http_client.get(self.base_url, params=params)
            response.raise_for_status()
            payload = response.json()
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                payload = response.json()

        try:
            parsed = NewsApiResponse(**payload)
        except ValidationError as exc:
            logger.error("Failed to parse newsapi.org response: %s", exc)
            raise

        logger.debug("Fetched %s articles for %s", len(parsed.articles), asset)
        return parsed.articles
