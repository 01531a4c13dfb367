from __future__ import annotations

from typing import List, Optional

import httpx
from pydantic import BaseModel

from notegen.core.config import Config
from notegen.core.errors import ResearchUnavailable
from notegen.core.logging_config import get_logger

logger = get_logger(__name__)

TAVILY_SEARCH_URL = "https://api.tavily.com/search"


class SearchHit(BaseModel):
    title: str = ""
    url: str = ""
    content: str = ""
    score: Optional[float] = None


class SearchResponse(BaseModel):
    answer: str = ""
    results: List[SearchHit] = []


class TavilySearchClient:
    """Web-search collaborator backed by the Tavily search API.

    Args:
        config: Supplies TAVILY_API_KEY.
        transport: Optional httpx transport, for tests or proxies.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        config: Config,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 60.0,
    ):
        self.config = config
        self.transport = transport
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return self.config.has_tavily_key

    async def search(
        self,
        query: str,
        max_results: int = 10,
        search_depth: str = "advanced",
    ) -> SearchResponse:
        """Run one search and return the synthesized answer plus ranked results.

        Raises:
            ResearchUnavailable: if no key is configured, the request fails, or
                Tavily answers with a non-success status.
        """
        if not self.is_configured:
            raise ResearchUnavailable("TAVILY_API_KEY is not set in your environment (.env.local).")

        payload = {
            "api_key": self.config.TAVILY_API_KEY,
            "query": query,
            "search_depth": search_depth,
            "include_answer": True,
            "include_raw_content": False,
            "max_results": max_results,
            "include_domains": [],
            "exclude_domains": [],
        }

        logger.info("Performing Tavily web search for: %s (max_results=%d)", query, max_results)

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(TAVILY_SEARCH_URL, json=payload)
                response.raise_for_status()
                results_data = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("Tavily search failed: %s - %s", status, e.response.text)
            raise ResearchUnavailable(
                f"Tavily API error: {status} {e.response.text}", status_code=status
            ) from e
        except httpx.RequestError as e:
            logger.error("Tavily search request error: %s", e)
            raise ResearchUnavailable(f"Tavily API request failed: {e}") from e
        except ValueError as e:
            logger.error("Tavily returned an unreadable body: %s", e)
            raise ResearchUnavailable(f"Tavily API returned invalid JSON: {e}") from e

        if not isinstance(results_data, dict):
            raise ResearchUnavailable(f"Tavily API returned {type(results_data).__name__}, expected an object")

        search_response = SearchResponse(
            answer=results_data.get("answer") or "",
            results=[
                SearchHit(
                    title=item.get("title") or "",
                    url=item.get("url") or "",
                    content=item.get("content") or "",
                    score=item.get("score"),
                )
                for item in results_data.get("results") or []
                if isinstance(item, dict)
            ],
        )
        logger.info("Tavily returned %d results", len(search_response.results))
        return search_response
