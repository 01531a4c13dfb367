from __future__ import annotations

import asyncio
import re
from typing import List

from asyncio_throttle import Throttler

from notegen.agents.model_client import ModelClient
from notegen.agents.topic_analyzer_agent import analyze_topics
from notegen.core.errors import NotAuthenticated, ValidationError
from notegen.core.logging_config import get_logger, setup_logging
from notegen.models.article_schemas import TopicCandidate
from notegen.tools.x_scraper import XScraper

logger = get_logger(__name__)

MAX_KEYWORDS = 5
POSTS_PER_KEYWORD = 10


def extract_keywords(strategy: str) -> List[str]:
    """Split a free-text strategy on commas and whitespace into at most 5 keywords."""
    return [k for k in re.split(r"[、,\s]+", strategy) if k.strip()][:MAX_KEYWORDS]


class TopicCollectionService:
    """
    Collects article topic ideas from X: searches posts per keyword, reads trends,
    and asks the model to pick candidates that fit the user's strategy.
    """

    def __init__(self, scraper: XScraper, model_client: ModelClient, rate_limit: int = 1, period: float = 1.0):
        self.scraper = scraper
        self.model_client = model_client
        # at most rate_limit browser sessions per period
        self.throttler = Throttler(rate_limit=rate_limit, period=period)

    async def collect(self, strategy: str) -> List[TopicCandidate]:
        if not strategy or not strategy.strip():
            raise ValidationError("Enter a collection strategy first")
        if not self.scraper.is_authenticated():
            raise NotAuthenticated("Enter your auth_token first")

        keywords = extract_keywords(strategy)
        logger.info("Collecting topics for: %s", ", ".join(keywords))

        all_posts = []
        for keyword in keywords:
            async with self.throttler:
                logger.info("  Searching: %s", keyword)
                all_posts.extend(await self.scraper.search_posts(keyword, POSTS_PER_KEYWORD))

        async with self.throttler:
            logger.info("  Fetching trends...")
            trends = await self.scraper.get_trends()

        logger.info("  Got %d posts and %d trends", len(all_posts), len(trends))
        candidates = await analyze_topics(self.model_client, strategy, all_posts, trends)
        return candidates


if __name__ == "__main__":
    from notegen.core.config import Config
    from notegen.services.workflow_data_manager import WorkflowDataManager

    async def main():
        config = Config.from_env()
        setup_logging(config.LOGGING_LEVEL)
        service = TopicCollectionService(
            XScraper(config),
            ModelClient(config, temperature=config.TOPIC_TEMPERATURE),
        )
        candidates = await service.collect(input("Enter your content strategy: "))
        WorkflowDataManager(config.DATA_DIR).add_topic_candidates(candidates)
        for candidate in candidates:
            print(f"[{candidate.relevance}] {candidate.title} ({candidate.keyword})")

    asyncio.run(main())
