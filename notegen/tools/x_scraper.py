"""
Topic source backed by X (Twitter), scraped through an authenticated browser session.

The user copies the `auth_token` (and optionally `ct0`) cookie from their own browser;
those are stored on disk and injected into a headless crawl4ai browser for every call.
Two calls running at once each open their own browser but share the same cookie, so
they are not isolated from each other on X's side.
"""
from __future__ import annotations

import base64
import json
import re
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional
from urllib.parse import quote

from bs4 import BeautifulSoup
from crawl4ai import AsyncWebCrawler, BrowserConfig, CacheMode, CrawlerRunConfig

from notegen.core.config import Config
from notegen.core.errors import NotAuthenticated, SessionExpired, ValidationError
from notegen.core.logging_config import get_logger
from notegen.models.article_schemas import XPost
from notegen.models.storage_schemas import SavedCookies

logger = get_logger(__name__)

X_BASE_URL = "https://x.com"
TRENDS_URL = f"{X_BASE_URL}/explore/tabs/trending"
TWEET_SELECTOR = 'article[data-testid="tweet"]'
TREND_SELECTOR = '[data-testid="trend"]'
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MAX_TRENDS = 20

LIKE_PATTERN = re.compile(r"(\d[\d,]*)\s*(?:Likes?|likes?|いいね)")
REPOST_PATTERN = re.compile(r"(\d[\d,]*)\s*(?:Reposts?|reposts?|リポスト|リツイート)")
TREND_NOISE = ("Trending", "トレンド", "posts", "件のポスト")


def _count(pattern: re.Pattern, label: str) -> Optional[int]:
    match = pattern.search(label)
    return int(match.group(1).replace(",", "")) if match else None


def parse_posts(html: str) -> List[XPost]:
    """Extract posts from a rendered search page. Posts without text are skipped."""
    soup = BeautifulSoup(html, "html.parser")
    posts = []
    for article in soup.select(TWEET_SELECTOR):
        text_el = article.select_one('[data-testid="tweetText"]')
        text = text_el.get_text().strip() if text_el else ""
        if not text:
            continue

        author_link = article.select_one('a[role="link"][href*="/"]')
        author = author_link.get("href", "").replace("/", "", 1) if author_link else ""

        likes = reposts = 0
        for el in article.select("[aria-label]"):
            label = el.get("aria-label", "")
            likes = _count(LIKE_PATTERN, label) or likes
            reposts = _count(REPOST_PATTERN, label) or reposts

        time_el = article.find("time")
        tweet_link = time_el.find_parent("a") if time_el else None
        url = f"{X_BASE_URL}{tweet_link.get('href')}" if tweet_link and tweet_link.get("href") else ""

        posts.append(XPost(text=text, author=author, like_count=likes, repost_count=reposts, url=url))
    return posts


def parse_trends(html: str) -> List[str]:
    """Extract trend names, skipping headers, counts and duplicates. Order is preserved."""
    soup = BeautifulSoup(html, "html.parser")
    trends: list[str] = []
    for cell in soup.select(TREND_SELECTOR):
        for span in cell.find_all("span"):
            text = span.get_text().strip()
            if (
                len(text) > 1
                and not text[0].isdigit()
                and not any(noise in text for noise in TREND_NOISE)
                and text not in trends
            ):
                trends.append(text)
    return trends[:MAX_TRENDS]


def is_login_page(url: str, html: str = "") -> bool:
    if "/login" in (url or ""):
        return True
    soup = BeautifulSoup(html or "", "html.parser")
    return soup.select_one('input[autocomplete="username"]') is not None


class XScraper:
    def __init__(
        self,
        config: Config,
        crawler_factory: Callable[..., AsyncWebCrawler] = AsyncWebCrawler,
    ):
        self.config = config
        self.cookie_path = config.X_COOKIE_PATH
        self.crawler_factory = crawler_factory

    # ── credentials ──────────────────────────────────────────────────────────

    def save_credential(self, auth_token: str, ct0: Optional[str] = None) -> None:
        """Save the auth cookies copied from the user's browser DevTools."""
        if not auth_token or not auth_token.strip():
            raise ValidationError("auth_token is required")
        data = SavedCookies(
            auth_token=auth_token.strip(),
            ct0=(ct0 or "").strip(),
            saved_at=datetime.now(timezone.utc).isoformat(),
        )
        self.cookie_path.parent.mkdir(parents=True, exist_ok=True)
        self.cookie_path.write_text(data.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        logger.info("Saved X cookies to %s", self.cookie_path)

    def is_authenticated(self) -> bool:
        return self._load_cookies() is not None

    def clear_credential(self) -> None:
        if self.cookie_path.exists():
            self.cookie_path.unlink()
            logger.info("Deleted X cookies")

    def _load_cookies(self) -> Optional[SavedCookies]:
        if not self.cookie_path.exists():
            return None
        try:
            data = SavedCookies.model_validate(json.loads(self.cookie_path.read_text(encoding="utf-8")))
        except ValueError as e:
            logger.warning("Ignoring unreadable cookie file %s: %s", self.cookie_path, e)
            return None
        return data if data.auth_token else None

    # ── browser ──────────────────────────────────────────────────────────────

    def _browser_config(self) -> BrowserConfig:
        data = self._load_cookies()
        if data is None:
            raise NotAuthenticated("No X cookies saved. Enter your auth_token first.")

        cookies = [
            {
                "name": "auth_token",
                "value": data.auth_token,
                "domain": ".x.com",
                "path": "/",
                "httpOnly": True,
                "secure": True,
                "sameSite": "None",
            }
        ]
        if data.ct0:
            cookies.append(
                {
                    "name": "ct0",
                    "value": data.ct0,
                    "domain": ".x.com",
                    "path": "/",
                    "httpOnly": False,
                    "secure": True,
                    "sameSite": "Lax",
                }
            )

        return BrowserConfig(
            headless=not self.config.DEBUG_SCRAPER,
            verbose=False,
            user_agent=USER_AGENT,
            viewport_width=1280,
            viewport_height=800,
            cookies=cookies,
        )

    async def _fetch(self, url: str, selector: str, scroll: bool = False) -> Optional[str]:
        """
        Render `url` in the authenticated browser and return its HTML.

        Returns None when the page loaded but `selector` never appeared (no results).
        Raises SessionExpired when X sent the browser to its login page.
        """
        browser_config = self._browser_config()
        wait_condition = (
            f"js:() => document.querySelector('{selector}') !== null "
            f"|| window.location.pathname.includes('/login')"
        )
        crawler_config = CrawlerRunConfig(
            cache_mode=CacheMode.BYPASS,
            wait_for=wait_condition,
            page_timeout=60000,
            js_code=["window.scrollBy(0, 800);"] * 3 if scroll else None,
            delay_before_return_html=2.0,
            screenshot=self.config.DEBUG_SCRAPER,
            verbose=False,
        )

        logger.info("Opening %s", url)
        async with self.crawler_factory(config=browser_config) as crawler:
            result = await crawler.arun(url=url, config=crawler_config)

        final_url = getattr(result, "redirected_url", None) or result.url or url
        html = result.html or ""
        if result.screenshot:
            self._save_debug_screenshot(result.screenshot)

        if is_login_page(final_url, html):
            raise SessionExpired("The X session has expired. Save a fresh auth_token.")
        if not result.success:
            logger.warning("No %s found at %s: %s", selector, final_url, result.error_message)
            return None
        return html

    def _save_debug_screenshot(self, screenshot_b64: str) -> None:
        self.config.X_DEBUG_DIR.mkdir(parents=True, exist_ok=True)
        path = self.config.X_DEBUG_DIR / f"page-{int(time.time() * 1000)}.png"
        path.write_bytes(base64.b64decode(screenshot_b64))
        logger.debug("Saved screenshot to %s", path)

    # ── topic source ─────────────────────────────────────────────────────────

    async def search_posts(self, keyword: str, limit: int = 15) -> List[XPost]:
        """Search X for top posts matching `keyword`. An empty list means nothing matched."""
        url = f"{X_BASE_URL}/search?q={quote(keyword)}&src=typed_query&f=top"
        html = await self._fetch(url, TWEET_SELECTOR, scroll=True)
        if html is None:
            return []
        posts = parse_posts(html)
        logger.info("Extracted %d posts for %s", len(posts), keyword)
        return posts[:limit]

    async def get_trends(self) -> List[str]:
        html = await self._fetch(TRENDS_URL, TREND_SELECTOR)
        if html is None:
            return []
        trends = parse_trends(html)
        logger.info("Extracted %d trends", len(trends))
        return trends
