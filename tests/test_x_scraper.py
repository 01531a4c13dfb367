import asyncio
import base64
import json
from types import SimpleNamespace

import pytest

from notegen.core.errors import NotAuthenticated, SessionExpired, ValidationError
from notegen.tools.x_scraper import XScraper, is_login_page, parse_posts, parse_trends

SEARCH_HTML = """
<main>
  <article data-testid="tweet">
    <a role="link" href="/alice">Alice</a>
    <div data-testid="tweetText">Time blocking changed my week</div>
    <div aria-label="1,204 Likes. Like"></div>
    <div aria-label="87 reposts. Repost"></div>
    <a href="/alice/status/111"><time datetime="2026-10-18T10:00:00Z">Oct 18</time></a>
  </article>
  <article data-testid="tweet">
    <a role="link" href="/bob">Bob</a>
    <div data-testid="tweetText">   </div>
  </article>
  <article data-testid="tweet">
    <a role="link" href="/carol">Carol</a>
    <div data-testid="tweetText">Paper lists beat apps</div>
  </article>
</main>
"""

TRENDS_HTML = """
<div data-testid="trend"><span>1</span><span>Trending in Japan</span><span>#MondayMotivation</span><span>12.3K posts</span></div>
<div data-testid="trend"><span>Deep Work</span></div>
<div data-testid="trend"><span>#MondayMotivation</span></div>
"""

LOGIN_HTML = '<form><input autocomplete="username" name="text"></form>'


# ── parsers ───────────────────────────────────────────────────────────────────

def test_parse_posts():
    posts = parse_posts(SEARCH_HTML)

    assert [p.text for p in posts] == ["Time blocking changed my week", "Paper lists beat apps"]
    first = posts[0]
    assert first.author == "alice"
    assert first.like_count == 1204
    assert first.repost_count == 87
    assert first.url == "https://x.com/alice/status/111"
    assert posts[1].like_count == 0
    assert posts[1].url == ""


def test_parse_trends_drops_noise_and_duplicates():
    assert parse_trends(TRENDS_HTML) == ["#MondayMotivation", "Deep Work"]


def test_parse_trends_caps_at_twenty():
    html = "".join(f'<div data-testid="trend"><span>Topic {chr(65 + i)}{i}</span></div>' for i in range(25))
    assert len(parse_trends(html)) == 20


def test_is_login_page():
    assert is_login_page("https://x.com/i/flow/login")
    assert is_login_page("https://x.com/search?q=a", LOGIN_HTML)
    assert not is_login_page("https://x.com/search?q=a", SEARCH_HTML)


# ── credentials ───────────────────────────────────────────────────────────────

def test_save_and_clear_credential(config):
    scraper = XScraper(config)
    assert not scraper.is_authenticated()

    scraper.save_credential("  token-123 ", ct0="csrf")
    assert scraper.is_authenticated()
    saved = json.loads(config.X_COOKIE_PATH.read_text(encoding="utf-8"))
    assert saved["authToken"] == "token-123"
    assert saved["ct0"] == "csrf"

    scraper.clear_credential()
    assert not scraper.is_authenticated()
    assert not config.X_COOKIE_PATH.exists()


def test_empty_token_is_rejected(config):
    with pytest.raises(ValidationError):
        XScraper(config).save_credential("   ")


def test_corrupt_cookie_file_reads_as_unauthenticated(config):
    config.X_COOKIE_PATH.write_text("{not json", encoding="utf-8")
    assert not XScraper(config).is_authenticated()


# ── fetching with a stand-in crawler ──────────────────────────────────────────

class FakeCrawler:
    def __init__(self, result, log):
        self.result = result
        self.log = log

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def arun(self, url, config):
        self.log.append((url, config))
        return self.result


def _result(html="", url="https://x.com/search", success=True, screenshot=None):
    return SimpleNamespace(
        success=success,
        html=html,
        url=url,
        redirected_url=None,
        error_message="" if success else "Wait condition failed",
        screenshot=screenshot,
    )


def _scraper(config, result):
    log = []
    browsers = []

    def factory(config):
        browsers.append(config)
        return FakeCrawler(result, log)

    scraper = XScraper(config, crawler_factory=factory)
    scraper.save_credential("token-123", ct0="csrf")
    return scraper, log, browsers


def test_search_posts_injects_cookies_and_parses(config):
    scraper, log, browsers = _scraper(config, _result(SEARCH_HTML))
    posts = asyncio.run(scraper.search_posts("time blocking", limit=1))

    assert [p.author for p in posts] == ["alice"]
    assert "q=time%20blocking" in log[0][0]
    cookies = {c["name"]: c["value"] for c in browsers[0].cookies}
    assert cookies == {"auth_token": "token-123", "ct0": "csrf"}


def test_no_matching_elements_means_no_posts(config):
    scraper, _, _ = _scraper(config, _result(success=False))
    assert asyncio.run(scraper.search_posts("nothing")) == []


def test_get_trends(config):
    scraper, log, _ = _scraper(config, _result(TRENDS_HTML))
    assert asyncio.run(scraper.get_trends()) == ["#MondayMotivation", "Deep Work"]
    assert log[0][0] == "https://x.com/explore/tabs/trending"


def test_login_redirect_is_session_expired(config):
    scraper, _, _ = _scraper(config, _result(LOGIN_HTML, url="https://x.com/i/flow/login"))
    with pytest.raises(SessionExpired):
        asyncio.run(scraper.search_posts("q"))


def test_fetch_without_cookies_is_not_authenticated(config):
    scraper = XScraper(config, crawler_factory=lambda config: pytest.fail("browser should not start"))
    with pytest.raises(NotAuthenticated):
        asyncio.run(scraper.get_trends())


def test_debug_screenshot_is_saved(config):
    png = base64.b64encode(b"\x89PNG fake").decode()
    scraper, _, _ = _scraper(config, _result(TRENDS_HTML, screenshot=png))
    asyncio.run(scraper.get_trends())
    shots = list(config.X_DEBUG_DIR.glob("*.png"))
    assert len(shots) == 1
    assert shots[0].read_bytes() == b"\x89PNG fake"
