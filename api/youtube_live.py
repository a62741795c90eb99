"""Best-effort YouTube live detection by scraping public pages"""
import re
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum

import requests
from bs4 import BeautifulSoup

PROBE_TIMEOUT = 8  # seconds, per request

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)

BROWSER_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept-Language": "en-US,en;q=0.9,fr;q=0.8",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

# Markup signals that a watch page is currently broadcasting. These track
# YouTube's page format and will need revising when it changes; bump the
# version alongside any edit.
INDICATOR_POLICY_VERSION = "2024-05"
LIVE_INDICATORS = (
    re.compile(r'"isLiveNow"\s*:\s*true'),
    re.compile(r'"iconType"\s*:\s*"LIVE"'),
    re.compile(r'"liveBroadcastDetails"\s*:'),
    re.compile(r'itemprop="isLiveBroadcast"\s+content="True"', re.IGNORECASE),
)

WATCH_URL_RE = re.compile(r"/watch\?v=")
CANONICAL_WATCH_RE = re.compile(r"^https://www\.youtube\.com/watch\?v=([A-Za-z0-9_-]{11})$")
LOCALE_PARAM_RE = re.compile(r"[?&](hl|gl)=")


class LiveStatus(Enum):
    """Probe outcome; failures map to NOT_LIVE, there is no error member"""
    LIVE = "live"
    NOT_LIVE = "not_live"

    def __bool__(self):
        return self is LiveStatus.LIVE


def normalize_url(url):
    """Pin locale params to cut down on consent/region redirects"""
    url = str(url or "").strip()
    if url and not LOCALE_PARAM_RE.search(url):
        url += ("&" if "?" in url else "?") + "hl=en&gl=US"
    return url


def has_live_indicator(html):
    return any(pattern.search(html or "") for pattern in LIVE_INDICATORS)


def find_canonical_watch_id(html):
    """Video id from <link rel="canonical"> when it points at a watch page"""
    soup = BeautifulSoup(html or "", "html.parser")
    for link in soup.find_all("link", href=True):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if "canonical" not in rel:
            continue
        match = CANONICAL_WATCH_RE.match(link["href"])
        if match:
            return match.group(1)
    return None


def _read_body(response, deadline):
    """Read the body, giving up once the step's deadline has passed"""
    chunks = []
    for chunk in response.iter_content(chunk_size=16384):
        chunks.append(chunk)
        if time.monotonic() > deadline:
            raise TimeoutError(f"body not received within {PROBE_TIMEOUT}s")
    return b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")


def _fetch(session, url):
    deadline = time.monotonic() + PROBE_TIMEOUT
    response = session.get(
        url, headers=BROWSER_HEADERS, timeout=PROBE_TIMEOUT, allow_redirects=True, stream=True
    )
    try:
        return response.url or url, _read_body(response, deadline)
    finally:
        response.close()


def _bounded_fetch(session, url):
    """Run one fetch step with a hard wall-clock limit.

    The requests timeout only bounds connect and the gap between reads, so a
    server trickling bytes could hold the step open indefinitely.
    """
    executor = ThreadPoolExecutor(max_workers=1)
    try:
        return executor.submit(_fetch, session, url).result(timeout=PROBE_TIMEOUT)
    finally:
        executor.shutdown(wait=False)


def probe(url, session=None):
    """Classify a channel, /live or watch URL.

    Prefers false negatives: only a confirmed watch page carrying a live
    indicator counts as LIVE. Never raises.
    """
    session = session or requests
    try:
        url = normalize_url(url)
        if not url:
            return LiveStatus.NOT_LIVE

        final_url, html = _bounded_fetch(session, url)

        # Landed on a watch page (e.g. /live redirected to the current stream)
        if WATCH_URL_RE.search(final_url):
            return LiveStatus.LIVE if has_live_indicator(html) else LiveStatus.NOT_LIVE

        # Channel pages embed the active stream as the canonical link
        video_id = find_canonical_watch_id(html)
        if video_id:
            watch_url = f"https://www.youtube.com/watch?v={video_id}&hl=en&gl=US"
            _, watch_html = _bounded_fetch(session, watch_url)
            return LiveStatus.LIVE if has_live_indicator(watch_html) else LiveStatus.NOT_LIVE
    except Exception as e:
        print(f"Live probe failed for {url}: {e}")
    return LiveStatus.NOT_LIVE


def is_youtube_live(url, session=None):
    return probe(url, session) is LiveStatus.LIVE
