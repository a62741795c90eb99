"""Vercel serverless function reporting which streams are live right now"""
from http.server import BaseHTTPRequestHandler
import math
import traceback
from concurrent.futures import ThreadPoolExecutor

import requests

from api.live_cache import LiveCache
from api.shared import (
    ApiError,
    ConfigurationError,
    UpstreamError,
    cors_headers,
    get_settings,
    resolve_origin,
    send,
    utc_now_iso,
)
from api.youtube_live import is_youtube_live

ALLOWED_METHODS = "GET"
UPSTREAM_TIMEOUT = 10

# Warm cache (survives between requests on the same function instance)
live_cache = LiveCache()


def fetch_stream_list(url, now_ms, session=None):
    """Fetch the stream list JSON, bypassing intermediary caches"""
    session = session or requests
    separator = "&" if "?" in url else "?"
    response = session.get(
        f"{url}{separator}t={now_ms}",
        headers={"Cache-Control": "no-cache", "Pragma": "no-cache"},
        timeout=UPSTREAM_TIMEOUT,
    )
    if not response.ok:
        raise UpstreamError(f"Upstream {response.status_code}")
    return response.json()


def coerce_version(value):
    try:
        version = float(value)
    except (TypeError, ValueError):
        return 1
    if not math.isfinite(version) or version == 0:
        return 1
    return int(version) if version.is_integer() else version


def resolve_stream(stream, probe=is_youtube_live):
    """Copy of the entry with liveNow filled in; a boolean liveNow is a manual override"""
    out = dict(stream) if isinstance(stream, dict) else {}
    if isinstance(out.get("liveNow"), bool):
        return out

    platform = str(out.get("platform") or "youtube").lower()
    if platform == "youtube" and out.get("url"):
        out["liveNow"] = bool(probe(out["url"]))
    else:
        # Only YouTube is probed; anything else is reported offline
        out["liveNow"] = False
    return out


def resolve_streams(streams, probe=is_youtube_live):
    """Resolve all entries at once (one worker each), keeping the original order"""
    if not streams:
        return []
    with ThreadPoolExecutor(max_workers=len(streams)) as executor:
        return list(executor.map(lambda stream: resolve_stream(stream, probe), streams))


def build_live_payload(settings, cache, session=None, probe=is_youtube_live):
    """Cached payload, or a freshly computed one stored back into the cache"""
    if not settings.live_json_url:
        raise ConfigurationError("LIVE_JSON_URL missing")

    cached = cache.get()
    if cached is not None:
        return cached

    started_at = cache.clock()
    data = fetch_stream_list(settings.live_json_url, int(started_at * 1000), session)
    if not isinstance(data, dict):
        data = {}
    streams = data.get("streams")
    if not isinstance(streams, list):
        streams = []

    resolved = resolve_streams(streams, probe)
    payload = {
        "version": coerce_version(data.get("version")),
        "checkedAt": utc_now_iso(),
        "streams": resolved,
    }
    cache.set(payload, captured_at=started_at)
    print(f"check_live: refreshed {len(payload['streams'])} streams")
    return payload


def get_live_statuses(settings, cache=None, session=None, probe=is_youtube_live):
    """Return (status, body) for the HTTP layer"""
    cache = live_cache if cache is None else cache
    try:
        return 200, build_live_payload(settings, cache, session, probe)
    except ApiError as e:
        print(f"Error in check_live: {e.message}")
        return e.status, e.message
    except Exception as e:
        print(f"Error in check_live: {e}")
        traceback.print_exc()
        return 500, "error"


class handler(BaseHTTPRequestHandler):
    def log_message(self, format, *args):
        """Override to prevent logging errors"""
        pass

    def _headers(self):
        return cors_headers(resolve_origin(self.headers.get("Origin"), get_settings()), ALLOWED_METHODS)

    def do_OPTIONS(self):
        send(self, 204, None, self._headers())

    def do_GET(self):
        status, response = get_live_statuses(get_settings())
        send(self, status, response, self._headers())

    def _method_not_allowed(self):
        send(self, 405, "Method Not Allowed", self._headers())

    do_POST = _method_not_allowed
    do_PUT = _method_not_allowed
    do_PATCH = _method_not_allowed
    do_DELETE = _method_not_allowed

    def do_HEAD(self):
        send(self, 405, None, self._headers())
