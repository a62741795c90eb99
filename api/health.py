"""Vercel serverless function reporting which functions are configured"""
from http.server import BaseHTTPRequestHandler

from api.check_live import live_cache
from api.shared import cors_headers, get_settings, resolve_origin, send, utc_now_iso


def health_status(settings, cache=None):
    """Booleans only; never echo secrets"""
    cache = live_cache if cache is None else cache
    age = cache.age()
    return {
        "message": "API is working",
        "update_banner_configured": bool(settings.admin_secret) and not settings.missing_banner_settings(),
        "check_live_configured": not settings.missing_live_settings(),
        "live_cache_age_seconds": round(age, 1) if age is not None else None,
        "timestamp": utc_now_iso(),
    }


class handler(BaseHTTPRequestHandler):
    def log_message(self, format, *args):
        """Override to prevent logging errors"""
        pass

    def _headers(self):
        return cors_headers(resolve_origin(self.headers.get("Origin"), get_settings()), "GET")

    def do_GET(self):
        send(self, 200, health_status(get_settings()), self._headers())

    def do_OPTIONS(self):
        send(self, 204, None, self._headers())
