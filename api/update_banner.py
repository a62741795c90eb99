"""Vercel serverless function to update the banner config stored on GitHub"""
from http.server import BaseHTTPRequestHandler
import hmac
import json
import traceback
from datetime import datetime, timezone

from api.github_contents import GitHubContentsClient
from api.shared import (
    ApiError,
    BadRequest,
    ConfigurationError,
    Unauthorized,
    cors_headers,
    get_settings,
    resolve_origin,
    send,
)

ALLOWED_METHODS = "POST"


def bearer_token(authorization):
    authorization = authorization or ""
    return authorization[7:] if authorization.startswith("Bearer ") else ""


def check_auth(authorization, settings):
    """Fail closed: an unset ADMIN_SECRET rejects everyone"""
    token = bearer_token(authorization)
    if not settings.admin_secret or not hmac.compare_digest(
        token.encode("utf-8"), settings.admin_secret.encode("utf-8")
    ):
        raise Unauthorized("Unauthorized")


def is_iso_date(value):
    if not value:
        return True
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def parse_payload(body):
    """Parse and shape-check the request body"""
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    try:
        payload = json.loads(body or "{}")
    except ValueError:
        raise BadRequest("Bad JSON")

    if not isinstance(payload, dict) or not payload.get("title") or not payload.get("id"):
        raise BadRequest("Missing id/title")

    if not is_iso_date(payload.get("start")) or not is_iso_date(payload.get("end")):
        raise BadRequest("Bad date format")
    return payload


def merge_banner(current, payload):
    """Shallow merge: payload keys win, keys only in current are kept"""
    merged = dict(current or {})
    merged.update(payload)
    return merged


def commit_message():
    return f"chore(banner): update by admin ({datetime.now(timezone.utc).isoformat()})"


def save_banner(payload, client):
    """Read, merge and conditionally write back; one commit per successful call"""
    remote = client.read()
    merged = merge_banner(remote.content, payload)
    client.write(merged, remote.sha, commit_message())
    return merged


def update_banner(body, authorization, settings, client=None):
    """Run the update flow and return (status, body) for the HTTP layer"""
    try:
        check_auth(authorization, settings)

        missing = settings.missing_banner_settings()
        if missing:
            print(f"update_banner: missing settings {', '.join(missing)}")
            raise ConfigurationError("Missing env")

        payload = parse_payload(body)
        if client is None:
            client = GitHubContentsClient.from_settings(settings)

        saved = save_banner(payload, client)
        print(f"update_banner: saved banner id={payload.get('id')!r}")
        return 200, {"ok": True, "saved": saved}
    except ApiError as e:
        if e.status >= 500:
            print(f"Error in update_banner: {e.message}")
        return e.status, e.message
    except Exception as e:
        print(f"Error in update_banner: {e}")
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

    def _read_body(self):
        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            raise BadRequest("Bad Content-Length")
        if length < 0:
            raise BadRequest("Bad Content-Length")
        return self.rfile.read(length) if length else b""

    def do_POST(self):
        try:
            body = self._read_body()
        except BadRequest as e:
            send(self, e.status, e.message, self._headers())
            return
        status, response = update_banner(body, self.headers.get("Authorization"), get_settings())
        send(self, status, response, self._headers())

    def _method_not_allowed(self):
        send(self, 405, "Method Not Allowed", self._headers())

    do_GET = _method_not_allowed
    do_PUT = _method_not_allowed
    do_PATCH = _method_not_allowed
    do_DELETE = _method_not_allowed

    def do_HEAD(self):
        send(self, 405, None, self._headers())
