"""Shared utilities for Vercel serverless functions"""
import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone

from dotenv import load_dotenv

# Load environment variables from .env file (no-op when deployed)
load_dotenv()


@dataclass(frozen=True)
class Settings:
    admin_secret: str = ""
    github_token: str = ""
    banner_repo: str = ""
    banner_path: str = ""
    banner_branch: str = ""
    allowed_origin: str = ""
    live_json_url: str = ""

    @classmethod
    def from_env(cls, environ=None):
        """Build settings from environment variables"""
        env = os.environ if environ is None else environ
        return cls(
            admin_secret=env.get("ADMIN_SECRET", ""),
            github_token=env.get("GITHUB_TOKEN", ""),
            banner_repo=env.get("BANNER_REPO", ""),      # e.g. "youruser/cds-banner"
            banner_path=env.get("BANNER_PATH", ""),      # e.g. "banner.json"
            banner_branch=env.get("BANNER_BRANCH", ""),  # e.g. "main"
            allowed_origin=env.get("ALLOWED_ORIGIN", ""),
            live_json_url=env.get("LIVE_JSON_URL", ""),
        )

    def missing_banner_settings(self):
        required = {
            "GITHUB_TOKEN": self.github_token,
            "BANNER_REPO": self.banner_repo,
            "BANNER_PATH": self.banner_path,
            "BANNER_BRANCH": self.banner_branch,
        }
        return [name for name, value in required.items() if not value]

    def missing_live_settings(self):
        return [] if self.live_json_url else ["LIVE_JSON_URL"]


_settings = None


def get_settings():
    """Process-wide settings, built on first use"""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


# --- ERRORS ---
class ApiError(Exception):
    """Error carrying the HTTP status it maps to; message is sent as plain text"""
    status = 500

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class BadRequest(ApiError):
    status = 400


class Unauthorized(ApiError):
    status = 401


class ConfigurationError(ApiError):
    status = 500


class UpstreamError(ApiError):
    status = 502


# --- HTTP HELPERS ---
def cors_headers(origin, methods):
    return {
        "Access-Control-Allow-Origin": origin or "*",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Allow-Methods": f"OPTIONS, {methods}",
        "Vary": "Origin",
    }


def resolve_origin(request_origin, settings):
    """Echo the caller's Origin, falling back to the configured one"""
    return request_origin or settings.allowed_origin or "*"


def utc_now_iso():
    """UTC timestamp in the 2024-01-01T00:00:00.000Z form"""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def send(request_handler, status, body, headers):
    """Write a full response on a BaseHTTPRequestHandler.

    dict/list bodies are sent as JSON, strings as plain text and None as an
    empty body.
    """
    headers = dict(headers)
    if isinstance(body, (dict, list)):
        payload = json.dumps(body).encode("utf-8")
        headers.setdefault("Content-Type", "application/json")
    elif body is None:
        payload = b""
    else:
        payload = str(body).encode("utf-8")
        headers.setdefault("Content-Type", "text/plain; charset=utf-8")

    request_handler.send_response(status)
    for name, value in headers.items():
        request_handler.send_header(name, value)
    if status != 204:
        request_handler.send_header("Content-Length", str(len(payload)))
    request_handler.end_headers()
    if payload and status != 204:
        request_handler.wfile.write(payload)
