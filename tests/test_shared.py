import io
import json
import re

from api.shared import Settings, cors_headers, send, utc_now_iso


class RecordingHandler:
    """Stands in for BaseHTTPRequestHandler's response-writing surface."""

    def __init__(self):
        self.status = None
        self.headers = {}
        self.wfile = io.BytesIO()

    def send_response(self, status):
        self.status = status

    def send_header(self, name, value):
        self.headers[name] = value

    def end_headers(self):
        pass


def test_settings_from_env():
    settings = Settings.from_env({
        "ADMIN_SECRET": "x",
        "GITHUB_TOKEN": "t",
        "BANNER_REPO": "me/repo",
        "LIVE_JSON_URL": "https://example.com/live.json",
    })
    assert settings.admin_secret == "x"
    assert settings.missing_banner_settings() == ["BANNER_PATH", "BANNER_BRANCH"]
    assert settings.missing_live_settings() == []
    assert Settings.from_env({}).missing_live_settings() == ["LIVE_JSON_URL"]


def test_cors_headers_default_origin():
    assert cors_headers("", "GET")["Access-Control-Allow-Origin"] == "*"


def test_utc_now_iso_format():
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_now_iso())


def test_send_json():
    handler = RecordingHandler()
    send(handler, 200, {"ok": True}, {"Vary": "Origin"})
    assert handler.status == 200
    assert handler.headers["Content-Type"] == "application/json"
    assert json.loads(handler.wfile.getvalue()) == {"ok": True}


def test_send_plain_text_error():
    handler = RecordingHandler()
    send(handler, 401, "Unauthorized", {})
    assert handler.headers["Content-Type"].startswith("text/plain")
    assert handler.wfile.getvalue() == b"Unauthorized"


def test_send_no_content():
    handler = RecordingHandler()
    send(handler, 204, None, cors_headers("https://a.example", "POST"))
    assert handler.status == 204
    assert "Content-Length" not in handler.headers
    assert handler.wfile.getvalue() == b""
