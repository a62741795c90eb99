"""Shared fixtures: fake HTTP sessions so no test touches the network."""
import base64
import json
import socket

import pytest

from api.shared import Settings


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=None, url=None):
        self.status_code = status_code
        self._json = json_data
        self.text = text if text is not None else (json.dumps(json_data) if json_data is not None else "")
        self.url = url
        self.encoding = "utf-8"
        self.closed = False

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def iter_content(self, chunk_size=1):
        data = self.text.encode("utf-8")
        for start in range(0, len(data), chunk_size):
            yield data[start:start + chunk_size]

    def close(self):
        self.closed = True

    def json(self):
        if self._json is None:
            return json.loads(self.text)
        return self._json


class FakeSession:
    """Records calls and replays queued responses (or raises queued exceptions)."""

    def __init__(self, get=None, put=None):
        self.get_responses = list(get or [])
        self.put_responses = list(put or [])
        self.get_calls = []
        self.put_calls = []

    def _next(self, queue):
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url, **kwargs):
        self.get_calls.append((url, kwargs))
        return self._next(self.get_responses)

    def put(self, url, **kwargs):
        self.put_calls.append((url, kwargs))
        return self._next(self.put_responses)


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def encode_file(data):
    return base64.b64encode(json.dumps(data).encode("utf-8")).decode("ascii")


@pytest.fixture
def settings():
    return Settings(
        admin_secret="s3cret",
        github_token="gh-token",
        banner_repo="someone/cds-banner",
        banner_path="banner.json",
        banner_branch="main",
        allowed_origin="https://app.example.com",
        live_json_url="https://example.com/live.json",
    )


@pytest.fixture
def clock():
    return FakeClock()


def run_handler(handler_class, raw_request):
    """Drive a BaseHTTPRequestHandler over a socketpair; returns (status, headers, body)."""
    server_side, client_side = socket.socketpair()
    try:
        client_side.sendall(raw_request)
        client_side.shutdown(socket.SHUT_WR)
        handler_class(server_side, ("127.0.0.1", 0), None)
        server_side.close()

        chunks = []
        while True:
            chunk = client_side.recv(65536)
            if not chunk:
                break
            chunks.append(chunk)
    finally:
        server_side.close()
        client_side.close()

    head, _, body = b"".join(chunks).partition(b"\r\n\r\n")
    lines = head.decode("iso-8859-1").split("\r\n")
    status = int(lines[0].split()[1])
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return status, headers, body
