"""Minimal GitHub contents API client for the banner file"""
import base64
import json
from dataclasses import dataclass
from urllib.parse import quote

import requests

from api.shared import UpstreamError

GITHUB_API = "https://api.github.com"
USER_AGENT = "cds-admin-service"


@dataclass
class RemoteFile:
    """Decoded file content plus the blob sha needed for the next write"""
    content: dict
    sha: str


def decode_content(raw):
    """Decode a base64 contents API payload into a dict; anything unreadable is {}"""
    try:
        data = json.loads(base64.b64decode(raw or "").decode("utf-8"))
    except (ValueError, TypeError) as e:
        print(f"Existing banner content unreadable, starting from empty object: {e}")
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def encode_content(data):
    """Pretty-printed JSON with a trailing newline, base64 encoded"""
    text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


class GitHubContentsClient:
    def __init__(self, token, repo, path, branch, session=None, timeout=15):
        self.token = token
        self.repo = repo
        self.path = path
        self.branch = branch
        self.session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings, session=None):
        return cls(
            settings.github_token,
            settings.banner_repo,
            settings.banner_path,
            settings.banner_branch,
            session=session,
        )

    @property
    def contents_url(self):
        return f"{GITHUB_API}/repos/{self.repo}/contents/{quote(self.path, safe='')}"

    def _headers(self):
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        }

    def read(self):
        """Fetch the current file; the returned sha is only valid until the next write"""
        response = self.session.get(
            self.contents_url,
            params={"ref": self.branch},
            headers=self._headers(),
            timeout=self.timeout,
        )
        if not response.ok:
            raise UpstreamError(f"GitHub GET failed: {response.status_code} {response.text}")

        current = response.json()
        return RemoteFile(
            content=decode_content(current.get("content")),
            sha=current.get("sha"),
        )

    def write(self, data, sha, message):
        """Conditional write; GitHub rejects it if sha no longer matches the branch head"""
        response = self.session.put(
            self.contents_url,
            json={
                "message": message,
                "content": encode_content(data),
                "sha": sha,
                "branch": self.branch,
            },
            headers=self._headers(),
            timeout=self.timeout,
        )
        if not response.ok:
            raise UpstreamError(f"GitHub PUT failed: {response.status_code} {response.text}")
        return response.json()
