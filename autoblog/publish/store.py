"""
Version-controlled content store backends.

A ContentStore exposes the two calls the publisher needs for a conditional
create-or-update: read the current revision marker of a path, and write
new content optionally carrying that marker.

Backends:
1. GitHubContentStore: GitHub Contents API (revision = blob SHA)
2. LocalContentStore: files under a directory, with the same revision
   semantics so conflicts behave like the remote API
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import base64
from dataclasses import dataclass
import hashlib
import logging
from pathlib import Path

import httpx

from ..utils.logging import log_event


@dataclass
class WriteResult:
    """Outcome of a write request.

    Attributes:
        ok: True when the store accepted the write
        status_code: HTTP-style status, None for transport failures
        detail: Error body or message on failure
        url: Location of the written document when the store reports one
    """
    ok: bool
    status_code: int | None = None
    detail: str | None = None
    url: str | None = None


class ContentStore(ABC):
    @abstractmethod
    def get_revision(self, path: str) -> str | None:
        """Return the current revision marker, or None when the path does not exist."""
        raise NotImplementedError

    @abstractmethod
    def write(self, path: str, content: str, message: str, revision: str | None) -> WriteResult:
        """Create (``revision`` None) or update (``revision`` set) ``path``."""
        raise NotImplementedError

    def location(self, path: str) -> str:
        return path


class GitHubContentStore(ContentStore):
    """GitHub repository contents accessed over the REST API."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        branch: str = "main",
        api_base: str = "https://api.github.com",
        timeout: float = 30.0,
        logger: logging.Logger | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.token = token
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.logger = logger
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": "autoblog",
            },
            transport=self._transport,
        )

    def _contents_url(self, path: str) -> str:
        return f"{self.api_base}/repos/{self.owner}/{self.repo}/contents/{path}"

    def location(self, path: str) -> str:
        return f"https://github.com/{self.owner}/{self.repo}/blob/{self.branch}/{path}"

    def get_revision(self, path: str) -> str | None:
        # Errors other than 404 are logged and treated as "no revision";
        # the following write then fails visibly if the file does exist.
        try:
            with self._client() as client:
                resp = client.get(self._contents_url(path), params={"ref": self.branch})
        except httpx.HTTPError as exc:
            log_event(
                self.logger,
                "Revision lookup failed",
                level=logging.WARNING,
                event="revision_lookup_failed",
                path=path,
                error=f"{type(exc).__name__}: {exc}",
            )
            return None
        if resp.status_code == 404:
            return None
        if not resp.is_success:
            log_event(
                self.logger,
                "Revision lookup failed",
                level=logging.WARNING,
                event="revision_lookup_failed",
                path=path,
                status_code=resp.status_code,
            )
            return None
        data = resp.json()
        sha = data.get("sha") if isinstance(data, dict) else None
        return str(sha) if sha else None

    def write(self, path: str, content: str, message: str, revision: str | None) -> WriteResult:
        body = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": self.branch,
        }
        if revision:
            body["sha"] = revision
        try:
            with self._client() as client:
                resp = client.put(self._contents_url(path), json=body)
        except httpx.HTTPError as exc:
            return WriteResult(ok=False, detail=f"{type(exc).__name__}: {exc}")
        if not resp.is_success:
            return WriteResult(
                ok=False,
                status_code=resp.status_code,
                detail=f"{resp.status_code} {resp.reason_phrase}: {resp.text}",
            )
        url = None
        data = resp.json()
        if isinstance(data, dict):
            url = (data.get("content") or {}).get("html_url")
        return WriteResult(ok=True, status_code=resp.status_code, url=url or self.location(path))


def blob_sha(data: bytes) -> str:
    """Git blob SHA-1 of ``data``, the same marker GitHub reports."""
    header = f"blob {len(data)}\0".encode("ascii")
    return hashlib.sha1(header + data).hexdigest()


class LocalContentStore(ContentStore):
    """Content store rooted at a local directory (e.g. a git checkout)."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if self.root.resolve() not in target.parents:
            raise ValueError(f"Path escapes content root: {path}")
        return target

    def location(self, path: str) -> str:
        return str(self.root / path)

    def get_revision(self, path: str) -> str | None:
        target = self._resolve(path)
        if not target.exists():
            return None
        return blob_sha(target.read_bytes())

    def write(self, path: str, content: str, message: str, revision: str | None) -> WriteResult:
        target = self._resolve(path)
        current = blob_sha(target.read_bytes()) if target.exists() else None
        if current is not None and revision is None:
            return WriteResult(ok=False, status_code=422, detail=f"{path} exists; revision required")
        if revision is not None and revision != current:
            return WriteResult(ok=False, status_code=409, detail=f"{path} does not match {revision}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return WriteResult(ok=True, status_code=200 if current else 201, url=str(target))
