"""Shared pytest fixtures for the stencil test suite.

Provides reusable fixtures for:
- A sample local template tree
- A baseline ScaffoldConfig
- A fake GitHub contents API served through ``httpx.MockTransport``
- Mock subprocess helpers
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from stencil.config import ScaffoldConfig
from stencil.sources import GitHubClient

API = "https://api.github.com/repos/acme/templates/contents"


# ---------------------------------------------------------------------------
# Local templates
# ---------------------------------------------------------------------------

@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A small template tree with nested directories and a lock file."""
    root = tmp_path / "template"
    (root / "sub" / "deeper").mkdir(parents=True)
    (root / "a.txt").write_text("Hello [REPO_NAME]", encoding="utf-8")
    (root / "sub" / "b.txt").write_text("by [AUTHOR_NAME]", encoding="utf-8")
    (root / "sub" / "deeper" / "c.md").write_text("# [REPO_NAME]\n", encoding="utf-8")
    (root / "sub" / "package-lock.json").write_text('{"name": "[REPO_NAME]"}', encoding="utf-8")
    (root / "logo.bin").write_bytes(b"\x89PNG\r\n\x1a\n\xff\xfe[REPO_NAME]")
    yield root


@pytest.fixture
def scaffold_config() -> ScaffoldConfig:
    """Baseline config matching ``*.txt`` files only."""
    return ScaffoldConfig(
        repo_name="Widget",
        author_name="Ada",
        slot_paths=["**/*.txt"],
    )


# ---------------------------------------------------------------------------
# Fake GitHub contents API
# ---------------------------------------------------------------------------

def _entry(name: str, kind: str, path: str) -> dict[str, Any]:
    return {
        "name": name,
        "path": path,
        "type": kind,
        "url": f"{API}/{path}?ref=main",
        "sha": "0" * 40,
        "size": 0,
    }


REMOTE_TREE: dict[str, Any] = {
    "": [
        _entry("README.md", "file", "README.md"),
        _entry("web", "dir", "web"),
        _entry("link", "symlink", "link"),
    ],
    "web": [
        _entry("index.txt", "file", "web/index.txt"),
        _entry("yarn.lock", "file", "web/yarn.lock"),
    ],
}

REMOTE_FILES: dict[str, bytes] = {
    "README.md": b"# [REPO_NAME]\n",
    "web/index.txt": b"[REPO_NAME] by [AUTHOR_NAME]",
    "web/yarn.lock": b"# yarn lockfile v1\n",
}


def make_github_handler(
    tree: dict[str, Any] | None = None,
    files: dict[str, bytes] | None = None,
    requests: list[httpx.Request] | None = None,
):
    """Build an ``httpx.MockTransport`` handler serving *tree* and *files*."""
    tree = REMOTE_TREE if tree is None else tree
    files = REMOTE_FILES if files is None else files

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        path = request.url.path.split("/contents", 1)[1].strip("/")
        accept = request.headers.get("accept", "")
        if accept.endswith(".raw"):
            if path in files:
                return httpx.Response(200, content=files[path])
        elif path in tree:
            return httpx.Response(200, json=tree[path])
        return httpx.Response(404, json={"message": "Not Found"})

    return handler


@pytest.fixture
def github_requests() -> list[httpx.Request]:
    """Requests seen by the ``github_client`` fixture, in order."""
    return []


@pytest.fixture
def github_client(github_requests: list[httpx.Request]) -> GitHubClient:
    """A GitHubClient backed by the in-memory REMOTE_TREE."""
    transport = httpx.MockTransport(make_github_handler(requests=github_requests))
    return GitHubClient(token="ghp_test", transport=transport)


# ---------------------------------------------------------------------------
# Mock subprocess
# ---------------------------------------------------------------------------

def make_mock_process(returncode: int = 0, stdout: bytes = b"", stderr: bytes = b"") -> MagicMock:
    """Return an object shaped like ``asyncio.subprocess.Process``."""
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    process.wait = AsyncMock(return_value=returncode)
    process.kill = MagicMock()
    return process
