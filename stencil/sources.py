"""Template sources: local template roots and the GitHub contents API.

Typical usage::

    templates = await get_local_templates("~/templates")

    client = GitHubClient(token="ghp_...")
    entries = await client.list_directory(contents_url("acme/templates/react"))
"""

from __future__ import annotations

import asyncio
import os
import stat
from pathlib import Path
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from stencil.config import TemplateDescriptor

GITHUB_API_URL = "https://api.github.com"
GITHUB_FILE_TYPE = "file"
GITHUB_DIR_TYPE = "dir"


class GitHubAPIError(Exception):
    """Raised when the GitHub API cannot be reached or answers with a non-2xx status."""

    def __init__(self, reason: str, url: str, status_code: int | None = None):
        self.reason = reason
        self.url = url
        self.status_code = status_code
        super().__init__(f"Error calling GitHub API - {reason} | {url}")


class RemoteEntry(BaseModel):
    """One item of a contents API directory listing."""

    model_config = ConfigDict(extra="ignore")

    name: str
    type: str = Field(..., description="'file', 'dir', 'symlink' or 'submodule'")
    url: str
    path: str = ""


# ---------------------------------------------------------------------------
# Local templates
# ---------------------------------------------------------------------------


def _list_template_dirs(root: Path) -> list[TemplateDescriptor]:
    templates: list[TemplateDescriptor] = []
    for name in os.listdir(root):
        candidate = root / name
        if stat.S_ISDIR(os.lstat(candidate).st_mode):
            templates.append(TemplateDescriptor(name=name, path=candidate))
    return templates


async def get_local_templates(template_root: str | Path) -> list[TemplateDescriptor]:
    """List the templates available under *template_root*.

    Every sub-directory is a template; plain files and symlinks are ignored.
    Entries come back in directory order, which is not guaranteed to be
    alphabetical.
    """
    root = Path(template_root).expanduser().resolve()
    return await asyncio.to_thread(_list_template_dirs, root)


# ---------------------------------------------------------------------------
# GitHub contents API
# ---------------------------------------------------------------------------


def contents_url(
    repository: str,
    ref: str | None = None,
    api_base: str = GITHUB_API_URL,
) -> str:
    """Build a contents API URL from an ``owner/repo[/sub/path]`` string.

    Examples::

        contents_url("acme/templates")
            -> "https://api.github.com/repos/acme/templates/contents/"
        contents_url("acme/templates/react", ref="v2")
            -> "https://api.github.com/repos/acme/templates/contents/react?ref=v2"
    """
    parts = [part for part in repository.strip().strip("/").split("/") if part]
    if len(parts) < 2:
        raise ValueError(
            f"Invalid GitHub repository path '{repository}'; expected owner/repo[/path]"
        )
    owner, repo, *sub_path = parts
    url = f"{api_base.rstrip('/')}/repos/{owner}/{repo}/contents/{quote('/'.join(sub_path))}"
    if ref:
        url += f"?ref={quote(ref, safe='')}"
    return url


class GitHubClient:
    """Async client for the GitHub repository contents API.

    Listings are requested as ``application/vnd.github.json``; individual
    files as ``application/vnd.github.raw`` so the body is the file itself.
    """

    def __init__(
        self,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = token
        self.timeout = timeout
        self._transport = transport

    def _headers(self, raw: bool) -> dict[str, str]:
        headers = {"Accept": f"application/vnd.github.{'raw' if raw else 'json'}"}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our timeout."""
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            follow_redirects=True,
            transport=self._transport,
        )

    async def call(self, url: str, raw: bool = False) -> httpx.Response:
        """GET *url* and return the response.

        Raises:
            GitHubAPIError: On transport failures and non-2xx responses.
        """
        try:
            async with self._client() as client:
                response = await client.get(url, headers=self._headers(raw))
        except httpx.TransportError as exc:
            raise GitHubAPIError(str(exc) or type(exc).__name__, url) from exc

        if not response.is_success:
            raise GitHubAPIError(response.reason_phrase, url, status_code=response.status_code)
        return response

    async def list_directory(self, url: str) -> list[RemoteEntry]:
        """Return the entries of the directory at *url*."""
        response = await self.call(url)
        try:
            data = response.json()
        except ValueError as exc:
            raise GitHubAPIError("Invalid JSON response", url, status_code=response.status_code) from exc
        if not isinstance(data, list):
            raise GitHubAPIError("Expected a directory listing", url, status_code=response.status_code)
        try:
            return [RemoteEntry.model_validate(item) for item in data]
        except ValidationError as exc:
            raise GitHubAPIError("Malformed directory listing", url, status_code=response.status_code) from exc

    async def fetch_raw(self, url: str) -> bytes:
        """Return the raw bytes of the file at *url*."""
        response = await self.call(url, raw=True)
        return response.content
