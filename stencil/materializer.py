"""Template materialization.

Mirrors a template tree (a local directory or a GitHub directory) into a
destination directory.  Every file goes through slot substitution before it
is written, and lock files are recorded on the config's ``package_map`` so
the caller knows which package managers to run afterwards.

Quick usage::

    config = ScaffoldConfig(repo_name="widget", author_name="Ada", slot_paths=["**/*.md"])
    target = await scaffold("acme/templates/react", "./widget", config)
    for record in config.package_map:
        await install_packages(record.manager, record.path)
"""

from __future__ import annotations

import asyncio
import os
import stat
from pathlib import Path

from rich.markup import escape

from stencil.config import PackageManager, PackageRecord, ScaffoldConfig
from stencil.slots import render_file
from stencil.sources import (
    GITHUB_DIR_TYPE,
    GITHUB_FILE_TYPE,
    GitHubClient,
    contents_url,
)
from stencil.utils import console, ensure_dir

LOCK_FILES: dict[str, PackageManager] = {
    "package-lock.json": PackageManager.NPM,
    "yarn.lock": PackageManager.YARN,
    "pnpm-lock.yaml": PackageManager.PNPM,
}


def detect_package_manager(file_path: str | Path) -> PackageManager | None:
    """Return the package manager implied by a lock file path, if any."""
    path_str = str(file_path)
    for signature, manager in LOCK_FILES.items():
        if signature in path_str:
            return manager
    return None


def _report_unknown(name: str) -> None:
    console.print(f"\n [red]Unknown type for [bold]{escape(name)}[/bold][/red]")


async def _write_file(
    data: bytes,
    target_dir: Path,
    name: str,
    config: ScaffoldConfig,
) -> None:
    file_path = target_dir / name

    manager = detect_package_manager(file_path)
    if manager is not None:
        config.package_map.append(PackageRecord(manager=manager, path=target_dir))

    rendered = render_file(file_path, data, config)
    await asyncio.to_thread(file_path.write_bytes, rendered)


# ---------------------------------------------------------------------------
# Local templates
# ---------------------------------------------------------------------------


async def copy_directory(
    path: str | Path,
    target_dir: str | Path,
    config: ScaffoldConfig,
) -> Path:
    """Copy the local template at *path* into *target_dir*.

    Returns:
        The resolved destination directory.
    """
    source = Path(path)
    target = await ensure_dir(target_dir)

    names = await asyncio.to_thread(os.listdir, source)

    for name in names:
        entry = source / name
        mode = (await asyncio.to_thread(os.lstat, entry)).st_mode
        if stat.S_ISREG(mode):
            data = await asyncio.to_thread(entry.read_bytes)
            await _write_file(data, target, name, config)
        elif stat.S_ISDIR(mode):
            await copy_directory(entry, target / name, config)
        else:
            _report_unknown(name)

    return target


# ---------------------------------------------------------------------------
# GitHub templates
# ---------------------------------------------------------------------------


async def download_directory(
    url: str,
    target_dir: str | Path,
    config: ScaffoldConfig,
    client: GitHubClient | None = None,
) -> Path:
    """Download the GitHub directory at contents API *url* into *target_dir*.

    A failed API call aborts the walk; files already written stay on disk.

    Returns:
        The resolved destination directory.
    """
    if client is None:
        client = GitHubClient(token=config.github_token)
    target = await ensure_dir(target_dir)

    entries = await client.list_directory(url)

    for entry in entries:
        if entry.type == GITHUB_FILE_TYPE:
            data = await client.fetch_raw(entry.url)
            await _write_file(data, target, entry.name, config)
        elif entry.type == GITHUB_DIR_TYPE:
            await download_directory(entry.url, target / entry.name, config, client)
        else:
            _report_unknown(entry.name)

    return target


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def is_remote_source(source: str | Path) -> bool:
    """Return ``True`` unless *source* names an existing local directory."""
    return not Path(source).expanduser().is_dir()


async def scaffold(
    source: str | Path,
    target_dir: str | Path,
    config: ScaffoldConfig,
    ref: str | None = None,
    client: GitHubClient | None = None,
) -> Path:
    """Materialize *source* into *target_dir*.

    *source* may be a local directory, a full contents API URL, or an
    ``owner/repo[/path]`` string.  *ref* only applies to the last form.
    """
    if not is_remote_source(source):
        return await copy_directory(Path(source).expanduser(), target_dir, config)

    source_str = str(source)
    if source_str.startswith(("http://", "https://")):
        url = source_str
    else:
        url = contents_url(source_str, ref=ref)
    return await download_directory(url, target_dir, config, client)
