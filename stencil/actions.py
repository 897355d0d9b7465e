"""Post-scaffold actions: ``git init`` and package installation.

Both actions shell out with the scaffolded directory as the working
directory and report failure through :class:`ActionError` only.
"""

from __future__ import annotations

from pathlib import Path

from rich.markup import escape

from stencil.config import PackageManager, PackageRecord
from stencil.utils import console, run_command

GIT_INIT_FAILED = "Failed to initialize git"
INSTALL_FAILED = "Failed to install packages"


class ActionError(Exception):
    """Raised when a post-scaffold command fails."""

    def __init__(self, message: str, command: str = "", stderr: str = ""):
        self.command = command
        self.stderr = stderr
        super().__init__(message)


async def _run_action(
    cmd: list[str],
    target_dir: str | Path,
    failure_message: str,
    timeout: int,
) -> bool:
    cmd_str = " ".join(cmd)
    try:
        returncode, _stdout, stderr = await run_command(cmd, cwd=target_dir, timeout=timeout)
    except OSError as exc:
        raise ActionError(failure_message, command=cmd_str, stderr=str(exc)) from exc

    if returncode != 0:
        raise ActionError(failure_message, command=cmd_str, stderr=stderr)
    return True


async def initialize_git(target_dir: str | Path, timeout: int = 60) -> bool:
    """Run ``git init`` in *target_dir*.

    Raises:
        ActionError: With message ``"Failed to initialize git"``.
    """
    return await _run_action(["git", "init"], target_dir, GIT_INIT_FAILED, timeout)


async def install_packages(
    package_manager: PackageManager | str,
    target_dir: str | Path,
    timeout: int = 900,
) -> bool:
    """Run ``<package_manager> install`` in *target_dir*.

    Raises:
        ActionError: With message ``"Failed to install packages"``.
    """
    if isinstance(package_manager, PackageManager):
        manager = package_manager.value
    else:
        manager = package_manager
    return await _run_action([manager, "install"], target_dir, INSTALL_FAILED, timeout)


async def install_all(package_map: list[PackageRecord], timeout: int = 900) -> int:
    """Install dependencies for every distinct lock file sighting.

    Records are processed in discovery order and duplicates are skipped.
    Stops at the first failure.

    Returns:
        The number of install commands that ran.
    """
    seen: set[tuple[PackageManager, Path]] = set()
    count = 0
    for record in package_map:
        key = (record.manager, record.path)
        if key in seen:
            continue
        seen.add(key)
        console.print(
            f"[cyan]Installing packages with[/cyan] [bold]{record.manager.value}[/bold] "
            f"in [green]{escape(str(record.path))}[/green]..."
        )
        await install_packages(record.manager, record.path, timeout=timeout)
        count += 1
    return count
