"""stencil -- scaffold new projects from local or GitHub templates.

Templates are plain directory trees.  Files whose destination path matches
one of the configured slot globs have their ``[REPO_NAME]``,
``[AUTHOR_NAME]`` and custom slots replaced; everything else is copied as-is.

Quick usage::

    from stencil import ScaffoldConfig, scaffold, initialize_git

    config = ScaffoldConfig(
        repo_name="widget",
        author_name="Ada",
        slot_paths=["**/*.md", "**/package.json"],
    )
    target = await scaffold("~/templates/react", "./widget", config)
    await initialize_git(target)
"""

from stencil.actions import ActionError, initialize_git, install_all, install_packages
from stencil.config import (
    PackageManager,
    PackageRecord,
    ScaffoldConfig,
    TemplateDescriptor,
    resolve_github_token,
)
from stencil.materializer import copy_directory, download_directory, scaffold
from stencil.slots import replace_slots
from stencil.sources import GitHubAPIError, GitHubClient, get_local_templates

__version__ = "0.1.0"

__all__ = [
    "ActionError",
    "GitHubAPIError",
    "GitHubClient",
    "PackageManager",
    "PackageRecord",
    "ScaffoldConfig",
    "TemplateDescriptor",
    "copy_directory",
    "download_directory",
    "get_local_templates",
    "initialize_git",
    "install_all",
    "install_packages",
    "replace_slots",
    "resolve_github_token",
    "scaffold",
]
