"""Scaffold configuration.

Typed configuration for a single scaffolding run.  All settings use Pydantic
v2 models so they are validated once, at construction time, before any
directory is walked.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

REPO_NAME_SLOT = "[REPO_NAME]"
AUTHOR_NAME_SLOT = "[AUTHOR_NAME]"

FIXED_SLOTS: tuple[str, ...] = (REPO_NAME_SLOT, AUTHOR_NAME_SLOT)


class PackageManager(str, Enum):
    """Package managers recognised from their lock files."""

    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"


class PackageRecord(BaseModel):
    """A lock file sighting: which manager, and the directory that holds it."""

    manager: PackageManager
    path: Path


class TemplateDescriptor(BaseModel):
    """A local template discovered under a template root."""

    name: str
    path: Path


class ScaffoldConfig(BaseModel):
    """Configuration shared by every step of one scaffolding run.

    ``package_map`` is an output: the materializer appends to it while it
    walks the template and callers read it once the walk has finished.
    """

    repo_name: str = Field(..., description="Replaces [REPO_NAME] in slotted files")
    author_name: str = Field(..., description="Replaces [AUTHOR_NAME] in slotted files")
    custom_slots: dict[str, str] = Field(
        default_factory=dict,
        description="Extra literal token -> replacement pairs",
    )
    slot_paths: list[str] = Field(
        default_factory=list,
        description="Glob patterns selecting which destination files get substituted",
    )
    github_token: str | None = Field(
        default=None,
        description="Optional GitHub token for the contents API",
    )
    package_map: list[PackageRecord] = Field(
        default_factory=list,
        description="Lock files found during materialization",
    )

    @field_validator("repo_name", "author_name")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("custom_slots")
    @classmethod
    def _check_custom_slots(cls, slots: dict[str, str]) -> dict[str, str]:
        for key in slots:
            if not key:
                raise ValueError("Custom slot keys must not be empty")
            if key in FIXED_SLOTS:
                raise ValueError(
                    f"Custom slot {key!r} collides with a built-in slot; "
                    "use --repo-name/--author instead"
                )
        return slots

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ScaffoldConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)


def resolve_github_token(cli_token: str | None = None) -> str | None:
    """Return a GitHub token, or ``None`` when none is configured.

    An explicit value wins, then ``GH_TOKEN``, then ``GITHUB_TOKEN``.
    Whitespace-only values count as absent.
    """
    for candidate in (cli_token, os.environ.get("GH_TOKEN"), os.environ.get("GITHUB_TOKEN")):
        if candidate and candidate.strip():
            return candidate.strip()
    return None
