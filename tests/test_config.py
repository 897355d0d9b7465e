"""Unit tests for ScaffoldConfig and related models (stencil.config).

Tests cover:
- ScaffoldConfig defaults and required fields
- Name trimming
- Custom slot validation (empty keys, collisions with built-in slots)
- save/load round trip
- resolve_github_token precedence
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from stencil.config import (
    PackageManager,
    PackageRecord,
    ScaffoldConfig,
    resolve_github_token,
)

pytestmark = pytest.mark.unit


class TestScaffoldConfig:
    def test_defaults(self):
        config = ScaffoldConfig(repo_name="widget", author_name="Ada")
        assert config.custom_slots == {}
        assert config.slot_paths == []
        assert config.github_token is None
        assert config.package_map == []

    def test_repo_name_required(self):
        with pytest.raises(ValidationError):
            ScaffoldConfig(author_name="Ada")

    def test_author_name_required(self):
        with pytest.raises(ValidationError):
            ScaffoldConfig(repo_name="widget")

    def test_names_trimmed(self):
        config = ScaffoldConfig(repo_name="  widget  ", author_name="\nAda\t")
        assert config.repo_name == "widget"
        assert config.author_name == "Ada"

    def test_custom_slot_colliding_with_repo_name_rejected(self):
        with pytest.raises(ValidationError, match="collides"):
            ScaffoldConfig(
                repo_name="widget",
                author_name="Ada",
                custom_slots={"[REPO_NAME]": "other"},
            )

    def test_custom_slot_colliding_with_author_name_rejected(self):
        with pytest.raises(ValidationError, match="collides"):
            ScaffoldConfig(
                repo_name="widget",
                author_name="Ada",
                custom_slots={"[AUTHOR_NAME]": "other"},
            )

    def test_empty_custom_slot_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            ScaffoldConfig(repo_name="widget", author_name="Ada", custom_slots={"": "x"})

    def test_package_map_is_per_instance(self):
        first = ScaffoldConfig(repo_name="a", author_name="b")
        second = ScaffoldConfig(repo_name="a", author_name="b")
        first.package_map.append(PackageRecord(manager=PackageManager.NPM, path=Path("/x")))
        assert second.package_map == []

    def test_save_and_load(self, tmp_path: Path):
        config = ScaffoldConfig(
            repo_name="widget",
            author_name="Ada",
            custom_slots={"[LICENSE]": "MIT"},
            slot_paths=["**/*.md"],
        )
        saved = config.save(tmp_path / "nested" / "stencil.json")
        assert saved.exists()

        loaded = ScaffoldConfig.load(saved)
        assert loaded == config


class TestPackageRecord:
    def test_manager_from_string(self):
        record = PackageRecord(manager="pnpm", path="/work/app")
        assert record.manager is PackageManager.PNPM
        assert record.path == Path("/work/app")

    def test_unknown_manager_rejected(self):
        with pytest.raises(ValidationError):
            PackageRecord(manager="bower", path="/work/app")


class TestResolveGitHubToken:
    def test_explicit_token_wins(self):
        with patch.dict("os.environ", {"GH_TOKEN": "env-gh", "GITHUB_TOKEN": "env-github"}):
            assert resolve_github_token("cli") == "cli"

    def test_gh_token_before_github_token(self):
        with patch.dict("os.environ", {"GH_TOKEN": "env-gh", "GITHUB_TOKEN": "env-github"}):
            assert resolve_github_token() == "env-gh"

    def test_github_token_fallback(self):
        with patch.dict("os.environ", {"GH_TOKEN": "  ", "GITHUB_TOKEN": " env-github "}):
            assert resolve_github_token(None) == "env-github"

    def test_none_when_unset(self):
        with patch.dict("os.environ", {}, clear=True):
            assert resolve_github_token("") is None
