"""Command line entry point.

Usage::

    stencil list ~/templates
    stencil new ~/templates/react ./widget --repo-name widget --author Ada \\
        --slot-path "**/*.md" --slot "[LICENSE]=MIT" --git --install
    stencil new acme/templates/react ./widget --repo-name widget --author Ada --ref v2
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from stencil.actions import ActionError, initialize_git, install_all
from stencil.config import ScaffoldConfig, resolve_github_token
from stencil.materializer import scaffold
from stencil.sources import GitHubAPIError, get_local_templates
from stencil.utils import console, print_error, print_success, print_summary_table


def parse_slot(value: str) -> tuple[str, str]:
    """Split a ``KEY=VALUE`` slot argument on the first ``=``."""
    key, sep, replacement = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Invalid slot '{value}', expected KEY=VALUE")
    return key, replacement


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stencil",
        description="stencil -- scaffold a new project from a template",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  stencil list ~/templates\n"
            "  stencil new ~/templates/react ./widget --repo-name widget --author Ada\n"
            "  stencil new acme/templates/react ./widget --repo-name widget --author Ada --git\n"
        ),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List local templates")
    list_parser.add_argument("root", help="Directory holding one template per sub-directory")

    new_parser = subparsers.add_parser("new", help="Create a project from a template")
    new_parser.add_argument(
        "source",
        help="Local template directory, owner/repo[/path] on GitHub, or a contents API URL",
    )
    new_parser.add_argument("target", help="Destination directory")
    new_parser.add_argument("--repo-name", default=None, help="Value for [REPO_NAME]")
    new_parser.add_argument("--author", default=None, help="Value for [AUTHOR_NAME]")
    new_parser.add_argument(
        "--slot",
        action="append",
        type=parse_slot,
        default=[],
        metavar="KEY=VALUE",
        help="Custom slot (repeatable)",
    )
    new_parser.add_argument(
        "--slot-path",
        action="append",
        default=[],
        metavar="GLOB",
        help="Only files matching one of these globs get slots replaced (repeatable)",
    )
    new_parser.add_argument(
        "--config", "-c",
        default=None,
        help="JSON file with saved scaffold settings; command line values win",
    )
    new_parser.add_argument(
        "--token",
        default=None,
        help="GitHub token (defaults to GH_TOKEN / GITHUB_TOKEN)",
    )
    new_parser.add_argument("--ref", default=None, help="Branch, tag or commit for GitHub sources")
    new_parser.add_argument("--git", action="store_true", help="Run git init in the new project")
    new_parser.add_argument(
        "--install",
        action="store_true",
        help="Install packages for every lock file found in the template",
    )
    return parser


def build_config(args: argparse.Namespace) -> ScaffoldConfig:
    """Merge ``--config`` file settings with command line overrides."""
    data: dict[str, Any] = {}
    if args.config:
        loaded = ScaffoldConfig.load(Path(args.config))
        data = loaded.model_dump(exclude={"package_map"})

    if args.repo_name is not None:
        data["repo_name"] = args.repo_name
    if args.author is not None:
        data["author_name"] = args.author
    if args.slot:
        data["custom_slots"] = {**data.get("custom_slots", {}), **dict(args.slot)}
    if args.slot_path:
        data["slot_paths"] = [*data.get("slot_paths", []), *args.slot_path]
    data["github_token"] = resolve_github_token(args.token or data.get("github_token"))

    return ScaffoldConfig.model_validate(data)


async def _list(root: str) -> None:
    templates = await get_local_templates(root)
    if not templates:
        console.print(f"[yellow]No templates found in {escape(root)}[/yellow]")
        return

    table = Table(title="Templates", show_header=True, header_style="bold cyan")
    table.add_column("Name", no_wrap=True)
    table.add_column("Path", style="dim")
    for template in templates:
        table.add_row(escape(template.name), escape(str(template.path)))
    console.print(table)


async def _new(args: argparse.Namespace, config: ScaffoldConfig) -> Path:
    target = await scaffold(args.source, args.target, config, ref=args.ref)

    if args.git:
        await initialize_git(target)
    installs = await install_all(config.package_map) if args.install else 0

    print_summary_table(
        {
            "Project": escape(config.repo_name),
            "Author": escape(config.author_name),
            "Location": escape(str(target)),
            "Git": "initialized" if args.git else "skipped",
            "Lock files": ", ".join(r.manager.value for r in config.package_map) or "none",
            "Installs": str(installs),
        },
        title="Scaffold",
    )
    return target


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``stencil`` and ``python -m stencil``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "list":
        try:
            asyncio.run(_list(args.root))
        except OSError as exc:
            print_error(f"Error: {escape(str(exc))}")
            sys.exit(1)
        return

    try:
        config = build_config(args)
    except (OSError, ValidationError, ValueError) as exc:
        print_error(f"Error: invalid configuration\n{escape(str(exc))}")
        sys.exit(1)

    try:
        target = asyncio.run(_new(args, config))
    except (GitHubAPIError, ActionError, OSError, ValueError) as exc:
        print_error(f"Error: {escape(str(exc))}")
        sys.exit(1)

    print_success(f"Created {escape(config.repo_name)} in {escape(str(target))}")


if __name__ == "__main__":
    main()
