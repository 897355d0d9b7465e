"""Slot substitution.

Slots are literal placeholder strings such as ``[REPO_NAME]``.  Substitution
is opt-in: only files whose destination path matches one of the configured
``slot_paths`` globs are touched, everything else is copied verbatim.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePath

from wcmatch import glob

from stencil.config import AUTHOR_NAME_SLOT, REPO_NAME_SLOT, ScaffoldConfig

GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.CASE


def build_slot_map(config: ScaffoldConfig) -> dict[str, str]:
    """Return the token -> replacement mapping for *config*."""
    return {
        REPO_NAME_SLOT: config.repo_name,
        AUTHOR_NAME_SLOT: config.author_name,
        **config.custom_slots,
    }


def matches_slot_paths(file_path: str | Path, patterns: list[str]) -> bool:
    """Return ``True`` if *file_path* matches at least one glob in *patterns*.

    Matching follows minimatch rules: ``**`` spans directories, ``{a,b}``
    expands, ``*`` stops at ``/`` and never matches a leading dot.  Relative
    patterns are matched against the path with its root removed.
    """
    path = PurePath(file_path)
    absolute = path.as_posix()
    relative = path.relative_to(path.anchor).as_posix() if path.anchor else absolute
    return any(
        glob.globmatch(absolute if pattern.startswith("/") else relative, pattern, flags=GLOB_FLAGS)
        for pattern in patterns
    )


def _compile(slots: dict[str, str]) -> re.Pattern[str]:
    # Longest first so a token that contains another one wins.
    keys = sorted(slots, key=len, reverse=True)
    return re.compile("|".join(re.escape(key) for key in keys))


def replace_slots(file_path: str | Path, content: str, config: ScaffoldConfig) -> str:
    """Replace every slot in *content* when *file_path* is covered by ``slot_paths``.

    All tokens are substituted in a single pass, so a replacement value that
    happens to contain another token is left as-is.
    """
    if not matches_slot_paths(file_path, config.slot_paths):
        return content

    slots = build_slot_map(config)
    return _compile(slots).sub(lambda match: slots[match.group(0)], content)


def render_file(file_path: str | Path, data: bytes, config: ScaffoldConfig) -> bytes:
    """Byte-level wrapper around :func:`replace_slots`.

    Files outside ``slot_paths`` are returned unchanged, which keeps binary
    assets intact.  Slotted files are treated as UTF-8 text.
    """
    if not matches_slot_paths(file_path, config.slot_paths):
        return data
    text = data.decode("utf-8")
    return replace_slots(file_path, text, config).encode("utf-8")
