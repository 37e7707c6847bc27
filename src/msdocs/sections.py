"""Marker-delimited section patching for host files (CLAUDE.md, .cursorrules, ...).

Only the range from the start marker through the end marker is ever rewritten.
Text outside that range is left byte-for-byte intact: files are read and
written without newline translation, and bytes that are not valid UTF-8
round-trip through surrogate escapes.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

LOGGER = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n"

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class MarkerPair:
    """Literal start/end strings bounding a managed section."""
    start: str
    end: str

    def wrap(self, body: str) -> str:
        """Return ``body`` enclosed by the markers, one per line."""
        return f"{self.start}\n{body.strip()}\n{self.end}"


HTML_MARKERS = MarkerPair("<!-- MEMBERSTACK-AI-DOCS-START -->", "<!-- MEMBERSTACK-AI-DOCS-END -->")
HASH_MARKERS = MarkerPair("# MEMBERSTACK-AI-DOCS-START", "# MEMBERSTACK-AI-DOCS-END")


class PatchResult(str, Enum):
    CREATED = "created"
    REPLACED = "replaced"
    APPENDED_NEW = "appended-new"
    APPENDED_CORRUPTED = "appended-corrupted"


class RemoveResult(str, Enum):
    REMOVED = "removed"
    MISSING_FILE = "missing-file"
    MISSING_SECTION = "missing-section"
    CORRUPTED = "corrupted"


def locate_section(content: str, start_marker: str, end_marker: str) -> Tuple[int, Optional[int]]:
    """Find the section range ``[start, end)`` in ``content``.

    The start and end markers are located independently (first occurrence of
    each). Returns ``(-1, None)`` when the start marker is absent and
    ``(start, None)`` when the end marker is missing or does not follow the
    start marker, i.e. the markers are corrupted.
    """
    start_index = content.find(start_marker)
    if start_index == -1:
        return -1, None
    end_pos = content.find(end_marker)
    if end_pos == -1 or end_pos < start_index + len(start_marker):
        return start_index, None
    return start_index, end_pos + len(end_marker)


def patch_text(existing: Optional[str], new_content: str, start_marker: str, end_marker: str) -> Tuple[str, PatchResult]:
    """Compute the patched text for ``existing`` (None meaning no file yet)."""
    if existing is None:
        return new_content, PatchResult.CREATED
    start_index, end_index = locate_section(existing, start_marker, end_marker)
    if start_index == -1:
        return existing + SECTION_SEPARATOR + new_content, PatchResult.APPENDED_NEW
    if end_index is None:
        return existing + SECTION_SEPARATOR + new_content, PatchResult.APPENDED_CORRUPTED
    return existing[:start_index] + new_content + existing[end_index:], PatchResult.REPLACED


def remove_text(existing: str, start_marker: str, end_marker: str) -> Tuple[str, RemoveResult]:
    """Compute the text with the section removed; corrupted markers leave it unchanged."""
    start_index, end_index = locate_section(existing, start_marker, end_marker)
    if start_index == -1:
        return existing, RemoveResult.MISSING_SECTION
    if end_index is None:
        return existing, RemoveResult.CORRUPTED
    return existing[:start_index].rstrip() + existing[end_index:], RemoveResult.REMOVED


def read_host(path: PathLike) -> Optional[str]:
    """Return the text of a host file, or None when it does not exist."""
    try:
        with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as handle:
            return handle.read()
    except FileNotFoundError:
        return None


def _write(path: Path, content: str) -> None:
    with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as handle:
        handle.write(content)


def patch_section(
    path: PathLike,
    new_content: str,
    start_marker: str,
    end_marker: str,
    *,
    dry_run: bool = False,
) -> PatchResult:
    """Create, replace or append the managed section in ``path``.

    Args:
        path: Host file to patch.
        new_content: Full section text, markers included.
        start_marker: Literal marking the start of the section.
        end_marker: Literal marking the end of the section.
        dry_run: Compute the outcome without writing.

    Returns:
        The outcome. ``APPENDED_CORRUPTED`` means a stray start marker was left
        in place and the caller should warn about it.
    """
    target = Path(path)
    patched, result = patch_text(read_host(target), new_content, start_marker, end_marker)
    if result is PatchResult.APPENDED_CORRUPTED:
        LOGGER.warning("%s: section markers are corrupted, appending a new section", target)
    if not dry_run:
        _write(target, patched)
    LOGGER.debug("%s: patch %s%s", target, result.value, " (dry run)" if dry_run else "")
    return result


def remove_section(
    path: PathLike,
    start_marker: str,
    end_marker: str,
    *,
    dry_run: bool = False,
) -> RemoveResult:
    """Delete the managed section from ``path``.

    Missing files and files without the start marker are left alone. A start
    marker without a valid end marker is reported as ``CORRUPTED`` and the file
    is not modified.
    """
    target = Path(path)
    existing = read_host(target)
    if existing is None:
        return RemoveResult.MISSING_FILE
    stripped, result = remove_text(existing, start_marker, end_marker)
    if result is RemoveResult.CORRUPTED:
        LOGGER.warning("%s: section markers are corrupted, leaving file unchanged", target)
    if result is RemoveResult.REMOVED and not dry_run:
        _write(target, stripped)
    LOGGER.debug("%s: remove %s%s", target, result.value, " (dry run)" if dry_run else "")
    return result
