"""Install, update, remove and validate the documentation in a project."""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from string import Template
from typing import Dict, Iterable, List, Optional

from msdocs.config import TEMPLATES_DIR, Settings
from msdocs.fetcher import REQUIRED_FILES, DocFetcher, FetchedFile
from msdocs.indexer import INDEX_VERSION, build_index_from_file
from msdocs.sections import HASH_MARKERS, HTML_MARKERS, MarkerPair, PatchResult, RemoveResult, patch_section, read_host, remove_section

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolTarget:
    """An AI assistant and the host file its instructions live in."""
    key: str
    label: str
    file_name: str
    markers: MarkerPair
    template: str


TOOL_TARGETS: Dict[str, ToolTarget] = {
    "claude": ToolTarget("claude", "Claude Code", "CLAUDE.md", HTML_MARKERS, "claude.md"),
    "cursor": ToolTarget("cursor", "Cursor", ".cursorrules", HASH_MARKERS, "cursor.md"),
    "codex": ToolTarget("codex", "Codex", "AGENTS.md", HTML_MARKERS, "claude.md"),
}
ALL_TOOLS = tuple(TOOL_TARGETS)


def resolve_tools(choice: str) -> List[str]:
    """Map a tool choice (``claude``, ``cursor``, ``codex``, ``all``) to tool keys.

    Raises:
        ValueError: If the choice names no known tool.
    """
    choice = choice.strip().lower()
    if choice in ("all", "both"):
        return list(ALL_TOOLS)
    if choice not in TOOL_TARGETS:
        raise ValueError(f"Unknown AI tool '{choice}' (expected one of {', '.join(ALL_TOOLS)}, all)")
    return [choice]


def render_template(name: str, **values) -> str:
    """Fill a bundled section template; unknown placeholders are left as-is."""
    text = (TEMPLATES_DIR / name).read_text(encoding="utf-8")
    return Template(text).safe_substitute(**values)


@dataclass
class Check:
    status: str               # "ok" | "warning" | "error"
    message: str

    @property
    def symbol(self) -> str:
        return {"ok": "✓", "warning": "⚠", "error": "✗"}[self.status]


@dataclass
class ValidationReport:
    valid: bool
    checks: List[Check] = field(default_factory=list)


@dataclass
class InstallReport:
    dry_run: bool
    created_dir: bool = False
    files: List[FetchedFile] = field(default_factory=list)
    sections: Dict[str, PatchResult] = field(default_factory=dict)
    validation: Optional[ValidationReport] = None

    @property
    def warnings(self) -> List[str]:
        return [
            f"{name}: markers were corrupted, a new section was appended"
            for name, result in self.sections.items()
            if result is PatchResult.APPENDED_CORRUPTED
        ]


@dataclass
class RemoveReport:
    dry_run: bool
    removed_dir: bool = False
    sections: Dict[str, RemoveResult] = field(default_factory=dict)


class Installer:
    """Applies the documentation bundle to ``settings.project_root``."""

    def __init__(self, settings: Settings, fetcher: Optional[DocFetcher] = None):
        self.settings = settings
        self.fetcher = fetcher or DocFetcher(settings)

    def host_path(self, target: ToolTarget) -> Path:
        return self.settings.project_root / target.file_name

    def total_methods(self) -> int:
        """Method count from the installed index, or from the bundled catalog."""
        index_path = self.settings.docs_dir / "index.json"
        if index_path.is_file():
            try:
                return int(json.loads(index_path.read_text(encoding="utf-8"))["totalMethods"])
            except (ValueError, KeyError, TypeError) as exc:
                LOGGER.warning("Ignoring unreadable %s: %s", index_path, exc)
        return build_index_from_file(self.settings.bundled_dir / "complete.md")["totalMethods"]

    def render_section(self, target: ToolTarget, total_methods: int) -> str:
        body = render_template(target.template, total_methods=total_methods, version=INDEX_VERSION)
        return target.markers.wrap(body)

    def install(self, tools: Iterable[str] = ALL_TOOLS, dry_run: bool = False) -> InstallReport:
        """Download the docs and patch each selected tool's host file.

        Args:
            tools: Tool keys from ``TOOL_TARGETS``.
            dry_run: Report the planned outcome without touching the filesystem.

        Returns:
            A report of fetched files, patch outcomes and (unless dry run) validation.
        """
        tools = list(tools)
        report = InstallReport(dry_run=dry_run)
        docs_dir = self.settings.docs_dir
        if not docs_dir.exists():
            report.created_dir = True
            if not dry_run:
                docs_dir.mkdir(parents=True)
        if dry_run:
            LOGGER.info("Dry run: would download %s into %s", ", ".join(REQUIRED_FILES), docs_dir)
        else:
            report.files = self.fetcher.download_all(docs_dir)

        total = self.total_methods()
        for key in tools:
            target = TOOL_TARGETS[key]
            section = self.render_section(target, total)
            result = patch_section(
                self.host_path(target),
                section,
                target.markers.start,
                target.markers.end,
                dry_run=dry_run,
            )
            report.sections[target.file_name] = result
            LOGGER.info("%s: %s", target.file_name, result.value)

        if not dry_run:
            report.validation = self.validate(tools)
        return report

    def installed_tools(self) -> List[str]:
        """Tool keys whose host file already carries the start marker."""
        installed = []
        for key, target in TOOL_TARGETS.items():
            content = read_host(self.host_path(target))
            if content is not None and target.markers.start in content:
                installed.append(key)
        return installed

    def update(self, tools: Optional[Iterable[str]] = None, dry_run: bool = False) -> InstallReport:
        """Re-run the install; existing sections are replaced in place.

        Without ``tools``, only the tools already installed are refreshed, or
        every tool when none is installed yet.
        """
        if tools is None:
            tools = self.installed_tools() or list(ALL_TOOLS)
        return self.install(tools, dry_run=dry_run)

    def remove(self, dry_run: bool = False) -> RemoveReport:
        """Delete the docs directory and strip the section from every host file."""
        report = RemoveReport(dry_run=dry_run)
        docs_dir = self.settings.docs_dir
        if docs_dir.exists():
            report.removed_dir = True
            if not dry_run:
                shutil.rmtree(docs_dir)
        for target in TOOL_TARGETS.values():
            report.sections[target.file_name] = remove_section(
                self.host_path(target), target.markers.start, target.markers.end, dry_run=dry_run
            )
        return report

    def validate(self, tools: Iterable[str] = ALL_TOOLS) -> ValidationReport:
        """Check the docs directory, required files and host file sections."""
        checks: List[Check] = []
        valid = True
        docs_dir = self.settings.docs_dir
        if docs_dir.is_dir():
            checks.append(Check("ok", f"{self.settings.docs_dir_name}/ directory exists"))
            for name in REQUIRED_FILES:
                path = docs_dir / name
                if path.is_file():
                    checks.append(Check("ok", f"{name} ({path.stat().st_size / 1024:.1f} KB)"))
                else:
                    checks.append(Check("error", f"{name} missing"))
                    valid = False
        else:
            checks.append(Check("error", f"{self.settings.docs_dir_name}/ directory missing"))
            valid = False

        for key in tools:
            target = TOOL_TARGETS[key]
            content = read_host(self.host_path(target))
            if content is None:
                checks.append(Check("warning", f"{target.file_name} not found"))
            elif target.markers.start in content:
                checks.append(Check("ok", f"{target.file_name} contains Memberstack section"))
            else:
                checks.append(Check("warning", f"{target.file_name} exists but missing Memberstack section"))
        return ValidationReport(valid=valid, checks=checks)
