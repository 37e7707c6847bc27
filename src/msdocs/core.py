import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from jsonschema import ValidationError

from msdocs.config import BUNDLED_DOCS_DIR, Settings
from msdocs.errors import DocsError, SourceMissingError
from msdocs.indexer import DEFAULT_DOC_NAME, build_index_from_file, write_index
from msdocs.installer import ALL_TOOLS, TOOL_TARGETS, Installer, InstallReport, ValidationReport, resolve_tools
from msdocs.scanner import DEFAULT_NAMESPACE
from msdocs.sections import PatchResult, RemoveResult

AI_CHOICES = [*ALL_TOOLS, "all", "both"]

TOOL_MENU = {
    "1": ("Claude Code", ["claude"]),
    "2": ("Cursor", ["cursor"]),
    "3": ("Codex", ["codex"]),
    "4": ("All three", list(ALL_TOOLS)),
}

PATCH_MESSAGES = {
    PatchResult.CREATED: ("Created {name}", "green"),
    PatchResult.REPLACED: ("Updated {name} (replaced existing Memberstack section)", "green"),
    PatchResult.APPENDED_NEW: ("Updated {name} (added Memberstack section)", "green"),
    PatchResult.APPENDED_CORRUPTED: ("Updated {name} (appended new section, markers were corrupted)", "yellow"),
}
DRY_RUN_PATCH_MESSAGES = {
    PatchResult.CREATED: "Would create new {name}",
    PatchResult.REPLACED: "Would update existing {name}",
    PatchResult.APPENDED_NEW: "Would update existing {name}",
    PatchResult.APPENDED_CORRUPTED: "Would append to {name} (markers are corrupted)",
}
CHECK_COLORS = {"ok": "green", "warning": "yellow", "error": "red"}


def _fail(payload: Dict[str, Any], code: int = 2) -> None:
    """Emit a JSON error payload and exit."""
    click.echo(json.dumps(payload))
    sys.exit(code)


def _select_tools(ai_tool: Optional[str]) -> List[str]:
    if ai_tool:
        return resolve_tools(ai_tool)
    if not sys.stdout.isatty() or os.environ.get("CI"):
        return list(ALL_TOOLS)
    click.secho("Which AI assistant are you using?\n", fg="cyan")
    for number, (label, _) in TOOL_MENU.items():
        click.echo(f"  {number}) {label}")
    choice = click.prompt(click.style("Select (1-4)", fg="yellow"), default="4", show_default=False)
    if choice.strip() not in TOOL_MENU:
        click.secho("Invalid choice. Installing for all supported tools.", fg="yellow")
        return list(ALL_TOOLS)
    return list(TOOL_MENU[choice.strip()][1])


def _echo_validation(report: ValidationReport) -> None:
    click.echo("")
    for check in report.checks:
        click.secho(f"  {check.symbol} {check.message}", fg=CHECK_COLORS[check.status])
    if report.valid:
        click.secho("\n✅ Installation is valid!", fg="green", bold=True)
    else:
        click.secho("\n❌ Installation has issues. Run `update` to fix.", fg="red", bold=True)


def _echo_install(report: InstallReport, settings: Settings) -> None:
    if report.created_dir:
        verb = "Would create" if report.dry_run else "Created"
        click.secho(f"✓ {verb} {settings.docs_dir_name}/ directory", fg="green")
    for fetched in report.files:
        origin = "Downloaded" if fetched.source == "remote" else f"Used {fetched.source}"
        color = "green" if fetched.source == "remote" else "yellow"
        click.secho(f"✓ {origin} {fetched.name}", fg=color)
    for name, result in report.sections.items():
        if report.dry_run:
            click.secho(f"  {DRY_RUN_PATCH_MESSAGES[result].format(name=name)}", fg="bright_black")
            continue
        message, color = PATCH_MESSAGES[result]
        click.secho(f"✓ {message.format(name=name)}", fg=color)
    for warning in report.warnings:
        click.secho(f"⚠ {warning}", fg="yellow")
    if report.validation is not None:
        _echo_validation(report.validation)


def _run_install(settings: Settings, tools: List[str], dry_run: bool, verb: str) -> None:
    click.secho(f"📦 {verb} Memberstack AI Documentation for: "
                + ", ".join(TOOL_TARGETS[k].label for k in tools), fg="blue")
    if dry_run:
        click.secho("🔍 DRY RUN MODE - No files will be modified", fg="yellow")
    try:
        report = Installer(settings).install(tools, dry_run=dry_run)
    except DocsError as exc:
        _fail(exc.payload)
    except OSError as exc:
        _fail({"error": "install_failed", "hint": str(exc)})
    _echo_install(report, settings)
    if report.validation is not None and not report.validation.valid:
        sys.exit(1)
    if not dry_run:
        click.secho("\n✅ Memberstack AI Documentation installed successfully!", fg="green", bold=True)


@click.group()
@click.option("--verbose", is_flag=True, help="Show detailed log output")
@click.option(
    "--project-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Project receiving the documentation",
)
@click.pass_context
def cli(ctx, verbose, project_root):
    """Install Memberstack AI documentation for your project."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        ctx.obj = Settings.from_env(project_root.resolve())
    except ValueError as exc:
        _fail({"error": "invalid_config", "hint": str(exc)})


@cli.command()
@click.option("--ai", "ai_tool", type=click.Choice(AI_CHOICES, case_sensitive=False),
              help="AI tool to configure (default: ask when interactive, otherwise all)")
@click.option("--dry-run", is_flag=True, help="Preview changes without modifying files")
@click.pass_obj
def install(settings, ai_tool, dry_run):
    """Download the docs and add the Memberstack section to each AI tool's file."""
    _run_install(settings, _select_tools(ai_tool), dry_run, "Installing")


@cli.command()
@click.option("--ai", "ai_tool", type=click.Choice(AI_CHOICES, case_sensitive=False),
              help="AI tool to configure (default: tools already installed, otherwise all)")
@click.option("--dry-run", is_flag=True, help="Preview changes without modifying files")
@click.pass_obj
def update(settings, ai_tool, dry_run):
    """Refresh the docs and replace existing Memberstack sections in place."""
    tools = resolve_tools(ai_tool) if ai_tool else Installer(settings).installed_tools() or list(ALL_TOOLS)
    _run_install(settings, tools, dry_run, "Updating")


@cli.command()
@click.option("--dry-run", is_flag=True, help="Preview changes without modifying files")
@click.pass_obj
def remove(settings, dry_run):
    """Delete the docs directory and strip the Memberstack sections."""
    click.secho("🗑️  Removing Memberstack AI Documentation...", fg="blue")
    if dry_run:
        click.secho("🔍 DRY RUN MODE - No files will be modified", fg="yellow")
    try:
        report = Installer(settings).remove(dry_run=dry_run)
    except OSError as exc:
        _fail({"error": "remove_failed", "hint": str(exc)})
    prefix = "Would remove" if dry_run else "Removed"
    if report.removed_dir:
        click.secho(f"✓ {prefix} {settings.docs_dir_name}/ directory", fg="green")
    for name, result in report.sections.items():
        if result is RemoveResult.REMOVED:
            click.secho(f"✓ {prefix} Memberstack section from {name}", fg="green")
        elif result is RemoveResult.CORRUPTED:
            click.secho(f"⚠ {name}: markers are corrupted, section left in place", fg="yellow")
    if not dry_run:
        click.secho("\n✅ Memberstack AI Documentation removed successfully!", fg="green", bold=True)


@cli.command()
@click.pass_obj
def validate(settings):
    """Check the installed docs and AI tool files; exit 1 when invalid."""
    click.secho("🔍 Validating Memberstack AI Documentation installation...", fg="blue")
    report = Installer(settings).validate()
    _echo_validation(report)
    if not report.valid:
        sys.exit(1)


@cli.command("build-index")
@click.option("--source", type=click.Path(dir_okay=False, path_type=Path),
              default=str(BUNDLED_DOCS_DIR / "complete.md"), show_default=True,
              help="Markdown catalog to compile")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), required=True,
              help="Where to write the JSON index")
@click.option("--namespace", default=DEFAULT_NAMESPACE, show_default=True,
              help="Object the invocation examples are called on")
@click.option("--doc-name", default=DEFAULT_DOC_NAME, show_default=True,
              help="File name used in docLocation pointers")
def build_index(source, output, namespace, doc_name):
    """Compile a markdown method catalog into a searchable JSON index."""
    try:
        index = build_index_from_file(source, namespace, doc_name=doc_name)
    except SourceMissingError as exc:
        _fail(exc.payload)
    try:
        path = write_index(index, output)
    except (ValidationError, ValueError) as exc:
        _fail({"error": "index_invalid", "hint": str(exc)})
    except OSError as exc:
        _fail({"error": "write_failed", "path": str(output), "hint": str(exc)})
    click.echo(json.dumps({"ok": True, "path": str(path), "total_methods": index["totalMethods"]}))


def cli_entry():
    cli(prog_name="memberstack-ai-docs")

if __name__ == "__main__":
    cli_entry()
