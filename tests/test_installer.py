import pytest
import requests

from msdocs import fetcher as fetcher_module
from msdocs.config import Settings
from msdocs.installer import ALL_TOOLS, TOOL_TARGETS, Installer, render_template, resolve_tools
from msdocs.sections import HASH_MARKERS, HTML_MARKERS, PatchResult, RemoveResult


@pytest.fixture(autouse=True)
def offline(monkeypatch):
    def fail(url, timeout):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(fetcher_module.requests, "get", fail)


@pytest.fixture
def installer(tmp_path):
    return Installer(Settings(project_root=tmp_path))


class TestResolveTools:
    def test_single_tool(self):
        assert resolve_tools("Cursor") == ["cursor"]

    @pytest.mark.parametrize("choice", ["all", "both"])
    def test_every_tool(self, choice):
        assert resolve_tools(choice) == list(ALL_TOOLS)

    def test_unknown_tool(self):
        with pytest.raises(ValueError, match="Unknown AI tool"):
            resolve_tools("vim")


def test_render_template_fills_placeholders():
    text = render_template("cursor.md", total_methods=28, version="2.0.0")
    assert "$total_methods" not in text
    assert "28" in text


def test_install_fresh_project(installer, tmp_path):
    report = installer.install(["claude", "cursor"])

    assert report.created_dir
    assert {f.name for f in report.files} == {"complete.md", "index.json", "quickref.md"}
    assert report.sections == {"CLAUDE.md": PatchResult.CREATED, ".cursorrules": PatchResult.CREATED}
    assert report.validation.valid
    assert not report.warnings

    claude = (tmp_path / "CLAUDE.md").read_text(encoding="utf-8")
    assert claude.startswith(HTML_MARKERS.start)
    assert claude.endswith(HTML_MARKERS.end)
    assert "Total Methods: 28" in claude
    cursor = (tmp_path / ".cursorrules").read_text(encoding="utf-8")
    assert cursor.startswith(HASH_MARKERS.start)
    assert not (tmp_path / "AGENTS.md").exists()


def test_update_replaces_in_place(installer, tmp_path):
    host = tmp_path / "CLAUDE.md"
    host.write_text("# Project notes\n", encoding="utf-8")
    installer.install(["claude"])
    first = host.read_text(encoding="utf-8")

    report = installer.update(["claude"])
    assert report.sections["CLAUDE.md"] is PatchResult.REPLACED
    assert host.read_text(encoding="utf-8") == first
    assert first.startswith("# Project notes\n")


def test_install_warns_on_corrupted_markers(installer, tmp_path):
    host = tmp_path / "AGENTS.md"
    host.write_text(f"intro\n{HTML_MARKERS.start}\nunfinished\n", encoding="utf-8")
    report = installer.install(["codex"])
    assert report.sections["AGENTS.md"] is PatchResult.APPENDED_CORRUPTED
    assert report.warnings == ["AGENTS.md: markers were corrupted, a new section was appended"]


def test_dry_run_touches_nothing(installer, tmp_path):
    report = installer.install(list(ALL_TOOLS), dry_run=True)
    assert report.dry_run
    assert report.created_dir
    assert report.files == []
    assert report.validation is None
    assert set(report.sections.values()) == {PatchResult.CREATED}
    assert list(tmp_path.iterdir()) == []


def test_remove(installer, tmp_path):
    installer.install(list(ALL_TOOLS))
    notes = tmp_path / "CLAUDE.md"
    notes.write_text("# Mine\n\n" + notes.read_text(encoding="utf-8"), encoding="utf-8")

    report = installer.remove()
    assert report.removed_dir
    assert not (tmp_path / ".memberstack").exists()
    assert set(report.sections.values()) == {RemoveResult.REMOVED}
    assert notes.read_text(encoding="utf-8") == "# Mine"


def test_remove_dry_run(installer, tmp_path):
    installer.install(["claude"])
    report = installer.remove(dry_run=True)
    assert report.removed_dir
    assert report.sections["CLAUDE.md"] is RemoveResult.REMOVED
    assert report.sections[".cursorrules"] is RemoveResult.MISSING_FILE
    assert (tmp_path / ".memberstack").is_dir()
    assert HTML_MARKERS.start in (tmp_path / "CLAUDE.md").read_text(encoding="utf-8")


def test_validate_empty_project(installer):
    report = installer.validate()
    assert not report.valid
    assert report.checks[0].status == "error"
    assert [c.status for c in report.checks[1:]] == ["warning"] * len(TOOL_TARGETS)


def test_validate_missing_required_file(installer, tmp_path):
    installer.install(["claude"])
    (tmp_path / ".memberstack" / "quickref.md").unlink()
    report = installer.validate(["claude"])
    assert not report.valid
    assert any(c.message == "quickref.md missing" and c.symbol == "✗" for c in report.checks)


def test_validate_host_without_section(installer, tmp_path):
    installer.install(["claude"])
    (tmp_path / "CLAUDE.md").write_text("just notes\n", encoding="utf-8")
    report = installer.validate(["claude"])
    assert report.valid
    assert report.checks[-1].status == "warning"
    assert "missing Memberstack section" in report.checks[-1].message


def test_update_refreshes_only_installed_tools(installer, tmp_path):
    installer.install(["claude"])
    report = installer.update()
    assert report.sections == {"CLAUDE.md": PatchResult.REPLACED}
    assert not (tmp_path / ".cursorrules").exists()
    assert not (tmp_path / "AGENTS.md").exists()


def test_update_without_installed_tools_selects_all(installer):
    assert installer.installed_tools() == []
    report = installer.update(dry_run=True)
    assert set(report.sections) == {"CLAUDE.md", ".cursorrules", "AGENTS.md"}


def test_latin1_host_files(installer, tmp_path):
    (tmp_path / "CLAUDE.md").write_bytes(b"caf\xe9 notes\n")
    (tmp_path / ".cursorrules").write_bytes(b"r\xe8gles\n")

    report = installer.install(["claude"])
    assert report.sections["CLAUDE.md"] is PatchResult.APPENDED_NEW
    assert (tmp_path / "CLAUDE.md").read_bytes().startswith(b"caf\xe9 notes\n")
    assert installer.installed_tools() == ["claude"]

    checks = {c.message: c.status for c in installer.validate().checks}
    assert checks[".cursorrules exists but missing Memberstack section"] == "warning"
