"""Tests for the Ghostscript and qpdf sources: output classification and command building.

Real binaries are replaced by small executable scripts that print canned
output, so these run anywhere Python does.
"""

import os
import pytest
from pathlib import Path

from encguard.scanning.errors import ProbeFault
from encguard.scanning.models import ScanResult, ScanStatus
from encguard.scanning.sources.ghostscript import PASSWORD_MARKER, GhostscriptSource
from encguard.scanning.sources.qpdf import QpdfSource
from encguard.scanning.tool_manager import ToolManager

from .helpers import make_fake_tool

GS_PASSWORD = f"   **** Error: Couldn't initialise file.\n{PASSWORD_MARKER}\n"
GS_PASSWORD_MALFORMED = (
    "   **** Warning: The encryption dictionary is malformed, attempting repair.\n"
    f"{PASSWORD_MARKER}\n"
)
QPDF_ENCRYPTED = "qpdf: secret.pdf: invalid password\n"
QPDF_OWNER_ONLY = "R = 3\nP = -3904\nUser password = \nextract for accessibility: allowed\n"
QPDF_PLAIN = "File is not encrypted\n"


def _tool_manager(tmp_tools_dir: Path, **paths) -> ToolManager:
    return ToolManager(
        tools_dir=str(tmp_tools_dir),
        config={"tools": {name: {"path": str(path)} for name, path in paths.items()}},
    )


class TestGhostscriptClassification:
    @pytest.fixture
    def source(self, tmp_tools_dir):
        return GhostscriptSource(_tool_manager(tmp_tools_dir))

    def test_password_required(self, source):
        assert source.classify_output(GS_PASSWORD).status == ScanStatus.DETECTED

    def test_password_required_with_malformed_dictionary(self, source):
        result = source.classify_output(GS_PASSWORD_MALFORMED)
        assert result.status == ScanStatus.DETECTED_WITH_WARNINGS
        assert "encryption dictionary" in result.message

    def test_warning_alone_is_not_detection(self, source):
        result = source.classify_output("**** Warning: encryption dictionary is malformed\n")
        assert result.status == ScanStatus.NOT_DETECTED

    def test_clean_render(self, source):
        assert source.classify_output("").status == ScanStatus.NOT_DETECTED

    def test_marker_case_insensitive(self, source):
        assert source.classify_output(PASSWORD_MARKER.upper()).status == ScanStatus.DETECTED

    def test_custom_warning_markers(self, tmp_tools_dir):
        source = GhostscriptSource(_tool_manager(tmp_tools_dir), {"warning_markers": ["repairing"]})
        result = source.classify_output(f"repairing xref\n{PASSWORD_MARKER}\n")
        assert result.status == ScanStatus.DETECTED_WITH_WARNINGS

    def test_build_command(self, source):
        cmd = source.build_command(Path("/usr/bin/gs"), Path("/tmp/in.pdf"))
        assert cmd[0] == "/usr/bin/gs"
        assert "-dFirstPage=1" in cmd
        assert "-dLastPage=1" in cmd
        assert "-dSAFER" in cmd
        assert f"-sOutputFile={os.devnull}" in cmd
        assert cmd[-1] == "/tmp/in.pdf"


class TestQpdfClassification:
    @pytest.fixture
    def source(self, tmp_tools_dir):
        return QpdfSource(_tool_manager(tmp_tools_dir))

    def test_invalid_password(self, source):
        assert source.classify_output(QPDF_ENCRYPTED).status == ScanStatus.DETECTED

    def test_owner_password_only(self, source):
        assert source.classify_output(QPDF_OWNER_ONLY).status == ScanStatus.NOT_DETECTED

    def test_not_encrypted(self, source):
        assert source.classify_output(QPDF_PLAIN).status == ScanStatus.NOT_DETECTED

    def test_build_command(self, source):
        cmd = source.build_command(Path("/usr/bin/qpdf"), Path("/tmp/in.pdf"))
        assert cmd == ["/usr/bin/qpdf", "--show-encryption", "/tmp/in.pdf"]


class TestToolSourceRun:
    @pytest.mark.asyncio
    async def test_runs_tool_and_classifies(self, tmp_tools_dir, tmp_path):
        gs = make_fake_tool(tmp_tools_dir / "ghostscript", "gs", GS_PASSWORD)
        source = GhostscriptSource(_tool_manager(tmp_tools_dir, ghostscript=gs))
        result = await source.run(tmp_path / "in.pdf")
        assert result.status == ScanStatus.DETECTED

    @pytest.mark.asyncio
    async def test_nonzero_exit_still_classified(self, tmp_tools_dir, tmp_path):
        qpdf = make_fake_tool(tmp_tools_dir / "qpdf", "qpdf", QPDF_ENCRYPTED, exit_code=2)
        source = QpdfSource(_tool_manager(tmp_tools_dir, qpdf=qpdf))
        result = await source.run(tmp_path / "in.pdf")
        assert result.status == ScanStatus.DETECTED

    @pytest.mark.asyncio
    async def test_tool_found_in_tools_dir(self, tmp_tools_dir, tmp_path):
        make_fake_tool(tmp_tools_dir / "qpdf", "qpdf", QPDF_PLAIN)
        source = QpdfSource(_tool_manager(tmp_tools_dir, qpdf=tmp_tools_dir / "nowhere"))
        result = await source.run(tmp_path / "in.pdf")
        assert result.status == ScanStatus.NOT_DETECTED

    @pytest.mark.asyncio
    async def test_missing_tool_cannot_run(self, tmp_tools_dir, tmp_path):
        source = QpdfSource(_tool_manager(tmp_tools_dir, qpdf=tmp_tools_dir / "nowhere"))
        result = await source.run(tmp_path / "in.pdf")
        assert result.status == ScanStatus.CANNOT_RUN
        assert "not found" in result.message

    @pytest.mark.asyncio
    async def test_non_executable_tool_cannot_run(self, tmp_tools_dir, tmp_path):
        gs = tmp_tools_dir / "gs-copy"
        gs.write_text("not executable")
        gs.chmod(0o644)
        source = GhostscriptSource(_tool_manager(tmp_tools_dir, ghostscript=gs))
        result = await source.run(tmp_path / "in.pdf")
        assert result.status == ScanStatus.CANNOT_RUN

    @pytest.mark.asyncio
    async def test_disabled_cannot_run(self, tmp_tools_dir, tmp_path):
        gs = make_fake_tool(tmp_tools_dir / "ghostscript", "gs", GS_PASSWORD)
        source = GhostscriptSource(_tool_manager(tmp_tools_dir, ghostscript=gs), {"enabled": False})
        result = await source.run(tmp_path / "in.pdf")
        assert result.status == ScanStatus.CANNOT_RUN
        assert "disabled" in result.message

    @pytest.mark.asyncio
    async def test_timeout_cannot_run(self, tmp_tools_dir, tmp_path):
        gs = make_fake_tool(tmp_tools_dir / "ghostscript", "gs", GS_PASSWORD, sleep=30)
        source = GhostscriptSource(_tool_manager(tmp_tools_dir, ghostscript=gs), {"timeout": 0.5})
        result = await source.run(tmp_path / "in.pdf")
        assert result.status == ScanStatus.CANNOT_RUN
        assert "timed out" in result.message

    @pytest.mark.asyncio
    async def test_integrity_mismatch_cannot_run(self, tmp_tools_dir, tmp_path):
        gs = make_fake_tool(tmp_tools_dir / "ghostscript", "gs", GS_PASSWORD)
        tm = ToolManager(
            tools_dir=str(tmp_tools_dir),
            config={"tools": {"ghostscript": {"path": str(gs), "expected_hash": "00bad00"}}},
        )
        result = await GhostscriptSource(tm).run(tmp_path / "in.pdf")
        assert result.status == ScanStatus.CANNOT_RUN
        assert "integrity" in result.message

    @pytest.mark.asyncio
    async def test_classification_error_raises_probe_fault(self, tmp_tools_dir, tmp_path):
        class BrokenSource(QpdfSource):
            def classify_output(self, output: str) -> ScanResult:
                raise ValueError("unexpected output")

        qpdf = make_fake_tool(tmp_tools_dir / "qpdf", "qpdf", QPDF_PLAIN)
        source = BrokenSource(_tool_manager(tmp_tools_dir, qpdf=qpdf))
        with pytest.raises(ProbeFault, match="unexpected output"):
            await source.run(tmp_path / "in.pdf")
