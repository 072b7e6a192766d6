"""Shared test fixtures for the encguard test suite."""

from pathlib import Path
from typing import Optional

import pytest

from encguard.config import ScannerSettings
from encguard.scanning.orchestrator import EncryptedContentScanner

from .scanning.helpers import fake_detector


@pytest.fixture(autouse=True)
def no_system_tools(monkeypatch):
    """Keep host installs of gs/qpdf out of the tests."""
    monkeypatch.setattr("encguard.scanning.tool_manager.shutil.which", lambda name: None)


@pytest.fixture
def tmp_tools_dir(tmp_path):
    """Temporary directory for tool binaries."""
    d = tmp_path / "tools"
    d.mkdir()
    return d


@pytest.fixture
def files_dir(tmp_path):
    """Temporary directory for files under scan."""
    d = tmp_path / "files"
    d.mkdir()
    return d


@pytest.fixture
def make_scanner(tmp_tools_dir):
    """Factory for scanners wired to fake tools and the fake detector.

    Tools are looked up in tmp_tools_dir only; pass gs/qpdf script paths
    to make them available.
    """

    def _make(gs: Optional[Path] = None, qpdf: Optional[Path] = None, **settings) -> EncryptedContentScanner:
        missing = str(tmp_tools_dir / "missing")
        settings.setdefault("use_gs", True)
        settings.setdefault("use_qpdf", qpdf is not None)
        settings.setdefault("tool_timeout", 10)
        scanner_settings = ScannerSettings(
            tools_dir=str(tmp_tools_dir),
            gs_path=str(gs) if gs else missing,
            qpdf_path=str(qpdf) if qpdf else missing,
            **settings,
        )
        return EncryptedContentScanner(scanner_settings, detector=fake_detector)

    return _make

