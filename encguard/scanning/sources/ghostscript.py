"""Ghostscript source: re-renders the first page of a PDF to a null sink.

Ghostscript refuses to render user-password protected files with an
explicit "requires a password" message. The same message also shows up on
files whose encryption dictionary is merely broken, in which case
Ghostscript prints repair warnings alongside it.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models import ScanResult, ScanStatus
from ..output_parser import OutputParser
from ..source_base import ToolSource
from ..tool_manager import ToolManager

PASSWORD_MARKER = "This file requires a password for access."

DEFAULT_WARNING_MARKERS = [
    "encryption dictionary",
    "encrypt dictionary",
    "error reading encryption",
]


class GhostscriptSource(ToolSource):
    """Primary PDF signal: rendering-engine based."""

    @property
    def tool_name(self) -> str:
        return "ghostscript"

    def __init__(
        self,
        tool_manager: ToolManager,
        config: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(tool_manager, config)
        self.warning_markers: List[str] = list(
            self.config.get("warning_markers") or DEFAULT_WARNING_MARKERS
        )

    def build_command(self, exe: Path, file_path: Path) -> List[str]:
        return [
            str(exe),
            "-q",
            "-dSAFER",
            "-sDEVICE=pdfwrite",
            "-dFirstPage=1",
            "-dLastPage=1",
            "-dBATCH",
            "-dNOPAUSE",
            f"-sOutputFile={os.devnull}",
            str(file_path),
        ]

    def classify_output(self, output: str) -> ScanResult:
        if not OutputParser.contains(output, PASSWORD_MARKER):
            return ScanResult.new(ScanStatus.NOT_DETECTED, "ghostscript rendered the first page")

        warning = OutputParser.find_marker(output, self.warning_markers)
        if warning is None:
            return ScanResult.new(ScanStatus.DETECTED, "ghostscript: password required")

        detail = "; ".join(OutputParser.matching_lines(output, warning))
        return ScanResult.new(
            ScanStatus.DETECTED_WITH_WARNINGS,
            f"ghostscript: password required, with malformed encryption warning ({detail})",
        )
