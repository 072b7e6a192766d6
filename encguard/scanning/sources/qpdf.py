"""QPDF source: reads the PDF encryption metadata.

``qpdf --show-encryption`` prints "invalid password" when a user password
is needed, permission details when only an owner password is set, and
"File is not encrypted" otherwise.
"""

from pathlib import Path
from typing import List

from ..models import ScanResult, ScanStatus
from ..output_parser import OutputParser
from ..source_base import ToolSource

INVALID_PASSWORD_MARKER = "invalid password"


class QpdfSource(ToolSource):
    """Secondary PDF signal: metadata-inspection based."""

    @property
    def tool_name(self) -> str:
        return "qpdf"

    def build_command(self, exe: Path, file_path: Path) -> List[str]:
        return [str(exe), "--show-encryption", str(file_path)]

    def classify_output(self, output: str) -> ScanResult:
        if OutputParser.contains(output, INVALID_PASSWORD_MARKER):
            return ScanResult.new(ScanStatus.DETECTED, "qpdf: invalid password")
        return ScanResult.new(ScanStatus.NOT_DETECTED, "qpdf: no user password")
