"""Encrypted content scanning subsystem.

Classifies files by sniffed content type, then checks ZIP archives,
OpenDocument containers and PDFs (via Ghostscript and qpdf) for
encryption that would stop deeper inspection.
"""

from .classifier import FileClassifier
from .errors import EncGuardError, ProbeFault, ProbeUnavailable, TypeMismatch
from .models import (
    ClassificationOutcome,
    FileCategory,
    MimeTypeEntry,
    ProbeOutcome,
    ScanContext,
    ScanResult,
    ScanStatus,
    ScanVerdict,
    ToolInfo,
    VerdictAction,
)
from .orchestrator import EncryptedContentScanner
from .registry import TypeRegistry
from .tool_manager import ToolManager

__all__ = [
    "ClassificationOutcome",
    "EncGuardError",
    "EncryptedContentScanner",
    "FileCategory",
    "FileClassifier",
    "MimeTypeEntry",
    "ProbeFault",
    "ProbeOutcome",
    "ProbeUnavailable",
    "ScanContext",
    "ScanResult",
    "ScanStatus",
    "ScanVerdict",
    "ToolInfo",
    "ToolManager",
    "TypeMismatch",
    "TypeRegistry",
    "VerdictAction",
]
