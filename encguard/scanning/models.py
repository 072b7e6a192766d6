"""Pydantic v2 models for the encrypted content scanning subsystem."""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScanStatus(str, Enum):
    DETECTED = "detected"
    DETECTED_WITH_WARNINGS = "detected_with_warnings"
    NOT_DETECTED = "not_detected"
    CANNOT_RUN = "cannot_run"
    IGNORED = "ignored"


class FileCategory(str, Enum):
    DOCUMENT = "document"
    ARCHIVE = "archive"
    OTHER = "other"


class VerdictAction(str, Enum):
    BLOCKED = "blocked"
    ALLOWED = "allowed"
    INDETERMINATE = "indeterminate"


class ScanResult(BaseModel):
    """Outcome of a single probe or signal source.

    The message is diagnostic text and may quote tool output; sanitize it
    before showing it to untrusted users.
    """

    model_config = ConfigDict(frozen=True)

    status: ScanStatus
    message: str = ""

    @classmethod
    def new(cls, status: ScanStatus, message: str) -> "ScanResult":
        return cls(status=status, message=message)

    @property
    def is_detected(self) -> bool:
        return self.status in (ScanStatus.DETECTED, ScanStatus.DETECTED_WITH_WARNINGS)


class ClassificationOutcome(BaseModel):
    """What the classifier decided a file really is."""

    model_config = ConfigDict(frozen=True)

    category: FileCategory
    resolved_extension: str = ""
    resolved_format: str = ""
    signature: str = ""


class ScanContext(BaseModel):
    """Per-scan state. Built fresh for every scan and never shared."""

    file_path: Path
    filename: str
    claimed_extension: str = ""
    resolved_extension: str = ""
    resolved_format: str = ""


class MimeTypeEntry(BaseModel):
    """One row of the type registry, keyed by extension.

    ``alternate_signatures`` are other names for the same format and match
    the row in signature lookups. ``compatible_signatures`` are container
    types the format may sniff as (OOXML as plain zip); they never vouch
    for the extension, they only keep such a file from counting as spoofed.
    """

    extension: str
    signature: str
    groups: List[str] = Field(default_factory=list)
    alternate_signatures: List[str] = Field(default_factory=list)
    compatible_signatures: List[str] = Field(default_factory=list)

    @property
    def signatures(self) -> List[str]:
        return [self.signature, *self.alternate_signatures]


class ToolInfo(BaseModel):
    """Metadata and resolved location for an external PDF inspection tool."""

    name: str
    display_name: str
    exe_name: str
    path: Optional[Path] = None
    expected_hash: Optional[str] = None
    installed: bool = False
    license: str = ""

    model_config = ConfigDict(extra="allow")


class ProbeOutcome(BaseModel):
    """Either a probe's result or the fault that stopped it."""

    probe_name: str
    result: Optional[ScanResult] = None
    fault: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.result is None


class ScanVerdict(BaseModel):
    """Final answer handed back to the host pipeline."""

    filename: str
    action: VerdictAction
    status: Optional[ScanStatus] = None
    message: str = ""
    notice: str = ""
    category: Optional[FileCategory] = None
    resolved_extension: str = ""
    resolved_format: str = ""
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def blocked(self) -> bool:
        return self.action == VerdictAction.BLOCKED

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None
