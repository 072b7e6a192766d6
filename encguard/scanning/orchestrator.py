"""Scan orchestration: classify a file, dispatch to its probe, map the result to a verdict.

The scanner never raises to its caller: classification failures, spoofed
types and probe faults all come back as a blocked verdict.
"""

import logging
from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Deque, Dict, List, Optional, Union

from . import messages
from .classifier import OFFICE_CONTAINER_FORMAT, FileClassifier, claimed_extension
from .errors import ProbeFault, TypeMismatch
from .models import (
    ClassificationOutcome,
    FileCategory,
    ProbeOutcome,
    ScanContext,
    ScanResult,
    ScanStatus,
    ScanVerdict,
    VerdictAction,
)
from .probes import EncryptionProbe, OfficeDocumentProbe, PdfProbe, ZipProbe
from .probes.zip_probe import zip_support_available
from .registry import TypeRegistry
from .signature import MagicSignatureDetector, SignatureDetector
from .sources import GhostscriptSource, QpdfSource
from .tool_manager import ToolManager
from ..config import ScannerSettings

logger = logging.getLogger(__name__)

HISTORY_SIZE = 100


class EncryptedContentScanner:
    """Runs one encrypted-content scan per call to scan_file()."""

    def __init__(
        self,
        settings: Optional[ScannerSettings] = None,
        registry: Optional[TypeRegistry] = None,
        detector: Optional[SignatureDetector] = None,
        tool_manager: Optional[ToolManager] = None,
    ):
        self.settings = settings or ScannerSettings()
        self.registry = registry or TypeRegistry(self.settings.registry_config())
        self.tool_manager = tool_manager or ToolManager(
            tools_dir=self.settings.tools_dir,
            config=self.settings.tools_config(),
        )
        self.classifier = FileClassifier(self.registry, detector or MagicSignatureDetector())
        self.allowed_extensions = {e.lower().lstrip(".") for e in self.settings.allowed_extensions}
        self._probes: Dict[str, EncryptionProbe] = {}
        self._history: Deque[ScanVerdict] = deque(maxlen=HISTORY_SIZE)
        self._register_probes()

    def _register_probes(self) -> None:
        """Build the format tag -> probe dispatch table."""
        pdf_probe = PdfProbe(
            GhostscriptSource(self.tool_manager, self.settings.source_config("ghostscript")),
            QpdfSource(self.tool_manager, self.settings.source_config("qpdf")),
        )
        self._probes = {
            "zip": ZipProbe(),
            "pdf": pdf_probe,
            OFFICE_CONTAINER_FORMAT: OfficeDocumentProbe(),
        }

    def get_probe(self, resolved_format: str) -> Optional[EncryptionProbe]:
        return self._probes.get(resolved_format)

    @property
    def pdf_probe(self) -> PdfProbe:
        return self._probes["pdf"]

    def is_configured(self) -> bool:
        """Whether every enabled dependency of the engine is usable."""
        if not zip_support_available():
            logger.warning("zlib is not available; deflated ZIP containers cannot be read")
            return False
        pdf = self.pdf_probe
        for source in (pdf.primary, pdf.secondary):
            if source.enabled and not source.is_available():
                logger.warning(f"{source.tool_name} is enabled but not available")
                return False
        return True

    async def scan_file(self, file_path: Union[str, Path], filename: Optional[str] = None) -> ScanVerdict:
        """Scan ``file_path``, trusting nothing about ``filename`` but its extension claim."""
        file_path = Path(file_path)
        context = ScanContext(file_path=file_path, filename=filename or file_path.name)
        context.claimed_extension = claimed_extension(context.filename)
        started_at = datetime.now()

        logger.info(f"Scanning {context.filename} ({file_path})")
        verdict = await self._scan(context)
        verdict.started_at = started_at
        verdict.completed_at = datetime.now()

        logger.info(
            f"{context.filename}: {verdict.action.value}"
            f" ({verdict.status.value if verdict.status else 'no status'}) {verdict.message}"
        )
        self._history.append(verdict)
        return verdict

    async def _scan(self, context: ScanContext) -> ScanVerdict:
        if self.allowed_extensions and context.claimed_extension not in self.allowed_extensions:
            # The host refuses this extension on its own; nothing to inspect.
            result = ScanResult.new(
                ScanStatus.IGNORED,
                f"extension '.{context.claimed_extension}' is not allowed on this site",
            )
            return self._verdict(context, result)

        try:
            outcome = self.classifier.classify(context)
        except TypeMismatch as e:
            logger.warning(f"{context.filename}: {e}")
            return ScanVerdict(
                filename=context.filename,
                action=VerdictAction.BLOCKED,
                message=str(e),
                notice=messages.MIMETYPE_MISMATCH,
            )
        except Exception as e:
            logger.error(f"Failed to classify {context.filename}: {e}", exc_info=True)
            return self._fault_verdict(context, f"classification failed: {type(e).__name__}")

        if outcome.category == FileCategory.OTHER:
            result = ScanResult.new(ScanStatus.NOT_DETECTED, "not a document or archive")
            return self._verdict(context, result, outcome)

        probe = self.get_probe(outcome.resolved_format)
        if probe is None:
            result = ScanResult.new(
                ScanStatus.IGNORED,
                f"no encryption probe for format '{outcome.resolved_format}'",
            )
            return self._verdict(context, result, outcome)

        probe_outcome = await self._run_probe(probe, context)
        if probe_outcome.failed:
            return self._fault_verdict(context, probe_outcome.fault, outcome)
        return self._verdict(context, probe_outcome.result, outcome)

    async def _run_probe(self, probe: EncryptionProbe, context: ScanContext) -> ProbeOutcome:
        """Run a probe, capturing any fault as data instead of letting it unwind."""
        try:
            result = await probe.probe(context)
        except Exception as e:
            fault = e if isinstance(e, ProbeFault) else ProbeFault(f"{type(e).__name__}: {e}")
            logger.error(f"{probe.name} probe failed on {context.filename}: {fault}", exc_info=True)
            return ProbeOutcome(probe_name=probe.name, fault=str(fault))
        return ProbeOutcome(probe_name=probe.name, result=result)

    def _verdict(
        self,
        context: ScanContext,
        result: ScanResult,
        outcome: Optional[ClassificationOutcome] = None,
    ) -> ScanVerdict:
        action = self.action_for(result.status)
        if result.is_detected:
            notice = messages.ENCRYPTED_CONTENT_FOUND
            logger.warning(messages.encrypted_content_message(context.filename))
        elif result.status == ScanStatus.CANNOT_RUN:
            notice = messages.CANNOT_RUN
        else:
            notice = ""
        return ScanVerdict(
            filename=context.filename,
            action=action,
            status=result.status,
            message=result.message,
            notice=notice,
            category=outcome.category if outcome else None,
            resolved_extension=context.resolved_extension,
            resolved_format=context.resolved_format,
        )

    def _fault_verdict(
        self,
        context: ScanContext,
        detail: Optional[str],
        outcome: Optional[ClassificationOutcome] = None,
    ) -> ScanVerdict:
        return ScanVerdict(
            filename=context.filename,
            action=VerdictAction.BLOCKED,
            message=f"scan failed, blocking file ({detail or 'unknown error'})",
            notice=messages.SCAN_FAILED,
            category=outcome.category if outcome else None,
            resolved_extension=context.resolved_extension,
            resolved_format=context.resolved_format,
        )

    def action_for(self, status: ScanStatus) -> VerdictAction:
        """Map a final ScanStatus to what the host should do with the file."""
        if status in (ScanStatus.DETECTED, ScanStatus.DETECTED_WITH_WARNINGS):
            return VerdictAction.BLOCKED
        if status == ScanStatus.CANNOT_RUN:
            if self.settings.block_on_cannot_run:
                return VerdictAction.BLOCKED
            return VerdictAction.INDETERMINATE
        return VerdictAction.ALLOWED

    def get_recent_verdicts(self, limit: int = 10) -> List[ScanVerdict]:
        """Get the most recent verdicts, oldest first."""
        if limit <= 0:
            return []
        return list(self._history)[-limit:]
