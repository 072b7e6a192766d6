"""Resolve what a file really is from its bytes and its claimed name.

Classification is signature-first: the sniffed content signature picks the
registry rows, and the claimed extension is only trusted when it is one of
those rows.
"""

import logging
from pathlib import PurePath
from typing import List, Optional, Set

from .errors import TypeMismatch
from .models import ClassificationOutcome, FileCategory, MimeTypeEntry, ScanContext
from .registry import TypeRegistry
from .signature import SignatureDetector

logger = logging.getLogger(__name__)

OFFICE_CONTAINER_FORMAT = "office-container"


def claimed_extension(filename: str) -> str:
    """Lower-cased text after the final '.' of the base name, or ''."""
    name = PurePath(filename).name
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


class FileClassifier:
    """Maps a file to Document / Archive / Other plus a format tag."""

    def __init__(self, registry: TypeRegistry, detector: SignatureDetector):
        self.registry = registry
        self.detector = detector

    def classify(self, context: ScanContext) -> ClassificationOutcome:
        """Classify the file in ``context`` and record the result on it.

        Raises:
            TypeMismatch: the content belongs to a type family that has
                nothing in common with the claimed extension.
        """
        extension = context.claimed_extension or claimed_extension(context.filename)
        context.claimed_extension = extension

        signature = self.detector(context.file_path)
        claimed = self.registry.lookup_by_extension(extension)
        candidates = self.registry.lookup_by_signature(signature)

        resolved_extension = extension
        groups: List[str] = []

        if claimed is not None and claimed.groups and claimed in candidates:
            groups = claimed.groups
        else:
            match = self._first_grouped(candidates)
            if match is not None:
                self._check_families(extension, signature, claimed, candidates)
                groups = match.groups
                if match.extension != extension:
                    logger.info(
                        f"Not trusting extension '.{extension}' for {context.filename}: "
                        f"content is {signature}, using '.{match.extension}'"
                    )
                resolved_extension = match.extension

        if "document" in groups:
            category = FileCategory.DOCUMENT
            resolved_format = resolved_extension
        elif "archive" in groups:
            category = FileCategory.ARCHIVE
            resolved_format = resolved_extension
        else:
            category = FileCategory.OTHER
            resolved_format = ""

        if self.registry.is_open_document(signature):
            # All OpenDocument variants share one container layout.
            category = FileCategory.DOCUMENT
            resolved_format = OFFICE_CONTAINER_FORMAT

        context.resolved_extension = resolved_extension
        context.resolved_format = resolved_format

        outcome = ClassificationOutcome(
            category=category,
            resolved_extension=resolved_extension,
            resolved_format=resolved_format,
            signature=signature,
        )
        logger.debug(
            f"Classified {context.filename}: {signature} -> "
            f"{category.value} ({resolved_format or 'no format'})"
        )
        return outcome

    @staticmethod
    def _first_grouped(candidates: List[MimeTypeEntry]) -> Optional[MimeTypeEntry]:
        for entry in candidates:
            if entry.groups:
                return entry
        return None

    @staticmethod
    def _check_families(
        extension: str,
        signature: str,
        claimed: Optional[MimeTypeEntry],
        candidates: List[MimeTypeEntry],
    ) -> None:
        """Raise TypeMismatch when claimed and detected groups are disjoint."""
        if claimed is None or not claimed.groups:
            return
        if signature in claimed.compatible_signatures:
            # e.g. OOXML sniffed as zip: not spoofed, but still probed as zip
            return
        detected_groups: Set[str] = {g for entry in candidates for g in entry.groups}
        if detected_groups and detected_groups.isdisjoint(claimed.groups):
            raise TypeMismatch(extension, signature, claimed.groups, sorted(detected_groups))
