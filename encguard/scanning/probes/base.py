"""Common interface for format-specific encryption probes."""

import logging
from abc import ABC, abstractmethod

from ..models import ScanContext, ScanResult


class EncryptionProbe(ABC):
    """Decides whether one concrete file format is encrypted.

    Probes return exactly one ScanResult per call. Failures that mean
    "could not look inside" are reported as results; anything unexpected
    is left to propagate to the orchestrator.
    """

    name: str = "probe"

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    async def probe(self, context: ScanContext) -> ScanResult:
        """Inspect ``context.file_path``."""
