"""Format-specific encryption probes."""

from .base import EncryptionProbe
from .office import OfficeDocumentProbe
from .pdf import PdfProbe, resolve_consensus
from .zip_probe import ZipProbe

__all__ = [
    "EncryptionProbe",
    "OfficeDocumentProbe",
    "PdfProbe",
    "ZipProbe",
    "resolve_consensus",
]
