"""ZIP archive probe.

Fail-closed: an archive we cannot open or whose first entry we cannot
read is reported as encrypted.
"""

import importlib.util
import zipfile
from typing import Tuple

from ..models import ScanContext, ScanResult, ScanStatus
from .base import EncryptionProbe

ZIP_OPEN_ERRORS: Tuple[type, ...] = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    NotImplementedError,
    OSError,
    EOFError,
    ValueError,
)

# General purpose bit flags, APPNOTE 4.4.4
FLAG_ENCRYPTED = 0x0001
FLAG_STRONG_ENCRYPTION = 0x0040
# WinZip AES marks entries with this compression method
COMPRESSION_AES = 99

ENCRYPTION_NONE = "none"


def zip_support_available() -> bool:
    """Whether zipfile can inflate deflated entries (needs zlib)."""
    return importlib.util.find_spec("zlib") is not None


def encryption_method(info: zipfile.ZipInfo) -> str:
    """Name of the encryption applied to an entry, ENCRYPTION_NONE if clear."""
    if info.compress_type == COMPRESSION_AES:
        return "aes"
    if info.flag_bits & FLAG_STRONG_ENCRYPTION:
        return "strong"
    if info.flag_bits & FLAG_ENCRYPTED:
        return "zipcrypto"
    return ENCRYPTION_NONE


class ZipProbe(EncryptionProbe):
    """Checks the first entry of a ZIP archive for an encryption method."""

    name = "zip"

    async def probe(self, context: ScanContext) -> ScanResult:
        try:
            zf = zipfile.ZipFile(context.file_path)
        except ZIP_OPEN_ERRORS as e:
            self.logger.warning(f"Cannot open {context.filename} as zip: {e}")
            return ScanResult.new(
                ScanStatus.DETECTED, "unable to open archive, assuming encrypted"
            )

        with zf:
            entries = zf.infolist()
            if not entries:
                return ScanResult.new(
                    ScanStatus.DETECTED, "unable to read archive entry, assuming encrypted"
                )
            first = entries[0]

        method = encryption_method(first)
        if method == ENCRYPTION_NONE:
            return ScanResult.new(ScanStatus.NOT_DETECTED, "archive entries are not encrypted")
        return ScanResult.new(
            ScanStatus.DETECTED,
            f"archive entry '{first.filename}' is encrypted ({method}), unable to read archive contents",
        )
