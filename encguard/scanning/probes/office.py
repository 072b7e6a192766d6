"""OpenDocument container probe.

Encrypted OpenDocument files keep a readable ZIP layout but declare
<manifest:encryption-data> for each protected part in
META-INF/manifest.xml. A substring check on the manifest is enough, once
the container itself is known not to use ZIP-level encryption.
"""

import zipfile
import zlib

from ..models import ScanContext, ScanResult, ScanStatus
from .base import EncryptionProbe
from .zip_probe import ENCRYPTION_NONE, ZIP_OPEN_ERRORS, encryption_method

MANIFEST_PATH = "META-INF/manifest.xml"
ENCRYPTION_MARKER = "encryption-data"


class OfficeDocumentProbe(EncryptionProbe):
    """Looks for encryption metadata in an OpenDocument manifest."""

    name = "office-container"

    async def probe(self, context: ScanContext) -> ScanResult:
        try:
            zf = zipfile.ZipFile(context.file_path)
        except ZIP_OPEN_ERRORS as e:
            self.logger.warning(f"Cannot open {context.filename} as zip container: {e}")
            return ScanResult.new(
                ScanStatus.DETECTED, "unable to open container, assuming encrypted"
            )

        with zf:
            for info in zf.infolist():
                method = encryption_method(info)
                if method != ENCRYPTION_NONE:
                    return ScanResult.new(
                        ScanStatus.DETECTED,
                        f"container entry '{info.filename}' is encrypted ({method}), "
                        "unable to read container contents",
                    )
            manifest = self._read_manifest(zf, context.filename)

        if manifest and ENCRYPTION_MARKER in manifest.lower():
            return ScanResult.new(ScanStatus.DETECTED, "encryption metadata found in manifest")
        return ScanResult.new(ScanStatus.NOT_DETECTED, "no encryption metadata in manifest")

    def _read_manifest(self, zf: zipfile.ZipFile, filename: str) -> str:
        """Manifest text, or '' when it is missing or unreadable."""
        try:
            data = zf.read(MANIFEST_PATH)
        except KeyError:
            self.logger.debug(f"{filename}: no {MANIFEST_PATH}")
            return ""
        except ZIP_OPEN_ERRORS + (RuntimeError, zlib.error) as e:
            self.logger.debug(f"{filename}: unreadable {MANIFEST_PATH}: {e}")
            return ""
        return data.decode("utf-8", errors="replace")
