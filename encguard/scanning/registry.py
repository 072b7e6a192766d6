"""Extension <-> content signature registry.

Lookups by signature return rows in table order and callers take the
first match, so row order is part of the contract. Users override or
extend rows via config.yaml (``mimetypes:``); this table is the fallback.
"""

import logging
from typing import Any, Dict, List, Optional

from .models import MimeTypeEntry

logger = logging.getLogger(__name__)

ODF_SIGNATURE_PREFIX = "application/vnd.oasis.opendocument"

DEFAULT_MIMETYPES: list[dict[str, Any]] = [
    # Archives
    {
        "extension": "zip",
        "signature": "application/zip",
        "groups": ["archive"],
        "alternate_signatures": ["application/x-zip-compressed", "application/x-zip"],
    },
    {"extension": "7z", "signature": "application/x-7z-compressed", "groups": ["archive"]},
    {"extension": "rar", "signature": "application/x-rar", "groups": ["archive"],
     "alternate_signatures": ["application/vnd.rar", "application/x-rar-compressed"]},
    {"extension": "gz", "signature": "application/gzip", "groups": ["archive"],
     "alternate_signatures": ["application/x-gzip"]},
    {"extension": "tgz", "signature": "application/gzip", "groups": ["archive"],
     "alternate_signatures": ["application/x-gzip"]},
    {"extension": "tar", "signature": "application/x-tar", "groups": ["archive"]},
    # Documents
    {"extension": "pdf", "signature": "application/pdf", "groups": ["document"]},
    {"extension": "odt", "signature": "application/vnd.oasis.opendocument.text",
     "groups": ["document"], "compatible_signatures": ["application/zip"]},
    {"extension": "ott", "signature": "application/vnd.oasis.opendocument.text-template",
     "groups": ["document"], "compatible_signatures": ["application/zip"]},
    {"extension": "ods", "signature": "application/vnd.oasis.opendocument.spreadsheet",
     "groups": ["document", "spreadsheet"], "compatible_signatures": ["application/zip"]},
    {"extension": "ots", "signature": "application/vnd.oasis.opendocument.spreadsheet-template",
     "groups": ["document", "spreadsheet"], "compatible_signatures": ["application/zip"]},
    {"extension": "odp", "signature": "application/vnd.oasis.opendocument.presentation",
     "groups": ["document", "presentation"], "compatible_signatures": ["application/zip"]},
    {"extension": "otp", "signature": "application/vnd.oasis.opendocument.presentation-template",
     "groups": ["document", "presentation"], "compatible_signatures": ["application/zip"]},
    # No group on purpose: drawings are picked up by the OpenDocument rule.
    {"extension": "odg", "signature": "application/vnd.oasis.opendocument.graphics",
     "compatible_signatures": ["application/zip"]},
    {"extension": "docx",
     "signature": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
     "groups": ["document"], "compatible_signatures": ["application/zip"]},
    {"extension": "xlsx",
     "signature": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
     "groups": ["document", "spreadsheet"], "compatible_signatures": ["application/zip"]},
    {"extension": "pptx",
     "signature": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
     "groups": ["document", "presentation"], "compatible_signatures": ["application/zip"]},
    {"extension": "doc", "signature": "application/msword", "groups": ["document"],
     "alternate_signatures": ["application/x-ole-storage", "application/CDFV2"]},
    {"extension": "xls", "signature": "application/vnd.ms-excel",
     "groups": ["document", "spreadsheet"],
     "alternate_signatures": ["application/x-ole-storage", "application/CDFV2"]},
    {"extension": "ppt", "signature": "application/vnd.ms-powerpoint",
     "groups": ["document", "presentation"],
     "alternate_signatures": ["application/x-ole-storage", "application/CDFV2"]},
    {"extension": "rtf", "signature": "text/rtf", "groups": ["document"],
     "alternate_signatures": ["application/rtf"]},
    # Text and web
    {"extension": "txt", "signature": "text/plain", "groups": ["text"]},
    {"extension": "csv", "signature": "text/csv", "groups": ["text", "spreadsheet"],
     "compatible_signatures": ["text/plain"]},
    {"extension": "md", "signature": "text/markdown", "groups": ["text"],
     "compatible_signatures": ["text/plain"]},
    {"extension": "json", "signature": "application/json", "groups": ["text"],
     "compatible_signatures": ["text/plain"]},
    {"extension": "xml", "signature": "text/xml", "groups": ["web_file"],
     "alternate_signatures": ["application/xml"]},
    {"extension": "html", "signature": "text/html", "groups": ["web_file"]},
    {"extension": "htm", "signature": "text/html", "groups": ["web_file"]},
    # Images
    {"extension": "jpg", "signature": "image/jpeg", "groups": ["image", "web_image"]},
    {"extension": "jpeg", "signature": "image/jpeg", "groups": ["image", "web_image"]},
    {"extension": "png", "signature": "image/png", "groups": ["image", "web_image"]},
    {"extension": "gif", "signature": "image/gif", "groups": ["image", "web_image"]},
]


class TypeRegistry:
    """Read-only view over the extension/signature table.

    Override rows by extension via ``config["mimetypes"]``::

        mimetypes:
          docx:
            groups: [document]
          epub:
            signature: application/epub+zip
            groups: [document]

    Keys matching an existing row are merged into it in place; new keys are
    appended to the end of the table.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self._entries: List[MimeTypeEntry] = []
        self._by_extension: Dict[str, MimeTypeEntry] = {}
        self._register_default_types()

    def _register_default_types(self) -> None:
        overrides = {k.lower(): v for k, v in (self.config.get("mimetypes") or {}).items()}
        for row in DEFAULT_MIMETYPES:
            ext = row["extension"]
            merged = {**row, **overrides.pop(ext, {})}
            self._add(MimeTypeEntry(**merged))
        for ext, row in overrides.items():
            if "signature" not in row:
                logger.warning(f"Ignoring registry override for '.{ext}': no signature given")
                continue
            self._add(MimeTypeEntry(extension=ext, **row))

    def _add(self, entry: MimeTypeEntry) -> None:
        entry.extension = entry.extension.lower()
        self._entries.append(entry)
        self._by_extension[entry.extension] = entry

    def lookup_by_extension(self, extension: str) -> Optional[MimeTypeEntry]:
        """Row registered for ``extension`` (case-insensitive), if any."""
        if not extension:
            return None
        return self._by_extension.get(extension.lower())

    def lookup_by_signature(self, signature: str) -> List[MimeTypeEntry]:
        """All rows that ``signature`` names (primary or alternate), in table order."""
        return [entry for entry in self._entries if signature in entry.signatures]

    @staticmethod
    def is_open_document(signature: str) -> bool:
        """True for OpenDocument container signatures (odt, ods, odp, odg...)."""
        return ODF_SIGNATURE_PREFIX in signature.lower()

    def __len__(self) -> int:
        return len(self._entries)
