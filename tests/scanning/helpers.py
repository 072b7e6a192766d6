"""Fixture builders shared by the scanning tests."""

import re
import stat
import sys
import zipfile
from pathlib import Path
from typing import Dict, Optional

ODF_MIMETYPE_RE = re.compile(rb"mimetype(application/vnd\.oasis\.opendocument\.[a-z\-]+)")

MANIFEST_PLAIN = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<manifest:manifest xmlns:manifest="urn:oasis:names:tc:opendocument:xmlns:manifest:1.0">\n'
    ' <manifest:file-entry manifest:full-path="/" manifest:media-type="application/vnd.oasis.opendocument.text"/>\n'
    ' <manifest:file-entry manifest:full-path="content.xml" manifest:media-type="text/xml"/>\n'
    '</manifest:manifest>\n'
)

MANIFEST_ENCRYPTED = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<manifest:manifest xmlns:manifest="urn:oasis:names:tc:opendocument:xmlns:manifest:1.0">\n'
    ' <manifest:file-entry manifest:full-path="/" manifest:media-type="application/vnd.oasis.opendocument.text"/>\n'
    ' <manifest:file-entry manifest:full-path="content.xml" manifest:media-type="text/xml" manifest:size="3406">\n'
    '  <manifest:encryption-data manifest:checksum-type="urn:oasis:names:tc:opendocument:xmlns:manifest:1.0#sha256-1k" manifest:checksum="abc=">\n'
    '   <manifest:algorithm manifest:algorithm-name="http://www.w3.org/2001/04/xmlenc#aes256-cbc" manifest:initialisation-vector="def="/>\n'
    '  </manifest:encryption-data>\n'
    ' </manifest:file-entry>\n'
    '</manifest:manifest>\n'
)


def fake_detector(file_path) -> str:
    """Tiny stand-in for libmagic, good enough for the fixtures below."""
    data = Path(file_path).read_bytes()[:4096]
    if data.startswith(b"%PDF"):
        return "application/pdf"
    if data.startswith(b"PK"):
        match = ODF_MIMETYPE_RE.search(data)
        if match:
            return match.group(1).decode("ascii")
        return "application/zip"
    if data.lstrip().startswith(b"<?xml"):
        return "text/xml"
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return "application/octet-stream"
    return "text/plain"


def make_zip(path: Path, entries: Dict[str, str], encrypted: bool = False) -> Path:
    """Write a zip with ``entries``; optionally mark every entry as encrypted.

    zipfile cannot write encrypted archives, so the encryption bit of the
    general purpose flags is patched into both headers afterwards.
    """
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    if encrypted:
        data = bytearray(path.read_bytes())
        for signature, flag_offset in ((b"PK\x03\x04", 6), (b"PK\x01\x02", 8)):
            start = 0
            while True:
                pos = data.find(signature, start)
                if pos < 0:
                    break
                data[pos + flag_offset] |= 0x01
                start = pos + 4
        path.write_bytes(bytes(data))
    return path


def make_odf(
    path: Path,
    manifest: Optional[str] = MANIFEST_PLAIN,
    mimetype: str = "application/vnd.oasis.opendocument.text",
) -> Path:
    """Write a minimal OpenDocument container (mimetype entry first, stored)."""
    entries = {"mimetype": mimetype, "content.xml": "<office:document-content/>"}
    if manifest is not None:
        entries["META-INF/manifest.xml"] = manifest
    return make_zip(path, entries)


def make_fake_tool(
    directory: Path,
    name: str,
    output: str = "",
    exit_code: int = 0,
    sleep: float = 0,
) -> Path:
    """Create an executable script that prints ``output`` and exits."""
    directory.mkdir(parents=True, exist_ok=True)
    script = directory / name
    script.write_text(
        f"#!{sys.executable}\n"
        "import sys, time\n"
        f"time.sleep({sleep!r})\n"
        f"sys.stdout.write({output!r})\n"
        f"sys.exit({exit_code})\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script
