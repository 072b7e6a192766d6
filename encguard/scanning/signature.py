"""Content signature detection backed by libmagic (python-magic).

The classifier only needs a callable ``path -> mime string``; anything with
that shape can be injected instead (tests do).
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

SignatureDetector = Callable[[Path], str]

UNKNOWN_SIGNATURE = "application/octet-stream"


class MagicSignatureDetector:
    """MIME sniffing via a shared ``magic.Magic`` instance.

    libmagic handles are not thread-safe, so calls are serialized.
    """

    def __init__(self, magic_file: Optional[str] = None):
        import magic

        self._magic = magic.Magic(mime=True, magic_file=magic_file)
        self._lock = threading.Lock()

    def __call__(self, file_path: Union[str, Path]) -> str:
        return self.detect_file(file_path)

    def detect_file(self, file_path: Union[str, Path]) -> str:
        with self._lock:
            signature = self._magic.from_file(str(file_path))
        signature = (signature or UNKNOWN_SIGNATURE).strip()
        logger.debug(f"Detected signature {signature} for {file_path}")
        return signature

    def detect(self, data: bytes) -> str:
        """Sniff a byte buffer. ZIP-based formats need the first few KB."""
        with self._lock:
            signature = self._magic.from_buffer(data)
        return (signature or UNKNOWN_SIGNATURE).strip()
