"""External-tool signal sources used by the PDF probe."""

from .ghostscript import GhostscriptSource
from .qpdf import QpdfSource

__all__ = ["GhostscriptSource", "QpdfSource"]
