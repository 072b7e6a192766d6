"""PDF probe: consensus between a rendering source and a metadata source.

Ghostscript alone is noisy on malformed-but-unencrypted files, and qpdf
alone cannot always tell "no password" from "owner password only". The
rules in resolve_consensus() trust a clean Ghostscript detection outright
and only ask qpdf to settle the warning tier.
"""

import asyncio

from ..models import ScanContext, ScanResult, ScanStatus
from ..source_base import ToolSource
from .base import EncryptionProbe


def resolve_consensus(primary: ScanResult, secondary: ScanResult) -> ScanResult:
    """Combine the rendering (primary) and metadata (secondary) results.

    Ordered, first match wins:
      1. primary DETECTED                                     -> primary
      2. primary DETECTED_WITH_WARNINGS, secondary CANNOT_RUN -> primary
      3. primary DETECTED_WITH_WARNINGS, secondary DETECTED   -> DETECTED
      4. primary CANNOT_RUN, secondary DETECTED               -> secondary
      5. primary CANNOT_RUN                                   -> primary
      6. anything else                                        -> NOT_DETECTED

    A primary that could not run never turns into NOT_DETECTED.
    """
    if primary.status == ScanStatus.DETECTED:
        return primary

    if primary.status == ScanStatus.DETECTED_WITH_WARNINGS:
        if secondary.status == ScanStatus.CANNOT_RUN:
            return primary
        if secondary.status == ScanStatus.DETECTED:
            return ScanResult.new(
                ScanStatus.DETECTED,
                f"corroborated: {primary.message}; {secondary.message}",
            )

    if primary.status == ScanStatus.CANNOT_RUN:
        if secondary.status == ScanStatus.DETECTED:
            return secondary
        return primary

    return ScanResult.new(
        ScanStatus.NOT_DETECTED,
        f"no consensus on encryption ({primary.status.value}, {secondary.status.value})",
    )


class PdfProbe(EncryptionProbe):
    """Runs both sources concurrently and applies resolve_consensus().

    When only one source is enabled its result is returned as is.
    """

    name = "pdf"

    def __init__(self, primary: ToolSource, secondary: ToolSource):
        super().__init__()
        self.primary = primary
        self.secondary = secondary

    @property
    def enabled(self) -> bool:
        return self.primary.enabled or self.secondary.enabled

    async def probe(self, context: ScanContext) -> ScanResult:
        if not self.enabled:
            return ScanResult.new(ScanStatus.IGNORED, "pdf encryption checks are disabled")

        # With one source switched off there is nothing to agree with.
        if not self.primary.enabled or not self.secondary.enabled:
            source = self.primary if self.primary.enabled else self.secondary
            result = await source.run(context.file_path)
            self.logger.info(f"{context.filename}: {source.tool_name}={result.status.value}")
            if result.status == ScanStatus.CANNOT_RUN:
                self.logger.warning(
                    f"{context.filename}: {source.tool_name} could not run; "
                    f"PDF encryption cannot be confirmed ({result.message})"
                )
            return result

        primary, secondary = await asyncio.gather(
            self.primary.run(context.file_path),
            self.secondary.run(context.file_path),
        )
        result = resolve_consensus(primary, secondary)
        self.logger.info(
            f"{context.filename}: {self.primary.tool_name}={primary.status.value}, "
            f"{self.secondary.tool_name}={secondary.status.value} -> {result.status.value}"
        )
        if primary.status == ScanStatus.CANNOT_RUN:
            self.logger.warning(
                f"{context.filename}: {self.primary.tool_name} could not run; "
                f"PDF encryption cannot be confirmed ({primary.message})"
            )
        return result
