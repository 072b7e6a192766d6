"""Abstract base class for external-tool signal sources.

Template method: subclasses supply build_command() and classify_output(),
while run() owns the subprocess lifecycle. Anything that stops the tool
from producing output (disabled, missing, tampered with, timed out)
becomes CANNOT_RUN.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ProbeFault, ProbeUnavailable
from .models import ScanResult, ScanStatus
from .tool_manager import ToolManager

DEFAULT_TIMEOUT = 60


class ToolSource(ABC):
    """Abstract base for PDF signal sources that shell out to a tool.

    Subclasses must implement:
      - tool_name: str property identifying the registered tool
      - build_command(exe, file_path) -> list of CLI arguments
      - classify_output(output) -> ScanResult
    """

    def __init__(
        self,
        tool_manager: ToolManager,
        config: Optional[Dict[str, Any]] = None,
    ):
        self.tool_manager = tool_manager
        self.config = config or {}
        self.enabled = bool(self.config.get("enabled", True))
        self.timeout = float(self.config.get("timeout", DEFAULT_TIMEOUT))
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def tool_name(self) -> str:
        """The registered tool name (e.g. 'ghostscript')."""

    @abstractmethod
    def build_command(self, exe: Path, file_path: Path) -> List[str]:
        """Argument vector that inspects ``file_path`` with ``exe``.

        Args:
            exe: Resolved path to the tool executable.
            file_path: The file under inspection.

        Returns:
            Arguments for asyncio.create_subprocess_exec, exe first.
        """

    @abstractmethod
    def classify_output(self, output: str) -> ScanResult:
        """Turn combined stdout/stderr into a result.

        The exit code is not an input; both tools exit non-zero on
        encrypted files.
        """

    def is_available(self) -> bool:
        """Whether the tool currently resolves to an executable."""
        try:
            tool = self.tool_manager.check_tool(self.tool_name)
            return tool.installed
        except KeyError:
            return False

    def cannot_run(self, reason: str) -> ScanResult:
        self.logger.warning(f"{self.tool_name}: {reason}")
        return ScanResult.new(ScanStatus.CANNOT_RUN, f"{self.tool_name}: {reason}")

    async def run(self, file_path: Path) -> ScanResult:
        """Execute the tool against ``file_path``. This is the template method.

        1. Respect the enabled flag
        2. Resolve and verify the executable
        3. Build command
        4. Execute subprocess with timeout
        5. Classify output
        """
        if not self.enabled:
            return ScanResult.new(ScanStatus.CANNOT_RUN, f"{self.tool_name} is disabled")

        try:
            exe = self.tool_manager.get_tool_path(self.tool_name)
        except (ProbeUnavailable, KeyError) as e:
            return self.cannot_run(str(e))

        if not self.tool_manager.verify_tool_integrity(self.tool_name):
            return self.cannot_run(f"integrity check failed for {exe}")

        cmd = self.build_command(exe, file_path)
        self.logger.info(f"Running {self.tool_name}: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            return self.cannot_run(f"failed to start: {e}")

        try:
            stdout_bytes, _ = await asyncio.wait_for(
                process.communicate(),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()
            return self.cannot_run(f"timed out after {self.timeout:g}s")

        output = stdout_bytes.decode("utf-8", errors="replace")
        self.logger.debug(
            f"{self.tool_name} exited with code {process.returncode}, "
            f"{len(output)} chars of output"
        )

        try:
            result = self.classify_output(output)
        except Exception as e:
            raise ProbeFault(f"Failed to classify {self.tool_name} output: {e}") from e

        self.logger.info(f"{self.tool_name} completed: {result.status.value}")
        return result
