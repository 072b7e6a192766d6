"""Manages the external PDF inspection binaries (discovery and verification)."""

import hashlib
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ProbeUnavailable
from .models import ToolInfo

logger = logging.getLogger(__name__)

HASH_BLOCK_SIZE = 64 * 1024

# PDF inspection tools. Entries under `tools:` in config.yaml override these.
DEFAULT_TOOLS: list[dict[str, Any]] = [
    {
        "name": "ghostscript",
        "display_name": "Ghostscript",
        "exe_name": "gs",
        "license": "AGPL-3.0",
    },
    {
        "name": "qpdf",
        "display_name": "QPDF",
        "exe_name": "qpdf",
        "path": "/usr/bin/qpdf",
        "license": "Apache-2.0",
    },
]


class ToolManager:
    """Resolves external tool binaries.

    Lookup order:
    1. Explicit path from config (tools.<name>.path)
    2. tools/<name>/ directory, then tools/ itself
    3. System PATH

    A candidate only counts if it is a regular file we may execute.
    """

    def __init__(
        self,
        tools_dir: str = "./tools",
        config: Optional[Dict[str, Any]] = None,
    ):
        self.tools_dir = Path(tools_dir).resolve()
        self.config = config or {}
        self._tools: Dict[str, ToolInfo] = {}
        self._configured_paths: Dict[str, Optional[Path]] = {}
        self._register_default_tools()

    def _register_default_tools(self) -> None:
        """Seed the registry with gs/qpdf, applying per-tool config overrides."""
        tools_config = self.config.get("tools", {})
        for tool_def in DEFAULT_TOOLS:
            name = tool_def["name"]
            overrides = {k: v for k, v in tools_config.get(name, {}).items() if v is not None}
            merged = {**tool_def, **overrides}
            self.register(ToolInfo(**merged))

    def register(self, tool: ToolInfo) -> None:
        """Add or replace a tool definition."""
        self._tools[tool.name] = tool
        self._configured_paths[tool.name] = tool.path

    def check_tool(self, tool_name: str) -> ToolInfo:
        """Locate ``tool_name`` on this host.

        The returned ToolInfo carries the resolved path and installed flag.
        """
        if tool_name not in self._tools:
            raise KeyError(f"Unknown tool: {tool_name}")

        tool = self._tools[tool_name]

        configured = self._configured_paths.get(tool_name)
        if configured is not None:
            if self._is_executable(configured):
                return self._mark_found(tool, configured, "configured path")
            logger.debug(f"{tool.display_name}: configured path {configured} is not executable")

        tool_dir = self.tools_dir / tool_name
        for candidate in (tool_dir / tool.exe_name, self.tools_dir / tool.exe_name):
            if self._is_executable(candidate):
                return self._mark_found(tool, candidate.resolve(), "tools directory")

        system_path = shutil.which(tool.exe_name)
        if system_path:
            return self._mark_found(tool, Path(system_path).resolve(), "PATH")

        tool.installed = False
        tool.path = None
        logger.debug(f"{tool.display_name}: not found")
        return tool

    def check_all_tools(self) -> Dict[str, ToolInfo]:
        """Resolve every registered tool, keyed by tool name."""
        return {name: self.check_tool(name) for name in self._tools}

    def get_tool_path(self, tool_name: str) -> Path:
        """Executable path for ``tool_name``; ProbeUnavailable if it cannot be found."""
        tool = self.check_tool(tool_name)
        if not tool.installed or tool.path is None:
            raise ProbeUnavailable(
                f"{tool.display_name} ({tool.exe_name}) not found or not executable. "
                f"Install it or set tools.{tool_name}.path in config.yaml."
            )
        return tool.path

    def get_tool_info(self, tool_name: str) -> ToolInfo:
        """Registered metadata for ``tool_name``, without resolving it."""
        if tool_name not in self._tools:
            raise KeyError(f"Unknown tool: {tool_name}")
        return self._tools[tool_name]

    def verify_tool_integrity(self, tool_name: str) -> bool:
        """Compare the binary against tools.<name>.expected_hash, when one is set."""
        tool = self.check_tool(tool_name)
        if not tool.installed or tool.path is None:
            return False
        if not tool.expected_hash:
            logger.debug(f"{tool.display_name}: no pinned hash, integrity not checked")
            return True

        actual_hash = self._sha256(tool.path)
        matches = actual_hash == tool.expected_hash.lower()
        if not matches:
            logger.warning(
                f"{tool.display_name} at {tool.path} does not match its pinned hash: "
                f"{actual_hash} != {tool.expected_hash}"
            )
        return matches

    @staticmethod
    def _mark_found(tool: ToolInfo, path: Path, where: str) -> ToolInfo:
        tool.path = path
        tool.installed = True
        logger.debug(f"{tool.display_name}: found via {where} at {path}")
        return tool

    @staticmethod
    def _is_executable(path: Path) -> bool:
        return path.is_file() and os.access(path, os.X_OK)

    @staticmethod
    def _sha256(file_path: Path) -> str:
        """Hex SHA-256 digest of a binary, read in blocks."""
        digest = hashlib.sha256()
        with file_path.open("rb") as f:
            while True:
                block = f.read(HASH_BLOCK_SIZE)
                if not block:
                    break
                digest.update(block)
        return digest.hexdigest()
