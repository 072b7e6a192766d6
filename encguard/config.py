import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "ENCGUARD_"
LIST_FIELDS = ("allowed_extensions", "gs_warning_markers")
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ScannerSettings(BaseModel):
    log_level: str = "INFO"
    logs_dir: Optional[str] = None

    # PDF signal sources
    use_gs: bool = True
    use_qpdf: bool = False
    gs_path: Optional[str] = None
    qpdf_path: Optional[str] = "/usr/bin/qpdf"
    gs_warning_markers: List[str] = Field(default_factory=list)
    tools_dir: str = "./tools"
    tool_timeout: float = 60

    # Verdict policy
    block_on_cannot_run: bool = True
    allowed_extensions: List[str] = Field(default_factory=list)

    # Per-tool and per-extension overrides
    tools: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    mimetypes: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")

    def tools_config(self) -> Dict[str, Any]:
        """ToolManager config with the gs/qpdf path shortcuts folded in."""
        tools = {name: dict(values) for name, values in self.tools.items()}
        if self.gs_path:
            tools.setdefault("ghostscript", {})["path"] = self.gs_path
        if self.qpdf_path:
            tools.setdefault("qpdf", {}).setdefault("path", self.qpdf_path)
        return {"tools": tools}

    def source_config(self, tool_name: str) -> Dict[str, Any]:
        """Config handed to a ToolSource."""
        if tool_name == "ghostscript":
            config: Dict[str, Any] = {"enabled": self.use_gs}
            if self.gs_warning_markers:
                config["warning_markers"] = self.gs_warning_markers
        elif tool_name == "qpdf":
            config = {"enabled": self.use_qpdf}
        else:
            config = {}
        config["timeout"] = self.tool_timeout
        return config

    def registry_config(self) -> Dict[str, Any]:
        return {"mimetypes": self.mimetypes}


class ConfigManager:
    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = Path(config_path)
        self.config: Optional[ScannerSettings] = None
        self.load_config()

    def load_config(self) -> ScannerSettings:
        """Load configuration from file"""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            config_data = yaml.safe_load(f) or {}

        config_data = merge_env_vars(config_data)
        self.config = ScannerSettings(**config_data)
        return self.config

    def get_config(self) -> ScannerSettings:
        """Get current configuration"""
        if self.config is None:
            self.load_config()
        return self.config


def merge_env_vars(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ENCGUARD_* environment variables over file configuration.

    ENCGUARD_USE_QPDF=true sets use_qpdf; list settings take a comma
    separated value (ENCGUARD_ALLOWED_EXTENSIONS=pdf,zip,odt).
    """
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        config_key = key[len(ENV_PREFIX):].lower()
        if config_key in LIST_FIELDS:
            config_data[config_key] = [v.strip() for v in value.split(",") if v.strip()]
        else:
            config_data[config_key] = value
    return config_data


def load_settings(config_path: Optional[str] = None) -> ScannerSettings:
    """Settings from ``config_path`` if given, else defaults; env vars apply either way."""
    if config_path:
        return ConfigManager(config_path).get_config()
    return ScannerSettings(**merge_env_vars({}))


def setup_logging(settings: ScannerSettings) -> None:
    """Setup logging configuration"""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if settings.logs_dir:
        log_dir = Path(settings.logs_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / 'encguard.log'))

    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=handlers)
