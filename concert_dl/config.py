"""Configuration management for concert-dl."""

import os
import sys
from pathlib import Path
from typing import Any, Optional

try:
    import yaml
except ImportError:
    print("Error: PyYAML not installed", file=sys.stderr)
    print("Install with: pip install pyyaml", file=sys.stderr)
    sys.exit(1)

CONFIRM_MODES = ("interactive", "yes", "no")


def default_config_dir() -> Path:
    """Directory holding the user config and failed-download log."""
    return Path.home() / ".config" / "concert-dl"


class Config:
    """concert-dl configuration.

    A missing config file is not an error: every setting has a default.
    """

    _instance = None

    def __new__(cls, config_path: Optional[Path] = None):
        """Singleton pattern for config."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset singleton for testing."""
        cls._instance = None

    def __init__(self, config_path: Optional[Path] = None):
        """Load configuration from YAML file.

        Args:
            config_path: Config file to read (default ~/.config/concert-dl/config.yaml)
        """
        if self._initialized:
            return

        if config_path:
            self.config_path = Path(config_path).expanduser()
        else:
            self.config_path = default_config_dir() / "config.yaml"
        self.config = self._load_config()
        self._initialized = True

    def _load_config(self) -> dict:
        """Load and parse config file."""
        if not self.config_path.exists():
            return {}

        with open(self.config_path) as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            print(f"Error: Invalid configuration file: {self.config_path}", file=sys.stderr)
            print("Expected a mapping of settings (see config.example.yaml)", file=sys.stderr)
            sys.exit(1)

        # Expand home directory in paths
        self._expand_paths(config)
        return config

    def _expand_paths(self, config: dict):
        """Expand ~ in path values."""
        for key, value in config.items():
            if isinstance(value, str) and value.startswith("~"):
                config[key] = os.path.expanduser(value)
            elif isinstance(value, dict):
                self._expand_paths(value)

    def get(self, key: str, default: Any = None) -> Any:
        """Get config value by dot-separated key."""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    @property
    def workdir(self) -> Path:
        """Get working directory for temporary and output files."""
        return Path(self.get("workdir", "."))

    @property
    def output_name(self) -> str:
        """Get final output file name."""
        return self.get("output_name", "output.mp3")

    @property
    def failed_log(self) -> Path:
        """Get failed downloads log path."""
        path = self.get("failed_log")
        if path:
            return Path(path)
        return default_config_dir() / "failed-downloads.txt"

    @property
    def timeout(self) -> float:
        """Get per-request network timeout in seconds."""
        return float(self.get("network.timeout", 30))

    @property
    def user_agent(self) -> str:
        """Get User-Agent header sent with every request."""
        from . import __version__

        return self.get("network.user_agent", f"concert-dl/{__version__}")

    @property
    def chunk_suffix(self) -> str:
        """Get file suffix identifying chunk entries in the playlist."""
        return self.get("stream.chunk_suffix", ".aac")

    @property
    def transcoder_path(self) -> Optional[str]:
        """Get explicitly configured ffmpeg path."""
        path = self.get("transcoder.path", "")
        return path if path else None

    @property
    def codec(self) -> str:
        """Get target audio codec for the encode step."""
        return self.get("transcoder.codec", "libmp3lame")

    @property
    def quality(self) -> str:
        """Get VBR quality passed to -q:a."""
        return str(self.get("transcoder.quality", "2"))

    @property
    def cleanup_confirm(self) -> str:
        """Get cleanup confirmation mode (interactive, yes, no)."""
        mode = self.get("cleanup.confirm", "interactive")
        # YAML reads unquoted yes/no as booleans
        if isinstance(mode, bool):
            return "yes" if mode else "no"
        mode = str(mode).lower()
        if mode not in CONFIRM_MODES:
            return "interactive"
        return mode
