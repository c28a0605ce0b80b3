"""
Configuration management for selfupdate.

Values come from the dataclass defaults, then an optional JSON file, then the
process environment, in increasing order of precedence.
"""

import json
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .core.errors import ConfigError
from .utils.logging import get_logger
from .utils.validators import ConfigValidator

DEFAULT_MASTER_URL = "https://downloads.example.org/selfupdate"
DEFAULT_MIRROR_URL = "https://mirror.example.org/selfupdate"

HTTP_CLIENTS = ("requests", "aiohttp", "curl", "wget")
PACKAGE_MANAGERS = ("rpm", "dpkg")

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class DownloadConfig:
    """Where releases are published and how they are fetched."""
    master_url: str = DEFAULT_MASTER_URL
    mirror_url: str = DEFAULT_MIRROR_URL  # Empty string disables the mirror
    manifest_name: str = "LATEST"
    http_client: str = "auto"
    request_timeout: int = 60

    @property
    def manifest_url(self) -> str:
        return f"{self.master_url.rstrip('/')}/{self.manifest_name}"

    @property
    def mirror_base(self) -> Optional[str]:
        return self.mirror_url.rstrip('/') or None


@dataclass
class PackageConfig:
    """The package being kept up to date."""
    name: str = "selfupdate"
    manager: str = "auto"


@dataclass
class WorkspaceConfig:
    """Scratch directory settings."""
    tmp_root: str = "/tmp"
    keep_download: bool = False
    prefix: str = "selfupdate"


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_to_console: bool = False
    tail_lines: int = 20


class Config:
    """Main configuration class."""

    # Environment variable -> (section, field)
    ENVIRONMENT = {
        'TMPDIR': ('workspace', 'tmp_root'),
        'KEEP_DOWNLOAD_PATH': ('workspace', 'keep_download'),
        'MASTER_URL': ('download', 'master_url'),
        'MIRROR_URL': ('download', 'mirror_url'),
        'MANIFEST_NAME': ('download', 'manifest_name'),
        'UPDATE_HTTP_CLIENT': ('download', 'http_client'),
        'PACKAGE_NAME': ('package', 'name'),
        'PACKAGE_MANAGER': ('package', 'manager'),
        'LOG_LEVEL': ('logging', 'level'),
        'DEBUG': ('logging', 'log_to_console'),
    }

    def __init__(self):
        self.download = DownloadConfig()
        self.package = PackageConfig()
        self.workspace = WorkspaceConfig()
        self.logging = LoggingConfig()

        self.logger = get_logger(__name__)

    @classmethod
    def load(cls, environ: Optional[Mapping[str, str]] = None) -> 'Config':
        """Build the effective configuration: defaults, then file, then environment."""
        environ = os.environ if environ is None else environ
        config = cls.load_from_file(environ.get('SELFUPDATE_CONFIG'))
        config.apply_environment(environ)
        return config

    @classmethod
    def load_from_file(cls, config_path: Optional[str] = None) -> 'Config':
        """Load configuration from a JSON file, keeping defaults for missing keys."""
        if config_path is None:
            config_path = cls.get_default_config_path()

        config_file = Path(config_path)
        config = cls()

        if config_file.exists():
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigError(f"Failed to load config from {config_file}: {e}") from e

            if not isinstance(data, dict):
                raise ConfigError(f"Config file {config_file} must contain a JSON object")
            config._update_from_dict(data)
            config.logger.debug(f"Config loaded from {config_file}")
        else:
            config.logger.debug(f"No config file at {config_file}, using defaults")

        return config

    def save_to_file(self, config_path: Optional[str] = None):
        """Save configuration to file."""
        if config_path is None:
            config_path = self.get_default_config_path()

        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

        self.logger.info(f"Config saved to {config_file}")

    def apply_environment(self, environ: Mapping[str, str]):
        """Override values from environment variables."""
        for variable, (section, key) in self.ENVIRONMENT.items():
            if variable not in environ:
                continue
            value: Any = environ[variable]
            if key in ('keep_download', 'log_to_console'):
                value = bool(value.strip())
            elif key == 'tmp_root' and not value:
                continue
            setattr(getattr(self, section), key, value)

        if self.logging.log_to_console and environ.get('DEBUG', '').strip():
            self.logging.level = "DEBUG"

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'download': asdict(self.download),
            'package': asdict(self.package),
            'workspace': asdict(self.workspace),
            'logging': asdict(self.logging),
        }

    def _update_from_dict(self, data: Dict[str, Any]):
        """Update configuration from dictionary."""
        for section in ('download', 'package', 'workspace', 'logging'):
            if section in data:
                self._update_dataclass(getattr(self, section), data[section])

    def _update_dataclass(self, instance, data: Dict[str, Any]):
        """Update a dataclass instance from dictionary."""
        for key, value in data.items():
            if not hasattr(instance, key):
                self.logger.warning(f"Ignoring unknown config key '{key}'")
                continue
            if isinstance(getattr(instance, key), bool) and isinstance(value, str):
                value = value.strip().lower() in _TRUTHY
            setattr(instance, key, value)

    @staticmethod
    def get_default_config_path() -> str:
        """Get the default configuration file path."""
        config_dir = Path.home() / ".config" / "selfupdate"
        return str(config_dir / "config.json")

    def validate(self) -> bool:
        """Validate configuration values; raise ConfigError listing every problem."""
        validator = ConfigValidator()
        errors = []
        errors.extend(validator.validate_workspace_config(asdict(self.workspace)))
        errors.extend(validator.validate_download_config(asdict(self.download), HTTP_CLIENTS))
        errors.extend(validator.validate_package_config(asdict(self.package), PACKAGE_MANAGERS))
        errors.extend(validator.validate_logging_config(asdict(self.logging)))

        for error in errors:
            self.logger.error(f"Config validation error: {error}")

        if errors:
            raise ConfigError("; ".join(errors))
        return True
