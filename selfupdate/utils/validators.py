import logging
import os
import re
import urllib.parse
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from .logging import get_logger


class BaseValidator:
    """Base validator class."""

    def __init__(self):
        self.logger = get_logger(__name__)

    def validate(self, value: Any) -> Tuple[bool, Optional[str]]:
        """
        Validate a value.

        Returns:
            Tuple of (is_valid, error_message)
        """
        raise NotImplementedError


class URLValidator(BaseValidator):
    """Validate URLs."""

    def __init__(self, allowed_schemes: List[str] = None):
        super().__init__()
        self.allowed_schemes = allowed_schemes or ['http', 'https']

    def validate(self, value: Any) -> Tuple[bool, Optional[str]]:
        """Validate URL."""
        if not isinstance(value, str):
            return False, "URL must be a string"

        if not value.strip():
            return False, "URL cannot be empty"

        try:
            parsed = urllib.parse.urlparse(value)
        except ValueError as e:
            return False, f"Invalid URL format: {str(e)}"

        if not parsed.scheme:
            return False, "URL must include a scheme (http/https)"

        if parsed.scheme not in self.allowed_schemes:
            return False, f"URL scheme must be one of: {', '.join(self.allowed_schemes)}"

        if not parsed.netloc:
            return False, "URL must include a domain"

        return True, None


class ChecksumValidator(BaseValidator):
    """Validate published hex digests (32 chars for MD5, longer for SHA-256)."""

    pattern = re.compile(r'^[0-9a-fA-F]+$')

    def validate(self, value: Any) -> Tuple[bool, Optional[str]]:
        if value is None or value == "":
            return True, None  # No checksum claimed

        if not isinstance(value, str):
            return False, "Checksum must be a string"

        if not self.pattern.match(value.strip()):
            return False, f"Checksum is not hexadecimal: {value!r}"

        if len(value.strip()) < 32:
            return False, f"Checksum is too short ({len(value.strip())} characters)"

        return True, None


class DirectoryValidator(BaseValidator):
    """Validate that a directory exists and is writable and searchable."""

    def validate(self, value: Any) -> Tuple[bool, Optional[str]]:
        if not value:
            return False, "Directory path cannot be empty"

        path = Path(value)
        if not path.is_dir():
            return False, f"{path} is not a directory"

        if not os.access(path, os.W_OK | os.X_OK):
            return False, f"{path} must be writable and executable"

        return True, None


class ConfigValidator:
    """Validate configuration values."""

    def __init__(self):
        self.logger = get_logger(__name__)
        self.url_validator = URLValidator()
        self.directory_validator = DirectoryValidator()

    def validate_download_config(self, config: dict, http_clients: Sequence[str] = ()) -> List[str]:
        """Validate download configuration."""
        errors = []

        valid, error = self.url_validator.validate(config.get('master_url', ''))
        if not valid:
            errors.append(f"master_url is invalid: {error}")

        mirror = config.get('mirror_url', '')
        if mirror:
            valid, error = self.url_validator.validate(mirror)
            if not valid:
                errors.append(f"mirror_url is invalid: {error}")

        manifest = config.get('manifest_name', '')
        if not isinstance(manifest, str) or not manifest.strip() or '/' in manifest:
            errors.append("manifest_name must be a plain file name")

        client = config.get('http_client', 'auto')
        if http_clients and client not in ('auto', *http_clients):
            errors.append(f"http_client must be one of: auto, {', '.join(http_clients)}")

        timeout = config.get('request_timeout', 0)
        if not isinstance(timeout, (int, float)) or timeout <= 0 or timeout > 3600:
            errors.append("request_timeout must be between 1 and 3600 seconds")

        return errors

    def validate_package_config(self, config: dict, managers: Sequence[str] = ()) -> List[str]:
        """Validate package configuration."""
        errors = []

        name = config.get('name', '')
        if not isinstance(name, str) or not re.match(r'^[A-Za-z0-9][A-Za-z0-9+._-]*$', name):
            errors.append("package name contains invalid characters")

        manager = config.get('manager', 'auto')
        if managers and manager not in ('auto', *managers):
            errors.append(f"package manager must be one of: auto, {', '.join(managers)}")

        return errors

    def validate_workspace_config(self, config: dict) -> List[str]:
        """Validate workspace configuration."""
        errors = []

        valid, error = self.directory_validator.validate(config.get('tmp_root', ''))
        if not valid:
            errors.append(f"TMPDIR is unusable: {error}")

        prefix = config.get('prefix', '')
        if not isinstance(prefix, str) or not re.match(r'^[A-Za-z0-9._-]+$', prefix):
            errors.append("workspace prefix contains invalid characters")

        return errors

    def validate_logging_config(self, config: dict) -> List[str]:
        """Validate logging configuration."""
        errors = []

        level = str(config.get('level', '')).upper()
        if not isinstance(logging.getLevelName(level), int):
            errors.append(f"log level '{config.get('level')}' is unknown")

        tail = config.get('tail_lines', 0)
        if not isinstance(tail, int) or tail < 0:
            errors.append("tail_lines must be a non-negative integer")

        return errors
