"""
Per-run scratch directory and log file.

The run context is acquired once at startup and threaded through every stage.
On a clean exit the scratch directory is removed unless retention was
requested; on failure it is kept for postmortem inspection when it holds
anything. The log file is never removed.
"""

import os
import shutil
import time
from pathlib import Path
from typing import Optional

from .errors import ConfigError
from ..utils.logging import get_logger, setup_logging, shutdown_logging


def run_name(prefix: str, timestamp: Optional[float] = None, pid: Optional[int] = None) -> str:
    """``<prefix>-<YYYYmmddHHMMSS>-<pid>``, unique per process."""
    stamp = time.strftime("%Y%m%d%H%M%S", time.localtime(timestamp))
    return f"{prefix}-{stamp}-{os.getpid() if pid is None else pid}"


class RunContext:
    """Explicit state for one update run."""

    def __init__(self, config, name: Optional[str] = None):
        self.config = config
        self.root = Path(config.workspace.tmp_root)
        self._set_name(name or run_name(config.workspace.prefix))
        self.failed = False
        self.logger = get_logger(__name__)

        # Strategies chosen at startup by the application
        self.transport = None
        self.verifier = None
        self.package_manager = None

    def __enter__(self) -> 'RunContext':
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close(failed=exc_type is not None)
        return False

    def _set_name(self, name: str):
        self.name = name
        self.scratch_dir = self.root / name
        self.log_path = self.root / f"{name}.log"

    def _claim_name(self):
        """Suffix the run name until neither the scratch directory nor the log exists."""
        base, suffix = self.name, 0
        while self.scratch_dir.exists() or self.log_path.exists():
            suffix += 1
            self._set_name(f"{base}-{suffix}")

    def open(self):
        self._claim_name()
        try:
            self.scratch_dir.mkdir(parents=True, exist_ok=False)
        except OSError as e:
            raise ConfigError(f"Cannot create scratch directory {self.scratch_dir}: {e}") from e
        setup_logging(
            level=self.config.logging.level,
            log_file=str(self.log_path),
            log_to_console=self.config.logging.log_to_console,
        )
        self.logger.info(f"Scratch directory: {self.scratch_dir}")

    @property
    def manifest_path(self) -> Path:
        return self.scratch_dir / self.config.download.manifest_name

    @property
    def keep_download(self) -> bool:
        return bool(self.config.workspace.keep_download)

    def close(self, failed: bool = False):
        """Release the scratch directory according to the retention policy."""
        self.failed = failed
        if failed:
            if not self.scratch_dir.is_dir():
                pass
            elif not any(self.scratch_dir.iterdir()):
                self.scratch_dir.rmdir()
            else:
                self.logger.error(f"Keeping scratch directory for inspection: {self.scratch_dir}")
        elif self.keep_download:
            self.logger.info(f"Keeping scratch directory: {self.scratch_dir}")
        else:
            shutil.rmtree(self.scratch_dir, ignore_errors=True)
            self.logger.debug(f"Removed scratch directory {self.scratch_dir}")

        shutdown_logging()
