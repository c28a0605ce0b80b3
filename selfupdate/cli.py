"""
Command line driver: ``update [-y|--yes] [-c|--check]``.

Exit status is 0 when the package is current or was upgraded (or, with
``--check``, whenever the check itself succeeded) and 1 on any failure.
"""

import argparse
import sys
from typing import List, Optional, TextIO

from .app import UpdaterApp
from .config import Config
from .core.errors import ConfigError, UpdateError, UsageError
from .core.workspace import RunContext
from .utils.logging import get_recent_logs

PROG = "update"

USAGE = f"""Usage: {PROG} [-y|--yes] [-c|--check]

Check for a newer release of the installed package and upgrade to it.

Options:
  -y, --yes     check for a new version and install it
  -c, --check   only report whether a new version is available
  -h, --help    show this help

Environment:
  TMPDIR              scratch directory root (default /tmp)
  MASTER_URL          canonical download location
  MIRROR_URL          preferred mirror, empty to disable
  KEEP_DOWNLOAD_PATH  keep the downloaded files after the run
"""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog=PROG, add_help=False, allow_abbrev=False)
    group = parser.add_mutually_exclusive_group()
    group.add_argument("-y", "--yes", dest="mode", action="store_const", const="upgrade")
    group.add_argument("-c", "--check", dest="mode", action="store_const", const="check")
    group.add_argument("-h", "--help", dest="mode", action="store_const", const="help")
    return parser


def parse_mode(argv: Optional[List[str]] = None) -> str:
    """Return one of 'help', 'check' or 'upgrade'; raise UsageError otherwise."""
    args = build_parser().parse_args(argv)
    return args.mode or "help"


def print_usage(stream: Optional[TextIO] = None) -> int:
    """Write usage to stderr and return the exit status for a usage error."""
    print(USAGE, file=stream or sys.stderr, end="")
    return 1


def render_failure(error: UpdateError, context: Optional[RunContext] = None,
                   stream: Optional[TextIO] = None):
    stream = stream or sys.stderr
    banner = "=" * 60
    print(banner, file=stream)
    print(f"UPDATE FAILED [{error.stage}]: {error}", file=stream)
    if context is not None:
        print(f"Log file: {context.log_path}", file=stream)
        if context.scratch_dir.exists():
            print(f"Downloads kept in: {context.scratch_dir}", file=stream)
    if error.log_excerpt:
        print("-" * 60, file=stream)
        for line in error.log_excerpt:
            print(line, file=stream)
    print(banner, file=stream)


def run(mode: str, config: Config) -> int:
    context = RunContext(config)
    try:
        with context:
            app = UpdaterApp(context).setup()
            if mode == "check":
                app.check()
            else:
                app.upgrade()
    except UpdateError as e:
        e.with_log_excerpt(get_recent_logs(config.logging.tail_lines, str(context.log_path)))
        render_failure(e, context)
        return 1
    except KeyboardInterrupt:
        print("\nUpdate interrupted", file=sys.stderr)
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    try:
        mode = parse_mode(argv)
    except UsageError as e:
        print(f"{PROG}: {e}", file=sys.stderr)
        return print_usage()

    if mode == "help":
        return print_usage()

    try:
        config = Config.load()
        config.validate()
    except ConfigError as e:
        print(f"{PROG}: {e}", file=sys.stderr)
        return 1

    return run(mode, config)


if __name__ == "__main__":
    sys.exit(main())
