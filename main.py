#!/usr/bin/env python3
"""
selfupdate - Command Line Entry Point
=====================================

Runs the updater from a source checkout: ``python main.py --check``.
Installed copies use the ``update`` console script instead.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

try:
    from selfupdate.cli import main
except ImportError as e:
    print(f"Error importing selfupdate modules: {e}", file=sys.stderr)
    print("Please ensure you're running from the project root directory", file=sys.stderr)
    print("and that all dependencies are installed: pip install -r requirements.txt", file=sys.stderr)
    sys.exit(1)


if __name__ == "__main__":
    sys.exit(main())
