#!/usr/bin/env python3
"""
MDLive Preview Script.

Runs the live preview from a source checkout without installing.
Requires Python 3.11+.

Usage:
    python scripts/preview.py /path/to/document.md [--stylesheet theme.css]
"""

import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from api.cli import main


if __name__ == "__main__":
    sys.exit(main())
