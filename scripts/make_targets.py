#!/usr/bin/env python3
"""Render the display test-target catalog.

Usage:
    # Every size class into the current directory
    python scripts/make_targets.py

    # One size class, dithered variants, into out/
    python scripts/make_targets.py tvx2 --mode dither --output-dir out/

    # Show size classes and patterns
    python scripts/make_targets.py --list
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from maketargets.cli import main


if __name__ == "__main__":
    sys.exit(main())
