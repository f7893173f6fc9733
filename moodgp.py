#!/usr/bin/env python3
"""
MoodGP: genetic programming regression on a personal mood diary

Main entry point for the MoodGP application.
This file serves as a thin wrapper that delegates all functionality
to the moodgp_pkg package.

Usage:
    python moodgp.py                                  # Analyse wellbeing with defaults
    python moodgp.py -r emotionality --seed 1         # Reproducible emotionality run
    python moodgp.py -d moodsData.csv --plot-dir out  # Local data, save figures
    python moodgp.py --help                           # Show help

Terminal command for Streamlit:
    streamlit run streamlit_app.py
"""

from __future__ import annotations

import sys


def main() -> int:
    """
    Main entry point for MoodGP.

    Delegates all functionality to the moodgp_pkg.cli module,
    which handles argument parsing, the analysis, and output formatting.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    from moodgp_pkg.cli import main_entry

    try:
        return main_entry(sys.argv[1:])
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
