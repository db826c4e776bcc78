#!/usr/bin/env python
"""
Interactive phaseline shell.

Usage:
    python run_cli.py [--debug]
"""

import sys

import phaseline
from phaseline.cli import main

if __name__ == "__main__":
    if "--debug" in sys.argv[1:]:
        phaseline.enable_debug_logging(level="DEBUG")
    main()
