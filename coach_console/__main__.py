#!/usr/bin/env python3
"""
Coach console - Main entry point.
"""

import sys

from coach_console.cli import main

if __name__ == "__main__":
    sys.exit(main())
