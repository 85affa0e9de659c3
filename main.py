#!/usr/bin/env python3
"""Launcher Entry Point"""

import sys

from craftlaunch.cli import main

if __name__ == "__main__":
    # Fast startup
    sys.dont_write_bytecode = True
    sys.exit(main())
