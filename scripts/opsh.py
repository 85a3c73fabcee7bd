#!/usr/bin/env python3
"""
opsh.py - Operator shell for a YANG-modeled routing daemon

Thin launcher for running from a source checkout; the installed entry
point is the `opsh` console script.
"""

import sys

from opsh_lib.main import main

if __name__ == "__main__":
    sys.exit(main())
