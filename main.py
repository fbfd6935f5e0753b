#!/usr/bin/env python3
"""
Social Doubles Scheduler
Entry point for the event scheduling system.
"""

import sys

try:
    from ortools.sat.python import cp_model
    HAS_ORTOOLS = True
except ImportError:
    HAS_ORTOOLS = False
    print("❌ OR-Tools is required for the social doubles scheduler.")
    print("Install with: pip install ortools")
    sys.exit(1)

if __name__ == "__main__":
    from social_doubles.cli import main
    main()
