"""
Life Calendar — Entry Point.

Single entry point: `python main.py <command>` runs the command line tool,
the same as the installed `life-calendar` script.
"""

import sys

from life_calendar.cli import main

if __name__ == "__main__":
    sys.exit(main())
