#!/usr/bin/env python3
"""
Main entry point for the pomodoro bot
"""

import logging
import sys

from pomobot.bot import run


if __name__ == "__main__":
    try:
        run()
    except Exception as e:
        logging.error(f"Bot crashed with error: {e}")
        sys.exit(1)
