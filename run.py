#!/usr/bin/env python
"""
Entry point for the seed leaderboard.
Run with: python run.py {serve,refresh,trigger,show,listings,export} [options]
"""
import sys

from seedboard.cli import main

if __name__ == "__main__":
    sys.exit(main())
