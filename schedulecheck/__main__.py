#!/usr/bin/env python3
"""
Convenience entry point for running schedulecheck directly.

Usage: python -m schedulecheck [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
