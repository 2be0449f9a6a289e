#!/usr/bin/env python3
"""
CLI entry point for relaycast.cli module.

This allows running: python -m relaycast.cli
"""

from .main import cli

if __name__ == "__main__":
    cli()
