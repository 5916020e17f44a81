"""CLI package for the Codex account OAuth helper

This package provides a small command-line interface that drives the
OAuth flow and prints the resulting account.
"""

from cli.main import main

__all__ = [
    "main",
]
