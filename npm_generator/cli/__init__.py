"""
CLI module for npm Package Generator.

Provides the ``npmgen`` entry point installed as a console script.
"""

from .commands import main

__all__ = ["main"]
