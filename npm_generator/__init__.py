"""
npm Package Generator

Scaffolds, upgrades and version-bumps npm packages from a graph of
interview questions.
"""

__version__ = "0.1.0"
