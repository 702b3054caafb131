#!/usr/bin/env python3
"""
Bump the version in package.json.

This is what the generated ``release`` scripts run before ``npm publish``.

Usage:
    npmgen bump            # patch
    npmgen bump minor
    npmgen bump major --dry-run
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from npm_generator.core.errors import NpmGeneratorError
from npm_generator.core.versioning import BUMP_TYPES, bump_manifest_version
from npm_generator.helpers.helpers_logging import print_error, print_info, print_success, set_verbose


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="npmgen bump",
        description="Bump the package.json version",
    )
    parser.add_argument("bump_type", nargs="?", choices=BUMP_TYPES, default="patch")
    parser.add_argument("--dry-run", action="store_true", help="Print the new version without writing")
    parser.add_argument("--verbose", "-v", action="store_true", help="Write debug output to npmgen.log")
    return parser


def main() -> int:
    args = build_parser().parse_args()
    cwd = Path.cwd()
    set_verbose(args.verbose, cwd)

    try:
        old_version, new_version = bump_manifest_version(cwd, args.bump_type, dry_run=args.dry_run)
    except NpmGeneratorError as exc:
        print_error(str(exc))
        return 1

    if args.dry_run:
        print_info(f"[dry-run] Would bump version: {old_version} → {new_version}")
    else:
        print_success(f"Version bumped: {old_version} → {new_version}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
