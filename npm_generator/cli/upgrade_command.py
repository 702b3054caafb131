#!/usr/bin/env python3
"""
Upgrade an existing npm package to the current templates.

Answers already recorded in package.json are reused; only missing
features are asked about. Existing files are never overwritten except
package.json, which is merged so no existing key is lost.

Usage:
    npmgen upgrade
    npmgen upgrade --dry-run
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from npm_generator.core.errors import NpmGeneratorError
from npm_generator.core.executor import ExecutionController
from npm_generator.helpers.helpers_logging import print_error, set_verbose
from npm_generator.helpers.prompting import ConsolePrompter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="npmgen upgrade",
        description="Update an existing package with the current templates",
    )
    parser.add_argument("--dry-run", action="store_true", help="Show what would be written")
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Never prompt; fail on missing or invalid answers",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Write debug output to npmgen.log")
    return parser


def main() -> int:
    args = build_parser().parse_args()
    cwd = Path.cwd()
    set_verbose(args.verbose, cwd)

    controller = ExecutionController(
        cwd,
        ConsolePrompter(),
        dry_run=args.dry_run,
        interactive=not args.non_interactive,
    )
    try:
        controller.upgrade()
    except NpmGeneratorError as exc:
        print_error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
