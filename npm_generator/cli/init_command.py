#!/usr/bin/env python3
"""
Scaffold a new npm package.

Asks the interview questions (or takes them from --sample / --config),
generates the package files, initializes git and optionally creates the
GitHub repository.

Usage:
    # Interactive interview
    npmgen init

    # Preview with the built-in sample answers
    npmgen init --sample --dry-run

    # Unattended, every answer from a config file
    npmgen init --config npmgen.json --non-interactive --no-git
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from npm_generator.core.config_file import load_config
from npm_generator.core.errors import ConfigError, NpmGeneratorError
from npm_generator.core.executor import ExecutionController
from npm_generator.helpers.helpers_logging import print_error, print_info, set_verbose
from npm_generator.helpers.prompting import ConsolePrompter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="npmgen init",
        description="Scaffold a new npm package",
    )
    parser.add_argument("--no-git", action="store_true", help="Skip git initialization")
    parser.add_argument("--sample", action="store_true", help="Use built-in sample answers")
    parser.add_argument("--config", help="JSON file whose values become the default answers")
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

    try:
        config = load_config(Path(args.config)) if args.config else None
        controller = ExecutionController(
            cwd,
            ConsolePrompter(),
            dry_run=args.dry_run,
            interactive=not args.non_interactive,
        )
        controller.init(config=config, sample=args.sample, no_git=args.no_git)
    except ConfigError as exc:
        print_error("Invalid configuration:")
        for error in exc.errors:
            print_info(f"  • {error}")
        return 1
    except NpmGeneratorError as exc:
        print_error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
