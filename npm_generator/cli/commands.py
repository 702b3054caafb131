#!/usr/bin/env python3
"""npm Package Generator CLI - Main Entry Point.

Usage:
    npmgen <command> [options]

Commands:
    init       Scaffold a new npm package from an interactive interview
    upgrade    Update an existing package with the current templates
    bump       Bump the package.json version (patch, minor or major)
    help       Show this help message
"""

from __future__ import annotations

import sys

import click

# Minimum number of CLI args (program name + command)
_MIN_ARGS = 2

# Commands backed by an argparse ``main()``
COMMANDS: dict[str, dict[str, str]] = {
    "init": {
        "module": "npm_generator.cli.init_command",
        "description": "Scaffold a new npm package from an interactive interview",
        "usage": "npmgen init [--no-git] [--sample] [--config <path>] [--dry-run] [--non-interactive]",
    },
    "upgrade": {
        "module": "npm_generator.cli.upgrade_command",
        "description": "Update an existing package with the current templates",
        "usage": "npmgen upgrade [--dry-run] [--non-interactive]",
    },
    "bump": {
        "module": "npm_generator.cli.bump_command",
        "description": "Bump the package.json version",
        "usage": "npmgen bump <patch|minor|major> [--dry-run]",
    },
}


def print_help() -> None:
    """Print help message with all available commands."""
    print(__doc__)
    print("📦 Commands:")
    for cmd, info in COMMANDS.items():
        print(f"  {cmd:10} - {info['description']}")
        print(f"  {'':10}   Usage: {info['usage']}")
    print("\n💡 Add --verbose to any command to write debug output to npmgen.log")


def execute_command(command: str, extra_args: list[str]) -> int:
    """Run ``command``'s argparse handler with ``extra_args``."""
    cmd_info = COMMANDS.get(command)
    if cmd_info is None:
        print(f"❌ Unknown command: {command}")
        print("\nRun 'npmgen help' to see available commands.")
        return 1

    import importlib

    module = importlib.import_module(cmd_info["module"])
    sys.argv = [sys.argv[0], *extra_args]
    return int(module.main())


@click.group(invoke_without_command=True)
@click.pass_context
def _click_cli(ctx: click.Context) -> int:
    """Top-level npmgen command group."""
    if ctx.invoked_subcommand is not None:
        return 0
    print_help()
    return 0


def _register_commands() -> None:
    """Register the typed commands and ``help``."""
    from npm_generator.cli.click_commands import CLICK_COMMANDS

    for _name, cmd_obj in CLICK_COMMANDS.items():
        _click_cli.add_command(cmd_obj)

    @click.command(name="help", help="Show help message")
    def _help_cmd() -> int:
        print_help()
        return 0

    _click_cli.add_command(_help_cmd)


_register_commands()


def main() -> int:
    """Main CLI entry point."""
    if len(sys.argv) < _MIN_ARGS or sys.argv[1] in ["help", "--help", "-h"]:
        print_help()
        return 0

    try:
        result = _click_cli.main(
            args=sys.argv[1:],
            prog_name="npmgen",
            standalone_mode=False,
        )
    except (click.Abort, KeyboardInterrupt):
        print("\n⚠️  Cancelled by user")
        return 130
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    return 0 if result is None else int(result)


if __name__ == "__main__":
    sys.exit(main())
