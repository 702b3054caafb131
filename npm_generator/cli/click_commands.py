"""Click command definitions with option declarations for help and completion.

Options are declared so Click can show them in ``--help`` and offer them
for shell completion; the actual argument parsing is done by each
command's argparse handler. The commands use ``allow_extra_args=True`` and
``ignore_unknown_options=True`` so Click passes everything through.
"""

from __future__ import annotations

import sys

import click

from npm_generator.core.versioning import BUMP_TYPES

# Shared context settings for all passthrough commands
_PASSTHROUGH_CTX: dict[str, object] = {
    "allow_extra_args": True,
    "ignore_unknown_options": True,
}


# ============================================================================
# init

@click.command(
    name="init",
    help="Scaffold a new npm package from an interactive interview",
    context_settings=_PASSTHROUGH_CTX,
    add_help_option=False,
)
@click.option("--no-git", is_flag=True, help="Skip git initialization")
@click.option("--sample", is_flag=True, help="Use built-in sample answers")
@click.option("--config", type=click.Path(dir_okay=False),
              help="JSON file with default answers")
@click.option("--dry-run", is_flag=True, help="Show what would be written")
@click.option("--non-interactive", is_flag=True,
              help="Never prompt; fail on missing or invalid answers")
@click.option("--verbose", "-v", is_flag=True, help="Write debug output to npmgen.log")
@click.pass_context
def init_cmd(_ctx: click.Context, **_kwargs: object) -> int:
    """init passthrough."""
    from npm_generator.cli.commands import execute_command

    return execute_command("init", sys.argv[2:])


# ============================================================================
# upgrade

@click.command(
    name="upgrade",
    help="Update an existing package with the current templates",
    context_settings=_PASSTHROUGH_CTX,
    add_help_option=False,
)
@click.option("--dry-run", is_flag=True, help="Show what would be written")
@click.option("--non-interactive", is_flag=True,
              help="Never prompt; fail on missing or invalid answers")
@click.option("--verbose", "-v", is_flag=True, help="Write debug output to npmgen.log")
@click.pass_context
def upgrade_cmd(_ctx: click.Context, **_kwargs: object) -> int:
    """upgrade passthrough."""
    from npm_generator.cli.commands import execute_command

    return execute_command("upgrade", sys.argv[2:])


# ============================================================================
# bump

@click.command(
    name="bump",
    help="Bump the package.json version",
    context_settings=_PASSTHROUGH_CTX,
    add_help_option=False,
)
@click.argument("bump_type", required=False, type=click.Choice(BUMP_TYPES))
@click.option("--dry-run", is_flag=True, help="Print the new version without writing")
@click.option("--verbose", "-v", is_flag=True, help="Write debug output to npmgen.log")
@click.pass_context
def bump_cmd(_ctx: click.Context, **_kwargs: object) -> int:
    """bump passthrough."""
    from npm_generator.cli.commands import execute_command

    return execute_command("bump", sys.argv[2:])


# ============================================================================
# Registry of all typed commands
# ============================================================================

CLICK_COMMANDS: dict[str, click.Command] = {
    "init": init_cmd,
    "upgrade": upgrade_cmd,
    "bump": bump_cmd,
}
