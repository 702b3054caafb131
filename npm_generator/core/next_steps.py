"""Numbered "next steps" printed after init and upgrade."""

from __future__ import annotations

import sys
from collections.abc import Mapping
from typing import Any

from npm_generator.helpers.helpers_logging import Colors

from .answers import token_enabled
from .question_catalog import GITHUB_TARGETS


def build_next_steps(
    answers: Mapping[str, Any],
    *,
    upgrade: bool = False,
    no_git: bool = False,
    platform: str = sys.platform,
) -> list[str]:
    """Return the next-steps list (plain text, numbered, with indented hints).

    Args:
        answers: Normalized answers
        upgrade: True after ``npmgen upgrade``
        no_git: True when git initialization was skipped
        platform: ``sys.platform`` value used for OS specific hints
    """
    steps: list[tuple[str, list[str]]] = []
    manager = answers.get("package_manager", "npm")

    hint = (
        "Run commands in an Administrator Command Prompt to avoid permission errors"
        if platform.startswith("win")
        else "Ensure you have write permissions for the project directory"
    )
    steps.append((f"Run `{manager} install` to install dependencies", [hint]))

    github = answers.get("publish_to") in GITHUB_TARGETS
    if github:
        token_hint = (
            "Export GITHUB_TOKEN before publishing; .npmrc reads it from the environment"
            if token_enabled(answers.get("github_token"))
            else "Create a token at https://github.com/settings/tokens"
        )
        steps.append(("Make sure your GITHUB_TOKEN has the 'write:packages' scope", [token_hint]))
        if answers.get("create_github_workflow") is True:
            steps.append(("Configure GitHub Actions secrets (NPM_TOKEN and/or GITHUB_TOKEN)", []))

    if answers.get("create_github_pages") is True:
        steps.append(("Edit WEBPAGE.md to customize your GitHub Pages content", []))
        steps.append((
            "Enable GitHub Pages in your repository settings (Settings > Pages > Source: gh-pages branch)",
            ["The gh-pages workflow renders WEBPAGE.md on every push to main"],
        ))

    if not upgrade and no_git:
        steps.append((
            "Run `git init` and commit your changes",
            ['git add . && git commit -m "Initial commit"'],
        ))

    steps.append((f"Run `npm run release` to publish your {'updated ' if upgrade else ''}package", []))

    lines: list[str] = []
    for number, (text, hints) in enumerate(steps, start=1):
        lines.append(f"{number}. {text}")
        lines.extend(f"   - {h}" for h in hints)
    return lines


def print_next_steps(lines: list[str]) -> None:
    print(f"\n{Colors.BOLD}{Colors.CYAN}📋 Next steps:{Colors.ENDC}")
    for line in lines:
        color = Colors.YELLOW if line.startswith("   -") else Colors.CYAN
        print(f"{color}{line}{Colors.ENDC}")
