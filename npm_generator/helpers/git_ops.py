"""Thin wrapper around the git executable."""

from __future__ import annotations

import subprocess
from pathlib import Path

from npm_generator.core.errors import CollaboratorError

DEFAULT_BRANCH = "main"


class GitRunner:
    """Runs git commands in a project directory."""

    def __init__(self, executable: str = "git") -> None:
        self._executable = executable

    def run(self, args: list[str], cwd: Path) -> str:
        """Run ``git <args>`` and return stdout.

        Raises:
            CollaboratorError: If git is missing or exits non-zero
        """
        try:
            result = subprocess.run(
                [self._executable, *args],
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise CollaboratorError("git not found on PATH") from exc
        if result.returncode != 0:
            raise CollaboratorError(
                f"git {' '.join(args)} failed: {result.stderr.strip() or result.stdout.strip()}"
            )
        return result.stdout

    def is_repository(self, cwd: Path) -> bool:
        return (cwd / ".git").exists()

    def inside_work_tree(self, cwd: Path) -> bool:
        """Return True if ``cwd`` or any parent is a git repository."""
        resolved = cwd.resolve()
        return any((p / ".git").exists() for p in (resolved, *resolved.parents))

    def init_and_commit(self, cwd: Path, message: str = "Initial commit") -> None:
        """Initialize a repository (if needed) and commit everything."""
        if not self.is_repository(cwd):
            self.run(["init", "-b", DEFAULT_BRANCH], cwd)
        self.run(["add", "."], cwd)
        self.run(["commit", "-m", message], cwd)

    def push_to_remote(self, cwd: Path, url: str, remote: str = "origin") -> None:
        """Point ``remote`` at ``url`` and push the default branch."""
        remotes = self.run(["remote"], cwd).split()
        if remote in remotes:
            self.run(["remote", "set-url", remote, url], cwd)
        else:
            self.run(["remote", "add", remote, url], cwd)
        self.run(["push", "-u", remote, DEFAULT_BRANCH], cwd)
