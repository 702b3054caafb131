"""Read-only capture of an existing project."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .errors import ManifestNotFoundError

MANIFEST_PATH = "package.json"

# Every path an artifact can resolve to, plus files upgrade inspects.
KNOWN_PATHS: tuple[str, ...] = (
    MANIFEST_PATH,
    ".gitignore",
    ".npmignore",
    ".npmrc",
    "README.md",
    "LICENSE",
    "src/index.js",
    "src/index.ts",
    "test/index.test.js",
    "test/index.test.ts",
    "tsconfig.json",
    ".eslintrc.json",
    ".prettierrc",
    ".github/workflows/publish.yml",
    ".gitlab-ci.yml",
    ".circleci/config.yml",
    ".github/workflows/gh-pages.yml",
    "WEBPAGE.md",
    "index.html",
)


@dataclass(frozen=True)
class ProjectSnapshot:
    """Contents of the known project files, captured once.

    Only package.json is decoded; every other file is kept as raw bytes,
    since upgrade only needs to know that it exists.

    Attributes:
        root: Project directory
        files: Relative path to raw content for every known file that exists
        manifest: Parsed package.json, or None if the project has none
    """
    root: Path
    files: Mapping[str, bytes]
    manifest: Mapping[str, Any] | None

    @classmethod
    def capture(cls, root: Path, paths: Iterable[str] = KNOWN_PATHS) -> ProjectSnapshot:
        """Read ``paths`` under ``root``.

        Raises:
            ManifestNotFoundError: If package.json exists but is not a UTF-8 JSON object
        """
        files: dict[str, bytes] = {}
        for rel in paths:
            candidate = root / rel
            if candidate.is_file():
                files[rel] = candidate.read_bytes()

        manifest: dict[str, Any] | None = None
        if MANIFEST_PATH in files:
            try:
                parsed = json.loads(files[MANIFEST_PATH].decode("utf-8"))
            except UnicodeDecodeError as exc:
                raise ManifestNotFoundError(f"package.json in {root} is not UTF-8: {exc}") from exc
            except json.JSONDecodeError as exc:
                raise ManifestNotFoundError(f"package.json in {root} is not valid JSON: {exc}") from exc
            if not isinstance(parsed, dict):
                raise ManifestNotFoundError(f"package.json in {root} is not a JSON object")
            manifest = parsed

        return cls(
            root=root,
            files=MappingProxyType(files),
            manifest=MappingProxyType(manifest) if manifest is not None else None,
        )

    def exists(self, path: str) -> bool:
        return path in self.files

    def content(self, path: str) -> bytes | None:
        return self.files.get(path)
