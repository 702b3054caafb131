"""Semantic version bumping for package.json."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import NamedTuple

from .errors import ManifestNotFoundError, ValidationError

BUMP_TYPES = ("patch", "minor", "major")

_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$")


class Version(NamedTuple):
    major: int
    minor: int
    patch: int
    prerelease: str | None = None


def parse_version(version_str: str) -> Version:
    """Parse ``x.y.z`` (optional ``v`` prefix, pre-release and build suffix).

    Raises:
        ValidationError: If the string is not a semantic version
    """
    match = _VERSION_RE.match(version_str.strip())
    if not match:
        raise ValidationError("version", f"'{version_str}' is not a semantic version (x.y.z)")
    major, minor, patch, prerelease = match.groups()
    return Version(int(major), int(minor), int(patch), prerelease)


def bump_version(old_version: str, bump_type: str) -> str:
    """Bump version based on bump type.

    A pre-release is released rather than skipped, as ``npm version`` does:
    ``1.3.0-beta.1`` bumped by minor gives ``1.3.0``.
    """
    if bump_type not in BUMP_TYPES:
        raise ValidationError("bump", f"Unknown bump type '{bump_type}' (expected {', '.join(BUMP_TYPES)})")
    major, minor, patch, prerelease = parse_version(old_version)

    if bump_type == "major":
        if prerelease and minor == 0 and patch == 0:
            return f"{major}.0.0"
        return f"{major + 1}.0.0"
    if bump_type == "minor":
        if prerelease and patch == 0:
            return f"{major}.{minor}.0"
        return f"{major}.{minor + 1}.0"
    if prerelease:
        return f"{major}.{minor}.{patch}"
    return f"{major}.{minor}.{patch + 1}"


def bump_manifest_version(project_dir: Path, bump_type: str, *, dry_run: bool = False) -> tuple[str, str]:
    """Bump the ``version`` field of ``project_dir/package.json``.

    Returns:
        (old_version, new_version)

    Raises:
        ManifestNotFoundError: If package.json is missing or unreadable
        ValidationError: If the current version is not a semantic version
    """
    manifest_path = project_dir / "package.json"
    if not manifest_path.is_file():
        raise ManifestNotFoundError(f"No package.json found in {project_dir}")
    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ManifestNotFoundError(f"package.json in {project_dir} is not valid JSON: {exc}") from exc
    if not isinstance(manifest, dict):
        raise ManifestNotFoundError(f"package.json in {project_dir} is not a JSON object")

    old_version = str(manifest.get("version", "0.0.0"))
    new_version = bump_version(old_version, bump_type)
    if not dry_run:
        manifest["version"] = new_version
        manifest_path.write_text(json.dumps(manifest, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return old_version, new_version
