"""Derive upgrade answers from an existing project.

Everything the project already tells us (name, publish target, tooling,
CI provider) becomes a seed, so it is not asked again. Features the
project lacks are returned as defaults instead: the question is still
asked, suggesting "no".
"""

from __future__ import annotations

import datetime
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from npm_generator.helpers.registry_client import GITHUB_REGISTRY_URL, NPM_REGISTRY_URL

from .question_catalog import LICENSES
from .snapshot import ProjectSnapshot

_GITHUB_URL_RE = re.compile(r"github\.com[/:]([^/]+)/([^/#?]+?)(?:\.git)?/?(?:[#?].*)?$")

_CI_FILES = (
    ("github-actions", ".github/workflows/publish.yml"),
    ("gitlab-ci", ".gitlab-ci.yml"),
    ("circleci", ".circleci/config.yml"),
)
_PAGES_FILES = (".github/workflows/gh-pages.yml", "WEBPAGE.md")
_TEST_FRAMEWORKS = ("jest", "mocha", "vitest")

# Identity of an already published package: taken from package.json as is.
IDENTITY_ANSWERS = frozenset({"name", "version", "custom_version"})


@dataclass(frozen=True)
class UpgradeAnswers:
    """Seed and suggestion defaults for the upgrade question run."""
    seed: dict[str, Any] = field(default_factory=dict)
    suggestions: dict[str, Any] = field(default_factory=dict)


def parse_github_url(url: str | None) -> tuple[str, str] | None:
    """Return (owner, repo) from a GitHub URL in any common form.

    Example:
        >>> parse_github_url("git+https://github.com/acme/tool.git")
        ('acme', 'tool')
    """
    if not url:
        return None
    match = _GITHUB_URL_RE.search(url)
    if not match:
        return None
    return match.group(1).lower(), match.group(2)


def _repository_url(manifest: Mapping[str, Any]) -> str | None:
    repository = manifest.get("repository")
    if isinstance(repository, str):
        if repository.startswith("github:"):
            return f"https://github.com/{repository[len('github:'):]}"
        if re.match(r"^[\w.-]+/[\w.-]+$", repository):
            return f"https://github.com/{repository}"
        return repository
    if isinstance(repository, Mapping):
        url = repository.get("url")
        return url if isinstance(url, str) else None
    return None


def _string_map(value: Any) -> dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    return {str(k): v for k, v in value.items() if isinstance(v, str)}


def _derive_author(author: Any) -> dict[str, str]:
    """Split an author field ("Name <email> (url)" or object) into answers."""
    if isinstance(author, Mapping):
        return {
            "author_name": str(author.get("name", "")),
            "author_email": str(author.get("email", "")),
            "author_url": str(author.get("url", "")),
        }
    if isinstance(author, str):
        match = re.match(r"^\s*([^<(]*?)\s*(?:<([^>]*)>)?\s*(?:\(([^)]*)\))?\s*$", author)
        if match:
            name, email, url = match.groups()
            return {"author_name": name or "", "author_email": email or "", "author_url": url or ""}
    return {"author_name": "", "author_email": "", "author_url": ""}


def derive_upgrade_answers(snapshot: ProjectSnapshot) -> UpgradeAnswers:
    """Build seed answers from ``snapshot``.

    Args:
        snapshot: Captured project (must have a manifest)

    Returns:
        Seed values and suggestion defaults, both in normalized form
    """
    manifest = snapshot.manifest or {}
    dev = _string_map(manifest.get("devDependencies"))
    publish_config = manifest.get("publishConfig")
    publish_config = publish_config if isinstance(publish_config, Mapping) else {}
    registry = str(publish_config.get("registry") or "")
    name = str(manifest.get("name", ""))
    coordinates = parse_github_url(_repository_url(manifest))
    keywords = manifest.get("keywords")
    keywords = keywords if isinstance(keywords, list) else []

    seed: dict[str, Any] = {
        "use_new_dir": "no",
        "use_monorepo": False,
        "version": str(manifest.get("version", "0.0.1")),
        "description": str(manifest.get("description", "")),
        "keywords": [k for k in keywords if isinstance(k, str)],
        "access": publish_config.get("access") if publish_config.get("access") in ("public", "private") else "public",
        "dependencies": _string_map(manifest.get("dependencies")),
        "dev_dependencies": dev,
        "custom_scripts": {},
        "copyright_year": str(datetime.date.today().year),
        **_derive_author(manifest.get("author")),
    }
    if name:
        seed["name"] = name
    suggestions: dict[str, Any] = {}

    if GITHUB_REGISTRY_URL.rstrip("/") in registry:
        publish_to = "github"
    elif NPM_REGISTRY_URL.rstrip("/") in registry:
        publish_to = "npmjs"
    elif registry:
        publish_to = "custom"
        seed["custom_registry_url"] = registry
    elif coordinates is not None:
        publish_to = "both"
    else:
        publish_to = "npmjs"
    seed["publish_to"] = publish_to

    github_user = None
    if publish_to == "github" and name.startswith("@"):
        github_user = name.split("/", 1)[0][1:]
    elif coordinates is not None:
        github_user = coordinates[0]
    if github_user:
        seed["github_username"] = github_user
    if coordinates is not None:
        seed["github_repo_name"] = coordinates[1]
    if publish_to in ("github", "both"):
        seed["create_github_repo"] = False

    license_name = manifest.get("license")
    if license_name in LICENSES:
        seed["license"] = license_name
    else:
        suggestions["license"] = "MIT"

    module_type = manifest.get("type")
    if module_type in ("module", "commonjs"):
        seed["module_type"] = "esm" if module_type == "module" else "commonjs"
    else:
        suggestions["module_type"] = "commonjs"

    for answer_id, present in (
        ("use_typescript", bool(manifest.get("types")) or "typescript" in dev),
        ("use_eslint", "eslint" in dev),
        ("use_prettier", "prettier" in dev),
    ):
        if present:
            seed[answer_id] = True
        else:
            suggestions[answer_id] = False

    framework = next((f for f in _TEST_FRAMEWORKS if f in dev), None)
    if framework is not None:
        seed["test_framework"] = framework
    else:
        suggestions["test_framework"] = "none"

    provider = next((p for p, path in _CI_FILES if snapshot.exists(path)), None)
    if provider is not None:
        seed["ci_provider"] = provider
        if provider == "github-actions" and publish_to in ("github", "both"):
            seed["create_github_workflow"] = True
    else:
        suggestions["ci_provider"] = "none"
        if publish_to in ("github", "both"):
            suggestions["create_github_workflow"] = False

    if any(snapshot.exists(path) for path in _PAGES_FILES):
        seed["create_github_pages"] = True
    else:
        suggestions["create_github_pages"] = False
        seed["homepage"] = str(manifest.get("homepage", ""))

    return UpgradeAnswers(seed=seed, suggestions=suggestions)
