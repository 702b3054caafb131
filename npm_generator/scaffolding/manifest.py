"""package.json and .npmrc generation.

The manifest is built as a dict and serialized with two-space indentation,
matching what ``npm init`` writes. Fields with no value are left out
instead of being emitted as null or empty strings.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from npm_generator.core.answers import token_enabled
from npm_generator.core.question_catalog import unscoped_name

from .registries import PublishRegistry, auth_prefix, publish_registries
from .templates import uses_typescript

BUMP_COMMAND = "npmgen bump"


@dataclass(frozen=True)
class ToolOwnedKeys:
    """Manifest keys an upgrade may overwrite.

    Bump ``version`` whenever the declaration changes, so a project's merge
    report states which rule set was applied.

    Attributes:
        version: Revision of this declaration
        scripts: Script names owned outright
        script_prefixes: Script name prefixes owned outright
        fields: Top-level fields replaced wholesale when generated
    """
    version: int
    scripts: frozenset[str]
    script_prefixes: tuple[str, ...]
    fields: frozenset[str]

    def owns_script(self, name: str) -> bool:
        return name in self.scripts or name.startswith(self.script_prefixes)


TOOL_OWNED_KEYS = ToolOwnedKeys(
    version=1,
    scripts=frozenset({"release", "bootstrap"}),
    script_prefixes=("release:",),
    fields=frozenset({"main", "types", "type", "publishConfig", "repository", "homepage", "bugs"}),
)

# Field order of the generated manifest.
MANIFEST_FIELD_ORDER = (
    "name",
    "version",
    "description",
    "main",
    "types",
    "type",
    "scripts",
    "keywords",
    "author",
    "license",
    "repository",
    "homepage",
    "bugs",
    "dependencies",
    "devDependencies",
    "publishConfig",
)


def _tool_owned_scripts(answers: Mapping[str, Any]) -> dict[str, str]:
    manager = answers.get("package_manager", "npm")
    scripts = {
        "bootstrap": f"{manager} install",
        "release": f"{BUMP_COMMAND} patch && npm publish",
        "release:minor": f"{BUMP_COMMAND} minor && npm publish",
        "release:major": f"{BUMP_COMMAND} major && npm publish",
    }
    for registry in publish_registries(answers)[1:]:
        scripts[f"release:{registry.key}"] = f"npm publish --registry {registry.url}"
    return scripts


def _tooling(answers: Mapping[str, Any]) -> tuple[dict[str, str], dict[str, str]]:
    """Return (scripts, devDependencies) implied by the tooling flags."""
    typescript = uses_typescript(answers)
    framework = answers.get("test_framework", "none")
    scripts: dict[str, str] = {}
    dev: dict[str, str] = {}

    if typescript:
        scripts["build"] = "tsc"
        dev["typescript"] = "latest"
    if answers.get("use_eslint") is True:
        scripts["lint"] = "eslint ."
        dev["eslint"] = "latest"
        if typescript:
            dev["@typescript-eslint/parser"] = "latest"
            dev["@typescript-eslint/eslint-plugin"] = "latest"
        if answers.get("use_prettier") is True:
            dev["eslint-config-prettier"] = "latest"
    if answers.get("use_prettier") is True:
        scripts["format"] = "prettier --write ."
        dev["prettier"] = "latest"

    ext = "ts" if typescript else "js"
    if framework == "jest":
        scripts["test"] = "jest"
        dev["jest"] = "latest"
        dev["@jest/globals"] = "latest"
        if typescript:
            dev["ts-jest"] = "latest"
            dev["@types/jest"] = "latest"
    elif framework == "mocha":
        register = " --require ts-node/register" if typescript else ""
        scripts["test"] = f"mocha{register} 'test/**/*.test.{ext}'"
        dev["mocha"] = "latest"
        dev["chai"] = "latest"
        if typescript:
            dev["ts-node"] = "latest"
            dev["@types/mocha"] = "latest"
            dev["@types/chai"] = "latest"
    elif framework == "vitest":
        scripts["test"] = "vitest run"
        dev["vitest"] = "latest"
    if typescript and framework != "none":
        dev["@types/node"] = "latest"
    return scripts, dev


def _github_coordinates(answers: Mapping[str, Any]) -> tuple[str, str] | None:
    user = answers.get("github_username")
    if not user:
        return None
    return user, answers.get("github_repo_name") or unscoped_name(answers["name"])


def build_manifest(answers: Mapping[str, Any]) -> dict[str, Any]:
    """Build the package.json document for ``answers``.

    Args:
        answers: Normalized answers

    Returns:
        Manifest dict with fields in ``MANIFEST_FIELD_ORDER``
    """
    typescript = uses_typescript(answers)
    tooling_scripts, tooling_dev = _tooling(answers)
    owned = _tool_owned_scripts(answers)
    custom = {
        k: v for k, v in dict(answers.get("custom_scripts") or {}).items()
        if not TOOL_OWNED_KEYS.owns_script(k)
    }

    fields: dict[str, Any] = {
        "name": answers["name"],
        "version": answers["version"],
        "description": answers.get("description"),
        "main": "dist/index.js" if typescript else "src/index.js",
        "types": "dist/index.d.ts" if typescript else None,
        "type": "module" if answers.get("module_type") == "esm" else "commonjs",
        "scripts": {**owned, **tooling_scripts, **custom},
        "keywords": list(answers.get("keywords") or ()),
        "license": answers.get("license"),
        "dependencies": dict(answers.get("dependencies") or {}),
        "devDependencies": {**tooling_dev, **dict(answers.get("dev_dependencies") or {})},
    }

    author = {
        "name": answers.get("author_name"),
        "email": answers.get("author_email"),
        "url": answers.get("author_url"),
    }
    if author["name"]:
        fields["author"] = {k: v for k, v in author.items() if v}

    coordinates = _github_coordinates(answers)
    homepage = answers.get("homepage")
    if coordinates is not None:
        user, repo = coordinates
        fields["repository"] = {"type": "git", "url": f"git+https://github.com/{user}/{repo}.git"}
        fields["bugs"] = {"url": f"https://github.com/{user}/{repo}/issues"}
        if answers.get("create_github_pages") is True:
            homepage = f"https://{user}.github.io/{repo}/"
        elif not homepage:
            homepage = f"https://github.com/{user}/{repo}#readme"
    fields["homepage"] = homepage

    registries = publish_registries(answers)
    publish_config: dict[str, Any] = {"access": answers.get("access", "public")}
    if len(registries) == 1:
        publish_config["registry"] = registries[0].url
    fields["publishConfig"] = publish_config

    return {key: fields[key] for key in MANIFEST_FIELD_ORDER if fields.get(key)}


def serialize_manifest(manifest: Mapping[str, Any]) -> str:
    return json.dumps(manifest, indent=2, ensure_ascii=False) + "\n"


def get_manifest_template(answers: Mapping[str, Any]) -> str:
    """Generate package.json content."""
    return serialize_manifest(build_manifest(answers))


def authenticated_registries(answers: Mapping[str, Any]) -> list[PublishRegistry]:
    """Return the non-npmjs registries that were given a live token."""
    return [
        registry for registry in publish_registries(answers)
        if registry.token_answer is not None and token_enabled(answers.get(registry.token_answer))
    ]


def get_npmrc_template(answers: Mapping[str, Any]) -> str:
    """Generate .npmrc content.

    Tokens are never written; each line references the environment variable
    the publish step exports (``${GITHUB_TOKEN}`` and so on).
    """
    lines: list[str] = []
    for registry in authenticated_registries(answers):
        if registry.key == "github":
            lines.append(f"@{answers['github_username']}:registry={registry.url}")
        lines.append(f"{auth_prefix(registry.url)}:_authToken=${{{registry.token_env}}}")
    return "\n".join(lines) + "\n"
