"""CI pipeline templates.

Pipelines are built as plain dicts and dumped with PyYAML, so every
provider's file is valid YAML by construction.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import yaml

from .registries import PublishRegistry, publish_registries

NODE_VERSION = "20"
DEFAULT_BRANCH = "main"


def _dump(document: Mapping[str, Any]) -> str:
    return yaml.safe_dump(dict(document), sort_keys=False, default_flow_style=False)


def _install_command(answers: Mapping[str, Any]) -> str:
    manager = answers.get("package_manager", "npm")
    if manager == "pnpm":
        return "pnpm install --frozen-lockfile"
    if manager == "yarn":
        return "yarn install --frozen-lockfile"
    return "npm ci"


def _has_tests(answers: Mapping[str, Any]) -> bool:
    return answers.get("test_framework", "none") != "none"


def _has_build(answers: Mapping[str, Any]) -> bool:
    return answers.get("use_typescript") is True


def _check_commands(answers: Mapping[str, Any]) -> list[str]:
    commands = [_install_command(answers)]
    if _has_build(answers):
        commands.append("npm run build")
    if _has_tests(answers):
        commands.append("npm test")
    return commands


def _publish_command(registry: PublishRegistry, primary: bool) -> str:
    return "npm publish" if primary else f"npm publish --registry {registry.url}"


def get_github_actions_template(answers: Mapping[str, Any]) -> str:
    """Generate .github/workflows/publish.yml."""
    steps: list[dict[str, Any]] = [{"uses": "actions/checkout@v4"}]
    registries = publish_registries(answers)
    primary_url = registries[0].url if registries else None

    setup: dict[str, Any] = {"node-version": NODE_VERSION}
    if primary_url:
        setup["registry-url"] = primary_url
    steps.append({"uses": "actions/setup-node@v4", "with": setup})
    steps.extend({"run": command} for command in _check_commands(answers))

    for index, registry in enumerate(registries):
        if index and registry.key == "github":
            steps.append({
                "uses": "actions/setup-node@v4",
                "with": {"node-version": NODE_VERSION, "registry-url": registry.url},
            })
        steps.append({
            "name": f"Publish to {registry.key}",
            "run": _publish_command(registry, primary=index == 0 or registry.key == "github"),
            "env": {"NODE_AUTH_TOKEN": f"${{{{ secrets.{registry.token_env} }}}}"},
        })

    return _dump({
        "name": "Publish Package",
        "on": {
            "push": {"branches": [DEFAULT_BRANCH]},
            "workflow_dispatch": None,
        },
        "permissions": {"contents": "read", "packages": "write"},
        "jobs": {"publish": {"runs-on": "ubuntu-latest", "steps": steps}},
    })


def get_gitlab_ci_template(answers: Mapping[str, Any]) -> str:
    """Generate .gitlab-ci.yml."""
    script = _check_commands(answers)
    variables: dict[str, str] = {}
    for index, registry in enumerate(publish_registries(answers)):
        script.append(_publish_command(registry, primary=index == 0))
        variables[registry.token_env] = f"${registry.token_env}"
    return _dump({
        "stages": ["publish"],
        "publish": {
            "stage": "publish",
            "image": f"node:{NODE_VERSION}",
            "script": script,
            "variables": variables,
            "only": [DEFAULT_BRANCH],
        },
    })


def get_circleci_template(answers: Mapping[str, Any]) -> str:
    """Generate .circleci/config.yml."""
    steps: list[Any] = ["checkout"]
    steps.extend(
        {"run": {"name": command, "command": command}} for command in _check_commands(answers)
    )
    for index, registry in enumerate(publish_registries(answers)):
        steps.append({
            "run": {
                "name": f"Publish to {registry.key}",
                "command": _publish_command(registry, primary=index == 0),
                "environment": {"NODE_AUTH_TOKEN": f"${{{registry.token_env}}}"},
            }
        })
    return _dump({
        "version": 2.1,
        "jobs": {
            "publish": {
                "docker": [{"image": f"cimg/node:{NODE_VERSION}.10"}],
                "steps": steps,
            }
        },
        "workflows": {
            "publish": {
                "jobs": [{"publish": {"filters": {"branches": {"only": DEFAULT_BRANCH}}}}],
            }
        },
    })


def get_pages_workflow_template(_answers: Mapping[str, Any]) -> str:
    """Generate .github/workflows/gh-pages.yml (WEBPAGE.md -> index.html)."""
    return _dump({
        "name": "Deploy to GitHub Pages",
        "on": {
            "push": {"branches": [DEFAULT_BRANCH]},
            "workflow_dispatch": None,
        },
        "jobs": {
            "deploy": {
                "runs-on": "ubuntu-latest",
                "permissions": {"contents": "write", "pages": "write"},
                "steps": [
                    {"name": "Checkout code", "uses": "actions/checkout@v4"},
                    {
                        "name": "Setup Node.js",
                        "uses": "actions/setup-node@v4",
                        "with": {"node-version": NODE_VERSION},
                    },
                    {
                        "name": "Render WEBPAGE.md",
                        "run": "npx --yes marked -i WEBPAGE.md -o index.html",
                    },
                    {
                        "name": "Deploy to GitHub Pages",
                        "uses": "peaceiris/actions-gh-pages@v4",
                        "with": {
                            "github_token": "${{ secrets.GITHUB_TOKEN }}",
                            "publish_dir": "./",
                            "publish_branch": "gh-pages",
                            "force_orphan": True,
                        },
                    },
                ],
            }
        },
    })
