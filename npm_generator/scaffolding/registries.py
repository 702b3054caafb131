"""Publish registry resolution shared by the manifest, .npmrc and CI files."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from npm_generator.core.question_catalog import CUSTOM_TARGETS, GITHUB_TARGETS, is_skip
from npm_generator.helpers.registry_client import GITHUB_REGISTRY_URL, NPM_REGISTRY_URL


@dataclass(frozen=True)
class PublishRegistry:
    """A registry the package is published to.

    Attributes:
        key: Short name used in script names (``release:<key>``)
        url: Registry URL (with trailing slash)
        token_env: Environment variable holding the publish token
        token_answer: Answer id holding the token, None for npmjs
    """
    key: str
    url: str
    token_env: str
    token_answer: str | None


# (key, url answer id, token answer id, env var)
_EXTRA_REGISTRIES = (
    ("custom", "custom_registry_url", "custom_registry_token", "CUSTOM_REGISTRY_TOKEN"),
    ("artifactory", "artifactory_url", "artifactory_token", "ARTIFACTORY_TOKEN"),
    ("nexus", "nexus_url", "nexus_token", "NEXUS_TOKEN"),
    ("verdaccio", "verdaccio_url", "verdaccio_token", "VERDACCIO_TOKEN"),
)


def _with_slash(url: str) -> str:
    return url if url.endswith("/") else f"{url}/"


def publish_registries(answers: Mapping[str, Any]) -> tuple[PublishRegistry, ...]:
    """Return the registries for the ``publish_to`` answer, primary first."""
    target = answers.get("publish_to")
    registries: list[PublishRegistry] = []
    if target in ("npmjs", "both", "all"):
        registries.append(PublishRegistry("npmjs", NPM_REGISTRY_URL, "NPM_TOKEN", None))
    if target in GITHUB_TARGETS:
        registries.append(PublishRegistry("github", GITHUB_REGISTRY_URL, "GITHUB_TOKEN", "github_token"))
    if target in CUSTOM_TARGETS:
        for key, url_id, token_id, env in _EXTRA_REGISTRIES:
            url = answers.get(url_id)
            if url and not is_skip(url):
                registries.append(PublishRegistry(key, _with_slash(url), env, token_id))
    return tuple(registries)


def auth_prefix(url: str) -> str:
    """Return the ``//host/path/`` form npm uses for per-registry settings."""
    without_scheme = url.split("://", 1)[-1]
    return f"//{_with_slash(without_scheme)}"
