"""Artifact generator dispatch.

Each artifact id maps to a path resolver and a renderer. The path resolver
decides relevance (``None`` means the artifact does not apply to these
answers) without rendering anything, so callers can work out which ids to
skip before paying for generation.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from npm_generator import scaffolding as tpl

Answers = Mapping[str, Any]


@dataclass(frozen=True)
class ArtifactDescriptor:
    """One generated output.

    Attributes:
        artifact_id: Stable id (``manifest``, ``readme``, ...)
        path: Relative POSIX path inside the project
        content: Full file content
        structured: True if the file is parse-mergeable (the manifest)
    """
    artifact_id: str
    path: str
    content: str
    structured: bool = False


@dataclass(frozen=True)
class ArtifactSpec:
    artifact_id: str
    structured: bool
    resolve_path: Callable[[Answers], str | None]
    render: Callable[[Answers], str]


def _always(path: str) -> Callable[[Answers], str | None]:
    return lambda _answers: path


def _when(flag: str, path: str) -> Callable[[Answers], str | None]:
    return lambda answers: path if answers.get(flag) is True else None


def _npmrc_path(answers: Answers) -> str | None:
    return ".npmrc" if tpl.authenticated_registries(answers) else None


def _index_path(answers: Answers) -> str | None:
    return f"src/index.{tpl.source_extension(answers)}"


def _test_path(answers: Answers) -> str | None:
    if answers.get("test_framework", "none") == "none":
        return None
    return f"test/index.test.{tpl.source_extension(answers)}"


_CI_FILES = {
    "github-actions": ".github/workflows/publish.yml",
    "gitlab-ci": ".gitlab-ci.yml",
    "circleci": ".circleci/config.yml",
}

_CI_RENDERERS = {
    "github-actions": tpl.get_github_actions_template,
    "gitlab-ci": tpl.get_gitlab_ci_template,
    "circleci": tpl.get_circleci_template,
}


def _ci_path(answers: Answers) -> str | None:
    provider = answers.get("ci_provider", "none")
    if provider == "github-actions" and answers.get("create_github_workflow", True) is not True:
        return None
    return _CI_FILES.get(provider)


def _render_ci(answers: Answers) -> str:
    return _CI_RENDERERS[answers["ci_provider"]](answers)


ARTIFACT_SPECS: tuple[ArtifactSpec, ...] = (
    ArtifactSpec("manifest", True, _always("package.json"), tpl.get_manifest_template),
    ArtifactSpec("gitignore", False, _always(".gitignore"), tpl.get_gitignore_template),
    ArtifactSpec("npmignore", False, _always(".npmignore"), tpl.get_npmignore_template),
    ArtifactSpec("npmrc", False, _npmrc_path, tpl.get_npmrc_template),
    ArtifactSpec("readme", False, _always("README.md"), tpl.get_readme_template),
    ArtifactSpec("license", False, _always("LICENSE"), tpl.get_license_template),
    ArtifactSpec("index", False, _index_path, tpl.get_index_template),
    ArtifactSpec("test", False, _test_path, tpl.get_test_template),
    ArtifactSpec("tsconfig", False, _when("use_typescript", "tsconfig.json"), tpl.get_tsconfig_template),
    ArtifactSpec("eslint", False, _when("use_eslint", ".eslintrc.json"), tpl.get_eslint_template),
    ArtifactSpec("prettier", False, _when("use_prettier", ".prettierrc"), tpl.get_prettier_template),
    ArtifactSpec("ci", False, _ci_path, _render_ci),
    ArtifactSpec(
        "pages_workflow",
        False,
        _when("create_github_pages", ".github/workflows/gh-pages.yml"),
        tpl.get_pages_workflow_template,
    ),
    ArtifactSpec("webpage", False, _when("create_github_pages", "WEBPAGE.md"), tpl.get_webpage_template),
)

ARTIFACT_REGISTRY: Mapping[str, ArtifactSpec] = {spec.artifact_id: spec for spec in ARTIFACT_SPECS}

ARTIFACT_IDS: tuple[str, ...] = tuple(spec.artifact_id for spec in ARTIFACT_SPECS)


def resolve_path(artifact_id: str, answers: Answers) -> str | None:
    """Return the relative path of ``artifact_id``, or None if irrelevant.

    Raises:
        KeyError: If ``artifact_id`` is unknown
    """
    return ARTIFACT_REGISTRY[artifact_id].resolve_path(answers)


def resolve_paths(answers: Answers) -> dict[str, str]:
    """Return ``{artifact_id: path}`` for every relevant artifact."""
    paths: dict[str, str] = {}
    for spec in ARTIFACT_SPECS:
        path = spec.resolve_path(answers)
        if path is not None:
            paths[spec.artifact_id] = path
    return paths


def generate(artifact_id: str, answers: Answers) -> ArtifactDescriptor | None:
    """Render one artifact.

    Pure: no I/O, and identical answers always give identical content.

    Args:
        artifact_id: Id from ``ARTIFACT_IDS``
        answers: Normalized answers

    Returns:
        The descriptor, or None if the artifact does not apply

    Raises:
        KeyError: If ``artifact_id`` is unknown
    """
    spec = ARTIFACT_REGISTRY[artifact_id]
    path = spec.resolve_path(answers)
    if path is None:
        return None
    return ArtifactDescriptor(artifact_id, path, spec.render(answers), spec.structured)


def generate_all(answers: Answers, skip: Iterable[str] = ()) -> list[ArtifactDescriptor]:
    """Render every relevant artifact except the ids in ``skip``.

    Skipped ids are never rendered.
    """
    skipped = frozenset(skip)
    artifacts: list[ArtifactDescriptor] = []
    for artifact_id in ARTIFACT_IDS:
        if artifact_id in skipped:
            continue
        artifact = generate(artifact_id, answers)
        if artifact is not None:
            artifacts.append(artifact)
    return artifacts
