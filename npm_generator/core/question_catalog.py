"""The question graph asked by ``npmgen init`` and ``npmgen upgrade``.

Answers are stored under snake_case ids. The resolved set is turned into
its normalized form by ``normalize_answers`` (``version`` folded, repeat
groups collapsed into ``dependencies`` / ``dev_dependencies`` maps); the
normalized form is what config files, recovery state and the generators
use. ``expand_seed`` goes the other way.
"""

from __future__ import annotations

import datetime
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from npm_generator.helpers.collaborators import Collaborators
from npm_generator.helpers.github_client import GitHubError

from .answers import AnswerSet, ScopedAnswers, token_enabled
from .questions import Question, QuestionGraph, QuestionKind, RepeatGroup

# ---------------------------------------------------------------------------
# Choices
# ---------------------------------------------------------------------------

NEW_DIR_CHOICES = ("package-name", "custom", "no")
PACKAGE_MANAGERS = ("npm", "pnpm", "yarn")
PUBLISH_TARGETS = ("npmjs", "github", "both", "custom", "all")
ACCESS_LEVELS = ("public", "private")
CI_PROVIDERS = ("github-actions", "gitlab-ci", "circleci", "none")
VERSION_CHOICES = ("0.0.1", "0.1.0", "1.0.0", "custom")
MODULE_TYPES = ("commonjs", "esm")
LICENSES = ("MIT", "ISC", "Apache-2.0", "GPL-3.0", "Unlicense")
TEST_FRAMEWORKS = ("jest", "mocha", "vitest", "none")

GITHUB_TARGETS = frozenset({"github", "both", "all"})
CUSTOM_TARGETS = frozenset({"custom", "all"})

# ---------------------------------------------------------------------------
# Validation rules
# ---------------------------------------------------------------------------

MAX_NAME_LENGTH = 214
RESERVED_NAMES = frozenset({"node", "npm", "http", "https", "core", "js"})
UNSCOPED_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9-]{0,49}$")
SCOPED_NAME_RE = re.compile(r"^@[a-z0-9-][a-z0-9-]{0,49}/[a-z0-9][a-z0-9-]{0,49}$")
DIRECTORY_RE = re.compile(r"^[a-z0-9-._]+$")
REGISTRY_URL_RE = re.compile(r"^https?://[a-zA-Z0-9.-]+(:[0-9]+)?/.*$")
CLASSIC_TOKEN_RE = re.compile(r"^(ghp_|ghf_)[A-Za-z0-9_]{36}$")
FINE_GRAINED_TOKEN_RE = re.compile(r"^github_pat_[A-Za-z0-9_]{80,}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SEMVER_RE = re.compile(r"^\d+\.\d+\.\d+$")
YEAR_RE = re.compile(r"^\d{4}$")

_SCOPED_FORMAT_HINT = (
    "Scoped package must be in the format @scope/package, with scope and package "
    "name containing only lowercase letters, numbers, or hyphens (e.g., @myscope/my-package)"
)
_UNSCOPED_FORMAT_HINT = (
    "Package name must start with a lowercase letter or number, followed by "
    "lowercase letters, numbers, or hyphens (e.g., my-package)"
)


def is_skip(value: object) -> bool:
    """Return True for the "NA"/"skip" sentinel (any case)."""
    return isinstance(value, str) and value.strip().lower() in ("na", "skip")


def unscoped_name(name: str) -> str:
    """Return ``name`` without its ``@scope/`` prefix."""
    if name.startswith("@") and "/" in name:
        return name.split("/", 1)[1]
    return name


def validate_package_name(
    name: str,
    publish_to: str | None,
    github_username: str | None,
) -> str | None:
    """Check ``name`` against npm naming rules and the publish target.

    Args:
        name: Candidate package name
        publish_to: Publish target answer (None when unknown)
        github_username: GitHub username answer (None when not asked)

    Returns:
        An error message, or None if the name is acceptable
    """
    if not name:
        return "Package name is required"
    if len(name) > MAX_NAME_LENGTH:
        return f"Package name must be {MAX_NAME_LENGTH} characters or less"
    if unscoped_name(name) in RESERVED_NAMES:
        return f'Package name "{unscoped_name(name)}" is reserved by npm'

    scoped = name.startswith("@")
    if scoped and not SCOPED_NAME_RE.match(name):
        return _SCOPED_FORMAT_HINT
    if not scoped and not UNSCOPED_NAME_RE.match(name):
        return _UNSCOPED_FORMAT_HINT

    user_scope = f"@{github_username}" if github_username else None
    if publish_to == "github":
        if not scoped or (user_scope and name.split("/", 1)[0] != user_scope):
            scope_hint = user_scope or "@<github-user>"
            return (
                f"GitHub Packages requires scoped packages in the format "
                f"{scope_hint}/package (e.g., {scope_hint}/my-package)"
            )
    elif publish_to in ("both", "all") and scoped and user_scope:
        if name.split("/", 1)[0] != user_scope:
            return (
                f"For GitHub Packages, scoped package must start with {user_scope} "
                f"(e.g., {user_scope}/my-package)"
            )
    return None


# ---------------------------------------------------------------------------
# Checks and transforms
# ---------------------------------------------------------------------------


def _required(message: str):
    def check(value: Any, _answers: ScopedAnswers) -> str | None:
        return None if value else message
    return check


def _registry_url(label: str, example: str):
    def check(value: str, _answers: ScopedAnswers) -> str | None:
        if is_skip(value):
            return None
        if not value:
            return f"{label} URL is required (or enter 'NA' to skip)"
        if not REGISTRY_URL_RE.match(value):
            return f"Please enter a valid URL (e.g., {example})"
        return None
    return check


def _check_directory(value: str, _answers: ScopedAnswers) -> str | None:
    if not value:
        return "Directory name is required"
    if not DIRECTORY_RE.match(value):
        return (
            "Directory name must contain only lowercase letters, numbers, "
            "hyphens, periods, or underscores"
        )
    return None


def _check_name(value: str, answers: ScopedAnswers) -> str | None:
    return validate_package_name(value, answers.get("publish_to"), answers.get("github_username"))


def _remote_name(value: str, answers: ScopedAnswers, collaborators: Collaborators) -> str | None:
    if answers.get("publish_to") == "github":
        return None
    if collaborators.registry.package_exists(value):
        return f"Package {value} already exists on npm. Choose another name."
    return None


def _check_classic_token(value: str, _answers: ScopedAnswers) -> str | None:
    if not token_enabled(value):
        return None
    if not CLASSIC_TOKEN_RE.match(value):
        return (
            "Invalid GitHub classic token format. It should start with 'ghp_' or "
            "'ghf_' and be 40 characters long (or enter 'NA' to skip)."
        )
    return None


def _remote_classic_token(value: str, _answers: ScopedAnswers, collaborators: Collaborators) -> str | None:
    if not token_enabled(value):
        return None
    try:
        info = collaborators.github.token_info(value)
    except GitHubError as exc:
        if exc.status_code in (401, 403):
            return "Invalid GitHub classic token. Create one at https://github.com/settings/tokens."
        raise
    if "repo" not in info.scopes:
        return "GitHub classic token must have 'repo' scope."
    return None


def _check_pages_token(value: str, _answers: ScopedAnswers) -> str | None:
    if not token_enabled(value):
        return None
    if not FINE_GRAINED_TOKEN_RE.match(value):
        return (
            "Invalid GitHub fine-grained token format. It should start with "
            "'github_pat_' (or enter 'NA' to skip)."
        )
    return None


def _remote_pages_token(value: str, _answers: ScopedAnswers, collaborators: Collaborators) -> str | None:
    if not token_enabled(value):
        return None
    try:
        collaborators.github.token_info(value)
    except GitHubError as exc:
        if exc.status_code in (401, 403):
            return "Invalid GitHub fine-grained token. It needs 'pages:write' permission."
        raise
    return None


def _remote_dependency(value: str, _answers: ScopedAnswers, collaborators: Collaborators) -> str | None:
    if not collaborators.registry.package_exists(value):
        return f'Package "{value}" not found in npm registry'
    return None


def _check_version(value: str, _answers: ScopedAnswers) -> str | None:
    return None if SEMVER_RE.match(value) else "Version must be in the format x.y.z (e.g., 1.0.0)"


def _check_email(value: str, _answers: ScopedAnswers) -> str | None:
    if value and not EMAIL_RE.match(value):
        return "Please enter a valid email address"
    return None


def _check_scripts(value: Mapping[str, str], _answers: ScopedAnswers) -> str | None:
    return None if value else "Enter at least one script as name:command"


def _check_year(value: str, _answers: ScopedAnswers) -> str | None:
    return None if YEAR_RE.match(value) else "Copyright year must be a four digit year"


def _lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def ensure_https(value: Any) -> Any:
    """Prefix bare host names with ``https://``."""
    if not isinstance(value, str) or not value:
        return value
    return value if re.match(r"^https?://", value) else f"https://{value}"


def split_keywords(value: Any) -> Any:
    """Turn ``"a, b"`` or a list into a tuple of non-empty keywords."""
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, (list, tuple)):
        return tuple(str(k).strip() for k in value if str(k).strip())
    return value


def parse_scripts(value: Any) -> Any:
    """Turn ``"build:tsc, lint:eslint ."`` or a mapping into a script map."""
    if isinstance(value, str):
        scripts: dict[str, str] = {}
        for pair in value.split(","):
            key, _, command = pair.partition(":")
            if key.strip() and command.strip():
                scripts[key.strip()] = command.strip()
        return MappingProxyType(scripts)
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): str(v) for k, v in value.items()})
    return value


def _current_year(_answers: ScopedAnswers) -> str:
    return str(datetime.date.today().year)


def _github_targeted(answers: ScopedAnswers) -> bool:
    return answers["publish_to"] in GITHUB_TARGETS


def _github_or_pages(answers: ScopedAnswers) -> bool:
    return answers["publish_to"] in GITHUB_TARGETS or answers["create_github_pages"] is True


def _all_registries(answers: ScopedAnswers) -> bool:
    return answers["publish_to"] == "all"


def _registry_token_when(url_id: str):
    def when(answers: ScopedAnswers) -> bool:
        return answers["publish_to"] == "all" and token_enabled(answers.get(url_id))
    return when


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------

_PUBLISH = frozenset({"publish_to"})
_GITHUB_OR_PAGES = frozenset({"publish_to", "create_github_pages"})


def _dependency_group(prefix: str, label: str, example: str, example_version: str) -> tuple[Question, RepeatGroup]:
    gate = Question(
        f"add_{prefix}",
        f"Add a {label} to your project?",
        QuestionKind.BOOLEAN,
        default=False,
    )
    group = RepeatGroup(
        id=f"{prefix}_list",
        gate=gate.id,
        members=(
            Question(
                f"{prefix}_name",
                f"Enter {label} name (e.g., {example}):",
                QuestionKind.TEXT,
                check=_required(f"{label[0].upper()}{label[1:]} name is required"),
                remote_check=_remote_dependency,
            ),
            Question(
                f"{prefix}_version",
                f"Enter {label} version (e.g., {example_version}, or 'latest'):",
                QuestionKind.TEXT,
                default="latest",
                check=_required(f"{label[0].upper()}{label[1:]} version is required"),
            ),
        ),
        continue_question=Question(
            f"add_another_{prefix}",
            f"Add another {label}?",
            QuestionKind.BOOLEAN,
            default=False,
        ),
    )
    return gate, group


_DEPENDENCY_GATE, _DEPENDENCY_GROUP = _dependency_group("dependency", "dependency", "lodash", "^4.17.21")
_DEV_DEPENDENCY_GATE, _DEV_DEPENDENCY_GROUP = _dependency_group(
    "dev_dependency", "devDependency", "eslint", "^8.0.0"
)


QUESTION_GRAPH = QuestionGraph([
    Question(
        "use_new_dir",
        "Create a new directory for your project? (package-name = same as the package name)",
        QuestionKind.CHOICE,
        choices=NEW_DIR_CHOICES,
        default="package-name",
    ),
    Question(
        "project_dir",
        "Enter the new directory name:",
        QuestionKind.TEXT,
        when=lambda a: a["use_new_dir"] == "custom",
        depends_on=frozenset({"use_new_dir"}),
        check=_check_directory,
    ),
    Question("use_monorepo", "Is this package part of a monorepo?", QuestionKind.BOOLEAN, default=False),
    Question(
        "monorepo_root",
        "Enter the monorepo root directory (relative to current directory):",
        QuestionKind.TEXT,
        default=".",
        when=lambda a: a["use_monorepo"] is True,
        depends_on=frozenset({"use_monorepo"}),
        check=_required("Monorepo root directory is required"),
    ),
    Question(
        "package_manager",
        "Choose a package manager for the monorepo:",
        QuestionKind.CHOICE,
        choices=PACKAGE_MANAGERS,
        default="npm",
        when=lambda a: a["use_monorepo"] is True,
        depends_on=frozenset({"use_monorepo"}),
    ),
    Question(
        "publish_to",
        "Where do you want to publish your package?",
        QuestionKind.CHOICE,
        choices=PUBLISH_TARGETS,
        default="both",
    ),
    Question(
        "custom_registry_url",
        "Enter the custom registry URL (or 'NA' to skip):",
        QuestionKind.TEXT,
        default="NA",
        when=lambda a: a["publish_to"] in CUSTOM_TARGETS,
        depends_on=_PUBLISH,
        check=_registry_url("Custom registry", "https://npm.cloudsmith.io/org/repo/"),
    ),
    Question(
        "artifactory_url",
        "Enter the Artifactory registry URL (or 'NA' to skip):",
        QuestionKind.TEXT,
        default="NA",
        when=_all_registries,
        depends_on=_PUBLISH,
        check=_registry_url("Artifactory registry", "https://example.jfrog.io/artifactory/api/npm/npm-repo/"),
    ),
    Question(
        "nexus_url",
        "Enter the Nexus registry URL (or 'NA' to skip):",
        QuestionKind.TEXT,
        default="NA",
        when=_all_registries,
        depends_on=_PUBLISH,
        check=_registry_url("Nexus registry", "https://nexus.example.com/repository/npm-hosted/"),
    ),
    Question(
        "verdaccio_url",
        "Enter the Verdaccio registry URL (or 'NA' to skip):",
        QuestionKind.TEXT,
        default="NA",
        when=_all_registries,
        depends_on=_PUBLISH,
        check=_registry_url("Verdaccio registry", "http://localhost:4873/"),
    ),
    Question(
        "custom_registry_token",
        "Enter the authentication token for the custom registry (or 'NA' to skip):",
        QuestionKind.TEXT,
        default="NA",
        when=lambda a: a["publish_to"] in CUSTOM_TARGETS and token_enabled(a.get("custom_registry_url")),
        depends_on=frozenset({"publish_to", "custom_registry_url"}),
    ),
    Question(
        "artifactory_token",
        "Enter the authentication token for Artifactory (or 'NA' to skip):",
        QuestionKind.TEXT,
        default="NA",
        when=_registry_token_when("artifactory_url"),
        depends_on=frozenset({"publish_to", "artifactory_url"}),
    ),
    Question(
        "nexus_token",
        "Enter the authentication token for Nexus (or 'NA' to skip):",
        QuestionKind.TEXT,
        default="NA",
        when=_registry_token_when("nexus_url"),
        depends_on=frozenset({"publish_to", "nexus_url"}),
    ),
    Question(
        "verdaccio_token",
        "Enter the authentication token for Verdaccio (or 'NA' to skip):",
        QuestionKind.TEXT,
        default="NA",
        when=_registry_token_when("verdaccio_url"),
        depends_on=frozenset({"publish_to", "verdaccio_url"}),
    ),
    Question(
        "access",
        "Package access level:",
        QuestionKind.CHOICE,
        choices=ACCESS_LEVELS,
        default="public",
    ),
    Question(
        "create_github_workflow",
        "Create a GitHub Actions workflow file (publish.yml)?",
        QuestionKind.BOOLEAN,
        default=True,
        when=_github_targeted,
        depends_on=_PUBLISH,
    ),
    Question(
        "create_github_repo",
        "Create a GitHub repository automatically?",
        QuestionKind.BOOLEAN,
        default=False,
        when=_github_targeted,
        depends_on=_PUBLISH,
    ),
    Question(
        "create_github_pages",
        "Publish documentation on GitHub Pages?",
        QuestionKind.BOOLEAN,
        default=False,
    ),
    Question(
        "ci_provider",
        "Choose a CI/CD provider for workflows:",
        QuestionKind.CHOICE,
        choices=CI_PROVIDERS,
        default="github-actions",
    ),
    Question(
        "github_username",
        "Enter your GitHub username:",
        QuestionKind.TEXT,
        when=_github_or_pages,
        depends_on=_GITHUB_OR_PAGES,
        check=_required("GitHub username is required"),
        transform=_lower,
    ),
    Question(
        "name",
        "Enter your package name:",
        QuestionKind.TEXT,
        depends_on=frozenset({"publish_to", "github_username"}),
        check=_check_name,
        remote_check=_remote_name,
    ),
    Question(
        "github_repo_name",
        "Enter your GitHub repository name:",
        QuestionKind.TEXT,
        default_from=lambda a: unscoped_name(a["name"]),
        when=_github_or_pages,
        depends_on=frozenset({"publish_to", "create_github_pages", "name"}),
        check=_required("GitHub repository name is required"),
    ),
    Question(
        "github_token",
        "Enter a GitHub classic token with 'repo' scope (or 'NA' to skip):",
        QuestionKind.TEXT,
        default="NA",
        when=lambda a: a["publish_to"] in GITHUB_TARGETS or a.get("create_github_repo") is True,
        depends_on=frozenset({"publish_to", "create_github_repo"}),
        check=_check_classic_token,
        remote_check=_remote_classic_token,
    ),
    Question(
        "github_pages_token",
        "Enter a GitHub fine-grained token with 'pages:write' (or 'NA' to skip):",
        QuestionKind.TEXT,
        default="NA",
        when=lambda a: a["create_github_pages"] is True,
        depends_on=frozenset({"create_github_pages"}),
        check=_check_pages_token,
        remote_check=_remote_pages_token,
    ),
    Question(
        "version",
        "Select initial version:",
        QuestionKind.CHOICE,
        choices=VERSION_CHOICES,
        default="0.0.1",
    ),
    Question(
        "custom_version",
        "Enter custom version (e.g., 1.0.0):",
        QuestionKind.TEXT,
        when=lambda a: a["version"] == "custom",
        depends_on=frozenset({"version"}),
        check=_check_version,
    ),
    Question(
        "module_type",
        "Choose module type:",
        QuestionKind.CHOICE,
        choices=MODULE_TYPES,
        default="commonjs",
    ),
    Question("description", "Enter package description:", QuestionKind.TEXT, default=""),
    Question("author_name", "Enter author name:", QuestionKind.TEXT, default=""),
    Question("author_email", "Enter author email:", QuestionKind.TEXT, default="", check=_check_email),
    Question("author_url", "Enter author URL:", QuestionKind.TEXT, default="", transform=ensure_https),
    Question(
        "homepage",
        "Enter homepage URL:",
        QuestionKind.TEXT,
        default="",
        when=lambda a: a["create_github_pages"] is not True,
        depends_on=frozenset({"create_github_pages"}),
        transform=ensure_https,
    ),
    Question(
        "keywords",
        "Enter keywords (comma-separated):",
        QuestionKind.LIST,
        default=(),
        transform=split_keywords,
    ),
    Question("license", "Choose a license:", QuestionKind.CHOICE, choices=LICENSES, default="MIT"),
    Question("use_typescript", "Use TypeScript for your project?", QuestionKind.BOOLEAN, default=False),
    Question("use_eslint", "Add ESLint for linting?", QuestionKind.BOOLEAN, default=False),
    Question("use_prettier", "Add Prettier for code formatting?", QuestionKind.BOOLEAN, default=False),
    Question(
        "test_framework",
        "Choose a testing framework:",
        QuestionKind.CHOICE,
        choices=TEST_FRAMEWORKS,
        default="none",
    ),
    _DEPENDENCY_GATE,
    _DEPENDENCY_GROUP,
    _DEV_DEPENDENCY_GATE,
    _DEV_DEPENDENCY_GROUP,
    Question("add_custom_scripts", "Add custom npm scripts?", QuestionKind.BOOLEAN, default=False),
    Question(
        "custom_scripts",
        "Enter custom npm scripts (e.g., lint:eslint ., docs:typedoc):",
        QuestionKind.TEXT,
        default="",
        when=lambda a: a["add_custom_scripts"] is True,
        depends_on=frozenset({"add_custom_scripts"}),
        check=_check_scripts,
        transform=parse_scripts,
    ),
    Question(
        "copyright_year",
        "Copyright year:",
        QuestionKind.TEXT,
        default_from=_current_year,
        check=_check_year,
        silent=True,
    ),
])

# ---------------------------------------------------------------------------
# Normalized form
# ---------------------------------------------------------------------------

# (normalized key, gate id, group id, name member, version member)
_DEPENDENCY_MAPS = (
    ("dependencies", "add_dependency", "dependency_list", "dependency_name", "dependency_version"),
    ("dev_dependencies", "add_dev_dependency", "dev_dependency_list",
     "dev_dependency_name", "dev_dependency_version"),
)

# Ids that only exist in the normalized form.
NORMALIZED_ONLY_KEYS = frozenset({"dependencies", "dev_dependencies"})

SAMPLE_ANSWERS: Mapping[str, Any] = MappingProxyType({
    "use_new_dir": "package-name",
    "use_monorepo": False,
    "publish_to": "both",
    "access": "public",
    "create_github_workflow": True,
    "create_github_repo": False,
    "create_github_pages": False,
    "ci_provider": "github-actions",
    "github_username": "sampleuser",
    "name": "sample-package",
    "github_repo_name": "sample-package",
    "github_token": "NA",
    "version": "0.0.1",
    "module_type": "commonjs",
    "description": "A sample Node.js package",
    "author_name": "Sample Author",
    "author_email": "sample@example.com",
    "author_url": "https://example.com",
    "homepage": "https://example.com/sample-package",
    "keywords": ["sample", "node", "package"],
    "license": "MIT",
    "use_typescript": False,
    "use_eslint": False,
    "use_prettier": False,
    "test_framework": "none",
    "dependencies": {},
    "dev_dependencies": {},
    "custom_scripts": {},
})


def normalize_answers(answers: Mapping[str, Any]) -> AnswerSet:
    """Fold question-level answers into the normalized form.

    ``custom_version`` replaces ``version``; each dependency repeat group
    becomes a ``{name: version}`` map; ``custom_scripts`` is an empty map unless
    it was requested.
    """
    values = dict(answers)

    custom_version = values.pop("custom_version", None)
    if values.get("version") == "custom":
        values["version"] = custom_version

    for key, gate, group, name_key, version_key in _DEPENDENCY_MAPS:
        items = values.pop(group, ()) if values.pop(gate, False) else ()
        values.pop(group, None)
        values[key] = MappingProxyType({item[name_key]: item[version_key] for item in items})

    if not values.pop("add_custom_scripts", False):
        values["custom_scripts"] = MappingProxyType({})

    return AnswerSet(values)


def expand_seed(values: Mapping[str, Any]) -> dict[str, Any]:
    """Turn normalized answers back into question-level seed values.

    Example:
        >>> expand_seed({"version": "2.3.4", "dependencies": {"lodash": "^4"}})["custom_version"]
        '2.3.4'
    """
    seed = dict(values)

    version = seed.get("version")
    if isinstance(version, str) and version not in VERSION_CHOICES:
        seed["version"] = "custom"
        seed["custom_version"] = version

    for key, gate, group, name_key, version_key in _DEPENDENCY_MAPS:
        if key not in seed:
            continue
        deps = seed.pop(key) or {}
        seed[gate] = bool(deps)
        if deps:
            seed[group] = [{name_key: name, version_key: spec} for name, spec in deps.items()]

    if "custom_scripts" in seed:
        scripts = seed["custom_scripts"] or {}
        seed["add_custom_scripts"] = bool(scripts)
        if not scripts:
            del seed["custom_scripts"]

    return seed
