"""Template package for generated npm project files.

Every function takes the normalized answers and returns file content as a
string. Nothing here touches the file system; ``npm_generator.core.artifacts``
maps artifact ids to these functions and decides which ones apply.

Example:
    from npm_generator.scaffolding import get_manifest_template

    content = get_manifest_template(answers)
"""

from .ci_templates import (
    get_circleci_template,
    get_github_actions_template,
    get_gitlab_ci_template,
    get_pages_workflow_template,
)
from .licenses import LICENSE_TEXTS, get_license_template
from .manifest import (
    TOOL_OWNED_KEYS,
    ToolOwnedKeys,
    authenticated_registries,
    build_manifest,
    get_manifest_template,
    get_npmrc_template,
    serialize_manifest,
)
from .registries import PublishRegistry, publish_registries
from .templates import (
    get_eslint_template,
    get_gitignore_template,
    get_index_template,
    get_npmignore_template,
    get_prettier_template,
    get_readme_template,
    get_test_template,
    get_tsconfig_template,
    get_webpage_template,
    source_extension,
    uses_typescript,
)

__all__ = [
    # Manifest
    "TOOL_OWNED_KEYS",
    "ToolOwnedKeys",
    "build_manifest",
    "get_manifest_template",
    "serialize_manifest",
    "get_npmrc_template",
    "authenticated_registries",
    # Registries
    "PublishRegistry",
    "publish_registries",
    # Text files
    "get_gitignore_template",
    "get_npmignore_template",
    "get_readme_template",
    "get_index_template",
    "get_test_template",
    "get_tsconfig_template",
    "get_eslint_template",
    "get_prettier_template",
    "get_webpage_template",
    "get_license_template",
    "LICENSE_TEXTS",
    "source_extension",
    "uses_typescript",
    # CI
    "get_github_actions_template",
    "get_gitlab_ci_template",
    "get_circleci_template",
    "get_pages_workflow_template",
]
