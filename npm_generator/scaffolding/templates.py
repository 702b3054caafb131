"""Template functions for the plain-text project files."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from npm_generator.core.question_catalog import unscoped_name
from npm_generator.core.recovery import RECOVERY_FILE_NAME

_IGNORE_PATTERNS = ["node_modules/", "dist/", "coverage/", "*.log", ".env", RECOVERY_FILE_NAME]


def _camel_identifier(name: str) -> str:
    parts = [p for p in unscoped_name(name).replace("_", "-").split("-") if p]
    if not parts:
        return "pkg"
    ident = parts[0] + "".join(p.capitalize() for p in parts[1:])
    return f"pkg{ident}" if ident[0].isdigit() else ident


def _json_document(data: Mapping[str, Any]) -> str:
    return json.dumps(data, indent=2) + "\n"


def uses_typescript(answers: Mapping[str, Any]) -> bool:
    return answers.get("use_typescript") is True


def source_extension(answers: Mapping[str, Any]) -> str:
    return "ts" if uses_typescript(answers) else "js"


def get_gitignore_template(answers: Mapping[str, Any]) -> str:
    """Generate .gitignore content.

    Args:
        answers: Normalized answers

    Returns:
        Complete .gitignore content as string
    """
    patterns = list(_IGNORE_PATTERNS)
    if answers.get("create_github_pages") is True:
        patterns.append("index.html")
    return "\n".join(patterns) + "\n"


def get_npmignore_template(answers: Mapping[str, Any]) -> str:
    """Generate .npmignore content (what stays out of the published tarball)."""
    patterns = ["node_modules/", "coverage/", "*.log", ".env", "test/", ".github/"]
    if uses_typescript(answers):
        patterns.extend(["src/", "tsconfig.json"])
    else:
        patterns.append("dist/")
    if answers.get("create_github_pages") is True:
        patterns.extend(["WEBPAGE.md", "index.html"])
    return "\n".join(patterns) + "\n"


def get_readme_template(answers: Mapping[str, Any]) -> str:
    """Generate README.md content.

    Args:
        answers: Normalized answers

    Returns:
        Complete README.md content as string
    """
    name = answers["name"]
    manager = answers.get("package_manager", "npm")
    install = "yarn add" if manager == "yarn" else f"{manager} install"
    ident = _camel_identifier(name)
    if answers.get("module_type") == "esm" or uses_typescript(answers):
        usage = f"import {ident} from '{name}';"
    else:
        usage = f"const {ident} = require('{name}');"

    sections = [
        f"# {name}",
        answers.get("description") or "A Node.js package.",
        f"## Installation\n\n```bash\n{install} {name}\n```",
        f"## Usage\n\n```javascript\n{usage}\n\nconsole.log({ident}());\n```",
    ]
    if answers.get("create_github_pages") is True:
        user = answers.get("github_username", "")
        repo = answers.get("github_repo_name") or unscoped_name(name)
        sections.append(
            "## Documentation\n\n"
            f"Visit the [documentation](https://{user}.github.io/{repo}/) "
            "for detailed usage instructions."
        )
    sections.append(f"## License\n\n{answers.get('license', 'MIT')}")
    return "\n\n".join(sections) + "\n"


def get_index_template(answers: Mapping[str, Any]) -> str:
    """Generate the src/index stub."""
    greeting = f'"Hello from {answers["name"]}!"'
    if uses_typescript(answers):
        return f"export default function hello(): string {{\n  return {greeting};\n}}\n"
    if answers.get("module_type") == "esm":
        return f"export default function hello() {{\n  return {greeting};\n}}\n"
    return f"module.exports = function hello() {{\n  return {greeting};\n}};\n"


def get_test_template(answers: Mapping[str, Any]) -> str:
    """Generate the test/index.test stub for the chosen framework."""
    framework = answers.get("test_framework", "none")
    name = answers["name"]
    esm = uses_typescript(answers) or answers.get("module_type") == "esm"

    if framework == "mocha":
        assertion = f'expect(hello()).to.equal("Hello from {name}!");'
        if esm:
            imports = 'import { describe, it } from "mocha";\nimport { expect } from "chai";'
        else:
            imports = 'const { describe, it } = require("mocha");\nconst { expect } = require("chai");'
    else:
        module = "@jest/globals" if framework == "jest" else "vitest"
        assertion = f'expect(hello()).toBe("Hello from {name}!");'
        if esm:
            imports = f'import {{ describe, it, expect }} from "{module}";'
        else:
            imports = f'const {{ describe, it, expect }} = require("{module}");'

    if uses_typescript(answers):
        subject = 'import hello from "../src/index";'
    elif esm:
        subject = 'import hello from "../src/index.js";'
    else:
        subject = 'const hello = require("../src/index");'

    return (
        f"{imports}\n{subject}\n\n"
        f'describe("{name}", () => {{\n'
        '  it("returns a greeting", () => {\n'
        f"    {assertion}\n"
        "  });\n"
        "});\n"
    )


def get_tsconfig_template(answers: Mapping[str, Any]) -> str:
    """Generate tsconfig.json content."""
    esm = answers.get("module_type") == "esm"
    return _json_document({
        "compilerOptions": {
            "target": "es2020",
            "module": "esnext" if esm else "commonjs",
            "moduleResolution": "node",
            "declaration": True,
            "outDir": "./dist",
            "rootDir": "./src",
            "strict": True,
            "esModuleInterop": True,
            "skipLibCheck": True,
            "forceConsistentCasingInFileNames": True,
        },
        "include": ["src/**/*"],
        "exclude": ["node_modules", "dist", "test"],
    })


def get_eslint_template(answers: Mapping[str, Any]) -> str:
    """Generate .eslintrc.json content."""
    typescript = uses_typescript(answers)
    config: dict[str, Any] = {
        "root": True,
        "env": {"node": True, "es2021": True},
        "parserOptions": {
            "ecmaVersion": "latest",
            "sourceType": "module" if answers.get("module_type") == "esm" or typescript else "script",
        },
        "extends": ["eslint:recommended"],
        "rules": {"no-unused-vars": "error"},
    }
    if typescript:
        config["parser"] = "@typescript-eslint/parser"
        config["plugins"] = ["@typescript-eslint"]
        config["extends"].append("plugin:@typescript-eslint/recommended")
        config["rules"] = {
            "no-unused-vars": "off",
            "@typescript-eslint/no-unused-vars": ["error"],
        }
    if answers.get("use_prettier") is True:
        config["extends"].append("prettier")
    return _json_document(config)


def get_prettier_template(_answers: Mapping[str, Any]) -> str:
    """Generate .prettierrc content."""
    return _json_document({
        "semi": True,
        "trailingComma": "es5",
        "singleQuote": True,
        "printWidth": 80,
        "tabWidth": 2,
    })


def get_webpage_template(answers: Mapping[str, Any]) -> str:
    """Generate WEBPAGE.md, the source of the GitHub Pages site."""
    name = answers["name"]
    user = answers.get("github_username", "")
    repo = answers.get("github_repo_name") or unscoped_name(name)
    return (
        f"# {name} Documentation\n\n"
        f"Welcome to the GitHub Pages documentation for {name}.\n\n"
        "This page is built from WEBPAGE.md by the gh-pages workflow on every "
        "push to main.\n\n"
        "## Getting Started\n\n"
        "- Add your documentation content here.\n"
        "- Use Markdown formatting for headings, lists and links.\n"
        f"- Source code: [github.com/{user}/{repo}](https://github.com/{user}/{repo})\n"
    )
