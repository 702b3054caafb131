"""Loading and validation of ``--config`` answer files.

A config file is a JSON object keyed by answer id in normalized form,
for example::

    {
        "name": "my-pkg",
        "publish_to": "npmjs",
        "version": "1.2.0",
        "dependencies": {"lodash": "^4.17.21"}
    }

Every value is checked with the same synchronous rules the prompts use,
before any question is asked.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .answers import AnswerSet
from .errors import ConfigError, ValidationError
from .question_catalog import NORMALIZED_ONLY_KEYS, QUESTION_GRAPH, expand_seed
from .questions import QuestionGraph, RepeatGroup
from .resolver import check_value


def _is_string_map(value: Any) -> bool:
    return isinstance(value, Mapping) and all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    )


def validate_config(data: Any, graph: QuestionGraph = QUESTION_GRAPH) -> list[str]:
    """Validate a parsed config document.

    Args:
        data: Parsed JSON document
        graph: Question graph the keys are checked against

    Returns:
        List of validation error messages (empty if valid)
    """
    if not isinstance(data, dict):
        return ["Config file must contain a JSON object"]

    errors: list[str] = []
    known = set(graph.ids) | NORMALIZED_ONLY_KEYS
    for key in data:
        if key not in known:
            errors.append(f"Unknown config key '{key}'")
    for key in sorted(NORMALIZED_ONLY_KEYS):
        if key in data and not _is_string_map(data[key]):
            errors.append(f"'{key}' must map package names to version strings")
    if "custom_scripts" in data and not _is_string_map(data["custom_scripts"]):
        errors.append("'custom_scripts' must map script names to commands")
    if errors:
        return errors

    seed = expand_seed(data)
    answers = AnswerSet(seed)
    for node in graph:
        if node.id not in seed or isinstance(node, RepeatGroup):
            continue
        try:
            value = check_value(node, seed[node.id], answers.scoped(node.depends_on, node.id))
        except ValidationError as exc:
            errors.append(str(exc))
        else:
            answers = answers.with_value(node.id, value)
    return errors


def load_config(path: Path) -> dict[str, Any]:
    """Read and validate a config file.

    Args:
        path: JSON file to read

    Returns:
        The parsed document (normalized answer form)

    Raises:
        ConfigError: If the file is missing, is not JSON, or fails validation
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError([f"Cannot read config file {path}: {exc}"]) from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError([f"Invalid JSON in {path}: {exc}"]) from exc

    errors = validate_config(data)
    if errors:
        raise ConfigError(errors)
    return data
