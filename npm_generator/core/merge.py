"""Merge engine for ``npmgen upgrade``.

Opaque files are never touched once they exist. The manifest is merged
field by field:

- scripts: union; an existing script wins unless the tool owns its name
- dependency maps: union; existing entries win
- tool-owned identity fields: replaced when the candidate carries them
- anything else: existing value kept, candidate-only keys added

The merged manifest must keep every key the existing one had (top level,
scripts and dependency maps); otherwise ``MergeInvariantViolation`` is
raised and nothing is written.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from npm_generator.scaffolding import TOOL_OWNED_KEYS, ToolOwnedKeys, serialize_manifest

from .artifacts import ARTIFACT_REGISTRY, ArtifactDescriptor
from .errors import MergeInvariantViolation
from .snapshot import ProjectSnapshot

DEPENDENCY_FIELDS = ("dependencies", "devDependencies", "peerDependencies", "optionalDependencies")

# Nested maps whose keys are covered by the no-deletion check.
_CHECKED_MAPS = ("scripts", *DEPENDENCY_FIELDS)


class MergeAction(Enum):
    WRITE = "write"
    SKIP = "skip"
    MERGE = "merge"


@dataclass(frozen=True)
class MergeDecision:
    """What happens to one artifact.

    Attributes:
        artifact_id: Artifact id
        path: Relative project path
        action: write, skip or merge
        content: Final file content (None for skip)
        changes: Human readable change list (merge only)
    """
    artifact_id: str
    path: str
    action: MergeAction
    content: str | None = None
    changes: tuple[str, ...] = ()


@dataclass(frozen=True)
class MergePlan:
    decisions: tuple[MergeDecision, ...]
    skip_list: frozenset[str]
    tool_owned_version: int

    def writes(self) -> tuple[MergeDecision, ...]:
        """Decisions that produce a file (write or merge)."""
        return tuple(d for d in self.decisions if d.action is not MergeAction.SKIP)

    def decision(self, artifact_id: str) -> MergeDecision:
        for candidate in self.decisions:
            if candidate.artifact_id == artifact_id:
                return candidate
        raise KeyError(artifact_id)


def compute_skip_list(paths: Mapping[str, str], snapshot: ProjectSnapshot) -> frozenset[str]:
    """Return ids of opaque artifacts whose file already exists.

    Args:
        paths: ``{artifact_id: path}`` for the relevant artifacts
        snapshot: Existing project

    Returns:
        Artifact ids to skip; computed without rendering anything
    """
    return frozenset(
        artifact_id
        for artifact_id, path in paths.items()
        if not ARTIFACT_REGISTRY[artifact_id].structured and snapshot.exists(path)
    )


def _merge_scripts(existing: Mapping[str, Any], candidate: Mapping[str, Any], owned: ToolOwnedKeys) -> dict[str, Any]:
    merged = dict(existing)
    for name, command in candidate.items():
        if name not in merged or owned.owns_script(name):
            merged[name] = command
    return merged


def _union_existing_wins(existing: Mapping[str, Any], candidate: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(existing)
    for name, spec in candidate.items():
        merged.setdefault(name, spec)
    return merged


def merge_manifest(
    existing: Mapping[str, Any],
    candidate: Mapping[str, Any],
    owned: ToolOwnedKeys = TOOL_OWNED_KEYS,
) -> dict[str, Any]:
    """Merge a freshly generated manifest into the project's manifest.

    Args:
        existing: Manifest currently on disk (not modified)
        candidate: Generated manifest
        owned: Tool-owned key declaration

    Returns:
        The merged manifest, existing key order first

    Raises:
        MergeInvariantViolation: If an existing key would be lost
    """
    merged: dict[str, Any] = copy.deepcopy(dict(existing))
    for key, value in candidate.items():
        current = merged.get(key)
        if key == "scripts" and isinstance(current, Mapping):
            merged[key] = _merge_scripts(current, value, owned)
        elif key in DEPENDENCY_FIELDS and isinstance(current, Mapping):
            merged[key] = _union_existing_wins(current, value)
        elif key in owned.fields or key not in merged:
            merged[key] = copy.deepcopy(value)
    check_merge_invariant(existing, merged)
    return merged


def check_merge_invariant(existing: Mapping[str, Any], merged: Mapping[str, Any]) -> None:
    """Raise if ``merged`` lost a key ``existing`` had."""
    missing = [key for key in existing if key not in merged]
    for field_name in _CHECKED_MAPS:
        before = existing.get(field_name)
        if not isinstance(before, Mapping):
            continue
        after = merged.get(field_name)
        after_keys = after.keys() if isinstance(after, Mapping) else ()
        missing.extend(f"{field_name}.{key}" for key in before if key not in after_keys)
    if missing:
        raise MergeInvariantViolation(missing)


def describe_manifest_changes(existing: Mapping[str, Any], merged: Mapping[str, Any]) -> tuple[str, ...]:
    """List what a merge changed, e.g. ``scripts.release added``."""
    changes: list[str] = []
    for key, value in merged.items():
        before = existing.get(key)
        if key not in existing:
            changes.append(f"{key} added")
        elif key in _CHECKED_MAPS and isinstance(before, Mapping) and isinstance(value, Mapping):
            for name, entry in value.items():
                if name not in before:
                    changes.append(f"{key}.{name} added")
                elif before[name] != entry:
                    changes.append(f"{key}.{name} updated")
        elif before != value:
            changes.append(f"{key} updated")
    return tuple(changes)


def plan_merge(
    candidates: Iterable[ArtifactDescriptor],
    paths: Mapping[str, str],
    snapshot: ProjectSnapshot,
    skip_list: frozenset[str] | None = None,
    owned: ToolOwnedKeys = TOOL_OWNED_KEYS,
) -> MergePlan:
    """Decide write/skip/merge for every relevant artifact.

    Args:
        candidates: Generated artifacts (skipped ids need not be present)
        paths: ``{artifact_id: path}`` for every relevant artifact
        snapshot: Existing project
        skip_list: Precomputed skip list (computed from ``paths`` if None)
        owned: Tool-owned key declaration

    Returns:
        The merge plan, in artifact order
    """
    if skip_list is None:
        skip_list = compute_skip_list(paths, snapshot)
    by_id = {artifact.artifact_id: artifact for artifact in candidates}

    decisions: list[MergeDecision] = []
    for artifact_id, path in paths.items():
        if artifact_id in skip_list:
            decisions.append(MergeDecision(artifact_id, path, MergeAction.SKIP))
            continue
        artifact = by_id[artifact_id]
        if artifact.structured and snapshot.exists(path) and snapshot.manifest is not None:
            existing = snapshot.manifest
            merged = merge_manifest(existing, json.loads(artifact.content), owned)
            decisions.append(MergeDecision(
                artifact_id,
                path,
                MergeAction.MERGE,
                serialize_manifest(merged),
                describe_manifest_changes(existing, merged),
            ))
        else:
            decisions.append(MergeDecision(artifact_id, path, MergeAction.WRITE, artifact.content))

    return MergePlan(tuple(decisions), frozenset(skip_list), owned.version)


def format_merge_report(plan: MergePlan) -> list[str]:
    """Render the plan as report lines (one per artifact, plus merge details)."""
    lines = [f"Tool-owned keys declaration v{plan.tool_owned_version}"]
    for decision in plan.decisions:
        lines.append(f"{decision.action.value:<5} {decision.path}")
        lines.extend(f"      - {change}" for change in decision.changes)
    return lines
