"""Recovery state for interrupted runs.

The answer set is saved to ``.npmgen-recovery.json`` in the invocation
directory before the first file is written and removed after a successful
run. Token answers are not persisted; a resumed run asks for them again.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from npm_generator.helpers.helpers_logging import print_debug, print_warning

from .answers import without_secrets

RECOVERY_FILE_NAME = ".npmgen-recovery.json"


@dataclass(frozen=True)
class RecoveryState:
    command: str
    saved_at: str
    answers: Mapping[str, Any]


class RecoveryStore:
    """Saves, loads and clears the recovery file of one directory."""

    def __init__(self, directory: Path) -> None:
        self.path = directory / RECOVERY_FILE_NAME

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, answers: Mapping[str, Any], command: str) -> None:
        """Persist ``answers`` (normalized, JSON-friendly) for ``command``."""
        payload = {
            "command": command,
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "answers": without_secrets(answers),
        }
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, self.path)
        print_debug(f"Saved recovery state to {self.path}")

    def load(self) -> RecoveryState | None:
        """Return the saved state, or None if there is none or it is unreadable."""
        if not self.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            print_warning(f"Ignoring unreadable recovery file {self.path}: {exc}")
            return None
        if not isinstance(payload, dict) or not isinstance(payload.get("answers"), dict):
            print_warning(f"Ignoring malformed recovery file {self.path}")
            return None
        return RecoveryState(
            command=str(payload.get("command", "")),
            saved_at=str(payload.get("saved_at", "")),
            answers=payload["answers"],
        )

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
