"""Execution controller for ``npmgen init`` and ``npmgen upgrade``.

Both commands follow the same sequence:

1. Resolve answers (seeded from a recovery file when one exists)
2. Generate artifacts and, for upgrade, plan the merge
3. Save the recovery file
4. Write files (or only report them under ``--dry-run``)
5. Run side effects: git, GitHub repository creation
6. Clear the recovery file and print the next steps

Every artifact moves through ``pending -> generated -> [planned] ->
written`` or ends in ``skipped``; the tracker rejects anything else.
"""

from __future__ import annotations

import datetime
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from npm_generator.helpers.collaborators import Collaborators
from npm_generator.helpers.helpers_logging import (
    print_debug,
    print_header,
    print_info,
    print_success,
    print_warning,
)
from npm_generator.helpers.prompting import Prompter
from npm_generator.helpers.retry import with_retries

from .answers import AnswerSet, token_enabled
from .artifacts import generate_all, resolve_paths
from .errors import (
    CollaboratorError,
    ConflictError,
    ManifestNotFoundError,
    StateTransitionError,
)
from .merge import MergeAction, compute_skip_list, format_merge_report, plan_merge
from .next_steps import build_next_steps, print_next_steps
from .question_catalog import (
    QUESTION_GRAPH,
    SAMPLE_ANSWERS,
    expand_seed,
    normalize_answers,
    unscoped_name,
)
from .questions import QuestionGraph
from .recovery import RecoveryStore
from .resolver import QuestionResolver
from .snapshot import MANIFEST_PATH, ProjectSnapshot
from .upgrade_answers import IDENTITY_ANSWERS, derive_upgrade_answers

UPGRADE_CONFIRMATION = (
    "Update this package with the latest npmgen templates? "
    "This modifies package.json and adds missing files."
)


class ArtifactState(Enum):
    PENDING = "pending"
    GENERATED = "generated"
    PLANNED = "planned"
    WRITTEN = "written"
    SKIPPED = "skipped"


_TRANSITIONS: dict[ArtifactState, frozenset[ArtifactState]] = {
    ArtifactState.PENDING: frozenset({ArtifactState.GENERATED, ArtifactState.SKIPPED}),
    ArtifactState.GENERATED: frozenset({
        ArtifactState.PLANNED,
        ArtifactState.WRITTEN,
        ArtifactState.SKIPPED,
    }),
    ArtifactState.PLANNED: frozenset({ArtifactState.WRITTEN, ArtifactState.SKIPPED}),
    ArtifactState.WRITTEN: frozenset(),
    ArtifactState.SKIPPED: frozenset(),
}


class ArtifactTracker:
    """Per-artifact lifecycle state for one run."""

    def __init__(self, artifact_ids: Iterable[str]) -> None:
        self._states = dict.fromkeys(artifact_ids, ArtifactState.PENDING)

    def advance(self, artifact_id: str, state: ArtifactState) -> None:
        """Move ``artifact_id`` to ``state``.

        Raises:
            StateTransitionError: If the artifact is unknown or the move is illegal
        """
        current = self._states.get(artifact_id)
        if current is None:
            raise StateTransitionError(f"Unknown artifact '{artifact_id}'")
        if state not in _TRANSITIONS[current]:
            raise StateTransitionError(
                f"Artifact '{artifact_id}' cannot go from {current.value} to {state.value}"
            )
        self._states[artifact_id] = state

    def state(self, artifact_id: str) -> ArtifactState:
        return self._states[artifact_id]

    def with_state(self, state: ArtifactState) -> tuple[str, ...]:
        return tuple(aid for aid, current in self._states.items() if current is state)


@dataclass
class ExecutionReport:
    """What a run did (or, under dry-run, would have done).

    Attributes:
        command: ``init`` or ``upgrade``
        project_dir: Directory the artifacts are written to
        dry_run: True if nothing was written
        answers: Normalized answers (None when cancelled before resolving)
        written: Relative paths written or merged, in write order
        merged: Subset of ``written`` that was merged into an existing file
        skipped: Relative paths left untouched because they already exist
        side_effects: Git and GitHub actions performed (or planned)
        warnings: Non-fatal problems
        next_steps: Lines printed after a successful run
        resumed: True if answers came from a recovery file
        cancelled: True if the user declined to proceed
    """
    command: str
    project_dir: Path
    dry_run: bool = False
    answers: AnswerSet | None = None
    written: list[str] = field(default_factory=list)
    merged: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    side_effects: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    next_steps: list[str] = field(default_factory=list)
    resumed: bool = False
    cancelled: bool = False


class ExecutionController:
    """Runs init and upgrade against one invocation directory."""

    def __init__(
        self,
        cwd: Path,
        prompter: Prompter,
        collaborators: Collaborators | None = None,
        *,
        dry_run: bool = False,
        interactive: bool = True,
        graph: QuestionGraph = QUESTION_GRAPH,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.cwd = cwd
        self.prompter = prompter
        self.collaborators = collaborators or Collaborators()
        self.dry_run = dry_run
        self.interactive = interactive
        self.graph = graph
        self.env = os.environ if env is None else env
        self.recovery = RecoveryStore(cwd)

    # ------------------------------------------------------------------
    # init
    # ------------------------------------------------------------------

    def init(
        self,
        *,
        config: Mapping[str, Any] | None = None,
        sample: bool = False,
        no_git: bool = False,
    ) -> ExecutionReport:
        """Scaffold a new package.

        Args:
            config: Validated config document; its values become defaults
            sample: Use the built-in sample answers instead of prompting
            no_git: Skip git initialization (and therefore the initial push)

        Raises:
            ConflictError: If the target directory or files already exist
            ValidationError: In non-interactive mode, on an invalid answer
            CollaboratorError: In non-interactive mode, if repository creation fails
        """
        print_header("📦 npmgen init")
        seed = self._recovered_seed("init")
        resumed = seed is not None
        if seed is None:
            seed = expand_seed(SAMPLE_ANSWERS) if sample else {}
        seed.setdefault("copyright_year", str(datetime.date.today().year))
        defaults = expand_seed(config) if config else {}

        answers = self._resolve(seed, defaults)
        project_dir = self.project_dir(answers)
        report = ExecutionReport(
            "init", project_dir, self.dry_run, answers=answers, resumed=resumed
        )

        paths = resolve_paths(answers)
        if not resumed:
            self._check_conflicts(answers, project_dir, paths)

        tracker = ArtifactTracker(paths)
        artifacts = generate_all(answers)
        for artifact in artifacts:
            tracker.advance(artifact.artifact_id, ArtifactState.GENERATED)

        self._save_recovery(answers, "init")
        for artifact in artifacts:
            self._write(project_dir, artifact.path, artifact.content)
            report.written.append(artifact.path)
            tracker.advance(artifact.artifact_id, ArtifactState.WRITTEN)

        git_ready = False if no_git else self._init_git(project_dir, report)
        self._create_repository(answers, project_dir, report, push=git_ready)

        self._finish(report, answers, no_git=no_git)
        return report

    def project_dir(self, answers: Mapping[str, Any]) -> Path:
        """Return the directory init writes to."""
        choice = answers.get("use_new_dir", "package-name")
        if choice == "no":
            return self.cwd
        base = self.cwd
        if answers.get("use_monorepo") is True:
            base = base / str(answers.get("monorepo_root") or ".") / "packages"
        if choice == "custom":
            return base / str(answers["project_dir"])
        return base / unscoped_name(str(answers["name"]))

    def _check_conflicts(
        self, answers: Mapping[str, Any], project_dir: Path, paths: Mapping[str, str]
    ) -> None:
        if answers.get("use_new_dir", "package-name") != "no":
            if project_dir.exists():
                raise ConflictError(
                    f"Directory {project_dir} already exists. "
                    "Choose another name or run in that directory with use_new_dir=no."
                )
            return
        existing = sorted(p for p in paths.values() if (project_dir / p).exists())
        if existing:
            raise ConflictError(
                "Refusing to overwrite existing files: " + ", ".join(existing)
                + ". Run 'npmgen upgrade' to update an existing package."
            )

    # ------------------------------------------------------------------
    # upgrade
    # ------------------------------------------------------------------

    def upgrade(self) -> ExecutionReport:
        """Bring an existing package up to the current templates.

        Raises:
            ManifestNotFoundError: If ``package.json`` is missing or unreadable
            MergeInvariantViolation: If the merge would drop existing keys
        """
        print_header("🔄 npmgen upgrade")
        if not (self.cwd / MANIFEST_PATH).is_file():
            raise ManifestNotFoundError(
                f"No {MANIFEST_PATH} found in {self.cwd}. "
                "Run 'npmgen init' to create a new package."
            )
        snapshot = ProjectSnapshot.capture(self.cwd)
        report = ExecutionReport("upgrade", self.cwd, self.dry_run)
        derived = derive_upgrade_answers(snapshot)

        seed = self._recovered_seed("upgrade")
        report.resumed = seed is not None
        if seed is None:
            if self.interactive and not self.prompter.confirm(UPGRADE_CONFIRMATION, default=True):
                print_warning("Upgrade cancelled. No files were modified.")
                report.cancelled = True
                return report
            seed = expand_seed(derived.seed)

        answers = self._resolve(seed, derived.suggestions, trusted=IDENTITY_ANSWERS)
        report.answers = answers

        paths = resolve_paths(answers)
        skip_list = compute_skip_list(paths, snapshot)
        tracker = ArtifactTracker(paths)
        for artifact_id in paths:
            if artifact_id in skip_list:
                tracker.advance(artifact_id, ArtifactState.SKIPPED)

        artifacts = generate_all(answers, skip=skip_list)
        for artifact in artifacts:
            tracker.advance(artifact.artifact_id, ArtifactState.GENERATED)

        plan = plan_merge(artifacts, paths, snapshot, skip_list)
        for decision in plan.writes():
            tracker.advance(decision.artifact_id, ArtifactState.PLANNED)
        for line in format_merge_report(plan):
            print_debug(line)

        self._save_recovery(answers, "upgrade")
        for decision in plan.decisions:
            if decision.action is MergeAction.SKIP or decision.content is None:
                print_info(f"⊘ Skipped (already exists): {decision.path}")
                report.skipped.append(decision.path)
                continue
            self._write(self.cwd, decision.path, decision.content)
            report.written.append(decision.path)
            if decision.action is MergeAction.MERGE:
                report.merged.append(decision.path)
                for change in decision.changes:
                    print_info(f"   - {change}")
            tracker.advance(decision.artifact_id, ArtifactState.WRITTEN)

        self._finish(report, answers, no_git=True)
        return report

    # ------------------------------------------------------------------
    # Shared steps
    # ------------------------------------------------------------------

    def _recovered_seed(self, command: str) -> dict[str, Any] | None:
        state = self.recovery.load()
        if state is None:
            return None
        if state.command != command:
            print_warning(
                f"Ignoring recovery file from an interrupted '{state.command}' run"
            )
            return None
        if self.interactive and not self.prompter.confirm(
            f"Resume the interrupted '{command}' run from {state.saved_at}?", default=True
        ):
            return None
        print_info("♻️  Resuming with saved answers")
        return expand_seed(state.answers)

    def _resolve(
        self,
        seed: Mapping[str, Any],
        defaults: Mapping[str, Any],
        trusted: Iterable[str] = (),
    ) -> AnswerSet:
        resolver = QuestionResolver(
            self.graph, self.prompter, self.collaborators, interactive=self.interactive
        )
        return normalize_answers(resolver.resolve(seed, defaults, trusted=trusted))

    def _save_recovery(self, answers: AnswerSet, command: str) -> None:
        if self.dry_run:
            print_debug("Dry run: not saving recovery state")
            return
        self.recovery.save(answers.to_dict(), command)

    def _display(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.cwd))
        except ValueError:
            return str(path)

    def _write(self, root: Path, relative: str, content: str) -> None:
        target = root / relative
        if self.dry_run:
            print_info(f"[dry-run] Would write {self._display(target)} ({len(content)} bytes)")
            return
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        print_success(f"Wrote {self._display(target)}")

    def _retry(self, operation, label: str):
        collaborators = self.collaborators
        return with_retries(
            operation,
            attempts=collaborators.attempts,
            delay=collaborators.retry_delay,
            on_error=lambda exc, attempt: print_debug(f"{label} attempt {attempt} failed: {exc}"),
            sleep=collaborators.sleep,
        )

    def _init_git(self, project_dir: Path, report: ExecutionReport) -> bool:
        """Initialize git and commit. Returns True if the project has its own repository."""
        git = self.collaborators.git
        if self.dry_run:
            print_info(f"[dry-run] Would initialize git in {self._display(project_dir)} and commit")
            report.side_effects.append("git init")
            return True
        if git.inside_work_tree(project_dir) and not git.is_repository(project_dir):
            print_info("Project is inside an existing git repository; skipping git init")
            return False
        try:
            self._retry(lambda: git.init_and_commit(project_dir), "git init")
        except CollaboratorError as exc:
            message = f"Git initialization failed: {exc}"
            print_warning(message)
            report.warnings.append(message)
            return False
        print_success("Initialized git repository with an initial commit")
        report.side_effects.append("git init")
        return True

    def _create_repository(
        self,
        answers: Mapping[str, Any],
        project_dir: Path,
        report: ExecutionReport,
        *,
        push: bool,
    ) -> None:
        if answers.get("create_github_repo") is not True:
            return
        token = answers.get("github_token")
        if not token_enabled(token):
            token = self.env.get("GITHUB_TOKEN")
        if not token_enabled(token):
            message = "Skipping GitHub repository creation: no token (answer or GITHUB_TOKEN)"
            print_warning(message)
            report.warnings.append(message)
            return

        name = str(answers.get("github_repo_name") or unscoped_name(str(answers["name"])))
        private = answers.get("access") == "private"
        if self.dry_run:
            print_info(f"[dry-run] Would create GitHub repository '{name}'")
            report.side_effects.append(f"create repository {name}")
            return

        github = self.collaborators.github
        git = self.collaborators.git
        try:
            repository = self._retry(
                lambda: github.create_repository(name, token, private=private),
                "GitHub repository creation",
            )
        except CollaboratorError as exc:
            if not self.interactive:
                raise
            message = f"GitHub repository setup failed: {exc}"
            print_warning(message)
            report.warnings.append(message)
            return
        print_success(f"Created GitHub repository {repository.html_url}")
        report.side_effects.append(f"create repository {repository.full_name}")
        if not push:
            return

        try:
            self._retry(
                lambda: git.push_to_remote(project_dir, repository.clone_url),
                "git push",
            )
        except CollaboratorError as exc:
            message = f"Push to {repository.clone_url} failed: {exc}"
            print_warning(message)
            report.warnings.append(message)
            return
        print_success(f"Pushed to {repository.clone_url}")
        report.side_effects.append("git push")

    def _finish(self, report: ExecutionReport, answers: AnswerSet, *, no_git: bool) -> None:
        if self.dry_run:
            print_success(
                f"Dry run complete: {len(report.written)} file(s) would be written, "
                f"{len(report.skipped)} skipped"
            )
        else:
            self.recovery.clear()
            print_success(
                f"{report.command} complete: {len(report.written)} file(s) written, "
                f"{len(report.skipped)} skipped"
            )
        report.next_steps = build_next_steps(
            answers, upgrade=report.command == "upgrade", no_git=no_git
        )
        print_next_steps(report.next_steps)
