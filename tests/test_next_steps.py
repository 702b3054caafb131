"""Tests for the next-steps list printed after init and upgrade."""

from __future__ import annotations

from npm_generator.core.answers import AnswerSet
from npm_generator.core.next_steps import build_next_steps, print_next_steps


def test_sample_init_steps(sample_answers: AnswerSet) -> None:
    steps = build_next_steps(sample_answers, platform="linux")

    assert steps == [
        "1. Run `npm install` to install dependencies",
        "   - Ensure you have write permissions for the project directory",
        "2. Make sure your GITHUB_TOKEN has the 'write:packages' scope",
        "   - Create a token at https://github.com/settings/tokens",
        "3. Configure GitHub Actions secrets (NPM_TOKEN and/or GITHUB_TOKEN)",
        "4. Run `npm run release` to publish your package",
    ]


def test_windows_hint(sample_answers: AnswerSet) -> None:
    steps = build_next_steps(sample_answers, platform="win32")
    assert "Administrator Command Prompt" in steps[1]


def test_no_git_adds_commit_step(sample_answers: AnswerSet) -> None:
    steps = build_next_steps(sample_answers.with_value("publish_to", "npmjs"), no_git=True, platform="linux")
    assert steps[-2] == '   - git add . && git commit -m "Initial commit"'
    assert steps[-3] == "2. Run `git init` and commit your changes"


def test_upgrade_wording(sample_answers: AnswerSet) -> None:
    steps = build_next_steps(sample_answers, upgrade=True, no_git=True, platform="linux")
    assert steps[-1].endswith("publish your updated package")
    assert not any("git init" in line for line in steps)


def test_pages_steps(sample_answers: AnswerSet) -> None:
    steps = build_next_steps(sample_answers.with_value("create_github_pages", True), platform="linux")
    assert any("WEBPAGE.md" in line for line in steps)


def test_token_hint_when_token_given(sample_answers: AnswerSet, valid_token: str) -> None:
    steps = build_next_steps(sample_answers.with_value("github_token", valid_token), platform="linux")
    assert "   - Export GITHUB_TOKEN before publishing; .npmrc reads it from the environment" in steps


def test_print_next_steps(capsys) -> None:
    print_next_steps(["1. Run it", "   - hint"])
    out = capsys.readouterr().out
    assert "Next steps:" in out
    assert "1. Run it" in out
