"""Minimal GitHub REST client.

Covers the two calls the scaffolder needs: reading the scopes of a token
and creating a repository for the authenticated user.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from npm_generator.core.errors import CollaboratorError

GITHUB_API_URL = "https://api.github.com"


class GitHubError(CollaboratorError):
    """A failed GitHub API call; ``payload`` holds the decoded error body."""

    def __init__(self, message: str, *, status_code: int | None = None, payload: Any = None):
        super().__init__(message, status_code=status_code)
        self.payload = payload


@dataclass(frozen=True)
class TokenInfo:
    """Owner and classic OAuth scopes of a token."""

    login: str
    scopes: frozenset[str]


@dataclass(frozen=True)
class GitHubRepository:
    """A repository as returned by the create call."""

    full_name: str
    html_url: str
    clone_url: str
    private: bool


class GitHubClient:
    """Talks to the GitHub REST API over a ``requests`` session.

    Every method takes the token explicitly; the client holds no credentials.
    Transport failures and HTTP errors are raised as ``GitHubError``.
    """

    def __init__(
        self,
        *,
        base_url: str = GITHUB_API_URL,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._http = session or requests.Session()
        self._timeout = timeout

    @staticmethod
    def _headers(token: str) -> dict[str, str]:
        return {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github+json",
        }

    def _request(
        self, method: str, path: str, token: str, *, json_body: dict[str, Any] | None = None
    ) -> requests.Response:
        try:
            res = self._http.request(
                method,
                f"{self._base}{path}",
                headers=self._headers(token),
                json=json_body,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise GitHubError(f"GitHub request failed for {method} {path}: {exc}") from exc
        if res.status_code >= 400:
            payload: Any
            try:
                payload = res.json()
            except ValueError:
                payload = {"raw": res.text}
            raise GitHubError(
                f"GitHub API error {res.status_code} for {method} {path}",
                status_code=res.status_code,
                payload=payload,
            )
        return res

    def token_info(self, token: str) -> TokenInfo:
        """Return the login and OAuth scopes of ``token``.

        Fine-grained tokens carry no X-OAuth-Scopes header; their scope set
        is empty.
        """
        res = self._request("GET", "/user", token)
        data = res.json()
        raw_scopes = res.headers.get("X-OAuth-Scopes", "")
        scopes = frozenset(s.strip() for s in raw_scopes.split(",") if s.strip())
        return TokenInfo(login=str(data.get("login", "")), scopes=scopes)

    def create_repository(self, name: str, token: str, *, private: bool) -> GitHubRepository:
        """Create ``name`` under the token owner's account.

        Raises:
            GitHubError: If the request fails or GitHub rejects it (e.g. 422
                when the repository already exists)
        """
        res = self._request(
            "POST",
            "/user/repos",
            token,
            json_body={"name": name, "private": private},
        )
        data = res.json()
        return GitHubRepository(
            full_name=str(data.get("full_name", name)),
            html_url=str(data.get("html_url", "")),
            clone_url=str(data.get("clone_url", "")),
            private=bool(data.get("private", private)),
        )
