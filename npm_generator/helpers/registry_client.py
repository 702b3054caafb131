"""npm registry lookups."""

from __future__ import annotations

import urllib.parse

import requests

from npm_generator.core.errors import CollaboratorError

NPM_REGISTRY_URL = "https://registry.npmjs.org/"
GITHUB_REGISTRY_URL = "https://npm.pkg.github.com/"


class RegistryClient:
    """Answers "is this package name taken?" against an npm registry."""

    def __init__(
        self,
        *,
        base_url: str = NPM_REGISTRY_URL,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._http = session or requests.Session()
        self._timeout = timeout

    def _url(self, package_name: str) -> str:
        # Scoped names keep the "@" but encode the slash: @scope%2Fname
        return f"{self._base}/{urllib.parse.quote(package_name, safe='@')}"

    def package_exists(self, package_name: str) -> bool:
        """Return True if ``package_name`` is published on the registry.

        Raises:
            CollaboratorError: On network failure or unexpected status
        """
        try:
            res = self._http.get(self._url(package_name), timeout=self._timeout)
        except requests.RequestException as exc:
            raise CollaboratorError(f"Registry lookup failed for {package_name}: {exc}") from exc
        if res.status_code == 404:
            return False
        if res.status_code == 200:
            return True
        raise CollaboratorError(
            f"Registry returned {res.status_code} for {package_name}",
            status_code=res.status_code,
        )
