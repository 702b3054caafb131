"""External collaborators used while resolving and executing a run."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from .git_ops import GitRunner
from .github_client import GitHubClient
from .registry_client import RegistryClient
from .retry import DEFAULT_ATTEMPTS, DEFAULT_DELAY_SECONDS


@dataclass
class Collaborators:
    """Network and tool clients plus their retry policy.

    Attributes:
        registry: npm registry lookups
        github: GitHub REST API client
        git: git executable wrapper
        attempts: Attempts per collaborator call
        retry_delay: Seconds between attempts
        sleep: Sleep function used between attempts
    """
    registry: RegistryClient = field(default_factory=RegistryClient)
    github: GitHubClient = field(default_factory=GitHubClient)
    git: GitRunner = field(default_factory=GitRunner)
    attempts: int = DEFAULT_ATTEMPTS
    retry_delay: float = DEFAULT_DELAY_SECONDS
    sleep: Callable[[float], None] = time.sleep
