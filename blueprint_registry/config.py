"""Configuration for registry sync runs.

Values come from the environment (as set by a release-automation job) or from
explicit overrides, and are validated once before any network call.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Mapping

from blueprint_registry.errors import ConfigError
from blueprint_registry.registry.store import DEFAULT_REGISTRY_PATH

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_RAW_URL = "https://raw.githubusercontent.com"
DEFAULT_TIMEOUT = 30.0

# Environment variable for each SyncConfig field
ENV_VARS: dict[str, str] = {
    "tag": "TAG",
    "repository": "BLUEPRINTS_REPO",  # e.g. getDragon-dev/dragon-blueprints
    "token": "GITHUB_TOKEN",
    "registry_path": "REGISTRY_PATH",
    "api_url": "GITHUB_API_URL",
    "raw_url": "GITHUB_RAW_URL",
}

_REPOSITORY_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


@dataclass
class SyncConfig:
    """Inputs for one sync run: a single (repository, tag) pair."""

    tag: str = ""
    repository: str = ""
    token: str = ""  # Optional bearer credential
    registry_path: str = DEFAULT_REGISTRY_PATH
    api_url: str = DEFAULT_API_URL
    raw_url: str = DEFAULT_RAW_URL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> "SyncConfig":
        """Build a config from environment variables.

        Overrides that are not ``None`` take precedence over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for field_name, var in ENV_VARS.items():
            if env.get(var):
                values[field_name] = env[var]
        for key, value in overrides.items():
            if value is not None:
                values[key] = value
        return cls(**values)

    def validate(self) -> "SyncConfig":
        """Check required inputs. Returns ``self`` for chaining.

        Raises:
            ConfigError: Naming every missing input, or describing a malformed one.
        """
        missing = []
        if not self.tag:
            missing.append(ENV_VARS["tag"])
        if not self.repository:
            missing.append(ENV_VARS["repository"])
        if missing:
            raise ConfigError(f"missing {' or '.join(missing)}", missing=missing)

        if not _REPOSITORY_RE.match(self.repository):
            raise ConfigError(
                f"repository must look like 'owner/name', got '{self.repository}'"
            )
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        return self
