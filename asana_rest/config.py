#!/usr/bin/env python3
"""
Asana Client Configuration

Settings are read from the environment, after loading a local .env file
if one exists.

Environment Variables:
    ASANA_ACCESS_TOKEN: Personal Access Token (required for AsanaClient.from_env)
    ASANA_BASE_URL: API base URL (default: https://app.asana.com/api/1.0/)
    ASANA_REQUEST_TIMEOUT: Per-request timeout in seconds (default: 30)
    ASANA_WORKSPACE: Default workspace id for the CLI (optional)
"""

import logging
import os
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import AsanaAuthError
from .transport import REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://app.asana.com/api/1.0/"


class AsanaConfig:
    """Read-only client settings."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        workspace: Optional[str] = None,
    ):
        self._access_token = access_token
        self._base_url = base_url
        self._timeout = timeout
        self._workspace = workspace

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def workspace(self) -> Optional[str]:
        return self._workspace

    @property
    def access_token(self) -> str:
        """The configured token; raises AsanaAuthError if none is set."""
        if not self._access_token:
            raise AsanaAuthError(
                "No Asana token provided.\n"
                "Options:\n"
                "  1. Set ASANA_ACCESS_TOKEN environment variable\n"
                "  2. Add ASANA_ACCESS_TOKEN to a .env file\n"
                "  3. Pass a transport to AsanaClient directly"
            )
        return self._access_token

    @property
    def has_token(self) -> bool:
        return bool(self._access_token)

    @classmethod
    def from_mapping(cls, env: Mapping[str, str]) -> "AsanaConfig":
        raw_timeout = env.get("ASANA_REQUEST_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(
                    f"Invalid ASANA_REQUEST_TIMEOUT: {raw_timeout!r} (expected seconds)"
                ) from None
        else:
            timeout = REQUEST_TIMEOUT

        return cls(
            access_token=env.get("ASANA_ACCESS_TOKEN") or None,
            base_url=env.get("ASANA_BASE_URL") or DEFAULT_BASE_URL,
            timeout=timeout,
            workspace=env.get("ASANA_WORKSPACE") or None,
        )

    def __repr__(self) -> str:
        token = "set" if self._access_token else "unset"
        return (
            f"AsanaConfig(base_url={self._base_url!r}, timeout={self._timeout}, "
            f"workspace={self._workspace!r}, token={token})"
        )


def load_config(dotenv: bool = True) -> AsanaConfig:
    """
    Build configuration from the process environment.

    Args:
        dotenv: Load a .env file first (existing variables are not overridden)

    Returns:
        AsanaConfig snapshot of the current environment
    """
    if dotenv:
        load_dotenv()
    config = AsanaConfig.from_mapping(os.environ)
    logger.debug(f"Loaded {config!r}")
    return config
