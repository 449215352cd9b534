"""Publish configuration.

PublishConfig is frozen (immutable) and holds everything fixed for a release:
agent metadata, documentation path and raw chain settings. The two per-call
inputs (image reference and private key) are never part of it.

IpfsConfig configures the content store client and reads its URL from the
environment when not given explicitly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TOOL_NAME = "Forta CLI"
DEFAULT_IPFS_URL = "https://ipfs.forta.network"

# Never logged
PUBLISH_REDACTED_ENV_VARS = frozenset({
    "AGENTMANIFEST_PRIVATE_KEY",
})


class PublishConfig(BaseModel):
    """Release-time manifest configuration (frozen)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    agent_name: str = Field(description="Agent package name, written to manifest.agentId")
    display_name: str = Field(default="", description="Human readable name, manifest.name")
    description: str = Field(default="")
    long_description: str = Field(default="")
    agent_id: str = Field(description="Agent identifier hash, written to manifest.agentIdHash")
    version: str = Field(description="Agent version")
    documentation: str = Field(default="README.md", description="Path of the documentation file")
    repository: str = Field(default="")
    license_url: str = Field(default="")
    promo_url: str = Field(default="")
    cli_version: str = Field(default="", description="Version of the publishing tool")
    chain_ids: tuple[int, ...] = Field(default=(), description="Chain ids, order preserved")
    external: bool = Field(default=False)
    chain_settings: dict[str | int, dict[str, Any]] = Field(
        default_factory=dict,
        description="Raw chain settings, normalized at build time",
    )
    tool_name: str = Field(default=DEFAULT_TOOL_NAME)

    @field_validator("agent_name", "agent_id", "version", "documentation")
    @classmethod
    def validate_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("value is required and cannot be empty")
        return v

    @field_validator("chain_ids")
    @classmethod
    def validate_chain_ids(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        for chain_id in v:
            if chain_id <= 0:
                raise ValueError(f"chain ids must be positive, got {chain_id}")
        return v

    @property
    def published_from(self) -> str:
        """Publishing tool identifier, e.g. ``Forta CLI 0.2``."""
        return f"{self.tool_name} {self.cli_version}"


def load_publish_config(path: Path) -> PublishConfig:
    """Load a PublishConfig from a JSON file.

    Args:
        path: JSON file with PublishConfig fields.

    Returns:
        Validated PublishConfig.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        pydantic.ValidationError: If fields are missing or invalid.
    """
    with path.open("rb") as f:
        data = orjson.loads(f.read())
    return PublishConfig.model_validate(data)


@dataclass
class IpfsConfig:
    """IPFS HTTP API client configuration."""

    url: str = ""  # From AGENTMANIFEST_IPFS_URL env var
    timeout_s: float = 30.0
    pin: bool = True
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.url:
            self.url = os.environ.get("AGENTMANIFEST_IPFS_URL", DEFAULT_IPFS_URL)
        if not self.url.startswith(("http://", "https://")):
            raise ValueError(f"url must be http(s), got {self.url!r}")
        self.url = self.url.rstrip("/")
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be > 0, got {self.timeout_s}")
