"""Agent manifest and signed envelope.

manifest JSON (canonical form, compact, fields in this exact order):
    {
        "from": "0x8ba1f109551bD432803012645Ac136ddd64DBA72",
        "name": "agent display name",
        "description": "...",
        "longDescription": "...",
        "agentId": "agent name",
        "agentIdHash": "0xagentId",
        "version": "0.1",
        "timestamp": "Mon, 19 Oct 2026 12:00:00 GMT",
        "imageReference": "123abc",
        "documentation": "Qm...",
        "repository": "...",
        "licenseUrl": "...",
        "promoUrl": "...",
        "chainIds": [1, 1337],
        "publishedFrom": "Forta CLI 0.2",
        "external": false,
        "chainSettings": {"default": {"shards": 1, "target": 1}}
    }

The signature covers the keccak-256 digest of exactly these bytes, so field
order and separators are part of the format. ``agentId`` carries the agent
name and ``agentIdHash`` the agent identifier; existing signed manifests
depend on those names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from email.utils import format_datetime
from typing import TYPE_CHECKING, Any

import orjson
from eth_hash.auto import keccak

if TYPE_CHECKING:
    from datetime import datetime

    from agentmanifest.publish.chain_settings import ChainSettings


def format_timestamp(moment: datetime) -> str:
    """Format an aware UTC datetime as an RFC 1123 string.

    ``Mon, 19 Oct 2026 12:00:00 GMT``
    """
    return format_datetime(moment, usegmt=True)


def canonical_json(data: Any) -> bytes:
    """Serialize to compact JSON bytes, keeping key insertion order."""
    return orjson.dumps(data)


def keccak256(data: bytes) -> bytes:
    """Return the 32-byte keccak-256 digest of data."""
    return keccak(data)


@dataclass(frozen=True)
class Manifest:
    """Unsigned agent manifest.

    Attributes mirror the manifest JSON fields; see module docstring for the
    wire names and order.
    """

    from_address: str
    name: str
    description: str
    long_description: str
    agent_id: str
    agent_id_hash: str
    version: str
    timestamp: str
    image_reference: str
    documentation: str
    repository: str
    license_url: str
    promo_url: str
    chain_ids: tuple[int, ...]
    published_from: str
    external: bool
    chain_settings: ChainSettings = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary in wire field order."""
        return {
            "from": self.from_address,
            "name": self.name,
            "description": self.description,
            "longDescription": self.long_description,
            "agentId": self.agent_id,
            "agentIdHash": self.agent_id_hash,
            "version": self.version,
            "timestamp": self.timestamp,
            "imageReference": self.image_reference,
            "documentation": self.documentation,
            "repository": self.repository,
            "licenseUrl": self.license_url,
            "promoUrl": self.promo_url,
            "chainIds": list(self.chain_ids),
            "publishedFrom": self.published_from,
            "external": self.external,
            "chainSettings": self.chain_settings,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Manifest:
        """Create from a manifest JSON object."""
        return cls(
            from_address=data["from"],
            name=data["name"],
            description=data["description"],
            long_description=data["longDescription"],
            agent_id=data["agentId"],
            agent_id_hash=data["agentIdHash"],
            version=data["version"],
            timestamp=data["timestamp"],
            image_reference=data["imageReference"],
            documentation=data["documentation"],
            repository=data["repository"],
            license_url=data["licenseUrl"],
            promo_url=data["promoUrl"],
            chain_ids=tuple(data["chainIds"]),
            published_from=data["publishedFrom"],
            external=data["external"],
            chain_settings=data.get("chainSettings", {}),
        )

    def canonical_json(self) -> bytes:
        """Canonical bytes that the signature covers."""
        return canonical_json(self.to_dict())

    def digest(self) -> bytes:
        """keccak-256 of the canonical bytes."""
        return keccak256(self.canonical_json())


@dataclass(frozen=True)
class SignedEnvelope:
    """Manifest plus its signature; the unit published and verified."""

    manifest: Manifest
    signature: str

    def to_dict(self) -> dict[str, Any]:
        return {"manifest": self.manifest.to_dict(), "signature": self.signature}

    def canonical_json(self) -> bytes:
        return canonical_json(self.to_dict())
