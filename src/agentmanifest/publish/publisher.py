"""Manifest publisher.

digest = keccak256(canonical manifest bytes)
signature = signer.sign_digest(private_key, digest)
address = store.publish({"manifest": ..., "signature": ...})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agentmanifest.publish.manifest import SignedEnvelope

if TYPE_CHECKING:
    from agentmanifest.publish.manifest import Manifest
    from agentmanifest.publish.signer import Signer
    from agentmanifest.publish.store import ContentStore

logger = logging.getLogger(__name__)


class ManifestPublisher:
    """Signs manifests and publishes the signed envelope."""

    def __init__(self, store: ContentStore, signer: Signer) -> None:
        self._store = store
        self._signer = signer

    def sign(self, manifest: Manifest, private_key: str) -> SignedEnvelope:
        """Sign the manifest digest and wrap both in an envelope."""
        signature = self._signer.sign_digest(private_key, manifest.digest())
        return SignedEnvelope(manifest=manifest, signature=signature)

    async def publish(self, manifest: Manifest, private_key: str) -> str:
        """
        Sign and publish a manifest.

        Args:
            manifest: Assembled manifest.
            private_key: Key matching manifest.from_address.

        Returns:
            Content address of the published envelope.
        """
        envelope = self.sign(manifest, private_key)
        address = await self._store.publish(envelope.canonical_json().decode("utf-8"))
        logger.info(
            "Signed manifest published",
            extra={"address": address, "from": manifest.from_address},
        )
        return address
