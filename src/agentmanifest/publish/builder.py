"""Manifest builder.

Runs the documentation pre-flight checks, publishes the documentation file,
normalizes chain settings and assembles the Manifest.

Side effects, in order:
    1. filesystem.exists(documentation)
    2. filesystem.size(documentation)
    3. filesystem.read_text(documentation)
    4. store.publish(documentation text)

A failed pre-flight check stops before any read or store call.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from agentmanifest.publish.chain_settings import normalize_chain_settings
from agentmanifest.publish.errors import (
    DocumentationEmptyError,
    DocumentationNotFoundError,
)
from agentmanifest.publish.manifest import Manifest, format_timestamp

if TYPE_CHECKING:
    from agentmanifest.publish.config import PublishConfig
    from agentmanifest.publish.filesystem import Filesystem
    from agentmanifest.publish.signer import Signer
    from agentmanifest.publish.store import ContentStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class ManifestBuilder:
    """Builds manifests for one fixed PublishConfig."""

    def __init__(
        self,
        config: PublishConfig,
        filesystem: Filesystem,
        store: ContentStore,
        signer: Signer,
        clock: Clock = utc_now,
    ) -> None:
        self._config = config
        self._filesystem = filesystem
        self._store = store
        self._signer = signer
        self._clock = clock

    @property
    def config(self) -> PublishConfig:
        return self._config

    def check_documentation(self) -> None:
        """Fail fast if the documentation file is missing or empty.

        Raises:
            DocumentationNotFoundError: If the path does not exist.
            DocumentationEmptyError: If the file has zero size.
        """
        path = self._config.documentation
        if not self._filesystem.exists(path):
            raise DocumentationNotFoundError(path)
        if self._filesystem.size(path) == 0:
            raise DocumentationEmptyError(path)

    async def publish_documentation(self) -> str:
        """Publish the documentation file verbatim, returning its address."""
        path = self._config.documentation
        content = self._filesystem.read_text(path)
        address = await self._store.publish(content)
        logger.info(
            "Documentation published",
            extra={"documentation": path, "address": address},
        )
        return address

    async def build(self, image_reference: str, private_key: str) -> Manifest:
        """
        Build the manifest for an agent image.

        Args:
            image_reference: Reference of the pushed agent image.
            private_key: Publisher's private key; only its address is used.

        Returns:
            Assembled Manifest with the timestamp captured once, now.

        Raises:
            DocumentationNotFoundError, DocumentationEmptyError: Pre-flight.
            ChainSettingsError: If chain settings hold an invalid key.
            StoreError, SigningError: From the collaborators, unchanged.
        """
        config = self._config
        self.check_documentation()
        chain_settings = normalize_chain_settings(config.chain_settings)
        documentation = await self.publish_documentation()

        from_address = self._signer.address(private_key)
        timestamp = format_timestamp(self._clock().astimezone(UTC))

        return Manifest(
            from_address=from_address,
            name=config.display_name,
            description=config.description,
            long_description=config.long_description,
            agent_id=config.agent_name,
            agent_id_hash=config.agent_id,
            version=config.version,
            timestamp=timestamp,
            image_reference=image_reference,
            documentation=documentation,
            repository=config.repository,
            license_url=config.license_url,
            promo_url=config.promo_url,
            chain_ids=tuple(config.chain_ids),
            published_from=config.published_from,
            external=config.external,
            chain_settings=chain_settings,
        )
