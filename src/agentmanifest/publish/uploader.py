"""upload_manifest: build, sign and publish an agent manifest.

Pipeline (strictly sequential, no retries):
    pre-flight -> publish documentation -> assemble manifest
    -> digest -> sign -> publish envelope -> envelope address

A failure at any step propagates unchanged. The documentation publish is not
rolled back when a later step fails; a retry re-runs the whole pipeline.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from agentmanifest.publish.builder import ManifestBuilder, utc_now
from agentmanifest.publish.metrics import PublishMetrics
from agentmanifest.publish.publisher import ManifestPublisher

if TYPE_CHECKING:
    from agentmanifest.publish.builder import Clock
    from agentmanifest.publish.config import PublishConfig
    from agentmanifest.publish.filesystem import Filesystem
    from agentmanifest.publish.signer import Signer
    from agentmanifest.publish.store import ContentStore

logger = logging.getLogger(__name__)


class ManifestUploader:
    """Composes ManifestBuilder and ManifestPublisher for one config."""

    def __init__(
        self,
        config: PublishConfig,
        filesystem: Filesystem,
        store: ContentStore,
        signer: Signer,
        clock: Clock = utc_now,
        metrics: PublishMetrics | None = None,
    ) -> None:
        self._builder = ManifestBuilder(config, filesystem, store, signer, clock=clock)
        self._publisher = ManifestPublisher(store, signer)
        self._metrics = metrics or PublishMetrics()

    @property
    def builder(self) -> ManifestBuilder:
        return self._builder

    @property
    def publisher(self) -> ManifestPublisher:
        return self._publisher

    @property
    def metrics(self) -> PublishMetrics:
        return self._metrics

    async def upload_manifest(self, image_reference: str, private_key: str) -> str:
        """
        Build, sign and publish the manifest for an agent image.

        Args:
            image_reference: Reference of the pushed agent image.
            private_key: Publisher's private key.

        Returns:
            Content address of the signed envelope.
        """
        config = self._builder.config
        started = time.monotonic()
        self._metrics.record_attempt()
        logger.info(
            "Uploading manifest",
            extra={"agent": config.agent_name, "version": config.version},
        )

        try:
            manifest = await self._builder.build(image_reference, private_key)
        except Exception as e:
            self._metrics.record_failure("build")
            logger.error(
                "Manifest build failed",
                extra={"stage": "build", "error_type": type(e).__name__},
            )
            raise

        try:
            address = await self._publisher.publish(manifest, private_key)
        except Exception as e:
            self._metrics.record_failure("publish")
            logger.error(
                "Manifest publish failed",
                extra={"stage": "publish", "error_type": type(e).__name__},
            )
            raise

        self._metrics.record_success(time.monotonic() - started)
        return address
