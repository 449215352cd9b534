"""End-to-end tests for ManifestUploader.upload_manifest with mocked I/O."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from eth_account import Account
from eth_hash.auto import keccak
from prometheus_client.registry import CollectorRegistry

from agentmanifest.publish.config import PublishConfig
from agentmanifest.publish.errors import (
    DocumentationEmptyError,
    DocumentationNotFoundError,
    StoreError,
)
from agentmanifest.publish.metrics import PublishMetrics
from agentmanifest.publish.signer import EthSigner
from agentmanifest.publish.uploader import ManifestUploader
from agentmanifest.publish.verify import verify_envelope

from tests.publish.samples import (
    ADDRESS,
    FIXED_NOW_UTC_STRING,
    NORMALIZED_CHAIN_SETTINGS,
    PRIVATE_KEY,
)


def _sample(registry: CollectorRegistry, name: str, labels: dict[str, str] | None = None) -> float:
    value = registry.get_sample_value(name, labels or {})
    return value if value is not None else 0.0


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def uploader(
    publish_config: PublishConfig,
    filesystem: MagicMock,
    store: MagicMock,
    clock: MagicMock,
    registry: CollectorRegistry,
) -> ManifestUploader:
    return ManifestUploader(
        publish_config,
        filesystem,
        store,
        EthSigner(),
        clock=clock,
        metrics=PublishMetrics(registry=registry),
    )


class TestUploadManifestFailures:
    """Pre-flight failures."""

    @pytest.mark.asyncio
    async def test_documentation_not_found(
        self,
        uploader: ManifestUploader,
        filesystem: MagicMock,
        store: MagicMock,
        registry: CollectorRegistry,
    ) -> None:
        filesystem.exists.return_value = False

        with pytest.raises(DocumentationNotFoundError, match="^documentation file README.md not found$"):
            await uploader.upload_manifest("123abc", PRIVATE_KEY)

        filesystem.exists.assert_called_once_with("README.md")
        filesystem.read_text.assert_not_called()
        store.publish.assert_not_called()
        assert _sample(registry, "agentmanifest_publish_failures_total", {"stage": "build"}) == 1
        assert _sample(registry, "agentmanifest_publish_success_total") == 0

    @pytest.mark.asyncio
    async def test_documentation_empty(
        self, uploader: ManifestUploader, filesystem: MagicMock, store: MagicMock
    ) -> None:
        filesystem.size.return_value = 0

        with pytest.raises(
            DocumentationEmptyError, match="^documentation file README.md cannot be empty$"
        ):
            await uploader.upload_manifest("123abc", PRIVATE_KEY)

        filesystem.exists.assert_called_once_with("README.md")
        filesystem.size.assert_called_once_with("README.md")
        filesystem.read_text.assert_not_called()
        store.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_envelope_publish_failure_not_rolled_back(
        self, uploader: ManifestUploader, store: MagicMock, registry: CollectorRegistry
    ) -> None:
        store.publish.side_effect = ["docRef", StoreError("IPFS add failed: HTTP 502")]

        with pytest.raises(StoreError, match="HTTP 502"):
            await uploader.upload_manifest("123abc", PRIVATE_KEY)

        assert store.publish.await_count == 2
        assert _sample(registry, "agentmanifest_publish_failures_total", {"stage": "publish"}) == 1

    @pytest.mark.asyncio
    async def test_retry_reruns_whole_pipeline(
        self, uploader: ManifestUploader, filesystem: MagicMock, store: MagicMock
    ) -> None:
        store.publish.side_effect = [
            "docRef",
            StoreError("IPFS connection error"),
            "docRef",
            "manifestRef",
        ]

        with pytest.raises(StoreError):
            await uploader.upload_manifest("123abc", PRIVATE_KEY)
        assert await uploader.upload_manifest("123abc", PRIVATE_KEY) == "manifestRef"

        assert filesystem.read_text.call_count == 2
        assert store.publish.await_count == 4


class TestUploadManifestSuccess:
    """Successful publish."""

    @pytest.mark.asyncio
    async def test_oversized_integer_setting_published_as_float(
        self, publish_config: PublishConfig, filesystem: MagicMock, store: MagicMock
    ) -> None:
        config = publish_config.model_copy(
            update={"chain_settings": {"default": {"shards": "18446744073709551616", "target": 1}}}
        )
        uploader = ManifestUploader(config, filesystem, store, EthSigner())

        assert await uploader.upload_manifest("123abc", PRIVATE_KEY) == "manifestRef"

        envelope = json.loads(store.publish.await_args_list[1].args[0])
        assert envelope["manifest"]["chainSettings"] == {
            "default": {"shards": 1.8446744073709552e19, "target": 1}
        }
        assert verify_envelope(store.publish.await_args_list[1].args[0])

    @pytest.mark.asyncio
    async def test_returns_envelope_address(
        self,
        uploader: ManifestUploader,
        filesystem: MagicMock,
        store: MagicMock,
        registry: CollectorRegistry,
    ) -> None:
        address = await uploader.upload_manifest("123abc", PRIVATE_KEY)

        assert address == "manifestRef"
        filesystem.exists.assert_called_once_with("README.md")
        filesystem.size.assert_called_once_with("README.md")
        filesystem.read_text.assert_called_once_with("README.md")
        assert store.publish.await_count == 2
        assert store.publish.await_args_list[0].args == ('{"some":"documentation"}',)
        assert _sample(registry, "agentmanifest_publish_attempts_total") == 1
        assert _sample(registry, "agentmanifest_publish_success_total") == 1

    @pytest.mark.asyncio
    async def test_envelope_payload_exact(
        self, uploader: ManifestUploader, store: MagicMock
    ) -> None:
        await uploader.upload_manifest("123abc", PRIVATE_KEY)

        expected_manifest = {
            "from": ADDRESS,
            "name": "agent display name",
            "description": "some description",
            "longDescription": "some long description",
            "agentId": "agent name",
            "agentIdHash": "0xagentId",
            "version": "0.1",
            "timestamp": FIXED_NOW_UTC_STRING,
            "imageReference": "123abc",
            "documentation": "docRef",
            "repository": "github.com/myrepository",
            "licenseUrl": "github.com/myrepository/license",
            "promoUrl": "github.com/myrepository/promo",
            "chainIds": [1, 1337],
            "publishedFrom": "Forta CLI 0.2",
            "external": False,
            "chainSettings": NORMALIZED_CHAIN_SETTINGS,
        }
        manifest_json = json.dumps(expected_manifest, separators=(",", ":"))
        signed = Account.unsafe_sign_hash(keccak(manifest_json.encode()), PRIVATE_KEY)
        signature = "0x" + bytes(signed.signature).hex()
        expected_payload = json.dumps(
            {"manifest": expected_manifest, "signature": signature}, separators=(",", ":")
        )

        assert store.publish.await_args_list[1].args == (expected_payload,)

    @pytest.mark.asyncio
    async def test_published_envelope_verifies(
        self, uploader: ManifestUploader, store: MagicMock
    ) -> None:
        await uploader.upload_manifest("123abc", PRIVATE_KEY)

        payload = store.publish.await_args_list[1].args[0]
        assert verify_envelope(payload) is True
        signature = json.loads(payload)["signature"]
        assert signature.startswith("0x")
        assert len(signature) == 2 + 65 * 2
