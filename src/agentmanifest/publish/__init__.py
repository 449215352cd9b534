"""Agent manifest publishing.

Builds the manifest for an agent release, signs its keccak-256 digest and
publishes the signed envelope to a content-addressed store:
- Documentation pre-flight with fail-fast errors
- Chain settings normalization (order-preserving)
- Two-phase publish: documentation first, signed envelope second
- Envelope verification for consumers
"""

from agentmanifest.publish.builder import ManifestBuilder
from agentmanifest.publish.chain_settings import (
    ChainSettings,
    normalize_chain_key,
    normalize_chain_settings,
)
from agentmanifest.publish.config import (
    IpfsConfig,
    PublishConfig,
    load_publish_config,
)
from agentmanifest.publish.errors import (
    ChainSettingsError,
    DocumentationEmptyError,
    DocumentationError,
    DocumentationNotFoundError,
    EnvelopeError,
    PublishError,
    SigningError,
    StoreError,
)
from agentmanifest.publish.filesystem import Filesystem, LocalFilesystem
from agentmanifest.publish.manifest import Manifest, SignedEnvelope
from agentmanifest.publish.metrics import PublishMetrics
from agentmanifest.publish.publisher import ManifestPublisher
from agentmanifest.publish.signer import EthSigner, Signer
from agentmanifest.publish.store import ContentStore, IpfsStore
from agentmanifest.publish.uploader import ManifestUploader
from agentmanifest.publish.verify import parse_envelope, recover_signer, verify_envelope

__all__ = [
    "ChainSettings",
    "ChainSettingsError",
    "ContentStore",
    "DocumentationEmptyError",
    "DocumentationError",
    "DocumentationNotFoundError",
    "EnvelopeError",
    "EthSigner",
    "Filesystem",
    "IpfsConfig",
    "IpfsStore",
    "LocalFilesystem",
    "Manifest",
    "ManifestBuilder",
    "ManifestPublisher",
    "ManifestUploader",
    "PublishConfig",
    "PublishError",
    "PublishMetrics",
    "SignedEnvelope",
    "Signer",
    "SigningError",
    "StoreError",
    "load_publish_config",
    "normalize_chain_key",
    "normalize_chain_settings",
    "parse_envelope",
    "recover_signer",
    "verify_envelope",
]
