"""Signed envelope verification.

Consumers fetch an envelope by address and check that the manifest was
signed by the address in its ``from`` field. The manifest is re-serialized
in the key order it was parsed in, which is the order it was signed in.
"""

from __future__ import annotations

import logging
from typing import Any

import orjson

from agentmanifest.publish.errors import EnvelopeError, SigningError
from agentmanifest.publish.manifest import canonical_json, keccak256
from agentmanifest.publish.signer import EthSigner

logger = logging.getLogger(__name__)


def parse_envelope(content: str | bytes) -> tuple[dict[str, Any], str]:
    """Parse a signed envelope.

    Returns:
        (manifest dict, signature).

    Raises:
        EnvelopeError: If content is not an envelope object.
    """
    try:
        data = orjson.loads(content)
    except orjson.JSONDecodeError as e:
        raise EnvelopeError(f"envelope is not JSON: {e}") from e

    if not isinstance(data, dict):
        raise EnvelopeError("envelope must be a JSON object")
    manifest = data.get("manifest")
    signature = data.get("signature")
    if not isinstance(manifest, dict):
        raise EnvelopeError("envelope has no manifest object")
    if not isinstance(signature, str) or not signature:
        raise EnvelopeError("envelope has no signature")
    return manifest, signature


def recover_signer(
    manifest: dict[str, Any], signature: str, signer: EthSigner | None = None
) -> str:
    """Recover the address that signed a manifest dict."""
    signer = signer or EthSigner()
    digest = keccak256(canonical_json(manifest))
    return signer.recover(digest, signature)


def verify_envelope(content: str | bytes, signer: EthSigner | None = None) -> bool:
    """Check that an envelope's signature recovers to manifest["from"].

    Raises:
        EnvelopeError: If content is not an envelope object.
    """
    manifest, signature = parse_envelope(content)
    claimed = manifest.get("from")
    if not isinstance(claimed, str):
        raise EnvelopeError("manifest has no from address")

    try:
        recovered = recover_signer(manifest, signature, signer)
    except SigningError as e:
        logger.warning("Envelope signature invalid", extra={"reason": str(e)})
        return False

    valid = recovered.lower() == claimed.lower()
    if not valid:
        logger.warning(
            "Envelope signer mismatch",
            extra={"from": claimed, "recovered": recovered},
        )
    return valid
