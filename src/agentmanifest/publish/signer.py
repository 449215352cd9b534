"""
Manifest signers.

EthSigner signs raw 32-byte digests with a secp256k1 private key and returns
the recoverable compact form ``0x`` + r (32) + s (32) + v (1), v in {27, 28}.
The digest is signed as-is, without the EIP-191 message prefix.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from eth_account import Account
from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as KeyValidationError

from agentmanifest.publish.errors import SigningError

DIGEST_SIZE = 32
SIGNATURE_SIZE = 65


class Signer(ABC):
    """Abstract base class for manifest signers."""

    @abstractmethod
    def address(self, private_key: str) -> str:
        """Address of the wallet implied by private_key."""
        ...

    @abstractmethod
    def sign_digest(self, private_key: str, digest: bytes) -> str:
        """Sign a 32-byte digest, returning the compact signature string."""
        ...


class EthSigner(Signer):
    """secp256k1 signer with Ethereum address derivation."""

    def address(self, private_key: str) -> str:
        try:
            return Account.from_key(private_key).address
        except (ValueError, TypeError, KeyValidationError) as e:
            raise SigningError(f"invalid private key: {type(e).__name__}") from e

    def sign_digest(self, private_key: str, digest: bytes) -> str:
        if len(digest) != DIGEST_SIZE:
            raise SigningError(f"digest must be {DIGEST_SIZE} bytes, got {len(digest)}")
        try:
            signed = Account.unsafe_sign_hash(digest, private_key)
        except (ValueError, TypeError, KeyValidationError) as e:
            raise SigningError(f"invalid private key: {type(e).__name__}") from e
        return "0x" + bytes(signed.signature).hex()

    def recover(self, digest: bytes, signature: str) -> str:
        """Recover the checksummed signer address from a compact signature.

        Raises:
            SigningError: If the signature is malformed or does not recover.
        """
        try:
            raw = bytes.fromhex(signature.removeprefix("0x"))
        except ValueError as e:
            raise SigningError("signature is not hex") from e
        if len(raw) != SIGNATURE_SIZE:
            raise SigningError(f"signature must be {SIGNATURE_SIZE} bytes, got {len(raw)}")
        v = raw[64]
        if v >= 27:
            v -= 27
        try:
            sig = keys.Signature(signature_bytes=raw[:64] + bytes([v]))
            public_key = sig.recover_public_key_from_msg_hash(digest)
        except (BadSignature, KeyValidationError) as e:
            raise SigningError(f"signature does not recover: {type(e).__name__}") from e
        return public_key.to_checksum_address()
