"""Exceptions raised while building, signing and publishing manifests."""

from __future__ import annotations


class PublishError(Exception):
    """Base exception for manifest publish operations."""


class DocumentationError(PublishError):
    """Raised when the configured documentation file is unusable.

    Attributes:
        path: Documentation path as configured.
    """

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class DocumentationNotFoundError(DocumentationError):
    """Raised when the documentation file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"documentation file {path} not found", path)


class DocumentationEmptyError(DocumentationError):
    """Raised when the documentation file exists but has zero size."""

    def __init__(self, path: str) -> None:
        super().__init__(f"documentation file {path} cannot be empty", path)


class StoreError(PublishError):
    """Raised by a content store when a publish call fails."""


class SigningError(PublishError):
    """Raised by a signer when a key or digest cannot be used."""


class ChainSettingsError(PublishError, ValueError):
    """Raised when chain settings contain a key that is not a chain id."""


class EnvelopeError(PublishError):
    """Raised when a signed envelope cannot be parsed."""
