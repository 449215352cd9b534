"""Shared fixtures for manifest publish tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from agentmanifest.publish.config import PublishConfig

from tests.publish.samples import FIXED_NOW, RAW_CHAIN_SETTINGS


@pytest.fixture
def publish_config() -> PublishConfig:
    """Publish config with the mixed-type chain settings."""
    return PublishConfig(
        agent_name="agent name",
        display_name="agent display name",
        description="some description",
        long_description="some long description",
        agent_id="0xagentId",
        version="0.1",
        documentation="README.md",
        repository="github.com/myrepository",
        license_url="github.com/myrepository/license",
        promo_url="github.com/myrepository/promo",
        cli_version="0.2",
        chain_ids=(1, 1337),
        external=False,
        chain_settings=RAW_CHAIN_SETTINGS,
    )


@pytest.fixture
def filesystem() -> MagicMock:
    """Filesystem mock holding a non-empty README.md."""
    fs = MagicMock()
    fs.exists.return_value = True
    fs.size.return_value = 1
    fs.read_text.return_value = '{"some":"documentation"}'
    return fs


@pytest.fixture
def store() -> MagicMock:
    """Store mock returning docRef then manifestRef."""
    mock_store = MagicMock()
    mock_store.publish = AsyncMock(side_effect=["docRef", "manifestRef"])
    mock_store.close = AsyncMock()
    return mock_store


@pytest.fixture
def clock() -> MagicMock:
    """Clock pinned at FIXED_NOW."""
    return MagicMock(return_value=FIXED_NOW)
