#!/usr/bin/env python3
"""Build, sign and publish an agent manifest to IPFS.

Usage:
    python scripts/publish_manifest.py --config publish.json --image-ref <ref> --key-file keyfile

The private key is read from --key-file, or from AGENTMANIFEST_PRIVATE_KEY.

Outputs:
    The IPFS address of the signed manifest on stdout.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path


def read_private_key(key_file: Path | None) -> str:
    """Read the private key from a file or the environment.

    Raises:
        ValueError: If no key is available.
    """
    if key_file is not None:
        key = key_file.read_text(encoding="utf-8").strip()
    else:
        key = os.environ.get("AGENTMANIFEST_PRIVATE_KEY", "").strip()
    if not key:
        raise ValueError("private key required (--key-file or AGENTMANIFEST_PRIVATE_KEY)")
    return key


async def run(args: argparse.Namespace) -> str:
    """Run the upload against IPFS and return the manifest address."""
    from agentmanifest.publish import (
        EthSigner,
        IpfsConfig,
        IpfsStore,
        LocalFilesystem,
        ManifestUploader,
        load_publish_config,
    )

    config = load_publish_config(args.config)
    private_key = read_private_key(args.key_file)

    store = IpfsStore(IpfsConfig(url=args.ipfs_url or "", timeout_s=args.timeout))
    try:
        uploader = ManifestUploader(
            config,
            LocalFilesystem(root=args.config.parent),
            store,
            EthSigner(),
        )
        return await uploader.upload_manifest(args.image_ref, private_key)
    finally:
        await store.close()


def main() -> int:
    """Publish manifest."""
    parser = argparse.ArgumentParser(description="Publish a signed agent manifest")
    parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to publish config JSON (documentation path is relative to it)",
    )
    parser.add_argument(
        "--image-ref",
        type=str,
        required=True,
        help="Reference of the pushed agent image",
    )
    parser.add_argument(
        "--key-file",
        type=Path,
        default=None,
        help="File holding the hex private key (default: AGENTMANIFEST_PRIVATE_KEY)",
    )
    parser.add_argument(
        "--ipfs-url",
        type=str,
        default=None,
        help="IPFS HTTP API base URL (default: AGENTMANIFEST_IPFS_URL or public gateway)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="IPFS request timeout in seconds (default: 30)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        default="json",
        choices=["json", "simple"],
        help="Log format (default: json)",
    )

    args = parser.parse_args()

    from agentmanifest.logging_config import get_logger, setup_logging

    setup_logging(level=args.log_level, json_format=args.log_format == "json")
    logger = get_logger("publish_manifest")

    if not args.config.exists():
        print(f"ERROR: Config file not found: {args.config}", file=sys.stderr)
        return 1

    from agentmanifest.publish import PublishError

    try:
        address = asyncio.run(run(args))
    except (PublishError, ValueError, OSError) as e:
        logger.error("Publish failed", extra={"error_type": type(e).__name__})
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(address)
    return 0


if __name__ == "__main__":
    sys.exit(main())
