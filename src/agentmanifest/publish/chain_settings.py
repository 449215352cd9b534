"""Chain settings normalization.

Raw chain settings come from hand-written config files, so keys may be ints
or numeric strings and values may hold numbers as strings:

    {"default": {"shards": 1, "target": 1}, 1: {"shards": "5", "target": "10"}}

Normalized form (what gets signed):

    {"default": {"shards": 1, "target": 1}, "1": {"shards": 5, "target": 10}}

Key order is part of the signed bytes, so the source insertion order is kept.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

from agentmanifest.publish.errors import ChainSettingsError

DEFAULT_KEY = "default"

_INT_PATTERN = re.compile(r"^[+-]?\d+$", re.ASCII)
_FLOAT_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$", re.ASCII)

# Integer range orjson can serialize
_MIN_INT = -(2**63)
_MAX_INT = 2**64 - 1

ChainSettings = dict[str, dict[str, Any]]


def normalize_chain_key(key: str | int) -> str:
    """Return the canonical string form of a chain settings key.

    Args:
        key: ``"default"``, a chain id int, or a numeric string.

    Returns:
        ``"default"`` or the chain id rendered in base 10.

    Raises:
        ChainSettingsError: If the key is not ``default`` or a non-negative
            integer chain id.
    """
    if key == DEFAULT_KEY:
        return DEFAULT_KEY
    # bool is an int subclass
    if isinstance(key, bool):
        raise ChainSettingsError(f"invalid chain settings key: {key!r}")
    if isinstance(key, int):
        if key < 0:
            raise ChainSettingsError(f"invalid chain settings key: {key!r}")
        return str(key)
    if isinstance(key, str):
        stripped = key.strip()
        if stripped.isdigit() and stripped.isascii():
            return str(int(stripped))
    raise ChainSettingsError(f"invalid chain settings key: {key!r}")


def coerce_number(value: Any) -> Any:
    """Coerce a numeric string to int or float, pass anything else through.

    Integral strings become ``int`` so they serialize as ``5`` rather than
    ``5.0``. Integers outside the serializable 64-bit range become ``float``.

    Raises:
        ChainSettingsError: If an integer is too large even for a float.
    """
    # bool is an int subclass
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return _fit_int(value)
    if not isinstance(value, str):
        return value
    stripped = value.strip()
    if _INT_PATTERN.match(stripped):
        number = int(stripped)
        if _MIN_INT <= number <= _MAX_INT:
            return number
        real = float(stripped)
        return real if math.isfinite(real) else value
    if _FLOAT_PATTERN.match(stripped):
        real = float(stripped)
        if not math.isfinite(real):
            return value
        if real.is_integer() and _MIN_INT <= real <= _MAX_INT:
            return int(real)
        return real
    return value


def _fit_int(number: int) -> int | float:
    if _MIN_INT <= number <= _MAX_INT:
        return number
    try:
        return float(number)
    except OverflowError:
        raise ChainSettingsError(f"chain settings number out of range: {number}") from None


def normalize_chain_settings(raw: Mapping[str | int, Mapping[str, Any]]) -> ChainSettings:
    """Normalize raw chain settings.

    Args:
        raw: Ordered mapping of chain key to settings record.

    Returns:
        New mapping with canonical keys and numeric-string properties coerced,
        in the same key order. Unknown properties are kept verbatim.

    Raises:
        ChainSettingsError: On an invalid key, or when two keys normalize to
            the same chain id.
    """
    normalized: ChainSettings = {}
    for key, settings in raw.items():
        chain_key = normalize_chain_key(key)
        if chain_key in normalized:
            raise ChainSettingsError(f"duplicate chain settings key: {chain_key}")
        normalized[chain_key] = {name: coerce_number(value) for name, value in settings.items()}
    return normalized
