"""Canonical serialization for event records and diagnostic reports."""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Any

from eth_utils.crypto import keccak

from core.base_types import Address, TokenAmount

# Largest integer a JSON consumer can represent exactly as a double.
_MAX_SAFE_INT = 2**53 - 1


def _normalize(obj: Any) -> Any:
    if isinstance(obj, float):
        raise ValueError("Floating point values are not allowed")

    if isinstance(obj, bool) or obj is None or isinstance(obj, str):
        return obj

    if isinstance(obj, Enum):
        return obj.name

    if isinstance(obj, int):
        if -_MAX_SAFE_INT <= obj <= _MAX_SAFE_INT:
            return obj
        return str(obj)

    if isinstance(obj, Address):
        return obj.checksum

    if isinstance(obj, TokenAmount):
        return {"raw": str(obj.raw), "decimals": obj.decimals, "symbol": obj.symbol}

    if isinstance(obj, (bytes, bytearray)):
        return "0x" + bytes(obj).hex()

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            field.name: _normalize(getattr(obj, field.name))
            for field in dataclasses.fields(obj)
        }

    if isinstance(obj, dict):
        normalized = {}
        for key, value in obj.items():
            if isinstance(key, Address):
                key = key.checksum
            if not isinstance(key, str):
                raise TypeError("All dictionary keys must be strings")
            normalized[key] = _normalize(value)
        return normalized

    if isinstance(obj, (list, tuple, set, frozenset)):
        items = [_normalize(item) for item in obj]
        if isinstance(obj, (set, frozenset)):
            items.sort(key=lambda item: json.dumps(item, sort_keys=True))
        return items

    raise TypeError(f"Unsupported type for serialization: {type(obj).__name__}")


class CanonicalSerializer:
    """
    Produces deterministic JSON for event records and reports.

    Rules:
    - Keys sorted alphabetically (recursive)
    - No whitespace
    - Integers outside the double-safe range are emitted as decimal strings
    - Bytes as 0x-hex, addresses checksummed, enums by name
    """

    @staticmethod
    def to_primitive(obj: Any) -> Any:
        return _normalize(obj)

    @staticmethod
    def serialize(obj: Any) -> bytes:
        """Returns canonical bytes representation."""
        payload = json.dumps(
            _normalize(obj),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
        return payload.encode("utf-8")

    @staticmethod
    def hash(obj: Any) -> bytes:
        """Returns keccak256 of canonical serialization."""
        return keccak(CanonicalSerializer.serialize(obj))
