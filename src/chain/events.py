"""Event base type and the log entries the chain records."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import ClassVar

from eth_utils.crypto import keccak

from core.base_types import Address


@dataclass(frozen=True)
class Event:
    """
    Base for emitted events.

    Subclasses are frozen dataclasses whose fields mirror the Solidity event
    parameters in order; ``signature`` is the canonical event signature.
    """

    signature: ClassVar[str] = ""

    @classmethod
    def topic(cls) -> bytes:
        return keccak(text=cls.signature)

    @property
    def name(self) -> str:
        return type(self).__name__

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class LogEntry:
    address: Address
    block_number: int
    log_index: int
    event: Event

    def to_record(self) -> dict:
        return {
            "address": self.address,
            "block_number": self.block_number,
            "log_index": self.log_index,
            "event": self.event.name,
            "topic": self.event.topic(),
            "args": self.event.as_dict(),
        }
