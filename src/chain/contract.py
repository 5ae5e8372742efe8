"""Base class for contracts living on the simulated chain."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from core.base_types import Address

from .errors import Revert

if TYPE_CHECKING:
    from .state import Chain


class Contract:
    """
    A deployed contract.

    Every attribute listed in ``_journal_fields`` is contract storage: it is
    snapshotted before each call frame and restored if the frame reverts.
    Anything else (configuration passed to ``__init__``) is treated as code.
    """

    _journal_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self) -> None:
        self.address: Optional[Address] = None
        self.chain: Optional["Chain"] = None

    def on_deploy(self, deployer: Address) -> None:
        """Constructor body; runs once the contract has an address."""

    def dispatch(self, data: bytes) -> bytes:
        """Entry point for raw calls. Contracts without a fallback revert."""
        raise Revert(b"")

    def snapshot(self) -> dict[str, Any]:
        return {name: copy.deepcopy(getattr(self, name)) for name in self._journal_fields}

    def restore(self, state: dict[str, Any]) -> None:
        for name, value in state.items():
            setattr(self, name, value)

    @property
    def msg_sender(self) -> Address:
        return self._require_chain().msg_sender

    def _require_chain(self) -> "Chain":
        if self.chain is None or self.address is None:
            raise RuntimeError(f"{type(self).__name__} is not deployed")
        return self.chain

    def __repr__(self) -> str:
        return f"<{type(self).__name__} at {self.address}>"
