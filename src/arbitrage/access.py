"""Ownable, Pausable and ReentrancyGuard, with their modifiers as decorators."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional, TypeVar

from chain.contract import Contract
from chain.errors import Revert
from core.base_types import ZERO_ADDRESS, Address

from .events import OwnershipTransferred, Paused, Unpaused

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_NOT_ENTERED = 1
_ENTERED = 2


def only_owner(fn: F) -> F:
    @functools.wraps(fn)
    def wrapper(self: "Ownable", *args: Any, **kwargs: Any) -> Any:
        self._check_owner()
        return fn(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def when_not_paused(fn: F) -> F:
    @functools.wraps(fn)
    def wrapper(self: "Pausable", *args: Any, **kwargs: Any) -> Any:
        if self._paused:
            raise Revert.with_reason("Pausable: paused")
        return fn(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def non_reentrant(fn: F) -> F:
    @functools.wraps(fn)
    def wrapper(self: "ReentrancyGuard", *args: Any, **kwargs: Any) -> Any:
        if self._status == _ENTERED:
            raise Revert.with_reason("ReentrancyGuard: reentrant call")
        self._status = _ENTERED
        try:
            return fn(self, *args, **kwargs)
        finally:
            self._status = _NOT_ENTERED

    return wrapper  # type: ignore[return-value]


class Ownable(Contract):
    def __init__(self) -> None:
        super().__init__()
        self._owner: Address = ZERO_ADDRESS

    def on_deploy(self, deployer: Address) -> None:
        super().on_deploy(deployer)
        self._transfer_ownership(deployer)

    def owner(self) -> Address:
        return self._owner

    @only_owner
    def transfer_ownership(self, new_owner: Address) -> None:
        if new_owner.is_zero:
            raise Revert.with_reason("Ownable: new owner is the zero address")
        self._transfer_ownership(new_owner)

    @only_owner
    def renounce_ownership(self) -> None:
        self._transfer_ownership(ZERO_ADDRESS)

    def _check_owner(self) -> None:
        if self.msg_sender != self._owner:
            raise Revert.with_reason("Ownable: caller is not the owner")

    def _transfer_ownership(self, new_owner: Address) -> None:
        previous = self._owner
        self._owner = new_owner
        self._require_chain().emit(OwnershipTransferred(previous, new_owner))
        logger.info("ownership of %s: %s -> %s", self.address, previous, new_owner)


class Pausable(Contract):
    def __init__(self) -> None:
        super().__init__()
        self._paused = False

    def paused(self) -> bool:
        return self._paused

    def _pause(self, reason: Optional[str] = None) -> None:
        if self._paused:
            raise Revert.with_reason("Pausable: paused")
        self._paused = True
        self._require_chain().emit(Paused(self.msg_sender))
        logger.warning("%s paused%s", self.address, f": {reason}" if reason else "")

    def _unpause(self) -> None:
        if not self._paused:
            raise Revert.with_reason("Pausable: not paused")
        self._paused = False
        self._require_chain().emit(Unpaused(self.msg_sender))
        logger.info("%s unpaused", self.address)


class ReentrancyGuard(Contract):
    def __init__(self) -> None:
        super().__init__()
        self._status = _NOT_ENTERED
