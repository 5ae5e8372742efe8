"""
In-memory world state with call frames and atomic rollback.

Execution is single-threaded and sequential, like a block: a top-level
``transact`` runs to completion or reverts as a unit. Nested calls each get
their own frame; a reverting frame restores every contract's journaled
storage and truncates the event log back to where the frame started.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional, TypeVar

from eth_abi import encode as abi_encode
from eth_utils.crypto import keccak

from core.base_types import Address

from .contract import Contract
from .errors import ChainError, OutOfGas, Revert
from .events import Event, LogEntry

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Event)


@dataclass
class CallFrame:
    sender: Address
    target: Address
    gas_limit: Optional[int] = None
    gas_used: int = 0


@dataclass
class CallResult:
    """Outcome of ``try_call``/``raw_call``: a value or the revert payload."""

    success: bool
    value: Any = None
    revert_data: bytes = b""
    error: Optional[Revert] = None
    gas_used: int = 0


@dataclass
class _Snapshot:
    storage: dict[Address, dict[str, Any]] = field(default_factory=dict)
    log_length: int = 0


class Chain:
    """Simulated EVM-style chain: accounts, blocks, frames and event logs."""

    def __init__(
        self,
        chain_id: int = 43114,
        block_number: int = 1,
        timestamp: Optional[int] = None,
    ):
        if chain_id <= 0:
            raise ValueError("chain_id must be positive")
        self.chain_id = chain_id
        self.block_number = block_number
        self.timestamp = timestamp if timestamp is not None else int(time.time())
        self._contracts: dict[Address, Contract] = {}
        self._logs: list[LogEntry] = []
        self._frames: list[CallFrame] = []
        self._deploy_nonce = 0

    # -- accounts ---------------------------------------------------------

    def deploy(self, contract: Contract, deployer: Address) -> Address:
        if contract.address is not None:
            raise ValueError(f"{contract!r} is already deployed")
        self._deploy_nonce += 1
        digest = keccak(
            abi_encode(["address", "uint256"], [deployer.checksum, self._deploy_nonce])
        )
        address = Address.from_bytes(digest)
        contract.address = address
        contract.chain = self
        self._contracts[address] = contract
        try:
            self._run_frame(deployer, address, None, contract.on_deploy, (deployer,), {})
        except Exception:
            del self._contracts[address]
            contract.address = None
            contract.chain = None
            raise
        logger.debug("deployed %s at %s", type(contract).__name__, address)
        return address

    def code_at(self, address: Address) -> Optional[Contract]:
        return self._contracts.get(address)

    def mine(self, blocks: int = 1, seconds: int = 2) -> None:
        if blocks < 1:
            raise ValueError("blocks must be >= 1")
        self.block_number += blocks
        self.timestamp += seconds * blocks

    # -- calls ------------------------------------------------------------

    @property
    def msg_sender(self) -> Address:
        if not self._frames:
            raise ChainError("msg.sender is only defined inside a call")
        return self._frames[-1].sender

    def transact(self, sender: Address, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Top-level transaction from an externally owned account."""
        if self._frames:
            raise ChainError("transact() cannot be nested; use call()")
        return self.call(sender, fn, *args, **kwargs)

    def call(
        self,
        sender: Address,
        fn: Callable[..., Any],
        *args: Any,
        gas: Optional[int] = None,
        **kwargs: Any,
    ) -> Any:
        """Call a bound contract method; a revert rolls the frame back and propagates."""
        target = _target_of(fn)
        return self._run_frame(sender, target, gas, fn, args, kwargs)

    def try_call(
        self,
        sender: Address,
        fn: Callable[..., Any],
        *args: Any,
        gas: Optional[int] = None,
        **kwargs: Any,
    ) -> CallResult:
        """``try``/``catch``: the frame is rolled back and the failure returned."""
        target = _target_of(fn)
        frame_gas: list[int] = []
        try:
            value = self._run_frame(sender, target, gas, fn, args, kwargs, frame_gas)
        except Revert as exc:
            return CallResult(
                success=False,
                revert_data=exc.data,
                error=exc,
                gas_used=frame_gas[0] if frame_gas else 0,
            )
        return CallResult(success=True, value=value, gas_used=frame_gas[0] if frame_gas else 0)

    def raw_call(
        self,
        sender: Address,
        target: Address,
        data: bytes,
        gas: Optional[int] = None,
    ) -> CallResult:
        """Low-level ``call`` with opaque calldata. Calls to codeless accounts succeed."""
        contract = self._contracts.get(target)
        if contract is None:
            return CallResult(success=True, value=b"")
        frame_gas: list[int] = []
        try:
            value = self._run_frame(
                sender, target, gas, contract.dispatch, (bytes(data),), {}, frame_gas
            )
        except Revert as exc:
            return CallResult(
                success=False,
                revert_data=exc.data,
                error=exc,
                gas_used=frame_gas[0] if frame_gas else 0,
            )
        return CallResult(success=True, value=value, gas_used=frame_gas[0] if frame_gas else 0)

    def use_gas(self, amount: int) -> None:
        """Charge gas to every active frame; the tightest ceiling trips first."""
        if amount < 0:
            raise ValueError("gas amount must be non-negative")
        for frame in self._frames:
            frame.gas_used += amount
        for frame in reversed(self._frames):
            if frame.gas_limit is not None and frame.gas_used > frame.gas_limit:
                raise OutOfGas(frame.gas_limit, frame.gas_used)

    # -- logs -------------------------------------------------------------

    def emit(self, event: Event) -> None:
        if not self._frames:
            raise ChainError("events can only be emitted inside a call")
        entry = LogEntry(
            address=self._frames[-1].target,
            block_number=self.block_number,
            log_index=len(self._logs),
            event=event,
        )
        self._logs.append(entry)

    @property
    def logs(self) -> list[LogEntry]:
        return list(self._logs)

    def events(
        self, event_type: Optional[type[E]] = None, address: Optional[Address] = None
    ) -> list[E]:
        return [entry.event for entry in self._iter_logs(event_type, address)]

    def _iter_logs(
        self, event_type: Optional[type[Event]], address: Optional[Address]
    ) -> Iterator[LogEntry]:
        for entry in self._logs:
            if event_type is not None and not isinstance(entry.event, event_type):
                continue
            if address is not None and entry.address != address:
                continue
            yield entry

    # -- internals --------------------------------------------------------

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            storage={addr: c.snapshot() for addr, c in self._contracts.items()},
            log_length=len(self._logs),
        )

    def _restore(self, snap: _Snapshot) -> None:
        for addr, state in snap.storage.items():
            self._contracts[addr].restore(state)
        del self._logs[snap.log_length:]

    def _run_frame(
        self,
        sender: Address,
        target: Address,
        gas: Optional[int],
        fn: Callable[..., Any],
        args: tuple,
        kwargs: dict,
        gas_out: Optional[list[int]] = None,
    ) -> Any:
        snap = self._snapshot()
        frame = CallFrame(sender=sender, target=target, gas_limit=gas)
        self._frames.append(frame)
        try:
            return fn(*args, **kwargs)
        except Exception:
            self._restore(snap)
            raise
        finally:
            self._frames.pop()
            if gas_out is not None:
                gas_out.append(frame.gas_used)


def _target_of(fn: Callable[..., Any]) -> Address:
    owner = getattr(fn, "__self__", None)
    address = getattr(owner, "address", None)
    if not isinstance(address, Address):
        raise ChainError(f"{fn!r} is not a method of a deployed contract")
    return address
