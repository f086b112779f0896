"""
Simulated Execution Environment

SimulatedChain hosts the simulated contracts and provides the two
guarantees the gateway relies on from its environment:

  - Per-call revert: a call that reverts leaves no state change behind
  - atomic(): serializes a unit of work and restores the pre-operation
    snapshot if anything inside it raises

SimulatedCustodyWallet exposes the custody wallet's execution capability
on top of the chain.
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..constants import ERROR_STRING_SIGNATURE
from ..crypto.abi import encode_function_call
from ..crypto.address import AddressLike, require_identity, try_normalize_address
from ..gateway.instructions import Operation
from ..logger import get_logger
from .contracts import ContractCall, ContractRevert, SimulatedContract

logger = get_logger(__name__)


class SimulatedChain:
    """Address-indexed set of simulated contracts."""

    def __init__(self) -> None:
        self._contracts: Dict[str, SimulatedContract] = {}
        self._calls: List[ContractCall] = []
        self._lock = threading.RLock()

    # ── Contracts ─────────────────────────────────────────────────────

    def deploy(self, contract: SimulatedContract) -> SimulatedContract:
        if contract.address in self._contracts:
            raise ValueError(f"Contract already deployed at {contract.address}")
        contract.chain = self
        self._contracts[contract.address] = contract
        logger.debug(f"Deployed {contract!r}")
        return contract

    def get_contract(self, address: AddressLike) -> Optional[SimulatedContract]:
        normalized = try_normalize_address(address)
        return self._contracts.get(normalized) if normalized else None

    # ── Call trace ────────────────────────────────────────────────────

    def record(self, call: ContractCall) -> None:
        self._calls.append(call)

    @property
    def calls(self) -> List[ContractCall]:
        return list(self._calls)

    # ── Execution ─────────────────────────────────────────────────────

    def call(self, sender: AddressLike, target: AddressLike, data: bytes) -> bytes:
        """
        Dispatch calldata from *sender* to *target*.

        Calls to addresses without code succeed with empty return data.

        Raises:
            ContractRevert: The call reverted; its state changes are undone
        """
        sender = require_identity(sender)
        contract = self.get_contract(target)
        if contract is None:
            return b""

        with self._lock:
            snapshot = self.take_snapshot()
            try:
                return contract.handle_call(sender, bytes(data))
            except ContractRevert:
                self.restore_snapshot(snapshot)
                raise

    @contextmanager
    def atomic(self) -> Iterator["SimulatedChain"]:
        """Run a unit of work serially; roll back all contract state on error."""
        with self._lock:
            snapshot = self.take_snapshot()
            try:
                yield self
            except BaseException:
                self.restore_snapshot(snapshot)
                logger.debug("Unit of work aborted, state restored")
                raise

    # ── Snapshot / restore ────────────────────────────────────────────

    def take_snapshot(self) -> Dict[str, Any]:
        """Capture current state of every contract."""
        return {address: c.state() for address, c in self._contracts.items()}

    def restore_snapshot(self, snapshot: Dict[str, Any]) -> None:
        for address, state in snapshot.items():
            self._contracts[address].restore(state)

    def __repr__(self) -> str:
        return f"<SimulatedChain contracts={len(self._contracts)} calls={len(self._calls)}>"


class SimulatedCustodyWallet:
    """
    Custody wallet execution capability backed by a SimulatedChain.

    Quorum and signing are out of scope: every instruction handed to
    execute_as_wallet is executed as if already approved.
    """

    def __init__(self, chain: SimulatedChain, address: AddressLike):
        self.chain = chain
        self.address = require_identity(address)
        self.executions: List[Tuple[str, int, bytes, Operation]] = []

    def execute_as_wallet(
        self,
        target: str,
        value: int,
        data: bytes,
        operation: Operation,
    ) -> Tuple[bool, bytes]:
        self.executions.append((target, value, bytes(data), operation))

        if operation != Operation.CALL:
            return False, encode_function_call(ERROR_STRING_SIGNATURE, "Wallet: delegate call disabled")
        if value != 0:
            return False, encode_function_call(ERROR_STRING_SIGNATURE, "Wallet: value transfer disabled")

        try:
            return True, self.chain.call(self.address, target, data)
        except ContractRevert as e:
            return False, e.revert_data

    def __repr__(self) -> str:
        return f"<SimulatedCustodyWallet {self.address}>"
