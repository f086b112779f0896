"""
Delegated Executor

Forwards instructions to the custody wallet and interprets the result.

The custody wallet reports ``(success, data)``. Three cases are
distinguished:

  - success            → ExecutionOutcome carrying the returned data
  - failure with data  → DownstreamRevert carrying those exact bytes
  - failure, no data   → ApproveFailed / DepositFailed / WithdrawFailed /
                          TransferFailed, matching the attempted action

No retry or recovery happens here; any raised error aborts the enclosing
operation.
"""

from typing import Any, Dict, Protocol, Tuple, Type

from ..exceptions import (
    ActionFailed,
    ApproveFailed,
    DepositFailed,
    DownstreamRevert,
    InvalidInstruction,
    TransferFailed,
    WithdrawFailed,
)
from ..logger import get_logger
from .instructions import ActionKind, Instruction, Operation

logger = get_logger(__name__)


FAILURE_ERRORS: Dict[ActionKind, Type[ActionFailed]] = {
    ActionKind.APPROVE: ApproveFailed,
    ActionKind.DEPOSIT: DepositFailed,
    ActionKind.WITHDRAW: WithdrawFailed,
    ActionKind.TRANSFER: TransferFailed,
}


# ---------------------------------------------------------------------------
# Custody wallet interface (Protocol for structural typing)
# ---------------------------------------------------------------------------

class CustodyWallet(Protocol):
    """Execution capability exposed by the custody wallet."""

    def execute_as_wallet(
        self,
        target: str,
        value: int,
        data: bytes,
        operation: Operation,
    ) -> Tuple[bool, bytes]: ...


# ---------------------------------------------------------------------------
# Execution outcome
# ---------------------------------------------------------------------------

class ExecutionOutcome:
    """Result of a successfully executed instruction."""

    __slots__ = ("instruction", "return_data")

    def __init__(self, instruction: Instruction, return_data: bytes = b""):
        self.instruction = instruction
        self.return_data = return_data

    @property
    def action(self) -> ActionKind:
        return self.instruction.action

    def to_dict(self) -> Dict[str, Any]:
        return {
            "instruction": self.instruction.to_dict(),
            "returnData": "0x" + self.return_data.hex(),
        }

    def __repr__(self) -> str:
        return f"<ExecutionOutcome {self.action.value} -> {self.instruction.target}>"


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------

class DelegatedExecutor:
    """Runs instructions through the custody wallet's execution capability."""

    def __init__(self, wallet: CustodyWallet):
        self._wallet = wallet

    @property
    def wallet(self) -> CustodyWallet:
        return self._wallet

    def execute(self, instruction: Instruction) -> ExecutionOutcome:
        """
        Execute one instruction as a zero-value CALL from the custody wallet.

        Raises:
            DownstreamRevert: The call failed and returned diagnostic data
            ActionFailed: The call failed without returning any data
        """
        # Instruction enforces this on construction; re-check what is forwarded
        if instruction.operation != Operation.CALL or instruction.value != 0:
            raise InvalidInstruction("Refusing to forward a non-CALL or value-bearing instruction")

        logger.debug(
            f"Forwarding {instruction.action.value} to {instruction.target} "
            f"selector=0x{instruction.selector.hex()}"
        )

        success, data = self._wallet.execute_as_wallet(
            instruction.target,
            0,
            instruction.data,
            Operation.CALL,
        )
        data = bytes(data or b"")

        if success:
            return ExecutionOutcome(instruction, data)

        if data:
            error = DownstreamRevert(data, action=instruction.action.value)
            logger.warning(
                f"{instruction.action.value} on {instruction.target} reverted: {error}"
            )
            raise error

        logger.warning(f"{instruction.action.value} on {instruction.target} failed without reason")
        raise FAILURE_ERRORS[instruction.action]()
