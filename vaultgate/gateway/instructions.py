"""
Instruction Builder

Every downstream call made on behalf of the custody wallet is one of four
typed actions. Each action knows its target contract and produces the exact
calldata (4-byte selector followed by ABI-encoded arguments) that the token
or exchange contract dispatches on:

    Action    Target     Calldata
    ───────── ────────── ─────────────────────────────────────
    Approve   token      approve(exchange, amount)
    Deposit   exchange   deposit(token, amount)
    Withdraw  exchange   withdraw(token, amount)
    Transfer  token      transfer(destination, amount)

The resulting Instruction is always a zero-value CALL. DELEGATE_CALL would
run foreign code in the custody wallet's storage context and is refused at
construction time.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, ClassVar, Dict, Union

from ..constants import (
    ERC20_APPROVE_SIGNATURE,
    ERC20_TRANSFER_SIGNATURE,
    EXCHANGE_DEPOSIT_SIGNATURE,
    EXCHANGE_WITHDRAW_SIGNATURE,
    INSTRUCTION_VALUE,
    UINT256_MAX,
)
from ..crypto.abi import decode_call_arguments, encode_function_call
from ..crypto.address import AddressLike, normalize_address, require_identity
from ..exceptions import InvalidAmount, InvalidInstruction


class Operation(IntEnum):
    """Execution mode understood by the custody wallet."""
    CALL = 0
    DELEGATE_CALL = 1


class ActionKind(Enum):
    APPROVE = "approve"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER = "transfer"


def _check_amount(amount: Any) -> int:
    # bool is an int subclass but never a meaningful amount
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"Amount must be an integer in base units, got {amount!r}")
    if amount < 0 or amount > UINT256_MAX:
        raise InvalidAmount(f"Amount {amount} is outside the uint256 range")
    return amount


# ══════════════════════════════════════════════════════════════════════
#  ACTIONS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ApproveAction:
    """Allow *spender* to pull *amount* of *token* from the custody wallet."""
    token: str
    spender: str
    amount: int

    kind: ClassVar[ActionKind] = ActionKind.APPROVE
    signature: ClassVar[str] = ERC20_APPROVE_SIGNATURE

    def __post_init__(self):
        object.__setattr__(self, "token", require_identity(self.token))
        object.__setattr__(self, "spender", require_identity(self.spender))
        _check_amount(self.amount)

    def target(self, exchange: str) -> str:
        return self.token

    def encode(self) -> bytes:
        return encode_function_call(self.signature, self.spender, self.amount)


@dataclass(frozen=True)
class DepositAction:
    """Credit *amount* of *token* from the custody wallet to the exchange."""
    token: str
    amount: int

    kind: ClassVar[ActionKind] = ActionKind.DEPOSIT
    signature: ClassVar[str] = EXCHANGE_DEPOSIT_SIGNATURE

    def __post_init__(self):
        object.__setattr__(self, "token", require_identity(self.token))
        _check_amount(self.amount)

    def target(self, exchange: str) -> str:
        return exchange

    def encode(self) -> bytes:
        return encode_function_call(self.signature, self.token, self.amount)


@dataclass(frozen=True)
class WithdrawAction:
    """Debit *amount* of *token* from the exchange back to the custody wallet."""
    token: str
    amount: int

    kind: ClassVar[ActionKind] = ActionKind.WITHDRAW
    signature: ClassVar[str] = EXCHANGE_WITHDRAW_SIGNATURE

    def __post_init__(self):
        object.__setattr__(self, "token", require_identity(self.token))
        _check_amount(self.amount)

    def target(self, exchange: str) -> str:
        return exchange

    def encode(self) -> bytes:
        return encode_function_call(self.signature, self.token, self.amount)


@dataclass(frozen=True)
class TransferAction:
    """Send *amount* of *token* from the custody wallet to *destination*."""
    token: str
    destination: str
    amount: int

    kind: ClassVar[ActionKind] = ActionKind.TRANSFER
    signature: ClassVar[str] = ERC20_TRANSFER_SIGNATURE

    def __post_init__(self):
        object.__setattr__(self, "token", require_identity(self.token))
        object.__setattr__(self, "destination", require_identity(self.destination))
        _check_amount(self.amount)

    def target(self, exchange: str) -> str:
        return self.token

    def encode(self) -> bytes:
        return encode_function_call(self.signature, self.destination, self.amount)


Action = Union[ApproveAction, DepositAction, WithdrawAction, TransferAction]


# ══════════════════════════════════════════════════════════════════════
#  INSTRUCTION
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Instruction:
    """
    One downstream call, consumed immediately by the executor.

    Attributes:
        target:    Contract the custody wallet will call
        data:      Calldata (selector + ABI-encoded arguments)
        action:    Which action produced the calldata
        value:     Native value attached (always 0)
        operation: Always Operation.CALL
    """
    target: str
    data: bytes
    action: ActionKind
    value: int = INSTRUCTION_VALUE
    operation: Operation = field(default=Operation.CALL)

    def __post_init__(self):
        if self.operation != Operation.CALL:
            raise InvalidInstruction("Only CALL instructions may be executed; DELEGATE_CALL is forbidden")
        if self.value != INSTRUCTION_VALUE:
            raise InvalidInstruction(f"Instructions carry no value, got {self.value}")
        object.__setattr__(self, "target", require_identity(self.target))
        object.__setattr__(self, "data", bytes(self.data))

    @property
    def selector(self) -> bytes:
        return self.data[:4]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "to": self.target,
            "value": self.value,
            "data": "0x" + self.data.hex(),
            "operation": self.operation.name,
        }


# ══════════════════════════════════════════════════════════════════════
#  BUILDER
# ══════════════════════════════════════════════════════════════════════

class InstructionBuilder:
    """Builds instructions against the fixed exchange counterparty."""

    def __init__(self, exchange: AddressLike):
        self._exchange = require_identity(exchange)

    @property
    def exchange(self) -> str:
        return self._exchange

    def build(self, action: Action) -> Instruction:
        return Instruction(
            target=action.target(self._exchange),
            data=action.encode(),
            action=action.kind,
        )

    def approve(self, token: AddressLike, amount: int) -> Instruction:
        return self.build(ApproveAction(token=token, spender=self._exchange, amount=amount))

    def deposit(self, token: AddressLike, amount: int) -> Instruction:
        return self.build(DepositAction(token=token, amount=amount))

    def withdraw(self, token: AddressLike, amount: int) -> Instruction:
        return self.build(WithdrawAction(token=token, amount=amount))

    def transfer(self, token: AddressLike, amount: int, destination: AddressLike) -> Instruction:
        return self.build(TransferAction(token=token, destination=destination, amount=amount))


def decode_instruction(instruction: Instruction) -> Action:
    """Recover the typed action an instruction was built from."""
    kind = instruction.action

    if kind is ActionKind.APPROVE:
        spender, amount = decode_call_arguments(ApproveAction.signature, instruction.data)
        return ApproveAction(token=instruction.target, spender=normalize_address(spender), amount=amount)
    if kind is ActionKind.DEPOSIT:
        token, amount = decode_call_arguments(DepositAction.signature, instruction.data)
        return DepositAction(token=normalize_address(token), amount=amount)
    if kind is ActionKind.WITHDRAW:
        token, amount = decode_call_arguments(WithdrawAction.signature, instruction.data)
        return WithdrawAction(token=normalize_address(token), amount=amount)
    if kind is ActionKind.TRANSFER:
        destination, amount = decode_call_arguments(TransferAction.signature, instruction.data)
        return TransferAction(
            token=instruction.target, destination=normalize_address(destination), amount=amount
        )

    raise InvalidInstruction(f"Unknown action kind: {kind!r}")
