"""
VaultGate Gateway Package

Provides:
  - AuthorizationGate  : operator / destination policy checks
  - InstructionBuilder : typed actions and their exact calldata
  - DelegatedExecutor  : forwarding through the custody wallet
  - ExchangeGateway    : deposit_to_exchange / withdraw_to workflows
"""

from .gate import AuthorizationGate
from .instructions import (
    Action,
    ActionKind,
    ApproveAction,
    DepositAction,
    Instruction,
    InstructionBuilder,
    Operation,
    TransferAction,
    WithdrawAction,
    decode_instruction,
)
from .executor import (
    CustodyWallet,
    DelegatedExecutor,
    ExecutionOutcome,
)
from .module import ExchangeGateway

__all__ = [
    "AuthorizationGate",
    # Instructions
    "Action",
    "ActionKind",
    "ApproveAction",
    "DepositAction",
    "Instruction",
    "InstructionBuilder",
    "Operation",
    "TransferAction",
    "WithdrawAction",
    "decode_instruction",
    # Execution
    "CustodyWallet",
    "DelegatedExecutor",
    "ExecutionOutcome",
    # Workflows
    "ExchangeGateway",
]
