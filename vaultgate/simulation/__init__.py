"""
VaultGate Simulation Package

In-process collaborators for dry runs and tests:
  - SimulatedChain          : contract host with per-call revert and atomic()
  - SimulatedCustodyWallet  : execute_as_wallet on top of the chain
  - SimulatedToken          : ERC-20 token
  - SimulatedExchange       : deposit / withdraw counterparty
"""

from .contracts import (
    ContractCall,
    ContractRevert,
    SimulatedContract,
    SimulatedExchange,
    SimulatedToken,
)
from .chain import (
    SimulatedChain,
    SimulatedCustodyWallet,
)

__all__ = [
    "ContractCall",
    "ContractRevert",
    "SimulatedContract",
    "SimulatedExchange",
    "SimulatedToken",
    "SimulatedChain",
    "SimulatedCustodyWallet",
]
