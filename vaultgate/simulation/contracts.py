"""
Simulated Downstream Contracts

In-process stand-ins for the token and exchange contracts the gateway
calls. They decode real calldata, keep integer balances in base units and
signal failure by raising ContractRevert, which the simulated custody
wallet turns into revert bytes.

  - SimulatedToken    : ERC-20 balances, allowances, approve / transfer /
                        transferFrom
  - SimulatedExchange : deposit pulls tokens with transferFrom, withdraw
                        pays them back with transfer
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple, TYPE_CHECKING

from eth_abi import encode

from ..constants import (
    ERC20_APPROVE_SIGNATURE,
    ERC20_TRANSFER_SIGNATURE,
    ERROR_STRING_SIGNATURE,
    EXCHANGE_DEPOSIT_SIGNATURE,
    EXCHANGE_WITHDRAW_SIGNATURE,
)
from ..crypto.abi import compute_function_selector, decode_call_arguments, encode_function_call
from ..crypto.address import AddressLike, normalize_address, require_identity
from ..exceptions import InvalidInstruction
from ..logger import get_logger

if TYPE_CHECKING:
    from .chain import SimulatedChain

logger = get_logger(__name__)

TRANSFER_FROM_SIGNATURE = "transferFrom(address,address,uint256)"
BALANCE_OF_SIGNATURE = "balanceOf(address)"

_TRUE = encode(["bool"], [True])


# ══════════════════════════════════════════════════════════════════════
#  REVERTS
# ══════════════════════════════════════════════════════════════════════

class ContractRevert(Exception):
    """
    Raised by a simulated contract to abort the current call.

    ``revert_data`` is what the caller receives: an ``Error(string)``
    payload for a reason, or empty bytes for a bare revert.
    """

    def __init__(self, reason: Optional[str] = None, revert_data: Optional[bytes] = None):
        if revert_data is None:
            revert_data = b"" if reason is None else encode_function_call(ERROR_STRING_SIGNATURE, reason)
        self.reason = reason
        self.revert_data = revert_data
        super().__init__(reason or "revert")


@dataclass(frozen=True)
class ContractCall:
    """Record of one call dispatched to a simulated contract."""
    sender: str
    target: str
    signature: str
    arguments: Tuple[Any, ...]
    timestamp: float = field(default_factory=time.time)


# ══════════════════════════════════════════════════════════════════════
#  BASE CONTRACT
# ══════════════════════════════════════════════════════════════════════

class SimulatedContract:
    """Selector-dispatched contract living on a SimulatedChain."""

    def __init__(self, address: AddressLike):
        self.address = require_identity(address)
        self.chain: Optional["SimulatedChain"] = None
        self._methods: Dict[bytes, Tuple[str, Callable[..., bytes]]] = {}

    def _expose(self, signature: str, handler: Callable[..., bytes]) -> None:
        self._methods[compute_function_selector(signature)] = (signature, handler)

    def handle_call(self, sender: str, data: bytes) -> bytes:
        selector = bytes(data[:4])
        if selector not in self._methods:
            # Unknown function and no fallback: bare revert
            raise ContractRevert()

        signature, handler = self._methods[selector]
        try:
            arguments = decode_call_arguments(signature, data)
        except InvalidInstruction as e:
            raise ContractRevert() from e
        if self.chain is not None:
            self.chain.record(ContractCall(sender, self.address, signature, arguments))
        return handler(sender, *arguments)

    def state(self) -> Dict[str, Any]:
        """Mutable state captured by chain snapshots."""
        return {}

    def restore(self, state: Dict[str, Any]) -> None:
        pass


# ══════════════════════════════════════════════════════════════════════
#  TOKEN
# ══════════════════════════════════════════════════════════════════════

class SimulatedToken(SimulatedContract):
    """ERC-20 token with integer balances in base units."""

    def __init__(self, address: AddressLike, symbol: str = "TKN"):
        super().__init__(address)
        self.symbol = symbol
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}  # (owner, spender)

        self._expose(ERC20_APPROVE_SIGNATURE, self._approve)
        self._expose(ERC20_TRANSFER_SIGNATURE, self._transfer)
        self._expose(TRANSFER_FROM_SIGNATURE, self._transfer_from)
        self._expose(BALANCE_OF_SIGNATURE, self._balance_of)

    # ── Read-only views ───────────────────────────────────────────────

    def balance_of(self, owner: AddressLike) -> int:
        return self._balances.get(normalize_address(owner), 0)

    def allowance(self, owner: AddressLike, spender: AddressLike) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    # ── Setup ─────────────────────────────────────────────────────────

    def mint(self, recipient: AddressLike, amount: int) -> None:
        recipient = normalize_address(recipient)
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        logger.debug(f"Mint: {amount} {self.symbol} → {recipient}")

    # ── Entry points ──────────────────────────────────────────────────

    def _approve(self, owner: str, spender: str, amount: int) -> bytes:
        self._allowances[(owner, normalize_address(spender))] = amount
        return _TRUE

    def _transfer(self, sender: str, recipient: str, amount: int) -> bytes:
        self._move(sender, normalize_address(recipient), amount)
        return _TRUE

    def _transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bytes:
        owner = normalize_address(owner)
        allowed = self._allowances.get((owner, spender), 0)
        if allowed < amount:
            raise ContractRevert("ERC20: insufficient allowance")
        self._allowances[(owner, spender)] = allowed - amount
        self._move(owner, normalize_address(recipient), amount)
        return _TRUE

    def _balance_of(self, sender: str, owner: str) -> bytes:
        return encode(["uint256"], [self.balance_of(owner)])

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        balance = self._balances.get(sender, 0)
        if balance < amount:
            raise ContractRevert("ERC20: transfer amount exceeds balance")
        self._balances[sender] = balance - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount

    # ── Snapshots ─────────────────────────────────────────────────────

    def state(self) -> Dict[str, Any]:
        return {"balances": dict(self._balances), "allowances": dict(self._allowances)}

    def restore(self, state: Dict[str, Any]) -> None:
        self._balances = dict(state["balances"])
        self._allowances = dict(state["allowances"])

    def __repr__(self) -> str:
        return f"<SimulatedToken {self.symbol} at {self.address}>"


# ══════════════════════════════════════════════════════════════════════
#  EXCHANGE
# ══════════════════════════════════════════════════════════════════════

class SimulatedExchange(SimulatedContract):
    """Custodial exchange ledger keyed by (account, token)."""

    def __init__(self, address: AddressLike):
        super().__init__(address)
        self._credits: Dict[Tuple[str, str], int] = {}
        self.paused = False

        self._expose(EXCHANGE_DEPOSIT_SIGNATURE, self._deposit)
        self._expose(EXCHANGE_WITHDRAW_SIGNATURE, self._withdraw)

    def credit_of(self, account: AddressLike, token: AddressLike) -> int:
        return self._credits.get((normalize_address(account), normalize_address(token)), 0)

    def _token(self, token: str) -> SimulatedToken:
        contract = self.chain.get_contract(token) if self.chain is not None else None
        if not isinstance(contract, SimulatedToken):
            raise ContractRevert("Exchange: unsupported token")
        return contract

    def _deposit(self, sender: str, token: str, amount: int) -> bytes:
        if self.paused:
            raise ContractRevert("Exchange: paused")
        token = normalize_address(token)
        self._token(token)._transfer_from(self.address, sender, self.address, amount)
        self._credits[(sender, token)] = self._credits.get((sender, token), 0) + amount
        return b""

    def _withdraw(self, sender: str, token: str, amount: int) -> bytes:
        if self.paused:
            raise ContractRevert("Exchange: paused")
        token = normalize_address(token)
        credit = self._credits.get((sender, token), 0)
        if credit < amount:
            raise ContractRevert("Exchange: insufficient balance")
        self._credits[(sender, token)] = credit - amount
        self._token(token)._transfer(self.address, sender, amount)
        return b""

    def state(self) -> Dict[str, Any]:
        return {"credits": dict(self._credits), "paused": self.paused}

    def restore(self, state: Dict[str, Any]) -> None:
        self._credits = dict(state["credits"])
        self.paused = state["paused"]

    def __repr__(self) -> str:
        return f"<SimulatedExchange at {self.address}>"
