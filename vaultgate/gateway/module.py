"""
Exchange Gateway

Operator-facing workflows that move funds between the custody wallet and
the exchange:

  deposit_to_exchange:  gate → approve(exchange, amount) on token
                             → deposit(token, amount) on exchange
  withdraw_to:          gate → withdraw(token, amount) on exchange
                             → transfer(destination, amount) on token
                               (skipped when destination is the wallet)

All checks run before the first downstream call. A failing step raises and
no later step is issued; rolling back earlier downstream effects is the
execution environment's job, not the gateway's.
"""

from typing import Any, Dict, List, Optional, TYPE_CHECKING

from ..crypto.address import AddressLike, normalize_address, require_identity
from ..logger import get_logger
from ..registry.access import AccessRegistry, RegistryEvent
from .executor import CustodyWallet, DelegatedExecutor, ExecutionOutcome
from .gate import AuthorizationGate
from .instructions import Instruction, InstructionBuilder

if TYPE_CHECKING:
    from ..config.loader import GatewayConfig

logger = get_logger(__name__)


class ExchangeGateway:
    """
    Authorization gateway between a custody wallet and one exchange.

    The custody wallet and exchange addresses are fixed at construction.
    Operators and whitelisted destinations are managed by the custody
    wallet through the registry commands exposed here.
    """

    def __init__(
        self,
        custody_wallet: AddressLike,
        exchange: AddressLike,
        wallet: CustodyWallet,
    ):
        """
        Args:
            custody_wallet: Address of the custody wallet
            exchange: Address of the exchange counterparty
            wallet: Execution capability of the custody wallet

        Raises:
            InvalidIdentity: If either address is missing, malformed or zero
        """
        self._custody_wallet = require_identity(custody_wallet)
        self._exchange = require_identity(exchange)

        self.registry = AccessRegistry(self._custody_wallet)
        self.gate = AuthorizationGate(self.registry)
        self.builder = InstructionBuilder(self._exchange)
        self.executor = DelegatedExecutor(wallet)

        logger.info(
            f"Gateway ready: custody wallet {self._custody_wallet}, exchange {self._exchange}"
        )

    @classmethod
    def from_config(cls, config: "GatewayConfig", wallet: CustodyWallet) -> "ExchangeGateway":
        """Create a gateway from a loaded configuration."""
        config.validate()
        return cls(
            custody_wallet=config.gateway.custody_wallet,
            exchange=config.gateway.exchange,
            wallet=wallet,
        )

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def custody_wallet(self) -> str:
        return self._custody_wallet

    @property
    def exchange(self) -> str:
        return self._exchange

    def is_operator(self, identity: AddressLike) -> bool:
        return self.registry.is_operator(identity)

    def is_whitelisted(self, identity: AddressLike) -> bool:
        return self.registry.is_whitelisted(identity)

    # ── Registry commands (custody wallet only) ───────────────────────

    def add_operator(self, caller: AddressLike, identity: AddressLike) -> RegistryEvent:
        return self.registry.add_operator(caller, identity)

    def remove_operator(self, caller: AddressLike, identity: AddressLike) -> RegistryEvent:
        return self.registry.remove_operator(caller, identity)

    def add_whitelisted(self, caller: AddressLike, identity: AddressLike) -> RegistryEvent:
        return self.registry.add_whitelisted(caller, identity)

    def remove_whitelisted(self, caller: AddressLike, identity: AddressLike) -> RegistryEvent:
        return self.registry.remove_whitelisted(caller, identity)

    # ── Fund movement (operators only) ────────────────────────────────

    def deposit_to_exchange(
        self,
        caller: AddressLike,
        token: AddressLike,
        amount: int,
    ) -> List[ExecutionOutcome]:
        """
        Approve the exchange for *amount* of *token*, then deposit it.

        Returns:
            Outcomes of the approve and deposit calls, in order

        Raises:
            NotAuthorizedOperator: Caller is not an operator
            DownstreamRevert / ApproveFailed / DepositFailed: A step failed
        """
        self.gate.require_operator(caller)

        # Build both before executing so bad arguments fail with no calls issued
        approve = self.builder.approve(token, amount)
        deposit = self.builder.deposit(token, amount)

        outcomes = [
            self.executor.execute(approve),
            self.executor.execute(deposit),
        ]
        logger.info(f"Deposit: {amount} of {approve.target} to exchange by {normalize_address(caller)}")
        return outcomes

    def withdraw_to(
        self,
        caller: AddressLike,
        token: AddressLike,
        amount: int,
        destination: AddressLike,
    ) -> List[ExecutionOutcome]:
        """
        Withdraw *amount* of *token* from the exchange into the custody
        wallet and, unless the destination is the wallet itself, forward it.

        Returns:
            Outcomes of the withdraw (and transfer) calls, in order

        Raises:
            NotAuthorizedOperator: Caller is not an operator
            DestinationNotWhitelisted: Destination is not allowed
            DownstreamRevert / WithdrawFailed / TransferFailed: A step failed
        """
        self.gate.require_operator(caller)
        self.gate.require_valid_destination(destination)

        destination = normalize_address(destination)
        withdraw = self.builder.withdraw(token, amount)
        transfer: Optional[Instruction] = None
        if destination != self._custody_wallet:
            transfer = self.builder.transfer(token, amount, destination)

        outcomes = [self.executor.execute(withdraw)]
        if transfer is not None:
            outcomes.append(self.executor.execute(transfer))

        logger.info(
            f"Withdraw: {amount} of {normalize_address(token)} to {destination} "
            f"by {normalize_address(caller)}"
        )
        return outcomes

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "custodyWallet": self._custody_wallet,
            "exchange": self._exchange,
            "registry": self.registry.to_dict(),
        }

    def __repr__(self) -> str:
        return f"<ExchangeGateway wallet={self._custody_wallet} exchange={self._exchange}>"
