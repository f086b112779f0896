"""
Access Registry

Owns the two authorization sets of the gateway:
  - Operators: identities allowed to move funds to and from the exchange
  - Whitelisted destinations: where withdrawn funds may be sent

Key Properties:
  - Custody Wallet Control: only the custody wallet can add or remove entries
  - Idempotent: re-adding or re-removing leaves the set unchanged
  - Unconditional Notifications: every accepted command emits an event,
    including commands that do not change state
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Set

from ..crypto.address import AddressLike, require_identity, try_normalize_address
from ..exceptions import OnlyCustodyWallet
from ..logger import get_logger

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

class RegistryAction(Enum):
    """Registry mutation performed by the custody wallet."""
    OPERATOR_ADDED = "OperatorAdded"
    OPERATOR_REMOVED = "OperatorRemoved"
    WHITELIST_ADDED = "WhitelistAdded"
    WHITELIST_REMOVED = "WhitelistRemoved"


@dataclass(frozen=True)
class RegistryEvent:
    """Emitted on every accepted registry command."""
    action: RegistryAction
    identity: str
    changed: bool
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.action.value,
            "identity": self.identity,
            "changed": self.changed,
            "timestamp": self.timestamp,
        }


# ══════════════════════════════════════════════════════════════════════
#  ACCESS REGISTRY
# ══════════════════════════════════════════════════════════════════════

class AccessRegistry:
    """
    Operator and destination allowlists controlled by the custody wallet.

    Both sets start empty. They are readable by anyone and mutable only
    through the four commands below, each of which takes the address of
    the caller issuing it.
    """

    def __init__(self, custody_wallet: AddressLike):
        """
        Args:
            custody_wallet: Address of the custody wallet (fixed for life)

        Raises:
            InvalidIdentity: If the address is missing, malformed or zero
        """
        self._custody_wallet = require_identity(custody_wallet)
        self._operators: Set[str] = set()
        self._whitelisted: Set[str] = set()
        self._events: List[RegistryEvent] = []

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def custody_wallet(self) -> str:
        return self._custody_wallet

    @property
    def operators(self) -> FrozenSet[str]:
        return frozenset(self._operators)

    @property
    def whitelisted(self) -> FrozenSet[str]:
        return frozenset(self._whitelisted)

    @property
    def events(self) -> List[RegistryEvent]:
        return list(self._events)

    def is_operator(self, identity: Optional[AddressLike]) -> bool:
        normalized = try_normalize_address(identity)
        return normalized is not None and normalized in self._operators

    def is_whitelisted(self, identity: Optional[AddressLike]) -> bool:
        normalized = try_normalize_address(identity)
        return normalized is not None and normalized in self._whitelisted

    def is_custody_wallet(self, identity: Optional[AddressLike]) -> bool:
        return try_normalize_address(identity) == self._custody_wallet

    # ── Guards ────────────────────────────────────────────────────────

    def _require_custody_wallet(self, caller: Optional[AddressLike]) -> None:
        if not self.is_custody_wallet(caller):
            logger.warning(f"Registry command rejected: caller {caller} is not the custody wallet")
            raise OnlyCustodyWallet(caller)

    # ── Commands ──────────────────────────────────────────────────────

    def add_operator(self, caller: AddressLike, identity: AddressLike) -> RegistryEvent:
        """Authorize *identity* to trigger fund movements."""
        return self._set_membership(
            caller, identity, self._operators, True, RegistryAction.OPERATOR_ADDED
        )

    def remove_operator(self, caller: AddressLike, identity: AddressLike) -> RegistryEvent:
        """Revoke an operator."""
        return self._set_membership(
            caller, identity, self._operators, False, RegistryAction.OPERATOR_REMOVED
        )

    def add_whitelisted(self, caller: AddressLike, identity: AddressLike) -> RegistryEvent:
        """Allow withdrawals to *identity*."""
        return self._set_membership(
            caller, identity, self._whitelisted, True, RegistryAction.WHITELIST_ADDED
        )

    def remove_whitelisted(self, caller: AddressLike, identity: AddressLike) -> RegistryEvent:
        """Disallow withdrawals to *identity*."""
        return self._set_membership(
            caller, identity, self._whitelisted, False, RegistryAction.WHITELIST_REMOVED
        )

    def _set_membership(
        self,
        caller: AddressLike,
        identity: AddressLike,
        members: Set[str],
        present: bool,
        action: RegistryAction,
    ) -> RegistryEvent:
        self._require_custody_wallet(caller)
        normalized = require_identity(identity)

        changed = (normalized in members) != present
        if present:
            members.add(normalized)
        else:
            members.discard(normalized)

        event = RegistryEvent(action=action, identity=normalized, changed=changed)
        self._events.append(event)
        if changed:
            logger.info(f"{action.name}: {normalized}")
        else:
            logger.info(f"{action.name}: {normalized} (no state change)")
        return event

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "custodyWallet": self._custody_wallet,
            "operators": sorted(self._operators),
            "whitelisted": sorted(self._whitelisted),
            "eventCount": len(self._events),
        }

    def __repr__(self) -> str:
        return (
            f"<AccessRegistry operators={len(self._operators)} "
            f"whitelisted={len(self._whitelisted)}>"
        )
