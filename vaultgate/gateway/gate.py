"""
Authorization Gate

Stateless policy checks consulted before any fund movement.
"""

from typing import Optional

from ..crypto.address import AddressLike
from ..exceptions import DestinationNotWhitelisted, NotAuthorizedOperator
from ..logger import get_logger
from ..registry.access import AccessRegistry

logger = get_logger(__name__)


class AuthorizationGate:
    """Decides whether a caller, and where relevant a destination, may act."""

    def __init__(self, registry: AccessRegistry):
        self._registry = registry

    def require_operator(self, caller: Optional[AddressLike]) -> None:
        if not self._registry.is_operator(caller):
            logger.warning(f"Fund movement rejected: {caller} is not an operator")
            raise NotAuthorizedOperator(caller)

    def is_valid_destination(self, destination: Optional[AddressLike]) -> bool:
        """The custody wallet itself or a whitelisted address."""
        return (
            self._registry.is_custody_wallet(destination)
            or self._registry.is_whitelisted(destination)
        )

    def require_valid_destination(self, destination: Optional[AddressLike]) -> None:
        if not self.is_valid_destination(destination):
            logger.warning(f"Withdrawal rejected: destination {destination} is not whitelisted")
            raise DestinationNotWhitelisted(destination)
