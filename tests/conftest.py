"""
Shared fixtures for the VaultGate test suite.

Addresses are digit-only so their EIP-55 checksum form equals the
lower-case form, which keeps expected calldata readable.
"""

from typing import Dict, List, Tuple

import pytest

from vaultgate.crypto.abi import compute_function_selector
from vaultgate.gateway import ExchangeGateway, Operation
from vaultgate.simulation import (
    SimulatedChain,
    SimulatedCustodyWallet,
    SimulatedExchange,
    SimulatedToken,
)

CUSTODY = "0x" + "11" * 20
EXCHANGE = "0x" + "22" * 20
TOKEN = "0x" + "33" * 20
OPERATOR = "0x" + "44" * 20
STRANGER = "0x" + "55" * 20
WHITELISTED = "0x" + "66" * 20
OUTSIDER = "0x" + "77" * 20
ZERO = "0x" + "00" * 20


class RecordingWallet:
    """Custody wallet stub that records every forwarded call."""

    def __init__(self):
        self.calls: List[Tuple[str, int, bytes, Operation]] = []
        self._failures: Dict[bytes, bytes] = {}
        self.return_data = b""

    def fail(self, signature: str, revert_data: bytes = b"") -> None:
        """Make every call to *signature* fail with *revert_data*."""
        self._failures[compute_function_selector(signature)] = revert_data

    def execute_as_wallet(self, target, value, data, operation):
        self.calls.append((target, value, bytes(data), operation))
        selector = bytes(data[:4])
        if selector in self._failures:
            return False, self._failures[selector]
        return True, self.return_data

    @property
    def selectors(self) -> List[bytes]:
        return [data[:4] for _, _, data, _ in self.calls]


# ══════════════════════════════════════════════════════════════════════
#  FIXTURES
# ══════════════════════════════════════════════════════════════════════

@pytest.fixture
def wallet():
    return RecordingWallet()


@pytest.fixture
def gateway(wallet):
    """Gateway with one operator and one whitelisted destination."""
    gw = ExchangeGateway(custody_wallet=CUSTODY, exchange=EXCHANGE, wallet=wallet)
    gw.add_operator(CUSTODY, OPERATOR)
    gw.add_whitelisted(CUSTODY, WHITELISTED)
    return gw


@pytest.fixture
def chain():
    """Simulated chain with a token and exchange; the custody wallet holds 1000."""
    ch = SimulatedChain()
    token = SimulatedToken(TOKEN, symbol="USDC")
    ch.deploy(token)
    ch.deploy(SimulatedExchange(EXCHANGE))
    token.mint(CUSTODY, 1000)
    return ch


@pytest.fixture
def simulated_gateway(chain):
    gw = ExchangeGateway(
        custody_wallet=CUSTODY,
        exchange=EXCHANGE,
        wallet=SimulatedCustodyWallet(chain, CUSTODY),
    )
    gw.add_operator(CUSTODY, OPERATOR)
    gw.add_whitelisted(CUSTODY, WHITELISTED)
    return gw
