"""
Exchange gateway tests.

Covers:
  - Authorization gate (operators, destinations)
  - Scenario A: deposit issues approve then deposit; approve failure stops it
  - Scenario B: withdraw to the custody wallet issues only withdraw
  - Scenario C: withdraw to a whitelisted address issues withdraw then transfer
  - Scenario D: revert bytes from approve reach the caller unchanged
  - Non-operators and non-whitelisted destinations cause no downstream calls
"""

import pytest

from vaultgate.config import GatewayConfig
from vaultgate.crypto.abi import compute_function_selector, encode_function_call
from vaultgate.exceptions import (
    ApproveFailed,
    ConfigurationError,
    DestinationNotWhitelisted,
    DownstreamRevert,
    InvalidAmount,
    InvalidIdentity,
    NotAuthorizedOperator,
    OnlyCustodyWallet,
    TransferFailed,
)
from vaultgate.gateway import AuthorizationGate, ExchangeGateway, Operation
from vaultgate.registry import AccessRegistry, RegistryAction

from conftest import (
    CUSTODY,
    EXCHANGE,
    OPERATOR,
    OUTSIDER,
    STRANGER,
    TOKEN,
    WHITELISTED,
    ZERO,
    RecordingWallet,
)

APPROVE = compute_function_selector("approve(address,uint256)")
DEPOSIT = compute_function_selector("deposit(address,uint256)")
WITHDRAW = compute_function_selector("withdraw(address,uint256)")
TRANSFER = compute_function_selector("transfer(address,uint256)")


# ══════════════════════════════════════════════════════════════════════
#  1. AUTHORIZATION GATE
# ══════════════════════════════════════════════════════════════════════

class TestAuthorizationGate:

    @pytest.fixture
    def gate(self):
        registry = AccessRegistry(CUSTODY)
        registry.add_operator(CUSTODY, OPERATOR)
        registry.add_whitelisted(CUSTODY, WHITELISTED)
        return AuthorizationGate(registry)

    def test_operator_passes(self, gate):
        gate.require_operator(OPERATOR)

    @pytest.mark.parametrize("caller", [STRANGER, CUSTODY, WHITELISTED, None, "junk"])
    def test_non_operator_rejected(self, gate, caller):
        with pytest.raises(NotAuthorizedOperator):
            gate.require_operator(caller)

    def test_custody_wallet_is_valid_destination(self, gate):
        gate.require_valid_destination(CUSTODY)
        assert gate.is_valid_destination(CUSTODY)

    def test_whitelisted_is_valid_destination(self, gate):
        gate.require_valid_destination(WHITELISTED)

    @pytest.mark.parametrize("destination", [OUTSIDER, OPERATOR, EXCHANGE, ZERO, None])
    def test_other_destinations_rejected(self, gate, destination):
        with pytest.raises(DestinationNotWhitelisted) as exc:
            gate.require_valid_destination(destination)
        assert exc.value.destination == destination


# ══════════════════════════════════════════════════════════════════════
#  2. CONSTRUCTION
# ══════════════════════════════════════════════════════════════════════

class TestConstruction:

    def test_fixed_references(self, gateway):
        assert gateway.custody_wallet == CUSTODY
        assert gateway.exchange == EXCHANGE
        with pytest.raises(AttributeError):
            gateway.exchange = STRANGER

    @pytest.mark.parametrize("custody, exchange", [(ZERO, EXCHANGE), (CUSTODY, ZERO), (None, EXCHANGE)])
    def test_null_references_rejected(self, wallet, custody, exchange):
        with pytest.raises(InvalidIdentity):
            ExchangeGateway(custody_wallet=custody, exchange=exchange, wallet=wallet)

    def test_from_config(self, wallet):
        config = GatewayConfig.from_dict({"gateway": {"custody_wallet": CUSTODY, "exchange": EXCHANGE}})
        gw = ExchangeGateway.from_config(config, wallet)
        assert gw.custody_wallet == CUSTODY
        assert gw.exchange == EXCHANGE

    def test_from_incomplete_config(self, wallet):
        with pytest.raises(ConfigurationError):
            ExchangeGateway.from_config(GatewayConfig(), wallet)

    def test_to_dict(self, gateway):
        d = gateway.to_dict()
        assert d["exchange"] == EXCHANGE
        assert d["registry"]["operators"] == [OPERATOR]


class TestRegistryCommands:

    def test_commands_delegate_to_registry(self, gateway):
        gateway.add_operator(CUSTODY, STRANGER)
        assert gateway.is_operator(STRANGER)
        gateway.remove_operator(CUSTODY, STRANGER)
        assert not gateway.is_operator(STRANGER)

        gateway.add_whitelisted(CUSTODY, OUTSIDER)
        assert gateway.is_whitelisted(OUTSIDER)
        event = gateway.remove_whitelisted(CUSTODY, OUTSIDER)
        assert event.action is RegistryAction.WHITELIST_REMOVED
        assert not gateway.is_whitelisted(OUTSIDER)

    def test_operator_cannot_whitelist(self, gateway):
        with pytest.raises(OnlyCustodyWallet):
            gateway.add_whitelisted(OPERATOR, OUTSIDER)
        assert not gateway.is_whitelisted(OUTSIDER)


# ══════════════════════════════════════════════════════════════════════
#  3. DEPOSIT (SCENARIOS A, D)
# ══════════════════════════════════════════════════════════════════════

class TestDepositToExchange:

    def test_scenario_a_call_sequence(self, gateway, wallet):
        outcomes = gateway.deposit_to_exchange(OPERATOR, TOKEN, 100)

        assert wallet.selectors == [APPROVE, DEPOSIT]
        (t1, v1, d1, op1), (t2, v2, d2, op2) = wallet.calls
        assert t1 == TOKEN and t2 == EXCHANGE
        assert v1 == v2 == 0
        assert op1 is op2 is Operation.CALL
        assert d1 == encode_function_call("approve(address,uint256)", EXCHANGE, 100)
        assert d2 == encode_function_call("deposit(address,uint256)", TOKEN, 100)
        assert [o.action.value for o in outcomes] == ["approve", "deposit"]

    def test_approve_failure_prevents_deposit(self, gateway, wallet):
        wallet.fail("approve(address,uint256)")

        with pytest.raises(ApproveFailed):
            gateway.deposit_to_exchange(OPERATOR, TOKEN, 100)

        assert wallet.selectors == [APPROVE]

    def test_scenario_d_revert_bytes_passthrough(self, gateway, wallet):
        diagnostic = encode_function_call("Error(string)", "token paused")
        wallet.fail("approve(address,uint256)", diagnostic)

        with pytest.raises(DownstreamRevert) as exc:
            gateway.deposit_to_exchange(OPERATOR, TOKEN, 100)

        assert exc.value.revert_data == diagnostic
        assert exc.value.reason == "token paused"
        assert wallet.selectors == [APPROVE]

    def test_deposit_failure_surfaces(self, gateway, wallet):
        diagnostic = bytes.fromhex("12345678")
        wallet.fail("deposit(address,uint256)", diagnostic)

        with pytest.raises(DownstreamRevert) as exc:
            gateway.deposit_to_exchange(OPERATOR, TOKEN, 100)
        assert exc.value.revert_data == diagnostic
        assert wallet.selectors == [APPROVE, DEPOSIT]

    @pytest.mark.parametrize("caller", [STRANGER, CUSTODY, WHITELISTED])
    def test_non_operator_causes_no_calls(self, gateway, wallet, caller):
        with pytest.raises(NotAuthorizedOperator):
            gateway.deposit_to_exchange(caller, TOKEN, 100)
        assert wallet.calls == []

    def test_removed_operator_rejected(self, gateway, wallet):
        gateway.remove_operator(CUSTODY, OPERATOR)
        with pytest.raises(NotAuthorizedOperator):
            gateway.deposit_to_exchange(OPERATOR, TOKEN, 100)
        assert wallet.calls == []

    def test_invalid_amount_causes_no_calls(self, gateway, wallet):
        with pytest.raises(InvalidAmount):
            gateway.deposit_to_exchange(OPERATOR, TOKEN, -5)
        assert wallet.calls == []


# ══════════════════════════════════════════════════════════════════════
#  4. WITHDRAW (SCENARIOS B, C)
# ══════════════════════════════════════════════════════════════════════

class TestWithdrawTo:

    def test_scenario_b_to_custody_wallet(self, gateway, wallet):
        outcomes = gateway.withdraw_to(OPERATOR, TOKEN, 50, CUSTODY)

        assert wallet.calls == [
            (EXCHANGE, 0, encode_function_call("withdraw(address,uint256)", TOKEN, 50), Operation.CALL),
        ]
        assert len(outcomes) == 1

    def test_scenario_c_to_whitelisted(self, gateway, wallet):
        outcomes = gateway.withdraw_to(OPERATOR, TOKEN, 50, WHITELISTED)

        assert wallet.selectors == [WITHDRAW, TRANSFER]
        assert wallet.calls[0][0] == EXCHANGE
        assert wallet.calls[1][0] == TOKEN
        assert wallet.calls[1][2] == encode_function_call("transfer(address,uint256)", WHITELISTED, 50)
        assert [o.action.value for o in outcomes] == ["withdraw", "transfer"]

    def test_withdraw_failure_prevents_transfer(self, gateway, wallet):
        wallet.fail("withdraw(address,uint256)", encode_function_call("Error(string)", "insufficient"))

        with pytest.raises(DownstreamRevert):
            gateway.withdraw_to(OPERATOR, TOKEN, 50, WHITELISTED)

        assert wallet.selectors == [WITHDRAW]

    def test_silent_transfer_failure(self, gateway, wallet):
        wallet.fail("transfer(address,uint256)")
        with pytest.raises(TransferFailed):
            gateway.withdraw_to(OPERATOR, TOKEN, 50, WHITELISTED)

    @pytest.mark.parametrize("destination", [OUTSIDER, OPERATOR, EXCHANGE, STRANGER])
    def test_destination_not_whitelisted(self, gateway, wallet, destination):
        with pytest.raises(DestinationNotWhitelisted):
            gateway.withdraw_to(OPERATOR, TOKEN, 50, destination)
        assert wallet.calls == []

    def test_removed_destination_rejected(self, gateway, wallet):
        gateway.remove_whitelisted(CUSTODY, WHITELISTED)
        with pytest.raises(DestinationNotWhitelisted):
            gateway.withdraw_to(OPERATOR, TOKEN, 50, WHITELISTED)
        assert wallet.calls == []

    def test_non_operator_checked_first(self, gateway, wallet):
        with pytest.raises(NotAuthorizedOperator):
            gateway.withdraw_to(STRANGER, TOKEN, 50, OUTSIDER)
        assert wallet.calls == []

    def test_mixed_case_custody_destination_skips_transfer(self, wallet):
        custody = "0x" + "ab" * 20
        gw = ExchangeGateway(custody_wallet=custody, exchange=EXCHANGE, wallet=wallet)
        gw.add_operator(custody, OPERATOR)

        gw.withdraw_to(OPERATOR, TOKEN, 1, custody.upper().replace("0X", "0x"))
        assert wallet.selectors == [WITHDRAW]

    def test_fresh_wallet_stub_has_no_calls(self):
        assert RecordingWallet().calls == []
