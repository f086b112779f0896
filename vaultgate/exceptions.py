"""
VaultGate Exceptions

Custom exception classes for the custody gateway.
"""

from typing import Optional


class VaultGateException(Exception):
    """Base exception for VaultGate."""
    pass


# ══════════════════════════════════════════════════════════════════════
#  AUTHORIZATION
# ══════════════════════════════════════════════════════════════════════

class AuthorizationError(VaultGateException):
    """Caller or destination is not permitted."""
    pass


class OnlyCustodyWallet(AuthorizationError):
    """Registry mutation attempted by a caller other than the custody wallet."""

    def __init__(self, caller):
        self.caller = caller
        super().__init__(f"Only the custody wallet may call this (caller={caller})")


class NotAuthorizedOperator(AuthorizationError):
    """Fund movement attempted by a caller that is not an operator."""

    def __init__(self, caller):
        self.caller = caller
        super().__init__(f"{caller} is not an authorized operator")


class DestinationNotWhitelisted(AuthorizationError):
    """Withdrawal to a destination that is neither the wallet nor whitelisted."""

    def __init__(self, destination):
        self.destination = destination
        super().__init__(f"Destination {destination} is not whitelisted")


# ══════════════════════════════════════════════════════════════════════
#  INPUT
# ══════════════════════════════════════════════════════════════════════

class InputError(VaultGateException):
    """Invalid argument supplied to a gateway operation."""
    pass


class InvalidIdentity(InputError):
    """Null, zero or malformed address."""

    def __init__(self, identity, reason: str = "null or zero address"):
        self.identity = identity
        super().__init__(f"Invalid identity {identity!r}: {reason}")


class InvalidAmount(InputError):
    """Amount outside the uint256 range."""
    pass


class InvalidInstruction(InputError):
    """Instruction violates the call-only, zero-value invariant or cannot be decoded."""
    pass


# ══════════════════════════════════════════════════════════════════════
#  DOWNSTREAM EXECUTION
# ══════════════════════════════════════════════════════════════════════

class ExecutionError(VaultGateException):
    """A forwarded instruction did not succeed."""
    pass


class DownstreamRevert(ExecutionError):
    """
    Downstream call failed and returned diagnostic data.

    ``revert_data`` holds the exact bytes produced by the failing call.
    ``reason`` is a best-effort decoding (``Error(string)`` / ``Panic(uint256)``)
    and is ``None`` when the payload is not a standard revert.
    """

    def __init__(self, revert_data: bytes, action: Optional[str] = None):
        from .crypto.abi import decode_revert_reason

        self.revert_data = bytes(revert_data)
        self.action = action
        self.reason = decode_revert_reason(self.revert_data)
        detail = self.reason if self.reason is not None else "0x" + self.revert_data.hex()
        super().__init__(detail)


class ActionFailed(ExecutionError):
    """Downstream call failed without returning any data."""

    action: str = ""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or f"{self.action} failed")


class ApproveFailed(ActionFailed):
    """Token approval failed without a reason."""
    action = "approve"


class DepositFailed(ActionFailed):
    """Exchange deposit failed without a reason."""
    action = "deposit"


class WithdrawFailed(ActionFailed):
    """Exchange withdrawal failed without a reason."""
    action = "withdraw"


class TransferFailed(ActionFailed):
    """Token transfer failed without a reason."""
    action = "transfer"


# ══════════════════════════════════════════════════════════════════════
#  CONFIGURATION
# ══════════════════════════════════════════════════════════════════════

class ConfigurationError(VaultGateException):
    """Configuration error."""
    pass
