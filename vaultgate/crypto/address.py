"""
VaultGate Address Module

Normalisation and validation of 20-byte account addresses. Every address
that enters the gateway is converted to its EIP-55 checksum form so that
registry membership and destination comparisons are independent of the
caller's hex casing.
"""

from typing import Optional, Union

from eth_utils import (
    is_address,
    is_checksum_address,
    is_checksum_formatted_address,
    to_canonical_address,
    to_checksum_address,
)

from ..constants import ZERO_ADDRESS
from ..exceptions import InvalidIdentity

AddressLike = Union[str, bytes]


def normalize_address(address: Optional[AddressLike]) -> str:
    """
    Convert an address to EIP-55 checksum format.

    Args:
        address: Hex string (with or without checksum) or 20 raw bytes

    Returns:
        Checksum address with 0x prefix

    Raises:
        InvalidIdentity: If the address is missing or malformed
    """
    if address is None:
        raise InvalidIdentity(address, "missing address")

    if isinstance(address, (bytes, bytearray)):
        if len(address) != 20:
            raise InvalidIdentity(address, f"expected 20 bytes, got {len(address)}")
        address = "0x" + bytes(address).hex()

    if not isinstance(address, str) or not address:
        raise InvalidIdentity(address, "missing address")

    if address.startswith(("0x", "0X")):
        address = "0x" + address[2:]
    else:
        address = "0x" + address

    if not is_address(address):
        raise InvalidIdentity(address, "malformed address")

    # Mixed-case input must carry a valid checksum; all-lower/upper is accepted
    if is_checksum_formatted_address(address) and not is_checksum_address(address):
        raise InvalidIdentity(address, "bad checksum")

    return to_checksum_address(address)


def is_zero_address(address: Optional[AddressLike]) -> bool:
    """Check if a well-formed address is the all-zero address."""
    return try_normalize_address(address) == ZERO_ADDRESS


def require_identity(address: Optional[AddressLike]) -> str:
    """
    Normalise an address that must identify a real account.

    Rejects missing, malformed and zero addresses with InvalidIdentity.
    """
    normalized = normalize_address(address)
    if is_zero_address(normalized):
        raise InvalidIdentity(address)
    return normalized


def try_normalize_address(address: Optional[AddressLike]) -> Optional[str]:
    """Normalise an address, returning None instead of raising."""
    try:
        return normalize_address(address)
    except InvalidIdentity:
        return None


def address_to_bytes(address: AddressLike) -> bytes:
    """Return the 20 canonical bytes of an address."""
    return bytes(to_canonical_address(normalize_address(address)))
