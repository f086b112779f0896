"""
VaultGate Crypto Module

Provides:
- Address normalisation and validation
- Function selectors and ABI calldata encoding
- Revert payload decoding
"""

from .address import (
    address_to_bytes,
    is_zero_address,
    normalize_address,
    require_identity,
    try_normalize_address,
)
from .abi import (
    compute_function_selector,
    decode_call_arguments,
    decode_function_call,
    decode_revert_reason,
    encode_function_call,
    parse_argument_types,
)

__all__ = [
    # Addresses
    "address_to_bytes",
    "is_zero_address",
    "normalize_address",
    "require_identity",
    "try_normalize_address",
    # ABI
    "compute_function_selector",
    "decode_call_arguments",
    "decode_function_call",
    "decode_revert_reason",
    "encode_function_call",
    "parse_argument_types",
]
