"""
Contract ABI Helpers

Ethereum-compatible calldata encoding and decoding for the gateway's
downstream calls, plus best-effort decoding of revert payloads.
"""

from typing import Any, List, Optional, Tuple

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import keccak

from ..constants import (
    ERROR_STRING_SIGNATURE,
    PANIC_CODES,
    PANIC_SIGNATURE,
    SELECTOR_LENGTH,
)
from ..exceptions import InvalidInstruction


def compute_function_selector(function_signature: str) -> bytes:
    """
    Compute Ethereum function selector (first 4 bytes of keccak256(sig)).

    Args:
        function_signature: Function signature like "transfer(address,uint256)"

    Returns:
        4-byte function selector
    """
    sig_hash = keccak(text=function_signature)
    return sig_hash[:SELECTOR_LENGTH]


def parse_argument_types(function_signature: str) -> List[str]:
    """
    Extract argument types from a flat signature.

    E.g., "transfer(address,uint256)" -> ['address', 'uint256']
    """
    try:
        args_start = function_signature.index('(') + 1
        args_end = function_signature.rindex(')')
    except ValueError:
        raise InvalidInstruction(f"Malformed function signature: {function_signature!r}")

    arg_types_str = function_signature[args_start:args_end]
    if not arg_types_str:
        return []
    return [t.strip() for t in arg_types_str.split(',')]


def encode_function_call(function_signature: str, *args: Any) -> bytes:
    """
    Encode function call data (selector + ABI-encoded arguments).

    Args:
        function_signature: Function signature
        *args: Function arguments

    Returns:
        Encoded call data
    """
    selector = compute_function_selector(function_signature)
    arg_types = parse_argument_types(function_signature)

    if len(arg_types) != len(args):
        raise InvalidInstruction(
            f"{function_signature} expects {len(arg_types)} arguments, got {len(args)}"
        )

    encoded_args = encode(arg_types, list(args)) if arg_types else b''
    return selector + encoded_args


def decode_function_call(data: bytes) -> Tuple[bytes, bytes]:
    """
    Split call data into selector and encoded arguments.

    Args:
        data: Encoded function call data

    Returns:
        Tuple of (selector, arguments)
    """
    if len(data) < SELECTOR_LENGTH:
        return b'', b''

    return bytes(data[:SELECTOR_LENGTH]), bytes(data[SELECTOR_LENGTH:])


def decode_call_arguments(function_signature: str, data: bytes) -> Tuple[Any, ...]:
    """
    Decode the arguments of call data produced for *function_signature*.

    Raises:
        InvalidInstruction: If the selector does not match or the arguments
            cannot be decoded
    """
    selector, args = decode_function_call(data)
    expected = compute_function_selector(function_signature)
    if selector != expected:
        raise InvalidInstruction(
            f"Selector 0x{selector.hex()} does not match {function_signature} (0x{expected.hex()})"
        )

    arg_types = parse_argument_types(function_signature)
    try:
        return tuple(decode(arg_types, args))
    except DecodingError as e:
        raise InvalidInstruction(f"Cannot decode {function_signature} arguments: {e}") from e


def decode_revert_reason(data: bytes) -> Optional[str]:
    """
    Best-effort decoding of a revert payload.

    Recognises the standard ``Error(string)`` and ``Panic(uint256)`` forms.
    Anything else (custom errors, raw bytes) yields None; callers keep the
    raw payload in that case.
    """
    if not data or len(data) < SELECTOR_LENGTH:
        return None

    selector, args = decode_function_call(bytes(data))
    try:
        if selector == compute_function_selector(ERROR_STRING_SIGNATURE):
            (message,) = decode(["string"], args)
            return message
        if selector == compute_function_selector(PANIC_SIGNATURE):
            (code,) = decode(["uint256"], args)
            description = PANIC_CODES.get(code, "unknown panic code")
            return f"Panic(0x{code:02x}): {description}"
    except (DecodingError, ValueError):
        return None

    return None
