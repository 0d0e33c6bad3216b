"""Validation utilities for the DeFi trust engine.

This module provides utilities for validating Solana addresses and batch
inputs before they reach the engine.
"""

import re
from typing import Iterable, List

import base58

from defi_trust.utils.errors import ValidationError

# Solana public key validation pattern (base58 format)
PUBKEY_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

PUBKEY_LENGTH = 32


def validate_public_key(pubkey: str) -> bool:
    """Validate a Solana public key.

    The key must use the base58 alphabet and decode to exactly 32 bytes.

    Args:
        pubkey: The public key to validate

    Returns:
        True if the public key is valid, False otherwise
    """
    if not pubkey or not isinstance(pubkey, str):
        return False
    if not PUBKEY_PATTERN.match(pubkey):
        return False
    try:
        return len(base58.b58decode(pubkey)) == PUBKEY_LENGTH
    except ValueError:
        return False


def require_address(address: str, field_name: str = "address") -> str:
    """Reject empty or non-string addresses.

    Only the shape of the argument is checked; the value is returned as given.

    Raises:
        ValidationError: If the address is empty or not a string
    """
    if not isinstance(address, str) or not address:
        raise ValidationError(
            f"Invalid {field_name}: {address!r}",
            details={"field": field_name}
        )
    return address


def validate_solana_address(address: str, field_name: str = "address") -> str:
    """Validate a Solana address and raise an exception if invalid.

    Args:
        address: The address to validate
        field_name: Name of the field for the error message

    Returns:
        The address, unchanged

    Raises:
        ValidationError: If the address is invalid
    """
    require_address(address, field_name)
    if not validate_public_key(address):
        raise ValidationError(
            f"Invalid Solana {field_name}: {address}",
            details={"field": field_name, "value": address}
        )
    return address


def require_addresses(addresses: Iterable[str], field_name: str = "addresses") -> List[str]:
    """Check a batch of addresses and drop duplicates, keeping first-seen order.

    Individual entries are not validated here; each one is checked when it
    is evaluated so a single bad entry cannot sink the batch.

    Raises:
        ValidationError: If the batch is empty or is a bare string
    """
    if isinstance(addresses, str):
        raise ValidationError(
            f"{field_name} must be a list of addresses",
            details={"field": field_name}
        )
    unique = list(dict.fromkeys(addresses or []))
    if not unique:
        raise ValidationError(
            f"{field_name} must not be empty",
            details={"field": field_name}
        )
    return unique
