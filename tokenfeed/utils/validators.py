"""
User input validation.

Solana addresses are checked with actual base58 decoding instead of regex:
- base58 alphabet (no 0, O, I, l characters)
- decode to exactly 32 bytes
- typically 32-44 characters when encoded

Network names are resolved against the supported Network set,
accepting a few common aliases.
"""

import base58

from tokenfeed.core.exceptions import ValidationError
from tokenfeed.core.models import Network

NETWORK_ALIASES = {
    "sol": Network.SOLANA,
    "eth": Network.ETHEREUM,
    "bnb": Network.BSC,
    "matic": Network.POLYGON,
    "arb": Network.ARBITRUM,
    "avax": Network.AVALANCHE,
}


def validate_solana_address(address: str) -> tuple[bool, str | None]:
    """
    Validate a Solana token address.

    Performs actual base58 decoding to verify the address is valid.
    This is more reliable than regex because it catches invalid
    characters and wrong decoded lengths.

    Args:
        address: String to validate as Solana address

    Returns:
        Tuple of (is_valid, error_message)
        - (True, None) if address is valid
        - (False, "error description") if invalid

    Examples:
        >>> validate_solana_address("So11111111111111111111111111111111111111112")
        (True, None)

        >>> validate_solana_address("")
        (False, 'Address is empty')
    """
    # Check empty input
    if not address:
        return False, "Address is empty"

    # Check for whitespace
    if address != address.strip():
        return False, "Address contains whitespace"

    # Quick length check (Solana addresses are 32-44 chars)
    if len(address) < 32 or len(address) > 44:
        return False, f"Invalid address length: {len(address)} chars (expected 32-44)"

    # Try to decode base58
    try:
        decoded = base58.b58decode(address)
    except ValueError:
        # base58 library raises ValueError for invalid characters
        return False, "Invalid base58 encoding"

    # Verify decoded length is exactly 32 bytes
    if len(decoded) != 32:
        return False, f"Invalid length: expected 32 bytes, got {len(decoded)}"

    return True, None


def is_valid_solana_address(address: str) -> bool:
    """Simple boolean check for Solana address validity."""
    valid, _ = validate_solana_address(address)
    return valid


def parse_network(name: str) -> Network:
    """
    Resolve a user-typed network name.

    Args:
        name: Network id or alias ("solana", "sol", "eth", ...)

    Returns:
        Network

    Raises:
        ValidationError: Unknown network
    """
    key = name.strip().lower()

    if key in NETWORK_ALIASES:
        return NETWORK_ALIASES[key]

    try:
        return Network(key)
    except ValueError:
        supported = ", ".join(network.value for network in Network)
        raise ValidationError(
            message=f"Unknown network. Supported: {supported}",
            technical_message=f"Unknown network: {name!r}",
        ) from None
