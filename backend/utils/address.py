"""
TRON address conversion

Contract calls return addresses as 20-byte EVM-style values (0x...) or as
TRON hex (41 + 20 bytes). The application works with base58check strings
(T...).
"""
import base58

TRON_PREFIX = b'\x41'
ZERO_BODY = b'\x00' * 20


def _address_bytes(address: str) -> bytes:
    """Return the 21-byte TRON address (0x41 prefix + body)."""
    value = address.strip()
    if value.startswith('T') and len(value) == 34:
        raw = base58.b58decode_check(value)
        if len(raw) != 21 or raw[:1] != TRON_PREFIX:
            raise ValueError(f"Not a TRON address: {address}")
        return raw

    if value.lower().startswith('0x'):
        value = value[2:]
    raw = bytes.fromhex(value)
    if len(raw) == 20:
        return TRON_PREFIX + raw
    if len(raw) == 21 and raw[:1] == TRON_PREFIX:
        return raw
    raise ValueError(f"Unrecognized address encoding: {address}")


def to_base58(address: str) -> str:
    """Convert 0x/41-prefixed hex (or base58) to a base58check T-address."""
    return base58.b58encode_check(_address_bytes(address)).decode('ascii')


def to_hex(address: str) -> str:
    """Convert an address to TRON hex form (41...)."""
    return _address_bytes(address).hex()


def is_zero_address(address: str) -> bool:
    """True for an empty or all-zero address (unset contract mapping slot)."""
    if not address:
        return True
    try:
        return _address_bytes(address)[1:] == ZERO_BODY
    except ValueError:
        return False
