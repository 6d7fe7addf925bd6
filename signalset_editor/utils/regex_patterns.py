"""
Shared regex patterns for turning signalset identifiers into DBC symbols.

This module centralizes the patterns used by the DBC export so message and
signal names are sanitized the same way everywhere.
"""
import re

# DBC symbols: C identifiers
REGEX_DBC_INVALID_CHARS = re.compile(r'[^A-Za-z0-9_]')
REGEX_DBC_LEADING_DIGIT = re.compile(r'^[0-9]')
REGEX_HEX_ADDRESS = re.compile(r'^(?:0[xX])?([0-9A-Fa-f]+)$')

# Leading number of a form field value ('12.5px' -> '12.5')
REGEX_LEADING_FLOAT = re.compile(r'\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')


def to_dbc_symbol(text: str, fallback: str = 'UNNAMED') -> str:
    """Sanitize text into a valid DBC symbol (letters, digits, underscore)."""
    symbol = REGEX_DBC_INVALID_CHARS.sub('_', str(text or '')).strip('_')
    if not symbol:
        return fallback
    if REGEX_DBC_LEADING_DIGIT.match(symbol):
        symbol = f"_{symbol}"
    return symbol


def parse_hex_address(text: str) -> int:
    """Parse a header/address string such as '7E0' or '0x18DAF110'.

    Raises:
        ValueError: If the text is not a hexadecimal number
    """
    match = REGEX_HEX_ADDRESS.match(str(text).strip())
    if not match:
        raise ValueError(f"not a hexadecimal address: {text!r}")
    return int(match.group(1), 16)
