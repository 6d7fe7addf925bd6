"""
Byte-layout resolution for signal definitions.

Maps each signal's ``(bix, len)`` bit range onto the payload bytes it
touches. A byte with more than one occupant means signals share storage;
whether that is an intentional sub-byte packing or a definition error is
left to the caller (see ``find_overlaps``).
"""
import logging
from typing import Any, List, Optional, Sequence, Tuple

from signalset_editor.constants import BITS_PER_BYTE, BIT_OFFSET_KEY, BIT_LENGTH_KEY
from signalset_editor.exceptions import LayoutPreconditionError
from signalset_editor.models.signal import Signal

logger = logging.getLogger(__name__)

ByteMap = List[List[Signal]]


def _check_bit_value(signal: Signal, key: str, value: Any) -> Optional[str]:
    """Return an error message if ``value`` is not a usable non-negative bit count."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return f"Signal '{signal.id}': {key} must be a number, got {value!r}"
    if value < 0:
        return f"Signal '{signal.id}': {key} must be >= 0, got {value}"
    if isinstance(value, float) and not value.is_integer():
        return f"Signal '{signal.id}': {key} must be a whole number of bits, got {value}"
    return None


def validate_signal_layout(signals: Sequence[Signal]) -> List[str]:
    """Check every signal's bit range.

    Returns:
        List of error messages (empty if every range can be laid out)
    """
    errors = []
    for signal in signals:
        bit_range = signal.bit_range
        if bit_range is None:
            continue
        for key, value in zip((BIT_OFFSET_KEY, BIT_LENGTH_KEY), bit_range):
            error = _check_bit_value(signal, key, value)
            if error:
                errors.append(error)
    return errors


def _checked_ranges(signals: Sequence[Signal]) -> List[Tuple[Signal, int, int]]:
    ranges = []
    for signal in signals:
        bit_range = signal.bit_range
        if bit_range is None:
            continue
        for key, value in zip((BIT_OFFSET_KEY, BIT_LENGTH_KEY), bit_range):
            error = _check_bit_value(signal, key, value)
            if error:
                logger.warning(f"resolve_byte_map: {error}")
                raise LayoutPreconditionError(error, signal_id=signal.id, field=key, value=value)
        ranges.append((signal, int(bit_range[0]), int(bit_range[1])))
    return ranges


def signal_byte_span(signal: Signal) -> Optional[Tuple[int, int]]:
    """Return the inclusive (start_byte, end_byte) a signal occupies.

    Returns None for signals without a ``fmt`` or with a zero length.

    Raises:
        LayoutPreconditionError: If the signal's bit range is invalid
    """
    ranges = _checked_ranges([signal])
    if not ranges:
        return None
    _, offset, length = ranges[0]
    if length == 0:
        return None
    return offset // BITS_PER_BYTE, (offset + length - 1) // BITS_PER_BYTE


def resolve_byte_map(signals: Sequence[Signal]) -> ByteMap:
    """Compute which signals occupy each payload byte.

    The result has exactly ``ceil(max(bix + len) / 8)`` entries (0 when no
    signal has a ``fmt``). Entry ``i`` lists the signals touching byte ``i``
    in input order. Signals without a ``fmt`` are ignored; missing ``bix``
    or ``len`` count as 0 and a zero-length signal occupies nothing.

    Args:
        signals: Signals of one command

    Returns:
        One occupant list per byte, byte 0 first

    Raises:
        LayoutPreconditionError: If a bit offset or length is negative,
            fractional or not a number
    """
    ranges = _checked_ranges(signals)
    max_bit = max((offset + length for _, offset, length in ranges), default=0)
    byte_count = -(-max_bit // BITS_PER_BYTE)
    byte_map: ByteMap = [[] for _ in range(byte_count)]

    for signal, offset, length in ranges:
        if length == 0:
            continue
        start_byte = offset // BITS_PER_BYTE
        end_byte = (offset + length - 1) // BITS_PER_BYTE
        for index in range(start_byte, end_byte + 1):
            byte_map[index].append(signal)

    logger.debug(f"resolve_byte_map: {len(ranges)} laid-out signals over {byte_count} bytes")
    return byte_map


def find_overlaps(byte_map: ByteMap) -> List[int]:
    """Return indices of bytes shared by more than one signal."""
    return [index for index, occupants in enumerate(byte_map) if len(occupants) > 1]


def occupied_byte_count(byte_map: ByteMap) -> int:
    """Return how many bytes have at least one occupant."""
    return sum(1 for occupants in byte_map if occupants)
