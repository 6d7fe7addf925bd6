"""
DBC Export Service for turning signalset commands into a CAN database.

Each command becomes one cantools message on its response address, and each
laid-out signal becomes a big-endian cantools signal with the command's
scaling. The database is built directly from cantools objects; DBC text is
rendered from it with ``Database.as_dbc_string``.
"""
import logging
from typing import Dict, List, Optional, Set

from cantools.database.can import Database, Message
from cantools.database.can import Signal as DbcSignal
from cantools.database.conversion import BaseConversion
from cantools.database.errors import Error as CantoolsError
from cantools.database.utils import sawtooth_to_network_bitnum

from signalset_editor.constants import CAN_ID_MAX_STANDARD, CAN_ID_MAX_EXTENDED, SIGNED_KEY
from signalset_editor.exceptions import DbcExportError, LayoutPreconditionError
from signalset_editor.models import Command, Signal, SignalSet
from signalset_editor.utils.byte_layout import resolve_byte_map
from signalset_editor.utils.regex_patterns import parse_hex_address, to_dbc_symbol

logger = logging.getLogger(__name__)


def _unique(name: str, taken: Set[str]) -> str:
    candidate = name
    i = 1
    while candidate in taken:
        candidate = f"{name}_{i}"
        i += 1
    taken.add(candidate)
    return candidate


def dbc_start_bit(bit_offset: int) -> int:
    """Convert a payload bit index (MSB of byte 0 = 0) to a big-endian DBC start bit.

    Signalset bit offsets count in network order, DBC counts each byte from
    its LSB, so bit 0 of the payload is DBC bit 7.
    """
    return sawtooth_to_network_bitnum(bit_offset)


class DbcExportService:
    """Service for exporting signalsets as cantools databases or DBC text.

    This service provides:
    - Frame ID resolution from a command's response/request address
    - Conversion of signal scaling (mul/div/add) into a cantools conversion
    - Database construction and DBC rendering through cantools
    """

    def frame_id_for(self, command: Command, command_index: int = None) -> int:
        """Return the CAN ID of a command's response.

        Uses ``rax`` when present, otherwise ``hdr``.

        Raises:
            DbcExportError: If neither address is a hexadecimal CAN ID
        """
        address = command.receive_address or command.header
        if address is None:
            raise DbcExportError("Command has no hdr or rax address", command_index=command_index)
        try:
            can_id = parse_hex_address(address)
        except ValueError as e:
            raise DbcExportError(f"Invalid command address {address!r}",
                                 command_index=command_index, original_error=e)
        if can_id > CAN_ID_MAX_EXTENDED:
            raise DbcExportError(f"CAN ID out of range: 0x{can_id:X}", command_index=command_index)
        return can_id

    def message_name_for(self, command: Command) -> str:
        """Build a DBC message name such as ``CMD_7E0_22F40C``."""
        parts = ['CMD', str(command.header or '')]
        code = command.command_code
        if isinstance(code, dict):
            parts.append(''.join(f"{service}{pid}" for service, pid in code.items()))
        elif code is not None:
            parts.append(str(code))
        return to_dbc_symbol('_'.join(p for p in parts if p))

    def build_signal(self, signal: Signal, name: str, command_index: int = None) -> DbcSignal:
        """Build a cantools signal for a signal with a positive length.

        Raises:
            DbcExportError: If the signal's divisor is zero
        """
        fmt = signal.fmt
        multiplier = fmt.multiplier if fmt.multiplier is not None else 1
        divisor = fmt.divisor if fmt.divisor is not None else 1
        if divisor == 0:
            raise DbcExportError(f"Signal '{signal.id}' has a zero divisor", command_index=command_index)
        additive = fmt.additive_offset if fmt.additive_offset is not None else 0
        unit = fmt.unit
        return DbcSignal(
            name=name,
            start=dbc_start_bit(int(fmt.bit_offset or 0)),
            length=int(fmt.bit_length),
            byte_order='big_endian',
            is_signed=fmt.get(SIGNED_KEY).value is True,
            conversion=BaseConversion.factory(scale=multiplier / divisor, offset=additive),
            minimum=fmt.minimum,
            maximum=fmt.maximum,
            unit=str(unit).replace('"', "'") if unit is not None else None,
        )

    def build_message(self, command: Command, command_index: int, taken_names: Set[str]) -> Optional[Message]:
        """Build the cantools message of one command, or None if it has no laid-out signal."""
        try:
            byte_map = resolve_byte_map(command.signals)
        except LayoutPreconditionError as e:
            raise DbcExportError(f"Command {command_index}: {e}",
                                 command_index=command_index, original_error=e)

        laid_out = [s for s in command.signals
                    if s.fmt is not None and (s.fmt.bit_length or 0) > 0]
        if not laid_out:
            logger.debug(f"DbcExportService: command {command_index} has no laid-out signals, skipped")
            return None

        frame_id = self.frame_id_for(command, command_index)
        signal_names: Set[str] = set()
        signals = [
            self.build_signal(s, _unique(to_dbc_symbol(s.id), signal_names), command_index)
            for s in laid_out
        ]
        # sub-byte packing may share bits, so overlap checks stay off
        return Message(
            frame_id=frame_id,
            name=_unique(self.message_name_for(command), taken_names),
            length=len(byte_map),
            signals=signals,
            is_extended_frame=frame_id > CAN_ID_MAX_STANDARD,
            strict=False,
        )

    def to_database(self, signalset: SignalSet) -> Database:
        """Export a signalset as a cantools database.

        Commands without any laid-out signal are left out.

        Returns:
            cantools Database with one message per exported command

        Raises:
            DbcExportError: If a command cannot be exported or cantools rejects it
        """
        taken_names: Set[str] = set()
        messages: List[Message] = []
        try:
            for index, command in enumerate(signalset.commands):
                message = self.build_message(command, index, taken_names)
                if message is not None:
                    messages.append(message)
            db = Database(messages=messages, strict=False)
        except CantoolsError as e:
            logger.error(f"DbcExportService: cantools rejected the export: {e}", exc_info=True)
            raise DbcExportError(f"Signalset could not be exported: {e}", original_error=e)
        logger.info(f"DbcExportService: exported {len(messages)} of {len(signalset.commands)} commands")
        return db

    def to_dbc_string(self, signalset: SignalSet) -> str:
        """Render a signalset as DBC text.

        Raises:
            DbcExportError: If a command address or bit range cannot be exported
        """
        return self.to_database(signalset).as_dbc_string()

    def summary(self, signalset: SignalSet) -> Dict[str, int]:
        """Return counts of exported messages and signals."""
        db = self.to_database(signalset)
        return {
            'messages': len(db.messages),
            'signals': sum(len(m.signals) for m in db.messages),
        }
