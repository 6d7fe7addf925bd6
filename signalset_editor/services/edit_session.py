"""
Edit Session for keeping raw signalset text and structured state in sync.

This service is the headless counterpart of an editor window: it owns the
raw text the user typed, the last document that parsed successfully, and
the last error. Structural edits never mutate the current document; each
one deep-copies it, applies the change to the copy, swaps it in and
re-renders the canonical text.
"""
import copy
import logging
import math
import time
from typing import Optional, Any, Callable, Union

from signalset_editor.constants import (
    NEW_COMMAND_TEMPLATE, NEW_SIGNAL_ID_PREFIX, NEW_SIGNAL_NAME,
    NEW_SIGNAL_FORMAT_TEMPLATE,
)
from signalset_editor.exceptions import EditError, StructuralError
from signalset_editor.models import Command, Signal, SignalFormat, SignalSet
from signalset_editor.utils.byte_layout import ByteMap, resolve_byte_map
from signalset_editor.utils.canonical_format import parse, serialize
from signalset_editor.utils.regex_patterns import REGEX_LEADING_FLOAT

logger = logging.getLogger(__name__)

SIGNAL_TEXT_FIELDS = ('id', 'name', 'path', 'suggested_metric')


def parse_int_input(text: str) -> Union[int, float]:
    """Parse an integer typed into a form field.

    Mirrors lenient integer parsing: leading whitespace and a trailing
    non-digit tail are ignored ('12px' -> 12). Returns NaN when no integer
    can be read, which the canonical text drops.
    """
    stripped = str(text).strip()
    digits = ''
    for i, ch in enumerate(stripped):
        if ch.isdigit() or (i == 0 and ch in '+-'):
            digits += ch
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return math.nan


def parse_float_input(text: str) -> Union[int, float]:
    """Parse a number typed into a form field.

    Like ``parse_int_input`` only the leading numeric part is read
    ('12.5px' -> 12.5, '1e3Hz' -> 1000). Returns NaN when there is none.
    """
    match = REGEX_LEADING_FLOAT.match(str(text))
    if not match:
        return math.nan
    value = float(match.group(0))
    if not math.isfinite(value):
        return math.nan
    return int(value) if value.is_integer() else value


class EditSession:
    """Keeps raw text, last good document and last error together.

    Attributes:
        text: Raw editor text (kept even when it does not parse)
        document: Last successfully parsed or edited document (None before the first)
        error: Message of the last failed parse (None after a success)
        align_columns: Render canonical text with aligned signal columns
    """

    def __init__(self, align_columns: bool = False, clock: Callable[[], float] = time.time):
        """Initialize an empty edit session.

        Args:
            align_columns: Passed to the canonical serializer on every edit
            clock: Time source used for generated signal ids (seconds)
        """
        self.text: str = ''
        self.document: Optional[SignalSet] = None
        self.error: Optional[str] = None
        self.align_columns = align_columns
        self._clock = clock

    # Text side

    def load_text(self, text: str) -> Optional[SignalSet]:
        """Replace the raw text and try to parse it.

        The raw text is always kept. On success the parsed document replaces
        the current one and the error is cleared; on failure the last good
        document stays in place and the error message is recorded.

        Returns:
            The parsed document, or None if parsing failed
        """
        self.text = text
        try:
            doc = parse(text)
        except StructuralError as e:
            self.error = str(e)
            logger.warning(f"EditSession.load_text: keeping last good document: {e}")
            return None
        self.document = doc
        self.error = None
        logger.info(f"EditSession.load_text: loaded {len(doc.commands)} commands")
        return doc

    # Structured side

    def _commit(self, doc: SignalSet) -> SignalSet:
        text = serialize(doc, align_columns=self.align_columns)
        self.document = doc
        self.text = text
        self.error = None
        return doc

    def _copy_document(self) -> SignalSet:
        if self.document is None:
            raise EditError("No document loaded")
        return self.document.copy()

    @staticmethod
    def _command_at(doc: SignalSet, command_index: int) -> Command:
        if not 0 <= command_index < len(doc.commands):
            raise EditError(f"Command index out of range: {command_index}",
                            command_index=command_index)
        return doc.commands[command_index]

    @classmethod
    def _signal_at(cls, doc: SignalSet, command_index: int, signal_index: int) -> Signal:
        command = cls._command_at(doc, command_index)
        if not 0 <= signal_index < len(command.signals):
            raise EditError(f"Signal index out of range: {signal_index}",
                            command_index=command_index, signal_index=signal_index)
        return command.signals[signal_index]

    def set_command_property(self, command_index: int, key: str, value: Any) -> SignalSet:
        """Set a command property such as 'hdr' or 'freq'.

        Non-finite numbers (an unparsable number field) are stored as None,
        which renders as JSON null.
        """
        if isinstance(value, float) and not math.isfinite(value):
            value = None
        doc = self._copy_document()
        command = self._command_at(doc, command_index)
        try:
            command.set_property(key, value)
        except ValueError as e:
            raise EditError(str(e), command_index=command_index)
        logger.debug(f"EditSession: command[{command_index}].{key} = {value!r}")
        return self._commit(doc)

    def set_signal_field(self, command_index: int, signal_index: int, field: str, value: Any) -> SignalSet:
        """Set one of a signal's text fields (id, name, path, suggested_metric)."""
        if field not in SIGNAL_TEXT_FIELDS:
            raise EditError(f"Unknown signal field: {field}",
                            command_index=command_index, signal_index=signal_index)
        doc = self._copy_document()
        signal = self._signal_at(doc, command_index, signal_index)
        setattr(signal, field, value)
        logger.debug(f"EditSession: command[{command_index}].signals[{signal_index}].{field} = {value!r}")
        return self._commit(doc)

    def set_format_entry(self, command_index: int, signal_index: int, key: str, value: Any) -> SignalSet:
        """Set a ``fmt`` entry; None or NaN values stay in the model but not in the text."""
        doc = self._copy_document()
        signal = self._signal_at(doc, command_index, signal_index)
        if signal.fmt is None:
            signal.fmt = SignalFormat()
        signal.fmt.set(key, value)
        logger.debug(f"EditSession: command[{command_index}].signals[{signal_index}].fmt.{key} = {value!r}")
        return self._commit(doc)

    def add_command(self) -> SignalSet:
        """Append a new command built from the default template."""
        doc = self.document.copy() if self.document is not None else SignalSet()
        doc.commands.append(Command.from_dict(copy.deepcopy(NEW_COMMAND_TEMPLATE)))
        logger.info(f"EditSession: added command {len(doc.commands) - 1}")
        return self._commit(doc)

    def add_signal(self, command_index: int) -> SignalSet:
        """Append a new signal with a generated id to a command."""
        doc = self._copy_document()
        command = self._command_at(doc, command_index)
        command.signals.append(Signal(
            id=f"{NEW_SIGNAL_ID_PREFIX}{int(self._clock() * 1000)}",
            path='',
            fmt=SignalFormat.from_dict(copy.deepcopy(NEW_SIGNAL_FORMAT_TEMPLATE)),
            name=NEW_SIGNAL_NAME,
        ))
        logger.info(f"EditSession: added signal to command {command_index}")
        return self._commit(doc)

    def remove_command(self, command_index: int) -> SignalSet:
        doc = self._copy_document()
        self._command_at(doc, command_index)
        del doc.commands[command_index]
        logger.info(f"EditSession: removed command {command_index}")
        return self._commit(doc)

    def remove_signal(self, command_index: int, signal_index: int) -> SignalSet:
        doc = self._copy_document()
        self._signal_at(doc, command_index, signal_index)
        del doc.commands[command_index].signals[signal_index]
        logger.info(f"EditSession: removed signal {signal_index} from command {command_index}")
        return self._commit(doc)

    # Layout

    def byte_map(self, command_index: int) -> ByteMap:
        """Return the byte occupancy of a command's signals."""
        if self.document is None:
            raise EditError("No document loaded")
        return resolve_byte_map(self._command_at(self.document, command_index).signals)
