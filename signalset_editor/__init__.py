"""
Signalset editor core.

Parses, edits and canonically re-renders signalset documents (JSON
descriptions of vehicle diagnostic commands and their bit-packed signals),
and maps signal bit ranges onto payload bytes.
"""

from signalset_editor.exceptions import (
    SignalsetEditorException, StructuralError, LayoutPreconditionError,
    SerializationError, DbcExportError, EditError, ConfigurationError,
)
from signalset_editor.models import (
    SignalSet, Command, Signal, SignalFormat, FormatValue, FormatValueKind,
)
from signalset_editor.utils import (
    parse, serialize, format_text, is_canonical,
    resolve_byte_map, find_overlaps, validate_signal_layout,
)

__version__ = '0.1.0'

__all__ = [
    'SignalsetEditorException', 'StructuralError', 'LayoutPreconditionError',
    'SerializationError', 'DbcExportError', 'EditError', 'ConfigurationError',
    'SignalSet', 'Command', 'Signal', 'SignalFormat', 'FormatValue', 'FormatValueKind',
    'parse', 'serialize', 'format_text', 'is_canonical',
    'resolve_byte_map', 'find_overlaps', 'validate_signal_layout',
]
