"""
Pure helper modules for signalset documents.

This package contains:
- byte_layout: Mapping of signal bit ranges onto payload bytes
- canonical_format: Parsing and canonical text rendering of documents
- regex_patterns: Sanitizing signalset names into DBC symbols
"""

from signalset_editor.utils.byte_layout import (
    resolve_byte_map, find_overlaps, occupied_byte_count,
    signal_byte_span, validate_signal_layout,
)
from signalset_editor.utils.canonical_format import (
    parse, serialize, format_text, is_canonical,
)

__all__ = [
    'resolve_byte_map',
    'find_overlaps',
    'occupied_byte_count',
    'signal_byte_span',
    'validate_signal_layout',
    'parse',
    'serialize',
    'format_text',
    'is_canonical',
]
