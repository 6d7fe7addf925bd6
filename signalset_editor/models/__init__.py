"""
Data models for the signalset editor.

This package contains the in-memory representation of a signalset document.

Models:
- SignalSet: The document root (ordered list of commands)
- Command: A diagnostic request with opaque properties and its signals
- Signal: A bit-packed field of the command's response
- SignalFormat / FormatValue: Tagged format parameters of a signal
"""

from signalset_editor.models.signal import (
    FormatValue, FormatValueKind, Signal, SignalFormat,
)
from signalset_editor.models.command import Command
from signalset_editor.models.signalset import SignalSet

__all__ = [
    'FormatValue', 'FormatValueKind', 'Signal', 'SignalFormat',
    'Command', 'SignalSet',
]
