"""
Custom exception classes for the signalset editor.

This module provides specific exception types for the failure modes of the
document model, the byte-layout resolver, the canonical serializer and the
edit session, so callers can tell a bad document apart from a bad edit.
"""

from typing import Any


class SignalsetEditorException(Exception):
    """Base exception for all signalset editor errors.

    All custom exceptions should inherit from this class so callers can catch
    every editor-specific error while preserving the exception hierarchy.
    """
    pass


class StructuralError(SignalsetEditorException):
    """Exception raised when signalset text cannot be turned into a document.

    Raised for text that is not valid JSON at all, and for JSON whose shape is
    not a signalset (no ``commands`` array, a command that is not an object,
    and so on).

    Attributes:
        location: Where in the document the problem was found (e.g. 'commands[2].signals')
        original_error: The underlying exception that caused this error
    """

    def __init__(self, message: str, location: str = None, original_error: Exception = None):
        """Initialize StructuralError.

        Args:
            message: Human-readable error message
            location: Location inside the document (optional)
            original_error: Underlying exception (optional)
        """
        super().__init__(message)
        self.location = location
        self.original_error = original_error


class LayoutPreconditionError(SignalsetEditorException):
    """Exception raised when a signal's bit range cannot be laid out.

    Negative, fractional or non-numeric ``bix``/``len`` values are rejected
    before any byte slot is computed.

    Attributes:
        signal_id: ID of the offending signal
        field: Format key that is invalid ('bix' or 'len')
        value: The invalid value
    """

    def __init__(self, message: str, signal_id: str = None, field: str = None, value: Any = None):
        """Initialize LayoutPreconditionError.

        Args:
            message: Human-readable error message
            signal_id: Signal ID (optional)
            field: Format key (optional)
            value: Invalid value (optional)
        """
        super().__init__(message)
        self.signal_id = signal_id
        self.field = field
        self.value = value


class SerializationError(SignalsetEditorException):
    """Exception raised when a value inside a document cannot be rendered as JSON.

    This indicates a programming error (a non-JSON value was placed in the
    document), not a user input problem.

    Attributes:
        key: Property or format key holding the value
        value: The value that could not be rendered
        original_error: The underlying exception that caused this error
    """

    def __init__(self, message: str, key: str = None, value: Any = None, original_error: Exception = None):
        """Initialize SerializationError.

        Args:
            message: Human-readable error message
            key: Key of the value (optional)
            value: Unrenderable value (optional)
            original_error: Underlying exception (optional)
        """
        super().__init__(message)
        self.key = key
        self.value = value
        self.original_error = original_error


class DbcExportError(SignalsetEditorException):
    """Exception raised when a signalset cannot be exported as a DBC database.

    Attributes:
        command_index: Index of the command being exported (if known)
        original_error: The underlying exception that caused this error
    """

    def __init__(self, message: str, command_index: int = None, original_error: Exception = None):
        """Initialize DbcExportError.

        Args:
            message: Human-readable error message
            command_index: Command index (optional)
            original_error: Underlying exception (optional)
        """
        super().__init__(message)
        self.command_index = command_index
        self.original_error = original_error


class EditError(SignalsetEditorException):
    """Exception raised for edits that target a command or signal that does not exist.

    Attributes:
        command_index: Command index of the edit
        signal_index: Signal index of the edit (None for command-level edits)
    """

    def __init__(self, message: str, command_index: int = None, signal_index: int = None):
        super().__init__(message)
        self.command_index = command_index
        self.signal_index = signal_index


class ConfigurationError(SignalsetEditorException):
    """Exception raised for invalid configuration values.

    Attributes:
        setting_name: Name of the setting that is invalid
        setting_value: The invalid value
        expected: Description of expected value
    """

    def __init__(self, message: str, setting_name: str = None, setting_value: Any = None,
                 expected: str = None):
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error message
            setting_name: Name of invalid setting (optional)
            setting_value: Invalid value (optional)
            expected: Expected value description (optional)
        """
        super().__init__(message)
        self.setting_name = setting_name
        self.setting_value = setting_value
        self.expected = expected
