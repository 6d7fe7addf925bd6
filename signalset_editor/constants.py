"""
Constants for the signalset editor.

This module centralizes the wire keys of the signalset JSON format, the
fixed pieces of the canonical text layout, and the templates used when the
edit session creates new commands and signals.

Constants are organized by category:
- Document keys (top level, command, signal, format)
- Canonical layout fragments
- Bit/byte geometry
- CAN identifier limits (DBC export)
- Edit templates
"""

# Top-level document keys
COMMANDS_KEY = 'commands'
SIGNALS_KEY = 'signals'

# Command properties with a typed accessor on Command
HEADER_KEY = 'hdr'
RECEIVE_ADDRESS_KEY = 'rax'
EXTENDED_ADDRESS_KEY = 'eax'
TESTER_ADDRESS_KEY = 'tst'
FREQUENCY_KEY = 'freq'
FLOW_CONTROL_KEY = 'fcm1'  # dropped from canonical text when False
COMMAND_CODE_KEY = 'cmd'

# Signal keys
SIGNAL_ID_KEY = 'id'
SIGNAL_NAME_KEY = 'name'
SIGNAL_PATH_KEY = 'path'
SIGNAL_FORMAT_KEY = 'fmt'
SUGGESTED_METRIC_KEY = 'suggestedMetric'

# Format keys
BIT_OFFSET_KEY = 'bix'
BIT_LENGTH_KEY = 'len'
UNIT_KEY = 'unit'
MINIMUM_KEY = 'min'
MAXIMUM_KEY = 'max'
ADDITIVE_OFFSET_KEY = 'add'
MULTIPLIER_KEY = 'mul'
DIVISOR_KEY = 'div'
SIGNED_KEY = 'sign'

# Canonical layout
SIGNAL_LINE_INDENT = '    '
SIGNALS_BLOCK_INDENT = '  '
PROPERTY_SEPARATOR = ', '
BLOCK_SEPARATOR = ',\n'

# Bit geometry
BITS_PER_BYTE = 8

# CAN ID ranges (DBC export)
CAN_ID_MAX_STANDARD = 0x7FF  # Standard CAN (11-bit)
CAN_ID_MAX_EXTENDED = 0x1FFFFFFF  # Extended CAN (29-bit)

# Edit templates (copied before use, never mutated)
NEW_COMMAND_TEMPLATE = {
    'hdr': '000',
    'cmd': {'22': '0000'},
    'freq': 1,
    'signals': [],
}
NEW_SIGNAL_ID_PREFIX = 'NEW_SIGNAL_'
NEW_SIGNAL_NAME = 'New Signal'
NEW_SIGNAL_FORMAT_TEMPLATE = {'len': 8, 'unit': 'scalar'}

# Config
USER_CONFIG_DIR_NAME = '.signalset_editor'
CONFIG_FILE_NAME = 'config.json'

# Error messages
MISSING_COMMANDS_MESSAGE = 'Invalid signalset format: missing or invalid commands array'
