"""Signalset command line tool.

Usage:
  python -m signalset_editor format signalsets/v3/default.json
  python -m signalset_editor format --check signalsets/v3/default.json
  python -m signalset_editor layout signalsets/v3/default.json
  python -m signalset_editor export-dbc signalsets/v3/default.json

Every subcommand reads the file and prints to stdout; nothing is written back.
"""
from __future__ import annotations

import sys
import argparse
import logging
from typing import List, Optional

from signalset_editor.config import ConfigManager, configure_logging
from signalset_editor.exceptions import SignalsetEditorException
from signalset_editor.models import SignalSet
from signalset_editor.services.dbc_export_service import DbcExportService
from signalset_editor.utils.byte_layout import find_overlaps, resolve_byte_map
from signalset_editor.utils.canonical_format import parse, serialize

logger = logging.getLogger(__name__)


def _read(path: str) -> str:
    with open(path, 'r', encoding='utf-8') as fh:
        return fh.read()


def _cmd_format(args, config: ConfigManager) -> int:
    text = _read(args.file)
    align = args.align or config.format_settings.align_columns
    canonical = serialize(parse(text), align_columns=align)
    if args.check:
        if canonical != text:
            print(f"{args.file}: not in canonical form", file=sys.stderr)
            return 1
        print(f"{args.file}: ok")
        return 0
    sys.stdout.write(canonical)
    return 0


def describe_layout(doc: SignalSet) -> List[str]:
    """Return human readable byte occupancy lines for every command."""
    lines = []
    for index, command in enumerate(doc.commands):
        byte_map = resolve_byte_map(command.signals)
        lines.append(f"Command {index + 1} (hdr={command.header}, cmd={command.command_code}): "
                     f"{len(byte_map)} bytes")
        for byte_index, occupants in enumerate(byte_map):
            names = ', '.join(str(s.id) for s in occupants) or '-'
            lines.append(f"  byte {byte_index}: {names}")
        overlaps = find_overlaps(byte_map)
        if overlaps:
            lines.append(f"  shared bytes: {overlaps}")
    return lines


def _cmd_layout(args, config: ConfigManager) -> int:
    doc = parse(_read(args.file))
    for line in describe_layout(doc):
        print(line)
    return 0


def _cmd_export_dbc(args, config: ConfigManager) -> int:
    doc = parse(_read(args.file))
    sys.stdout.write(DbcExportService().to_dbc_string(doc))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='signalset-editor',
        description='Canonicalize, inspect and export signalset JSON files',
    )
    parser.add_argument('--config', default=None, help='Path to a JSON config file')
    parser.add_argument('--log-level', default=None, help='DEBUG, INFO, WARNING or ERROR')
    sub = parser.add_subparsers(dest='command', required=True)

    p_format = sub.add_parser('format', help='Print the file in canonical form')
    p_format.add_argument('file')
    p_format.add_argument('--align', action='store_true', help='Align signal id/path columns')
    p_format.add_argument('--check', action='store_true',
                          help='Exit 1 if the file is not already canonical')
    p_format.set_defaults(handler=_cmd_format)

    p_layout = sub.add_parser('layout', help='Print byte occupancy of every command')
    p_layout.add_argument('file')
    p_layout.set_defaults(handler=_cmd_layout)

    p_dbc = sub.add_parser('export-dbc', help='Print the signalset as a DBC file')
    p_dbc.add_argument('file')
    p_dbc.set_defaults(handler=_cmd_export_dbc)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = ConfigManager(config_file=args.config)
    if args.log_level:
        config.app_settings.log_level = args.log_level.upper()
    try:
        config.raise_if_invalid()
    except SignalsetEditorException as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    configure_logging(config.app_settings.log_level)

    try:
        return args.handler(args, config)
    except OSError as e:
        print(f"error: cannot read {args.file}: {e}", file=sys.stderr)
        return 2
    except SignalsetEditorException as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
