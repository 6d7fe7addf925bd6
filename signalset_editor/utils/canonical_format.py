"""
Canonical text form of signalset documents.

``serialize`` is not a generic JSON encoder: it renders a fixed,
line-oriented layout (one line per signal) so that edits to a
version-controlled signalset produce small, reviewable diffs. The layout::

    { "commands": [
    { "hdr": "7E0", "cmd": {"22":"F40C"}, "freq": 1,
      "signals": [
        {"id": "RPM", "path": "", "fmt": {"len": 16, "unit": "rpm"}, "name": "Engine RPM"}
      ]}
    ]}

Rules applied while rendering:
- command properties keep document order; empty-string values and a
  ``fcm1`` of ``false`` are dropped
- ``fmt`` entries keep document order; null, missing and not-a-number
  values are dropped (``0`` and ``""`` are kept)
- ``id`` and ``path`` render as ``""`` when missing
- ``suggestedMetric`` is appended only when truthy
"""
import json
import logging
from typing import Any, List

from signalset_editor.constants import (
    FLOW_CONTROL_KEY, SIGNAL_LINE_INDENT, SIGNALS_BLOCK_INDENT,
    PROPERTY_SEPARATOR, BLOCK_SEPARATOR,
)
from signalset_editor.exceptions import SerializationError, StructuralError
from signalset_editor.models import Command, Signal, SignalSet

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    raise StructuralError(f"Invalid JSON: {name} is not a JSON value", location=name)


def parse(text: str) -> SignalSet:
    """Parse signalset JSON text into a document.

    Only strict JSON is accepted: the ``NaN``, ``Infinity`` and
    ``-Infinity`` literals Python's decoder allows are rejected.

    Args:
        text: JSON text (``str`` or UTF-8 ``bytes``)

    Returns:
        The parsed SignalSet

    Raises:
        StructuralError: If the text is not valid JSON, or is not an object
            with a ``commands`` array of well-formed commands
    """
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        logger.debug(f"parse: invalid JSON: {e}")
        raise StructuralError(str(e), original_error=e)
    return SignalSet.from_dict(data)


def to_literal(value: Any, key: str = None) -> str:
    """Render a single value as a JSON literal.

    Nested objects and arrays are rendered compactly (no spaces), strings
    keep non-ASCII characters as-is.

    Raises:
        SerializationError: If the value has no JSON representation
    """
    try:
        return json.dumps(value, ensure_ascii=False, separators=(',', ':'), allow_nan=False)
    except (TypeError, ValueError) as e:
        logger.error(f"to_literal: cannot render {key!r}={value!r}: {e}")
        raise SerializationError(f"Cannot render value of {key!r} as JSON: {e}",
                                 key=key, value=value, original_error=e)


def _keep_command_property(key: str, value: Any) -> bool:
    if isinstance(value, str) and value == '':
        return False
    if key == FLOW_CONTROL_KEY and value is False:
        return False
    return True


def _render_command_properties(command: Command) -> str:
    return PROPERTY_SEPARATOR.join(
        f"{to_literal(key)}: {to_literal(value, key)}"
        for key, value in command.properties.items()
        if _keep_command_property(key, value)
    )


def _render_format(signal: Signal) -> str:
    if signal.fmt is None:
        return ''
    return PROPERTY_SEPARATOR.join(
        f"{to_literal(key)}: {to_literal(value, key)}"
        for key, value in signal.fmt.present_items()
    )


def _id_literal(signal: Signal) -> str:
    return to_literal(signal.id if signal.id is not None else '', 'id')


def _path_literal(signal: Signal) -> str:
    return to_literal(signal.path if signal.path is not None else '', 'path')


def _render_signals(signals: List[Signal], align_columns: bool) -> str:
    id_width = max((len(_id_literal(s)) for s in signals), default=0) if align_columns else 0
    path_width = max((len(_path_literal(s)) for s in signals), default=0) if align_columns else 0

    lines = []
    for signal in signals:
        id_part = f"{_id_literal(signal)},".ljust(id_width + 1)
        path_part = f"{_path_literal(signal)},".ljust(path_width + 1)
        line = (f'{SIGNAL_LINE_INDENT}{{"id": {id_part} "path": {path_part} '
                f'"fmt": {{{_render_format(signal)}}}, "name": {to_literal(signal.name, "name")}')
        if signal.suggested_metric:
            line += f', "suggestedMetric": {to_literal(signal.suggested_metric, "suggestedMetric")}'
        lines.append(line + '}')
    return BLOCK_SEPARATOR.join(lines)


def _render_command(command: Command, align_columns: bool) -> str:
    props = _render_command_properties(command)
    signals = _render_signals(command.signals, align_columns)
    # A command whose properties were all filtered out still has to be valid JSON
    opening = f"{{ {props},\n{SIGNALS_BLOCK_INDENT}" if props else "{ "
    return f'{opening}"signals": [\n{signals}\n{SIGNALS_BLOCK_INDENT}]}}'


def serialize(doc: SignalSet, align_columns: bool = False) -> str:
    """Render a document in canonical text form.

    The output depends only on the document's values and insertion order;
    nothing is sorted or rounded. Serializing the same document twice gives
    the same text, and ``serialize(parse(serialize(doc))) == serialize(doc)``.

    Args:
        doc: Document to render
        align_columns: Pad after the ``id`` and ``path`` values so the
            following keys line up within each command

    Returns:
        Canonical text, ending with a newline

    Raises:
        SerializationError: If a value inside the document is not JSON-representable
    """
    blocks = BLOCK_SEPARATOR.join(_render_command(c, align_columns) for c in doc.commands)
    text = f'{{ "commands": [\n{blocks}\n]}}\n'
    logger.debug(f"serialize: {len(doc.commands)} commands, {doc.signal_count} signals, {len(text)} chars")
    return text


def format_text(text: str, align_columns: bool = False) -> str:
    """Parse and re-render text in canonical form."""
    return serialize(parse(text), align_columns=align_columns)


def is_canonical(text: str, align_columns: bool = False) -> bool:
    """Return True if ``text`` is already in canonical form.

    Raises:
        StructuralError: If the text cannot be parsed
    """
    return format_text(text, align_columns=align_columns) == text
