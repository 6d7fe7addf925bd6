"""
Command model: one diagnostic request definition and its response signals.
"""
from dataclasses import dataclass, field
from typing import Optional, Any, Dict, List

from signalset_editor.constants import (
    SIGNALS_KEY, HEADER_KEY, RECEIVE_ADDRESS_KEY, EXTENDED_ADDRESS_KEY,
    TESTER_ADDRESS_KEY, FREQUENCY_KEY, FLOW_CONTROL_KEY, COMMAND_CODE_KEY,
)
from signalset_editor.exceptions import StructuralError
from signalset_editor.models.signal import Signal


def _property_accessor(key: str, doc: str) -> property:
    def getter(self: 'Command') -> Any:
        return self.properties.get(key)

    def setter(self: 'Command', value: Any) -> None:
        self.set_property(key, value)

    return property(getter, setter, doc=doc)


@dataclass
class Command:
    """A diagnostic command: opaque properties plus an ordered list of signals.

    Properties other than ``signals`` are not interpreted here; they are kept
    in document order so unknown keys survive a parse/serialize cycle. The
    well-known keys are exposed through typed accessors.

    Attributes:
        properties: Property key -> JSON value, in document order (never contains 'signals')
        signals: Response signals, in document order
    """
    properties: Dict[str, Any] = field(default_factory=dict)
    signals: List[Signal] = field(default_factory=list)

    header = _property_accessor(HEADER_KEY, "Request header, e.g. '7E0'")
    receive_address = _property_accessor(RECEIVE_ADDRESS_KEY, "Response address, e.g. '7E8'")
    extended_address = _property_accessor(EXTENDED_ADDRESS_KEY, "Extended address byte")
    tester_address = _property_accessor(TESTER_ADDRESS_KEY, "Tester address")
    frequency = _property_accessor(FREQUENCY_KEY, "Polling frequency")
    flow_control_flag = _property_accessor(FLOW_CONTROL_KEY, "Flow-control flag")
    command_code = _property_accessor(COMMAND_CODE_KEY, "Service -> PID mapping, e.g. {'22': 'F40C'}")

    def set_property(self, key: str, value: Any) -> None:
        """Set a property. Existing keys keep their position, new keys go last."""
        if key == SIGNALS_KEY:
            raise ValueError("signals are edited through Command.signals, not as a property")
        self.properties[key] = value

    def remove_property(self, key: str) -> None:
        self.properties.pop(key, None)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format (for JSON serialization)."""
        result = dict(self.properties)
        result[SIGNALS_KEY] = [s.to_dict() for s in self.signals]
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any], location: str = 'command') -> 'Command':
        """Create from a JSON object.

        A missing or null ``signals`` entry yields an empty signal list; any
        other non-list value is a structural error.
        """
        if not isinstance(data, dict):
            raise StructuralError(f"{location} must be an object, got {type(data).__name__}",
                                  location=location)
        raw_signals = data.get(SIGNALS_KEY)
        if raw_signals is None:
            raw_signals = []
        elif not isinstance(raw_signals, list):
            raise StructuralError(f"{location}.{SIGNALS_KEY} must be an array",
                                  location=f"{location}.{SIGNALS_KEY}")
        properties = {k: v for k, v in data.items() if k != SIGNALS_KEY}
        signals = [
            Signal.from_dict(s, location=f"{location}.{SIGNALS_KEY}[{i}]")
            for i, s in enumerate(raw_signals)
        ]
        return cls(properties=properties, signals=signals)

    def __str__(self) -> str:
        return f"Command(hdr={self.header!r}, cmd={self.command_code!r}, signals={len(self.signals)})"
