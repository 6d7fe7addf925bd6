"""
Signal models: a bit-packed field inside a command's response payload.

A signal's ``fmt`` mapping holds heterogeneous values that may be missing,
null or not-a-number. Each entry is wrapped in a ``FormatValue`` so the
canonical serializer and the layout resolver can decide what to do with it
by matching on ``FormatValue.kind`` instead of probing Python types.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Any, Dict, List, Tuple, Union

from signalset_editor.constants import (
    SIGNAL_ID_KEY, SIGNAL_NAME_KEY, SIGNAL_PATH_KEY, SIGNAL_FORMAT_KEY,
    SUGGESTED_METRIC_KEY, BIT_OFFSET_KEY, BIT_LENGTH_KEY, UNIT_KEY,
    MINIMUM_KEY, MAXIMUM_KEY, ADDITIVE_OFFSET_KEY, MULTIPLIER_KEY, DIVISOR_KEY,
)
from signalset_editor.exceptions import StructuralError

Number = Union[int, float]


class FormatValueKind(Enum):
    """State of a single ``fmt`` entry."""
    ABSENT = 'absent'  # undefined or null
    PRESENT = 'present'
    INVALID_NUMBER = 'invalid_number'  # NaN or +/-Infinity


@dataclass(frozen=True)
class FormatValue:
    """A ``fmt`` entry value tagged with its kind.

    Attributes:
        kind: Whether the value is absent, present or an invalid number
        value: The JSON value (None unless kind is PRESENT)
    """
    kind: FormatValueKind
    value: Any = None

    @classmethod
    def of(cls, value: Any) -> 'FormatValue':
        """Classify a raw JSON value."""
        if value is None:
            return cls(FormatValueKind.ABSENT)
        if isinstance(value, float) and not math.isfinite(value):
            return cls(FormatValueKind.INVALID_NUMBER)
        return cls(FormatValueKind.PRESENT, value)

    @property
    def is_present(self) -> bool:
        return self.kind is FormatValueKind.PRESENT

    @property
    def number(self) -> Optional[Number]:
        """Return the value if it is a present int/float (bools excluded), else None."""
        if self.kind is not FormatValueKind.PRESENT:
            return None
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            return None
        return self.value


ABSENT = FormatValue(FormatValueKind.ABSENT)


@dataclass
class SignalFormat:
    """Formatting and scaling parameters of a signal, in insertion order.

    Known keys have typed accessors; any other key (``sign``, ``map``, ...)
    is carried along untouched.

    Attributes:
        entries: Wire key -> FormatValue, in document order
    """
    entries: Dict[str, FormatValue] = field(default_factory=dict)

    def get(self, key: str) -> FormatValue:
        return self.entries.get(key, ABSENT)

    def set(self, key: str, value: Any) -> None:
        """Set an entry. Existing keys keep their position, new keys go last."""
        self.entries[key] = value if isinstance(value, FormatValue) else FormatValue.of(value)

    def remove(self, key: str) -> None:
        self.entries.pop(key, None)

    def present_items(self) -> List[Tuple[str, Any]]:
        """Return (key, value) for entries that belong in the canonical text."""
        return [(k, v.value) for k, v in self.entries.items() if v.is_present]

    @property
    def bit_offset(self) -> Optional[Number]:
        return self.get(BIT_OFFSET_KEY).number

    @property
    def bit_length(self) -> Optional[Number]:
        return self.get(BIT_LENGTH_KEY).number

    @property
    def unit(self) -> Optional[str]:
        value = self.get(UNIT_KEY)
        return value.value if value.is_present else None

    @property
    def minimum(self) -> Optional[Number]:
        return self.get(MINIMUM_KEY).number

    @property
    def maximum(self) -> Optional[Number]:
        return self.get(MAXIMUM_KEY).number

    @property
    def additive_offset(self) -> Optional[Number]:
        return self.get(ADDITIVE_OFFSET_KEY).number

    @property
    def multiplier(self) -> Optional[Number]:
        return self.get(MULTIPLIER_KEY).number

    @property
    def divisor(self) -> Optional[Number]:
        return self.get(DIVISOR_KEY).number

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format, keeping only present entries."""
        return dict(self.present_items())

    @classmethod
    def from_dict(cls, data: Dict[str, Any], location: str = SIGNAL_FORMAT_KEY) -> 'SignalFormat':
        """Create from a JSON object."""
        if not isinstance(data, dict):
            raise StructuralError(f"{location} must be an object, got {type(data).__name__}",
                                  location=location)
        return cls(entries={key: FormatValue.of(value) for key, value in data.items()})


@dataclass
class Signal:
    """One bit-packed field of a command's response payload.

    Attributes:
        id: Signal identifier, intended unique within a command
        name: Human readable label
        path: Optional destination path (may be empty)
        fmt: Format parameters, or None if the signal has no ``fmt`` object
        suggested_metric: Optional metric the signal maps to
    """
    id: Optional[str] = None
    name: Optional[str] = None
    path: Optional[str] = None
    fmt: Optional[SignalFormat] = None
    suggested_metric: Optional[Any] = None

    @property
    def bit_range(self) -> Optional[Tuple[Any, Any]]:
        """Return raw (bix, len) values used for layout, or None without a ``fmt``.

        Missing, null and not-a-number entries count as 0.
        """
        if self.fmt is None:
            return None
        offset = self.fmt.get(BIT_OFFSET_KEY)
        length = self.fmt.get(BIT_LENGTH_KEY)
        return (offset.value if offset.is_present else 0,
                length.value if length.is_present else 0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format (for JSON serialization)."""
        result: Dict[str, Any] = {
            SIGNAL_ID_KEY: self.id if self.id is not None else '',
            SIGNAL_PATH_KEY: self.path if self.path is not None else '',
            SIGNAL_FORMAT_KEY: self.fmt.to_dict() if self.fmt is not None else {},
            SIGNAL_NAME_KEY: self.name,
        }
        if self.suggested_metric:
            result[SUGGESTED_METRIC_KEY] = self.suggested_metric
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any], location: str = 'signal') -> 'Signal':
        """Create from a JSON object."""
        if not isinstance(data, dict):
            raise StructuralError(f"{location} must be an object, got {type(data).__name__}",
                                  location=location)
        raw_fmt = data.get(SIGNAL_FORMAT_KEY)
        fmt = None
        if raw_fmt is not None:
            fmt = SignalFormat.from_dict(raw_fmt, location=f"{location}.{SIGNAL_FORMAT_KEY}")
        return cls(
            id=data.get(SIGNAL_ID_KEY),
            name=data.get(SIGNAL_NAME_KEY),
            path=data.get(SIGNAL_PATH_KEY),
            fmt=fmt,
            suggested_metric=data.get(SUGGESTED_METRIC_KEY),
        )
