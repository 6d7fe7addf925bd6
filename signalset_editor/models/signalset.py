"""
SignalSet model: the root of a signalset document.
"""
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple

from signalset_editor.constants import COMMANDS_KEY, MISSING_COMMANDS_MESSAGE
from signalset_editor.exceptions import StructuralError
from signalset_editor.models.command import Command
from signalset_editor.models.signal import Signal


@dataclass
class SignalSet:
    """A signalset document: an ordered list of commands.

    The document is a pure tree. Editors replace it wholesale (see
    ``SignalSet.copy``) rather than mutating a snapshot someone else holds.

    Attributes:
        commands: Commands in document order
    """
    commands: List[Command] = field(default_factory=list)

    def copy(self) -> 'SignalSet':
        """Return a deep copy that shares nothing with this document."""
        return copy.deepcopy(self)

    def iter_signals(self) -> Iterator[Tuple[int, int, Signal]]:
        """Yield (command_index, signal_index, signal) for every signal."""
        for ci, command in enumerate(self.commands):
            for si, signal in enumerate(command.signals):
                yield ci, si, signal

    @property
    def signal_count(self) -> int:
        return sum(len(c.signals) for c in self.commands)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format (for JSON serialization)."""
        return {COMMANDS_KEY: [c.to_dict() for c in self.commands]}

    @classmethod
    def from_dict(cls, data: Any) -> 'SignalSet':
        """Create from decoded JSON.

        Raises:
            StructuralError: If ``data`` is not an object with a ``commands`` array,
                or a command/signal inside it is malformed
        """
        if not isinstance(data, dict) or not isinstance(data.get(COMMANDS_KEY), list):
            raise StructuralError(MISSING_COMMANDS_MESSAGE, location=COMMANDS_KEY)
        return cls(commands=[
            Command.from_dict(c, location=f"{COMMANDS_KEY}[{i}]")
            for i, c in enumerate(data[COMMANDS_KEY])
        ])
