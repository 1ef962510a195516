"""
Statement result domain objects for filang.

Every statement produces leveled events (info, warning, error, success).
Batch statements produce one event per item, so a failure on one file is
reported without hiding the outcome for the others.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional, TYPE_CHECKING

from .entity import EntityRecord

if TYPE_CHECKING:
    from .statement import Statement


class EventLevel(Enum):
    """Severity of a statement event."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class StatementEvent:
    """One log line produced while executing a statement."""
    level: EventLevel
    message: str
    item: Optional[str] = None  # Entity the event is about, for batch ops

    def to_dict(self) -> Dict[str, Any]:
        result = {'level': self.level.value, 'message': self.message}
        if self.item:
            result['item'] = self.item
        return result


@dataclass
class StatementResult:
    """
    Outcome of executing one statement.

    Collects the events emitted by the handler and, for SELECT without
    INTO and LIST, the records to display. A LOAD keeps the results of
    the statements it ran in ``children``.
    """
    statement: 'Statement'
    events: List[StatementEvent] = field(default_factory=list)
    records: Optional[List[EntityRecord]] = None
    children: List['StatementResult'] = field(default_factory=list)
    error_code: Optional[int] = None  # Exit code of the error that aborted the statement

    @property
    def exit_code(self) -> Optional[int]:
        """Exit code of the first aborted statement, here or in children."""
        if self.error_code is not None:
            return self.error_code
        for child in self.children:
            if child.exit_code is not None:
                return child.exit_code
        return None

    def _count(self, level: EventLevel) -> int:
        own = sum(1 for e in self.events if e.level is level)
        return own + sum(child._count(level) for child in self.children)

    @property
    def succeeded(self) -> int:
        return self._count(EventLevel.SUCCESS)

    @property
    def failed(self) -> int:
        return self._count(EventLevel.ERROR)

    @property
    def success(self) -> bool:
        """True if no errors occurred."""
        return self.failed == 0

    def messages(self, level: Optional[EventLevel] = None) -> List[str]:
        """Event messages, optionally only those at one level."""
        return [e.message for e in self.events if level is None or e.level is level]

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'statement': type(self.statement).__name__,
            'success': self.success,
            'events': [e.to_dict() for e in self.events],
        }
        if self.records is not None:
            result['records'] = [r.to_dict() for r in self.records]
        if self.children:
            result['children'] = [c.to_dict() for c in self.children]
        return result
