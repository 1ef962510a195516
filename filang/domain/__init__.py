"""
Domain layer for filang.

Contains pure domain objects with no I/O or side effects:
- EntityRecord: One enumerated file or folder with its attributes
- Statement: The tagged variant a DSL line parses into
- StatementResult: Leveled events and records produced by a statement

These objects are immutable where possible and provide
serialization methods for JSON output.
"""

from .entity import EntityRecord, EntityKind, RECORD_FIELDS
from .event import EventLevel, StatementEvent, StatementResult
from .statement import Statement, SortSpec, SortDirection, Unknown, WILDCARD

__all__ = [
    'EntityRecord',
    'EntityKind',
    'RECORD_FIELDS',
    'EventLevel',
    'StatementEvent',
    'StatementResult',
    'Statement',
    'SortSpec',
    'SortDirection',
    'Unknown',
    'WILDCARD',
]
