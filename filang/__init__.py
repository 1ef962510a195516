"""
filang - Query and manage a filesystem with a small SQL-like language.

Quick Start:
    from filang import Interpreter, Session

    interpreter = Interpreter(session=Session("~/Downloads"))

    # Imperative statements
    interpreter.execute('CREATE FOLDER "archive"')
    interpreter.execute('MOVE FILES WHERE name LIKE "%.zip" TO "archive"')

    # Queries return records
    result = interpreter.execute('SELECT FILES WHERE size > 1048576 ORDER BY size DESC')
    for record in result.records:
        print(record.name, record.size)

    # Or write a report
    interpreter.execute('SELECT FILES WHERE extension = ".log" INTO "logs.csv"')

Building blocks:
    StatementRouter - Parses one line into a Statement variant
    Query           - Compiled WHERE clause
    ResultPipeline  - WHERE filter plus ORDER BY
    EntityEnumerator - Lists a folder as EntityRecords
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    EntityRecord,
    EntityKind,
    EventLevel,
    StatementEvent,
    StatementResult,
    Statement,
    SortSpec,
    SortDirection,
)

# Query engine
from .parsing import StatementRouter
from .query import Query, evaluate, parse_where
from .pipeline import ResultPipeline
from .enumerator import EntityEnumerator

# Services
from .services import Interpreter, Session

# Configuration
from .config import load_config, save_config

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "EntityRecord",
    "EntityKind",
    "EventLevel",
    "StatementEvent",
    "StatementResult",
    "Statement",
    "SortSpec",
    "SortDirection",
    # Query engine
    "StatementRouter",
    "Query",
    "evaluate",
    "parse_where",
    "ResultPipeline",
    "EntityEnumerator",
    # Services
    "Interpreter",
    "Session",
    # Configuration
    "load_config",
    "save_config",
]
