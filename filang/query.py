"""
WHERE clause engine for filang.

Parses the predicate language that follows WHERE and evaluates it
against EntityRecords.

Supported conditions:
    name LIKE "<pattern>"        : % any run, _ one character, case-insensitive
    name = "<value>" / !=        : Exact, case-sensitive
    extension = "<ext>" / !=     : Lowercased, leading dot optional
    size > | < | >= | <= | = | != <bytes>
    modified <op> "<date>"       : ISO 8601 date or datetime (UTC if naive)
    created <op> "<date>"
    permissions = "<octal>" / !=
    content LIKE "<pattern>"     : Whole text content, bounded by a size ceiling
    ( ... )                      : Nested OR/AND expression

Boolean structure:
    A clause is a disjunction of conjunctions. OR splits at the top
    level, AND splits within each OR-group, and parentheses may nest
    up to MAX_NESTING_DEPTH levels. A deeper group is reported as a
    ConditionError and counts as false.

Examples:
    size > 1024 AND extension = ".log"
    name LIKE "%.bak" OR modified < "2024-01-01"
    (extension = ".txt" OR extension = ".md") AND content LIKE "%TODO%"
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, Union
import logging
import operator
import re

from .domain.entity import EntityRecord, normalize_extension
from .exit_codes import ConditionError
from .infra.filesystem import FileSystem
from .utils import (
    closest_match,
    like_to_regex,
    parse_date_literal,
    truncate_to_millis,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_SIZE_LIMIT = 10 * 1024 * 1024
MAX_NESTING_DEPTH = 64

COMPARISONS = {
    '=': operator.eq,
    '!=': operator.ne,
    '>': operator.gt,
    '<': operator.lt,
    '>=': operator.ge,
    '<=': operator.le,
}
EQUALITY = frozenset({'=', '!='})
ORDERING = frozenset(COMPARISONS)

# Operator domain per attribute
ATTRIBUTE_OPERATORS = {
    'name': EQUALITY | {'LIKE'},
    'content': frozenset({'LIKE'}),
    'extension': EQUALITY,
    'size': ORDERING,
    'modified': ORDERING,
    'created': ORDERING,
    'permissions': EQUALITY,
}

_CONDITION_RE = re.compile(
    r'^(?P<attr>[A-Za-z_]+)'
    r'(?:\s+(?P<like>LIKE)\s+|\s*(?P<cmp>!=|>=|<=|==|=|>|<)\s*)'
    r'(?P<value>.+)$',
    re.IGNORECASE | re.DOTALL,
)


@dataclass(frozen=True)
class ConditionGroup:
    """
    Disjunction of conjunctions of raw condition strings.

    ``groups[i]`` is one AND-group; the clause holds when any AND-group
    has all of its conditions satisfied.
    """
    groups: Tuple[Tuple[str, ...], ...]

    def __iter__(self) -> Iterator[Tuple[str, ...]]:
        return iter(self.groups)

    def __len__(self) -> int:
        return len(self.groups)


def _scan_words(text: str) -> Iterator[Tuple[int, int, int]]:
    """
    Yield ``(start, end, depth)`` for each whitespace-separated word.

    Quoted strings are part of the word they appear in, so whitespace
    inside quotes never splits. ``depth`` is the parenthesis depth at
    the start of the word. An unmatched ``)`` is treated as plain text.
    """
    depth = 0
    quote = None
    start = None
    start_depth = 0

    for i, char in enumerate(text):
        if quote:
            if char == quote and text[i - 1] != '\\':
                quote = None
        elif char.isspace():
            if start is not None:
                yield start, i, start_depth
                start = None
            continue
        elif char in ('"', "'"):
            quote = char
        elif char == '(':
            if start is None:
                start, start_depth = i, depth
            depth += 1
            continue
        elif char == ')':
            if depth > 0:
                depth -= 1
            else:
                logger.debug(f"Unmatched ')' at offset {i} in WHERE clause")

        if start is None:
            start, start_depth = i, depth

    if start is not None:
        yield start, len(text), start_depth
    if depth > 0:
        logger.debug("Unclosed '(' in WHERE clause; treating the rest as one condition")


def _split_top_level(text: str, keyword: str) -> List[str]:
    """Split ``text`` on a keyword that appears outside quotes and parentheses."""
    parts: List[str] = []
    segment_start = 0
    for start, end, depth in _scan_words(text):
        if depth == 0 and text[start:end].upper() == keyword:
            parts.append(text[segment_start:start].strip())
            segment_start = end
    parts.append(text[segment_start:].strip())
    return parts


def parse_where(clause: str) -> ConditionGroup:
    """
    Split a raw WHERE clause into OR-groups of AND-ed condition strings.

    Never fails: malformed input degrades to a best-effort split, and
    the result always holds at least one group with one condition.
    """
    logger.debug(f"parse_where called with: {clause}")
    clause = clause.strip()
    groups = []
    for or_part in _split_top_level(clause, 'OR'):
        conditions = tuple(c for c in _split_top_level(or_part, 'AND') if c)
        if conditions:
            groups.append(conditions)

    if not groups:
        groups = [(clause,)]
    return ConditionGroup(tuple(groups))


def _is_wrapped(text: str) -> bool:
    """True if the first '(' of ``text`` is closed by its last character."""
    if not (text.startswith('(') and text.endswith(')')):
        return False
    depth = 0
    quote = None
    for i, char in enumerate(text):
        if quote:
            if char == quote and text[i - 1] != '\\':
                quote = None
        elif char in ('"', "'"):
            quote = char
        elif char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth == 0:
                return i == len(text) - 1
    return False


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


@dataclass(frozen=True)
class Condition:
    """A parsed (attribute, operator, literal) triple."""
    attribute: str
    operator: str
    literal: str

    @classmethod
    def parse(cls, text: str) -> 'Condition':
        """
        Parse one condition string.

        Raises:
            ConditionError: If the text matches no supported shape or
                the operator is not valid for the attribute
        """
        match = _CONDITION_RE.match(text.strip())
        if not match:
            raise ConditionError(text, "unrecognized condition")

        attribute = match.group('attr').lower()
        if attribute not in ATTRIBUTE_OPERATORS:
            hint = closest_match(attribute, ATTRIBUTE_OPERATORS)
            reason = f"unknown attribute '{attribute}'"
            if hint:
                reason += f" (did you mean '{hint.lower()}'?)"
            raise ConditionError(text, reason)

        op = 'LIKE' if match.group('like') else match.group('cmp')
        if op == '==':
            op = '='
        if op not in ATTRIBUTE_OPERATORS[attribute]:
            raise ConditionError(text, f"operator {op} is not supported for {attribute}")

        return cls(attribute, op, _unquote(match.group('value')))


Compiled = Union['_Predicate', 'Query', None]


class _Predicate:
    """A condition with its literal converted once, ready to test records."""

    def __init__(self, condition: Condition, query: 'Query'):
        self.condition = condition
        self.query = query
        attr, op, literal = condition.attribute, condition.operator, condition.literal

        if op == 'LIKE':
            self.value = like_to_regex(literal)
        elif attr == 'size':
            try:
                self.value = int(literal)
            except ValueError:
                raise ConditionError(condition_text(condition), f"size must be an integer, got '{literal}'")
        elif attr in ('modified', 'created'):
            try:
                self.value = truncate_to_millis(parse_date_literal(literal))
            except ValueError:
                raise ConditionError(condition_text(condition), f"invalid date '{literal}'")
        elif attr == 'permissions':
            try:
                self.value = int(literal, 8) & 0o777
            except ValueError:
                raise ConditionError(condition_text(condition), f"invalid octal mode '{literal}'")
        elif attr == 'extension':
            self.value = normalize_extension(literal)
        else:
            self.value = literal

    def test(self, record: EntityRecord) -> bool:
        attr, op = self.condition.attribute, self.condition.operator

        if attr == 'content':
            return self._test_content(record)
        if op == 'LIKE':
            return self.value.fullmatch(record.name) is not None

        compare = COMPARISONS[op]
        if attr in ('modified', 'created'):
            actual = truncate_to_millis(getattr(record, attr))
        else:
            actual = getattr(record, attr)
        return compare(actual, self.value)

    def _test_content(self, record: EntityRecord) -> bool:
        if record.is_folder:
            return False
        if record.size > self.query.content_size_limit:
            logger.debug(f"Skipping content of '{record.name}': {record.size} bytes exceeds ceiling")
            return False
        if self.query.fs is None:
            raise ConditionError(condition_text(self.condition), "no filesystem available to read content")
        try:
            content = self.query.fs.read_text(record.path, self.query.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ConditionError(condition_text(self.condition), f"cannot read '{record.name}': {e}")
        return self.value.fullmatch(content) is not None


def condition_text(condition: Condition) -> str:
    """Render a Condition back to its canonical text."""
    if condition.attribute == 'size':
        return f'{condition.attribute} {condition.operator} {condition.literal}'
    return f'{condition.attribute} {condition.operator} "{condition.literal}"'


class Query:
    """WHERE clause compiled against an optional filesystem.

    Conditions are parsed once. A condition that cannot be parsed is
    reported once and counts as false for every record; failures while
    testing a record (for example an unreadable file for ``content
    LIKE``) are reported per record and also count as false.

    Example:
        q = Query('size > 0 AND name LIKE "%.log"', fs=LocalFileSystem())
        matches = q.filter(records)
    """

    def __init__(
        self,
        clause: str,
        fs: Optional[FileSystem] = None,
        content_size_limit: int = DEFAULT_CONTENT_SIZE_LIMIT,
        encoding: str = 'utf-8',
        on_error: Optional[Callable[[ConditionError], None]] = None,
        depth: int = 0,
    ):
        logger.debug(f"Initializing Query with: {clause}")
        self.clause = clause
        self.depth = depth
        self.fs = fs
        self.content_size_limit = content_size_limit
        self.encoding = encoding
        self.on_error = on_error or _log_condition_error
        self.group = parse_where(clause)
        self.compiled: Tuple[Tuple[Compiled, ...], ...] = tuple(
            tuple(self._compile(text) for text in and_group)
            for and_group in self.group
        )
        logger.debug(f"Parsed WHERE groups: {self.group.groups}")

    def _compile(self, text: str) -> Compiled:
        if _is_wrapped(text):
            if self.depth >= MAX_NESTING_DEPTH:
                self.on_error(ConditionError(text, "parentheses nested too deeply"))
                return None
            return Query(
                text[1:-1],
                fs=self.fs,
                content_size_limit=self.content_size_limit,
                encoding=self.encoding,
                on_error=self.on_error,
                depth=self.depth + 1,
            )
        try:
            return _Predicate(Condition.parse(text), self)
        except ConditionError as e:
            self.on_error(e)
            return None

    def evaluate(self, record: EntityRecord) -> bool:
        """True if any AND-group has all of its conditions satisfied."""
        return any(
            all(self._eval(node, record) for node in and_group)
            for and_group in self.compiled
        )

    def _eval(self, node: Compiled, record: EntityRecord) -> bool:
        if node is None:
            return False
        if isinstance(node, Query):
            return node.evaluate(record)
        try:
            return node.test(record)
        except ConditionError as e:
            self.on_error(e)
        except Exception as e:
            self.on_error(ConditionError(condition_text(node.condition), str(e)))
        return False

    def filter(self, records: Iterable[EntityRecord]) -> List[EntityRecord]:
        """Records that satisfy the clause, in their original order."""
        return [record for record in records if self.evaluate(record)]


def _log_condition_error(error: ConditionError) -> None:
    logger.warning(str(error))


def evaluate(record: EntityRecord, clause: str, fs: Optional[FileSystem] = None) -> bool:
    """
    Evaluate a WHERE clause against a single record.

    Never raises; conditions that fail to evaluate count as false.
    """
    return Query(clause, fs=fs).evaluate(record)


__all__ = [
    'Condition',
    'ConditionGroup',
    'Query',
    'evaluate',
    'parse_where',
]
