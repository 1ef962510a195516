"""
Result pipeline for filang.

Filters enumerated records with a WHERE clause and orders them by an
ORDER BY spec. Rendering the result is left to ``filang.render``.
"""

import logging
from typing import Callable, List, Optional, Sequence

from .domain.entity import EntityRecord, RECORD_FIELDS
from .domain.statement import SortSpec
from .exit_codes import ConditionError, UnknownSortFieldError
from .infra.filesystem import FileSystem
from .query import DEFAULT_CONTENT_SIZE_LIMIT, Query
from .utils import closest_match

logger = logging.getLogger(__name__)


def resolve_sort_field(field_name: str) -> str:
    """
    Map an ORDER BY field to a record attribute, case-insensitively.

    Raises:
        UnknownSortFieldError: If records have no such attribute
    """
    key = field_name.strip().lower()
    if key in RECORD_FIELDS:
        return key
    raise UnknownSortFieldError(field_name, closest_match(key, RECORD_FIELDS))


def sort_records(records: Sequence[EntityRecord], sort_spec: SortSpec) -> List[EntityRecord]:
    """Stable sort by the named attribute; DESC reverses the comparison."""
    key = resolve_sort_field(sort_spec.field)
    return sorted(records, key=lambda r: r.get(key), reverse=sort_spec.descending)


class ResultPipeline:
    """
    Filter then sort a set of EntityRecords.

    Example:
        pipeline = ResultPipeline(fs)
        results = pipeline.run(records, 'size > 0', SortSpec('size', SortDirection.DESC))
    """

    def __init__(
        self,
        fs: Optional[FileSystem] = None,
        content_size_limit: int = DEFAULT_CONTENT_SIZE_LIMIT,
        encoding: str = 'utf-8',
        on_error: Optional[Callable[[ConditionError], None]] = None,
    ):
        self.fs = fs
        self.content_size_limit = content_size_limit
        self.encoding = encoding
        self.on_error = on_error

    def run(
        self,
        entities: Sequence[EntityRecord],
        clause_text: Optional[str] = None,
        sort_spec: Optional[SortSpec] = None,
    ) -> List[EntityRecord]:
        """
        Apply WHERE and ORDER BY to ``entities``.

        Args:
            entities: Records in enumeration order
            clause_text: Raw WHERE text (None matches everything)
            sort_spec: Optional ORDER BY

        Returns:
            New list; survivors keep enumeration order unless sorted

        Raises:
            UnknownSortFieldError: If the sort field is not a record attribute
        """
        if sort_spec is not None:
            # Fail before touching content of any file
            resolve_sort_field(sort_spec.field)

        results = list(entities)
        if clause_text:
            query = Query(
                clause_text,
                fs=self.fs,
                content_size_limit=self.content_size_limit,
                encoding=self.encoding,
                on_error=self.on_error,
            )
            results = query.filter(results)
            logger.debug(f"WHERE kept {len(results)} of {len(entities)} entities")

        if sort_spec is not None:
            results = sort_records(results, sort_spec)

        return results
