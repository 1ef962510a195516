"""
Entity domain object for filang.

EntityRecord is the attributed view of one filesystem entry that the
WHERE evaluator, the ORDER BY sort and the output renderers all work on.
It is immutable and serializable.
"""

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class EntityKind(Enum):
    """Kind of filesystem entry."""
    FILE = "file"
    FOLDER = "folder"

    @property
    def label(self) -> str:
        return self.name


# Declaration order used by CSV headers, JSON output and ORDER BY lookup
RECORD_FIELDS = ('name', 'path', 'size', 'extension', 'modified', 'created', 'permissions')


def normalize_extension(ext: str) -> str:
    """Lowercase an extension and make sure it starts with a dot."""
    ext = ext.strip().lower()
    if not ext:
        return ''
    return ext if ext.startswith('.') else f'.{ext}'


def format_permissions(mode: int) -> str:
    """Format permission bits as zero-padded octal, e.g. 0644."""
    return format(mode & 0o777, 'o').zfill(4)


@dataclass(frozen=True)
class EntityRecord:
    """One enumerated file or folder."""
    name: str
    path: str
    size: int = 0
    extension: str = ''
    modified: datetime = datetime.fromtimestamp(0, tz=timezone.utc)
    created: datetime = datetime.fromtimestamp(0, tz=timezone.utc)
    permissions: int = 0
    kind: EntityKind = EntityKind.FILE

    @property
    def is_folder(self) -> bool:
        return self.kind is EntityKind.FOLDER

    @classmethod
    def from_stat(cls, path: str, stat_result: os.stat_result,
                  kind: EntityKind = EntityKind.FILE) -> 'EntityRecord':
        """Build a record from an ``os.stat`` result.

        Folders get size 0 and an empty extension.
        """
        name = os.path.basename(path)
        created_ts: Optional[float] = getattr(stat_result, 'st_birthtime', None)
        if created_ts is None:
            created_ts = stat_result.st_ctime

        if kind is EntityKind.FOLDER:
            size = 0
            extension = ''
        else:
            size = stat_result.st_size
            extension = normalize_extension(os.path.splitext(name)[1])

        return cls(
            name=name,
            path=path,
            size=size,
            extension=extension,
            modified=datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc),
            created=datetime.fromtimestamp(created_ts, tz=timezone.utc),
            permissions=stat_result.st_mode & 0o777,
            kind=kind,
        )

    def get(self, field_name: str) -> Any:
        """Look up a record attribute by name, case-insensitively."""
        key = field_name.strip().lower()
        if key not in RECORD_FIELDS:
            raise KeyError(field_name)
        return getattr(self, key)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'name': self.name,
            'path': self.path,
            'size': self.size,
            'extension': self.extension,
            'modified': self.modified.isoformat(),
            'created': self.created.isoformat(),
            'permissions': format_permissions(self.permissions),
        }
