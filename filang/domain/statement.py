"""
Statement domain objects for filang.

The statement router turns one input line into exactly one of these
variants. Each variant carries only the arguments its handler needs;
``Unknown`` is the explicit "no shape matched" case.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Tuple

from .entity import EntityKind

WILDCARD = '*'


class SortDirection(Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class SortSpec:
    """ORDER BY <field> [ASC|DESC]."""
    field: str
    direction: SortDirection = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC


@dataclass(frozen=True)
class Statement:
    """Base class for parsed statements."""
    kind: ClassVar[Optional[EntityKind]] = None


# Single-target verbs

@dataclass(frozen=True)
class Load(Statement):
    path: str


@dataclass(frozen=True)
class EntityStatement(Statement):
    """A verb applied to one named entity, or to every entity via "*"."""
    name: str

    @property
    def is_wildcard(self) -> bool:
        return self.name == WILDCARD


@dataclass(frozen=True)
class CreateFile(EntityStatement):
    kind = EntityKind.FILE


@dataclass(frozen=True)
class ReadFile(EntityStatement):
    kind = EntityKind.FILE


@dataclass(frozen=True)
class DeleteFile(EntityStatement):
    kind = EntityKind.FILE


@dataclass(frozen=True)
class EditFile(EntityStatement):
    kind = EntityKind.FILE


@dataclass(frozen=True)
class CreateFolder(EntityStatement):
    kind = EntityKind.FOLDER


@dataclass(frozen=True)
class DeleteFolder(EntityStatement):
    kind = EntityKind.FOLDER


@dataclass(frozen=True)
class Use(EntityStatement):
    kind = EntityKind.FOLDER


@dataclass(frozen=True)
class WriteFile(Statement):
    name: str
    content: str
    kind = EntityKind.FILE


@dataclass(frozen=True)
class AppendFile(Statement):
    name: str
    content: str
    kind = EntityKind.FILE


@dataclass(frozen=True)
class Drop(Statement):
    pass


@dataclass(frozen=True)
class Transfer(EntityStatement):
    """MOVE/COPY FILE/FOLDER "<name>" TO "<dir>"."""
    target: str = ''
    copy: ClassVar[bool] = False


@dataclass(frozen=True)
class MoveFile(Transfer):
    kind = EntityKind.FILE


@dataclass(frozen=True)
class MoveFolder(Transfer):
    kind = EntityKind.FOLDER


@dataclass(frozen=True)
class CopyFile(Transfer):
    kind = EntityKind.FILE
    copy = True


@dataclass(frozen=True)
class CopyFolder(Transfer):
    kind = EntityKind.FOLDER
    copy = True


@dataclass(frozen=True)
class Rename(Statement):
    entity: EntityKind
    old_name: str
    new_name: str


@dataclass(frozen=True)
class Chmod(Statement):
    name: str
    mode: str


@dataclass(frozen=True)
class Merge(Statement):
    sources: Tuple[str, ...]
    destination: str


# Directory-wide verbs

@dataclass(frozen=True)
class Listing(Statement):
    pass


@dataclass(frozen=True)
class ListFiles(Listing):
    kind = EntityKind.FILE


@dataclass(frozen=True)
class ListFolders(Listing):
    kind = EntityKind.FOLDER


@dataclass(frozen=True)
class ListAll(Listing):
    pass


@dataclass(frozen=True)
class Count(Statement):
    pass


@dataclass(frozen=True)
class CountFiles(Count):
    kind = EntityKind.FILE


@dataclass(frozen=True)
class CountFolders(Count):
    kind = EntityKind.FOLDER


@dataclass(frozen=True)
class CountAll(Count):
    pass


# WHERE-qualified batch verbs

@dataclass(frozen=True)
class BatchDelete(Statement):
    from_path: Optional[str] = None
    where: Optional[str] = None


@dataclass(frozen=True)
class DeleteFiles(BatchDelete):
    kind = EntityKind.FILE


@dataclass(frozen=True)
class DeleteFolders(BatchDelete):
    kind = EntityKind.FOLDER


@dataclass(frozen=True)
class BatchTransfer(Statement):
    target: str
    from_path: Optional[str] = None
    where: Optional[str] = None
    copy: ClassVar[bool] = False


@dataclass(frozen=True)
class MoveFiles(BatchTransfer):
    kind = EntityKind.FILE


@dataclass(frozen=True)
class MoveFolders(BatchTransfer):
    kind = EntityKind.FOLDER


@dataclass(frozen=True)
class CopyFiles(BatchTransfer):
    kind = EntityKind.FILE
    copy = True


@dataclass(frozen=True)
class CopyFolders(BatchTransfer):
    kind = EntityKind.FOLDER
    copy = True


@dataclass(frozen=True)
class Select(Statement):
    from_path: Optional[str] = None
    where: Optional[str] = None
    order_by: Optional[SortSpec] = None
    into: Optional[str] = None


@dataclass(frozen=True)
class SelectFiles(Select):
    kind = EntityKind.FILE


@dataclass(frozen=True)
class SelectFolders(Select):
    kind = EntityKind.FOLDER


@dataclass(frozen=True)
class Unknown(Statement):
    """A line that matched no statement shape."""
    text: str
    reason: str = "Unrecognized statement"
    suggestion: Optional[str] = None
