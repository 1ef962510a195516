"""
Entity enumeration for filang.

Lists the entries of one directory and materializes each as an
EntityRecord, distinguishing files from folders.
"""

import logging
import os
from typing import List, Optional

from .domain.entity import EntityKind, EntityRecord
from .exit_codes import PathNotFoundError
from .infra.filesystem import FileSystem

logger = logging.getLogger(__name__)


class EntityEnumerator:
    """
    Produces fresh EntityRecords for the entries of a directory.

    Example:
        enumerator = EntityEnumerator(LocalFileSystem())
        for record in enumerator.files("/var/log"):
            print(record.name, record.size)
    """

    def __init__(self, fs: FileSystem):
        self.fs = fs

    def enumerate(self, directory: str, kind: Optional[EntityKind] = None) -> List[EntityRecord]:
        """
        List entries under ``directory``.

        Args:
            directory: Absolute directory path
            kind: Only entries of this kind (None for both)

        Returns:
            Records in listing order

        Raises:
            PathNotFoundError: If ``directory`` is not an existing directory
        """
        if not self.fs.is_dir(directory):
            raise PathNotFoundError(directory)

        records = []
        for name in self.fs.list_dir(directory):
            path = os.path.join(directory, name)
            try:
                record = self.record(path)
            except OSError as e:
                # Entry vanished or is unreadable between listing and stat
                logger.warning(f"Skipping '{name}': {e}")
                continue
            if kind is None or record.kind is kind:
                records.append(record)
        return records

    def files(self, directory: str) -> List[EntityRecord]:
        return self.enumerate(directory, EntityKind.FILE)

    def folders(self, directory: str) -> List[EntityRecord]:
        return self.enumerate(directory, EntityKind.FOLDER)

    def record(self, path: str) -> EntityRecord:
        """Build the record for a single path."""
        kind = EntityKind.FOLDER if self.fs.is_dir(path) else EntityKind.FILE
        return EntityRecord.from_stat(path, self.fs.stat(path), kind)
