"""
Filesystem infrastructure for filang.

Provides the filesystem capability the interpreter calls into.
All file operations go through this interface, making them:
- Easy to mock for testing
- Consistent in error handling (failures surface as OSError)
- Isolated from the DSL front end
"""

import os
import shutil
from abc import ABC, abstractmethod
from typing import List
import logging

logger = logging.getLogger(__name__)


class FileSystem(ABC):
    """
    Abstract filesystem capability.

    Paths are absolute strings. Every method raises ``OSError`` (or a
    subclass) when the underlying operation fails.
    """

    @abstractmethod
    def exists(self, path: str) -> bool: ...

    @abstractmethod
    def is_dir(self, path: str) -> bool: ...

    @abstractmethod
    def is_file(self, path: str) -> bool: ...

    @abstractmethod
    def list_dir(self, path: str) -> List[str]:
        """Entry names in ``path``, in a stable order."""

    @abstractmethod
    def stat(self, path: str) -> os.stat_result: ...

    @abstractmethod
    def read_text(self, path: str, encoding: str = 'utf-8') -> str: ...

    @abstractmethod
    def write_text(self, path: str, content: str, encoding: str = 'utf-8') -> None: ...

    @abstractmethod
    def append_text(self, path: str, content: str, encoding: str = 'utf-8') -> None: ...

    @abstractmethod
    def make_dir(self, path: str) -> None: ...

    @abstractmethod
    def remove_file(self, path: str) -> None: ...

    @abstractmethod
    def remove_tree(self, path: str) -> None: ...

    @abstractmethod
    def move(self, source: str, destination: str) -> None: ...

    @abstractmethod
    def copy_file(self, source: str, destination: str) -> None: ...

    @abstractmethod
    def copy_tree(self, source: str, destination: str) -> None: ...

    @abstractmethod
    def chmod(self, path: str, mode: int) -> None: ...


class LocalFileSystem(FileSystem):
    """
    FileSystem backed by the local disk via ``os`` and ``shutil``.

    Example:
        fs = LocalFileSystem()
        for name in fs.list_dir("/tmp"):
            print(name)
    """

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def list_dir(self, path: str) -> List[str]:
        return sorted(os.listdir(path))

    def stat(self, path: str) -> os.stat_result:
        return os.stat(path)

    def read_text(self, path: str, encoding: str = 'utf-8') -> str:
        with open(path, 'r', encoding=encoding) as f:
            return f.read()

    def write_text(self, path: str, content: str, encoding: str = 'utf-8') -> None:
        with open(path, 'w', encoding=encoding, newline='') as f:
            f.write(content)

    def append_text(self, path: str, content: str, encoding: str = 'utf-8') -> None:
        with open(path, 'a', encoding=encoding, newline='') as f:
            f.write(content)

    def make_dir(self, path: str) -> None:
        os.mkdir(path)

    def remove_file(self, path: str) -> None:
        os.unlink(path)

    def remove_tree(self, path: str) -> None:
        shutil.rmtree(path)

    def move(self, source: str, destination: str) -> None:
        logger.debug(f"move {source} -> {destination}")
        os.rename(source, destination)

    def copy_file(self, source: str, destination: str) -> None:
        logger.debug(f"copy {source} -> {destination}")
        shutil.copyfile(source, destination)

    def copy_tree(self, source: str, destination: str) -> None:
        logger.debug(f"copy tree {source} -> {destination}")
        shutil.copytree(source, destination, dirs_exist_ok=True)

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(path, mode)
