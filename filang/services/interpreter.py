"""
Statement interpreter for filang.

Routes each line to a Statement variant and runs the matching handler
against the session's current directory. Handlers never print; they
record leveled events on a StatementResult, and every event is also
forwarded to the ``filang`` logger.
"""

import logging
import os
from typing import Any, Callable, Dict, List, Optional, Protocol

from ..config import SUCCESS_LEVEL, load_config
from ..domain import statement as st
from ..domain.entity import EntityKind, EntityRecord
from ..domain.event import EventLevel, StatementEvent, StatementResult
from ..enumerator import EntityEnumerator
from ..exit_codes import (
    SYNTAX_ERROR,
    CommandError,
    ConditionError,
    DslSyntaxError,
    PathNotFoundError,
)
from ..infra.filesystem import FileSystem, LocalFileSystem
from ..parsing.router import StatementRouter
from ..pipeline import ResultPipeline
from ..render import DEFAULT_REPORT_TITLE, render_report
from ..utils import decode_escapes
from .session import Session

logger = logging.getLogger(__name__)
event_logger = logging.getLogger("filang")

LOG_LEVELS = {
    EventLevel.INFO: logging.INFO,
    EventLevel.SUCCESS: SUCCESS_LEVEL,
    EventLevel.WARNING: logging.WARNING,
    EventLevel.ERROR: logging.ERROR,
}


class Editor(Protocol):
    """Interactive editor used by EDIT FILE."""

    def edit(self, path: str) -> bool:
        """Edit ``path``; return True if the buffer was saved."""
        ...


def _label(kind: Optional[EntityKind]) -> str:
    return "Folder" if kind is EntityKind.FOLDER else "File"


class Interpreter:
    """
    Executes filang statements.

    Example:
        interpreter = Interpreter(config=get_default_config(), session=Session('/tmp'))
        result = interpreter.execute('SELECT FILES WHERE size > 0 ORDER BY name')
        for record in result.records:
            print(record.name)
    """

    def __init__(
        self,
        fs: Optional[FileSystem] = None,
        config: Optional[Dict[str, Any]] = None,
        session: Optional[Session] = None,
        editor: Optional[Editor] = None,
    ):
        """
        Initialize the interpreter.

        Args:
            fs: Filesystem capability (local filesystem if None)
            config: Configuration dict (loads default if None)
            session: Session holding the current directory
            editor: Editor for EDIT FILE; None outside the interactive shell
        """
        self.fs = fs or LocalFileSystem()
        self.config = config or load_config()
        start = self.config.get('general', {}).get('start_directory') or None
        self.session = session or Session(start, self.fs)
        if self.session.fs is None:
            self.session.fs = self.fs
        self.editor = editor
        self.router = StatementRouter()
        self.enumerator = EntityEnumerator(self.fs)
        self._load_depth = 0

        query_config = self.config.get('query', {})
        self.encoding = query_config.get('content_encoding', 'utf-8')
        self.content_size_limit = query_config.get('content_size_limit', 10 * 1024 * 1024)

        self._handlers: Dict[type, Callable[[Any, StatementResult], None]] = {
            st.Load: self._load,
            st.CreateFile: self._create,
            st.CreateFolder: self._create,
            st.ReadFile: self._read_file,
            st.WriteFile: self._write_file,
            st.AppendFile: self._append_file,
            st.EditFile: self._edit_file,
            st.DeleteFile: self._delete,
            st.DeleteFolder: self._delete,
            st.Use: self._use,
            st.Drop: self._drop,
            st.ListFiles: self._list,
            st.ListFolders: self._list,
            st.ListAll: self._list,
            st.MoveFile: self._transfer,
            st.MoveFolder: self._transfer,
            st.CopyFile: self._transfer,
            st.CopyFolder: self._transfer,
            st.Rename: self._rename,
            st.Chmod: self._chmod,
            st.Merge: self._merge,
            st.CountFiles: self._count,
            st.CountFolders: self._count,
            st.CountAll: self._count,
            st.DeleteFiles: self._batch_delete,
            st.DeleteFolders: self._batch_delete,
            st.MoveFiles: self._batch_transfer,
            st.MoveFolders: self._batch_transfer,
            st.CopyFiles: self._batch_transfer,
            st.CopyFolders: self._batch_transfer,
            st.SelectFiles: self._select,
            st.SelectFolders: self._select,
            st.Unknown: self._unknown,
        }

    @property
    def cwd(self) -> str:
        return self.session.cwd

    def execute(self, line: str) -> StatementResult:
        """Parse and run one line."""
        return self.run(self.router.parse(line))

    def run(self, statement: st.Statement) -> StatementResult:
        """
        Run an already parsed statement.

        Errors that abort the statement become a single error event;
        nothing propagates to the caller.
        """
        result = StatementResult(statement)
        handler = self._handlers[type(statement)]
        logger.debug(f"Running {statement}")
        try:
            handler(statement, result)
        except CommandError as e:
            result.error_code = e.exit_code
            self._emit(result, EventLevel.ERROR, str(e))
        except (OSError, UnicodeDecodeError) as e:
            self._emit(result, EventLevel.ERROR, f"Operation failed: {e}")
        return result

    def _emit(self, result: StatementResult, level: EventLevel, message: str,
              item: Optional[str] = None) -> None:
        result.events.append(StatementEvent(level, message, item))
        event_logger.log(LOG_LEVELS[level], message)

    # Helpers

    def _exists(self, path: str, kind: Optional[EntityKind]) -> bool:
        if kind is EntityKind.FILE:
            return self.fs.is_file(path)
        if kind is EntityKind.FOLDER:
            return self.fs.is_dir(path)
        return self.fs.exists(path)

    def _each_target(self, statement: st.EntityStatement, result: StatementResult,
                     action: Callable[[str, StatementResult], None]) -> None:
        """Apply ``action`` to the named entity, or to every entity of the kind for "*"."""
        if not statement.is_wildcard:
            action(statement.name, result)
            return

        names = [r.name for r in self.enumerator.enumerate(self.cwd, statement.kind)]
        if not names:
            self._emit(result, EventLevel.INFO,
                       f"No {_label(statement.kind).lower()}s in the current folder.")
        for name in names:
            try:
                action(name, result)
            except (OSError, UnicodeDecodeError) as e:
                self._emit(result, EventLevel.ERROR, f'{_label(statement.kind)} "{name}": {e}', item=name)

    def _source_records(self, statement: Any) -> List[EntityRecord]:
        """Enumerate the FROM folder (or the current one) for a batch statement."""
        directory = self.cwd
        if statement.from_path:
            directory = self.session.resolve(statement.from_path)
            if not self.fs.is_dir(directory):
                raise PathNotFoundError(statement.from_path)
        return self.enumerator.enumerate(directory, statement.kind)

    def _pipeline(self, result: StatementResult) -> ResultPipeline:
        def report(error: ConditionError) -> None:
            self._emit(result, EventLevel.WARNING, str(error))

        return ResultPipeline(
            fs=self.fs,
            content_size_limit=self.content_size_limit,
            encoding=self.encoding,
            on_error=report,
        )

    # Single-target handlers

    def _create(self, statement: st.EntityStatement, result: StatementResult) -> None:
        label = _label(statement.kind)
        path = self.session.resolve(statement.name)
        if self.fs.exists(path):
            self._emit(result, EventLevel.WARNING, f'{label} "{statement.name}" already exists.')
            return
        if statement.kind is EntityKind.FOLDER:
            self.fs.make_dir(path)
        else:
            self.fs.write_text(path, '', self.encoding)
        self._emit(result, EventLevel.SUCCESS, f'{label} "{statement.name}" created.')

    def _read_file(self, statement: st.ReadFile, result: StatementResult) -> None:
        def read(name: str, result: StatementResult) -> None:
            path = self.session.resolve(name)
            if not self.fs.is_file(path):
                self._emit(result, EventLevel.ERROR, f'File "{name}" does not exist.', item=name)
                return
            content = self.fs.read_text(path, self.encoding)
            self._emit(result, EventLevel.INFO, f'Contents of "{name}":\n{content}', item=name)

        self._each_target(statement, result, read)

    def _write_file(self, statement: st.WriteFile, result: StatementResult) -> None:
        try:
            content = decode_escapes(statement.content)
        except ValueError:
            self._emit(result, EventLevel.WARNING,
                       "Could not decode escape sequences, writing the text as given.")
            content = statement.content
        self.fs.write_text(self.session.resolve(statement.name), content, self.encoding)
        self._emit(result, EventLevel.SUCCESS, f'File "{statement.name}" overwritten.')

    def _append_file(self, statement: st.AppendFile, result: StatementResult) -> None:
        self.fs.append_text(self.session.resolve(statement.name), statement.content, self.encoding)
        self._emit(result, EventLevel.SUCCESS, f'Text appended to file "{statement.name}".')

    def _edit_file(self, statement: st.EditFile, result: StatementResult) -> None:
        if self.editor is None:
            raise CommandError("EDIT FILE needs the interactive shell.")
        path = self.session.resolve(statement.name)
        if self.editor.edit(path):
            self._emit(result, EventLevel.SUCCESS, f'File "{statement.name}" saved.')
        else:
            self._emit(result, EventLevel.INFO, "Left the editor without saving.")

    def _delete(self, statement: st.EntityStatement, result: StatementResult) -> None:
        label = _label(statement.kind)

        def delete(name: str, result: StatementResult) -> None:
            path = self.session.resolve(name)
            if not self._exists(path, statement.kind):
                self._emit(result, EventLevel.ERROR, f'{label} "{name}" does not exist.', item=name)
                return
            if statement.kind is EntityKind.FOLDER:
                self.fs.remove_tree(path)
            else:
                self.fs.remove_file(path)
            self._emit(result, EventLevel.SUCCESS, f'{label} "{name}" deleted.', item=name)

        self._each_target(statement, result, delete)

    def _transfer(self, statement: st.Transfer, result: StatementResult) -> None:
        label = _label(statement.kind)
        verb = "copied" if statement.copy else "moved"

        def transfer(name: str, result: StatementResult) -> None:
            source = self.session.resolve(name)
            if not self._exists(source, statement.kind):
                self._emit(result, EventLevel.ERROR, f'{label} "{name}" does not exist.', item=name)
                return
            destination = self.session.resolve(statement.target, os.path.basename(name))
            if not statement.copy:
                self.fs.move(source, destination)
            elif statement.kind is EntityKind.FOLDER:
                self.fs.copy_tree(source, destination)
            else:
                self.fs.copy_file(source, destination)
            self._emit(result, EventLevel.SUCCESS,
                       f'{label} "{name}" {verb} to "{statement.target}".', item=name)

        self._each_target(statement, result, transfer)

    def _rename(self, statement: st.Rename, result: StatementResult) -> None:
        source = self.session.resolve(statement.old_name)
        if not self._exists(source, statement.entity):
            self._emit(result, EventLevel.ERROR, f"Not found: {statement.old_name}")
            return
        self.fs.move(source, self.session.resolve(statement.new_name))
        self._emit(result, EventLevel.SUCCESS,
                   f'Renamed "{statement.old_name}" to "{statement.new_name}".')

    def _chmod(self, statement: st.Chmod, result: StatementResult) -> None:
        path = self.session.resolve(statement.name)
        if not self.fs.exists(path):
            self._emit(result, EventLevel.ERROR, f'"{statement.name}" does not exist.')
            return
        self.fs.chmod(path, int(statement.mode, 8))
        self._emit(result, EventLevel.SUCCESS,
                   f'Permissions of "{statement.name}" changed to {statement.mode}.')

    def _merge(self, statement: st.Merge, result: StatementResult) -> None:
        parts = []
        for name in statement.sources:
            path = self.session.resolve(name)
            if not self.fs.is_file(path):
                self._emit(result, EventLevel.WARNING,
                           f'File "{name}" does not exist, skipping.', item=name)
                continue
            try:
                parts.append(self.fs.read_text(path, self.encoding) + '\n')
            except (OSError, UnicodeDecodeError) as e:
                self._emit(result, EventLevel.ERROR, f'Cannot read file "{name}": {e}', item=name)
        self.fs.write_text(self.session.resolve(statement.destination), ''.join(parts), self.encoding)
        self._emit(result, EventLevel.SUCCESS, f'Merged files into "{statement.destination}".')

    # Session handlers

    def _use(self, statement: st.Use, result: StatementResult) -> None:
        self.session.use(statement.name)
        self._emit(result, EventLevel.INFO, f'Working folder changed to "{statement.name}".')

    def _drop(self, statement: st.Drop, result: StatementResult) -> None:
        self.session.drop()
        self._emit(result, EventLevel.INFO, "Moved to the parent folder.")

    def _load(self, statement: st.Load, result: StatementResult) -> None:
        path = self.session.resolve(statement.path)
        if not self.fs.is_file(path):
            raise PathNotFoundError(statement.path, f'File "{statement.path}" does not exist.')

        max_depth = self.config.get('general', {}).get('max_load_depth', 8)
        if self._load_depth >= max_depth:
            raise DslSyntaxError(f"LOAD nested deeper than {max_depth} levels.")

        lines = self.fs.read_text(path, self.encoding).splitlines()
        self._load_depth += 1
        try:
            for line in lines:
                text = line.strip()
                if not text or text.startswith('//'):
                    continue
                self._emit(result, EventLevel.INFO, f"Executing: {text}")
                result.children.append(self.execute(text))
        finally:
            self._load_depth -= 1

    # Directory-wide handlers

    def _list(self, statement: st.Listing, result: StatementResult) -> None:
        records = self.enumerator.enumerate(self.cwd, statement.kind)
        if not records:
            what = {
                EntityKind.FILE: "No files in the folder.",
                EntityKind.FOLDER: "No folders in the folder.",
            }.get(statement.kind, "No files or folders in the folder.")
            self._emit(result, EventLevel.INFO, what)
        else:
            self._emit(result, EventLevel.INFO, f"Listed {len(records)} entries.")
        result.records = records

    def _count(self, statement: st.Count, result: StatementResult) -> None:
        total = len(self.enumerator.enumerate(self.cwd, statement.kind))
        label = {
            EntityKind.FILE: "Files",
            EntityKind.FOLDER: "Folders",
        }.get(statement.kind, "All entries")
        self._emit(result, EventLevel.INFO, f"{label}: {total}")

    def _batch_delete(self, statement: st.BatchDelete, result: StatementResult) -> None:
        label = _label(statement.kind)
        records = self._pipeline(result).run(self._source_records(statement), statement.where)
        for record in records:
            try:
                if record.is_folder:
                    self.fs.remove_tree(record.path)
                else:
                    self.fs.remove_file(record.path)
            except OSError as e:
                self._emit(result, EventLevel.ERROR,
                           f'Error deleting {label.lower()} "{record.name}": {e}', item=record.name)
                continue
            self._emit(result, EventLevel.SUCCESS, f'{label} "{record.name}" deleted.', item=record.name)

    def _batch_transfer(self, statement: st.BatchTransfer, result: StatementResult) -> None:
        label = _label(statement.kind)
        verb = "copied" if statement.copy else "moved"
        records = self._pipeline(result).run(self._source_records(statement), statement.where)
        for record in records:
            destination = self.session.resolve(statement.target, record.name)
            try:
                if not statement.copy:
                    self.fs.move(record.path, destination)
                elif record.is_folder:
                    self.fs.copy_tree(record.path, destination)
                else:
                    self.fs.copy_file(record.path, destination)
            except OSError as e:
                self._emit(result, EventLevel.ERROR,
                           f'Error: {label.lower()} "{record.name}" not {verb}: {e}', item=record.name)
                continue
            self._emit(result, EventLevel.SUCCESS,
                       f'{label} "{record.name}" {verb} to "{statement.target}".', item=record.name)

    def _select(self, statement: st.Select, result: StatementResult) -> None:
        records = self._source_records(statement)
        results = self._pipeline(result).run(records, statement.where, statement.order_by)

        if statement.into is None:
            result.records = results
            self._emit(result, EventLevel.INFO, f"Query matched {len(results)} entries.")
            return

        output = self.config.get('output', {})
        content = render_report(
            results,
            statement.into,
            title=output.get('text_report_title', DEFAULT_REPORT_TITLE),
            delimiter=output.get('csv_delimiter', ','),
        )
        self.fs.write_text(self.session.resolve(statement.into), content, 'utf-8')
        self._emit(result, EventLevel.SUCCESS, f"Results saved to: {statement.into}")

    def _unknown(self, statement: st.Unknown, result: StatementResult) -> None:
        message = f"Unrecognized statement: {statement.text} ({statement.reason})"
        if statement.suggestion:
            message += f'. Did you mean "{statement.suggestion}"?'
        result.error_code = SYNTAX_ERROR
        self._emit(result, EventLevel.ERROR, message)
