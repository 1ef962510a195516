"""
Tests for the statement interpreter.

Every handler runs against a real temporary directory.
"""

import json
import logging
import os
import stat

import pytest

from filang.config import SUCCESS_LEVEL, get_default_config
from filang.domain.event import EventLevel
from filang.domain.statement import SelectFiles, Unknown
from filang.exit_codes import PATH_NOT_FOUND, SYNTAX_ERROR
from filang.services import Interpreter, Session


@pytest.fixture
def workspace(tmp_path):
    (tmp_path / 'a.txt').write_text('alpha\n')
    (tmp_path / 'b.txt').write_text('bravo bravo\n')
    (tmp_path / 'notes.md').write_text('# TODO: write docs\n')
    (tmp_path / 'docs').mkdir()
    (tmp_path / 'archive').mkdir()
    return tmp_path


@pytest.fixture
def interpreter(workspace):
    return Interpreter(config=get_default_config(), session=Session(str(workspace)))


def levels(result):
    return [e.level for e in result.events]


class TestFileHandlers:
    """CREATE / READ / WRITE / UPDATE / DELETE FILE."""

    def test_create_file(self, interpreter, workspace):
        result = interpreter.execute('CREATE FILE "new.txt"')
        assert levels(result) == [EventLevel.SUCCESS]
        assert (workspace / 'new.txt').read_text() == ''

    def test_create_existing_warns(self, interpreter):
        result = interpreter.execute('CREATE FILE "a.txt"')
        assert levels(result) == [EventLevel.WARNING]
        assert result.success

    def test_read_file(self, interpreter):
        result = interpreter.execute('READ FILE "a.txt"')
        assert levels(result) == [EventLevel.INFO]
        assert 'alpha' in result.events[0].message

    def test_read_missing(self, interpreter):
        result = interpreter.execute('READ FILE "ghost.txt"')
        assert levels(result) == [EventLevel.ERROR]
        assert not result.success

    def test_read_wildcard(self, interpreter):
        result = interpreter.execute('READ FILE "*"')
        assert [e.item for e in result.events] == ['a.txt', 'b.txt', 'notes.md']

    def test_read_wildcard_continues_past_undecodable_file(self, tmp_path):
        (tmp_path / 'a.bin').write_bytes(b'\xff\xfe\x00binary')
        (tmp_path / 'b.txt').write_text('hello')
        interpreter = Interpreter(config=get_default_config(), session=Session(str(tmp_path)))

        result = interpreter.execute('READ FILE "*"')
        assert levels(result) == [EventLevel.ERROR, EventLevel.INFO]
        assert [e.item for e in result.events] == ['a.bin', 'b.txt']
        assert 'hello' in result.events[1].message
        assert result.error_code is None

    def test_write_decodes_escapes(self, interpreter, workspace):
        result = interpreter.execute(r'WRITE FILE "a.txt" TO "one\ttwo\nthree \"q\""')
        assert levels(result) == [EventLevel.SUCCESS]
        assert (workspace / 'a.txt').read_text() == 'one\ttwo\nthree "q"'

    def test_write_undecodable_kept_verbatim(self, interpreter, workspace):
        result = interpreter.execute(r'WRITE FILE "a.txt" TO "bad \x escape"')
        assert levels(result) == [EventLevel.WARNING, EventLevel.SUCCESS]
        assert (workspace / 'a.txt').read_text() == r'bad \x escape'

    def test_update_appends_verbatim(self, interpreter, workspace):
        interpreter.execute(r'UPDATE FILE "a.txt" ADD "more\n"')
        assert (workspace / 'a.txt').read_text() == 'alpha\nmore\\n'

    def test_delete_file(self, interpreter, workspace):
        result = interpreter.execute('DELETE FILE "a.txt"')
        assert levels(result) == [EventLevel.SUCCESS]
        assert not (workspace / 'a.txt').exists()

    def test_delete_missing(self, interpreter):
        result = interpreter.execute('DELETE FILE "ghost.txt"')
        assert levels(result) == [EventLevel.ERROR]

    def test_delete_wildcard(self, tmp_path):
        (tmp_path / 'a.txt').write_text('a')
        (tmp_path / 'b.txt').write_text('b')
        (tmp_path / 'keep').mkdir()
        interpreter = Interpreter(config=get_default_config(), session=Session(str(tmp_path)))

        result = interpreter.execute('DELETE FILE "*"')

        assert levels(result) == [EventLevel.SUCCESS, EventLevel.SUCCESS]
        assert sorted(os.listdir(tmp_path)) == ['keep']

    def test_edit_without_editor(self, interpreter):
        result = interpreter.execute('EDIT FILE "a.txt"')
        assert levels(result) == [EventLevel.ERROR]

    def test_edit_with_editor(self, interpreter, workspace):
        class FakeEditor:
            def __init__(self):
                self.paths = []

            def edit(self, path):
                self.paths.append(path)
                return True

        editor = FakeEditor()
        interpreter.editor = editor
        result = interpreter.execute('FMLE FILE "a.txt"')
        assert levels(result) == [EventLevel.SUCCESS]
        assert editor.paths == [str(workspace / 'a.txt')]


class TestFolderHandlers:
    """CREATE / DELETE FOLDER, USE, DROP."""

    def test_create_and_delete_folder(self, interpreter, workspace):
        assert levels(interpreter.execute('CREATE FOLDER "tmp"')) == [EventLevel.SUCCESS]
        (workspace / 'tmp' / 'inner.txt').write_text('x')
        assert levels(interpreter.execute('DELETE FOLDER "tmp"')) == [EventLevel.SUCCESS]
        assert not (workspace / 'tmp').exists()

    def test_create_existing_folder_warns(self, interpreter):
        assert levels(interpreter.execute('CREATE FOLDER "docs"')) == [EventLevel.WARNING]

    def test_use_and_drop(self, interpreter, workspace):
        interpreter.execute('USE "docs"')
        assert interpreter.cwd == str(workspace / 'docs')
        interpreter.execute('CREATE FILE "inside.txt"')
        assert (workspace / 'docs' / 'inside.txt').exists()
        interpreter.execute('DROP')
        assert interpreter.cwd == str(workspace)

    def test_use_missing(self, interpreter, workspace):
        result = interpreter.execute('USE "nowhere"')
        assert levels(result) == [EventLevel.ERROR]
        assert result.exit_code == PATH_NOT_FOUND
        assert interpreter.cwd == str(workspace)

    def test_drop_at_root(self):
        interpreter = Interpreter(config=get_default_config(), session=Session(os.path.abspath(os.sep)))
        result = interpreter.execute('DROP')
        assert levels(result) == [EventLevel.ERROR]


class TestTransferHandlers:
    """MOVE / COPY / RENAME / CHMOD / MERGE."""

    def test_move_file(self, interpreter, workspace):
        result = interpreter.execute('MOVE FILE "a.txt" TO "archive"')
        assert levels(result) == [EventLevel.SUCCESS]
        assert (workspace / 'archive' / 'a.txt').exists()
        assert not (workspace / 'a.txt').exists()

    def test_copy_file(self, interpreter, workspace):
        interpreter.execute('COPY FILE "a.txt" TO "archive"')
        assert (workspace / 'archive' / 'a.txt').read_text() == 'alpha\n'
        assert (workspace / 'a.txt').exists()

    def test_copy_folder_recursive(self, interpreter, workspace):
        (workspace / 'docs' / 'deep').mkdir()
        (workspace / 'docs' / 'deep' / 'x.txt').write_text('x')
        interpreter.execute('COPY FOLDER "docs" TO "archive"')
        assert (workspace / 'archive' / 'docs' / 'deep' / 'x.txt').read_text() == 'x'

    def test_move_wildcard(self, interpreter, workspace):
        result = interpreter.execute('MOVE FILE "*" TO "archive"')
        assert result.succeeded == 3
        assert sorted(os.listdir(workspace / 'archive')) == ['a.txt', 'b.txt', 'notes.md']

    def test_move_missing(self, interpreter):
        assert levels(interpreter.execute('MOVE FILE "ghost" TO "archive"')) == [EventLevel.ERROR]

    def test_rename(self, interpreter, workspace):
        result = interpreter.execute('RENAME FILE "a.txt" TO "z.txt"')
        assert levels(result) == [EventLevel.SUCCESS]
        assert (workspace / 'z.txt').exists()

    def test_rename_missing(self, interpreter):
        assert levels(interpreter.execute('RENAME FOLDER "ghost" TO "x"')) == [EventLevel.ERROR]

    def test_chmod(self, interpreter, workspace):
        result = interpreter.execute('CHMOD "a.txt" TO "600"')
        assert levels(result) == [EventLevel.SUCCESS]
        assert stat.S_IMODE(os.stat(workspace / 'a.txt').st_mode) == 0o600

    def test_merge(self, interpreter, workspace):
        result = interpreter.execute('MERGE "a.txt" "ghost.txt" "b.txt" TO "all.txt"')
        assert levels(result) == [EventLevel.WARNING, EventLevel.SUCCESS]
        assert (workspace / 'all.txt').read_text() == 'alpha\n\nbravo bravo\n\n'


class TestDirectoryHandlers:
    """LIST and COUNT."""

    def test_count(self, interpreter):
        assert interpreter.execute('COUNT FILES').events[0].message == 'Files: 3'
        assert interpreter.execute('COUNT FOLDERS').events[0].message == 'Folders: 2'
        assert interpreter.execute('COUNT ALL').events[0].message == 'All entries: 5'

    def test_list(self, interpreter):
        result = interpreter.execute('LIST FILES')
        assert [r.name for r in result.records] == ['a.txt', 'b.txt', 'notes.md']
        assert [r.name for r in interpreter.execute('LIST *').records] == [
            'a.txt', 'archive', 'b.txt', 'docs', 'notes.md'
        ]

    def test_list_reports_count(self, interpreter):
        result = interpreter.execute('LIST FOLDERS')
        assert levels(result) == [EventLevel.INFO]
        assert result.events[0].message == 'Listed 2 entries.'

    def test_list_empty(self, tmp_path):
        interpreter = Interpreter(config=get_default_config(), session=Session(str(tmp_path)))
        result = interpreter.execute('LIST FOLDERS')
        assert result.records == []
        assert levels(result) == [EventLevel.INFO]


class TestSelect:
    """SELECT with WHERE / ORDER BY / INTO."""

    def test_deeply_nested_where_warns(self, interpreter):
        line = 'SELECT FILES WHERE ' + '(' * 250 + 'size > 0' + ')' * 250
        result = interpreter.execute(line)
        assert result.records == []
        assert levels(result) == [EventLevel.WARNING, EventLevel.INFO]
        assert 'nested too deeply' in result.events[0].message

    def test_select_returns_records(self, interpreter):
        result = interpreter.execute('SELECT FILES WHERE extension = ".txt" ORDER BY size DESC')
        assert isinstance(result.statement, SelectFiles)
        assert [r.name for r in result.records] == ['b.txt', 'a.txt']

    def test_select_folders(self, interpreter):
        result = interpreter.execute('SELECT FOLDERS WHERE name LIKE "a%"')
        assert [r.name for r in result.records] == ['archive']

    def test_select_from(self, interpreter, workspace):
        (workspace / 'docs' / 'guide.md').write_text('guide')
        result = interpreter.execute('SELECT FILES FROM "docs"')
        assert [r.name for r in result.records] == ['guide.md']

    def test_select_from_missing(self, interpreter):
        result = interpreter.execute('SELECT FILES FROM "nowhere"')
        assert levels(result) == [EventLevel.ERROR]
        assert result.exit_code == PATH_NOT_FOUND

    def test_content_like(self, interpreter):
        result = interpreter.execute('SELECT FILES WHERE content LIKE "%TODO%"')
        assert [r.name for r in result.records] == ['notes.md']

    def test_content_like_skips_huge_files(self, interpreter, workspace):
        (workspace / 'huge.log').write_text('TODO' + 'x' * (10 * 1024 * 1024 + 1))
        result = interpreter.execute('SELECT FILES WHERE content LIKE "%TODO%"')
        assert [r.name for r in result.records] == ['notes.md']

    def test_unknown_sort_field(self, interpreter, workspace):
        result = interpreter.execute('SELECT FILES ORDER BY colour INTO "out.json"')
        assert levels(result) == [EventLevel.ERROR]
        assert result.records is None
        assert not (workspace / 'out.json').exists()

    def test_bad_condition_is_warning(self, interpreter):
        result = interpreter.execute('SELECT FILES WHERE colour = "red" OR size > 0')
        assert EventLevel.WARNING in levels(result)
        assert len(result.records) == 3

    def test_into_json_round_trip(self, interpreter, workspace):
        listed = interpreter.execute('SELECT FILES').records
        result = interpreter.execute('SELECT FILES INTO "out.json"')
        assert levels(result) == [EventLevel.SUCCESS]

        data = json.loads((workspace / 'out.json').read_text())
        assert [(d['name'], d['size'], d['extension']) for d in data] == [
            (r.name, r.size, r.extension) for r in listed
        ]

    def test_into_csv_and_text(self, interpreter, workspace):
        interpreter.execute('SELECT FILES WHERE extension = ".txt" INTO "out.csv"')
        lines = (workspace / 'out.csv').read_text().splitlines()
        assert lines[0].startswith('name,path,size')
        assert len(lines) == 3

        interpreter.execute('SELECT FILES INTO "report.txt"')
        assert (workspace / 'report.txt').read_text().startswith('Search report:')


class TestBatchHandlers:
    """DELETE / MOVE / COPY FILES|FOLDERS with WHERE."""

    def test_delete_files_where(self, interpreter, workspace):
        result = interpreter.execute('DELETE FILES WHERE extension = ".txt"')
        assert levels(result) == [EventLevel.SUCCESS, EventLevel.SUCCESS]
        assert sorted(os.listdir(workspace)) == ['archive', 'docs', 'notes.md']

    def test_delete_folders_from(self, interpreter, workspace):
        (workspace / 'docs' / 'old').mkdir()
        (workspace / 'docs' / 'new').mkdir()
        result = interpreter.execute('DELETE FOLDERS FROM "docs" WHERE name = "old"')
        assert result.succeeded == 1
        assert os.listdir(workspace / 'docs') == ['new']

    def test_move_files_where(self, interpreter, workspace):
        result = interpreter.execute('MOVE FILES WHERE name LIKE "%.txt" TO "archive"')
        assert result.succeeded == 2
        assert sorted(os.listdir(workspace / 'archive')) == ['a.txt', 'b.txt']

    def test_copy_folders(self, interpreter, workspace):
        (workspace / 'docs' / 'x.txt').write_text('x')
        result = interpreter.execute('COPY FOLDERS WHERE name = "docs" TO "archive"')
        assert result.succeeded == 1
        assert (workspace / 'archive' / 'docs' / 'x.txt').exists()

    def test_failing_item_does_not_stop_batch(self, interpreter, workspace):
        (workspace / 'archive' / 'a.txt').mkdir()
        result = interpreter.execute('COPY FILES WHERE extension = ".txt" TO "archive"')
        assert levels(result) == [EventLevel.ERROR, EventLevel.SUCCESS]
        assert result.events[0].item == 'a.txt'
        assert (workspace / 'archive' / 'b.txt').exists()


class TestLoadAndErrors:
    """LOAD scripts, unknown statements and event logging."""

    def test_load_runs_lines(self, interpreter, workspace):
        (workspace / 'setup.fql').write_text(
            '// create things\n'
            'CREATE FOLDER "built"\n'
            '\n'
            'USE "built"\n'
            'CREATE FILE "x.txt"\n'
        )
        result = interpreter.execute('LOAD "setup.fql"')
        assert len(result.children) == 3
        assert result.success
        assert (workspace / 'built' / 'x.txt').exists()
        assert result.messages(EventLevel.INFO)[0] == 'Executing: CREATE FOLDER "built"'

    def test_load_missing(self, interpreter):
        result = interpreter.execute('LOAD "ghost.fql"')
        assert result.exit_code == PATH_NOT_FOUND

    def test_load_recursion_is_bounded(self, interpreter, workspace):
        (workspace / 'loop.fql').write_text('LOAD "loop.fql"\n')
        result = interpreter.execute('LOAD "loop.fql"')
        assert not result.success
        assert result.exit_code == SYNTAX_ERROR

    def test_unknown_statement(self, interpreter):
        result = interpreter.execute('SELEKT FILES')
        assert isinstance(result.statement, Unknown)
        assert levels(result) == [EventLevel.ERROR]
        assert 'SELECT FILES' in result.events[0].message
        assert result.exit_code == SYNTAX_ERROR

    def test_events_forwarded_to_logger(self, interpreter, caplog):
        with caplog.at_level(logging.INFO, logger='filang'):
            interpreter.execute('DELETE FILE "a.txt"')
        assert any(
            r.levelno == SUCCESS_LEVEL and r.getMessage() == 'File "a.txt" deleted.'
            for r in caplog.records
        )

    def test_result_to_dict(self, interpreter):
        data = interpreter.execute('SELECT FILES WHERE name = "a.txt"').to_dict()
        assert data['statement'] == 'SelectFiles'
        assert data['success'] is True
        assert data['records'][0]['name'] == 'a.txt'
