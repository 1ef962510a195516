"""
Tests for the filang CLI commands.
"""

import json
import os

import pytest
from click.testing import CliRunner

from filang.cli import cli
from filang.commands.exec import script_lines
from filang.exit_codes import PARTIAL_SUCCESS, PATH_NOT_FOUND, SYNTAX_ERROR


@pytest.fixture
def runner(tmp_path, monkeypatch):
    home = tmp_path / 'home'
    home.mkdir()
    monkeypatch.setenv('HOME', str(home))
    for key in [k for k in os.environ if k.startswith('FILANG_')]:
        monkeypatch.delenv(key)
    return CliRunner()


@pytest.fixture
def workdir(tmp_path):
    work = tmp_path / 'work'
    work.mkdir()
    (work / 'a.txt').write_text('alpha')
    (work / 'b.log').write_text('bravo')
    return work


class TestExecCommand:
    """Tests for `filang exec`."""

    def test_exec_statements(self, runner, workdir):
        result = runner.invoke(cli, [
            'exec', '--directory', str(workdir),
            'CREATE FOLDER "archive"',
            'MOVE FILES WHERE extension = ".log" TO "archive"',
        ])
        assert result.exit_code == 0, result.output
        assert (workdir / 'archive' / 'b.log').exists()

    def test_exec_json_output(self, runner, workdir):
        result = runner.invoke(cli, [
            'exec', '--json', '-d', str(workdir), 'SELECT FILES ORDER BY name DESC',
        ])
        assert result.exit_code == 0
        data = json.loads(result.output.strip().splitlines()[-1])
        assert data['statement'] == 'SelectFiles'
        assert [r['name'] for r in data['records']] == ['b.log', 'a.txt']

    def test_exec_table_output(self, runner, workdir):
        result = runner.invoke(cli, ['exec', '-d', str(workdir), 'SELECT FILES'])
        assert result.exit_code == 0
        assert 'a.txt' in result.output

    def test_syntax_error_exit_code(self, runner, workdir):
        result = runner.invoke(cli, ['exec', '-d', str(workdir), 'SELEKT FILES'])
        assert result.exit_code == SYNTAX_ERROR

    def test_path_not_found_exit_code(self, runner, workdir):
        result = runner.invoke(cli, ['exec', '-d', str(workdir), 'SELECT FILES FROM "nope"'])
        assert result.exit_code == PATH_NOT_FOUND

    def test_partial_success_exit_code(self, runner, workdir):
        (workdir / 'dst').mkdir()
        (workdir / 'dst' / 'a.txt').mkdir()
        result = runner.invoke(cli, ['exec', '-d', str(workdir), 'COPY FILES TO "dst"'])
        assert result.exit_code == PARTIAL_SUCCESS
        assert (workdir / 'dst' / 'b.log').exists()

    def test_requires_statement(self, runner):
        result = runner.invoke(cli, ['exec'])
        assert result.exit_code == 2


class TestRunCommand:
    """Tests for `filang run`."""

    def test_run_script(self, runner, workdir):
        script = workdir / 'tidy.fql'
        script.write_text(
            '// tidy up\n'
            'CREATE FOLDER "logs"\n'
            '\n'
            'MOVE FILES WHERE name LIKE "%.log" TO "logs"\n'
        )
        result = runner.invoke(cli, ['run', str(script), '--directory', str(workdir)])
        assert result.exit_code == 0, result.output
        assert (workdir / 'logs' / 'b.log').exists()

    def test_run_rejects_other_extensions(self, runner, workdir):
        script = workdir / 'tidy.sql'
        script.write_text('COUNT FILES\n')
        result = runner.invoke(cli, ['run', str(script)])
        assert result.exit_code == 2

    def test_script_lines(self):
        text = '  // comment\nCOUNT FILES  \n\n   \nLIST *\n'
        assert script_lines(text) == ['COUNT FILES', 'LIST *']


class TestConfigCommand:
    """Tests for `filang config`."""

    def test_show(self, runner):
        result = runner.invoke(cli, ['config', 'show'])
        assert result.exit_code == 0
        assert json.loads(result.output)['general']['max_load_depth'] == 8

    def test_path(self, runner, tmp_path):
        result = runner.invoke(cli, ['config', 'path'])
        assert result.exit_code == 0
        assert json.loads(result.output)['config_path'].endswith(os.path.join('.filang', 'config.json'))

    def test_init_writes_defaults_once(self, runner, tmp_path):
        result = runner.invoke(cli, ['config', 'init'])
        assert result.exit_code == 0
        path = tmp_path / 'home' / '.filang' / 'config.json'
        assert path.exists()

        result = runner.invoke(cli, ['config', 'init'])
        assert 'already exists' in result.output


class TestCliGroup:
    """Tests for the top-level group."""

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert 'filang' in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ['--help'])
        for name in ('shell', 'exec', 'run', 'config'):
            assert name in result.output
