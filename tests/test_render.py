"""
Tests for filang/render.py rendering functions.

These tests verify that render functions:
1. Serialize every record attribute for JSON and CSV reports
2. Produce the fixed-width text report
3. Handle empty result sets gracefully
4. Produce expected output patterns for interactive display
"""
import csv
import io
import json
from datetime import datetime, timezone

import pytest

from filang import render
from filang.domain.entity import EntityKind, EntityRecord, RECORD_FIELDS
from filang.domain.event import StatementResult
from filang.domain.statement import ListAll, SelectFiles


@pytest.fixture
def records():
    stamp = datetime(2024, 5, 4, 3, 2, 1, tzinfo=timezone.utc)
    return [
        EntityRecord('report.pdf', '/x/report.pdf', 2048, '.pdf', stamp, stamp, 0o644),
        EntityRecord('Makefile', '/x/Makefile', 10, '', stamp, stamp, 0o755),
        EntityRecord('src', '/x/src', 0, '', stamp, stamp, 0o755, EntityKind.FOLDER),
    ]


class TestReports:
    """INTO file serialization."""

    def test_json(self, records):
        data = json.loads(render.render_json(records))
        assert [d['name'] for d in data] == ['report.pdf', 'Makefile', 'src']
        assert data[0]['size'] == 2048
        assert data[0]['extension'] == '.pdf'
        assert data[0]['modified'] == '2024-05-04T03:02:01+00:00'
        assert data[1]['permissions'] == '0755'

    def test_csv(self, records):
        text = render.render_csv(records)
        rows = list(csv.reader(io.StringIO(text)))
        assert tuple(rows[0]) == RECORD_FIELDS
        assert len(rows) == 4
        assert rows[1][:4] == ['report.pdf', '/x/report.pdf', '2048', '.pdf']

    def test_csv_custom_delimiter(self, records):
        text = render.render_csv(records, delimiter=';')
        assert text.splitlines()[0] == ';'.join(RECORD_FIELDS)

    def test_text_report(self, records):
        text = render.render_text_report(records)
        lines = text.splitlines()
        assert lines[0] == "Search report:"
        assert lines[1].startswith('report.pdf' + ' ' * 20)
        assert '2048 B' in lines[1]
        assert lines[1].endswith('2024-05-04T03:02:01+00:00')

    def test_text_report_title(self, records):
        assert render.render_text_report([], title="Found:") == "Found:\n"

    @pytest.mark.parametrize('path,expected', [
        ('out.json', '['),
        ('OUT.CSV', 'name,'),
        ('out.txt', 'Search report:'),
        ('out', 'Search report:'),
    ])
    def test_format_follows_extension(self, records, path, expected):
        assert render.render_report(records, path).startswith(expected)


class TestInteractiveDisplay:
    """Rich output for SELECT and LIST."""

    def test_empty_results(self, capsys):
        render.render_results_table([])
        captured = capsys.readouterr()
        assert "No results." in captured.out

    def test_results_table(self, records, capsys):
        render.render_results_table(records)
        captured = capsys.readouterr()
        assert "report.pdf" in captured.out
        assert "2.00 KB" in captured.out
        assert "(none)" in captured.out
        assert "2024-05-04" in captured.out
        assert "Found 3 entries." in captured.out

    def test_listing(self, records, capsys):
        render.render_listing(records)
        captured = capsys.readouterr()
        assert "0644" in captured.out
        assert "FOLDER" in captured.out
        assert "Makefile" in captured.out

    def test_render_result_picks_listing(self, records, capsys):
        render.render_result(StatementResult(ListAll(), records=records))
        captured = capsys.readouterr()
        assert "FOLDER" in captured.out
        assert "Found" not in captured.out

    def test_render_result_includes_children(self, records, capsys):
        parent = StatementResult(ListAll())
        parent.children.append(StatementResult(SelectFiles(), records=records[:1]))
        render.render_result(parent)
        captured = capsys.readouterr()
        assert "Found 1 entries." in captured.out

    def test_no_records_prints_nothing(self, capsys):
        render.render_records(None)
        assert capsys.readouterr().out == ""
