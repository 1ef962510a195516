"""
Rendering functions for filang output.

This module handles report serialization and pretty-printing.
The interpreter produces ordered EntityRecords; this module makes them
human-readable or writes them to an INTO file.
"""

import csv
import io
import json
import os
from typing import List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from .domain.entity import EntityRecord, RECORD_FIELDS, format_permissions
from .domain.event import StatementResult
from .domain.statement import Listing

console = Console()

DEFAULT_REPORT_TITLE = "Search report:"


def render_json(records: Sequence[EntityRecord]) -> str:
    """All record attributes as a JSON array."""
    return json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False)


def render_csv(records: Sequence[EntityRecord], delimiter: str = ',') -> str:
    """Header row plus one row per record, fields in declaration order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator='\n')
    writer.writerow(RECORD_FIELDS)
    for record in records:
        data = record.to_dict()
        writer.writerow([data[f] for f in RECORD_FIELDS])
    return buffer.getvalue()


def render_text_report(records: Sequence[EntityRecord], title: str = DEFAULT_REPORT_TITLE) -> str:
    """Fixed-width text report: name, extension, size, modification time."""
    lines = [title]
    for r in records:
        lines.append(
            f"{r.name:<30} {r.extension:<8} {f'{r.size} B':>10} {r.modified.isoformat()}"
        )
    return '\n'.join(lines) + '\n'


def render_report(records: Sequence[EntityRecord], output_path: str,
                  title: str = DEFAULT_REPORT_TITLE, delimiter: str = ',') -> str:
    """
    Serialize records in the format implied by the output file extension.

    ``.json`` and ``.csv`` get structured output; anything else gets the
    fixed-width text report.
    """
    ext = os.path.splitext(output_path)[1].lower()
    if ext == '.json':
        return render_json(records)
    if ext == '.csv':
        return render_csv(records, delimiter)
    return render_text_report(records, title)


def render_results_table(records: Sequence[EntityRecord], title: Optional[str] = None) -> None:
    """
    Render SELECT results as a pretty table.

    Args:
        records: Records to display, in order
        title: Optional table title
    """
    if not records:
        console.print("[yellow]No results.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Name", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Extension", style="blue")
    table.add_column("Modified", style="dim")

    for r in records:
        table.add_row(
            r.name,
            f"{r.size / 1024:.2f} KB",
            r.extension or "(none)",
            r.modified.date().isoformat(),
        )

    console.print(table)
    console.print(f"Found {len(records)} entries.")


def render_listing(records: Sequence[EntityRecord]) -> None:
    """Render LIST output: permissions, kind, size, modification time, name."""
    table = Table(show_header=True, header_style="bold cyan", box=box.SIMPLE)
    table.add_column("Mode", style="yellow")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Modified", style="dim")
    table.add_column("Name", style="green")

    for r in records:
        table.add_row(
            format_permissions(r.permissions),
            r.kind.label,
            "" if r.is_folder else f"{r.size}B",
            r.modified.isoformat(timespec='seconds'),
            r.name,
        )

    console.print(table)


def render_records(records: Optional[List[EntityRecord]], listing: bool = False) -> None:
    """Display whatever records a statement produced."""
    if records is None:
        return
    if listing:
        if records:
            render_listing(records)
    else:
        render_results_table(records)


def render_result(result: StatementResult) -> None:
    """Display the records of a result and of any statements it ran."""
    render_records(result.records, listing=isinstance(result.statement, Listing))
    for child in result.children:
        render_result(child)
