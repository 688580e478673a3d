"""CLI entry point for tradelens."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table as RichTable

from tradelens import __version__
from tradelens.errors import DecodeError
from tradelens.export import write_export
from tradelens.extract import IngestResult, ingest_workbook
from tradelens.io import load_workbook
from tradelens.models import NOT_APPLICABLE, IngestReport, RunManifest, TransactionRecord
from tradelens.qc import write_ingest_report, write_run_manifest
from tradelens.search import cell_text
from tradelens.summary import CHART_TOP_N, build_summary, top_entries
from tradelens.table import filter_records, paginate, sort_records, totals
from tradelens.utils import sha256_file, utcnow_iso
from tradelens.viewer import ViewerState

app = typer.Typer(
    name="tradelens",
    help="tradelens — Explore insider-trading spreadsheets.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

_RECORD_COLUMNS: tuple[tuple[str, str], ...] = (
    ("symbol", "Symbol"),
    ("acquirer_disposer", "Acquirer/Disposer"),
    ("num_securities", "No. of Securities"),
    ("value", "Value (INR)"),
    ("transaction_type", "Type"),
    ("date", "Date"),
)


class SortKey(str, Enum):
    symbol = "symbol"
    acquirer_disposer = "acquirer_disposer"
    num_securities = "num_securities"
    value = "value"
    transaction_type = "transaction_type"
    date = "date"


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"tradelens v{__version__}")
        raise typer.Exit()


def _fmt_number(value: float) -> str:
    return f"{value:,.2f}"


def _load(input_file: Path) -> IngestResult:
    """Decode and ingest *input_file*; decode failures exit with code 2."""
    try:
        raw = load_workbook(input_file)
    except (FileNotFoundError, DecodeError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)
    return ingest_workbook(raw)


def _write_manifest(
    out_dir: Path,
    input_file: Path,
    created_at: str,
    *,
    records: int = 0,
    sheets: int = 0,
    status: str = "success",
    error_message: str = "",
) -> Path:
    sha256 = ""
    try:
        sha256 = sha256_file(input_file)
    except OSError:
        pass

    manifest = RunManifest(
        version=__version__,
        input_path=str(input_file.resolve()),
        output_dir=str(out_dir.resolve()),
        created_at_utc=created_at,
        status=status,
        records=records,
        sheets=sheets,
        sha256=sha256,
        error_message=error_message,
    )
    return write_run_manifest(out_dir, manifest)


def _record_table(records: list[TransactionRecord], title: str) -> RichTable:
    tbl = RichTable(title=title, show_lines=False)
    for field_name, label in _RECORD_COLUMNS:
        justify = "right" if field_name in ("num_securities", "value") else "left"
        tbl.add_column(label, justify=justify)
    for record in records:
        row = record.to_dict()
        tbl.add_row(
            *[
                _fmt_number(row[f]) if f in ("num_securities", "value") else escape(cell_text(row[f]))
                for f, _label in _RECORD_COLUMNS
            ]
        )
    return tbl


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """tradelens CLI."""


# ── analyze command ──────────────────────────────────────────────


@app.command()
def analyze(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to an .xlsx, .xls or .csv workbook.",
        exists=True, readable=True,
    ),
    out_dir: Path = typer.Option(
        Path("output"), "--out-dir", "-o",
        help="Output directory for ingest report + manifest (+ export).",
    ),
    export: bool = typer.Option(
        False, "--export/--no-export",
        help="Also write Export_<name>.xlsx with the extracted records.",
    ),
    top: int = typer.Option(
        CHART_TOP_N, "--top", min=1,
        help="Number of symbols to list in the value summary.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output; still writes all artifacts.",
    ),
) -> None:
    """Extract transactions from the first sheet and summarise value per symbol."""
    echo = _printer(quiet)
    created_at = utcnow_iso()
    out_dir.mkdir(parents=True, exist_ok=True)

    if not quiet:
        console.print(Panel(
            f"[bold]tradelens[/bold] v{__version__}\n"
            f"Input:  {input_file}\nOutput: {out_dir}",
            title="Analyze", border_style="blue",
        ))

    echo("[blue]>[/blue] Loading workbook …")
    try:
        raw = load_workbook(input_file)
    except (FileNotFoundError, DecodeError) as exc:
        report = IngestReport(warnings=[str(exc)])
        report_path = write_ingest_report(out_dir, report)
        manifest_path = _write_manifest(
            out_dir, input_file, created_at, status="failed", error_message=str(exc)
        )
        _err(str(exc))
        console.print(f"  Report   -> {report_path}")
        console.print(f"  Manifest -> {manifest_path}")
        raise typer.Exit(code=2)

    try:
        result = ingest_workbook(raw)
        report_path = write_ingest_report(out_dir, result.report)
        echo(f"  {result.report.sheets} sheet(s); first sheet has {result.report.rows_in} data rows")

        if result.status == "empty":
            message = "No valid data found in the file."
            manifest_path = _write_manifest(
                out_dir, input_file, created_at, status="failed", error_message=message
            )
            _err(message)
            console.print(f"  Report   -> {report_path}")
            console.print(f"  Manifest -> {manifest_path}")
            raise typer.Exit(code=2)

        if not quiet:
            for w in result.report.warnings:
                console.print(f"  [yellow]![/yellow] {w}")

        if result.status == "raw_only":
            echo(
                "  No transaction data was extracted. "
                f"View the raw sheets with: tradelens view --input {input_file.name}"
            )
        else:
            summary = top_entries(build_summary(result.records), top)
            if not quiet:
                tbl = RichTable(title="Total Value by Symbol", show_lines=False)
                tbl.add_column("Symbol", style="bold")
                tbl.add_column("Total Value (INR)", justify="right")
                for entry in summary:
                    tbl.add_row(escape(cell_text(entry.symbol)), _fmt_number(entry.total_value))
                console.print(tbl)
                sums = totals(result.records)
                console.print(
                    f"  {len(result.records)} transactions; "
                    f"securities {_fmt_number(sums['num_securities'])}, "
                    f"value {_fmt_number(sums['value'])}"
                )
            if export:
                export_path = write_export(out_dir, result.records, input_file.name)
                echo(f"  Export   -> {export_path}")

        manifest_path = _write_manifest(
            out_dir,
            input_file,
            created_at,
            records=len(result.records),
            sheets=result.report.sheets,
        )
        echo(f"  Report   -> {report_path}")
        echo(f"  Manifest -> {manifest_path}")
    except typer.Exit:
        raise
    except Exception as exc:
        message = f"Unexpected internal error: {exc}"
        manifest_path = _write_manifest(
            out_dir, input_file, created_at, status="failed", error_message=message
        )
        _err(message)
        console.print(f"  Manifest -> {manifest_path}")
        raise typer.Exit(code=1)


# ── view command ─────────────────────────────────────────────────


@app.command()
def view(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to an .xlsx, .xls or .csv workbook.",
        exists=True, readable=True,
    ),
    sheet: str | None = typer.Option(
        None, "--sheet", "-s",
        help="Sheet to display (default: first sheet).",
    ),
    search: str = typer.Option(
        "", "--search", "-f",
        help="Case-insensitive text to search for in all sheets.",
    ),
    sum_columns: list[int] | None = typer.Option(
        None, "--sum",
        help="0-based column index to aggregate; repeat for more. "
        "With exactly two, the first is divided by the second.",
    ),
    limit: int = typer.Option(
        50, "--limit", min=1,
        help="Maximum number of rows to print.",
    ),
) -> None:
    """Browse raw sheets with search and column aggregates."""
    result = _load(input_file)
    if not result.sheets:
        _err("No valid data found in the file.")
        raise typer.Exit(code=2)

    state = ViewerState.open(result.sheets)
    if sheet is not None:
        try:
            state = state.select_sheet(sheet)
        except KeyError:
            _err(f"Unknown sheet: {sheet!r}. Available: {', '.join(result.sheets)}")
            raise typer.Exit(code=2)
    state = state.search(search)
    for index in sum_columns or []:
        before = state.selection
        state = state.toggle_column(index)
        if state.selection == before:
            console.print(f"  [yellow]![/yellow] Column {index} is not summable; ignored")

    snap = state.snapshot()

    if search:
        tabs = "  ".join(f"{name} ({count})" for name, count in snap.counts.items())
        console.print(f"Matches: {tabs}")

    active = snap.active
    if not active.rows:
        if search:
            console.print(f'No results for "{search}" in sheet {state.active_sheet!r}.')
        else:
            console.print(f"Sheet {state.active_sheet!r} appears to be empty.")
        return

    tbl = RichTable(title=f"{input_file.name} — {state.active_sheet}", show_lines=False)
    for index, header in enumerate(active.headers):
        label = escape(cell_text(header)) or f"Column {index + 1}"
        marker = " [green]Σ[/green]" if index in snap.summable else ""
        justify = "right" if index in snap.summable else "left"
        tbl.add_column(f"[{index}] {label}{marker}", justify=justify)
    if not active.headers:
        tbl.add_column("")
    width = max(len(active.headers), 1)
    for row in active.rows[:limit]:
        cells = [escape(cell_text(row[i])) if i < len(row) else "" for i in range(width)]
        tbl.add_row(*cells)
    console.print(tbl)
    if len(active.rows) > limit:
        console.print(f"  … {len(active.rows) - limit} more rows")

    if snap.aggregates:
        calc = RichTable(title="Column Calculations")
        calc.add_column("Column", style="bold")
        calc.add_column("Sum", justify="right")
        calc.add_column("Average", justify="right")
        calc.add_column("Count", justify="right")
        for index, stats in snap.aggregates.items():
            header = active.headers[index] if index < len(active.headers) else None
            calc.add_row(
                escape(cell_text(header)) or f"Column {index + 1}",
                f"{stats.sum:,}",
                _fmt_number(stats.average),
                str(stats.count),
            )
        console.print(calc)

    if snap.ratio is not None:
        ratio = snap.ratio
        shown = ratio.result if ratio.result == NOT_APPLICABLE else f"{ratio.result:,.4f}"
        console.print(
            f"  Ratio [{ratio.numerator}] / [{ratio.denominator}] = [bold]{shown}[/bold]"
        )


# ── records command ──────────────────────────────────────────────


@app.command()
def records(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to an .xlsx, .xls or .csv workbook.",
        exists=True, readable=True,
    ),
    filter_term: str = typer.Option(
        "", "--filter", "-f",
        help="Case-insensitive text to match in any record field.",
    ),
    sort: SortKey | None = typer.Option(
        None, "--sort",
        help="Record field to sort by.",
    ),
    desc: bool = typer.Option(
        False, "--desc",
        help="Sort descending.",
    ),
    page: int = typer.Option(
        1, "--page", "-p", min=1,
        help="1-based page of 15 records.",
    ),
    export: bool = typer.Option(
        False, "--export/--no-export",
        help="Write every matching record, in sorted order, to Export_<name>.xlsx.",
    ),
    out_dir: Path = typer.Option(
        Path("output"), "--out-dir", "-o",
        help="Output directory for the export workbook.",
    ),
) -> None:
    """List extracted transactions with filtering, sorting and paging."""
    result = _load(input_file)
    if result.status == "empty":
        _err("No valid data found in the file.")
        raise typer.Exit(code=2)
    if result.status == "raw_only":
        console.print(
            "No transaction data was extracted. "
            f"View the raw sheets with: tradelens view --input {input_file.name}"
        )
        if result.schema_error is not None:
            console.print(f"  [yellow]![/yellow] {result.schema_error}")
        return

    matched = filter_records(result.records, filter_term)
    ordered = sort_records(matched, sort.value if sort else None, "desc" if desc else "asc")
    current = paginate(ordered, page)

    console.print(_record_table(current.items, "Full Transaction Data"))
    console.print(f"  Page {current.page} of {max(current.total_pages, 1)}; {len(matched)} matching records")
    sums = totals(matched)
    console.print(
        f"  Totals: securities {_fmt_number(sums['num_securities'])}, "
        f"value {_fmt_number(sums['value'])}"
    )

    if export:
        if not ordered:
            console.print("  [yellow]![/yellow] No matching records to export")
            return
        export_path = write_export(out_dir, ordered, input_file.name)
        console.print(f"  Export   -> {export_path}")
