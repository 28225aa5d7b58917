# lexsearch/interface/cli.py

from pathlib import Path
from typing import List

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from lexsearch.domain.models import Document, MatchResult, SearchSession, SectionDecision


console = Console()

EXPORT_CHOICES = ["docx", "pdf", "both", "none"]

_DECISION_STYLES = {
    SectionDecision.BASE: "cyan",
    SectionDecision.MATCH: "green",
    SectionDecision.SKIP: "dim red",
}


def display_welcome_banner() -> None:
    console.print(Panel.fit(
        "[bold cyan]🔍 Lexical Search[/bold cyan]\n"
        "[dim]Find and organize text across your documents[/dim]",
        box=box.DOUBLE,
        border_style="cyan",
    ))


def display_loaded_documents(documents: List[Document]) -> None:
    table = Table(title="Documents", box=box.SIMPLE_HEAVY)
    table.add_column("File", style="bold white")
    table.add_column("Characters", justify="right")

    for document in documents:
        table.add_row(document.identifier, f"{len(document.raw_text):,}")

    console.print(table)
    console.print(f"[green]✓[/green] [bold]{len(documents)}[/bold] document(s) ready for search.\n")


def prompt_for_query() -> str:
    return Prompt.ask("\n[bold yellow]🔎 Search term[/bold yellow]")


def display_results(session: SearchSession) -> None:
    term = session.query.term if session.query else ""
    stats = session.statistics

    console.print(f"\n[bold]Results for:[/bold] [italic]\"{term}\"[/italic]")
    console.print(
        f"[dim]{stats.document_count} file(s) searched · "
        f"{stats.total_found_paragraphs} paragraph(s) · "
        f"{stats.total_occurrences} occurrence(s)[/dim]\n"
    )

    for result in session.results:
        _display_result(result, term)

    for skipped in session.skipped:
        console.print(f"[yellow]⚠ Skipped[/yellow] {skipped.identifier}: [dim]{skipped.reason}[/dim]")


def display_debug(session: SearchSession) -> None:
    for identifier, diagnostics in session.segmentation:
        table = Table(
            title=f"Split methods: {identifier} (chosen: {diagnostics.chosen_method})",
            box=box.MINIMAL,
        )
        table.add_column("Method")
        table.add_column("Paragraphs", justify="right")
        table.add_column("Avg length", justify="right")

        for candidate in diagnostics.candidates:
            style = "bold green" if candidate.name == diagnostics.chosen_method else None
            table.add_row(
                candidate.name,
                str(candidate.paragraph_count),
                str(candidate.average_length),
                style=style,
            )
        console.print(table)

        line_endings = (
            "Windows (\\r\\n)" if diagnostics.has_windows_line_endings
            else "Mixed" if diagnostics.has_carriage_returns
            else "Unix (\\n)"
        )
        console.print(
            f"[dim]{diagnostics.original_length} chars · line endings: {line_endings} · "
            f"{diagnostics.double_newline_count} double / "
            f"{diagnostics.single_newline_count} single newlines[/dim]\n"
        )

    for trace in session.traces:
        if not trace.triggered:
            continue
        body = Text()
        for section, decision in trace.sections:
            body.append(f"[{decision.value}] ", style=_DECISION_STYLES[decision])
            body.append(f"{section}\n")
        console.print(Panel(
            body,
            title=f"{trace.document_identifier} · paragraph {trace.paragraph_index} "
                  f"· {trace.split_count} sections",
            border_style="magenta",
            box=box.ROUNDED,
        ))


def display_export(path: Path) -> None:
    console.print(f"[green]✓[/green] Exported to [bold]{path}[/bold]")


def display_error(message: str) -> None:
    console.print(f"\n[bold red]✗ Error:[/bold red] {message}\n")


def ask_show_debug() -> bool:
    answer = Prompt.ask("[dim]Show processing details?[/dim]", choices=["y", "n"], default="n")
    return answer.lower() == "y"


def ask_export_format() -> str:
    return Prompt.ask("[dim]Export results?[/dim]", choices=EXPORT_CHOICES, default="none")


def ask_continue() -> bool:
    answer = Prompt.ask(
        "\n[dim]Search again?[/dim]",
        choices=["y", "n"],
        default="y",
    )
    return answer.lower() == "y"


def _display_result(result: MatchResult, term: str) -> None:
    found = len(result.found_paragraphs)
    header = Text()
    header.append("📄 ", style="dim")
    header.append(result.document_identifier, style="bold white")
    header.append(
        f"  {found} of {result.total_paragraph_count} paragraphs · "
        f"{result.occurrence_count} occurrence(s)",
        style="dim",
    )

    if not result.found_paragraphs:
        body = Text("No paragraphs found with the search term.", style="italic dim")
    else:
        body = Text()
        for ordinal, paragraph in enumerate(result.found_paragraphs, start=1):
            if ordinal > 1:
                body.append("\n\n")
            body.append(f"{ordinal}. ", style="bold")
            text = Text(paragraph.strip())
            text.highlight_words([term], style="bold black on yellow", case_sensitive=False)
            body.append_text(text)

    console.print(Panel(
        body,
        title=header,
        title_align="left",
        border_style=_count_to_color(found),
        box=box.ROUNDED,
        padding=(1, 2),
    ))


def _count_to_color(found: int) -> str:
    if found >= 5:
        return "green"
    elif found > 0:
        return "yellow"
    else:
        return "red"
