"""
Console Reporter for lintbaseline.

Renders update, check, stats and prune results for the terminal using Rich.
Every ``format_*`` method returns the rendered text.
"""

from __future__ import annotations

from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from lintbaseline.baseline.manager import BaselineStats, DetailedStats, PruneResult, UnmatchedEntry
from lintbaseline.core.workflow import CheckResults
from lintbaseline.models.finding import LintMessage

UPDATE_HINT = "lintbaseline update"


class ConsoleReporter:
    """
    Console format reporter.

    Produces rich terminal output with colors and tables.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        verbose: bool = False,
        report_unmatched: bool = False,
        color: bool = True,
    ) -> None:
        self.console = console or Console(no_color=not color, highlight=False)
        self.verbose = verbose
        self.report_unmatched = report_unmatched

    def _render(self, draw: Callable[[], None]) -> str:
        with self.console.capture() as capture:
            draw()
        return capture.get()

    def format_update(self, stats: BaselineStats) -> str:
        """Render the result of recording a new baseline."""
        def draw() -> None:
            self.console.print("[bold green]Baseline updated![/]")
            self.console.print(
                f"[cyan]{stats.total_errors}[/] errors in [cyan]{stats.file_count}[/] files"
            )
            if self.verbose and stats.rule_stats:
                self.console.print()
                self.console.print("[bold]Errors by rule:[/]")
                for rule_id, count in sorted(stats.rule_stats.items(), key=lambda x: x[1], reverse=True):
                    self.console.print(f"  [dim]{escape(rule_id)}[/]: {count}")

        return self._render(draw)

    def format_check(self, results: CheckResults) -> str:
        """Render the result of checking findings against the baseline."""
        def draw() -> None:
            if results.new_errors:
                self._draw_new_errors(results)
            if self.report_unmatched and results.unmatched:
                self._draw_unmatched(results.unmatched)
            self._draw_summary(results)

        return self._render(draw)

    def _draw_new_errors(self, results: CheckResults) -> None:
        self.console.print("[bold]New errors (not in baseline):[/]")
        self.console.print()

        for report in results.new_errors:
            self.console.print(f"[cyan]{escape(report.relative_path)}[/]")
            for message in report.messages:
                self.console.print(self._message_line(message))
            self.console.print()

        breakdown = results.rule_breakdown()
        if self.verbose and breakdown:
            self.console.print("[bold]New errors by rule:[/]")
            for rule_id, count in breakdown:
                self.console.print(f"  [dim]{escape(rule_id)}[/]: {count}")
            self.console.print()

    def _message_line(self, message: LintMessage) -> str:
        severity = "[red]error[/]" if message.is_error else "[yellow]warning[/]"
        return (
            f"  [dim]{message.line}:{message.column}[/]  {severity}  "
            f"{escape(str(message.message))}  [dim]{escape(message.rule_id or '')}[/]"
        )

    def _draw_unmatched(self, unmatched: list[UnmatchedEntry]) -> None:
        self.console.print("[bold magenta]Unmatched baseline entries:[/]")
        self.console.print("[dim]These errors no longer exist in the codebase.[/]")
        self.console.print()

        by_file: dict[str, list[UnmatchedEntry]] = {}
        for entry in unmatched:
            by_file.setdefault(entry.file, []).append(entry)

        for file_path, entries in by_file.items():
            self.console.print(f"[cyan]{escape(file_path)}[/]")
            for entry in entries:
                column = entry.column if entry.column is not None else 0
                count = f" (x{entry.unmatched_count})" if entry.unmatched_count > 1 else ""
                self.console.print(
                    f"  [dim]{entry.line}:{column}[/]  [magenta]unmatched[/]  "
                    f"{escape(entry.message)}{count}  [dim]{escape(entry.rule_id)}[/]"
                )
            self.console.print()

    def _draw_summary(self, results: CheckResults) -> None:
        self.console.print("[bold]Summary:[/]")

        if results.baselined_count > 0:
            self.console.print(f"  [dim]{results.baselined_count} errors ignored (baseline)[/]")

        if results.unmatched:
            self.console.print(f"  [magenta]{len(results.unmatched)} baseline errors fixed[/]")

        if results.new_error_count or results.new_warning_count:
            line = f"  [red]{results.new_error_count} new errors[/]"
            if results.new_warning_count:
                line += f", [yellow]{results.new_warning_count} new warnings[/]"
            self.console.print(line)
        else:
            self.console.print("  [green]No new errors![/]")

        if results.unmatched:
            self.console.print()
            self.console.print(f"[cyan]Tip:[/] {len(results.unmatched)} baseline errors have been fixed.")
            self.console.print(f"     Run [bold]{UPDATE_HINT}[/] to update the baseline.")

    def format_stats(self, stats: DetailedStats) -> str:
        """Render detailed baseline statistics."""
        def draw() -> None:
            summary = Table(title="Baseline Statistics")
            summary.add_column("Metric", style="cyan")
            summary.add_column("Value", justify="right")
            summary.add_row("Total Errors", str(stats.total_errors))
            summary.add_row("Files", str(stats.file_count))
            summary.add_row("Rules", str(stats.rule_count))
            summary.add_row("Errors (severity)", str(stats.severity_stats.get("error", 0)))
            summary.add_row("Warnings (severity)", str(stats.severity_stats.get("warning", 0)))
            self.console.print(summary)

            if stats.rule_stats:
                rules = Table(title="Errors by Rule")
                rules.add_column("Rule", style="cyan")
                rules.add_column("Count", justify="right")
                for rule_id, count in stats.rule_stats:
                    rules.add_row(escape(rule_id), str(count))
                self.console.print(rules)

            if self.verbose and stats.file_stats:
                files = Table(title="Errors by File")
                files.add_column("File", style="cyan")
                files.add_column("Count", justify="right")
                for file_stats in stats.file_stats:
                    files.add_row(escape(file_stats.file), str(file_stats.count))
                self.console.print(files)

        return self._render(draw)

    def format_prune(self, result: PruneResult, written: bool = True) -> str:
        """Render the result of pruning the baseline."""
        def draw() -> None:
            title = "Baseline pruned!" if written else "Prune preview (nothing written)"
            self.console.print(f"[bold green]{title}[/]")
            self.console.print(f"  [cyan]{result.kept_count}[/] entries kept")
            self.console.print(f"  [magenta]{result.removed_count}[/] entries removed")

        return self._render(draw)

    def format_empty_baseline(self) -> str:
        """Render the notice shown when no baseline exists."""
        return self._render(
            lambda: self.console.print(f"[yellow]No baseline found. Run {UPDATE_HINT} to generate one.[/]")
        )

    def format_error(self, message: str) -> str:
        """Render an error message."""
        return self._render(lambda: self.console.print(f"[bold red]Error:[/] {escape(message)}"))
