"""
CLI commands for lintbaseline.

Provides the command-line interface using Click. Commands read the JSON
report an analyzer has already produced (a file path, or ``-`` for stdin);
they never run the analyzer themselves.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Optional

import click
from pydantic import ValidationError
from rich.console import Console

from lintbaseline import __version__
from lintbaseline.baseline.manager import BaselineManager
from lintbaseline.core.config import PROJECT_CONFIG_NAME, LintBaselineConfig, validate_config
from lintbaseline.core.workflow import exit_code, run_check, run_update
from lintbaseline.models.finding import LintResult, ResultsFormatError, collect_findings, parse_results
from lintbaseline.reporting.console import ConsoleReporter
from lintbaseline.utils.logging import setup_logging

# Exit codes
EXIT_SUCCESS = 0
EXIT_FINDINGS = 1
EXIT_CONFIG_ERROR = 2
EXIT_RUNTIME_ERROR = 3


@click.group()
@click.version_option(version=__version__, prog_name="lintbaseline")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output (DEBUG level)")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output (ERROR level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    help="Write logs to file",
)
@click.option("--json-logs", is_flag=True, help="Output logs in JSON format")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    log_file: Optional[Path],
    json_logs: bool,
) -> None:
    """lintbaseline - Ignore existing lint findings, report only new ones.

    Record today's findings in a baseline, then check later reports
    against it.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["log_file"] = log_file
    ctx.obj["json_logs"] = json_logs

    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = "WARNING"

    setup_logging(
        level=level,
        log_file=log_file,
        json_format=json_logs,
    )


def baseline_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that touches the baseline."""
    decorators = [
        click.option(
            "-b",
            "--baseline-file",
            type=click.Path(path_type=Path),
            help="Baseline file path (default: .lintbaseline.json)",
        ),
        click.option(
            "-s",
            "--split-by-rule",
            is_flag=True,
            help="Store the baseline as one file per rule",
        ),
        click.option(
            "--root",
            type=click.Path(exists=True, file_okay=False, path_type=Path),
            help="Project root that baseline paths are relative to (default: current directory)",
        ),
        click.option(
            "--color/--no-color",
            default=None,
            help="Enable or disable colored output",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _load_config(ctx: click.Context, **cli_args: Any) -> LintBaselineConfig:
    """Load configuration, exiting with EXIT_CONFIG_ERROR on failure."""
    root = cli_args.get("root")
    cli_args["verbose"] = ctx.obj.get("verbose")
    try:
        cfg = LintBaselineConfig.load(cli_args=cli_args, project_path=root)
    except (ValidationError, ValueError, OSError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    _apply_logging(ctx, cfg)
    for warning in validate_config(cfg):
        click.echo(f"Warning: {warning}", err=True)
    return cfg


def _apply_logging(ctx: click.Context, cfg: LintBaselineConfig) -> None:
    """Reconfigure logging from the loaded config; global CLI flags win."""
    if ctx.obj.get("verbose"):
        level = "DEBUG"
    elif ctx.obj.get("quiet"):
        level = "ERROR"
    else:
        level = cfg.logging.level

    # A config file path is relative to the project root, a --log-file path to the cwd
    log_file = ctx.obj.get("log_file")
    if log_file is None and cfg.logging.file is not None:
        log_file = cfg.logging.file if cfg.logging.file.is_absolute() else cfg.root / cfg.logging.file

    setup_logging(
        level=level,
        log_file=log_file,
        json_format=ctx.obj.get("json_logs") or cfg.logging.json_format,
        max_file_size_mb=cfg.logging.max_file_size_mb,
        backup_count=cfg.logging.backup_count,
    )


def _make_reporter(cfg: LintBaselineConfig) -> ConsoleReporter:
    return ConsoleReporter(
        console=Console(no_color=not cfg.output.color, highlight=False, soft_wrap=True),
        verbose=cfg.output.verbose,
        report_unmatched=cfg.check.report_unmatched,
    )


def _make_baseline(cfg: LintBaselineConfig) -> BaselineManager:
    try:
        return BaselineManager(cfg.to_baseline_config())
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)


def _read_report(report: str, reporter: ConsoleReporter) -> list[LintResult]:
    """Read the analyzer report, exiting with EXIT_RUNTIME_ERROR on failure."""
    try:
        if report == "-":
            text = click.get_text_stream("stdin").read()
        else:
            text = Path(report).read_text(encoding="utf-8")
        return parse_results(text)
    except (OSError, ResultsFormatError) as e:
        click.echo(reporter.format_error(f"Cannot read report {report}: {e}"), nl=False, err=True)
        sys.exit(EXIT_RUNTIME_ERROR)


def report_argument(func: Callable[..., Any]) -> Callable[..., Any]:
    """Positional REPORT argument: analyzer JSON report path or '-'."""
    return click.argument("report", type=click.Path(allow_dash=True))(func)


@cli.command()
@report_argument
@baseline_options
@click.option(
    "-r",
    "--report-unmatched",
    is_flag=True,
    help="List baseline entries that no longer match",
)
@click.option(
    "--unmatched-as-error",
    is_flag=True,
    help="Exit with an error if baseline entries no longer match",
)
@click.pass_context
def check(ctx: click.Context, report: str, **options: Any) -> None:
    """Check an analyzer report against the baseline.

    REPORT is the analyzer's JSON report, or - to read it from stdin.
    Only findings missing from the baseline are reported.

    Examples:

        eslint -f json . > report.json && lintbaseline check report.json

        eslint -f json . | lintbaseline check - --report-unmatched
    """
    cfg = _load_config(ctx, **options)
    reporter = _make_reporter(cfg)
    results = _read_report(report, reporter)
    baseline = _make_baseline(cfg)

    if not baseline.exists() and not ctx.obj.get("quiet"):
        click.echo(reporter.format_empty_baseline(), nl=False, err=True)

    check_results = run_check(results, baseline)
    click.echo(reporter.format_check(check_results), nl=False)
    sys.exit(exit_code(check_results, unmatched_as_error=cfg.check.unmatched_as_error))


@cli.command()
@report_argument
@baseline_options
@click.option("--allow-empty", is_flag=True, help="Allow generating an empty baseline")
@click.option(
    "--suppress-rule",
    multiple=True,
    help="Only baseline findings of this rule (can be specified multiple times)",
)
@click.pass_context
def update(ctx: click.Context, report: str, **options: Any) -> None:
    """Generate or update the baseline from an analyzer report.

    REPORT is the analyzer's JSON report, or - to read it from stdin.

    Examples:

        lintbaseline update report.json

        lintbaseline update report.json --split-by-rule

        lintbaseline update report.json --suppress-rule no-console
    """
    cfg = _load_config(ctx, **options)
    reporter = _make_reporter(cfg)
    results = _read_report(report, reporter)
    baseline = _make_baseline(cfg)

    outcome = run_update(
        results,
        baseline,
        allow_empty=cfg.storage.allow_empty,
        suppress_rules=cfg.check.suppress_rules,
    )
    if not outcome.saved:
        click.echo(reporter.format_error("Failed to save baseline (empty baseline not allowed)"), nl=False, err=True)
        sys.exit(EXIT_FINDINGS)

    click.echo(reporter.format_update(outcome.stats), nl=False)


@cli.command()
@report_argument
@baseline_options
@click.option("--dry-run", is_flag=True, help="Show what would be removed without writing")
@click.pass_context
def prune(ctx: click.Context, report: str, dry_run: bool, **options: Any) -> None:
    """Remove baseline entries that no longer occur in the report.

    REPORT is the analyzer's JSON report, or - to read it from stdin.

    Examples:

        lintbaseline prune report.json

        lintbaseline prune report.json --dry-run
    """
    cfg = _load_config(ctx, **options)
    reporter = _make_reporter(cfg)
    results = _read_report(report, reporter)
    baseline = _make_baseline(cfg)

    if not baseline.exists():
        click.echo(reporter.format_empty_baseline(), nl=False, err=True)
        sys.exit(EXIT_FINDINGS)

    result = baseline.prune(collect_findings(results, baseline.root))
    if not dry_run:
        baseline.save(result.data, allow_empty=True)

    click.echo(reporter.format_prune(result, written=not dry_run), nl=False)


@cli.command()
@baseline_options
@click.pass_context
def stats(ctx: click.Context, **options: Any) -> None:
    """Show statistics about the baseline.

    Examples:

        lintbaseline stats

        lintbaseline -v stats --split-by-rule
    """
    cfg = _load_config(ctx, **options)
    reporter = _make_reporter(cfg)
    baseline = _make_baseline(cfg)

    if not baseline.exists():
        click.echo(reporter.format_empty_baseline(), nl=False, err=True)
        sys.exit(EXIT_FINDINGS)

    click.echo(reporter.format_stats(baseline.get_detailed_stats()), nl=False)


@cli.command()
@baseline_options
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx: click.Context, yes: bool, **options: Any) -> None:
    """Delete the baseline file or split baseline directory."""
    cfg = _load_config(ctx, **options)
    baseline = _make_baseline(cfg)
    target = baseline.split_dir if cfg.storage.mode == "split" else baseline.baseline_path

    if not baseline.exists():
        click.echo(f"No baseline at {target}")
        return

    if not yes:
        click.confirm(f"Delete baseline at {target}?", abort=True)

    baseline.delete()
    click.echo(f"Deleted baseline: {target}")


@cli.command()
@click.argument("path", type=click.Path(file_okay=False, path_type=Path), default=".")
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(path: Path, force: bool) -> None:
    """Initialize .lintbaseline.yml configuration in a directory.

    Examples:

        lintbaseline init

        lintbaseline init ./my-project --force
    """
    config_path = path / PROJECT_CONFIG_NAME

    if config_path.exists() and not force:
        click.echo(f"Configuration already exists: {config_path}")
        click.echo("Use --force to overwrite")
        return

    path.mkdir(parents=True, exist_ok=True)
    default_config = LintBaselineConfig()
    default_config.to_yaml(config_path)

    click.echo(f"Created configuration: {config_path}")


if __name__ == "__main__":
    cli()
