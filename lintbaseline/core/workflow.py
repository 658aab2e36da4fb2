"""
Check and update workflows over analyzer results.

The analyzer runs elsewhere; these functions take its already-parsed results
and either record them as the new baseline (update) or split them into new
and baselined findings (check).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from lintbaseline.baseline.codec import BaselineDocument
from lintbaseline.baseline.manager import BaselineManager, BaselineStats, UnmatchedEntry
from lintbaseline.models.finding import LintMessage, LintResult, collect_findings
from lintbaseline.utils.logging import get_logger
from lintbaseline.utils.paths import to_relative_path

logger = get_logger("workflow")

EXIT_CLEAN = 0
EXIT_NEW_ERRORS = 1


@dataclass
class FileReport:
    """New findings for one source file."""

    file_path: str
    relative_path: str
    messages: list[LintMessage] = field(default_factory=list)


@dataclass
class CheckResults:
    """Outcome of checking analyzer results against a baseline."""

    new_errors: list[FileReport] = field(default_factory=list)
    baselined_count: int = 0
    unmatched: list[UnmatchedEntry] = field(default_factory=list)

    @property
    def new_error_count(self) -> int:
        return sum(1 for report in self.new_errors for m in report.messages if m.is_error)

    @property
    def new_warning_count(self) -> int:
        return sum(1 for report in self.new_errors for m in report.messages if not m.is_error)

    @property
    def has_errors(self) -> bool:
        return self.new_error_count > 0

    def rule_breakdown(self) -> list[tuple[str, int]]:
        """New findings per rule, most frequent first."""
        counts: dict[str, int] = {}
        for report in self.new_errors:
            for message in report.messages:
                if message.rule_id:
                    counts[message.rule_id] = counts.get(message.rule_id, 0) + 1
        return sorted(counts.items(), key=lambda x: x[1], reverse=True)


@dataclass
class UpdateOutcome:
    """Outcome of recording analyzer results as the baseline."""

    saved: bool
    stats: BaselineStats = field(default_factory=BaselineStats)


def build_suppressed_document(
    baseline: BaselineManager,
    current: BaselineDocument,
    rules: Iterable[str],
) -> BaselineDocument:
    """
    Baseline only the current findings of some rules.

    Entries of other rules stay as they are in the existing baseline; entries
    of the given rules are replaced by their current findings.

    Args:
        baseline: Manager holding the existing baseline
        current: Current findings
        rules: Rules whose current findings get baselined

    Returns:
        Document to save
    """
    rule_set = set(rules)
    document: BaselineDocument = {}

    for file_path, findings in baseline.load().items():
        kept = [f for f in findings if f.rule_id not in rule_set]
        if kept:
            document[file_path] = kept

    for file_path, findings in baseline.filter_by_rules(current, rule_set).items():
        document.setdefault(file_path, []).extend(findings)

    return document


def run_update(
    results: Iterable[LintResult],
    baseline: BaselineManager,
    allow_empty: bool = False,
    suppress_rules: Optional[Iterable[str]] = None,
) -> UpdateOutcome:
    """
    Record analyzer results as the new baseline.

    Args:
        results: Analyzer results
        baseline: Target baseline
        allow_empty: Permit saving a baseline without findings
        suppress_rules: Only baseline the findings of these rules

    Returns:
        UpdateOutcome with the stats of the saved document
    """
    document = collect_findings(results, baseline.root)
    rules = list(suppress_rules or [])
    if rules:
        document = build_suppressed_document(baseline, document, rules)
        logger.info("Baselining selected rules", rules=",".join(rules))

    if not baseline.save(document, allow_empty=allow_empty):
        return UpdateOutcome(saved=False)

    return UpdateOutcome(saved=True, stats=BaselineStats.from_document(document))


def run_check(results: Iterable[LintResult], baseline: BaselineManager) -> CheckResults:
    """
    Split analyzer results into new and baselined findings.

    Messages without a rule id are always new. Every baseline entry that no
    message consumed ends up in ``unmatched``.

    Args:
        results: Analyzer results
        baseline: Baseline to match against

    Returns:
        CheckResults
    """
    baseline.load()
    check = CheckResults()

    for result in results:
        if not result.messages:
            continue

        new_messages = []
        for message in result.messages:
            if not message.rule_id:
                new_messages.append(message)
            elif baseline.is_in_baseline(result.file_path, message.rule_id, message.line, message.message):
                check.baselined_count += 1
            else:
                new_messages.append(message)

        if new_messages:
            check.new_errors.append(FileReport(
                file_path=result.file_path,
                relative_path=to_relative_path(baseline.root, result.file_path),
                messages=new_messages,
            ))

    check.unmatched = baseline.get_unmatched()
    logger.info(
        "Check complete",
        new=check.new_error_count + check.new_warning_count,
        baselined=check.baselined_count,
        unmatched=len(check.unmatched),
    )
    return check


def exit_code(results: CheckResults, unmatched_as_error: bool = False) -> int:
    """
    Exit code for a check run.

    New warnings alone do not fail the run; unmatched baseline entries fail
    it only when ``unmatched_as_error`` is set.
    """
    if results.has_errors:
        return EXIT_NEW_ERRORS
    if unmatched_as_error and results.unmatched:
        return EXIT_NEW_ERRORS
    return EXIT_CLEAN


class BaselineFilter:
    """
    Drops baselined messages from one file's analyzer output.

    Meant for integrations that see results file by file. The filter holds
    the manager it is given, so one baseline (and its consumed matches) is
    shared across all files of a run.
    """

    def __init__(self, baseline: BaselineManager) -> None:
        self.baseline = baseline

    def postprocess(self, messages: Iterable[LintMessage], filename: str) -> list[LintMessage]:
        """
        Return the messages of ``filename`` that are not in the baseline.

        Args:
            messages: Messages reported for the file
            filename: Path of the file, absolute or relative to the root

        Returns:
            Messages to report
        """
        messages = list(messages)
        if not self.baseline.load():
            return messages

        return [
            m for m in messages
            if not m.rule_id
            or not self.baseline.is_in_baseline(filename, m.rule_id, m.line, m.message)
        ]

    def reset(self) -> None:
        """Forget loaded state and consumed matches."""
        self.baseline.reset()
