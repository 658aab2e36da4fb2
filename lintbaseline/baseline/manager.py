"""
Baseline Manager for lintbaseline.

Loads a baseline of known findings, answers "is this finding known?" with
consuming matches, and reports statistics, leftovers and pruned documents.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

from lintbaseline.baseline.codec import (
    BaselineDocument,
    BaselineStore,
    SingleFileStore,
    SplitByRuleStore,
    split_directory,
)
from lintbaseline.baseline.fingerprint import fingerprint, fingerprint_finding
from lintbaseline.baseline.index import MatchIndex
from lintbaseline.models.base import Severity
from lintbaseline.models.finding import BaselineFinding
from lintbaseline.utils.logging import ComponentLogger
from lintbaseline.utils.paths import to_relative_path

DEFAULT_BASELINE_FILE = ".lintbaseline.json"

STORAGE_MODES = ("single", "split")


@dataclass
class BaselineConfig:
    """Configuration for baseline management."""

    root: Path = field(default_factory=Path.cwd)
    baseline_file: Path = Path(DEFAULT_BASELINE_FILE)
    mode: str = "single"  # single, split

    @property
    def split_by_rule(self) -> bool:
        return self.mode == "split"


@dataclass
class BaselineStats:
    """Totals over a baseline document."""

    total_errors: int = 0
    file_count: int = 0
    rule_stats: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "totalErrors": self.total_errors,
            "fileCount": self.file_count,
            "ruleStats": dict(self.rule_stats),
        }

    @classmethod
    def from_document(cls, document: BaselineDocument) -> "BaselineStats":
        """Compute totals by scanning a document."""
        stats = cls(file_count=len(document))
        for findings in document.values():
            for finding in findings:
                stats.total_errors += 1
                stats.rule_stats[finding.rule_id] = stats.rule_stats.get(finding.rule_id, 0) + 1
        return stats


@dataclass
class FileStats:
    """Per-file breakdown in detailed statistics."""

    file: str
    count: int = 0
    rules: dict[str, int] = field(default_factory=dict)


@dataclass
class DetailedStats:
    """
    Detailed statistics over a baseline document.

    ``rule_stats`` and ``file_stats`` are sorted by descending count.
    """

    total_errors: int = 0
    file_count: int = 0
    rule_count: int = 0
    rule_stats: list[tuple[str, int]] = field(default_factory=list)
    file_stats: list[FileStats] = field(default_factory=list)
    severity_stats: dict[str, int] = field(default_factory=lambda: {"error": 0, "warning": 0})

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "totalErrors": self.total_errors,
            "fileCount": self.file_count,
            "ruleCount": self.rule_count,
            "ruleStats": [{"rule": rule, "count": count} for rule, count in self.rule_stats],
            "fileStats": [
                {"file": fs.file, "count": fs.count, "rules": dict(fs.rules)}
                for fs in self.file_stats
            ],
            "severityStats": dict(self.severity_stats),
        }


@dataclass
class PruneResult:
    """Outcome of pruning a baseline against current findings."""

    data: BaselineDocument = field(default_factory=dict)
    removed_count: int = 0
    kept_count: int = 0


@dataclass
class UnmatchedEntry:
    """
    Baseline finding that no live finding consumed.

    ``finding`` is the first recorded finding of its fingerprint group and
    ``unmatched_count`` the number of occurrences left in that group.
    """

    file: str
    finding: BaselineFinding
    unmatched_count: int = 1

    @property
    def rule_id(self) -> str:
        return self.finding.rule_id

    @property
    def line(self) -> int:
        return self.finding.line

    @property
    def column(self) -> Optional[int]:
        return self.finding.column

    @property
    def message(self) -> str:
        return self.finding.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"file": self.file, **self.finding.to_dict(), "unmatchedCount": self.unmatched_count}


class BaselineManager:
    """
    Manages a baseline of known findings.

    Handles:
    - Loading the baseline from single-file or split-by-rule storage
    - Consuming matches of live findings against the baseline
    - Reporting baseline entries no live finding matched
    - Statistics, pruning and rule filtering

    The manager starts unloaded. ``load`` is idempotent; call ``reset``
    first to read the storage again. ``save`` writes to disk and leaves the
    loaded state untouched.
    """

    def __init__(self, config: Optional[BaselineConfig] = None) -> None:
        """
        Initialize the baseline manager.

        Args:
            config: Baseline configuration.

        Raises:
            ValueError: If the storage mode is not supported
        """
        self.config = config or BaselineConfig()
        if self.config.mode not in STORAGE_MODES:
            raise ValueError(f"Invalid storage mode: {self.config.mode}. Must be one of {STORAGE_MODES}")

        self.root = Path(os.path.abspath(self.config.root))
        self.logger = ComponentLogger("baseline")
        self._store = self._create_store()
        self._data: Optional[BaselineDocument] = None
        self._index: Optional[MatchIndex] = None
        self._loaded = False

    def _create_store(self) -> BaselineStore:
        if self.config.split_by_rule:
            return SplitByRuleStore(self.split_dir)
        return SingleFileStore(self.baseline_path)

    @property
    def baseline_path(self) -> Path:
        """Full path of the single baseline file."""
        path = Path(self.config.baseline_file)
        return path if path.is_absolute() else self.root / path

    @property
    def split_dir(self) -> Path:
        """Directory holding the split baseline documents."""
        return split_directory(self.baseline_path)

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def data(self) -> Optional[BaselineDocument]:
        """The loaded document, or None before ``load``."""
        return self._data

    def load(self) -> BaselineDocument:
        """
        Load the baseline and build the matching index.

        Returns:
            The loaded document (cached after the first call)
        """
        if self._loaded and self._data is not None:
            return self._data

        self._data = self._store.load()
        self._index = MatchIndex.build(self._data)
        self._loaded = True

        self.logger.info(
            "Baseline loaded",
            location=self._store.location,
            files=len(self._data),
            findings=len(self._index),
        )
        return self._data

    def reset(self) -> None:
        """Drop the loaded document and index."""
        self._data = None
        self._index = None
        self._loaded = False

    def save(self, document: BaselineDocument, allow_empty: bool = False) -> bool:
        """
        Persist a document to the configured storage.

        Args:
            document: Document to write
            allow_empty: Permit writing a document with no files

        Returns:
            False if the document is empty and ``allow_empty`` is not set
        """
        if not document and not allow_empty:
            self.logger.warning("No findings to baseline. Use --allow-empty to create an empty baseline.")
            return False

        self._store.save(document)
        return True

    def exists(self) -> bool:
        """Check whether the baseline exists on disk."""
        return self._store.exists()

    def delete(self) -> None:
        """Remove the baseline from disk."""
        self._store.delete()

    def is_in_baseline(self, file_path: Any, rule_id: str, line: int, message: str) -> bool:
        """
        Check whether a live finding is in the baseline, consuming one match.

        Args:
            file_path: Path of the source file, absolute or relative to the root
            rule_id: Rule identifier
            line: Line number
            message: Finding message

        Returns:
            True if an unconsumed baseline occurrence matched
        """
        if not self._loaded:
            self.load()

        relative_path = to_relative_path(self.root, file_path)
        matched = self._index.consume(relative_path, fingerprint(rule_id, line, message))
        if matched:
            self.logger.debug("Baseline match", file=relative_path, rule=rule_id, line=line)
        return matched

    def get_unmatched(self) -> list[UnmatchedEntry]:
        """
        List baseline entries that no lookup consumed.

        Meaningful after a full pass over the live findings; before any lookup
        it returns one entry per fingerprint group of the loaded document.
        """
        if self._index is None:
            return []
        return [
            UnmatchedEntry(file=file_path, finding=finding, unmatched_count=count)
            for file_path, finding, count in self._index.leftovers()
        ]

    def get_stats(self) -> BaselineStats:
        """Totals of the loaded document, unaffected by matching."""
        return BaselineStats.from_document(self.load())

    def get_detailed_stats(self) -> DetailedStats:
        """Totals plus per-rule, per-file and severity breakdowns."""
        document = self.load()

        stats = DetailedStats(file_count=len(document))
        rule_counts: dict[str, int] = {}
        file_stats: list[FileStats] = []

        for file_path, findings in document.items():
            per_file = FileStats(file=file_path, count=len(findings))
            for finding in findings:
                stats.total_errors += 1
                rule_counts[finding.rule_id] = rule_counts.get(finding.rule_id, 0) + 1
                per_file.rules[finding.rule_id] = per_file.rules.get(finding.rule_id, 0) + 1
                stats.severity_stats[Severity.classify(finding.severity)] += 1
            file_stats.append(per_file)

        stats.rule_count = len(rule_counts)
        stats.rule_stats = sorted(rule_counts.items(), key=lambda x: x[1], reverse=True)
        stats.file_stats = sorted(file_stats, key=lambda fs: fs.count, reverse=True)
        return stats

    def prune(self, current: BaselineDocument) -> PruneResult:
        """
        Keep only the baseline entries that still occur.

        Neither the loaded document nor the matching index is modified.

        Args:
            current: Live findings, keyed by relative path, not yet filtered
                by the baseline

        Returns:
            PruneResult with the pruned document and counts
        """
        document = self.load()
        current_keys = {
            file_path: {fingerprint_finding(f) for f in findings}
            for file_path, findings in current.items()
        }

        result = PruneResult()
        for file_path, findings in document.items():
            keys = current_keys.get(file_path)
            if keys is None:
                result.removed_count += len(findings)
                continue

            kept = [f for f in findings if fingerprint_finding(f) in keys]
            result.kept_count += len(kept)
            result.removed_count += len(findings) - len(kept)
            if kept:
                result.data[file_path] = kept

        self.logger.info("Baseline pruned", kept=result.kept_count, removed=result.removed_count)
        return result

    @staticmethod
    def filter_by_rules(findings: BaselineDocument, rules: Iterable[str]) -> BaselineDocument:
        """
        Keep only the findings of the given rules.

        Files left without findings are dropped.
        """
        rule_set = set(rules)
        filtered: BaselineDocument = {}
        for file_path, file_findings in findings.items():
            matching = [f for f in file_findings if f.rule_id in rule_set]
            if matching:
                filtered[file_path] = matching
        return filtered
