"""
Finding models for baseline documents and analyzer results.

These models represent:
- BaselineFinding: One finding recorded in a baseline document
- LintMessage: One message of the analyzer's JSON report
- LintResult: The analyzer's messages for one source file
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from lintbaseline.models.base import Severity
from lintbaseline.utils.paths import PathLike, to_relative_path


class ResultsFormatError(ValueError):
    """Raised when the analyzer's JSON report cannot be understood."""


def _normalize_line(value: Any) -> Any:
    """Collapse integral floats (``10.0``) to ints so hashing is stable."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class BaselineFinding:
    """
    Single finding stored in a baseline.

    Only ``rule_id``, ``line`` and ``message`` take part in matching; the
    column is kept for display.
    """

    rule_id: str
    line: int
    column: Optional[int] = None
    message: str = ""
    severity: Optional[int] = None

    @property
    def sort_key(self) -> tuple[Any, str]:
        return (self.line, self.rule_id)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk dictionary shape."""
        data: dict[str, Any] = {"ruleId": self.rule_id, "line": self.line}
        if self.column is not None:
            data["column"] = self.column
        data["message"] = self.message
        if self.severity is not None:
            data["severity"] = self.severity
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BaselineFinding":
        """
        Deserialize from an already validated dictionary.

        Shape checking happens in the storage codec; this only converts.
        """
        column = data.get("column")
        severity = data.get("severity")
        message = data.get("message", "")
        return cls(
            rule_id=data["ruleId"],
            line=_normalize_line(data["line"]),
            column=_normalize_line(column) if isinstance(column, (int, float)) and not isinstance(column, bool) else None,
            message=message if isinstance(message, str) else str(message),
            severity=severity if isinstance(severity, int) and not isinstance(severity, bool) else None,
        )


@dataclass
class LintMessage:
    """One message from the analyzer's report."""

    rule_id: Optional[str]
    line: int = 0
    column: int = 0
    message: str = ""
    severity: int = Severity.ERROR

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity == Severity.WARNING

    def to_finding(self) -> BaselineFinding:
        """Convert to the shape stored in a baseline."""
        if not self.rule_id:
            raise ValueError("Messages without a rule id cannot be baselined")
        return BaselineFinding(
            rule_id=self.rule_id,
            line=self.line,
            column=self.column,
            message=self.message,
        )

    @classmethod
    def from_dict(cls, data: Any) -> "LintMessage":
        """
        Deserialize from the analyzer's JSON message object.

        Raises:
            ResultsFormatError: If a field has the wrong type
        """
        if not isinstance(data, dict):
            raise ResultsFormatError(f"Message must be an object, got {type(data).__name__}")

        rule_id = data.get("ruleId")
        if rule_id is not None and not isinstance(rule_id, str):
            raise ResultsFormatError(f"'ruleId' must be a string or null, got {rule_id!r}")

        # Rule-less notices such as "File ignored" carry no position
        line = data.get("line", 0 if rule_id is None else None)
        if not _is_number(line):
            raise ResultsFormatError(f"'line' must be a number, got {line!r} (rule {rule_id})")

        column = data.get("column", 0)
        if not _is_number(column):
            raise ResultsFormatError(f"'column' must be a number, got {column!r} (rule {rule_id})")

        message = data.get("message", "")
        if not isinstance(message, str):
            raise ResultsFormatError(f"'message' must be a string, got {message!r} (rule {rule_id})")

        severity = data.get("severity", Severity.ERROR)
        if not isinstance(severity, int) or isinstance(severity, bool):
            raise ResultsFormatError(f"'severity' must be an integer, got {severity!r} (rule {rule_id})")

        return cls(
            rule_id=rule_id,
            line=_normalize_line(line),
            column=_normalize_line(column),
            message=message,
            severity=severity,
        )


@dataclass
class LintResult:
    """The analyzer's messages for one source file."""

    file_path: str
    messages: list[LintMessage] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LintResult":
        """Deserialize from the analyzer's JSON result object."""
        if not isinstance(data, dict) or not isinstance(data.get("filePath"), str):
            raise ResultsFormatError("Each result must be an object with a 'filePath' string")
        messages = data.get("messages", [])
        if not isinstance(messages, list):
            raise ResultsFormatError(f"'messages' for {data['filePath']} must be an array")
        return cls(
            file_path=data["filePath"],
            messages=[LintMessage.from_dict(m) for m in messages],
        )


def parse_results(text: str) -> list[LintResult]:
    """
    Parse the analyzer's JSON report.

    Args:
        text: JSON text, an array of per-file results

    Returns:
        List of LintResult

    Raises:
        ResultsFormatError: If the text is not a valid report
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ResultsFormatError(f"Report is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ResultsFormatError("Report must be a JSON array of file results")

    return [LintResult.from_dict(item) for item in data]


def load_results(path: Union[str, Path]) -> list[LintResult]:
    """Read and parse the analyzer's JSON report from a file."""
    return parse_results(Path(path).read_text(encoding="utf-8"))


def collect_findings(
    results: Iterable[LintResult],
    root: PathLike,
) -> dict[str, list[BaselineFinding]]:
    """
    Build a baseline document from analyzer results.

    Messages without a rule id (parse errors) are never baselined, and files
    without any baselinable message are left out.

    Args:
        results: Analyzer results
        root: Project root the document paths are relative to

    Returns:
        Baseline document keyed by relative path
    """
    document: dict[str, list[BaselineFinding]] = {}

    for result in results:
        findings = [m.to_finding() for m in result.messages if m.rule_id]
        if not findings:
            continue
        relative_path = to_relative_path(root, result.file_path)
        document.setdefault(relative_path, []).extend(findings)

    return document
