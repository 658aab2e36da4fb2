"""Data models for lintbaseline."""

from lintbaseline.models.base import Severity
from lintbaseline.models.finding import (
    BaselineFinding,
    LintMessage,
    LintResult,
    ResultsFormatError,
    collect_findings,
    load_results,
    parse_results,
)

__all__ = [
    "Severity",
    "BaselineFinding",
    "LintMessage",
    "LintResult",
    "ResultsFormatError",
    "collect_findings",
    "load_results",
    "parse_results",
]
