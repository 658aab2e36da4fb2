"""Core module containing configuration and the check/update workflows."""

from lintbaseline.core.config import LintBaselineConfig, validate_config
from lintbaseline.core.workflow import (
    BaselineFilter,
    CheckResults,
    FileReport,
    UpdateOutcome,
    exit_code,
    run_check,
    run_update,
)

__all__ = [
    "LintBaselineConfig",
    "validate_config",
    # Workflow
    "BaselineFilter",
    "CheckResults",
    "FileReport",
    "UpdateOutcome",
    "exit_code",
    "run_check",
    "run_update",
]
