"""
lintbaseline - Baselines for static-analysis findings

Freezes the findings a linter reports today into a baseline file and
reports only the findings that are new on later runs.
"""

__version__ = "1.0.0"
__author__ = "lintbaseline Team"

from lintbaseline.baseline.manager import BaselineConfig, BaselineManager
from lintbaseline.core.config import LintBaselineConfig

__all__ = ["__version__", "BaselineConfig", "BaselineManager", "LintBaselineConfig"]
