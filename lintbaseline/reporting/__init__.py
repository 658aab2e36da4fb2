"""Terminal reporting for lintbaseline."""

from lintbaseline.reporting.console import ConsoleReporter

__all__ = ["ConsoleReporter"]
