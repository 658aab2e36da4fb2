"""
Core enums used throughout lintbaseline.

Severity codes follow the convention of the analyzer's JSON report:
1 is a warning, 2 is an error.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class Severity(IntEnum):
    """Severity codes reported by the analyzer."""

    OFF = 0
    WARNING = 1
    ERROR = 2

    @classmethod
    def classify(cls, value: Any) -> str:
        """
        Bucket a raw severity value into "warning" or "error".

        Only the value 1 counts as a warning; anything else, including a
        missing value, counts as an error.
        """
        if value == cls.WARNING and not isinstance(value, bool):
            return "warning"
        return "error"
