"""
Baseline management for lintbaseline.

Freezes known findings and matches live findings against them so only new
findings are reported.
"""

from lintbaseline.baseline.codec import (
    BaselineDocument,
    DecodedEntry,
    SingleFileStore,
    SplitByRuleStore,
    decode_document,
    decode_entry,
)
from lintbaseline.baseline.fingerprint import FINGERPRINT_LENGTH, fingerprint
from lintbaseline.baseline.index import MatchIndex
from lintbaseline.baseline.manager import (
    DEFAULT_BASELINE_FILE,
    BaselineConfig,
    BaselineManager,
    BaselineStats,
    DetailedStats,
    FileStats,
    PruneResult,
    UnmatchedEntry,
)

__all__ = [
    "BaselineDocument",
    "DecodedEntry",
    "SingleFileStore",
    "SplitByRuleStore",
    "decode_document",
    "decode_entry",
    "FINGERPRINT_LENGTH",
    "fingerprint",
    "MatchIndex",
    "DEFAULT_BASELINE_FILE",
    "BaselineConfig",
    "BaselineManager",
    "BaselineStats",
    "DetailedStats",
    "FileStats",
    "PruneResult",
    "UnmatchedEntry",
]
