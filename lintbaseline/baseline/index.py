"""
Matching index over a loaded baseline document.

For every file the index keeps a multiset of fingerprints: how many baseline
findings with that fingerprint are still available to be matched. A lookup
consumes one occurrence, so a finding recorded twice is matched twice and a
third identical live finding is reported as new.

The index is rebuilt whenever the document is loaded and is never persisted.
It is not safe for concurrent mutation; callers sharing one index across
threads must serialize access themselves.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterator

from lintbaseline.baseline.fingerprint import fingerprint_finding
from lintbaseline.models.finding import BaselineFinding


class MatchIndex:
    """Per-file multiset of baseline fingerprints with consuming lookups."""

    def __init__(self) -> None:
        self._counts: dict[str, Counter[str]] = {}
        # First finding seen for each (file, fingerprint) group
        self._representatives: dict[str, dict[str, BaselineFinding]] = {}

    @classmethod
    def build(cls, document: dict[str, list[BaselineFinding]]) -> "MatchIndex":
        """
        Build an index from a baseline document.

        Args:
            document: Baseline document keyed by relative path

        Returns:
            New MatchIndex holding one count per finding
        """
        index = cls()
        for file_path, findings in document.items():
            counts: Counter[str] = Counter()
            representatives: dict[str, BaselineFinding] = {}
            for finding in findings:
                key = fingerprint_finding(finding)
                counts[key] += 1
                representatives.setdefault(key, finding)
            index._counts[file_path] = counts
            index._representatives[file_path] = representatives
        return index

    def consume(self, file_path: str, key: str) -> bool:
        """
        Consume one occurrence of a fingerprint.

        Returns:
            True if an occurrence was available and has been consumed
        """
        counts = self._counts.get(file_path)
        if not counts:
            return False

        remaining = counts.get(key, 0)
        if remaining <= 0:
            return False

        if remaining == 1:
            del counts[key]
        else:
            counts[key] = remaining - 1
        return True

    def remaining(self, file_path: str, key: str) -> int:
        """Number of unconsumed occurrences of a fingerprint in a file."""
        counts = self._counts.get(file_path)
        return counts.get(key, 0) if counts else 0

    def total(self, file_path: str) -> int:
        """Number of unconsumed occurrences in a file."""
        counts = self._counts.get(file_path)
        return sum(counts.values()) if counts else 0

    def leftovers(self) -> Iterator[tuple[str, BaselineFinding, int]]:
        """Yield (file, representative finding, remaining count) for unconsumed groups."""
        for file_path, counts in self._counts.items():
            representatives = self._representatives[file_path]
            for key, count in counts.items():
                if count > 0:
                    yield file_path, representatives[key], count

    def __contains__(self, file_path: object) -> bool:
        return file_path in self._counts

    def __len__(self) -> int:
        return sum(self.total(file_path) for file_path in self._counts)
