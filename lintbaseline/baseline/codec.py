"""
Storage codec for baseline documents.

A baseline document maps a relative source path to the findings recorded
for that file. Two on-disk encodings are supported:

- SingleFileStore: one JSON document holding every file
- SplitByRuleStore: a directory with one JSON document per rule plus a
  ``_loader.json`` manifest listing the rule documents

Reading is forgiving. A missing file decodes to an empty document, and a
malformed unit (unparsable JSON, wrong top-level shape, a file value that is
not an array, an invalid finding) is dropped without aborting the load.
"""

from __future__ import annotations

import json
import logging
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from lintbaseline.models.finding import BaselineFinding

logger = logging.getLogger(__name__)

BaselineDocument = dict[str, list[BaselineFinding]]

MANIFEST_NAME = "_loader.json"
MANIFEST_DESCRIPTION = "Lint baseline split by rule identifier"
JSON_SUFFIX = ".json"


@dataclass(frozen=True)
class DecodedEntry:
    """
    Outcome of checking one raw finding against the baseline schema.

    Exactly one of ``finding`` and ``skipped`` is set.
    """

    finding: Optional[BaselineFinding] = None
    skipped: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.finding is not None


def decode_entry(raw: Any) -> DecodedEntry:
    """
    Validate and convert one raw finding.

    An entry is kept only if it is an object with a non-empty string
    ``ruleId`` and a numeric ``line``.
    """
    if not isinstance(raw, dict):
        return DecodedEntry(skipped=f"expected object, got {type(raw).__name__}")

    rule_id = raw.get("ruleId")
    if not isinstance(rule_id, str) or not rule_id:
        return DecodedEntry(skipped="missing or empty 'ruleId'")

    line = raw.get("line")
    if not isinstance(line, (int, float)) or isinstance(line, bool):
        return DecodedEntry(skipped="'line' is not a number")

    return DecodedEntry(finding=BaselineFinding.from_dict(raw))


def decode_document(data: Any, source: str = "baseline") -> BaselineDocument:
    """
    Decode parsed JSON into a baseline document.

    Args:
        data: Parsed JSON value
        source: Name used in diagnostics

    Returns:
        Validated document; empty if the top level is not an object
    """
    if not isinstance(data, dict):
        logger.error(f"Invalid baseline format in {source}: expected object, got {type(data).__name__}")
        return {}

    document: BaselineDocument = {}

    for file_path, raw_findings in data.items():
        if not isinstance(raw_findings, list):
            logger.error(f"Invalid findings for {file_path} in {source}: expected array")
            continue

        findings = []
        for raw in raw_findings:
            entry = decode_entry(raw)
            if entry.is_valid:
                findings.append(entry.finding)
            else:
                logger.debug(f"Skipping entry for {file_path} in {source}: {entry.skipped}")

        if findings:
            document[file_path] = findings

    return document


def sort_document(document: BaselineDocument) -> BaselineDocument:
    """Return a copy with files sorted by path and findings by (line, rule)."""
    return {
        file_path: sorted(document[file_path], key=lambda f: f.sort_key)
        for file_path in sorted(document)
    }


def encode_document(document: BaselineDocument) -> dict[str, list[dict[str, Any]]]:
    """Convert a document to its sorted JSON-ready form."""
    return {
        file_path: [finding.to_dict() for finding in findings]
        for file_path, findings in sort_document(document).items()
    }


def dumps(data: Any) -> str:
    """Serialize JSON the way baseline files are written."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def rule_file_name(rule_id: str) -> str:
    """File name of the split document holding ``rule_id``."""
    return rule_id.replace("/", "-").replace("\\", "-") + JSON_SUFFIX


def split_directory(baseline_path: Path) -> Path:
    """Directory used by split storage for a single-file path."""
    if baseline_path.suffix == JSON_SUFFIX:
        return baseline_path.with_suffix("")
    return baseline_path


def _read_json(path: Path) -> tuple[bool, Any]:
    """Read a JSON file, reporting failure instead of raising."""
    try:
        return True, json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.error(f"Error parsing {path.name}: {e}")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading {path}: {e}")
    return False, None


class BaselineStore(ABC):
    """Abstract on-disk encoding of a baseline document."""

    @abstractmethod
    def load(self) -> BaselineDocument:
        """Read the document; never raises for data problems."""

    @abstractmethod
    def save(self, document: BaselineDocument) -> None:
        """Write the document, replacing what was stored before."""

    @abstractmethod
    def exists(self) -> bool:
        """Check whether anything is stored."""

    @abstractmethod
    def delete(self) -> None:
        """Remove what is stored; a no-op if nothing is."""

    @property
    @abstractmethod
    def location(self) -> Path:
        """Path of the file or directory backing this store."""


class SingleFileStore(BaselineStore):
    """Baseline stored as one JSON document."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def location(self) -> Path:
        return self.path

    def load(self) -> BaselineDocument:
        if not self.path.exists():
            logger.debug(f"Baseline file not found: {self.path}")
            return {}

        ok, data = _read_json(self.path)
        if not ok:
            return {}
        return decode_document(data, source=self.path.name)

    def save(self, document: BaselineDocument) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(dumps(encode_document(document)), encoding="utf-8")
        logger.info(f"Baseline saved: {self.path}")

    def exists(self) -> bool:
        return self.path.exists()

    def delete(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info(f"Baseline deleted: {self.path}")


class SplitByRuleStore(BaselineStore):
    """
    Baseline stored as one JSON document per rule.

    Each rule document maps file paths to that rule's findings. The manifest
    is written for people and external tools; loading does not read it.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    @property
    def location(self) -> Path:
        return self.directory

    @property
    def manifest_path(self) -> Path:
        return self.directory / MANIFEST_NAME

    def _rule_documents(self) -> list[Path]:
        return sorted(
            p for p in self.directory.iterdir()
            if p.is_file() and p.suffix == JSON_SUFFIX and p.name != MANIFEST_NAME
        )

    def load(self) -> BaselineDocument:
        if not self.directory.is_dir():
            logger.debug(f"Split baseline directory not found: {self.directory}")
            return {}

        try:
            paths = self._rule_documents()
        except OSError as e:
            logger.error(f"Error loading split baseline: {e}")
            return {}

        merged: BaselineDocument = {}
        for path in paths:
            ok, data = _read_json(path)
            if not ok:
                continue
            for file_path, findings in decode_document(data, source=path.name).items():
                merged.setdefault(file_path, []).extend(findings)

        return merged

    def save(self, document: BaselineDocument) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

        by_file_name: dict[str, BaselineDocument] = {}
        for file_path, findings in document.items():
            for finding in findings:
                rule_doc = by_file_name.setdefault(rule_file_name(finding.rule_id), {})
                rule_doc.setdefault(file_path, []).append(finding)

        for stale in self.directory.glob(f"*{JSON_SUFFIX}"):
            if stale.is_file():
                stale.unlink()

        for file_name, rule_doc in by_file_name.items():
            (self.directory / file_name).write_text(dumps(encode_document(rule_doc)), encoding="utf-8")

        self._write_manifest(by_file_name)
        logger.info(f"Split baseline saved: {self.directory} ({len(by_file_name)} rule files)")

    def _write_manifest(self, file_names: Iterable[str]) -> None:
        manifest = {
            "description": MANIFEST_DESCRIPTION,
            "files": sorted(file_names),
        }
        self.manifest_path.write_text(dumps(manifest), encoding="utf-8")

    def exists(self) -> bool:
        return self.directory.exists()

    def delete(self) -> None:
        if self.directory.exists():
            shutil.rmtree(self.directory)
            logger.info(f"Split baseline deleted: {self.directory}")
