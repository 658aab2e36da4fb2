"""Pytest configuration and shared fixtures."""

import json
import logging
from pathlib import Path

import pytest

from lintbaseline.baseline.manager import BaselineConfig, BaselineManager
from lintbaseline.models.finding import BaselineFinding


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo CLI logging setup so caplog sees package records."""
    yield
    logger = logging.getLogger("lintbaseline")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def sample_document() -> dict[str, list[BaselineFinding]]:
    """A small baseline document over two files."""
    return {
        "src/app.js": [
            BaselineFinding("no-unused-vars", 10, 5, "'x' is defined but never used."),
            BaselineFinding("eqeqeq", 3, 7, "Expected '===' and instead saw '=='."),
        ],
        "src/lib/util.js": [
            BaselineFinding("no-console", 1, 1, "Unexpected console statement."),
        ],
    }


@pytest.fixture
def single_baseline(tmp_path: Path) -> BaselineManager:
    """Manager using single-file storage under a temporary root."""
    return BaselineManager(BaselineConfig(root=tmp_path))


@pytest.fixture
def split_baseline(tmp_path: Path) -> BaselineManager:
    """Manager using split-by-rule storage under a temporary root."""
    return BaselineManager(BaselineConfig(root=tmp_path, mode="split"))


@pytest.fixture
def write_json():
    """Write a JSON value to a file and return the path."""
    def _write(path: Path, data) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def eslint_report(tmp_path: Path):
    """Build an analyzer JSON report for files under tmp_path."""
    def _report(files: dict[str, list[dict]]) -> list[dict]:
        return [
            {"filePath": str(tmp_path / rel), "messages": messages}
            for rel, messages in files.items()
        ]

    return _report


@pytest.fixture
def make_message():
    """Build one analyzer message in report form."""
    def _message(rule_id, line, message_text, column=1, severity=2) -> dict:
        return {
            "ruleId": rule_id,
            "line": line,
            "column": column,
            "message": message_text,
            "severity": severity,
        }

    return _message
