"""
Finding fingerprints.

A fingerprint identifies a finding within one source file. It is the MD5
hex digest of ``"{rule_id}:{line}:{message}"`` truncated to 12 characters.
The column is not part of it, so findings that differ only in column share
a fingerprint. Baseline files written by other implementations of the same
format rely on this exact recipe.

A stored finding without a message is hashed with an empty message
(``"rule:1:"``). Writers that hashed the missing value as ``undefined``
(``"rule:1:undefined"``) produce fingerprints that will not match such an
entry; every finding this package writes carries a message string.
"""

from __future__ import annotations

import hashlib
from typing import Any

FINGERPRINT_LENGTH = 12
SEPARATOR = ":"


def fingerprint(rule_id: str, line: Any, message: str) -> str:
    """
    Generate the fingerprint of a finding.

    Args:
        rule_id: Rule identifier
        line: Line number
        message: Finding message

    Returns:
        12 character lowercase hex digest
    """
    if isinstance(line, float) and line.is_integer():
        line = int(line)
    payload = SEPARATOR.join((str(rule_id), str(line), str(message)))
    return hashlib.md5(payload.encode("utf-8"), usedforsecurity=False).hexdigest()[:FINGERPRINT_LENGTH]


def fingerprint_finding(finding: Any) -> str:
    """Fingerprint any object exposing ``rule_id``, ``line`` and ``message``."""
    return fingerprint(finding.rule_id, finding.line, finding.message)
