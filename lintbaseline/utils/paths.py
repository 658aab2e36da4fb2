"""Path helpers shared by the baseline engine and the workflow."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

PathLike = Union[str, os.PathLike]


def to_relative_path(root: PathLike, file_path: PathLike) -> str:
    """
    Express a source file path relative to a project root.

    Absolute paths are made relative to ``root``. Relative paths are taken as
    already relative to ``root``. The result always uses forward slashes,
    which is how baseline documents store their keys.

    Args:
        root: Project root directory
        file_path: Path reported by the analyzer

    Returns:
        POSIX-style relative path
    """
    path = os.fspath(file_path)
    if os.path.isabs(path):
        path = os.path.relpath(path, os.path.abspath(os.fspath(root)))
    else:
        path = os.path.normpath(path)
    return Path(path).as_posix()
