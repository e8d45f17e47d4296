# file_inventory/shared/check_input_dir.py
from __future__ import annotations

import os
import stat
from pathlib import Path

from file_inventory.shared.errors import PathValidationError


def check_input_dir(path) -> Path:
    """
    Validate the survey root before walking it.

    - missing path      -> PathValidationError(kind="missing")
    - not a directory   -> PathValidationError(kind="not_a_directory")
    - any other OSError -> propagated unchanged (e.g. PermissionError)
    """
    p = Path(path)
    try:
        st = os.stat(p)
    except FileNotFoundError as e:
        raise PathValidationError(p, "missing") from e

    if not stat.S_ISDIR(st.st_mode):
        raise PathValidationError(p, "not_a_directory")
    return p
