# file_inventory/shared/errors.py
from __future__ import annotations


class InventoryError(Exception):
    """Base error for the survey pipeline. exit_code is what the CLI returns."""

    exit_code = 1


class ConfigError(InventoryError):
    exit_code = 1


class PathValidationError(InventoryError):
    exit_code = 1

    def __init__(self, path, kind: str):
        self.path = path
        self.kind = kind  # "missing" | "not_a_directory"
        if kind == "missing":
            msg = f"Input directory not found: {path}"
        else:
            msg = f"Input path is not a directory: {path}"
        super().__init__(msg)


class TraversalError(InventoryError):
    exit_code = 2

    def __init__(self, path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not read {path}: {cause}")


class OutputIOError(InventoryError):
    exit_code = 3

    def __init__(self, path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not write report {path}: {cause}")
