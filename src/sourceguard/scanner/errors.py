"""Scan pipeline errors — traversal and read failures abort the whole scan."""

from __future__ import annotations


class AuditError(Exception):
    """Base class for failures that stop an audit from completing."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class TraversalError(AuditError):
    """The target directory or one of its subdirectories could not be listed."""


class FileReadError(AuditError):
    """A file found during traversal could not be read."""
