"""
Domain-level error taxonomy.

Three kinds of failure are kept apart so callers can give precise feedback:
an id that does not exist (``*NotFoundError``), a reorder target outside the
collection (``InvalidIndexError``), and failures of the I/O collaborators
(``FileError``, ``ProjectError``), which the domain model passes through
unchanged.
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from .ids import CodeDefId, FileId, QualCodeId, ThemeId


class QualkitError(Exception):
    """Base class for all qualkit errors."""


class InvalidIndexError(QualkitError):
    """A positional operation was given an index outside the collection."""

    def __init__(self, provided: int, max_index: int):
        self.provided = provided
        self.max_index = max_index
        super().__init__(f"Invalid index: {provided} (max valid index is {max_index})")


# CodeBook errors

class CodeBookError(QualkitError):
    """Base class for errors raised by ``CodeBook`` operations."""


class CodeDefNotFoundError(CodeBookError):
    def __init__(self, code_def_id: CodeDefId):
        self.code_def_id = code_def_id
        super().__init__(f"Code definition not found: {code_def_id}")


class ThemeNotFoundError(CodeBookError):
    def __init__(self, theme_id: ThemeId):
        self.theme_id = theme_id
        super().__init__(f"Theme not found: {theme_id}")


class QualCodeNotFoundError(CodeBookError):
    def __init__(self, qual_code_id: QualCodeId):
        self.qual_code_id = qual_code_id
        super().__init__(f"Qual code not found: {qual_code_id}")


class CodeBookIndexError(CodeBookError, InvalidIndexError):
    """Index out of range for a code definition or theme reorder."""


# FileList errors

class FileListError(QualkitError):
    """Base class for errors raised by ``FileList`` operations."""


class FileEntryNotFoundError(FileListError):
    def __init__(self, file_id: FileId):
        self.file_id = file_id
        super().__init__(f"File not found: {file_id}")


class FileListIndexError(FileListError, InvalidIndexError):
    """Index out of range for a file reorder."""


# Collaborator errors

class FileErrorKind(Enum):
    """What went wrong while reading or writing a file's content."""

    READ = "read"
    WRITE = "write"
    PARSE = "parse"
    ENCODING = "encoding"
    UNKNOWN = "unknown"


_FILE_ERROR_MESSAGES = {
    FileErrorKind.READ: "Failed to read file",
    FileErrorKind.WRITE: "Failed to write file",
    FileErrorKind.PARSE: "Failed to parse file",
    FileErrorKind.ENCODING: "Failed to decode file",
    FileErrorKind.UNKNOWN: "Unknown error for file",
}


class FileError(QualkitError):
    """
    Content I/O failure for a single file.

    Raised by file loaders; the domain model only passes it through.
    """

    def __init__(self, kind: FileErrorKind, file_id: FileId, detail: Optional[str] = None):
        self.kind = kind
        self.file_id = file_id
        self.detail = detail
        message = f"{_FILE_ERROR_MESSAGES[kind]}: {file_id}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ProjectErrorKind(Enum):
    NEW = "new"
    SAVE = "save"
    LOAD = "load"


class ProjectError(QualkitError):
    """Failure to create, save or load a project record."""

    def __init__(self, kind: ProjectErrorKind, path: Path, detail: str):
        self.kind = kind
        self.path = path
        self.detail = detail
        super().__init__(f"Project {kind.value} failed for {path}: {detail}")


class NoProjectError(QualkitError):
    """A project operation was requested while no project is open."""

    def __init__(self):
        super().__init__("No project is open")
