"""
Capability interfaces for the collaborators around the domain model.

Implementations satisfy these protocols structurally (no inheritance), so
tests can pass plain fakes.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol

from .codebook import CodeBook
from .file_list import FileList
from .ids import FileId
from .models import FileType, QualProject, TextBlock

if TYPE_CHECKING:
    from ..config.settings import AppSettings


class ProjectRepository(Protocol):
    """Durable storage of a project record with its code book and file list."""

    def new_project(self, path: Path, name: str) -> QualProject: ...

    def save_project(
        self, path: Path, project: QualProject, codebook: CodeBook, file_list: FileList
    ) -> None: ...

    def load_project(self, path: Path) -> tuple[QualProject, CodeBook, FileList]: ...


class FileLoader(Protocol):
    """Turns a file on disk into its ordered text blocks."""

    def load_file(self, file_id: FileId, path: Path, file_type: FileType) -> list[TextBlock]: ...

    def load_file_metadata(self, path: Path) -> FileType: ...


class ConfigStore(Protocol):
    """Small application configuration record, unrelated to coding data."""

    def load_config(self) -> "AppSettings": ...

    def save_config(self, settings: Optional["AppSettings"] = None) -> None: ...

    def config_exists(self) -> bool: ...
