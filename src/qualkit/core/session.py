"""
Application service holding the live project state.

``ProjectSession`` owns the ``CodeBook``, the ``FileList`` and the project
record behind a single reader/writer lock: any number of readers (UI
rendering) or one writer (a mutation). Slow I/O such as loading file content
or writing the project file runs outside the exclusive lock; only the short
in-memory update is done while holding it.

The session is also where ``CodeBook`` and ``FileList`` are coordinated, for
example removing a file's codes before removing the file.
"""

import copy
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from ..infrastructure.logging_config import get_logger
from .codebook import CodeBook
from .errors import FileEntryNotFoundError, FileError, NoProjectError
from .file_list import FileList
from .ids import CodeDefId, FileId, QualCodeId, ThemeId
from .models import DataState, Highlight, QualCode, QualProject
from .ports import ConfigStore, FileLoader, ProjectRepository

logger = get_logger(__name__)


class ReadWriteLock:
    """
    Many-readers / single-writer lock.

    Waiting writers block new readers, so a steady stream of readers cannot
    starve a writer. Not reentrant.
    """

    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._condition:
            while self._writer or self._waiting_writers:
                self._condition.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._condition:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._condition.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._condition:
                self._writer = False
                self._condition.notify_all()


class ProjectSession:
    """
    The open project and every operation the application performs on it.

    Args:
        project_repo: Where projects are stored.
        file_loader: Turns source files into text blocks.
        config_store: Application settings.
    """

    def __init__(self, project_repo: ProjectRepository, file_loader: FileLoader, config_store: ConfigStore):
        self._project_repo = project_repo
        self._file_loader = file_loader
        self._config_store = config_store
        self.settings = config_store.load_config()

        self._lock = ReadWriteLock()
        self._save_lock = threading.Lock()
        self._project: Optional[QualProject] = None
        self._project_path: Optional[Path] = None
        self._codebook = CodeBook()
        self._file_list = FileList()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def project(self) -> Optional[QualProject]:
        return self._project

    @property
    def project_path(self) -> Optional[Path]:
        return self._project_path

    @contextmanager
    def reading(self) -> Iterator[tuple[CodeBook, FileList]]:
        """
        Hold the read lock while inspecting the code book and file list.

        Yields:
            The live code book and file list. Do not mutate them.
        """
        with self._lock.read():
            yield self._codebook, self._file_list

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def new_project(self, path: Path, name: str) -> QualProject:
        """Create an empty project on disk and make it the open project."""
        path = Path(path)
        project = self._project_repo.new_project(path, name)
        self._install(path, project, CodeBook(), FileList())
        return project

    def load_project(self, path: Path) -> QualProject:
        path = Path(path)
        project, codebook, file_list = self._project_repo.load_project(path)
        self._install(path, project, codebook, file_list)
        return project

    def save_project(self) -> None:
        """
        Save the open project.

        The state is copied under the read lock and written to disk after the
        lock is released, so editing can continue during the write. Saves are
        serialized, so the last snapshot taken is the last one written.

        Raises:
            NoProjectError: If no project is open.
        """
        with self._save_lock:
            with self._lock.read():
                if self._project is None:
                    raise NoProjectError()
                path = self._project_path
                project = copy.deepcopy(self._project)
                codebook = copy.deepcopy(self._codebook)
                file_list = copy.deepcopy(self._file_list)

            project.touch()
            self._project_repo.save_project(path, project, codebook, file_list)

            with self._lock.write():
                if self._project is not None and self._project_path == path:
                    self._project.modified_at = project.modified_at

    def _install(self, path: Path, project: QualProject, codebook: CodeBook, file_list: FileList) -> None:
        with self._lock.write():
            self._project = project
            self._project_path = path
            self._codebook = codebook
            self._file_list = file_list
        logger.info(f"Opened project '{project.name}' ({path})")

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def add_file(self, path: Path) -> FileId:
        """
        Add a file to the project without loading its content.

        Raises:
            FileNotFoundError: If the path does not exist.
        """
        path = Path(path)
        file_type = self._file_loader.load_file_metadata(path)
        with self._lock.write():
            file_id = self._file_list.add_file(str(path), file_type)
        logger.info(f"Added {file_type.value} file {path.name}")
        return file_id

    def open_file(self, file_id: FileId) -> None:
        """
        Load a file's content into the file list.

        On failure the file is put in ERROR state and the error is re-raised.

        Raises:
            FileEntryNotFoundError: If no file has this id.
            FileError: If the content cannot be loaded.
        """
        with self._lock.read():
            file = self._file_list.file(file_id)
            if file is None:
                raise FileEntryNotFoundError(file_id)
            path, file_type = Path(file.path), file.file_type

        try:
            blocks = self._file_loader.load_file(file_id, path, file_type)
        except FileError as e:
            self._set_data_state(file_id, DataState.error(str(e)))
            raise

        self._set_data_state(file_id, DataState.loaded(blocks))

    def _set_data_state(self, file_id: FileId, data_state: DataState) -> None:
        with self._lock.write():
            file = self._file_list.file_mut(file_id)
            if file is None:
                # Removed while its content was loading.
                logger.warning(f"File {file_id} disappeared before its content was installed")
                return
            file.set_data_state(data_state)

    def remove_file(self, file_id: FileId) -> int:
        """
        Remove a file and every code applied to its blocks.

        Returns:
            Number of applied codes removed with the file.

        Raises:
            FileEntryNotFoundError: If no file has this id.
        """
        with self._lock.write():
            if self._file_list.file(file_id) is None:
                raise FileEntryNotFoundError(file_id)
            block_map = self._file_list.block_to_file_map()
            removed = self._codebook.remove_codes_for_file(file_id, block_map)
            self._file_list.remove_file(file_id)
        logger.info(f"Removed file {file_id} and {removed} applied codes")
        return removed

    # ------------------------------------------------------------------
    # Coding
    # ------------------------------------------------------------------

    def create_theme(self, name: str, color: int) -> ThemeId:
        with self._lock.write():
            return self._codebook.create_theme(name, color)

    def create_code(self, name: str, color: int, theme_id: Optional[ThemeId] = None) -> CodeDefId:
        with self._lock.write():
            return self._codebook.create_code_def(name, color, theme_id)

    def apply_code(
        self,
        code_def_id: CodeDefId,
        highlight: Highlight,
        snippet: str,
        memo: str = "",
        coder: Optional[str] = None,
    ) -> QualCodeId:
        """Apply a code; ``coder`` defaults to the configured default coder."""
        if coder is None:
            coder = self.settings.default_coder
        with self._lock.write():
            return self._codebook.apply_code(code_def_id, highlight, snippet, memo, coder)

    def codes_for_file(self, file_id: FileId) -> list[QualCode]:
        with self._lock.read():
            block_map = self._file_list.block_to_file_map()
            return list(self._codebook.get_codes_for_file(file_id, block_map))
