"""
JSON project persistence.

A project file holds the project record, the code book and the file list in
one UTF-8 JSON document. Loaded file contents are stored with their block ids
so highlights stay valid after a reload.

Writes are atomic: the document goes to a temporary file next to the target,
which then replaces the target.
"""

import json
import tempfile
from pathlib import Path

from ..core.codebook import CodeBook
from ..core.errors import ProjectError, ProjectErrorKind
from ..core.file_list import FileList
from ..core.models import QualProject
from .logging_config import get_logger
from .paths import ensure_directory

logger = get_logger(__name__)

FORMAT_VERSION = 1


class JsonProjectRepository:
    """
    Stores projects as JSON documents.

    Satisfies the ``ProjectRepository`` protocol. The code book and file list
    passed to ``save_project`` are only read.
    """

    def new_project(self, path: Path, name: str) -> QualProject:
        """
        Create a project file holding an empty code book and file list.

        Args:
            path: Location of the project file.
            name: Project name.

        Returns:
            The new project record.

        Raises:
            ProjectError: If the file already exists or cannot be written.
        """
        path = Path(path)
        if path.exists():
            raise ProjectError(ProjectErrorKind.NEW, path, "file already exists")

        project = QualProject.create(name)
        try:
            self._write(path, project, CodeBook(), FileList())
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to create project at {path}: {e}")
            raise ProjectError(ProjectErrorKind.NEW, path, str(e)) from e

        logger.info(f"Created project '{name}' at {path}")
        return project

    def save_project(self, path: Path, project: QualProject, codebook: CodeBook, file_list: FileList) -> None:
        """
        Write a project to disk, replacing any previous version.

        Raises:
            ProjectError: If the file cannot be written.
        """
        path = Path(path)
        try:
            self._write(path, project, codebook, file_list)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save project to {path}: {e}")
            raise ProjectError(ProjectErrorKind.SAVE, path, str(e)) from e

        logger.info(f"Project '{project.name}' saved to {path}")

    def load_project(self, path: Path) -> tuple[QualProject, CodeBook, FileList]:
        """
        Read a project file.

        Returns:
            The project record, its code book and its file list.

        Raises:
            ProjectError: If the file is missing, unreadable or malformed.
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse project file {path}: {e}")
            raise ProjectError(ProjectErrorKind.LOAD, path, f"invalid JSON: {e}") from e
        except OSError as e:
            logger.error(f"Failed to read project file {path}: {e}")
            raise ProjectError(ProjectErrorKind.LOAD, path, str(e)) from e

        version = data.get("format_version") if isinstance(data, dict) else None
        if version != FORMAT_VERSION:
            raise ProjectError(ProjectErrorKind.LOAD, path, f"unsupported format version: {version}")

        for section in ("project", "codebook", "file_list"):
            if section in data and not isinstance(data[section], dict):
                raise ProjectError(
                    ProjectErrorKind.LOAD, path, f"malformed project data: '{section}' is not an object"
                )

        try:
            project = QualProject.from_dict(data["project"])
            codebook = CodeBook.from_dict(data.get("codebook", {}))
            file_list = FileList.from_dict(data.get("file_list", {}))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed project file {path}: {e!r}")
            raise ProjectError(ProjectErrorKind.LOAD, path, f"malformed project data: {e!r}") from e

        logger.info(
            f"Loaded project '{project.name}': {file_list.file_count()} files, "
            f"{codebook.code_def_count()} codes, {len(codebook.get_all_qual_codes())} applications"
        )
        return project, codebook, file_list

    def _write(self, path: Path, project: QualProject, codebook: CodeBook, file_list: FileList) -> None:
        document = {
            "format_version": FORMAT_VERSION,
            "project": project.to_dict(),
            "codebook": codebook.to_dict(),
            "file_list": file_list.to_dict(),
        }
        ensure_directory(path.parent)

        # Unique temp file per write so overlapping saves never share one
        with tempfile.NamedTemporaryFile(
            'w', encoding='utf-8', dir=path.parent, prefix=path.name + '.', suffix='.tmp', delete=False
        ) as f:
            temp_file = Path(f.name)
            try:
                json.dump(document, f, indent=2, ensure_ascii=False)
            except Exception:
                f.close()
                temp_file.unlink(missing_ok=True)
                raise
        try:
            temp_file.replace(path)
        except OSError:
            temp_file.unlink(missing_ok=True)
            raise
