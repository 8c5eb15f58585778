"""
Ordered collection of source files.

``FileList`` owns file lifecycle (add, remove, reorder, sort). It knows
nothing about the ``CodeBook``: removing a file leaves any codes applied to
its blocks in place. Callers that want them gone must call
``CodeBook.remove_codes_for_file`` with ``block_to_file_map()`` *before*
removing the file.
"""

from typing import Iterator, Optional

from ..infrastructure.logging_config import get_logger
from .errors import FileEntryNotFoundError, FileListIndexError
from .ids import BlockId, FileId
from .models import FileType, QualFile
from .ordered import OrderedRegistry, RegistryView

logger = get_logger(__name__)


class FileList:
    """Collection of files in display order."""

    def __init__(self):
        self._files: OrderedRegistry[FileId, QualFile] = OrderedRegistry()

    def add_file(self, path: str, file_type: FileType) -> FileId:
        """
        Add a file in EMPTY content state at the end of the list.

        Args:
            path: Location of the file.
            file_type: Kind of content the file holds.

        Returns:
            Id of the new file.
        """
        file = QualFile(FileId.new(), path, file_type)
        self._files.insert(file.id, file)
        logger.debug(f"Added file {file.id} ({path})")
        return file.id

    def remove_file(self, file_id: FileId) -> QualFile:
        """
        Remove a file entry. Codes applied to its blocks are not touched.

        Raises:
            FileEntryNotFoundError: If no file has this id.
        """
        file = self._files.remove(file_id)
        if file is None:
            raise FileEntryNotFoundError(file_id)
        logger.debug(f"Removed file {file_id} ({file.path})")
        return file

    def file(self, file_id: FileId) -> Optional[QualFile]:
        return self._files.get(file_id)

    def file_mut(self, file_id: FileId) -> Optional[QualFile]:
        """Look up a file in order to change its content state."""
        return self._files.get(file_id)

    def find_by_path(self, path: str) -> Optional[QualFile]:
        for file in self._files.iter_values():
            if file.path == path:
                return file
        return None

    def get_all_files(self) -> RegistryView[QualFile]:
        return self._files.values()

    def file_count(self) -> int:
        return len(self._files)

    def move_file_to_index(self, file_id: FileId, new_index: int) -> None:
        """
        Move a file to a new position, keeping the others in relative order.

        Raises:
            FileEntryNotFoundError: If no file has this id.
            FileListIndexError: If ``new_index`` is out of range.
        """
        current_index = self._files.index_of(file_id)
        if current_index is None:
            raise FileEntryNotFoundError(file_id)
        if not self._files.is_valid_index(new_index):
            raise FileListIndexError(new_index, self._files.max_index())
        self._files.move_index(current_index, new_index)

    def swap_files(self, index_a: int, index_b: int) -> None:
        """
        Swap the files at two positions.

        Raises:
            FileListIndexError: If either index is out of range.
        """
        for index in (index_a, index_b):
            if not self._files.is_valid_index(index):
                raise FileListIndexError(index, self._files.max_index())
        self._files.swap_indices(index_a, index_b)

    def sort_files_by_name(self) -> None:
        """Sort files by path, keeping the prior order for equal paths."""
        self._files.sort_by(lambda file: file.path)

    def block_to_file_map(self) -> dict[BlockId, FileId]:
        """
        Build the block-to-file lookup used by file-scoped ``CodeBook`` operations.

        Only files whose content is LOADED or MODIFIED contribute blocks.

        Returns:
            Mapping from every visible block id to its file id.
        """
        return {
            block.id: file.id
            for file in self._files.iter_values()
            for block in (file.blocks() or ())
        }

    def __iter__(self) -> Iterator[QualFile]:
        return self._files.iter_values()

    def __len__(self) -> int:
        return len(self._files)

    def to_dict(self) -> dict:
        return {"files": [file.to_dict() for file in self._files.iter_values()]}

    @classmethod
    def from_dict(cls, data: dict) -> "FileList":
        """Restore a file list, keeping ids and order."""
        file_list = cls()
        for file_data in data.get("files", []):
            file = QualFile.from_dict(file_data)
            file_list._files.insert(file.id, file)
        return file_list
