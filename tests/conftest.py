"""
Pytest configuration and shared fixtures.

This file contains reusable fixtures for building code books, file lists and
files with loaded content.
"""

from typing import Callable

import pytest

from qualkit.core.codebook import CodeBook
from qualkit.core.file_list import FileList
from qualkit.core.ids import BlockId, CodeDefId, FileId, QualCodeId
from qualkit.core.models import DataState, FileType, Highlight, QualFile, TextBlock


def make_loaded_file(path: str, num_blocks: int) -> QualFile:
    """
    Create a standalone file in LOADED state with ``num_blocks`` blocks.

    Args:
        path: File path.
        num_blocks: Number of text blocks to create.

    Returns:
        The loaded QualFile.
    """
    file = QualFile(FileId.new(), path, FileType.PLAIN_TEXT)
    blocks = [TextBlock.create(file.id, i, f"Block content {i}") for i in range(num_blocks)]
    file.set_data_state(DataState.loaded(blocks))
    return file


def build_block_map(*files: QualFile) -> dict[BlockId, FileId]:
    """Map every block of the given files to its file."""
    return {block.id: file.id for file in files for block in (file.blocks() or ())}


def apply_test_code(codebook: CodeBook, block_id: BlockId, code_def_id: CodeDefId, snippet: str) -> QualCodeId:
    """Apply a code to the first ten characters of a block."""
    return codebook.apply_code(code_def_id, Highlight(block_id, 0, 10), snippet)


@pytest.fixture
def codebook() -> CodeBook:
    """An empty code book."""
    return CodeBook()


@pytest.fixture
def file_list() -> FileList:
    """An empty file list."""
    return FileList()


@pytest.fixture
def loaded_file() -> Callable[[str, int], QualFile]:
    """Factory for files with loaded content."""
    return make_loaded_file


@pytest.fixture
def populated_file_list() -> tuple[FileList, list[FileId]]:
    """
    A file list holding three loaded files.

    Returns:
        The file list and the file ids in insertion order.
    """
    file_list = FileList()
    file_ids = []
    for path, num_blocks in (("interview_b.txt", 2), ("interview_a.txt", 3), ("notes.md", 1)):
        file_id = file_list.add_file(path, FileType.from_path(path))
        blocks = [TextBlock.create(file_id, i, f"{path} block {i}") for i in range(num_blocks)]
        file_list.file_mut(file_id).set_data_state(DataState.loaded(blocks))
        file_ids.append(file_id)
    return file_list, file_ids


@pytest.fixture
def settings_file(tmp_path):
    """Path for a settings file inside the test's temporary directory."""
    return tmp_path / "config" / "settings.json"
