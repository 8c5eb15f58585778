"""
File content loading.

This module turns source files into the ordered ``TextBlock`` sequences that
highlights are addressed against:

- Plain text is split into paragraphs at blank lines.
- Markdown is parsed with ``markdown-it-py`` and split into one block per
  block-level element (paragraph, heading, list item, table cell, code block),
  so blocks hold readable text rather than markup.

PDF and rich text are not supported yet and fail with a parse error.
"""

import re
from pathlib import Path

from markdown_it import MarkdownIt

from ..core.errors import FileError, FileErrorKind
from ..core.ids import FileId
from ..core.models import FileType, TextBlock
from .logging_config import get_logger

logger = get_logger(__name__)

_PARAGRAPH_BREAK = re.compile(r"\n[ \t]*\n")

_md = MarkdownIt("commonmark").enable("table")


def split_paragraphs(text: str) -> list[str]:
    """
    Split plain text into paragraphs separated by blank lines.

    Args:
        text: Decoded file content.

    Returns:
        Non-empty paragraphs with surrounding whitespace removed.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return [part.strip() for part in _PARAGRAPH_BREAK.split(text) if part.strip()]


def _inline_text(token) -> str:
    parts = []
    for child in token.children or ():
        if child.type in ("text", "text_special", "code_inline"):
            parts.append(child.content)
        elif child.type == "softbreak":
            parts.append(" ")
        elif child.type == "hardbreak":
            parts.append("\n")
        elif child.type == "image":
            parts.append(child.content)
    lines = ("".join(parts)).split("\n")
    return "\n".join(" ".join(line.split()) for line in lines).strip()


def split_markdown(text: str) -> list[str]:
    """
    Split Markdown into block-level text chunks.

    Inline markup is dropped and entities are decoded; code blocks keep their
    line breaks.

    Args:
        text: Markdown source.

    Returns:
        Text of each block-level element, in document order.
    """
    blocks = []
    for token in _md.parse(text):
        if token.type == "inline":
            chunk = _inline_text(token)
        elif token.type in ("fence", "code_block"):
            chunk = token.content.strip("\n")
        else:
            continue
        if chunk.strip():
            blocks.append(chunk)
    return blocks


class TextFileLoader:
    """
    Loads plain text and Markdown files as text blocks.

    Satisfies the ``FileLoader`` protocol.
    """

    def __init__(self, encoding: str = "utf-8-sig"):
        """
        Initialize the loader.

        Args:
            encoding: Text encoding of source files. The default also strips a UTF-8 BOM.
        """
        self.encoding = encoding

    def load_file_metadata(self, path: Path) -> FileType:
        """
        Determine a file's type without reading its content.

        Raises:
            FileNotFoundError: If the path does not exist.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"File does not exist: {path}")
        return FileType.from_path(path.name)

    def load_file(self, file_id: FileId, path: Path, file_type: FileType) -> list[TextBlock]:
        """
        Read a file and split it into text blocks.

        Args:
            file_id: File the blocks belong to.
            path: Location of the file.
            file_type: How to interpret the content.

        Returns:
            The file's blocks, indexed from 0.

        Raises:
            FileError: READ if the file cannot be read, ENCODING if it cannot be
                decoded, PARSE if the file type is not supported.
        """
        path = Path(path)
        if file_type not in (FileType.PLAIN_TEXT, FileType.MARKDOWN):
            raise FileError(FileErrorKind.PARSE, file_id, f"{file_type.value} files are not supported")

        try:
            raw = path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise FileError(FileErrorKind.READ, file_id, str(e)) from e

        try:
            text = raw.decode(self.encoding)
        except UnicodeDecodeError as e:
            logger.error(f"Failed to decode {path} as {self.encoding}: {e}")
            raise FileError(FileErrorKind.ENCODING, file_id, str(e)) from e

        if file_type == FileType.MARKDOWN:
            chunks = split_markdown(text)
        else:
            chunks = split_paragraphs(text)

        logger.info(f"Loaded {len(chunks)} blocks from {path.name}")
        return [TextBlock.create(file_id, index, chunk) for index, chunk in enumerate(chunks)]
