"""
Core domain models for qualitative coding.

This module contains the entities the ``CodeBook`` and ``FileList`` own:
highlights, text blocks, files and their content state, code definitions,
themes, applied codes and the project record. Models are GUI-agnostic and
perform no I/O.

Entities reference each other only by typed id. Use the ``CodeBook`` and
``FileList`` factory methods to create them; ``from_dict`` exists so that
persistence can restore entities with their original ids.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import PurePath
from typing import Optional, Sequence

from .ids import BlockId, CodeDefId, FileId, QualCodeId, ThemeId


def _check_color(color: int) -> int:
    if not 0 <= color <= 255:
        raise ValueError(f"Color must be a palette index between 0 and 255, got {color}")
    return color


@dataclass(frozen=True)
class Highlight:
    """
    A normalized ``[start, end)`` span inside one text block.

    Offsets given in reverse order are swapped, so ``start <= end`` always
    holds. Instances are immutable.
    """

    block_id: BlockId
    """Block the span belongs to."""

    start: int
    """Offset of the first highlighted character."""

    end: int
    """Offset one past the last highlighted character."""

    def __post_init__(self):
        if self.start < 0 or self.end < 0:
            raise ValueError(f"Highlight offsets must be non-negative, got ({self.start}, {self.end})")
        if self.start > self.end:
            start, end = self.end, self.start
            object.__setattr__(self, "start", start)
            object.__setattr__(self, "end", end)

    def __len__(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def to_dict(self) -> dict:
        return {"block_id": str(self.block_id), "start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: dict) -> "Highlight":
        return cls(BlockId.parse(data["block_id"]), data["start"], data["end"])


@dataclass(frozen=True)
class TextBlock:
    """One addressable chunk (paragraph, heading, segment) of a file's content."""

    id: BlockId
    file_id: FileId
    index: int
    """Position of the block within its file."""

    content: str

    @classmethod
    def create(cls, file_id: FileId, index: int, content: str) -> "TextBlock":
        """
        Create a block with a freshly minted id.

        Args:
            file_id: File the block belongs to.
            index: Position of the block within the file.
            content: Text of the block.

        Returns:
            The new TextBlock.
        """
        return cls(BlockId.new(), file_id, index, content)

    def to_dict(self) -> dict:
        return {"id": str(self.id), "index": self.index, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict, file_id: FileId) -> "TextBlock":
        return cls(BlockId.parse(data["id"]), file_id, data["index"], data["content"])


class FileType(Enum):
    """Kinds of source files the tool can hold."""

    PDF = "pdf"
    PLAIN_TEXT = "plain_text"
    MARKDOWN = "markdown"
    RICH_TEXT = "rich_text"

    @classmethod
    def from_path(cls, path: str) -> "FileType":
        """
        Guess the file type from a path's extension.

        Unknown extensions are treated as plain text.

        Args:
            path: File path or name.

        Returns:
            The matching FileType.
        """
        suffix = PurePath(path).suffix.lower()
        return _SUFFIX_TO_FILE_TYPE.get(suffix, cls.PLAIN_TEXT)


_SUFFIX_TO_FILE_TYPE = {
    ".pdf": FileType.PDF,
    ".txt": FileType.PLAIN_TEXT,
    ".text": FileType.PLAIN_TEXT,
    ".md": FileType.MARKDOWN,
    ".markdown": FileType.MARKDOWN,
    ".rtf": FileType.RICH_TEXT,
}


class ContentStatus(Enum):
    EMPTY = "empty"
    LOADED = "loaded"
    MODIFIED = "modified"
    ERROR = "error"


@dataclass(frozen=True)
class DataState:
    """
    Load/edit lifecycle state of a file's content.

    Only LOADED and MODIFIED states carry blocks.
    """

    status: ContentStatus
    blocks: tuple[TextBlock, ...] = ()
    message: Optional[str] = None
    """Reason for an ERROR state, if known."""

    @classmethod
    def empty(cls) -> "DataState":
        return cls(ContentStatus.EMPTY)

    @classmethod
    def loaded(cls, blocks: Sequence[TextBlock]) -> "DataState":
        return cls(ContentStatus.LOADED, tuple(blocks))

    @classmethod
    def modified(cls, blocks: Sequence[TextBlock]) -> "DataState":
        return cls(ContentStatus.MODIFIED, tuple(blocks))

    @classmethod
    def error(cls, message: Optional[str] = None) -> "DataState":
        return cls(ContentStatus.ERROR, message=message)

    @property
    def has_content(self) -> bool:
        return self.status in (ContentStatus.LOADED, ContentStatus.MODIFIED)


@dataclass
class QualFile:
    """A source file: path and type metadata plus its content state."""

    id: FileId
    path: str
    file_type: FileType
    data_state: DataState = field(default_factory=DataState.empty)

    @property
    def name(self) -> str:
        return PurePath(self.path).name

    @property
    def status(self) -> ContentStatus:
        return self.data_state.status

    def set_data_state(self, data_state: DataState) -> None:
        """Replace the content state; any state may follow any other."""
        self.data_state = data_state

    def blocks(self) -> Optional[tuple[TextBlock, ...]]:
        """
        Get the file's text blocks.

        Returns:
            The blocks in LOADED or MODIFIED state, None otherwise.
        """
        if self.data_state.has_content:
            return self.data_state.blocks
        return None

    def to_dict(self) -> dict:
        data = {
            "id": str(self.id),
            "path": self.path,
            "file_type": self.file_type.value,
            "status": self.status.value,
        }
        if self.data_state.has_content:
            data["blocks"] = [block.to_dict() for block in self.data_state.blocks]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "QualFile":
        """
        Restore a file. Content of an ERROR file is not kept, so it comes back EMPTY.
        """
        file_id = FileId.parse(data["id"])
        status = ContentStatus(data.get("status", ContentStatus.EMPTY.value))
        blocks = tuple(TextBlock.from_dict(b, file_id) for b in data.get("blocks", []))
        if status in (ContentStatus.LOADED, ContentStatus.MODIFIED):
            data_state = DataState(status, blocks)
        else:
            data_state = DataState.empty()
        return cls(file_id, data["path"], FileType(data["file_type"]), data_state)


@dataclass
class CodeDef:
    """Definition of a code (label) that can be applied to text."""

    id: CodeDefId
    name: str
    color: int
    """Palette index, 0-255."""

    theme_id: Optional[ThemeId] = None
    """Theme the code belongs to; None for a top-level code."""

    def __post_init__(self):
        _check_color(self.color)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "color": self.color,
            "theme_id": str(self.theme_id) if self.theme_id else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CodeDef":
        theme_id = ThemeId.parse(data["theme_id"]) if data.get("theme_id") else None
        return cls(CodeDefId.parse(data["id"]), data["name"], data["color"], theme_id)


@dataclass
class ThemeDef:
    """A flat grouping label for code definitions."""

    id: ThemeId
    name: str
    color: int

    def __post_init__(self):
        _check_color(self.color)

    def to_dict(self) -> dict:
        return {"id": str(self.id), "name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict) -> "ThemeDef":
        return cls(ThemeId.parse(data["id"]), data["name"], data["color"])


@dataclass
class QualCode:
    """One application of a code definition to a highlighted span."""

    id: QualCodeId
    def_id: CodeDefId
    highlight: Highlight
    snippet: str
    """Highlighted text as it read when the code was applied."""

    memo: str = ""
    """Free-text analytic note attached to this application."""

    coder: str = ""
    """Who applied the code."""

    @property
    def block_id(self) -> BlockId:
        return self.highlight.block_id

    @property
    def position(self) -> tuple[int, int]:
        return self.highlight.start, self.highlight.end

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "def_id": str(self.def_id),
            "highlight": self.highlight.to_dict(),
            "snippet": self.snippet,
            "memo": self.memo,
            "coder": self.coder,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QualCode":
        return cls(
            id=QualCodeId.parse(data["id"]),
            def_id=CodeDefId.parse(data["def_id"]),
            highlight=Highlight.from_dict(data["highlight"]),
            snippet=data["snippet"],
            memo=data.get("memo", ""),
            coder=data.get("coder", ""),
        )


@dataclass
class QualProject:
    """Project record: name, format version and timestamps."""

    name: str
    version: int
    created_at: datetime
    modified_at: datetime

    @classmethod
    def create(cls, name: str) -> "QualProject":
        now = datetime.now(timezone.utc)
        return cls(name=name, version=1, created_at=now, modified_at=now)

    def touch(self) -> None:
        """Mark the project as modified now."""
        self.modified_at = datetime.now(timezone.utc)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "created_at": self.created_at.isoformat(),
            "modified_at": self.modified_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QualProject":
        return cls(
            name=data["name"],
            version=data["version"],
            created_at=datetime.fromisoformat(data["created_at"]),
            modified_at=datetime.fromisoformat(data["modified_at"]),
        )
