"""
Typed identifiers for domain entities.

Entities reference each other only through these ids, never through direct
object references. Every id kind is its own class, so a ``FileId`` never
compares equal to a ``BlockId`` even if both wrap the same UUID.
"""

import uuid
from dataclasses import dataclass, field
from typing import TypeVar

T = TypeVar("T", bound="EntityId")


@dataclass(frozen=True)
class EntityId:
    """Base class for opaque, globally unique entity identifiers."""

    value: uuid.UUID = field(default_factory=uuid.uuid4)
    """Random 128-bit identifier."""

    @classmethod
    def new(cls: type[T]) -> T:
        """
        Mint a fresh identifier.

        Returns:
            A new id of the calling kind.
        """
        return cls(uuid.uuid4())

    @classmethod
    def parse(cls: type[T], text: str) -> T:
        """
        Rebuild an identifier from its string form.

        Only persistence should need this; domain code mints ids with ``new()``.

        Args:
            text: Canonical UUID string as produced by ``str(id)``.

        Returns:
            The identifier of the calling kind.

        Raises:
            ValueError: If ``text`` is not a valid UUID.
        """
        return cls(uuid.UUID(text))

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value})"


@dataclass(frozen=True, repr=False)
class FileId(EntityId):
    """Identifies a file in a ``FileList``."""


@dataclass(frozen=True, repr=False)
class BlockId(EntityId):
    """Identifies one text block of a file's content."""


@dataclass(frozen=True, repr=False)
class CodeDefId(EntityId):
    """Identifies a code definition."""


@dataclass(frozen=True, repr=False)
class ThemeId(EntityId):
    """Identifies a theme."""


@dataclass(frozen=True, repr=False)
class QualCodeId(EntityId):
    """Identifies one application of a code to a highlight."""
