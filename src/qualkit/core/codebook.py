"""
The code book: code definitions, themes and applied codes.

``CodeBook`` is the sole owner of every ``CodeDef``, ``ThemeDef`` and
``QualCode`` and enforces the rules between them:

- Removing a code definition removes every application of it.
- Removing a theme demotes its member codes to top-level; codes are never
  left pointing at a missing theme by that operation.
- Applications whose block cannot be resolved to a file are tolerated. They
  are skipped by file-scoped queries and stay in the book until removed.

The book holds no reference to the ``FileList``. File-scoped operations take
a block-to-file mapping built by the caller (see
``FileList.block_to_file_map``).
"""

from typing import Iterator, Mapping, Optional

from ..infrastructure.logging_config import get_logger
from .errors import (
    CodeBookIndexError,
    CodeDefNotFoundError,
    QualCodeNotFoundError,
    ThemeNotFoundError,
)
from .ids import BlockId, CodeDefId, FileId, QualCodeId, ThemeId
from .models import CodeDef, Highlight, QualCode, ThemeDef
from .ordered import OrderedRegistry, RegistryView

logger = get_logger(__name__)

BlockToFileMap = Mapping[BlockId, FileId]


class QualCodeView:
    """Read-only sized view over the applied codes, in application order."""

    def __init__(self, qual_codes: list[QualCode]):
        self._qual_codes = qual_codes

    def __iter__(self) -> Iterator[QualCode]:
        return iter(self._qual_codes)

    def __len__(self) -> int:
        return len(self._qual_codes)

    def __getitem__(self, index: int) -> QualCode:
        return self._qual_codes[index]


class CodeBook:
    """
    Code definitions, themes and qualitative code applications.

    This is the core application state for coding: the application layer
    uses it to create codes and themes and to apply codes to text.
    """

    def __init__(self):
        self._code_defs: OrderedRegistry[CodeDefId, CodeDef] = OrderedRegistry()
        self._themes: OrderedRegistry[ThemeId, ThemeDef] = OrderedRegistry()
        self._qual_codes: list[QualCode] = []

    # ------------------------------------------------------------------
    # Code definitions
    # ------------------------------------------------------------------

    def create_code_def(self, name: str, color: int, theme_id: Optional[ThemeId] = None) -> CodeDefId:
        """
        Create a code definition at the end of the display order.

        ``theme_id`` is not required to exist; an unknown theme is accepted
        and only logged. Removing that theme later would demote the code.

        Args:
            name: Display name.
            color: Palette index (0-255).
            theme_id: Theme to place the code in, or None for top-level.

        Returns:
            Id of the new code definition.
        """
        if theme_id is not None and theme_id not in self._themes:
            logger.warning(f"Code '{name}' created in unknown theme {theme_id}")
        code_def = CodeDef(CodeDefId.new(), name, color, theme_id)
        self._code_defs.insert(code_def.id, code_def)
        logger.debug(f"Created code definition {code_def.id} '{name}'")
        return code_def.id

    def code_def(self, code_def_id: CodeDefId) -> Optional[CodeDef]:
        return self._code_defs.get(code_def_id)

    def remove_code_def(self, code_def_id: CodeDefId) -> CodeDef:
        """
        Remove a code definition together with every application of it.

        Returns:
            The removed definition.

        Raises:
            CodeDefNotFoundError: If the id is unknown. Nothing is removed.
        """
        if code_def_id not in self._code_defs:
            raise CodeDefNotFoundError(code_def_id)

        before = len(self._qual_codes)
        self._qual_codes[:] = [qc for qc in self._qual_codes if qc.def_id != code_def_id]
        code_def = self._code_defs.remove(code_def_id)

        logger.debug(
            f"Removed code definition {code_def_id} and {before - len(self._qual_codes)} applications"
        )
        return code_def

    def get_all_code_defs(self) -> RegistryView[CodeDef]:
        return self._code_defs.values()

    def code_def_count(self) -> int:
        return len(self._code_defs)

    def move_code_def_to_index(self, code_def_id: CodeDefId, new_index: int) -> None:
        """
        Move a code definition to a new position.

        Raises:
            CodeDefNotFoundError: If the id is unknown.
            CodeBookIndexError: If ``new_index`` is out of range.
        """
        current_index = self._code_defs.index_of(code_def_id)
        if current_index is None:
            raise CodeDefNotFoundError(code_def_id)
        if not self._code_defs.is_valid_index(new_index):
            raise CodeBookIndexError(new_index, self._code_defs.max_index())
        self._code_defs.move_index(current_index, new_index)

    def swap_code_defs(self, index_a: int, index_b: int) -> None:
        """
        Swap the code definitions at two positions.

        Raises:
            CodeBookIndexError: If either index is out of range.
        """
        _check_indices(self._code_defs, index_a, index_b)
        self._code_defs.swap_indices(index_a, index_b)

    def sort_code_defs_by_name(self) -> None:
        self._code_defs.sort_by(lambda code_def: code_def.name)

    # ------------------------------------------------------------------
    # Themes
    # ------------------------------------------------------------------

    def create_theme(self, name: str, color: int) -> ThemeId:
        theme = ThemeDef(ThemeId.new(), name, color)
        self._themes.insert(theme.id, theme)
        logger.debug(f"Created theme {theme.id} '{name}'")
        return theme.id

    def theme(self, theme_id: ThemeId) -> Optional[ThemeDef]:
        return self._themes.get(theme_id)

    def remove_theme(self, theme_id: ThemeId) -> ThemeDef:
        """
        Remove a theme. Its member codes become top-level codes.

        Returns:
            The removed theme.

        Raises:
            ThemeNotFoundError: If the id is unknown.
        """
        theme = self._themes.remove(theme_id)
        if theme is None:
            raise ThemeNotFoundError(theme_id)

        demoted = 0
        for code_def in self._code_defs.iter_values():
            if code_def.theme_id == theme_id:
                code_def.theme_id = None
                demoted += 1

        logger.debug(f"Removed theme {theme_id}, {demoted} codes moved to top level")
        return theme

    def get_all_themes(self) -> RegistryView[ThemeDef]:
        return self._themes.values()

    def theme_count(self) -> int:
        return len(self._themes)

    def get_codes_in_theme(self, theme_id: ThemeId) -> Iterator[CodeDef]:
        return (cd for cd in self._code_defs.iter_values() if cd.theme_id == theme_id)

    def get_top_level_codes(self) -> Iterator[CodeDef]:
        return (cd for cd in self._code_defs.iter_values() if cd.theme_id is None)

    def move_code_to_theme(self, code_def_id: CodeDefId, theme_id: ThemeId) -> None:
        """Put a code into a theme. Unknown code ids are ignored."""
        code_def = self._code_defs.get(code_def_id)
        if code_def is None:
            logger.debug(f"move_code_to_theme ignored unknown code definition {code_def_id}")
            return
        code_def.theme_id = theme_id

    def remove_code_from_theme(self, code_def_id: CodeDefId) -> None:
        """
        Make a code top-level.

        Raises:
            CodeDefNotFoundError: If the id is unknown.
        """
        code_def = self._code_defs.get(code_def_id)
        if code_def is None:
            raise CodeDefNotFoundError(code_def_id)
        code_def.theme_id = None

    def move_theme_to_index(self, theme_id: ThemeId, new_index: int) -> None:
        """
        Move a theme to a new position.

        Raises:
            ThemeNotFoundError: If the id is unknown.
            CodeBookIndexError: If ``new_index`` is out of range.
        """
        current_index = self._themes.index_of(theme_id)
        if current_index is None:
            raise ThemeNotFoundError(theme_id)
        if not self._themes.is_valid_index(new_index):
            raise CodeBookIndexError(new_index, self._themes.max_index())
        self._themes.move_index(current_index, new_index)

    def swap_themes(self, index_a: int, index_b: int) -> None:
        _check_indices(self._themes, index_a, index_b)
        self._themes.swap_indices(index_a, index_b)

    def sort_themes_by_name(self) -> None:
        self._themes.sort_by(lambda theme: theme.name)

    # ------------------------------------------------------------------
    # Qualitative code applications
    # ------------------------------------------------------------------

    def apply_code(
        self,
        code_def_id: CodeDefId,
        highlight: Highlight,
        snippet: str,
        memo: str = "",
        coder: str = "",
    ) -> QualCodeId:
        """
        Apply a code definition to a highlighted span.

        The definition is not required to exist.

        Args:
            code_def_id: Definition being applied.
            highlight: Span the code covers.
            snippet: Highlighted text.
            memo: Optional analytic note.
            coder: Optional name of whoever applied the code.

        Returns:
            Id of the new application.
        """
        qual_code = QualCode(QualCodeId.new(), code_def_id, highlight, snippet, memo, coder)
        self._qual_codes.append(qual_code)
        logger.debug(f"Applied code {code_def_id} to block {highlight.block_id} as {qual_code.id}")
        return qual_code.id

    def qual_code(self, qual_code_id: QualCodeId) -> Optional[QualCode]:
        for qual_code in self._qual_codes:
            if qual_code.id == qual_code_id:
                return qual_code
        return None

    def remove_qual_code(self, qual_code_id: QualCodeId) -> None:
        """
        Raises:
            QualCodeNotFoundError: If the id is unknown.
        """
        for position, qual_code in enumerate(self._qual_codes):
            if qual_code.id == qual_code_id:
                del self._qual_codes[position]
                return
        raise QualCodeNotFoundError(qual_code_id)

    def update_memo(self, qual_code_id: QualCodeId, memo: str) -> None:
        qual_code = self.qual_code(qual_code_id)
        if qual_code is None:
            raise QualCodeNotFoundError(qual_code_id)
        qual_code.memo = memo

    def get_codes_for_file(self, file_id: FileId, block_to_file_map: BlockToFileMap) -> Iterator[QualCode]:
        """
        Get the applications that fall inside a file.

        Applications whose block is missing from ``block_to_file_map`` are
        skipped, not reported.

        Args:
            file_id: File to query.
            block_to_file_map: Which file each known block belongs to.

        Returns:
            Lazy iterator over the matching applications.
        """
        return (
            qc for qc in self._qual_codes
            if block_to_file_map.get(qc.highlight.block_id) == file_id
        )

    def remove_codes_for_file(self, file_id: FileId, block_to_file_map: BlockToFileMap) -> int:
        """
        Remove the applications that fall inside a file.

        Applications whose block is missing from the map are left in place.

        Returns:
            Number of applications removed.
        """
        before = len(self._qual_codes)
        self._qual_codes[:] = [
            qc for qc in self._qual_codes
            if block_to_file_map.get(qc.highlight.block_id) != file_id
        ]
        removed = before - len(self._qual_codes)
        logger.debug(f"Removed {removed} applications for file {file_id}")
        return removed

    def get_orphaned_codes(self, block_to_file_map: BlockToFileMap) -> Iterator[QualCode]:
        """Applications whose block does not resolve to any file."""
        return (qc for qc in self._qual_codes if qc.highlight.block_id not in block_to_file_map)

    def get_codes_for_def(self, code_def_id: CodeDefId) -> Iterator[QualCode]:
        return (qc for qc in self._qual_codes if qc.def_id == code_def_id)

    def get_all_qual_codes(self) -> QualCodeView:
        return QualCodeView(self._qual_codes)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "code_defs": [cd.to_dict() for cd in self._code_defs.iter_values()],
            "themes": [theme.to_dict() for theme in self._themes.iter_values()],
            "qual_codes": [qc.to_dict() for qc in self._qual_codes],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CodeBook":
        """Restore a code book, keeping ids and display order."""
        codebook = cls()
        for theme_data in data.get("themes", []):
            theme = ThemeDef.from_dict(theme_data)
            codebook._themes.insert(theme.id, theme)
        for code_data in data.get("code_defs", []):
            code_def = CodeDef.from_dict(code_data)
            codebook._code_defs.insert(code_def.id, code_def)
        codebook._qual_codes = [QualCode.from_dict(qc) for qc in data.get("qual_codes", [])]
        return codebook


def _check_indices(registry: OrderedRegistry, *indices: int) -> None:
    for index in indices:
        if not registry.is_valid_index(index):
            raise CodeBookIndexError(index, registry.max_index())
