"""
Tests for JSON project persistence.
"""

import json
import threading

import pytest

from qualkit.core.codebook import CodeBook
from qualkit.core.errors import ProjectError, ProjectErrorKind
from qualkit.core.file_list import FileList
from qualkit.core.models import ContentStatus, DataState, FileType, Highlight, TextBlock
from qualkit.infrastructure import project_store
from qualkit.infrastructure.project_store import FORMAT_VERSION, JsonProjectRepository


@pytest.fixture
def repo() -> JsonProjectRepository:
    return JsonProjectRepository()


class TestNewProject:
    """Tests for creating project files."""

    def test_new_project_writes_empty_record(self, repo, tmp_path):
        """A new project file holds the record and empty collections."""
        path = tmp_path / "study" / "study.qual.json"

        project = repo.new_project(path, "Study")

        assert project.name == "Study"
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        assert data["format_version"] == FORMAT_VERSION
        assert data["project"]["name"] == "Study"
        assert data["codebook"] == {"code_defs": [], "themes": [], "qual_codes": []}
        assert data["file_list"] == {"files": []}

    def test_new_project_refuses_to_overwrite(self, repo, tmp_path):
        """An existing file is never replaced by a new project."""
        path = tmp_path / "existing.qual.json"
        path.write_text("keep me", encoding="utf-8")

        with pytest.raises(ProjectError) as exc_info:
            repo.new_project(path, "Study")

        assert exc_info.value.kind == ProjectErrorKind.NEW
        assert path.read_text(encoding="utf-8") == "keep me"


class TestSaveAndLoad:
    """Tests for saving and reloading a populated project."""

    def test_round_trip(self, repo, tmp_path):
        """Ids, order, membership, content and applications survive a reload."""
        path = tmp_path / "study.qual.json"
        project = repo.new_project(path, "Study")

        file_list = FileList()
        loaded_id = file_list.add_file("p01.txt", FileType.PLAIN_TEXT)
        blocks = [TextBlock.create(loaded_id, i, f"paragraph {i}") for i in range(2)]
        file_list.file_mut(loaded_id).set_data_state(DataState.loaded(blocks))
        empty_id = file_list.add_file("p02.pdf", FileType.PDF)
        file_list.swap_files(0, 1)

        codebook = CodeBook()
        theme_id = codebook.create_theme("Barriers", 2)
        code_id = codebook.create_code_def("Cost", 7, theme_id)
        qc_id = codebook.apply_code(code_id, Highlight(blocks[1].id, 0, 9), "paragraph", "memo", "ana")

        repo.save_project(path, project, codebook, file_list)
        loaded_project, loaded_book, loaded_files = repo.load_project(path)

        assert loaded_project == project
        assert [f.id for f in loaded_files.get_all_files()] == [empty_id, loaded_id]
        assert loaded_files.file(empty_id).status == ContentStatus.EMPTY
        assert loaded_files.file(loaded_id).blocks() == tuple(blocks)
        assert loaded_book.code_def(code_id).theme_id == theme_id
        assert loaded_book.qual_code(qc_id).memo == "memo"

        block_map = loaded_files.block_to_file_map()
        assert [qc.id for qc in loaded_book.get_codes_for_file(loaded_id, block_map)] == [qc_id]

    def test_save_leaves_no_temp_file(self, repo, tmp_path):
        """The temporary file is renamed over the target."""
        path = tmp_path / "study.qual.json"
        project = repo.new_project(path, "Study")

        repo.save_project(path, project, CodeBook(), FileList())

        assert [p.name for p in tmp_path.iterdir()] == ["study.qual.json"]


class TestLoadErrors:
    """Tests for failures while loading."""

    def test_missing_file(self, repo, tmp_path):
        """A missing file is a LOAD error."""
        with pytest.raises(ProjectError) as exc_info:
            repo.load_project(tmp_path / "missing.qual.json")

        assert exc_info.value.kind == ProjectErrorKind.LOAD

    def test_invalid_json(self, repo, tmp_path):
        """Broken JSON is a LOAD error."""
        path = tmp_path / "broken.qual.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ProjectError, match="invalid JSON"):
            repo.load_project(path)

    def test_unsupported_version(self, repo, tmp_path):
        """Unknown format versions are refused."""
        path = tmp_path / "future.qual.json"
        path.write_text(json.dumps({"format_version": 99}), encoding="utf-8")

        with pytest.raises(ProjectError, match="unsupported format version"):
            repo.load_project(path)

    def test_malformed_content(self, repo, tmp_path):
        """Missing or invalid fields are reported as malformed data."""
        path = tmp_path / "bad.qual.json"
        document = {
            "format_version": FORMAT_VERSION,
            "project": {"name": "x", "version": 1,
                        "created_at": "2024-01-01T00:00:00+00:00",
                        "modified_at": "2024-01-01T00:00:00+00:00"},
            "codebook": {"themes": [{"id": "nope", "name": "T", "color": 1}]},
        }
        path.write_text(json.dumps(document), encoding="utf-8")

        with pytest.raises(ProjectError, match="malformed"):
            repo.load_project(path)

    @pytest.mark.parametrize("section, value", [
        ("codebook", []),
        ("file_list", ["x"]),
        ("project", "Study"),
    ])
    def test_section_with_wrong_shape(self, repo, tmp_path, section, value):
        """Sections that are not JSON objects are LOAD errors."""
        path = tmp_path / "study.qual.json"
        repo.new_project(path, "Study")
        with open(path, 'r', encoding='utf-8') as f:
            document = json.load(f)
        document[section] = value
        path.write_text(json.dumps(document), encoding="utf-8")

        with pytest.raises(ProjectError) as exc_info:
            repo.load_project(path)

        assert exc_info.value.kind == ProjectErrorKind.LOAD

    def test_entry_with_wrong_shape(self, repo, tmp_path):
        """Entries inside a section that are not objects are LOAD errors."""
        path = tmp_path / "study.qual.json"
        repo.new_project(path, "Study")
        with open(path, 'r', encoding='utf-8') as f:
            document = json.load(f)
        document["codebook"]["code_defs"] = ["Cost"]
        path.write_text(json.dumps(document), encoding="utf-8")

        with pytest.raises(ProjectError, match="malformed"):
            repo.load_project(path)


class TestConcurrentSaves:
    """Tests for saves that overlap in time."""

    def test_overlapping_saves_both_succeed(self, repo, tmp_path, monkeypatch):
        """Two writes in progress at once do not share a temporary file."""
        path = tmp_path / "study.qual.json"
        project = repo.new_project(path, "Study")
        both_writing = threading.Barrier(2, timeout=5)
        original_dump = project_store.json.dump

        def dump_together(*args, **kwargs):
            both_writing.wait()
            original_dump(*args, **kwargs)

        monkeypatch.setattr(project_store.json, "dump", dump_together)
        errors = []

        def save(name):
            codebook = CodeBook()
            codebook.create_code_def(name, 1)
            try:
                repo.save_project(path, project, codebook, FileList())
            except ProjectError as e:
                errors.append(e)

        threads = [threading.Thread(target=save, args=(name,)) for name in ("first", "second")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)
        monkeypatch.undo()

        assert errors == []
        _, codebook, _ = repo.load_project(path)
        assert [c.name for c in codebook.get_all_code_defs()] in (["first"], ["second"])
        assert [p.name for p in tmp_path.iterdir()] == ["study.qual.json"]
