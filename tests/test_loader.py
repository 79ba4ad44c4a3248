"""Tests for snapshot loading."""

import json

import pytest

from orbitmap.core.loader import SnapshotError, load_config_snapshot, load_project_files
from orbitmap.core.schemas import NodeType


def _write(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_config_snapshot(tmp_path):
    path = _write(tmp_path / "snapshot.json", {
        "skills": [{"name": "pdf"}],
        "hooks": [{"name": "fmt", "type": "PreToolUse"}],
        "knowledgeBasePath": "/kb",
    })
    snapshot = load_config_snapshot(path)
    assert snapshot.skills[0].name == "pdf"
    assert snapshot.knowledge_base_path == "/kb"


def test_missing_file(tmp_path):
    with pytest.raises(SnapshotError, match="Cannot read"):
        load_config_snapshot(tmp_path / "absent.json")


def test_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SnapshotError, match="Invalid JSON"):
        load_config_snapshot(path)


def test_invalid_snapshot(tmp_path):
    # hooks require a type
    path = _write(tmp_path / "snapshot.json", {"hooks": [{"name": "fmt"}]})
    with pytest.raises(SnapshotError, match="Invalid configuration snapshot"):
        load_config_snapshot(path)


class TestProjectFiles:
    """Project scans as file lists or source mappings."""

    def test_file_list(self, tmp_path):
        path = _write(tmp_path / "files.json", [
            {"id": "stores/a.ts", "type": "store", "category": "stores", "exportedBy": ["x.ts"]},
        ])
        files = load_project_files(path)
        assert files[0].type == NodeType.STORE
        assert files[0].exported_by == ["x.ts"]

    def test_source_mapping(self, tmp_path):
        path = _write(tmp_path / "sources.json", {
            "services/api.ts": "export const api = 1\n",
            "README.md": "# hi\n",
        })
        files = load_project_files(path)
        assert [f.id for f in files] == ["services/api.ts"]
        assert files[0].type == NodeType.SERVICE

    def test_mapping_values_must_be_text(self, tmp_path):
        path = _write(tmp_path / "sources.json", {"a.ts": 3})
        with pytest.raises(SnapshotError):
            load_project_files(path)

    def test_wrong_shape(self, tmp_path):
        path = _write(tmp_path / "files.json", "just a string")
        with pytest.raises(SnapshotError):
            load_project_files(path)

    def test_invalid_entry(self, tmp_path):
        path = _write(tmp_path / "files.json", [{"id": "a.ts", "importance": 4}])
        with pytest.raises(SnapshotError, match="Invalid project file list"):
            load_project_files(path)
