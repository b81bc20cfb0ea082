"""Tests for dbinfo.output.writer and dbinfo.errors."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dbinfo.errors import DbInfoError, RecordBuildError, SerializationError, building
from dbinfo.models import EntitiesDocument, RelationshipsDocument
from dbinfo.output.writer import render, write_documents


def test_write_documents_creates_directory_and_files(tmp_path: Path) -> None:
    out_dir = tmp_path / "out" / "db-info"

    written = write_documents(
        out_dir,
        {"entities.json": EntitiesDocument(), "relationships.json": RelationshipsDocument()},
    )

    assert written == [out_dir / "entities.json", out_dir / "relationships.json"]
    assert (out_dir / "entities.json").read_text(encoding="utf-8") == '{\n  "entities": [\n    \n  ]\n}'
    assert json.loads((out_dir / "relationships.json").read_text(encoding="utf-8")) == {"relationships": []}


def test_render_matches_written_text(tmp_path: Path) -> None:
    document = EntitiesDocument()

    [path] = write_documents(tmp_path, {"entities.json": document})

    assert path.read_text(encoding="utf-8") == render(document)


def test_unwritable_output_raises_serialization_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(SerializationError) as exc_info:
        write_documents(blocker / "out", {"entities.json": EntitiesDocument()})

    assert isinstance(exc_info.value.__cause__, OSError)
    assert isinstance(exc_info.value, DbInfoError)


def test_building_wraps_unexpected_errors() -> None:
    with pytest.raises(RecordBuildError) as exc_info:
        with building("com.example.Invoice"):
            raise KeyError("length")

    assert exc_info.value.element == "com.example.Invoice"
    assert "com.example.Invoice" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, KeyError)


def test_building_passes_through_pipeline_errors() -> None:
    with pytest.raises(SerializationError):
        with building("com.example.Invoice"):
            raise SerializationError("disk full")
