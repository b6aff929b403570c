"""Tests for loading field mapping models."""

import asyncio
import json
from pathlib import Path

import pytest

from docingest.exceptions import ModelError, ValidationError
from docingest.mapping.model_store import ModelStore, validate_document_type


class TestValidateDocumentType:
    """Tests for document type identifier validation."""

    @pytest.mark.parametrize("value", ["rg", "cnh-2024", "nota_fiscal"])
    def test_accepts_plain_stems(self, value: str) -> None:
        assert validate_document_type(value) == value

    @pytest.mark.parametrize("value", ["../secrets", "a/b", "rg.json", "", "rg "])
    def test_rejects_paths_and_garbage(self, value: str) -> None:
        with pytest.raises(ValidationError):
            validate_document_type(value)


class TestModelStore:
    """Tests for the ModelStore class."""

    def test_load_valid_model(self, models_dir: Path) -> None:
        model = ModelStore(models_dir).load_sync("rg")
        assert [f.name for f in model.fields][:2] == ["nome", "primeiro_nome"]
        assert model.fields[3].index == [4, 5]
        assert model.fields[1].split is True
        assert model.fields[1].part == 1

    def test_async_load(self, models_dir: Path) -> None:
        model = asyncio.run(ModelStore(models_dir).load("rg"))
        assert len(model.fields) == 5

    def test_missing_model(self, models_dir: Path) -> None:
        with pytest.raises(ModelError, match="No model found"):
            ModelStore(models_dir).load_sync("passport")

    def test_invalid_json(self, models_dir: Path) -> None:
        (models_dir / "broken.json").write_text("{not json")
        with pytest.raises(ModelError, match="Invalid model"):
            ModelStore(models_dir).load_sync("broken")

    @pytest.mark.parametrize(
        "fields",
        [
            [{"name": "x"}],
            [{"name": "x", "index": -1}],
            [{"name": "x", "index": []}],
            [{"name": "x", "index": 0, "split": True, "part": -2}],
            [{"index": 0}],
        ],
    )
    def test_invalid_descriptors(self, models_dir: Path, fields: list) -> None:
        (models_dir / "bad.json").write_text(json.dumps({"fields": fields}))
        with pytest.raises(ModelError):
            ModelStore(models_dir).load_sync("bad")

    def test_missing_fields_key(self, models_dir: Path) -> None:
        (models_dir / "empty.json").write_text("{}")
        with pytest.raises(ModelError):
            ModelStore(models_dir).load_sync("empty")

    def test_defaults_for_split_and_part(self, models_dir: Path) -> None:
        (models_dir / "min.json").write_text(json.dumps({"fields": [{"name": "x", "index": 2}]}))
        field = ModelStore(models_dir).load_sync("min").fields[0]
        assert field.split is False
        assert field.part == 0

    def test_list_document_types(self, models_dir: Path) -> None:
        (models_dir / "cnh.json").write_text(json.dumps({"fields": []}))
        (models_dir / "notes.txt").write_text("ignored")
        assert ModelStore(models_dir).list_document_types() == ["cnh", "rg"]

    def test_list_missing_dir(self, tmp_path: Path) -> None:
        assert ModelStore(tmp_path / "nope").list_document_types() == []

    def test_shipped_models_are_valid(self) -> None:
        store = ModelStore(Path(__file__).parent.parent / "models")
        for document_type in store.list_document_types():
            assert store.load_sync(document_type).fields
