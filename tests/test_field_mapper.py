"""Tests for mapping OCR text onto field mapping models."""

import pytest

from conftest import SAMPLE_MODEL, SAMPLE_TEXT
from docingest.exceptions import FieldMappingError, MappingError
from docingest.mapping.field_mapper import map_fields, resolve_field, split_lines
from docingest.mapping.models import FieldDescriptor, FieldMappingModel


def _model(*fields: dict) -> FieldMappingModel:
    return FieldMappingModel.model_validate({"fields": list(fields)})


class TestSplitLines:
    """Tests for splitting OCR text into lines."""

    def test_preserves_raw_content(self) -> None:
        assert split_lines(" a \nb\n") == [" a ", "b", ""]

    def test_empty_text_has_no_lines(self) -> None:
        assert split_lines("") == []


class TestResolveField:
    """Tests for resolving a single descriptor."""

    def test_single_index(self) -> None:
        descriptor = FieldDescriptor(name="x", index=1)
        assert resolve_field(["a", "b", "c"], descriptor) == "b"

    def test_index_list_joins_in_listed_order(self) -> None:
        descriptor = FieldDescriptor(name="x", index=[2, 0])
        assert resolve_field(["a", "b", "c"], descriptor) == "c a"

    def test_split_takes_token(self) -> None:
        descriptor = FieldDescriptor(name="x", index=0, split=True, part=2)
        assert resolve_field(["Nome: Maria Silva"], descriptor) == "Silva"

    def test_split_on_single_spaces_keeps_empty_tokens(self) -> None:
        descriptor = FieldDescriptor(name="x", index=0, split=True, part=1)
        assert resolve_field(["a  b"], descriptor) == ""

    def test_part_ignored_without_split(self) -> None:
        descriptor = FieldDescriptor(name="x", index=0, split=False, part=5)
        assert resolve_field(["a b"], descriptor) == "a b"


class TestMapFields:
    """Tests for building a full structured record."""

    def test_joined_indices(self) -> None:
        record = map_fields("a\nb\nc\nd\ne\nf", _model({"name": "joined", "index": [2, 5]}))
        assert record.data[0].input == "c f"

    def test_split_part(self) -> None:
        model = _model({"name": "first", "index": 0, "split": True, "part": 1})
        record = map_fields("Nome: Maria Silva", model)
        assert record.data[0].field == "first"
        assert record.data[0].input == "Maria"

    def test_field_order_follows_model(self) -> None:
        model = FieldMappingModel.model_validate(SAMPLE_MODEL)
        record = map_fields(SAMPLE_TEXT, model)
        assert [v.field for v in record.data] == [f["name"] for f in SAMPLE_MODEL["fields"]]
        assert record.model_dump() == {
            "data": [
                {"field": "nome", "input": "Nome: Maria Silva"},
                {"field": "primeiro_nome", "input": "Maria"},
                {"field": "registro_geral", "input": "12.345.678-9"},
                {"field": "filiacao", "input": "Joao Silva Ana Souza"},
                {"field": "data_nascimento", "input": "01/02/1990"},
            ]
        }

    def test_deterministic(self) -> None:
        model = FieldMappingModel.model_validate(SAMPLE_MODEL)
        assert map_fields(SAMPLE_TEXT, model) == map_fields(SAMPLE_TEXT, model)

    def test_unsplit_fields_read_back_their_line(self) -> None:
        lines = SAMPLE_TEXT.split("\n")
        model = _model(*({"name": f"line{i}", "index": i} for i in range(len(lines))))
        record = map_fields(SAMPLE_TEXT, model)
        for i, value in enumerate(record.data):
            assert value.input == lines[i]

    def test_index_out_of_range(self) -> None:
        model = _model({"name": "ok", "index": 0}, {"name": "missing", "index": 3})
        with pytest.raises(FieldMappingError) as excinfo:
            map_fields("a\nb", model)
        assert excinfo.value.field == "missing"
        assert "out of range" in excinfo.value.reason

    def test_index_list_out_of_range(self) -> None:
        with pytest.raises(FieldMappingError, match="joined"):
            map_fields("a\nb", _model({"name": "joined", "index": [0, 9]}))

    def test_part_out_of_range(self) -> None:
        model = _model({"name": "token", "index": 0, "split": True, "part": 3})
        with pytest.raises(FieldMappingError, match="token 3"):
            map_fields("Nome: Maria", model)

    def test_empty_text_fails_any_field(self) -> None:
        with pytest.raises(MappingError):
            map_fields("", _model({"name": "first", "index": 0}))

    def test_empty_model_yields_empty_record(self) -> None:
        assert map_fields("a", FieldMappingModel(fields=[])).data == []
