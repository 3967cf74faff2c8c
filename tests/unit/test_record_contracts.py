"""
Tests for node_record JSON Schema contract and record parsing

Комплексное тестирование:
- Валидность самой схемы
- Валидация записей, созданных to_serializable
- Детекция нарушений required полей / типов / лишних полей
- Восстановление узла из записи и JSON
"""

import json

import pytest
from jsonschema import ValidationError

from provtree.contracts import (
    NodeRecordValidator,
    RecordParseError,
    SchemaLoader,
    validate_node_record,
)
from provtree.core import Node, NodeView


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def c() -> Node:
    a = Node.leaf("a", 1)
    b = Node.leaf("b", 1)
    return (a + b).labeled("c")


@pytest.fixture
def nested_record() -> dict:
    return {
        "label": "area",
        "value": 8.0,
        "unit": "millimeter ** 2",
        "subexpr": [
            {"label": "x", "value": 2.0, "unit": "millimeter"},
            {"label": "y", "value": 4.0, "unit": "millimeter"},
        ],
    }


# =============================================================================
# SCHEMA
# =============================================================================


class TestSchema:
    """Тесты загрузки схемы"""

    def test_schema_loads(self) -> None:
        schema = SchemaLoader().load_schema("node_record")
        assert schema["title"] == "node_record"
        assert schema["required"] == ["label", "value"]

    def test_schema_cached(self) -> None:
        loader = SchemaLoader()
        assert loader.load_schema("node_record") is loader.load_schema("node_record")

    def test_unknown_schema(self) -> None:
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("missing")

    def test_missing_schema_dir(self, tmp_path) -> None:
        with pytest.raises(RuntimeError, match="Schema directory not found"):
            SchemaLoader(tmp_path / "nope")


class TestNodeRecordValidator:
    """Тесты валидатора записи"""

    def test_serialized_records_are_valid(self, c: Node) -> None:
        validator = NodeRecordValidator()
        assert validator.is_valid(c.to_serializable())
        assert validator.is_valid(Node.leaf("x", [1, 2]).to_serializable())

    def test_nested_record_valid(self, nested_record: dict) -> None:
        validate_node_record(nested_record)

    def test_missing_label(self) -> None:
        with pytest.raises(ValidationError):
            NodeRecordValidator().validate({"value": 1})

    def test_label_must_be_string(self) -> None:
        assert not NodeRecordValidator().is_valid({"label": 1, "value": 1})

    def test_additional_field_rejected(self) -> None:
        assert not NodeRecordValidator().is_valid({"label": "x", "value": 1, "extra": True})

    def test_empty_subexpr_rejected(self) -> None:
        """У листа subexpr отсутствует, а не пуст"""
        assert not NodeRecordValidator().is_valid({"label": "x", "value": 1, "subexpr": []})

    def test_nested_errors_reported_with_path(self) -> None:
        record = {"label": "x", "value": 1, "subexpr": [{"value": 2}]}
        with pytest.raises(RecordParseError) as exc_info:
            validate_node_record(record)
        assert exc_info.value.errors == ["$.subexpr[0]: 'label' is a required property"]

    def test_deep_errors_reported_with_path(self) -> None:
        """Ошибка на втором уровне: путь от корня"""
        record = {
            "label": "x",
            "value": 1,
            "subexpr": [
                {"label": "y", "value": 1},
                {"label": "z", "value": 1, "subexpr": [{"label": 3, "value": 1}]},
            ],
        }
        errors = NodeRecordValidator().error_messages(record)
        assert errors == ["$.subexpr[1].subexpr[0].label: 3 is not of type 'string'"]

    def test_non_object_subexpr_item_rejected(self) -> None:
        errors = NodeRecordValidator().error_messages({"label": "x", "value": 1, "subexpr": [1]})
        assert errors == ["$.subexpr[0]: 1 is not of type 'object'"]

    def test_deep_record_validated(self) -> None:
        """Запись глубиной 3000 уровней проверяется без RecursionError"""
        record = {"label": "leaf", "value": 0}
        for i in range(3000):
            record = {"label": f"n{i}", "value": i, "subexpr": [record]}
        assert NodeRecordValidator().is_valid(record)

        record = {"label": "top", "value": 0, "subexpr": [record, {"label": "bad"}]}
        assert NodeRecordValidator().error_messages(record) == [
            "$.subexpr[1]: 'value' is a required property"
        ]


# =============================================================================
# PARSING
# =============================================================================


class TestFromRecord:
    """Тесты восстановления узла"""

    def test_roundtrip_record(self, c: Node) -> None:
        assert Node.from_record(c.to_serializable()) == c

    def test_roundtrip_json(self, c: Node) -> None:
        assert Node.from_json(c.to_json()) == c

    def test_leaf_record(self) -> None:
        node = Node.from_record({"label": "x", "value": 5})
        assert node.is_leaf
        assert node.value == 5

    def test_subexpr_units_kept_in_views(self, nested_record: dict) -> None:
        node = Node.from_record(nested_record)
        assert node.label == "area"
        assert node.value == 8.0
        assert node.trail == (
            NodeView(label="x", value=2.0, unit="millimeter", subexpr=()),
            NodeView(label="y", value=4.0, unit="millimeter", subexpr=()),
        )

    def test_subexpr_units_reserialized(self, nested_record: dict) -> None:
        """Единицы снимков выводятся повторно; единица корня производная"""
        record = Node.from_record(nested_record).to_serializable()
        assert record["subexpr"] == nested_record["subexpr"]
        assert "unit" not in record

    def test_missing_value_rejected(self) -> None:
        with pytest.raises(RecordParseError, match="'value' is a required property"):
            Node.from_record({"label": "x"})

    def test_non_object_rejected(self) -> None:
        with pytest.raises(RecordParseError):
            Node.from_record([1, 2, 3])

    def test_invalid_json_rejected(self) -> None:
        with pytest.raises(RecordParseError, match="not valid JSON"):
            Node.from_json("{label: x")

    def test_invalid_utf8_rejected(self) -> None:
        """Bytes не в UTF-8 отклоняются как RecordParseError"""
        with pytest.raises(RecordParseError, match="not valid JSON"):
            Node.from_json(b'{"label": "\xff", "value": 1}')

    def test_utf8_bytes_accepted(self) -> None:
        node = Node.from_json('{"label": "Δt", "value": 1}'.encode("utf-8"))
        assert node.label == "Δt"

    def test_too_deep_json_rejected(self) -> None:
        """Вложенность сверх лимита json.loads: RecordParseError"""
        with pytest.raises(RecordParseError, match="nested too deeply"):
            Node.from_json("[" * 100_000 + "]" * 100_000)

    def test_rejection_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with pytest.raises(RecordParseError):
            Node.from_json(json.dumps({"label": "x"}))
        assert "rejected node record" in caplog.text
