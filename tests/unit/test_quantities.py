"""
Тесты узлов с физическими величинами (pint)

Проверяет:
1. Арифметику с единицами: сложение длин, площадь из произведения
2. Описание единиц: unit (как есть) и symbol (базовые единицы)
3. Запись: поле unit, UnitStyle.BASE, include_unit
4. Ошибки размерности пробрасываются
"""

import math

import pytest

from provtree.core import Leaf, Node, RecordConfig, UnitStyle, describe_unit, maximum, prod_all, serializable_value

pint = pytest.importorskip("pint")

ureg = pint.UnitRegistry()
Q_ = ureg.Quantity


# =============================================================================
# ARITHMETIC
# =============================================================================


class TestQuantityArithmetic:
    """Тесты арифметики с единицами"""

    def test_length_sum(self) -> None:
        x = Leaf().name("x").value(Q_(2.0, "millimeter")).build()
        y = Leaf().name("y").value(Q_(1.0, "millimeter") * 2.0).build()
        assert x.quantity() == Q_(2.0, "millimeter")
        assert y.quantity() == Q_(2.0, "millimeter")

        total = x + y
        assert total.value == Q_(4.0, "millimeter")
        assert total.value.to("meter").magnitude == pytest.approx(0.004)

    def test_area_from_product(self) -> None:
        x = Node.leaf("x", Q_(2.0, "millimeter"))
        y = Node.leaf("y", Q_(4.0, "millimeter"))
        res = x * y
        assert res.value == Q_(8.0, "millimeter ** 2")
        assert res.unit() == "millimeter ** 2"
        assert res.symbol() == "meter ** 2"

    def test_prod_all_with_scalar(self) -> None:
        """Безразмерный множитель и две длины → площадь"""
        x = Node.leaf("x", 2.0)
        y = Node.leaf("y", Q_(4.0, "meter"))
        z = Node.leaf("z", Q_(8.0, "meter"))
        res = prod_all(x, y, z).labeled("xyz")
        assert res.value == Q_(64.0, "meter ** 2")
        assert res.name() == "xyz"

    def test_map_floor_in_meters(self) -> None:
        x = Node.leaf("x", Q_(2.1, "meter"))

        def floor_meter(q):
            return Q_(math.floor(q.to("meter").magnitude), "meter")

        res = x.map(floor_meter).labeled("floor")
        assert res.value == Q_(2.0, "meter")
        assert res.label == "floor"
        assert res.trail == (x.snapshot(),)

    def test_maximum_across_units(self) -> None:
        res = maximum(
            Node.leaf("a", Q_(2, "meter")),
            Node.leaf("b", Q_(150, "centimeter")),
            Node.leaf("c", Q_(3000, "millimeter")),
        )
        assert res.value == Q_(3000, "millimeter")

    def test_dimension_mismatch_propagates(self) -> None:
        length = Node.leaf("length", Q_(1.0, "meter"))
        duration = Node.leaf("duration", Q_(1.0, "second"))
        with pytest.raises(pint.DimensionalityError):
            length + duration


# =============================================================================
# UNIT DESCRIPTION
# =============================================================================


class TestUnitDescription:
    """Тесты describe_unit / serializable_value"""

    def test_native_and_base(self) -> None:
        q = Q_(2.0, "millimeter")
        assert describe_unit(q) == "millimeter"
        assert describe_unit(q, UnitStyle.BASE) == "meter"

    def test_magnitude_serialized(self) -> None:
        q = Q_(2.0, "millimeter")
        assert serializable_value(q) == 2.0
        assert serializable_value(q, UnitStyle.BASE) == pytest.approx(0.002)

    def test_snapshot_records_unit(self) -> None:
        view = Node.leaf("x", Q_(2.0, "millimeter")).snapshot()
        assert view.unit == "millimeter"


# =============================================================================
# RECORDS
# =============================================================================


class TestQuantityRecords:
    """Тесты записи узлов с единицами"""

    @pytest.fixture
    def area(self) -> Node:
        x = Node.leaf("x", Q_(2.0, "millimeter"))
        y = Node.leaf("y", Q_(4.0, "millimeter"))
        return (x * y).labeled("area")

    def test_record_with_units(self, area: Node) -> None:
        assert area.to_serializable() == {
            "label": "area",
            "value": 8.0,
            "unit": "millimeter ** 2",
            "subexpr": [
                {"label": "x", "value": 2.0, "unit": "millimeter"},
                {"label": "y", "value": 4.0, "unit": "millimeter"},
            ],
        }

    def test_field_order(self, area: Node) -> None:
        assert list(area.to_serializable()) == ["label", "value", "unit", "subexpr"]

    def test_base_unit_style(self, area: Node) -> None:
        record = area.to_serializable(RecordConfig(unit_style=UnitStyle.BASE))
        assert record["unit"] == "meter ** 2"
        assert record["value"] == pytest.approx(8.0e-6)
        assert record["subexpr"][0]["unit"] == "meter"
        assert record["subexpr"][0]["value"] == pytest.approx(0.002)

    def test_units_can_be_omitted(self, area: Node) -> None:
        record = area.to_serializable(RecordConfig(include_unit=False))
        assert "unit" not in record
        assert all("unit" not in child for child in record["subexpr"])

    def test_json_roundtrip_keeps_raw_values(self, area: Node) -> None:
        parsed = Node.from_json(area.to_json())
        assert parsed.value == 8.0
        assert [view.unit for view in parsed.trail] == ["millimeter", "millimeter"]
