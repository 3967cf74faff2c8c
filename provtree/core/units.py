"""
Units — описание единиц измерения и сериализация payload

Единственный допустимый способ получить из значения узла:
- описание единицы измерения (unit / symbol)
- сериализуемое представление value для envelope записи

Payload непрозрачен для ядра. Значение считается физической величиной, если
у него есть атрибуты ``magnitude`` и ``units`` (так устроены величины pint).
Все прочие значения не имеют единиц, и поле ``unit`` для них не выводится.

ЗАПРЕЩЕНО обращаться к ``.units`` / ``.magnitude`` payload вне этого модуля.
"""

from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic_core import to_jsonable_python


# =============================================================================
# ENUMS
# =============================================================================


class UnitStyle(str, Enum):
    """Стиль вывода единиц в записи узла"""

    NATIVE = "native"  # единицы, в которых хранится величина
    BASE = "base"  # базовые единицы системы (SI для pint)


# =============================================================================
# PROTOCOLS
# =============================================================================


@runtime_checkable
class UnitDescribable(Protocol):
    """
    Величина с единицей измерения.

    Достаточно атрибутов ``magnitude`` и ``units``; ``to_base_units`` нужен
    только для UnitStyle.BASE.
    """

    magnitude: Any
    units: Any


# =============================================================================
# UNIT DESCRIPTION
# =============================================================================


def is_quantity(value: Any) -> bool:
    """True если payload несёт единицу измерения."""
    return isinstance(value, UnitDescribable)


def to_base(value: Any) -> Any:
    """
    Приведение величины к базовым единицам.

    Значения без единиц возвращаются без изменений.
    """
    if is_quantity(value):
        return value.to_base_units()
    return value


def describe_unit(value: Any, style: UnitStyle = UnitStyle.NATIVE) -> str | None:
    """
    Текстовое описание единицы измерения payload.

    Args:
        value: Значение узла
        style: NATIVE: единицы величины как есть, BASE: базовые единицы

    Returns:
        Строка единицы (например, 'millimeter ** 2') или None, если у
        значения нет понятия единицы
    """
    if not is_quantity(value):
        return None
    if style is UnitStyle.BASE:
        value = to_base(value)
    return str(value.units)


# =============================================================================
# VALUE SERIALIZATION
# =============================================================================


def serializable_value(value: Any, style: UnitStyle = UnitStyle.NATIVE) -> Any:
    """
    Сериализуемое представление payload.

    Порядок делегирования:
    1. Физическая величина → её magnitude (в базовых единицах для BASE)
    2. Массивы и скаляры numpy (``tolist``) → python-списки / скаляры
    3. Всё остальное → pydantic_core.to_jsonable_python

    Raises:
        pydantic_core.PydanticSerializationError: Если payload не умеет
            сериализоваться
    """
    if is_quantity(value):
        if style is UnitStyle.BASE:
            value = to_base(value)
        value = value.magnitude

    if hasattr(value, "tolist"):
        return value.tolist()

    return to_jsonable_python(value)
