"""
Node — узел дерева происхождения значения

Immutable Pydantic модель: значение (payload), метка и trail (снимки прямых
операндов, из которых узел был получен).

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Trail листа всегда пуст
2. Trail составного узла равен списку его прямых операндов, по порядку
3. Узел не изменяется после создания; любое преобразование создаёт новый
4. labeled() сохраняет value и trail, меняется только label
5. Trail хранит NodeView (копию), а не ссылку на живой узел-операнд

ФОРМАТ ЗАПИСИ (to_serializable):
    {"label": ..., "value": ..., "unit": ..., "subexpr": [...]}
    - unit выводится только если у payload есть единица измерения
    - subexpr выводится только для непустого trail (у листа поля нет вовсе)
"""

import copy
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterable, List, Tuple, TypeVar

from pydantic import BaseModel, Field

from provtree.contracts.validators import RecordParseError, validate_node_record
from provtree.core.ops import NodeOperators
from provtree.core.units import UnitStyle, describe_unit, is_quantity, serializable_value

logger = logging.getLogger(__name__)

V = TypeVar("V")


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class RecordConfig:
    """Конфигурация сериализации узла.

    Параметры вывода единиц и JSON.
    """

    # NATIVE: единицы величины как есть, BASE: приведение к базовым единицам
    unit_style: UnitStyle = UnitStyle.NATIVE

    # Выводить поле unit для величин с единицами
    include_unit: bool = True

    # Отступ для to_json (None: компактная запись в одну строку)
    json_indent: int | None = None

    # Разрешить NaN / Infinity в to_json (False: ValueError на таком payload)
    allow_nan: bool = False


def _head(label: str, value: Any, unit: str | None, config: RecordConfig) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "label": label,
        "value": serializable_value(value, config.unit_style),
    }

    if config.include_unit:
        if is_quantity(value):
            unit = describe_unit(value, config.unit_style)
        if unit is not None:
            record["unit"] = unit

    return record


def _envelope(
    label: str,
    value: Any,
    unit: str | None,
    children: Iterable["NodeView"],
    config: RecordConfig,
) -> Dict[str, Any]:
    """
    Запись узла и всех его снимков.

    Обход явным стеком (в глубину, операнды по порядку): глубина trail
    растёт линейно с длиной свёртки и не ограничена стеком вызовов.
    """
    root = _head(label, value, unit, config)
    stack = [(root, iter(children))]

    while stack:
        record, pending = stack[-1]
        child = next(pending, None)
        if child is None:
            stack.pop()
            continue

        child_record = _head(child.label, child.value, child.unit, config)
        record.setdefault("subexpr", []).append(child_record)
        stack.append((child_record, iter(child.subexpr)))

    return root


def _dump_record(record: Dict[str, Any], indent: int | None, allow_nan: bool) -> str:
    """
    JSON-текст записи, совпадающий с json.dumps(record, indent=indent).

    Вложенность subexpr раскрывается явным стеком; поля label/value/unit
    кодируются json.dumps.
    """
    item_sep = "," if indent is not None else ", "

    def pad(level: int) -> str:
        return "" if indent is None else "\n" + " " * (indent * level)

    def field(key: str, value: Any, level: int) -> str:
        text = json.dumps(value, indent=indent, allow_nan=allow_nan)
        if indent is not None:
            text = text.replace("\n", pad(level))
        return f"{pad(level)}{json.dumps(key)}: {text}"

    chunks: List[str] = []
    stack: List[Any] = [(record, 0)]

    while stack:
        item = stack.pop()
        if isinstance(item, str):
            chunks.append(item)
            continue

        current, level = item
        fields = [field(key, current[key], level + 1) for key in current if key != "subexpr"]
        children = current.get("subexpr")
        if not children:
            chunks.append("{" + item_sep.join(fields) + pad(level) + "}")
            continue

        fields.append(f'{pad(level + 1)}"subexpr": [')
        chunks.append("{" + item_sep.join(fields))

        # Стек LIFO: закрывающие скобки кладутся первыми, операнды в обратном порядке
        stack.append(pad(level + 1) + "]" + pad(level) + "}")
        for i in reversed(range(len(children))):
            stack.append((children[i], level + 2))
            stack.append(pad(level + 2) if i == 0 else item_sep + pad(level + 2))

    return "".join(chunks)


# =============================================================================
# SNAPSHOT
# =============================================================================


class NodeView(BaseModel):
    """
    Снимок узла-операнда на момент комбинирования.

    Рекурсивная read-only копия: label, value, unit и собственный trail
    (subexpr). Не является ссылкой на исходный узел.
    """

    label: str = Field(..., description="Метка узла")
    value: Any = Field(..., description="Копия payload на момент снимка")
    unit: str | None = Field(None, description="Единица измерения, если есть")
    subexpr: Tuple["NodeView", ...] = Field((), description="Снимки операндов")

    model_config = {"frozen": True}  # Immutable

    def to_serializable(self, config: RecordConfig | None = None) -> Dict[str, Any]:
        """Запись снимка в формате envelope (см. Node.to_serializable)."""
        return _envelope(self.label, self.value, self.unit, self.subexpr, config or RecordConfig())


def _views_from_records(records: Iterable[Dict[str, Any]]) -> Tuple[NodeView, ...]:
    """
    Снимки из записей subexpr (записи уже проверены контрактом).

    Post-order обход явным стеком: NodeView строится после всех своих операндов.
    """
    roots: List[NodeView] = []
    stack: List[Any] = [(None, iter(records), roots)]

    while stack:
        record, pending, built = stack[-1]
        child = next(pending, None)
        if child is not None:
            stack.append((child, iter(child.get("subexpr", ())), []))
            continue

        stack.pop()
        if record is not None:
            stack[-1][2].append(
                NodeView(
                    label=record["label"],
                    value=record["value"],
                    unit=record.get("unit"),
                    subexpr=tuple(built),
                )
            )

    return tuple(roots)


# =============================================================================
# NODE MODEL
# =============================================================================


class Node(NodeOperators, BaseModel, Generic[V]):
    """
    Узел дерева происхождения.

    Immutable модель (frozen=True). Создаётся только конструкторами:
    leaf() / Leaf-builder для листьев, комбинаторами ops / fold для
    составных узлов.

    Пример:
        >>> a = Node.leaf("a", 1)
        >>> b = Node.leaf("b", 1)
        >>> (a + b).labeled("c").to_serializable()
        {'label': 'c', 'value': 2, 'subexpr': [{'label': 'a', 'value': 1}, {'label': 'b', 'value': 1}]}
    """

    label: str = Field(..., description="Человекочитаемое имя узла")
    value: V = Field(..., description="Вычисленное значение (payload)")
    trail: Tuple[NodeView, ...] = Field(
        (), description="Снимки прямых операндов (пусто для листа)"
    )

    model_config = {"frozen": True}  # Immutable

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def leaf(cls, name: str, value: Any) -> "Node":
        """Лист: узел с пустым trail."""
        return cls(label=name, value=value, trail=())

    @classmethod
    def composite(cls, label: str, value: Any, operands: Iterable["Node"]) -> "Node":
        """
        Составной узел; trail состоит из снимков операндов в переданном порядке.

        Подкласс Node сохраняется. Параметризация (Node[int]) не сохраняется:
        тип value результата определяет комбинатор (int / int → float).
        """
        origin = cls.__pydantic_generic_metadata__["origin"] or cls
        return origin(
            label=label,
            value=value,
            trail=tuple(operand.snapshot() for operand in operands),
        )

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def is_leaf(self) -> bool:
        return not self.trail

    def name(self) -> str:
        return self.label

    def quantity(self) -> V:
        return self.value

    def unit(self) -> str | None:
        """Единица измерения значения (или None для значений без единиц)."""
        return describe_unit(self.value)

    def symbol(self) -> str | None:
        """Единица измерения в базовых единицах (например, 'meter ** 2')."""
        return describe_unit(self.value, UnitStyle.BASE)

    # -------------------------------------------------------------------------
    # Transformations
    # -------------------------------------------------------------------------

    def labeled(self, name: str) -> "Node":
        """Новый узел с той же value и trail и меткой name."""
        return self.model_copy(update={"label": name})

    relabeled = labeled

    def snapshot(self) -> NodeView:
        """Снимок узла для trail составного узла."""
        return NodeView(
            label=self.label,
            value=copy.deepcopy(self.value),
            unit=describe_unit(self.value),
            subexpr=self.trail,
        )

    def validate(self, reason: str, predicate: Callable[[Any], bool]):
        """Проверка значения предикатом; см. provtree.core.validate.validate."""
        from provtree.core.validate import validate

        return validate(self, reason, predicate)

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_serializable(self, config: RecordConfig | None = None) -> Dict[str, Any]:
        """
        Запись узла: label, value, unit (опционально), subexpr (опционально).

        Args:
            config: Конфигурация сериализации (опционально, используется default)

        Returns:
            dict с ключами в порядке label, value, unit, subexpr
        """
        return _envelope(self.label, self.value, None, self.trail, config or RecordConfig())

    def to_json(self, config: RecordConfig | None = None) -> str:
        """
        JSON-текст записи узла (то же, что json.dumps(to_serializable())).

        Raises:
            ValueError: Если payload содержит NaN / Infinity, а
                config.allow_nan не включён
        """
        config = config or RecordConfig()
        return _dump_record(self.to_serializable(config), config.json_indent, config.allow_nan)

    @classmethod
    def from_record(cls, record: Any) -> "Node":
        """
        Восстановление узла из записи.

        Восстанавливаются envelope и сырое value; subexpr становится trail из
        NodeView с записанными единицами. Unit корня не восстанавливается:
        он производный от value.

        Raises:
            RecordParseError: Если запись не соответствует контракту node_record
        """
        try:
            validate_node_record(record)
        except RecordParseError as e:
            logger.warning("rejected node record: %s", e)
            raise

        return cls(
            label=record["label"],
            value=record["value"],
            trail=_views_from_records(record.get("subexpr", ())),
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> "Node":
        """
        Восстановление узла из JSON-текста (str или UTF-8 bytes).

        Вложенность разбирает json.loads, поэтому она ограничена его лимитом
        рекурсии; превышение сообщается как RecordParseError.

        Raises:
            RecordParseError: Если текст не JSON (включая не-UTF-8 bytes),
                слишком глубоко вложен или запись невалидна
        """
        try:
            record = json.loads(text)
        except ValueError as e:
            # JSONDecodeError и UnicodeDecodeError
            logger.warning("rejected node json: %s", e)
            raise RecordParseError(f"Node record is not valid JSON: {e}", errors=[str(e)]) from e
        except RecursionError as e:
            logger.warning("rejected node json: nesting too deep")
            raise RecordParseError(
                "Node record is nested too deeply to parse", errors=[str(e)]
            ) from e
        return cls.from_record(record)


def new_leaf(name: str, value: Any) -> Node:
    """Лист с меткой name и значением value."""
    return Node.leaf(name, value)


# =============================================================================
# LEAF BUILDER
# =============================================================================


_UNSET: Any = object()


class Leaf:
    """
    Пошаговый builder листа.

    Каждый setter возвращает новый builder; name и value обязательны.

    Пример:
        >>> Leaf().name("a").value(1).build()
        Node(label='a', value=1, trail=())
    """

    def __init__(self, label: str | None = None, value: Any = _UNSET):
        self._label = label
        self._value = value

    def name(self, label: str) -> "Leaf":
        return Leaf(label, self._value)

    def value(self, value: Any) -> "Leaf":
        return Leaf(self._label, value)

    def build(self) -> Node:
        """
        Raises:
            ValueError: Если не задано имя или значение
        """
        if self._label is None:
            raise ValueError("Leaf requires a name: call .name(...) before .build()")
        if self._value is _UNSET:
            raise ValueError(f"Leaf {self._label!r} requires a value: call .value(...) before .build()")
        return Node.leaf(self._label, self._value)
