"""
Operator Layer — комбинаторы узлов

Арифметика (+ - * /), map и with_ строят новый узел из операндов:
- value = f(значения операндов), вычисляется арифметикой самого payload
- trail = снимки операндов строго в порядке операндов

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Порядок операндов сохраняется (sub и div не коммутативны)
2. Trail содержит только прямые операнды, без транзитивного разворачивания
3. Ошибки payload (DimensionalityError, ZeroDivisionError, ...) пробрасываются
   как есть, узел при этом не создаётся
4. Операнд-константа (не узел) оборачивается в лист с label = repr(значения)

Модуль не импортирует Node: узлы распознаются по NodeOperators, а новые узлы
строятся через их собственные конструкторы (leaf / composite).
"""

import logging
import operator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from provtree.core.node import Node

logger = logging.getLogger(__name__)


# =============================================================================
# BINARY OPERATIONS
# =============================================================================


@dataclass(frozen=True)
class BinaryOp:
    """Бинарная арифметическая операция над payload."""

    name: str
    symbol: str
    func: Callable[[Any, Any], Any]

    def label_for(self, a: "Node", b: "Node") -> str:
        """Метка по умолчанию: '(a + b)'."""
        return f"({a.label} {self.symbol} {b.label})"


ADD = BinaryOp(name="add", symbol="+", func=operator.add)
SUB = BinaryOp(name="sub", symbol="-", func=operator.sub)
MUL = BinaryOp(name="mul", symbol="*", func=operator.mul)
DIV = BinaryOp(name="div", symbol="/", func=operator.truediv)


# =============================================================================
# HELPERS
# =============================================================================


def _func_name(f: Callable[..., Any], fallback: str) -> str:
    name = getattr(f, "__name__", None)
    if not name or name == "<lambda>":
        return fallback
    return name


def _as_node(operand: Any, like: "Node") -> "Node":
    """
    Константа → лист с label = repr(operand); узел возвращается как есть.

    Лист строится как composite без операндов: тип value константы не
    обязан совпадать с параметризацией like (Node[int] * 2.5).
    """
    if isinstance(operand, NodeOperators):
        return operand
    return like.composite(repr(operand), operand, ())


def _pick_like(a: Any, b: Any) -> "Node":
    if isinstance(a, NodeOperators):
        return a
    if isinstance(b, NodeOperators):
        return b
    raise TypeError(
        f"At least one operand must be a node, got {type(a).__name__} and {type(b).__name__}"
    )


# =============================================================================
# COMBINATORS
# =============================================================================


def with_(a: Any, b: Any, f: Callable[[Any, Any], Any], label: str | None = None) -> "Node":
    """
    Обобщённый бинарный комбинатор.

    value = f(a.value, b.value), trail = [snapshot(a), snapshot(b)].

    Args:
        a: Левый операнд (узел или константа)
        b: Правый операнд (узел или константа)
        f: Чистая функция двух значений payload
        label: Метка результата; по умолчанию 'f(a, b)'

    Returns:
        Новый составной узел

    Raises:
        Любое исключение f / арифметики payload (не перехватывается)
    """
    like = _pick_like(a, b)
    left, right = _as_node(a, like), _as_node(b, like)

    value = f(left.value, right.value)
    if label is None:
        label = f"{_func_name(f, 'with')}({left.label}, {right.label})"

    logger.debug("with: %r, %r -> %r", left.label, right.label, label)
    return like.composite(label, value, (left, right))


def apply_binary(op: BinaryOp, a: Any, b: Any) -> "Node":
    """Арифметическая специализация with_ с меткой '(a op b)'."""
    like = _pick_like(a, b)
    left, right = _as_node(a, like), _as_node(b, like)
    return with_(left, right, op.func, label=op.label_for(left, right))


def add(a: Any, b: Any) -> "Node":
    return apply_binary(ADD, a, b)


def sub(a: Any, b: Any) -> "Node":
    return apply_binary(SUB, a, b)


def mul(a: Any, b: Any) -> "Node":
    return apply_binary(MUL, a, b)


def div(a: Any, b: Any) -> "Node":
    return apply_binary(DIV, a, b)


def map_node(node: "Node", f: Callable[[Any], Any], label: str | None = None) -> "Node":
    """
    Преобразование значения узла.

    value = f(node.value), trail = [snapshot(node)]. Сам шаг map и есть
    записываемая операция: один операнд, одна функция, один результат.

    Args:
        node: Исходный узел
        f: Чистая функция payload → payload (например, округление в метрах)
        label: Метка результата; по умолчанию 'f(node)'
    """
    value = f(node.value)
    if label is None:
        label = f"{_func_name(f, 'map')}({node.label})"

    logger.debug("map: %r -> %r", node.label, label)
    return node.composite(label, value, (node,))


# =============================================================================
# OPERATOR MIXIN
# =============================================================================


class NodeOperators:
    """
    Арифметические операторы и функторы узла.

    Требует от класса-наследника: ``value``, ``label``, ``snapshot()``,
    ``leaf(name, value)`` и ``composite(label, value, operands)``.
    """

    def __add__(self, other: Any) -> "Node":
        return add(self, other)

    def __radd__(self, other: Any) -> "Node":
        return add(other, self)

    def __sub__(self, other: Any) -> "Node":
        return sub(self, other)

    def __rsub__(self, other: Any) -> "Node":
        return sub(other, self)

    def __mul__(self, other: Any) -> "Node":
        return mul(self, other)

    def __rmul__(self, other: Any) -> "Node":
        return mul(other, self)

    def __truediv__(self, other: Any) -> "Node":
        return div(self, other)

    def __rtruediv__(self, other: Any) -> "Node":
        return div(other, self)

    def map(self, f: Callable[[Any], Any], label: str | None = None) -> "Node":
        return map_node(self, f, label=label)  # type: ignore[arg-type]

    def with_(self, other: Any, f: Callable[[Any, Any], Any], label: str | None = None) -> "Node":
        return with_(self, other, f, label=label)
