"""
Fold Layer — свёртки последовательностей узлов

Левая свёртка: acc = n1; acc = combinator(acc, ni) для i = 2..k.

Trail результата не плоский: каждый промежуточный аккумулятор становится
снимком-операндом следующего шага, ровно как при ручной цепочке операторов:

    sum_all(a, b, c)  ≡  (a + b) + c
    maximum(a, b, c)  ≡  max(max(a, b), c)

Пустая последовательность считается нарушением контракта (EmptyFoldError).
"""

import logging
from typing import TYPE_CHECKING, Callable, Iterable

from provtree.core.cmp import max_node, min_node
from provtree.core.ops import add, mul

if TYPE_CHECKING:
    from provtree.core.node import Node

logger = logging.getLogger(__name__)

Combinator = Callable[["Node", "Node"], "Node"]


# =============================================================================
# EXCEPTIONS
# =============================================================================


class EmptyFoldError(ValueError):
    """Свёртка вызвана на пустой последовательности узлов."""

    pass


# =============================================================================
# GENERIC FOLD
# =============================================================================


def fold(nodes: Iterable["Node"], combinator: Combinator) -> "Node":
    """
    Левая свёртка узлов бинарным комбинатором.

    Args:
        nodes: Упорядоченная непустая последовательность узлов
        combinator: Бинарный комбинатор узлов (например, ops.add)

    Returns:
        Узел-результат; для одного узла сам этот узел

    Raises:
        EmptyFoldError: Если последовательность пуста
    """
    iterator = iter(nodes)
    try:
        acc = next(iterator)
    except StopIteration:
        raise EmptyFoldError("Cannot fold an empty sequence of nodes") from None

    count = 1
    for node in iterator:
        acc = combinator(acc, node)
        count += 1

    logger.debug("folded %d node(s) into %r", count, acc.label)
    return acc


# =============================================================================
# NAMED FOLDS
# =============================================================================


def _maximum_step(a: "Node", b: "Node") -> "Node":
    # Выбор по ByValue; оба операнда остаются в trail
    return a.composite(f"max({a.label}, {b.label})", max_node(a, b).value, (a, b))


def _minimum_step(a: "Node", b: "Node") -> "Node":
    return a.composite(f"min({a.label}, {b.label})", min_node(a, b).value, (a, b))


def sum_all(*nodes: "Node") -> "Node":
    """Сумма узлов: ((n1 + n2) + n3) + ..."""
    return fold(nodes, add)


def prod_all(*nodes: "Node") -> "Node":
    """Произведение узлов: ((n1 * n2) * n3) * ..."""
    return fold(nodes, mul)


def maximum(*nodes: "Node") -> "Node":
    """
    Максимум узлов по значению.

    При равных значениях остаётся значение первого (левого) узла.
    """
    return fold(nodes, _maximum_step)


def minimum(*nodes: "Node") -> "Node":
    """
    Минимум узлов по значению.

    При равных значениях остаётся значение первого (левого) узла.
    """
    return fold(nodes, _minimum_step)
