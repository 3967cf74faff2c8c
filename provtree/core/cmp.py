"""
Comparator — упорядочивание узлов по значению

Полный порядок над узлами задаётся только их value (нативное сравнение
payload). Label и trail в сравнении не участвуют.

При равенстве значений побеждает первый (левый) операнд: свёртки
maximum/minimum детерминированы.
"""

import functools
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from provtree.core.node import Node


# =============================================================================
# KEY WRAPPER
# =============================================================================


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class ByValue:
    """
    Ключ сортировки узла по его значению.

    Пример:
        >>> sorted(nodes, key=ByValue)  # doctest: +SKIP
    """

    node: "Node"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ByValue):
            return NotImplemented
        return self.node.value == other.node.value

    def __lt__(self, other: "ByValue") -> bool:
        if not isinstance(other, ByValue):
            return NotImplemented
        return self.node.value < other.node.value


def compare(a: "Node", b: "Node") -> int:
    """
    Трёхзначное сравнение узлов по значению.

    Returns:
        -1 если a < b, 0 если равны, 1 если a > b
    """
    left, right = ByValue(a), ByValue(b)
    if left < right:
        return -1
    if right < left:
        return 1
    return 0


# =============================================================================
# NODE CHOICE (first-seen wins)
# =============================================================================


def max_node(a: "Node", b: "Node") -> "Node":
    """Узел с большим значением; при равенстве a."""
    return b if ByValue(b) > ByValue(a) else a


def min_node(a: "Node", b: "Node") -> "Node":
    """Узел с меньшим значением; при равенстве a."""
    return b if ByValue(b) < ByValue(a) else a

