"""
Core: модель узла, комбинаторы, свёртки и проверки.

Модуль не зависит от внешних систем; payload непрозрачен и должен лишь
поддерживать арифметику / сравнение, нужные конкретной операции.
"""

from provtree.core.cmp import ByValue, compare, max_node, min_node
from provtree.core.fold import EmptyFoldError, fold, maximum, minimum, prod_all, sum_all
from provtree.core.node import Leaf, Node, NodeView, RecordConfig, new_leaf
from provtree.core.ops import (
    ADD,
    DIV,
    MUL,
    SUB,
    BinaryOp,
    add,
    apply_binary,
    div,
    map_node,
    mul,
    sub,
    with_,
)
from provtree.core.units import UnitStyle, describe_unit, serializable_value
from provtree.core.validate import (
    Invalid,
    NodeValidationError,
    Valid,
    ValidationOutcome,
    validate,
)

__all__ = [
    # Node model
    "Node",
    "NodeView",
    "Leaf",
    "RecordConfig",
    "new_leaf",
    # Units
    "UnitStyle",
    "describe_unit",
    "serializable_value",
    # Comparator
    "ByValue",
    "compare",
    "max_node",
    "min_node",
    # Operator layer
    "BinaryOp",
    "ADD",
    "SUB",
    "MUL",
    "DIV",
    "add",
    "sub",
    "mul",
    "div",
    "apply_binary",
    "map_node",
    "with_",
    # Fold layer
    "EmptyFoldError",
    "fold",
    "sum_all",
    "prod_all",
    "maximum",
    "minimum",
    # Validator
    "Valid",
    "Invalid",
    "ValidationOutcome",
    "NodeValidationError",
    "validate",
]
