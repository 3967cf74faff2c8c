"""
provtree — деревья происхождения вычисленных значений.

Каждая комбинация узлов (арифметика, map, with_, свёртки) автоматически
записывает, из каких именованных входов и какой цепочкой операций получен
результат. Дерево сериализуется во вложенную запись / JSON.
"""

from provtree.contracts import RecordParseError
from provtree.core import (
    EmptyFoldError,
    Invalid,
    Leaf,
    Node,
    NodeValidationError,
    NodeView,
    RecordConfig,
    UnitStyle,
    Valid,
    ValidationOutcome,
    fold,
    map_node,
    maximum,
    minimum,
    new_leaf,
    prod_all,
    sum_all,
    validate,
    with_,
)

__version__ = "0.1.0"

__all__ = [
    # Node model
    "Node",
    "NodeView",
    "Leaf",
    "RecordConfig",
    "UnitStyle",
    "new_leaf",
    # Combinators
    "map_node",
    "with_",
    # Folds
    "fold",
    "sum_all",
    "prod_all",
    "maximum",
    "minimum",
    "EmptyFoldError",
    # Validation
    "validate",
    "Valid",
    "Invalid",
    "ValidationOutcome",
    "NodeValidationError",
    # Records
    "RecordParseError",
]
