"""
Contract Validation Module

Модуль для валидации JSON контрактов сериализованных узлов provtree.
"""

from .validators import (
    ContractValidator,
    NodeRecordValidator,
    RecordParseError,
    SchemaLoader,
    validate_node_record,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "NodeRecordValidator",
    # Exceptions
    "RecordParseError",
    # Functions
    "validate_node_record",
]
