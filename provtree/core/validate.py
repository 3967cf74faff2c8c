"""
Validator — проверка значения узла именованным предикатом

Результат проверки является данными, а не исключением:
- Valid(node): предикат выполнен, узел (включая trail) не изменён
- Invalid(node, reason): предикат не выполнен, узел сохраняется для анализа

into_result() переводит исход в обычный python-поток: узел для Valid,
NodeValidationError с причиной для Invalid.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, ClassVar

if TYPE_CHECKING:
    from provtree.core.node import Node

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], bool]


# =============================================================================
# EXCEPTIONS
# =============================================================================


class NodeValidationError(ValueError):
    """
    Узел не прошёл проверку.

    Attributes:
        reason: Человекочитаемая причина (как передана в validate)
        node: Непрошедший узел (для диагностики trail)
    """

    def __init__(self, reason: str, node: "Node | None" = None):
        super().__init__(reason)
        self.reason = reason
        self.node = node


# =============================================================================
# OUTCOMES
# =============================================================================


@dataclass(frozen=True)
class Valid:
    """Узел прошёл проверку."""

    node: "Node"

    is_valid: ClassVar[bool] = True

    def into_result(self) -> "Node":
        return self.node

    def and_validate(self, reason: str, predicate: Predicate) -> "ValidationOutcome":
        """Следующая проверка того же узла."""
        return validate(self.node, reason, predicate)


@dataclass(frozen=True)
class Invalid:
    """Узел не прошёл проверку; reason содержит причину."""

    node: "Node"
    reason: str

    is_valid: ClassVar[bool] = False

    def into_result(self) -> "Node":
        """
        Raises:
            NodeValidationError: Всегда, с причиной проверки
        """
        raise NodeValidationError(self.reason, self.node)

    def and_validate(self, reason: str, predicate: Predicate) -> "ValidationOutcome":
        """Последующие проверки не выполняются; сохраняется первая причина."""
        return self


ValidationOutcome = Valid | Invalid


# =============================================================================
# VALIDATE
# =============================================================================


def validate(node: "Node", reason: str, predicate: Predicate) -> ValidationOutcome:
    """
    Проверка значения узла предикатом.

    Args:
        node: Проверяемый узел (не изменяется)
        reason: Причина отказа, если предикат не выполнен
        predicate: Функция payload → bool

    Returns:
        Valid(node) если predicate(node.value), иначе Invalid(node, reason)
    """
    if predicate(node.value):
        return Valid(node)

    logger.info("node %r failed validation: %s", node.label, reason)
    return Invalid(node, reason)
