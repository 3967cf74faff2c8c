"""
JSON Schema Contract Validators

Модуль для валидации сериализованных записей узлов согласно формальному
JSON Schema контракту. Использует библиотеку jsonschema.

Схемы:
- node_record.json (envelope: label, value, unit, subexpr)
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple

import jsonschema
from jsonschema import Draft202012Validator


# =============================================================================
# EXCEPTIONS
# =============================================================================


class RecordParseError(ValueError):
    """
    Запись узла не соответствует контракту node_record.

    Узел из такой записи не создаётся (даже частично).
    """

    def __init__(self, message: str, errors: List[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы лежат в каталоге schema/ рядом с этим модулем.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'node_record')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # meta-validation
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Any) -> None:
        """
        Валидация данных против схемы.

        Raises:
            jsonschema.ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Any) -> bool:
        """Проверка валидности данных без exception."""
        return self.validator.is_valid(data)

    def error_messages(self, data: Any) -> List[str]:
        """
        Все ошибки валидации в виде строк.

        Каждая строка предваряется JSON-путём до места ошибки
        (например, '$.subexpr[0]: 'label' is a required property').
        """
        messages = []
        for error in sorted(self.validator.iter_errors(data), key=lambda e: e.json_path):
            messages.append(f"{error.json_path}: {error.message}")
        return messages


class NodeRecordValidator(ContractValidator):
    """
    Валидатор для node_record контракта.

    Схема описывает один уровень записи; вложенные записи subexpr
    проверяются той же схемой при обходе дерева явным стеком, так что
    глубина записи не ограничена стеком вызовов.
    """

    def __init__(self):
        super().__init__("node_record")

    def _walk(self, data: Any) -> Iterator[Tuple[str, Any]]:
        """Пары (JSON-путь, запись) в порядке обхода в глубину."""
        stack = [("$", data)]
        while stack:
            path, record = stack.pop()
            yield path, record

            children = record.get("subexpr") if isinstance(record, dict) else None
            if not isinstance(children, list):
                continue
            # Не-объекты отклоняет items схемы родителя
            for i in reversed(range(len(children))):
                if isinstance(children[i], dict):
                    stack.append((f"{path}.subexpr[{i}]", children[i]))

    def validate(self, data: Any) -> None:
        """
        Raises:
            jsonschema.ValidationError: Первая ошибка в порядке обхода
        """
        for _, record in self._walk(data):
            self.validator.validate(record)

    def is_valid(self, data: Any) -> bool:
        return all(self.validator.is_valid(record) for _, record in self._walk(data))

    def error_messages(self, data: Any) -> List[str]:
        messages = []
        for path, record in self._walk(data):
            for error in sorted(self.validator.iter_errors(record), key=lambda e: e.json_path):
                # json_path ошибки относителен записи уровня: '$' + хвост
                messages.append(f"{path}{error.json_path[1:]}: {error.message}")
        return messages


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_node_record(data: Any) -> None:
    """
    Валидация записи узла.

    Raises:
        RecordParseError: Если запись не соответствует схеме; все найденные
            ошибки доступны через ``errors``
    """
    errors = NodeRecordValidator().error_messages(data)
    if errors:
        raise RecordParseError(
            f"Malformed node record ({len(errors)} error(s)): {errors[0]}",
            errors=errors,
        )
