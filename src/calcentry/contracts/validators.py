"""
JSON Schema Contract Validators

Валидация JSON документов конфигурации калькулятора против формальной
JSON Schema (contracts/schema/calc_config.json) и построение CalcConfig.

Порядок:
1. JSON Schema (структура, типы, допустимые значения) — jsonschema
2. CalcConfig.build (семантические правила) — pydantic
"""

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Union

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

from calcentry.core.config import CalcConfig, RoundingMode


# =============================================================================
# ИСКЛЮЧЕНИЯ
# =============================================================================


class ConfigContractError(ValueError):
    """Документ конфигурации не соответствует схеме."""

    def __init__(self, error: ValidationError):
        path = "/".join(str(p) for p in error.absolute_path) or "<root>"
        super().__init__(f"{path}: {error.message}")
        self.validation_error = error


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы лежат в пакете: calcentry/contracts/schema/.
    """

    def __init__(self):
        self._schema_dir = Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'calc_config')

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если схема сама по себе невалидна
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Meta-validation
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """Базовый валидатор: данные против JSON Schema."""

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]):
        return self.validator.iter_errors(data)


class CalcConfigValidator(ContractValidator):
    """Валидатор для calc_config контракта."""

    def __init__(self):
        super().__init__("calc_config")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_calc_config(data: Dict[str, Any]) -> None:
    """
    Валидация документа конфигурации.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    CalcConfigValidator().validate(data)


def load_calc_config(data: Dict[str, Any]) -> CalcConfig:
    """
    Документ конфигурации → CalcConfig.

    Raises:
        ConfigContractError: Документ не соответствует схеме
        InvalidArgument: Значения нарушают правила конфигурации
    """
    try:
        validate_calc_config(data)
    except ValidationError as e:
        raise ConfigContractError(e) from e

    fields = {k: v for k, v in data.items() if k != "schema_version"}
    if fields.get("max_value") is not None:
        fields["max_value"] = Decimal(fields["max_value"])
    if "rounding_mode" in fields:
        fields["rounding_mode"] = RoundingMode[fields["rounding_mode"]]
    return CalcConfig.build(**fields)


def load_calc_config_file(path: Union[str, Path]) -> CalcConfig:
    """Загрузка CalcConfig из JSON файла."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return load_calc_config(data)
