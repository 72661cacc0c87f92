"""
Contract Validation Module

Валидация JSON документов конфигурации (JSON Schema) и загрузка CalcConfig.
"""

from .validators import (
    CalcConfigValidator,
    ConfigContractError,
    ContractValidator,
    SchemaLoader,
    load_calc_config,
    load_calc_config_file,
    validate_calc_config,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "CalcConfigValidator",
    # Exceptions
    "ConfigContractError",
    # Functions
    "validate_calc_config",
    "load_calc_config",
    "load_calc_config_file",
]
