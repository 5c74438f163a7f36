"""
Contract Validation Module

Модуль для валидации JSON контрактов ladder_vault.
"""

from .validators import (
    ContractValidator,
    SchemaLoader,
    VaultConfigValidator,
    VaultEventValidator,
    validate_vault_config,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "VaultConfigValidator",
    "VaultEventValidator",
    # Functions
    "validate_vault_config",
]
