"""
Vault Contract Validators

Проверка конфигурации vault и записей журнала событий против JSON Schema
(Draft 2020-12), поставляемых с пакетом в contracts/schema/:
- vault_config.json: конфигурация экземпляра vault
- vault_event.json: append-only записи аудита (oneOf по event_type)

Валидатор каждой схемы компилируется один раз на SchemaLoader.
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match


class SchemaLoader:
    """Схемы контрактов и скомпилированные валидаторы к ним."""

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        self._validators: Dict[str, Draft202012Validator] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Чтение схемы с meta-validation.

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной JSON Schema
        """
        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e.message}") from e
        return schema

    def validator(self, schema_name: str) -> Draft202012Validator:
        """Валидатор схемы (компилируется при первом обращении)."""
        if schema_name not in self._validators:
            self._validators[schema_name] = Draft202012Validator(self.load_schema(schema_name))
        return self._validators[schema_name]


_SCHEMA_LOADER = SchemaLoader()


class ContractValidator:
    """Проверка dict против одной схемы контракта."""

    def __init__(self, schema_name: str, loader: SchemaLoader | None = None):
        self.schema_name = schema_name
        self.validator = (loader or _SCHEMA_LOADER).validator(schema_name)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: Наиболее релевантное нарушение (best_match)
        """
        error = best_match(self.validator.iter_errors(data))
        if error is not None:
            raise error


class VaultConfigValidator(ContractValidator):
    def __init__(self, loader: SchemaLoader | None = None):
        super().__init__("vault_config", loader)


class VaultEventValidator(ContractValidator):
    def __init__(self, loader: SchemaLoader | None = None):
        super().__init__("vault_event", loader)


def validate_vault_config(data: Dict[str, Any]) -> None:
    """
    Валидация конфигурации vault перед построением VaultConfig.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    VaultConfigValidator().validate(data)
