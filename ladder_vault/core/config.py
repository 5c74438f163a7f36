"""
VaultConfig — конфигурация экземпляра vault

Конфигурация загружается из JSON документа (файл или dict):
1. Валидация против contracts/schema/vault_config.json (jsonschema)
2. Парсинг в immutable Pydantic модель VaultConfig
3. Построение начального VaultState

Конфигурация передаётся в LadderVault явно; глобального состояния нет.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator

from ladder_vault.core.contracts import validate_vault_config
from ladder_vault.core.math.fixed_point import UINT256_MAX
from ladder_vault.core.domain.vault_state import (
    FeeData,
    FundsState,
    LadderParams,
    VaultState,
)


class VaultConfig(BaseModel):
    """
    Конфигурация экземпляра vault.

    quote_offset_decimals задаёт quote_scale = 10 ** quote_offset_decimals:
    доли имеют на столько десятичных знаков больше, чем quote.
    """

    schema_version: str = Field(default="1", pattern="^1$", description="Версия схемы")
    vault_address: str = Field(..., min_length=1, description="Адрес vault на леджере")
    manager: str = Field(..., min_length=1, description="Роль manager")
    base_asset: str = Field(..., min_length=1)
    quote_asset: str = Field(..., min_length=1)
    share_asset: str = Field(..., min_length=1)
    quote_offset_decimals: int = Field(..., ge=0, le=30)
    max_value_in_quote: int = Field(default=UINT256_MAX, ge=0, le=UINT256_MAX)
    fee_data: FeeData
    ladder: LadderParams = Field(default_factory=LadderParams)
    funds_state: FundsState = Field(default=FundsState.VAULT)
    allowed_swap_delegates: frozenset[str] = Field(default_factory=frozenset)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_vault_not_asset(self) -> "VaultConfig":
        """Адрес vault не должен совпадать с идентификаторами активов."""
        if self.vault_address in {self.base_asset, self.quote_asset, self.share_asset}:
            raise ValueError(f"vault_address {self.vault_address!r} collides with an asset id")
        return self

    @property
    def quote_scale(self) -> int:
        return 10**self.quote_offset_decimals

    def initial_state(self) -> VaultState:
        """Начальное состояние: ноль долей, чекпоинт не установлен.

        funds_state и ладдер из конфигурации применяются сразу; средств
        ещё нет, поэтому первый update_position ничего не выставит.
        """
        return VaultState(
            base_asset=self.base_asset,
            quote_asset=self.quote_asset,
            share_asset=self.share_asset,
            quote_scale=self.quote_scale,
            fee_data=self.fee_data,
            max_value_in_quote=self.max_value_in_quote,
            funds_state=self.funds_state,
            ladder=self.ladder,
            allowed_swap_delegates=self.allowed_swap_delegates,
        )


def load_vault_config(source: str | Path | dict[str, Any]) -> VaultConfig:
    """
    Загрузка конфигурации vault.

    Args:
        source: Путь к JSON файлу или уже распарсенный dict

    Returns:
        VaultConfig

    Raises:
        jsonschema.ValidationError: Если документ не соответствует схеме
        pydantic.ValidationError: Если нарушены инварианты модели
    """
    if isinstance(source, dict):
        data = source
    else:
        with open(source, "r", encoding="utf-8") as f:
            data = json.load(f)

    validate_vault_config(data)
    return VaultConfig.model_validate(data)
