"""Vault — учёт долей, комиссии, ладдер и размещение средств.

- FeeAccrual: management + performance fee разбавлением долей
- Share math: суммы mint/burn с защитным округлением
- PositionPlanner: геометрический ладдер bid/ask
- FundsStateMachine: VAULT / PASSIVE / ACTIVE
- LadderVault: публичные операции
"""

from .event_log import EventLog
from .fee_accrual import FeeAccrual, FeeAccrualResult
from .funds_state_machine import FundsStateMachine, PositionUpdateResult, PostOutcome
from .ladder_vault import BurnResult, LadderVault, MintResult, SwapResult
from .position_planner import PlannedDistribution, PositionPlanner, plan_distribution
from .share_math import BurnAmounts, MintAmounts

__all__ = [
    "EventLog",
    "FeeAccrual",
    "FeeAccrualResult",
    "FundsStateMachine",
    "PositionUpdateResult",
    "PostOutcome",
    "LadderVault",
    "MintResult",
    "BurnResult",
    "SwapResult",
    "PlannedDistribution",
    "PositionPlanner",
    "plan_distribution",
    "MintAmounts",
    "BurnAmounts",
]
