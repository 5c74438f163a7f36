"""
ladder_vault — accounting and strategy-planning core of a two-asset
market-making vault.

Contains:
- core/      : math primitives, domain models, contracts, config, ports
- vault/     : fee accrual, share accounting, ladder planner, funds state machine
- adapters/  : in-memory collaborators for simulation and tests
"""
