"""
Test suite for ladder_vault

Contains:
- tests/unit/          : Unit tests for math, vault accounting, planner and contracts
"""
