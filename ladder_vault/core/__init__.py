"""
Core domain models, mathematical primitives, and collaborator contracts.

This module contains the foundational building blocks that are independent
of external systems (venue, oracle, ledger).
"""
