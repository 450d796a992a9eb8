"""Core Layer — pure domain logic, no IO, no async.

Invariants:
    - No module in core/ imports from services/, api/, or infrastructure/
    - Errors, domain types and boundary protocols only

Design Decisions:
    - Functional core separated from imperative shell
"""
