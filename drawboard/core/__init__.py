"""Core Layer — pure domain logic, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - The Drawing aggregate is the only place drawing validation rules live

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
