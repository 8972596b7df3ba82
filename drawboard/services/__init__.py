"""Services Layer — drawing use cases over the repository port.

Invariants:
    - Services depend on core/ protocols only, never on SQLAlchemy or FastAPI
"""
