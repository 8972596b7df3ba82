"""ORM Models — SQLAlchemy declarative models for persisted records.

Invariants:
    - All models inherit from Base (db/base.py)
    - ORM rows never leave infrastructure/ — repositories convert them to aggregates

Design Decisions:
    - Models imported here so Base.metadata is complete before create_all / autogenerate
"""

from drawboard.models.drawing import DrawingRecord  # noqa: F401
