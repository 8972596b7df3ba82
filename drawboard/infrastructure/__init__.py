"""Infrastructure Layer — database access, repositories and logging setup.

Invariants:
    - SQLAlchemy types never leave this layer: repositories hand back Drawing aggregates
    - Storage failures are mapped onto the error taxonomy (DatabaseError) here
"""
