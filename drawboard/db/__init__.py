"""Database Metadata — SQLAlchemy declarative Base shared by models and migrations.

Invariants:
    - Single Base per process; engines live in infrastructure/database.py
"""
