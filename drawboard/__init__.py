"""Drawboard — persistence service for whiteboard drawings.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
