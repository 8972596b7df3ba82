"""API Layer — FastAPI routes, middleware pipeline and error handlers.

Invariants:
    - Routes registered explicitly in main.create_app (no auto-discovery)
    - All endpoints return structured JSON responses (DELETE returns an empty 204)

Design Decisions:
    - Thin routes delegate to services (ADR: impureim sandwich)
"""
