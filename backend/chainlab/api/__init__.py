"""API Layer — FastAPI routes, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Handles (database, vector stores, LLM client) come from app.state via dependencies.py

Design Decisions:
    - Thin routes delegate to services
"""
