"""chainlab — LLM demo API with a mini-SQL table store and a flat vector index.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
