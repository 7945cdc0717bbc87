"""Infrastructure Layer — external service clients, persistence and cross-cutting concerns.

Invariants:
    - All external calls wrapped with retry/timeout/error mapping
    - Failures surface as ChainlabError subclasses (core/errors.py)
"""
