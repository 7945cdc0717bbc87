"""Core Layer — pure logic, no IO, no async.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - SQL parsing/execution, vector math, text splitting and embedding are data in, data out

Design Decisions:
    - Functional core separated from imperative shell: file and network access lives in infrastructure/
"""
