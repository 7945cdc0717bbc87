"""Services Layer — request modes, agent runner, tool dispatch and tool handlers.

Invariants:
    - Tool dispatch uses explicit dict mapping (no auto-discovery)
    - Services receive their handles as constructor arguments, never from module globals
"""
