"""Thai At Application Package — destiny readings over a sexagenary calendar core.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
