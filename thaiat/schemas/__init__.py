"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (form input, oracle output)
    - Domain types from core/ used for enum fields
"""
