"""Pydantic Schemas: validation at the system boundary.

Invariants:
    - Provider payloads are validated before they become core KnowledgeNodes
    - API request bodies are validated before reaching route handlers

Design Decisions:
    - Separate from core dataclasses: schemas are wire contracts, core types are domain values
"""
