"""Infrastructure Layer: external service clients and logging setup.

Invariants:
    - Every external failure is mapped to a core/errors.py type before leaving this layer
"""
