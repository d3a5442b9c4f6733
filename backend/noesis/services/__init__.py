"""Services Layer: imperative shell around the pure core.

Invariants:
    - Services own all IO and all mutable session state
    - Pure decisions (guards, updates, layout) are delegated to core/
"""
