"""Services Layer — reading orchestration and the config store.

Invariants:
    - Services own all IO (oracle calls, remote store, local DB)
    - Pure decisions are delegated to core/
"""
