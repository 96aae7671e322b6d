"""Core Layer — pure ordering logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic (repository_protocols only declares contracts)

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich) —
      services/ fetch neighbor ranks, core/ decides, services/ write
"""
