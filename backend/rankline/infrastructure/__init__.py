"""Infrastructure Layer — persistence adapters and cross-cutting concerns.

Invariants:
    - Infrastructure implements core/ contracts (RankStore); it never decides ranks
    - Driver errors are mapped to the rankline error hierarchy at this boundary

Design Decisions:
    - SQLAlchemy async over raw drivers: one code path for PostgreSQL and SQLite
"""
