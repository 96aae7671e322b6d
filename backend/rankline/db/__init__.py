"""Database Package — SQLAlchemy declarative base shared by all ORM models.

Invariants:
    - Single metadata object for models, migrations and test fixtures

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for tests (ADR: native async, no thread pool overhead)
"""
