"""ORM Models — SQLAlchemy declarative models for ordered tables.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all/autogenerate
"""

from rankline.models.list_item import ListItem  # noqa: F401
