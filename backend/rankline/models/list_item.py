"""ListItem ORM — reference ordered table, scoped by (list_id, section).

Invariants:
    - rank is unique within (list_id, section) — enforced by the ordering core
      under the scope lock, not by a constraint (shifts pass through duplicates mid-UPDATE)
    - section is nullable; NULL is its own scope, not a wildcard
    - rank is nullable: rows written outside rankline are ranked on their first move

Design Decisions:
    - Composite index (list_id, section, rank): every ordering query is a range scan on it
    - SCOPE_FIELDS declared on the model: the store adapter and the host read one source
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from rankline.db.base import Base


class ListItem(Base):
    """One entry of an ordered list."""
    __tablename__ = "list_items"
    __table_args__ = (
        Index("ix_list_items_scope_rank", "list_id", "section", "rank"),
    )

    SCOPE_FIELDS = ("list_id", "section")

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    list_id: Mapped[str] = mapped_column(String(64), nullable=False)
    section: Mapped[int | None] = mapped_column(Integer, nullable=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def scope_key(self) -> tuple:
        return (self.list_id, self.section)
