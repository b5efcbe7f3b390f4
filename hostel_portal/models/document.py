"""
Document record model.

One row per stored document: the collection name and document id form the
primary key, the payload is kept as JSON and ``version`` is bumped on every
write for conditional updates.
"""

from typing import Any, Dict

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hostel_portal.models.base import TimestampModel


class DocumentRecord(TimestampModel):
    """A schemaless document in a named collection."""

    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Collection name"
    )
    id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Document id, unique within the collection"
    )
    data: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Document fields"
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        comment="Write counter for optimistic concurrency"
    )

    def __repr__(self) -> str:
        return f"<DocumentRecord {self.collection}/{self.id} v{self.version}>"
