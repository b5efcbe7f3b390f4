"""
Database models package.
"""

from hostel_portal.models.base import Base, TimestampModel
from hostel_portal.models.document import DocumentRecord

__all__ = ["Base", "TimestampModel", "DocumentRecord"]
