"""Append-only log of contact lifecycle status transitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class ContactStatusChange(Base):
    __tablename__ = "contact_status_changes"

    id = Column(Integer, primary_key=True, index=True)
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, index=True)
    old_status = Column(String(16), nullable=True)
    new_status = Column(String(16), nullable=False)
    reason = Column(String, nullable=True)
    changed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    contact = relationship("Contact", back_populates="status_changes")
