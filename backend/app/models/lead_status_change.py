"""Pipeline stage changes recorded against a contact's lead record."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class LeadStatusChange(Base):
    __tablename__ = "lead_status_changes"

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, index=True)
    old_status = Column(String, nullable=True)
    new_status = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
