"""Free-text activity rows (calls, emails, meetings) logged against a contact."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, index=True)
    type = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
