"""Contact model carrying the lifecycle status fields."""

from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base

STATUS_MODES = ("auto", "manual")
CONTACT_STATUSES = ("active", "past")


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    # The contact row doubles as its lead record; this is the pipeline stage
    lead_status = Column(String, nullable=False, default="new")
    status_mode = Column(String(16), nullable=False, default="auto")
    status_effective = Column(String(16), nullable=False, default="active")
    status_manual = Column(String(16), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    status_changes = relationship("ContactStatusChange", back_populates="contact", cascade="all, delete-orphan")
    property_links = relationship("ContactProperty", back_populates="contact", cascade="all, delete-orphan")
    files = relationship("ContactFile", back_populates="contact", cascade="all, delete-orphan")
