"""Join table linking contacts to the properties they own, rent or want."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class ContactProperty(Base):
    __tablename__ = "contact_properties"
    __table_args__ = (UniqueConstraint("contact_id", "property_id", "role", name="uq_contact_property_role"),)

    id = Column(Integer, primary_key=True, index=True)
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    role = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    contact = relationship("Contact", back_populates="property_links")
    property = relationship("Property", back_populates="contact_links")
