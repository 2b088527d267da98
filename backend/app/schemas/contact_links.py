"""Schemas for contact-property links and contact file tags."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


ContactPropertyRole = Literal["owner", "buyer_interest", "tenant", "investor"]
ContactFileTag = Literal["id", "poa", "listing_agreement", "tenancy", "mou", "other"]
PropertyStatus = Literal["available", "pending", "vacant", "in_development", "sold", "rented", "off_market"]


class PropertySummary(BaseModel):
    id: int
    title: str
    status: str

    model_config = ConfigDict(from_attributes=True)


class ContactPropertyCreate(BaseModel):
    property_id: int
    role: ContactPropertyRole


class ContactPropertyRead(BaseModel):
    id: int
    contact_id: int
    property_id: int
    role: ContactPropertyRole
    created_at: datetime
    property: PropertySummary

    model_config = ConfigDict(from_attributes=True)


class ContactFileTagUpdate(BaseModel):
    tag: ContactFileTag


class PropertyStatusUpdate(BaseModel):
    status: PropertyStatus
