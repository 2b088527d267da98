"""Contact status schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


StatusMode = Literal["auto", "manual"]
ContactStatus = Literal["active", "past"]
LeadStage = Literal["new", "contacted", "qualified", "proposal", "negotiation", "won", "lost", "closed"]


class ContactRead(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    lead_status: str
    status_mode: StatusMode
    status_effective: ContactStatus
    status_manual: Optional[ContactStatus] = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StatusModeUpdate(BaseModel):
    mode: StatusMode


class ManualStatusUpdate(BaseModel):
    status: ContactStatus


class LeadStatusUpdate(BaseModel):
    status: LeadStage


class ContactStatusChangeRead(BaseModel):
    id: int
    contact_id: int
    old_status: Optional[str] = None
    new_status: str
    reason: Optional[str] = None
    changed_by: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
