"""Unified contact timeline schemas.

A timeline item is a tagged union keyed on ``type``; ``data`` carries the
source row for the kind.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from backend.app.schemas.contact import ContactStatusChangeRead


class LeadStatusChangeRead(BaseModel):
    id: int
    lead_id: int
    old_status: Optional[str] = None
    new_status: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyStatusChangeRead(BaseModel):
    id: int
    property_id: int
    old_status: Optional[str] = None
    new_status: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ActivityRead(BaseModel):
    id: int
    lead_id: int
    type: str
    description: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ContactFileRead(BaseModel):
    id: int
    contact_id: int
    name: Optional[str] = None
    tag: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TimelineItemBase(BaseModel):
    id: int
    timestamp: datetime
    title: str
    subtitle: str


class StatusChangeItem(TimelineItemBase):
    type: Literal["status_change"] = "status_change"
    data: ContactStatusChangeRead


class LeadChangeItem(TimelineItemBase):
    type: Literal["lead_change"] = "lead_change"
    data: LeadStatusChangeRead


class PropertyChangeItem(TimelineItemBase):
    type: Literal["property_change"] = "property_change"
    data: PropertyStatusChangeRead


class ActivityItem(TimelineItemBase):
    type: Literal["activity"] = "activity"
    data: ActivityRead


class FileUploadItem(TimelineItemBase):
    type: Literal["file_upload"] = "file_upload"
    data: ContactFileRead


TimelineItem = Annotated[
    Union[StatusChangeItem, LeadChangeItem, PropertyChangeItem, ActivityItem, FileUploadItem],
    Field(discriminator="type"),
]
