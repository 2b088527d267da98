"""Unified contact timeline.

Merges five independently written sources into one list, newest first:
contact status changes, lead status changes, property status changes (via the
contact's linked properties), activities and file uploads. The list is rebuilt
in full on every call.

Reads fail closed: if any source cannot be fetched the whole timeline errors
rather than showing an audit trail with silent holes.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.errors import NotFoundError, PartialAggregationFailureError
from backend.app.core.time import ensure_utc
from backend.app.models.activity import Activity
from backend.app.models.contact import Contact
from backend.app.models.contact_file import ContactFile
from backend.app.models.contact_property import ContactProperty
from backend.app.models.contact_status_change import ContactStatusChange
from backend.app.models.lead_status_change import LeadStatusChange
from backend.app.models.property import PropertyStatusChange
from backend.app.schemas.contact import ContactStatusChangeRead
from backend.app.schemas.timeline import (
    ActivityItem,
    ActivityRead,
    ContactFileRead,
    FileUploadItem,
    LeadChangeItem,
    LeadStatusChangeRead,
    PropertyChangeItem,
    PropertyStatusChangeRead,
    StatusChangeItem,
    TimelineItem,
)

logger = logging.getLogger(__name__)


def fetch_contact(db: Session, contact_id: int) -> Contact | None:
    return db.query(Contact).filter(Contact.id == contact_id).first()


def fetch_contact_status_changes(db: Session, contact_id: int) -> list[ContactStatusChange]:
    return (
        db.query(ContactStatusChange)
        .filter(ContactStatusChange.contact_id == contact_id)
        .order_by(ContactStatusChange.created_at.desc(), ContactStatusChange.id.desc())
        .all()
    )


def fetch_lead_status_changes(db: Session, contact_id: int) -> list[LeadStatusChange]:
    return (
        db.query(LeadStatusChange)
        .filter(LeadStatusChange.lead_id == contact_id)
        .order_by(LeadStatusChange.created_at.desc(), LeadStatusChange.id.desc())
        .all()
    )


def fetch_linked_property_ids(db: Session, contact_id: int) -> list[int]:
    rows = db.query(ContactProperty.property_id).filter(ContactProperty.contact_id == contact_id).all()
    # A property linked under two roles still contributes its history once
    return sorted({row.property_id for row in rows})


def fetch_property_status_changes(db: Session, property_ids: list[int]) -> list[PropertyStatusChange]:
    return (
        db.query(PropertyStatusChange)
        .filter(PropertyStatusChange.property_id.in_(property_ids))
        .order_by(PropertyStatusChange.created_at.desc(), PropertyStatusChange.id.desc())
        .all()
    )


def fetch_activities(db: Session, contact_id: int) -> list[Activity]:
    return (
        db.query(Activity)
        .filter(Activity.lead_id == contact_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .all()
    )


def fetch_contact_files(db: Session, contact_id: int) -> list[ContactFile]:
    return (
        db.query(ContactFile)
        .filter(ContactFile.contact_id == contact_id)
        .order_by(ContactFile.created_at.desc(), ContactFile.id.desc())
        .all()
    )


def _from_old_status(old_status: str | None) -> str:
    return f"from {old_status}" if old_status else ""


def project_status_change(row: ContactStatusChange) -> StatusChangeItem:
    return StatusChangeItem(
        id=row.id,
        timestamp=ensure_utc(row.created_at),
        title=f"Contact status changed to {row.new_status}",
        subtitle=row.reason or "",
        data=ContactStatusChangeRead.model_validate(row),
    )


def project_lead_change(row: LeadStatusChange) -> LeadChangeItem:
    return LeadChangeItem(
        id=row.id,
        timestamp=ensure_utc(row.created_at),
        title=f"Lead status changed to {row.new_status or ''}",
        subtitle=_from_old_status(row.old_status),
        data=LeadStatusChangeRead.model_validate(row),
    )


def project_property_change(row: PropertyStatusChange) -> PropertyChangeItem:
    return PropertyChangeItem(
        id=row.id,
        timestamp=ensure_utc(row.created_at),
        title=f"Property status changed to {row.new_status or ''}",
        subtitle=_from_old_status(row.old_status),
        data=PropertyStatusChangeRead.model_validate(row),
    )


def project_activity(row: Activity) -> ActivityItem:
    return ActivityItem(
        id=row.id,
        timestamp=ensure_utc(row.created_at),
        title=row.description or "",
        subtitle=row.type,
        data=ActivityRead.model_validate(row),
    )


def project_file_upload(row: ContactFile) -> FileUploadItem:
    return FileUploadItem(
        id=row.id,
        timestamp=ensure_utc(row.created_at),
        title=f"Uploaded {row.name or 'document'}",
        subtitle=row.tag or "document",
        data=ContactFileRead.model_validate(row),
    )


def get_contact_timeline(db: Session, contact_id: int) -> list[TimelineItem]:
    """Return every timeline event for a contact, most recent first.

    Items sharing a timestamp keep source order (status, lead, property,
    activity, file) and, within a source, descending id.

    Raises:
        NotFoundError: the contact does not exist.
        PartialAggregationFailureError: any source read failed.
    """
    try:
        if fetch_contact(db, contact_id) is None:
            raise NotFoundError()
        status_changes = fetch_contact_status_changes(db, contact_id)
        lead_changes = fetch_lead_status_changes(db, contact_id)
        property_ids = fetch_linked_property_ids(db, contact_id)
        property_changes = fetch_property_status_changes(db, property_ids) if property_ids else []
        activities = fetch_activities(db, contact_id)
        files = fetch_contact_files(db, contact_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Timeline source fetch failed for contact %s: %s", contact_id, exc)
        raise PartialAggregationFailureError() from exc

    items: list[TimelineItem] = [
        *(project_status_change(row) for row in status_changes),
        *(project_lead_change(row) for row in lead_changes),
        *(project_property_change(row) for row in property_changes),
        *(project_activity(row) for row in activities),
        *(project_file_upload(row) for row in files),
    ]
    # sorted() is stable with reverse=True, so ties keep the order above
    return sorted(items, key=lambda item: item.timestamp, reverse=True)
