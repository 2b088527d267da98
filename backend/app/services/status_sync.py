"""Record lead and property status changes and re-derive affected contacts.

Lead and property CRUD live elsewhere; they call in here whenever a pipeline
stage or listing status moves so the change shows up on the contact timeline
and automatic statuses stay current.

The status change, its history row and the recompute of every affected
contact share one transaction. If the recompute fails nothing is kept, so a
retry sees the old stage and runs again.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.errors import NotFoundError, UpstreamFailureError
from backend.app.core.time import utc_now
from backend.app.models.contact import Contact
from backend.app.models.contact_property import ContactProperty
from backend.app.models.lead_status_change import LeadStatusChange
from backend.app.models.property import Property, PropertyStatusChange
from backend.app.services.contact_events import refresh_notifier
from backend.app.services.contact_status import load_contact
from backend.app.services.status_recompute import StatusRecomputer, run_recompute

logger = logging.getLogger(__name__)

LEAD_CHANGE_REASON = "lead: status change"
PROPERTY_CHANGE_REASON = "property: status change"


def _write(db: Session, what: str, *, commit: bool) -> None:
    try:
        if commit:
            db.commit()
        else:
            db.flush()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Failed to record %s: %s", what, exc)
        raise UpstreamFailureError() from exc


def record_lead_status_change(
    db: Session,
    *,
    contact_id: int,
    new_status: str,
    recomputer: StatusRecomputer,
) -> Contact:
    contact = load_contact(db, contact_id)
    old_status = contact.lead_status
    if old_status == new_status:
        return contact

    what = f"lead status change for contact {contact_id}"
    contact.lead_status = new_status
    db.add(LeadStatusChange(lead_id=contact.id, old_status=old_status, new_status=new_status, created_at=utc_now()))
    _write(db, what, commit=False)
    run_recompute(db, recomputer, contact_id, reason=LEAD_CHANGE_REASON, commit=False)
    _write(db, what, commit=True)

    db.refresh(contact)
    refresh_notifier.publish(contact_id, "lead_status")
    return contact


def record_property_status_change(
    db: Session,
    *,
    property_id: int,
    new_status: str,
    recomputer: StatusRecomputer,
) -> Property:
    try:
        prop = db.query(Property).filter(Property.id == property_id).first()
    except SQLAlchemyError as exc:
        db.rollback()
        raise UpstreamFailureError() from exc
    if not prop:
        raise NotFoundError("Property not found")
    old_status = prop.status
    if old_status == new_status:
        return prop

    what = f"property status change for property {property_id}"
    prop.status = new_status
    db.add(
        PropertyStatusChange(property_id=prop.id, old_status=old_status, new_status=new_status, created_at=utc_now())
    )
    _write(db, what, commit=False)

    try:
        contact_ids = sorted(
            {
                row.contact_id
                for row in db.query(ContactProperty.contact_id).filter(ContactProperty.property_id == property_id).all()
            }
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise UpstreamFailureError() from exc
    for contact_id in contact_ids:
        run_recompute(db, recomputer, contact_id, reason=PROPERTY_CHANGE_REASON, commit=False)
    _write(db, what, commit=True)

    for contact_id in contact_ids:
        refresh_notifier.publish(contact_id, "property_status")
    db.refresh(prop)
    return prop
