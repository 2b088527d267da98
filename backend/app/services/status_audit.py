"""Audit log writes for contact status transitions."""

from sqlalchemy.orm import Session

from backend.app.core.time import utc_now
from backend.app.models.contact_status_change import ContactStatusChange


def build_status_change(
    contact_id: int,
    old_status: str | None,
    new_status: str,
    reason: str | None,
    changed_by: int | None,
) -> ContactStatusChange:
    return ContactStatusChange(
        contact_id=contact_id,
        old_status=old_status,
        new_status=new_status,
        reason=reason,
        changed_by=changed_by,
        created_at=utc_now(),
    )


def append_status_change(
    db: Session,
    *,
    contact_id: int,
    old_status: str | None,
    new_status: str,
    reason: str | None,
    changed_by: int | None,
) -> ContactStatusChange:
    """Insert one audit row in its own commit. Rows are never updated or deleted."""
    entry = build_status_change(contact_id, old_status, new_status, reason, changed_by)
    db.add(entry)
    db.commit()
    return entry
