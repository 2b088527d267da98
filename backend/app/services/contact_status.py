"""Contact lifecycle status engine.

A contact is in one of four states: auto/manual crossed with active/past.
Only admins may switch modes or set a manual status. Under ``manual`` the
effective status always equals the manual one; under ``auto`` the effective
status belongs to the recompute procedure.

Writes are blind last-write-wins on the contact row. Two admins acting at the
same time, or a recompute racing a manual override, can overwrite each other;
the audit log still records what each call superseded.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.errors import InvalidTransitionError, NotAuthorizedError, NotFoundError, UpstreamFailureError
from backend.app.models.contact import CONTACT_STATUSES, STATUS_MODES, Contact
from backend.app.models.user import User
from backend.app.services.contact_events import refresh_notifier
from backend.app.services.status_audit import append_status_change
from backend.app.services.status_recompute import StatusRecomputer, run_recompute

logger = logging.getLogger(__name__)

MANUAL_OVERRIDE_REASON = "manual override"
MANUAL_TRIGGER_REASON = "manual_trigger"


def ensure_admin(user: User) -> None:
    if not getattr(user, "is_admin", False):
        raise NotAuthorizedError()


def load_contact(db: Session, contact_id: int) -> Contact:
    try:
        contact = db.query(Contact).filter(Contact.id == contact_id).first()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Contact %s could not be loaded: %s", contact_id, exc)
        raise UpstreamFailureError() from exc
    if not contact:
        raise NotFoundError()
    return contact


def _commit_status_write(db: Session, contact_id: int) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Status write failed for contact %s: %s", contact_id, exc)
        raise UpstreamFailureError() from exc


def set_status_mode(
    db: Session,
    *,
    contact_id: int,
    mode: str,
    acting_user: User,
    recomputer: StatusRecomputer,
) -> Contact:
    """Switch a contact between automatic and manual status.

    Entering ``manual`` freezes the current effective status as the manual
    value. Returning to ``auto`` hands the status back to the recompute
    procedure, which runs synchronously before this call returns. If that
    recompute fails the mode change still stands; a refresh is published
    before the error is raised so views pick up the new mode.
    """
    ensure_admin(acting_user)
    actor_id = acting_user.id
    if mode not in STATUS_MODES:
        raise ValueError(f"Unknown status mode: {mode!r}")
    contact = load_contact(db, contact_id)

    if contact.status_mode == mode:
        return contact

    if mode == "manual":
        contact.status_manual = contact.status_effective
        contact.status_mode = "manual"
        _commit_status_write(db, contact_id)
    else:
        # status_manual is kept so a later return to manual mode starts from it
        contact.status_mode = "auto"
        _commit_status_write(db, contact_id)
        try:
            run_recompute(db, recomputer, contact_id, reason=MANUAL_TRIGGER_REASON, changed_by=actor_id)
        except UpstreamFailureError:
            # the mode switch is committed and stays
            refresh_notifier.publish(contact_id, "status_mode")
            raise

    db.refresh(contact)
    logger.info("Contact %s status mode set to %s by user %s", contact_id, mode, actor_id)
    refresh_notifier.publish(contact_id, "status_mode")
    return contact


def set_manual_status(
    db: Session,
    *,
    contact_id: int,
    status: str,
    acting_user: User,
) -> Contact:
    """Override the effective status of a contact that is in manual mode.

    The status fields are committed first and the audit row second. If the
    audit insert fails the override still stands; the gap is logged at ERROR
    for reconciliation instead of being retried or rolled back.
    """
    ensure_admin(acting_user)
    actor_id = acting_user.id
    if status not in CONTACT_STATUSES:
        raise ValueError(f"Unknown contact status: {status!r}")
    contact = load_contact(db, contact_id)
    if contact.status_mode != "manual":
        raise InvalidTransitionError()

    old_status = contact.status_effective
    contact.status_manual = status
    contact.status_effective = status
    contact.status_mode = "manual"
    _commit_status_write(db, contact_id)

    if old_status != status:
        try:
            append_status_change(
                db,
                contact_id=contact_id,
                old_status=old_status,
                new_status=status,
                reason=MANUAL_OVERRIDE_REASON,
                changed_by=actor_id,
            )
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                "Audit record missing for contact %s: status %s -> %s by user %s was applied but not logged (%s)",
                contact_id,
                old_status,
                status,
                actor_id,
                exc,
                extra={
                    "contact_id": contact_id,
                    "old_status": old_status,
                    "new_status": status,
                    "changed_by": actor_id,
                },
            )

    db.refresh(contact)
    logger.info("Contact %s manual status set to %s by user %s", contact_id, status, actor_id)
    refresh_notifier.publish(contact_id, "manual_status")
    return contact


def trigger_recompute(
    db: Session,
    *,
    contact_id: int,
    acting_user: User,
    recomputer: StatusRecomputer,
) -> Contact:
    """Ask the recompute procedure to re-derive the status now.

    Contacts in manual mode are left as they are by the procedure.
    """
    ensure_admin(acting_user)
    actor_id = acting_user.id
    contact = load_contact(db, contact_id)
    run_recompute(db, recomputer, contact_id, reason=MANUAL_TRIGGER_REASON, changed_by=actor_id)
    db.refresh(contact)
    refresh_notifier.publish(contact_id, "recompute")
    return contact
