"""Automatic contact status derivation.

The lifecycle engine only talks to the :class:`StatusRecomputer` protocol, so
the derivation rule can live in the database, another service, or the default
implementation below.

Default rule: a contact is ``active`` while its own lead is in an open
pipeline stage or any linked property is still open; otherwise ``past``.
Contacts in ``manual`` mode are left untouched.
"""

import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.errors import UpstreamFailureError
from backend.app.core.settings import get_settings
from backend.app.models.contact import Contact
from backend.app.models.contact_property import ContactProperty
from backend.app.models.property import Property
from backend.app.services.status_audit import build_status_change

logger = logging.getLogger(__name__)

DEFAULT_RECOMPUTE_REASON = "auto: recompute"


class StatusRecomputer(Protocol):
    def recompute(
        self,
        db: Session,
        contact_id: int,
        reason: str | None = None,
        changed_by: int | None = None,
        commit: bool = True,
    ) -> None:
        """Refresh ``status_effective`` for an auto-mode contact.

        With ``commit=False`` the writes are only flushed and the caller's
        transaction decides whether they persist.

        Raises:
            UpstreamFailureError: the procedure could not complete.
        """
        ...


def run_recompute(
    db: Session,
    recomputer: StatusRecomputer,
    contact_id: int,
    *,
    reason: str,
    changed_by: int | None = None,
    commit: bool = True,
) -> None:
    """Call ``recomputer`` and roll the session back if it fails.

    Storage errors leaking out of the recomputer become ``UpstreamFailureError``.
    """
    try:
        recomputer.recompute(db, contact_id, reason=reason, changed_by=changed_by, commit=commit)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Status recompute failed for contact %s: %s", contact_id, exc)
        raise UpstreamFailureError() from exc
    except UpstreamFailureError:
        db.rollback()
        raise


class LinkedRecordStatusRecomputer:
    def __init__(self, settings=None):
        self.settings = settings or get_settings()

    def derive_status(self, db: Session, contact: Contact) -> str:
        if contact.lead_status in self.settings.lead_active_statuses:
            return "active"
        open_properties = (
            db.query(ContactProperty)
            .join(Property, Property.id == ContactProperty.property_id)
            .filter(
                ContactProperty.contact_id == contact.id,
                Property.status.in_(self.settings.property_open_statuses),
            )
            .count()
        )
        return "active" if open_properties > 0 else "past"

    def recompute(
        self,
        db: Session,
        contact_id: int,
        reason: str | None = None,
        changed_by: int | None = None,
        commit: bool = True,
    ) -> None:
        try:
            contact = db.query(Contact).filter(Contact.id == contact_id).first()
            if contact is None or contact.status_mode == "manual":
                return

            old_status = contact.status_effective
            new_status = self.derive_status(db, contact)
            if new_status == old_status:
                return

            contact.status_effective = new_status
            db.add(
                build_status_change(
                    contact.id,
                    old_status,
                    new_status,
                    reason or DEFAULT_RECOMPUTE_REASON,
                    changed_by,
                )
            )
            if commit:
                db.commit()
            else:
                db.flush()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("Status recompute failed for contact %s: %s", contact_id, exc)
            raise UpstreamFailureError() from exc

        logger.info(
            "Recomputed contact %s status %s -> %s (%s)",
            contact_id,
            old_status,
            new_status,
            reason or DEFAULT_RECOMPUTE_REASON,
        )


default_recomputer = LinkedRecordStatusRecomputer()
