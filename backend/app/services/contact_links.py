"""Contact-property links and contact file tagging."""

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from backend.app.core.errors import NotFoundError
from backend.app.models.contact_file import ContactFile
from backend.app.models.contact_property import ContactProperty
from backend.app.models.property import Property
from backend.app.services.contact_status import load_contact


def list_contact_properties(db: Session, contact_id: int) -> list[ContactProperty]:
    load_contact(db, contact_id)
    return (
        db.query(ContactProperty)
        .options(joinedload(ContactProperty.property))
        .filter(ContactProperty.contact_id == contact_id)
        .order_by(ContactProperty.created_at.asc(), ContactProperty.id.asc())
        .all()
    )


def link_property(db: Session, *, contact_id: int, property_id: int, role: str) -> ContactProperty:
    load_contact(db, contact_id)
    if not db.query(Property).filter(Property.id == property_id).first():
        raise NotFoundError("Property not found")

    link = ContactProperty(contact_id=contact_id, property_id=property_id, role=role)
    db.add(link)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Property already linked with this role")
    db.refresh(link)
    return link


def unlink_property(db: Session, *, contact_id: int, property_id: int, role: str) -> None:
    link = (
        db.query(ContactProperty)
        .filter(
            ContactProperty.contact_id == contact_id,
            ContactProperty.property_id == property_id,
            ContactProperty.role == role,
        )
        .first()
    )
    if not link:
        raise NotFoundError("Property link not found")
    db.delete(link)
    db.commit()


def update_file_tag(db: Session, *, contact_id: int, file_id: int, tag: str) -> ContactFile:
    contact_file = (
        db.query(ContactFile).filter(ContactFile.id == file_id, ContactFile.contact_id == contact_id).first()
    )
    if not contact_file:
        raise NotFoundError("File not found")
    contact_file.tag = tag
    db.commit()
    db.refresh(contact_file)
    return contact_file
