"""Contact property links and document tag endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.models.user import User
from backend.app.schemas.contact_links import (
    ContactFileTagUpdate,
    ContactPropertyCreate,
    ContactPropertyRead,
    ContactPropertyRole,
)
from backend.app.schemas.timeline import ContactFileRead
from backend.app.services.contact_links import link_property, list_contact_properties, unlink_property, update_file_tag

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.get("/{contact_id}/properties", response_model=list[ContactPropertyRead])
async def list_properties(contact_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return list_contact_properties(db, contact_id)


@router.post("/{contact_id}/properties", response_model=ContactPropertyRead)
async def create_property_link(
    contact_id: int,
    link_in: ContactPropertyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return link_property(db, contact_id=contact_id, property_id=link_in.property_id, role=link_in.role)


@router.delete("/{contact_id}/properties/{property_id}")
async def delete_property_link(
    contact_id: int,
    property_id: int,
    role: ContactPropertyRole,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    unlink_property(db, contact_id=contact_id, property_id=property_id, role=role)
    return {"status": "deleted", "contact_id": contact_id, "property_id": property_id, "role": role}


@router.patch("/{contact_id}/files/{file_id}/tag", response_model=ContactFileRead)
async def tag_file(
    contact_id: int,
    file_id: int,
    update: ContactFileTagUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return update_file_tag(db, contact_id=contact_id, file_id=file_id, tag=update.tag)
