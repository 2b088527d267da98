"""Property status endpoint feeding contact status derivation."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.dependencies.status import get_status_recomputer
from backend.app.models.user import User
from backend.app.schemas.contact_links import PropertyStatusUpdate, PropertySummary
from backend.app.services.status_recompute import StatusRecomputer
from backend.app.services.status_sync import record_property_status_change

router = APIRouter(prefix="/properties", tags=["properties"])


@router.put("/{property_id}/status", response_model=PropertySummary)
async def update_property_status(
    property_id: int,
    update: PropertyStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    recomputer: StatusRecomputer = Depends(get_status_recomputer),
):
    return record_property_status_change(db, property_id=property_id, new_status=update.status, recomputer=recomputer)
