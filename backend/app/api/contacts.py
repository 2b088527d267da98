"""Contact status and timeline endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.dependencies.status import get_status_recomputer
from backend.app.models.user import User
from backend.app.schemas.contact import ContactRead, LeadStatusUpdate, ManualStatusUpdate, StatusModeUpdate
from backend.app.schemas.timeline import TimelineItem
from backend.app.services.contact_status import load_contact, set_manual_status, set_status_mode, trigger_recompute
from backend.app.services.contact_timeline import get_contact_timeline
from backend.app.services.status_recompute import StatusRecomputer
from backend.app.services.status_sync import record_lead_status_change

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.get("/{contact_id}", response_model=ContactRead)
async def get_contact(contact_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return load_contact(db, contact_id)


@router.put("/{contact_id}/status/mode", response_model=ContactRead)
async def update_status_mode(
    contact_id: int,
    update: StatusModeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    recomputer: StatusRecomputer = Depends(get_status_recomputer),
):
    return set_status_mode(db, contact_id=contact_id, mode=update.mode, acting_user=current_user, recomputer=recomputer)


@router.put("/{contact_id}/status/manual", response_model=ContactRead)
async def update_manual_status(
    contact_id: int,
    update: ManualStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return set_manual_status(db, contact_id=contact_id, status=update.status, acting_user=current_user)


@router.post("/{contact_id}/status/recompute", response_model=ContactRead)
async def recompute_status(
    contact_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    recomputer: StatusRecomputer = Depends(get_status_recomputer),
):
    return trigger_recompute(db, contact_id=contact_id, acting_user=current_user, recomputer=recomputer)


@router.put("/{contact_id}/lead-status", response_model=ContactRead)
async def update_lead_status(
    contact_id: int,
    update: LeadStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    recomputer: StatusRecomputer = Depends(get_status_recomputer),
):
    return record_lead_status_change(db, contact_id=contact_id, new_status=update.status, recomputer=recomputer)


@router.get("/{contact_id}/timeline", response_model=list[TimelineItem])
async def get_timeline(
    contact_id: int,
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items = get_contact_timeline(db, contact_id)
    if limit is not None:
        items = items[:limit]
    return items
