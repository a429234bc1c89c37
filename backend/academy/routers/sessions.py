# backend/academy/routers/sessions.py

from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from typing import List, Optional

from academy import auth, schemas
from academy.storage import Storage, get_storage

router = APIRouter(
    prefix="/api/sessions",
    tags=["Sessions"]
)

# Sessions only move forward through these states
STATUS_ORDER = [
    schemas.SessionStatus.SCHEDULED.value,
    schemas.SessionStatus.ACTIVE.value,
    schemas.SessionStatus.COMPLETED.value,
]

# --- List sessions (filter by batch and/or day) ---
@router.get("", response_model=List[schemas.SessionWithDetails])
def list_sessions(
    batch_id: Optional[int] = Query(None),
    on_date: Optional[date] = Query(None, alias="date"),
    current_user=Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    return storage.get_sessions(batch_id=batch_id, on_date=on_date)

# --- Schedule a session run by the caller ---
@router.post("", response_model=schemas.Session, status_code=status.HTTP_201_CREATED)
def create_session(
    payload: schemas.SessionBase,
    current_user: schemas.User = Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    if not storage.get_batch(payload.batch_id):
        raise HTTPException(status_code=400, detail=f"Batch {payload.batch_id} not found")
    return storage.create_session(schemas.SessionCreate(**payload.model_dump(), coach_id=current_user.id))

# --- Get single session with batch, coach and attendance ---
@router.get("/{session_id}", response_model=schemas.SessionWithDetails)
def get_session(
    session_id: int,
    current_user=Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    session = storage.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session

# --- Update session ---
@router.patch("/{session_id}", response_model=schemas.Session)
def update_session(
    session_id: int,
    payload: schemas.SessionUpdate,
    current_user=Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    session = storage.get_session_record(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    if payload.status is not None and STATUS_ORDER.index(payload.status) < STATUS_ORDER.index(session.status):
        raise HTTPException(
            status_code=400,
            detail=f"Cannot move session from {session.status} back to {payload.status}"
        )
    if payload.batch_id is not None and not storage.get_batch(payload.batch_id):
        raise HTTPException(status_code=400, detail=f"Batch {payload.batch_id} not found")
    return storage.update_session(session_id, payload)

# --- Delete session (its attendance goes with it) ---
@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(
    session_id: int,
    current_user=Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    if not storage.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# --- Attendance sheet for a session ---
@router.get("/{session_id}/attendance", response_model=List[schemas.AttendanceWithStudent])
def get_session_attendance(
    session_id: int,
    current_user=Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    if not storage.session_exists(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return storage.get_attendance(session_id)
