# backend/academy/routers/batches.py

from fastapi import APIRouter, Depends, HTTPException, Response, status
from typing import List

from academy import auth, schemas
from academy.storage import Storage, get_storage

router = APIRouter(
    prefix="/api/batches",
    tags=["Batches"]
)

# --- List batches: coaches see their own, admins see all ---
@router.get("", response_model=List[schemas.Batch])
def list_batches(
    current_user: schemas.User = Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    if current_user.role == schemas.Role.ADMIN:
        return storage.get_batches()
    return storage.get_batches(coach_id=current_user.id)

# --- Create a new batch coached by the caller ---
@router.post("", response_model=schemas.Batch, status_code=status.HTTP_201_CREATED)
def create_batch(
    payload: schemas.BatchBase,
    current_user: schemas.User = Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    return storage.create_batch(schemas.BatchCreate(**payload.model_dump(), coach_id=current_user.id))

# --- Get single batch ---
@router.get("/{batch_id}", response_model=schemas.Batch)
def get_batch(
    batch_id: int,
    current_user=Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    batch = storage.get_batch(batch_id)
    if not batch:
        raise HTTPException(status_code=404, detail="Batch not found")
    return batch

# --- Update batch ---
@router.patch("/{batch_id}", response_model=schemas.Batch)
def update_batch(
    batch_id: int,
    payload: schemas.BatchUpdate,
    current_user=Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    if payload.coach_id is not None and not storage.get_user(payload.coach_id):
        raise HTTPException(status_code=400, detail="Invalid coach_id: Coach not found")
    batch = storage.update_batch(batch_id, payload)
    if not batch:
        raise HTTPException(status_code=404, detail="Batch not found")
    return batch

# --- Delete batch (students are kept and detached) ---
@router.delete("/{batch_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_batch(
    batch_id: int,
    current_user=Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    if not storage.delete_batch(batch_id):
        raise HTTPException(status_code=404, detail="Batch not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
