# backend/academy/routers/training_plans.py

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from typing import List, Optional

from academy import auth, schemas
from academy.services import coaching
from academy.services.advisor import Advisor, get_advisor
from academy.storage import Storage, get_storage

router = APIRouter(
    prefix="/api/training-plans",
    tags=["Training Plans"]
)

# --- List plans for a student and/or batch ---
@router.get("", response_model=List[schemas.TrainingPlanWithDetails])
def list_training_plans(
    student_id: Optional[int] = Query(None),
    batch_id: Optional[int] = Query(None),
    current_user=Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    return storage.get_training_plans(student_id=student_id, batch_id=batch_id)

# --- Coach-written plan ---
@router.post("", response_model=schemas.TrainingPlan, status_code=status.HTTP_201_CREATED)
def create_training_plan(
    payload: schemas.TrainingPlanCreate,
    current_user: schemas.User = Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    if payload.student_id is not None and not storage.student_exists(payload.student_id):
        raise HTTPException(status_code=404, detail="Student not found")
    if payload.batch_id is not None and not storage.get_batch(payload.batch_id):
        raise HTTPException(status_code=404, detail="Batch not found")
    return storage.create_training_plan(payload.model_copy(update={
        "created_by": current_user.id,
        "generated_by": schemas.GeneratedBy.COACH.value,
    }))

# --- AI-generated plans for a student or a whole batch ---
@router.post("/generate", response_model=List[schemas.TrainingPlan])
def generate_training_plans(
    payload: schemas.TrainingPlanGenerateRequest,
    current_user: schemas.User = Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage),
    advisor: Advisor = Depends(get_advisor)
):
    return coaching.generate_training_plans(storage, advisor, payload, current_user)

# --- Get single plan ---
@router.get("/{plan_id}", response_model=schemas.TrainingPlanWithDetails)
def get_training_plan(
    plan_id: int,
    current_user=Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    plan = storage.get_training_plan(plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Training plan not found")
    return plan

# --- Update plan (approve, edit drills, notes) ---
@router.patch("/{plan_id}", response_model=schemas.TrainingPlan)
def update_training_plan(
    plan_id: int,
    payload: schemas.TrainingPlanUpdate,
    current_user=Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    plan = storage.update_training_plan(plan_id, payload)
    if not plan:
        raise HTTPException(status_code=404, detail="Training plan not found")
    return plan

# --- Delete plan ---
@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_training_plan(
    plan_id: int,
    current_user=Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    if not storage.delete_training_plan(plan_id):
        raise HTTPException(status_code=404, detail="Training plan not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
