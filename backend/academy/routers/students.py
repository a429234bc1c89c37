# backend/academy/routers/students.py

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from typing import List, Optional

import structlog

from academy import auth, schemas
from academy.services import coaching
from academy.services.advisor import Advisor, get_advisor
from academy.storage import Storage, get_storage

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/api/students",
    tags=["Students"]
)

# --- List students, optionally for one batch ---
@router.get("", response_model=List[schemas.StudentWithBatch])
def list_students(
    batch_id: Optional[int] = Query(None),
    current_user=Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    return storage.get_students(batch_id)

# --- At-risk students (declared before /{student_id}) ---
@router.get("/at-risk", response_model=List[schemas.StudentWithBatch])
def list_at_risk_students(
    current_user=Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    return storage.get_at_risk_students()

# --- Get single student ---
@router.get("/{student_id}", response_model=schemas.StudentWithBatch)
def get_student(
    student_id: int,
    current_user=Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    student = storage.get_student(student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student

# --- Create student (admin or coach only) ---
@router.post("", response_model=schemas.Student, status_code=status.HTTP_201_CREATED)
def create_student(
    payload: schemas.StudentCreate,
    current_user=Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    if payload.batch_id is not None and not storage.get_batch(payload.batch_id):
        raise HTTPException(status_code=400, detail=f"Batch {payload.batch_id} not found")
    student = storage.create_student(payload)
    logger.info("student_created", student_id=student.id, created_by=current_user.id)
    return student

# --- Update student ---
@router.patch("/{student_id}", response_model=schemas.Student)
def update_student(
    student_id: int,
    payload: schemas.StudentUpdate,
    current_user=Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    if payload.batch_id is not None and not storage.get_batch(payload.batch_id):
        raise HTTPException(status_code=400, detail=f"Batch {payload.batch_id} not found")
    student = storage.update_student(student_id, payload)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student

# --- Delete student ---
@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(
    student_id: int,
    current_user=Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    if not storage.delete_student(student_id):
        raise HTTPException(status_code=404, detail="Student not found")
    logger.info("student_deleted", student_id=student_id, deleted_by=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# --- AI dropout-risk analysis ---
@router.post("/{student_id}/analyze-dropout-risk", response_model=schemas.RetentionPlan)
def analyze_dropout_risk(
    student_id: int,
    current_user=Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage),
    advisor: Advisor = Depends(get_advisor)
):
    return coaching.analyze_dropout_risk(storage, advisor, student_id)
