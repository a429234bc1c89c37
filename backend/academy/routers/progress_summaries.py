# backend/academy/routers/progress_summaries.py

from fastapi import APIRouter, Depends, HTTPException
from typing import List

from academy import auth, schemas
from academy.services import coaching
from academy.services.advisor import Advisor, get_advisor
from academy.storage import Storage, get_storage

router = APIRouter(
    prefix="/api",
    tags=["Progress Summaries"]
)

# --- Summaries for a student, newest first ---
@router.get("/students/{student_id}/progress-summaries", response_model=List[schemas.ProgressSummary])
def list_progress_summaries(
    student_id: int,
    current_user=Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    if not storage.student_exists(student_id):
        raise HTTPException(status_code=404, detail="Student not found")
    return storage.get_progress_summaries(student_id)

# --- Generate a weekly summary from the two latest assessments ---
@router.post("/progress-summaries/generate", response_model=schemas.ProgressSummary)
def generate_progress_summary(
    payload: schemas.ProgressSummaryGenerateRequest,
    current_user=Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage),
    advisor: Advisor = Depends(get_advisor)
):
    return coaching.generate_progress_summary(storage, advisor, payload.student_id)
