# backend/academy/routers/assessments.py

from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

import structlog

from academy import auth, schemas
from academy.storage import Storage, get_storage

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Skill Assessments"]
)

# --- Assessment history for a student, newest first ---
@router.get("/students/{student_id}/skill-assessments", response_model=List[schemas.SkillAssessment])
def list_skill_assessments(
    student_id: int,
    current_user=Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    if not storage.student_exists(student_id):
        raise HTTPException(status_code=404, detail="Student not found")
    return storage.get_skill_assessments(student_id)

# --- Record an assessment; overall is derived from the four scores ---
@router.post("/skill-assessments", response_model=schemas.SkillAssessment, status_code=status.HTTP_201_CREATED)
def create_skill_assessment(
    payload: schemas.SkillAssessmentCreate,
    current_user: schemas.User = Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    if not storage.student_exists(payload.student_id):
        raise HTTPException(status_code=404, detail="Student not found")
    if payload.session_id is not None and not storage.session_exists(payload.session_id):
        raise HTTPException(status_code=400, detail=f"Session {payload.session_id} not found")

    assessment = storage.create_skill_assessment(payload.model_copy(update={"assessed_by": current_user.id}))
    logger.info("skill_assessment_recorded", student_id=payload.student_id, overall=assessment.overall)
    return assessment
