# backend/academy/routers/attendance.py

from fastapi import APIRouter, Depends, HTTPException, status

from academy import auth, schemas
from academy.storage import Storage, get_storage

router = APIRouter(
    prefix="/api/attendance",
    tags=["Attendance"]
)


def _check_pair(storage: Storage, session_id: int, student_id: int):
    if not storage.session_exists(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    if not storage.student_exists(student_id):
        raise HTTPException(status_code=404, detail="Student not found")

# --- Mark attendance (one row per session and student) ---
@router.post("", response_model=schemas.Attendance, status_code=status.HTTP_201_CREATED)
def mark_attendance(
    payload: schemas.AttendanceCreate,
    current_user=Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    _check_pair(storage, payload.session_id, payload.student_id)
    return storage.mark_attendance(payload)

# --- Flip presence for a session and student ---
@router.patch("/{session_id}/{student_id}", response_model=schemas.Attendance)
def update_attendance(
    session_id: int,
    student_id: int,
    payload: schemas.AttendanceUpdate,
    current_user=Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage)
):
    _check_pair(storage, session_id, student_id)
    return storage.update_attendance(session_id, student_id, payload.present)
