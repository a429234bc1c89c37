# backend/academy/routers/drills.py

from fastapi import APIRouter, Depends, Query
from typing import List

from academy import auth, schemas
from academy.services import coaching
from academy.services.advisor import Advisor, get_advisor
from academy.storage import Storage, get_storage

router = APIRouter(
    prefix="/api/drill-recommendations",
    tags=["Drill Recommendations"]
)

# --- Recent recommendation history ---
@router.get("", response_model=List[schemas.DrillRecommendation])
def list_drill_recommendations(
    limit: int = Query(10, ge=1, le=100),
    current_user=Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    return storage.get_drill_recommendations(limit)

# --- Ask for drills; falls back to a built-in list when the advisor fails ---
@router.post("", response_model=schemas.DrillResponse)
def recommend_drills(
    payload: schemas.DrillQuery,
    current_user: schemas.User = Depends(auth.require_role(auth.STAFF_ROLES)),
    storage: Storage = Depends(get_storage),
    advisor: Advisor = Depends(get_advisor)
):
    return {"drills": coaching.recommend_drills(storage, advisor, payload, current_user)}
