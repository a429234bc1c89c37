# backend/academy/routers/dashboard.py

from fastapi import APIRouter, Depends

from academy import auth, schemas
from academy.storage import Storage, get_storage

router = APIRouter(
    prefix="/api/dashboard",
    tags=["Dashboard"]
)

@router.get("/stats", response_model=schemas.DashboardStats)
def dashboard_stats(
    current_user=Depends(auth.get_current_user),
    storage: Storage = Depends(get_storage)
):
    return storage.get_dashboard_stats()
