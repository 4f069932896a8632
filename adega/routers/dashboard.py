from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from adega.database import get_db
from adega.services.dashboard import get_dashboard_stats
from adega.schemas.dashboard import DashboardStats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(db: Session = Depends(get_db)):
    """Totals for the dashboard cards"""
    return get_dashboard_stats(db)
