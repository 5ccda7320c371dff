from fastapi import APIRouter, Depends

from dashboard import build_dashboard
from database import Database
from dependencies import get_db, get_session

router = APIRouter(prefix="/api", tags=["dashboard"], dependencies=[Depends(get_session)])


@router.get("/dashboard")
def dashboard(db: Database = Depends(get_db)):
    return build_dashboard(db)
