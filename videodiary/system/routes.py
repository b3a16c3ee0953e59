from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from videodiary.core.database import get_db
from videodiary.system.schemas import HealthOut

router = APIRouter(tags=["System"])


@router.get("/healthz", response_model=HealthOut)
def health_route(db: Session = Depends(get_db)) -> HealthOut:
    db.execute(text("SELECT 1"))
    return HealthOut(status="ok", database="ok")
