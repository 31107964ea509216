from fastapi import APIRouter, Depends
from sqlmodel import Session, text
from typing import Any
from app.core.config import settings
from app.db.session import get_db

router = APIRouter()

@router.get("", response_model=dict[str, Any])
def health_check(db: Session = Depends(get_db)) -> Any:
    """
    Health check endpoint. Also verifies the database answers.
    """
    db.connection().execute(text("SELECT 1"))
    return {"status": "ok", "version": settings.VERSION}
