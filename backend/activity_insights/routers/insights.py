"""
Stored insight endpoints.

- GET /insights: previous analyses, newest first
- GET /insights/{id}: one analysis with its raw tool data
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..database import get_db


router = APIRouter(prefix="/insights", tags=["Insights"])


@router.get("", response_model=List[schemas.Insight])
def list_insights(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return crud.list_insights(db, skip=skip, limit=limit)


@router.get(
    "/{insight_id}",
    response_model=schemas.Insight,
    responses={404: {"model": schemas.ErrorResponse}},
)
def get_insight(insight_id: int, db: Session = Depends(get_db)):
    insight = crud.get_insight(db, insight_id)
    if not insight:
        return JSONResponse(status_code=404, content={"error": "Insight not found"})
    return insight
