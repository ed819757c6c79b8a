"""
Analysis entrypoint: runs the tool-orchestration loop and stores the result.

POST /analyze
"""
import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..database import get_db
from ..dependencies import get_orchestrator_factory
from ..errors import ActivityInsightsError
from ..llm.orchestrator import ConversationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Analysis"])


@router.post(
    "/analyze",
    response_model=schemas.Insight,
    responses={400: {"model": schemas.ErrorResponse}, 500: {"model": schemas.ErrorResponse}},
)
def analyze(
    payload: Optional[schemas.AnalyzeRequest] = None,
    db: Session = Depends(get_db),
    orchestrator_factory: Callable[[], ConversationOrchestrator] = Depends(get_orchestrator_factory),
):
    """
    Answer a natural-language question about the athlete's Strava history.

    - **query**: the question, e.g. "What was my longest ride?"
    """
    query = (payload.query or "").strip() if payload else ""
    if not query:
        return JSONResponse(status_code=400, content={"error": "Query is required"})

    try:
        orch = orchestrator_factory()
        outcome = orch.run_analysis(query)
        insight = crud.create_insight(db, query, outcome, model=orch.model)
    except ActivityInsightsError as e:
        logger.exception(f"Analysis failed for query {query!r}")
        body = e.to_dict()
        # Error context (e.g. the upstream status code) rides next to the message
        return JSONResponse(
            status_code=500,
            content={"error": "Analysis failed", "details": body["error"], **body["details"]},
        )
    except Exception as e:
        logger.exception(f"Analysis failed for query {query!r}")
        return JSONResponse(status_code=500, content={"error": "Analysis failed", "details": str(e)})

    return insight
