"""
Persistence helpers for analysis results.
"""
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from . import models
from .llm.orchestrator import AnalysisOutcome


def create_insight(db: Session, query: str, outcome: AnalysisOutcome, model: Optional[str] = None) -> models.Insight:
    db_insight = models.Insight(
        query=query,
        analysis=outcome.analysis,
        tools_used=list(outcome.tools_used),
        strava_data=dict(outcome.strava_data),
        model=model,
    )
    db.add(db_insight)
    db.commit()
    db.refresh(db_insight)
    return db_insight


def get_insight(db: Session, insight_id: int) -> Optional[models.Insight]:
    return db.query(models.Insight).filter(models.Insight.id == insight_id).first()


def list_insights(db: Session, skip: int = 0, limit: int = 100) -> List[models.Insight]:
    return (
        db.query(models.Insight)
        .order_by(desc(models.Insight.created_at), desc(models.Insight.id))
        .offset(skip)
        .limit(limit)
        .all()
    )
