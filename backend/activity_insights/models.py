"""
SQLAlchemy models for Activity Insights database tables.
"""
from sqlalchemy import Column, Integer, String, Text, JSON, DateTime
from sqlalchemy.sql import func
from .database import Base


class Insight(Base):
    """One answered query: the analysis text plus the tool data behind it."""
    __tablename__ = "insights"

    id = Column(Integer, primary_key=True, index=True)
    query = Column(Text, nullable=False)
    analysis = Column(Text, nullable=False)
    tools_used = Column(JSON, nullable=False, default=list)  # ordered tool names
    strava_data = Column(JSON, nullable=False, default=dict)  # tool name -> last result
    model = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Insight(id={self.id}, tools_used={self.tools_used})>"
