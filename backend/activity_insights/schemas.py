"""
Pydantic schemas for request/response validation.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, List, Optional
from datetime import datetime


# ============ Analysis Schemas ============

class AnalyzeRequest(BaseModel):
    """Schema for an analysis request. Presence of query is checked by the route."""
    query: Optional[str] = None


class Insight(BaseModel):
    """Schema for a stored analysis (camelCase on the wire)."""
    id: int
    query: str
    analysis: str
    tools_used: List[str] = Field(default_factory=list, serialization_alias="toolsUsed")
    strava_data: Dict[str, Any] = Field(default_factory=dict, serialization_alias="stravaData")
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")

    model_config = ConfigDict(from_attributes=True)


# ============ Error Schemas ============

class ErrorResponse(BaseModel):
    """Schema for error responses."""
    error: str
    details: Optional[str] = None
