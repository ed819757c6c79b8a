"""
LLM tool orchestration package.

- agents: the fixed catalogue of analytic tools (ToolRegistry) over cached Strava activities
- tools: formatting and aggregation helpers the tools share
- orchestrator: drives an OpenAI function-calling loop over the registry
"""
from .agents import ToolName, ToolRegistry, ToolSchema, TOOL_SCHEMAS
from .orchestrator import AnalysisOutcome, ConversationOrchestrator, ModelTurn, TurnKind

__all__ = [
    "AnalysisOutcome",
    "ConversationOrchestrator",
    "ModelTurn",
    "TOOL_SCHEMAS",
    "ToolName",
    "ToolRegistry",
    "ToolSchema",
    "TurnKind",
]
