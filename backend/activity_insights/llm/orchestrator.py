from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from openai import BadRequestError, OpenAI

from ..config import settings
from ..errors import ToolParseError
from .agents import ToolRegistry

logger = logging.getLogger(__name__)

INCOMPLETE_ANALYSIS = "Analysis could not be completed."


class TurnKind(str, Enum):
    TOOL_CALLS = "tool_calls"
    PLAIN_TEXT = "plain_text"
    UNPARSABLE = "unparsable"


@dataclass
class ToolCallRequest:
    id: str
    name: str
    arguments: Dict[str, Any]


@dataclass
class ModelTurn:
    """One model response, classified so the loop can branch on its kind."""
    kind: TurnKind
    content: str = ""
    tool_calls: List[ToolCallRequest] = field(default_factory=list)
    error: Optional[str] = None

    def as_message(self) -> Dict[str, Any]:
        msg: Dict[str, Any] = {"role": "assistant", "content": self.content}
        if self.tool_calls:
            msg["tool_calls"] = [
                {
                    "id": tc.id,
                    "type": "function",
                    "function": {"name": tc.name, "arguments": json.dumps(tc.arguments)},
                }
                for tc in self.tool_calls
            ]
        return msg


@dataclass
class AnalysisOutcome:
    analysis: str
    tools_used: List[str] = field(default_factory=list)
    strava_data: Dict[str, Any] = field(default_factory=dict)


def is_tool_use_failure(exc: BadRequestError) -> bool:
    # OpenAI-compatible providers (e.g. Groq) reject malformed tool calls with code tool_use_failed
    if getattr(exc, "code", None) == "tool_use_failed":
        return True
    return "tool_use_failed" in str(exc)


def parse_tool_calls(raw_calls: Any) -> List[ToolCallRequest]:
    calls: List[ToolCallRequest] = []
    for tc in raw_calls or []:
        fn = getattr(tc, "function", None)
        name = getattr(fn, "name", None)
        if not name:
            raise ToolParseError("Tool call without a function name")
        raw_args = getattr(fn, "arguments", None) or "{}"
        try:
            args = json.loads(raw_args)
        except (TypeError, ValueError) as e:
            raise ToolParseError(f"Invalid arguments for {name}: {e}") from e
        if not isinstance(args, dict):
            raise ToolParseError(f"Arguments for {name} are not an object")
        calls.append(ToolCallRequest(id=getattr(tc, "id", None) or f"call_{len(calls)}", name=name, arguments=args))
    return calls


class ConversationOrchestrator:
    """
    Drives the model through tool selection until it answers in plain text.

    The loop is bounded by max_iterations model round trips. A turn whose tool
    call cannot be interpreted gets exactly one tool-free retry, and that
    reply ends the conversation.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        client: Optional[Any] = None,
        model: Optional[str] = None,
        max_iterations: Optional[int] = None,
        temperature: Optional[float] = None,
    ):
        self.registry = registry
        self.model = model or (settings.model_id or "gpt-4o")
        self.max_iterations = settings.max_tool_iterations if max_iterations is None else max_iterations
        self.temperature = settings.llm_temperature if temperature is None else temperature
        if client is None:
            if not settings.openai_api_key:
                raise RuntimeError("OPENAI_API_KEY not configured")
            client = OpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url or None)
        self.client = client

    def build_system_prompt(self) -> str:
        return (
            "You are a fitness data assistant with access to the user's Strava activity history. "
            "To answer, select the single most relevant tool, call it, read its result, and then "
            "report back in 1-3 plain sentences. "
            "Only use numbers that appear in tool results; never invent or estimate data. "
            "Do not write code, JSON, or markdown tables. "
            "If a tool reports that no data was found, say so plainly."
        )

    def build_messages(self, query: str) -> List[Dict[str, Any]]:
        return [
            {"role": "system", "content": self.build_system_prompt()},
            {"role": "user", "content": query},
        ]

    def request_turn(self, messages: List[Dict[str, Any]], with_tools: bool = True) -> ModelTurn:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": list(messages),
            "temperature": self.temperature,
        }
        if with_tools:
            kwargs["tools"] = self.registry.tools()
        try:
            completion = self.client.chat.completions.create(**kwargs)
        except BadRequestError as e:
            if with_tools and is_tool_use_failure(e):
                return ModelTurn(kind=TurnKind.UNPARSABLE, error=str(e))
            raise

        msg = completion.choices[0].message
        content = msg.content or ""
        try:
            calls = parse_tool_calls(getattr(msg, "tool_calls", None))
        except ToolParseError as e:
            return ModelTurn(kind=TurnKind.UNPARSABLE, content=content, error=e.message)
        if calls:
            return ModelTurn(kind=TurnKind.TOOL_CALLS, content=content, tool_calls=calls)
        return ModelTurn(kind=TurnKind.PLAIN_TEXT, content=content)

    def run_analysis(self, query: str) -> AnalysisOutcome:
        messages = self.build_messages(query)
        tools_used: List[str] = []
        strava_data: Dict[str, Any] = {}

        for iteration in range(1, self.max_iterations + 1):
            turn = self.request_turn(messages)

            if turn.kind is TurnKind.UNPARSABLE:
                logger.warning(f"Unparsable tool call on iteration {iteration}, retrying without tools: {turn.error}")
                fallback = self.request_turn(messages, with_tools=False)
                return AnalysisOutcome(analysis=fallback.content, tools_used=tools_used, strava_data=strava_data)

            messages.append(turn.as_message())
            if turn.kind is TurnKind.PLAIN_TEXT:
                logger.info(f"Analysis finished after {iteration} iteration(s), tools used: {tools_used}")
                return AnalysisOutcome(analysis=turn.content, tools_used=tools_used, strava_data=strava_data)

            for tc in turn.tool_calls:
                logger.info(f"Executing tool {tc.name} with {tc.arguments}")
                tools_used.append(tc.name)
                result = self.registry.execute(tc.name, tc.arguments)
                strava_data[tc.name] = result
                messages.append({
                    "role": "tool",
                    "tool_call_id": tc.id,
                    "name": tc.name,
                    "content": json.dumps(result),
                })

        logger.warning(f"Analysis hit the {self.max_iterations}-iteration limit, tools used: {tools_used}")
        return AnalysisOutcome(analysis=INCOMPLETE_ANALYSIS, tools_used=tools_used, strava_data=strava_data)
