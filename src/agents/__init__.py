"""AI Agents package."""

from src.agents.insight_agent import (
    InsightAgent,
    InsightPayload,
    InsightRequest,
    InsightResult,
    InsightServiceError,
    build_prompt,
)

__all__ = [
    "InsightAgent",
    "InsightPayload",
    "InsightRequest",
    "InsightResult",
    "InsightServiceError",
    "build_prompt",
]
