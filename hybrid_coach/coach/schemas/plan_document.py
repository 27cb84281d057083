"""Workout plan document schema.

``PLAN_RESPONSE_SCHEMA`` is the JSON schema sent to the generation service for
structured output. ``PlanDocument`` is what the payload is parsed into. The
document is trusted to follow the schema structurally; session counts,
empty session lists and numeric sanity are not checked.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WorkoutSession(BaseModel):
    """One training day of a plan."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    day: str
    focus: str
    warmup: list[str]
    main_work: list[str]
    accessory: list[str]
    notes: str = ""


class PlanDocument(BaseModel):
    """A generated training program. Immutable once produced."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    title: str
    duration_weeks: int
    goal: str
    analysis: str = Field(..., description="Scientific explanation of the program structure")
    sessions: list[WorkoutSession]


_STRING_LIST: dict[str, Any] = {"type": "array", "items": {"type": "string"}}

PLAN_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "durationWeeks": {"type": "number"},
        "goal": {"type": "string"},
        "analysis": {
            "type": "string",
            "description": "A comprehensive scientific breakdown of the program logic.",
        },
        "sessions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "day": {"type": "string"},
                    "focus": {"type": "string"},
                    "warmup": _STRING_LIST,
                    "mainWork": _STRING_LIST,
                    "accessory": _STRING_LIST,
                    "notes": {"type": "string"},
                },
                "required": ["day", "focus", "warmup", "mainWork", "accessory"],
            },
        },
    },
    "required": ["title", "durationWeeks", "goal", "sessions", "analysis"],
}
