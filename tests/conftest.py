"""Root conftest for all tests.

Provides a scripted stand-in for the generation service so coach behaviour
can be tested without network access: queue replies, payloads or
exceptions, then inspect the recorded calls.
"""

import asyncio
import json
from collections.abc import Callable, Sequence
from typing import Any

import pytest

from hybrid_coach.coach.schemas.conversation import ConversationReply, HistoryEntry, ToolCall, ToolSpec
from hybrid_coach.coach.schemas.plan_parameters import FitnessLevel, PlanParameters


class ScriptedGenerationClient:
    """GenerationClient fake driven by queued results.

    Queued exceptions are raised instead of returned. If a gate is set the
    call waits for it, which keeps the call "in flight" for concurrency tests.
    """

    def __init__(self) -> None:
        self.replies: list[ConversationReply | Exception] = []
        self.payloads: list[str | None | Exception] = []
        self.converse_calls: list[dict[str, Any]] = []
        self.synthesis_calls: list[dict[str, Any]] = []
        self.converse_gate: asyncio.Event | None = None
        self.synthesis_gate: asyncio.Event | None = None

    def queue_reply(self, text: str = "", tool_calls: Sequence[ToolCall] = ()) -> None:
        self.replies.append(ConversationReply(text=text, tool_calls=list(tool_calls)))

    async def converse(
        self,
        message: str,
        history: Sequence[HistoryEntry],
        tools: Sequence[ToolSpec],
    ) -> ConversationReply:
        self.converse_calls.append({"message": message, "history": list(history), "tools": list(tools)})
        if self.converse_gate is not None:
            await self.converse_gate.wait()
        result = self.replies.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def synthesize_structured(self, prompt: str, schema: dict[str, Any]) -> str:
        self.synthesis_calls.append({"prompt": prompt, "schema": schema})
        if self.synthesis_gate is not None:
            await self.synthesis_gate.wait()
        result = self.payloads.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def build_plan_payload(sessions: int = 4, title: str = "Hybrid Engine Block", **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "title": title,
        "durationWeeks": 8,
        "goal": "Hyrox",
        "analysis": "Concurrent training with a linear progression of threshold work.",
        "sessions": [
            {
                "day": f"Day {index}",
                "focus": f"Focus {index}",
                "warmup": [f"Row 500m easy (day {index})"],
                "mainWork": [f"Main lift {index}A 5x5 @ RPE 7", f"Main lift {index}B 3x8"],
                "accessory": [f"Accessory {index}"],
                "notes": f"Notes {index}",
            }
            for index in range(1, sessions + 1)
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def fake_client() -> ScriptedGenerationClient:
    return ScriptedGenerationClient()


@pytest.fixture
def plan_payload() -> Callable[..., str]:
    """Factory for a JSON plan payload in the wire (camelCase) format."""

    def _make(sessions: int = 4, **overrides: Any) -> str:
        return json.dumps(build_plan_payload(sessions=sessions, **overrides))

    return _make


@pytest.fixture
def strength_form() -> PlanParameters:
    return PlanParameters(
        goal="Strength",
        fitness_level=FitnessLevel.BEGINNER,
        days_per_week=3,
        equipment="Bodyweight",
        injuries="",
    )
