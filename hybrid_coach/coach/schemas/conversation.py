"""Conversation schemas.

ConversationTurn is immutable. ConversationLog only ever grows: it has no API
for removing or replacing turns.
"""

from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class Role(StrEnum):
    USER = "user"
    MODEL = "model"


class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    role: Role
    text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class HistoryEntry(BaseModel):
    """Role and text of a prior turn, as sent to the generation service."""

    model_config = ConfigDict(frozen=True)

    role: Role
    text: str


class ToolSpec(BaseModel):
    """Declaration of a tool the conversational model may invoke."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: dict[str, Any]


class ToolCall(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class ConversationReply(BaseModel):
    """Result of one conversational generation: text plus any tool calls, in order."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)

    @property
    def tool_call(self) -> ToolCall | None:
        return self.tool_calls[0] if self.tool_calls else None


class ConversationLog:
    """Append-only, ordered log of conversation turns."""

    def __init__(self, turns: Iterable[ConversationTurn] = ()) -> None:
        self._turns: list[ConversationTurn] = list(turns)

    def append(self, turn: ConversationTurn) -> ConversationTurn:
        self._turns.append(turn)
        return turn

    def add(self, role: Role, text: str) -> ConversationTurn:
        """Create a turn and append it."""
        return self.append(ConversationTurn(role=role, text=text))

    def recent(self, limit: int) -> list[HistoryEntry]:
        """Role and text of the most recent ``limit`` turns, oldest first."""
        if limit <= 0:
            return []
        return [HistoryEntry(role=turn.role, text=turn.text) for turn in self._turns[-limit:]]

    @property
    def turns(self) -> tuple[ConversationTurn, ...]:
        return tuple(self._turns)

    @property
    def last(self) -> ConversationTurn | None:
        return self._turns[-1] if self._turns else None

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(tuple(self._turns))

    def __getitem__(self, index: int) -> ConversationTurn:
        return self._turns[index]
