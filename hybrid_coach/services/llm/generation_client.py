"""Generation client for the remote LLM service.

This layer does not "think" and does not parse. It offers exactly two
operations:

- ``converse``: one conversational turn, with tools the model may invoke.
  Tool calls are returned to the caller, never executed here.
- ``synthesize_structured``: one schema-constrained generation, returned as
  the raw JSON text.

Every call is a single outbound request. No caching, no retries, no streaming.
Provider failures are mapped onto TransportError / ServiceRejection.
"""

import json
from collections.abc import Callable, Sequence
from typing import Any, Protocol

from loguru import logger
from pydantic_ai.direct import model_request
from pydantic_ai.exceptions import ModelHTTPError, UnexpectedModelBehavior
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    ToolCallPart,
    UserPromptPart,
)
from pydantic_ai.models import Model, ModelRequestParameters, OutputObjectDefinition
from pydantic_ai.tools import ToolDefinition

from hybrid_coach.coach.errors import ServiceRejection, TransportError
from hybrid_coach.coach.prompts.coach_prompts import COACH_SYSTEM_INSTRUCTION
from hybrid_coach.coach.schemas.conversation import ConversationReply, HistoryEntry, Role, ToolCall, ToolSpec
from hybrid_coach.config.settings import settings
from hybrid_coach.services.llm.model import get_model

# Status codes the service uses to refuse a request (bad/filtered input, forbidden, quota)
REJECTION_STATUS_CODES = frozenset({400, 403, 429})

STRUCTURED_SCHEMA_NAME = "workout_plan"


class GenerationClient(Protocol):
    """The two operations the coach needs from a generation service."""

    async def converse(
        self,
        message: str,
        history: Sequence[HistoryEntry],
        tools: Sequence[ToolSpec],
    ) -> ConversationReply: ...

    async def synthesize_structured(self, prompt: str, schema: dict[str, Any]) -> str: ...


def build_message_history(
    system_instruction: str,
    history: Sequence[HistoryEntry],
    message: str,
) -> list[ModelMessage]:
    """Convert coach history into pydantic_ai messages.

    Empty turns are skipped. The new user message is always last.
    """
    messages: list[ModelMessage] = [ModelRequest(parts=[SystemPromptPart(content=system_instruction)])]
    for entry in history:
        if not entry.text:
            continue
        if entry.role == Role.USER:
            messages.append(ModelRequest(parts=[UserPromptPart(content=entry.text)]))
        else:
            messages.append(ModelResponse(parts=[TextPart(content=entry.text)]))
    messages.append(ModelRequest(parts=[UserPromptPart(content=message)]))
    return messages


def _tool_definition(tool: ToolSpec) -> ToolDefinition:
    return ToolDefinition(
        name=tool.name,
        description=tool.description,
        parameters_json_schema=tool.parameters,
    )


def _decode_tool_args(part: ToolCallPart) -> dict[str, Any]:
    """Decode tool call arguments without validating them.

    Arguments that are not a JSON object are kept under ``_raw``.
    """
    raw = part.args
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return dict(raw)
    try:
        decoded = json.loads(raw)
    except ValueError:
        logger.warning("Tool call arguments are not valid JSON", tool_name=part.tool_name)
        return {"_raw": raw}
    if isinstance(decoded, dict):
        return decoded
    return {"_raw": decoded}


def _response_text(response: ModelResponse) -> str:
    return "".join(part.content for part in response.parts if isinstance(part, TextPart))


class PydanticAIGenerationClient:
    """Generation client backed by pydantic_ai direct model requests.

    Models are resolved lazily so the client can be created before
    credentials are configured. Pass ``chat_model``/``synthesis_model`` to
    use a specific pydantic_ai model (e.g. ``FunctionModel`` in tests).
    """

    def __init__(
        self,
        chat_model: Model | None = None,
        synthesis_model: Model | None = None,
        *,
        system_instruction: str = COACH_SYSTEM_INSTRUCTION,
        provider: str | None = None,
    ) -> None:
        self._chat_model = chat_model
        self._synthesis_model = synthesis_model
        self.system_instruction = system_instruction
        self.provider = provider or settings.llm_provider

    def _get_chat_model(self) -> Model:
        if self._chat_model is None:
            self._chat_model = get_model(self.provider, settings.coach_chat_model)
        return self._chat_model

    def _get_synthesis_model(self) -> Model:
        if self._synthesis_model is None:
            self._synthesis_model = get_model(self.provider, settings.plan_synthesis_model)
        return self._synthesis_model

    async def converse(
        self,
        message: str,
        history: Sequence[HistoryEntry],
        tools: Sequence[ToolSpec],
    ) -> ConversationReply:
        """Run one conversational turn.

        Raises:
            TransportError: If the service is unreachable or fails
            ServiceRejection: If the service refuses to answer
        """
        messages = build_message_history(self.system_instruction, history, message)
        parameters = ModelRequestParameters(function_tools=[_tool_definition(tool) for tool in tools])

        logger.debug(
            "Sending conversational request",
            history_length=len(history),
            tool_names=[tool.name for tool in tools],
        )
        response = await self._request("converse", self._get_chat_model, messages, parameters)

        tool_calls = [
            ToolCall(name=part.tool_name, args=_decode_tool_args(part))
            for part in response.parts
            if isinstance(part, ToolCallPart)
        ]
        reply = ConversationReply(text=_response_text(response), tool_calls=tool_calls)
        logger.info(
            "Conversational response received",
            text_length=len(reply.text),
            tool_calls=[call.name for call in tool_calls],
        )
        return reply

    async def synthesize_structured(self, prompt: str, schema: dict[str, Any]) -> str:
        """Request a JSON document conforming to ``schema`` and return the raw text.

        Raises:
            TransportError: If the service is unreachable or fails
            ServiceRejection: If the service refuses to answer
        """
        messages: list[ModelMessage] = [
            ModelRequest(
                parts=[
                    SystemPromptPart(content=self.system_instruction),
                    UserPromptPart(content=prompt),
                ]
            )
        ]
        parameters = ModelRequestParameters(
            output_mode="native",
            output_object=OutputObjectDefinition(json_schema=schema, name=STRUCTURED_SCHEMA_NAME),
        )

        logger.debug(f"LLM Prompt: Plan Synthesis\n{prompt}")
        response = await self._request("synthesize_structured", self._get_synthesis_model, messages, parameters)
        payload = _response_text(response)
        logger.info("Structured response received", payload_length=len(payload))
        return payload

    async def _request(
        self,
        operation: str,
        resolve_model: Callable[[], Model],
        messages: list[ModelMessage],
        parameters: ModelRequestParameters,
    ) -> ModelResponse:
        try:
            model = resolve_model()
            response = await model_request(model, messages, model_request_parameters=parameters)
        except ModelHTTPError as e:
            if e.status_code in REJECTION_STATUS_CODES:
                logger.warning(
                    "Generation service rejected request",
                    operation=operation,
                    status_code=e.status_code,
                    model_name=e.model_name,
                )
                raise ServiceRejection(f"Generation service rejected the request: {e}", status_code=e.status_code) from e
            logger.error("Generation service error", operation=operation, status_code=e.status_code)
            raise TransportError(f"Generation service error: {e}") from e
        except UnexpectedModelBehavior as e:
            logger.warning(f"Generation service returned an unusable {operation} response: {e}")
            raise ServiceRejection(f"Generation service declined to answer: {e}") from e
        except Exception as e:
            logger.exception(f"Generation request failed during {operation}: {e}")
            raise TransportError(f"Generation request failed: {e}") from e

        if response.finish_reason == "content_filter":
            logger.warning(f"Generation service filtered the {operation} response")
            raise ServiceRejection("Generation service filtered the response")
        return response
