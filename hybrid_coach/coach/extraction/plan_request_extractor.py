"""Extraction of plan requests from conversational replies.

The extractor only decodes. It never validates argument values and never
raises on unexpected tool signals, so ordinary chat is never blocked by it.
"""

from loguru import logger

from hybrid_coach.coach.prompts.coach_prompts import PLAN_TOOL_NAME
from hybrid_coach.coach.schemas.conversation import ConversationReply
from hybrid_coach.coach.schemas.plan_parameters import UntrustedPlanRequest


def extract_plan_request(reply: ConversationReply) -> UntrustedPlanRequest | None:
    """Return the plan request carried by a reply, if any.

    Only the first tool call of a reply is considered; later calls in the
    same reply are discarded. A first call to any tool other than
    ``create_workout_plan`` means no plan request.

    Args:
        reply: Conversational reply from the generation client

    Returns:
        UntrustedPlanRequest with the raw arguments, or None
    """
    call = reply.tool_call
    if call is None:
        return None

    if len(reply.tool_calls) > 1:
        logger.debug(
            "Discarding additional tool calls in reply",
            discarded=[extra.name for extra in reply.tool_calls[1:]],
        )

    if call.name != PLAN_TOOL_NAME:
        logger.info("Ignoring unrecognized tool call", tool_name=call.name)
        return None

    request = UntrustedPlanRequest.from_tool_args(call.args)
    logger.info(
        "Plan request extracted from reply",
        provided_fields=request.provided_fields(),
        extra_keys=sorted(request.extras),
    )
    return request
