"""Plan synthesis pipeline.

Builds the plan prompt from complete parameters, requests a
schema-constrained generation, and parses the payload into a PlanDocument.

The generation service is trusted to follow the schema. Beyond a successful
parse, nothing is re-validated: session counts, empty exercise lists and
numeric sanity are accepted as-is (mismatches are logged). Either a complete
PlanDocument is returned or an error is raised.
"""

from loguru import logger
from pydantic import ValidationError

from hybrid_coach.coach.errors import EmptyResponse, SchemaViolation
from hybrid_coach.coach.prompts.coach_prompts import PLAN_PROMPT_TEMPLATE
from hybrid_coach.coach.schemas.plan_document import PLAN_RESPONSE_SCHEMA, PlanDocument
from hybrid_coach.coach.schemas.plan_parameters import PlanParameters
from hybrid_coach.services.llm.generation_client import GenerationClient


def build_plan_prompt(params: PlanParameters) -> str:
    """Render the plan generation prompt. Empty injuries render as "None"."""
    return PLAN_PROMPT_TEMPLATE.format(
        goal=params.goal,
        fitness_level=params.fitness_level.value,
        days_per_week=params.days_per_week,
        equipment=params.equipment,
        injuries=params.injuries or "None",
    )


def parse_plan_document(payload: str | None) -> PlanDocument:
    """Parse a structured payload into a PlanDocument.

    Raises:
        EmptyResponse: If there is no payload
        SchemaViolation: If the payload does not parse into a PlanDocument
    """
    if payload is None or not payload.strip():
        raise EmptyResponse("No data returned from plan generation")
    try:
        return PlanDocument.model_validate_json(payload)
    except ValidationError as e:
        logger.warning(
            "Plan payload does not match the plan schema",
            error_count=e.error_count(),
            payload_length=len(payload),
        )
        raise SchemaViolation(f"Plan payload does not match the plan schema: {e}", payload=payload) from e


class PlanSynthesizer:
    """Turns complete plan parameters into a PlanDocument.

    Holds no per-request state: each call builds its own prompt and returns a
    new document.
    """

    def __init__(self, client: GenerationClient) -> None:
        self.client = client

    async def synthesize(self, params: PlanParameters) -> PlanDocument:
        """Generate a plan document.

        Raises:
            TransportError: If the generation service is unreachable
            ServiceRejection: If the generation service refuses
            EmptyResponse: If no payload was returned
            SchemaViolation: If the payload does not parse
        """
        logger.info(
            "Synthesizing workout plan",
            goal=params.goal,
            fitness_level=params.fitness_level.value,
            days_per_week=params.days_per_week,
        )
        prompt = build_plan_prompt(params)
        payload = await self.client.synthesize_structured(prompt, PLAN_RESPONSE_SCHEMA)
        plan = parse_plan_document(payload)

        if len(plan.sessions) != params.days_per_week:
            logger.warning(
                "Generated plan session count differs from requested days per week",
                sessions=len(plan.sessions),
                days_per_week=params.days_per_week,
            )

        logger.info(
            "Workout plan synthesized",
            title=plan.title,
            duration_weeks=plan.duration_weeks,
            sessions=len(plan.sessions),
        )
        return plan
