"""Reconciliation of untrusted plan requests with the builder form.

This is the only path by which values proposed by the model become
``PlanParameters``. Each field is resolved independently:

- a present value from the request wins,
- otherwise the base value is kept.

"Present" means not None, not blank, and not zero. A present value that is
not valid for its field is dropped in favour of the base value. Nothing is
ever invented: every field of the result comes from one of the two inputs.
"""

from typing import Any

from loguru import logger
from pydantic import ValidationError

from hybrid_coach.coach.schemas.plan_parameters import (
    PLAN_PARAMETER_FIELDS,
    PlanParameters,
    UntrustedPlanRequest,
)


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


def reconcile_plan_parameters(
    base: PlanParameters,
    incoming: UntrustedPlanRequest | None,
) -> PlanParameters:
    """Overlay an untrusted request onto complete parameters.

    Args:
        base: Current complete parameters (the builder form)
        incoming: Partial parameters from a tool call, or None

    Returns:
        New complete PlanParameters. ``base`` is not modified.
    """
    if incoming is None:
        return base

    merged: dict[str, Any] = base.model_dump()
    overridden: list[str] = []
    rejected: list[str] = []

    for name in PLAN_PARAMETER_FIELDS:
        value = getattr(incoming, name)
        if not _is_present(value):
            continue
        try:
            candidate = PlanParameters.model_validate({**merged, name: value})
        except ValidationError:
            rejected.append(name)
            continue
        merged[name] = getattr(candidate, name)
        overridden.append(name)

    if rejected:
        logger.warning(
            "Discarded invalid values from plan request",
            rejected_fields=rejected,
        )

    result = PlanParameters.model_validate(merged)
    logger.info(
        "Plan parameters reconciled",
        overridden_fields=overridden,
        days_per_week=result.days_per_week,
        fitness_level=result.fitness_level.value,
    )
    return result
