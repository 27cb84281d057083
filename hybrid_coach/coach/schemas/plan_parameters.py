"""Plan parameter schemas.

Two representations of the same five fields exist:

- ``PlanParameters`` is complete and validated. It is what the builder form
  holds and the only input the plan synthesis pipeline accepts.
- ``UntrustedPlanRequest`` is whatever the model put into a
  ``create_workout_plan`` call. Every field is optional and unvalidated.
  It only becomes a ``PlanParameters`` through the reconciler.
"""

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class FitnessLevel(StrEnum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    ELITE = "Elite"


MIN_DAYS_PER_WEEK = 3
MAX_DAYS_PER_WEEK = 6


class PlanParameters(BaseModel):
    """Complete set of parameters for one plan generation request."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    goal: str = Field(..., min_length=1, description="Training goal (e.g., Hyrox, Marathon, Strength)")
    fitness_level: FitnessLevel = Field(..., description="Beginner, Intermediate, Advanced, or Elite")
    days_per_week: int = Field(..., ge=MIN_DAYS_PER_WEEK, le=MAX_DAYS_PER_WEEK)
    equipment: str = Field(..., min_length=1, description="Available equipment")
    injuries: str = Field(default="", description="Injuries or limitations, empty when none")

    @field_validator("fitness_level", mode="before")
    @classmethod
    def normalize_fitness_level(cls, value: Any) -> Any:
        """Match fitness level names case-insensitively."""
        if isinstance(value, str):
            wanted = value.strip().lower()
            for level in FitnessLevel:
                if level.value.lower() == wanted:
                    return level
        return value


DEFAULT_PLAN_PARAMETERS = PlanParameters(
    goal="Improve Hyrox Time",
    fitness_level=FitnessLevel.INTERMEDIATE,
    days_per_week=4,
    equipment="Full Gym (CrossFit Box)",
    injuries="",
)

PLAN_PARAMETER_FIELDS = ("goal", "fitness_level", "days_per_week", "equipment", "injuries")


class UntrustedPlanRequest(BaseModel):
    """Partial plan parameters decoded from a model tool call.

    Values are kept exactly as the model sent them. Argument keys that do not
    name a plan parameter are kept in ``extras``.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    goal: Any = None
    fitness_level: Any = None
    days_per_week: Any = None
    equipment: Any = None
    injuries: Any = None
    extras: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_tool_args(cls, args: Mapping[str, Any]) -> "UntrustedPlanRequest":
        """Decode tool call arguments by name, accepting camelCase or snake_case keys."""
        by_key = {to_camel(name): name for name in PLAN_PARAMETER_FIELDS}
        by_key.update({name: name for name in PLAN_PARAMETER_FIELDS})

        fields: dict[str, Any] = {}
        extras: dict[str, Any] = {}
        for key, value in args.items():
            name = by_key.get(key)
            if name is None:
                extras[key] = value
            else:
                fields[name] = value
        return cls(**fields, extras=extras)

    def provided_fields(self) -> list[str]:
        """Names of plan parameters the model actually supplied."""
        return [name for name in PLAN_PARAMETER_FIELDS if getattr(self, name) is not None]
