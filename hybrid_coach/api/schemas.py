from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hybrid_coach.coach.mode_coordinator import BuilderStage, Mode, ModeCoordinator
from hybrid_coach.coach.schemas.conversation import ConversationTurn
from hybrid_coach.coach.schemas.plan_document import PlanDocument
from hybrid_coach.coach.schemas.plan_parameters import PlanParameters


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CoachMessageRequest(_CamelModel):
    message: str = Field(..., max_length=8000)


class ModeChangeRequest(_CamelModel):
    mode: Mode


class CoachStateResponse(_CamelModel):
    mode: Mode
    stage: BuilderStage
    form: PlanParameters
    plan: PlanDocument | None
    notice: str | None
    turns: list[ConversationTurn]
    can_send_message: bool
    can_submit_plan: bool
    transition_pending: bool

    @classmethod
    def from_coordinator(cls, coordinator: ModeCoordinator) -> "CoachStateResponse":
        pending = coordinator.pending_transition
        return cls(
            mode=coordinator.mode,
            stage=coordinator.stage,
            form=coordinator.form,
            plan=coordinator.plan,
            notice=coordinator.notice,
            turns=list(coordinator.log.turns),
            can_send_message=coordinator.can_send_message,
            can_submit_plan=coordinator.can_submit_plan,
            transition_pending=pending is not None and not pending.done(),
        )


class CoachMessageResponse(_CamelModel):
    accepted: bool
    reply: str | None = None
    plan_requested: bool = False
    failed: bool = False
    state: CoachStateResponse
