"""Mode coordinator.

Two-state machine (CHAT, BUILDER) that sequences a conversational turn:

    user message -> converse -> extract -> (notice, delayed switch to BUILDER)
    BUILDER entry with a request -> reconcile with form -> synthesize

The coordinator is the single owner of the conversation log, the builder
form, the current plan and the mode. It is the only layer that turns
generation errors into user-visible messages: chat failures become an
apology turn, synthesis failures become a notice with the form preserved.

Concurrency: at most one conversational call and one synthesis call are in
flight per coordinator. A second request of the same kind raises
CoordinatorBusyError instead of queuing. Nothing cancels a call in flight.
A pending delayed switch to BUILDER is cancelled by any explicit user
action: navigation, builder entry, form update, submit or new plan.
"""

import asyncio
from dataclasses import dataclass
from enum import StrEnum

from loguru import logger

from hybrid_coach.coach.errors import CoordinatorBusyError, GenerationError
from hybrid_coach.coach.extraction.plan_request_extractor import extract_plan_request
from hybrid_coach.coach.planning.plan_synthesis import PlanSynthesizer
from hybrid_coach.coach.planning.reconciler import reconcile_plan_parameters
from hybrid_coach.coach.prompts.coach_prompts import (
    BUILDER_NOTICE,
    CHAT_APOLOGY,
    PLAN_FAILURE_NOTICE,
    PLAN_TOOL,
    WELCOME_MESSAGE,
)
from hybrid_coach.coach.schemas.conversation import ConversationLog, ConversationTurn, Role
from hybrid_coach.coach.schemas.plan_document import PlanDocument
from hybrid_coach.coach.schemas.plan_parameters import DEFAULT_PLAN_PARAMETERS, PlanParameters, UntrustedPlanRequest
from hybrid_coach.config.settings import settings
from hybrid_coach.services.llm.generation_client import GenerationClient


class Mode(StrEnum):
    CHAT = "chat"
    BUILDER = "builder"


class BuilderStage(StrEnum):
    INPUT = "input"
    GENERATING = "generating"
    RESULT = "result"


@dataclass(frozen=True)
class TurnOutcome:
    """What happened during one user message."""

    accepted: bool
    reply: ConversationTurn | None = None
    plan_request: UntrustedPlanRequest | None = None
    error: GenerationError | None = None


class ModeCoordinator:
    def __init__(
        self,
        client: GenerationClient,
        synthesizer: PlanSynthesizer | None = None,
        *,
        form: PlanParameters | None = None,
        history_window: int | None = None,
        transition_delay: float | None = None,
    ) -> None:
        self.client = client
        self.synthesizer = synthesizer or PlanSynthesizer(client)
        self.history_window = settings.chat_history_window if history_window is None else history_window
        self.transition_delay = settings.builder_transition_delay if transition_delay is None else transition_delay

        self._mode = Mode.CHAT
        self._stage = BuilderStage.INPUT
        self._form = form or DEFAULT_PLAN_PARAMETERS
        self._plan: PlanDocument | None = None
        self._notice: str | None = None
        self._last_error: GenerationError | None = None
        self._log = ConversationLog([ConversationTurn(role=Role.MODEL, text=WELCOME_MESSAGE)])

        self._chat_lock = asyncio.Lock()
        self._synthesis_lock = asyncio.Lock()
        self._pending_transition: asyncio.Task | None = None

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def stage(self) -> BuilderStage:
        return self._stage

    @property
    def form(self) -> PlanParameters:
        return self._form

    @property
    def plan(self) -> PlanDocument | None:
        return self._plan

    @property
    def notice(self) -> str | None:
        return self._notice

    @property
    def last_error(self) -> GenerationError | None:
        return self._last_error

    @property
    def log(self) -> ConversationLog:
        return self._log

    @property
    def can_send_message(self) -> bool:
        return not self._chat_lock.locked()

    @property
    def can_submit_plan(self) -> bool:
        return not self._synthesis_lock.locked()

    @property
    def pending_transition(self) -> asyncio.Task | None:
        return self._pending_transition

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    async def send_message(self, text: str) -> TurnOutcome:
        """Handle one user message.

        Generation errors never escape: they are logged and answered with a
        single apology turn.

        Raises:
            CoordinatorBusyError: If a conversational call is already in flight
        """
        if not text or not text.strip():
            return TurnOutcome(accepted=False)
        if self._chat_lock.locked():
            raise CoordinatorBusyError("converse")

        async with self._chat_lock:
            history = self._log.recent(self.history_window)
            self._log.add(Role.USER, text)

            try:
                reply = await self.client.converse(text, history, [PLAN_TOOL])
            except GenerationError as e:
                logger.warning(
                    "Conversational turn failed",
                    error_type=type(e).__name__,
                    history_length=len(history),
                )
                apology = self._log.add(Role.MODEL, CHAT_APOLOGY)
                return TurnOutcome(accepted=True, reply=apology, error=e)

            reply_turn = self._log.add(Role.MODEL, reply.text) if reply.text else None
            plan_request = extract_plan_request(reply)
            if plan_request is not None:
                self._log.add(Role.MODEL, BUILDER_NOTICE)

        if plan_request is not None:
            await self._schedule_builder_transition(plan_request)

        return TurnOutcome(accepted=True, reply=reply_turn, plan_request=plan_request)

    async def _schedule_builder_transition(self, request: UntrustedPlanRequest) -> None:
        self._cancel_pending_transition()
        if self.transition_delay <= 0:
            await self._auto_enter_builder(request)
            return
        logger.debug("Scheduling builder transition", delay_seconds=self.transition_delay)
        self._pending_transition = asyncio.create_task(self._delayed_enter_builder(request))

    async def _delayed_enter_builder(self, request: UntrustedPlanRequest) -> None:
        await asyncio.sleep(self.transition_delay)
        # From here on the transition has fired and is no longer cancellable
        self._pending_transition = None
        await self._auto_enter_builder(request)

    async def _auto_enter_builder(self, request: UntrustedPlanRequest) -> None:
        try:
            await self.enter_builder(request)
        except CoordinatorBusyError:
            logger.warning("Dropping plan request from chat: a plan is already being generated")

    def _cancel_pending_transition(self) -> None:
        task = self._pending_transition
        self._pending_transition = None
        if task is not None and not task.done():
            task.cancel()
            logger.info("Cancelled pending builder transition")

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def navigate(self, mode: Mode) -> None:
        """Explicit user navigation.

        Cancels a delayed switch to BUILDER that has not fired yet. A plan
        generation already in flight keeps running and still publishes its
        result to the builder.
        """
        self._cancel_pending_transition()
        if mode != self._mode:
            logger.info("Mode changed by user", from_mode=self._mode.value, to_mode=mode.value)
        self._mode = Mode(mode)

    async def enter_builder(self, payload: UntrustedPlanRequest | None = None) -> PlanDocument | None:
        """Switch to BUILDER.

        With a payload the form is reconciled with it and generation starts
        immediately. Without one this is a user action: a pending delayed
        switch is cancelled and the builder waits for an explicit submit.

        Raises:
            CoordinatorBusyError: If a payload arrives while a plan is being generated
        """
        if payload is None:
            self._cancel_pending_transition()
            self._mode = Mode.BUILDER
            return self._plan
        if self._synthesis_lock.locked():
            raise CoordinatorBusyError("synthesize")

        self._mode = Mode.BUILDER
        self._form = reconcile_plan_parameters(self._form, payload)
        return await self._run_synthesis()

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------

    def update_form(self, params: PlanParameters) -> None:
        """Replace the builder form without generating.

        Raises:
            CoordinatorBusyError: If a plan is being generated
        """
        if self._synthesis_lock.locked():
            raise CoordinatorBusyError("synthesize")
        self._cancel_pending_transition()
        self._form = params

    async def submit_form(self, params: PlanParameters | None = None) -> PlanDocument | None:
        """Generate a plan from the form, optionally replacing the form first.

        Returns:
            The new plan, or None if generation failed (see ``notice``)

        Raises:
            CoordinatorBusyError: If a plan is already being generated
        """
        if self._synthesis_lock.locked():
            raise CoordinatorBusyError("synthesize")
        self._cancel_pending_transition()
        if params is not None:
            self._form = params
        self._mode = Mode.BUILDER
        return await self._run_synthesis()

    async def _run_synthesis(self) -> PlanDocument | None:
        if self._synthesis_lock.locked():
            raise CoordinatorBusyError("synthesize")

        async with self._synthesis_lock:
            params = self._form
            self._stage = BuilderStage.GENERATING
            self._plan = None
            self._notice = None
            self._last_error = None

            try:
                plan = await self.synthesizer.synthesize(params)
            except GenerationError as e:
                logger.warning(
                    "Plan generation failed, returning to form",
                    error_type=type(e).__name__,
                    goal=params.goal,
                )
                self._stage = BuilderStage.INPUT
                self._notice = PLAN_FAILURE_NOTICE
                self._last_error = e
                return None

            self._plan = plan
            self._stage = BuilderStage.RESULT
            return plan

    def start_new_plan(self) -> None:
        """Discard the current plan and return to the form. Form values are kept.

        Raises:
            CoordinatorBusyError: If a plan is being generated
        """
        if self._synthesis_lock.locked():
            raise CoordinatorBusyError("synthesize")
        self._cancel_pending_transition()
        self._plan = None
        self._notice = None
        self._stage = BuilderStage.INPUT

    def dismiss_notice(self) -> None:
        self._notice = None

    async def aclose(self) -> None:
        """Cancel a pending builder transition and wait for it to finish."""
        task = self._pending_transition
        self._cancel_pending_transition()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
