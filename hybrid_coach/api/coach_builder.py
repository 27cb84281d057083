"""HTTP surface for the coach chat and program builder.

Binds the routes to the single in-process ModeCoordinator stored on
``app.state.coordinator``. A busy coordinator maps to 409 Conflict.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from loguru import logger

from hybrid_coach.api.schemas import (
    CoachMessageRequest,
    CoachMessageResponse,
    CoachStateResponse,
    ModeChangeRequest,
)
from hybrid_coach.coach.errors import CoordinatorBusyError
from hybrid_coach.coach.export.plan_export import MarkdownPlanRenderer, PlanArtifact
from hybrid_coach.coach.mode_coordinator import ModeCoordinator
from hybrid_coach.coach.schemas.plan_document import PlanDocument
from hybrid_coach.coach.schemas.plan_parameters import PlanParameters

router = APIRouter(prefix="/coach", tags=["coach"])

_renderer = MarkdownPlanRenderer()


def get_coordinator(request: Request) -> ModeCoordinator:
    return request.app.state.coordinator


def _busy(e: CoordinatorBusyError) -> HTTPException:
    logger.info("Rejecting request while call is in flight", operation=e.operation)
    return HTTPException(status_code=409, detail=str(e))


def _require_plan(coordinator: ModeCoordinator) -> PlanDocument:
    if coordinator.plan is None:
        raise HTTPException(status_code=404, detail="No plan has been generated")
    return coordinator.plan


def _download(artifact: PlanArtifact) -> PlainTextResponse:
    return PlainTextResponse(
        artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@router.get("/state", response_model=CoachStateResponse)
async def get_state(coordinator: ModeCoordinator = Depends(get_coordinator)) -> CoachStateResponse:
    return CoachStateResponse.from_coordinator(coordinator)


@router.post("/messages", response_model=CoachMessageResponse)
async def send_message(
    req: CoachMessageRequest,
    coordinator: ModeCoordinator = Depends(get_coordinator),
) -> CoachMessageResponse:
    """Send a chat message to the coach."""
    logger.info("Coach message received", message_length=len(req.message))
    try:
        outcome = await coordinator.send_message(req.message)
    except CoordinatorBusyError as e:
        raise _busy(e) from e

    return CoachMessageResponse(
        accepted=outcome.accepted,
        reply=outcome.reply.text if outcome.reply else None,
        plan_requested=outcome.plan_request is not None,
        failed=outcome.error is not None,
        state=CoachStateResponse.from_coordinator(coordinator),
    )


@router.post("/mode", response_model=CoachStateResponse)
async def change_mode(
    req: ModeChangeRequest,
    coordinator: ModeCoordinator = Depends(get_coordinator),
) -> CoachStateResponse:
    coordinator.navigate(req.mode)
    return CoachStateResponse.from_coordinator(coordinator)


@router.put("/plan/form", response_model=CoachStateResponse)
async def update_form(
    params: PlanParameters,
    coordinator: ModeCoordinator = Depends(get_coordinator),
) -> CoachStateResponse:
    try:
        coordinator.update_form(params)
    except CoordinatorBusyError as e:
        raise _busy(e) from e
    return CoachStateResponse.from_coordinator(coordinator)


@router.post("/plan", response_model=CoachStateResponse)
async def submit_plan(
    params: PlanParameters | None = None,
    coordinator: ModeCoordinator = Depends(get_coordinator),
) -> CoachStateResponse:
    """Generate a plan from the builder form (optionally replacing it first).

    A failed generation is reported through ``notice`` with the form kept.
    """
    try:
        await coordinator.submit_form(params)
    except CoordinatorBusyError as e:
        raise _busy(e) from e
    return CoachStateResponse.from_coordinator(coordinator)


@router.post("/plan/reset", response_model=CoachStateResponse)
async def start_new_plan(coordinator: ModeCoordinator = Depends(get_coordinator)) -> CoachStateResponse:
    try:
        coordinator.start_new_plan()
    except CoordinatorBusyError as e:
        raise _busy(e) from e
    return CoachStateResponse.from_coordinator(coordinator)


@router.post("/notice/dismiss", response_model=CoachStateResponse)
async def dismiss_notice(coordinator: ModeCoordinator = Depends(get_coordinator)) -> CoachStateResponse:
    coordinator.dismiss_notice()
    return CoachStateResponse.from_coordinator(coordinator)


@router.get("/plan/schedule", response_class=PlainTextResponse)
async def download_schedule(coordinator: ModeCoordinator = Depends(get_coordinator)) -> PlainTextResponse:
    return _download(_renderer.render_schedule(_require_plan(coordinator)))


@router.get("/plan/analysis", response_class=PlainTextResponse)
async def download_analysis(coordinator: ModeCoordinator = Depends(get_coordinator)) -> PlainTextResponse:
    return _download(_renderer.render_analysis(_require_plan(coordinator)))
