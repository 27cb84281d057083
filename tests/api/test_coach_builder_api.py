"""HTTP tests for the coach chat / program builder routes."""

import pytest
from fastapi.testclient import TestClient

from hybrid_coach.coach.errors import TransportError
from hybrid_coach.coach.mode_coordinator import ModeCoordinator
from hybrid_coach.coach.prompts.coach_prompts import BUILDER_NOTICE, PLAN_FAILURE_NOTICE, PLAN_TOOL_NAME
from hybrid_coach.coach.schemas.conversation import ToolCall
from hybrid_coach.main import create_app


@pytest.fixture
def coordinator(fake_client) -> ModeCoordinator:
    return ModeCoordinator(fake_client, transition_delay=0)


@pytest.fixture
def client(coordinator):
    with TestClient(create_app(coordinator)) as test_client:
        yield test_client


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_initial_state(client):
    body = client.get("/coach/state").json()

    assert body["mode"] == "chat"
    assert body["stage"] == "input"
    assert body["plan"] is None
    assert body["form"]["daysPerWeek"] == 4
    assert body["canSendMessage"] is True
    assert len(body["turns"]) == 1


def test_chat_message_triggers_plan(client, fake_client, plan_payload):
    fake_client.queue_reply(
        "Coming right up.",
        [ToolCall(name=PLAN_TOOL_NAME, args={"goal": "Hyrox", "daysPerWeek": 4, "equipment": "dumbbells only"})],
    )
    fake_client.payloads.append(plan_payload(sessions=4))

    response = client.post("/coach/messages", json={"message": "4-day Hyrox plan, dumbbells only"})

    assert response.status_code == 200
    body = response.json()
    assert body["accepted"] is True
    assert body["reply"] == "Coming right up."
    assert body["planRequested"] is True
    assert body["failed"] is False
    assert body["state"]["turns"][-1]["text"] == BUILDER_NOTICE
    assert body["state"]["mode"] == "builder"
    assert body["state"]["stage"] == "result"
    assert body["state"]["form"]["equipment"] == "dumbbells only"
    assert len(body["state"]["plan"]["sessions"]) == 4


def test_blank_message_not_accepted(client, fake_client):
    body = client.post("/coach/messages", json={"message": "  "}).json()

    assert body["accepted"] is False
    assert fake_client.converse_calls == []


def test_chat_failure_is_reported(client, fake_client):
    fake_client.replies.append(TransportError("offline"))

    body = client.post("/coach/messages", json={"message": "Hi"}).json()

    assert body["failed"] is True
    assert body["reply"].startswith("Error connecting")


def test_submit_form_and_download(client, fake_client, plan_payload):
    fake_client.payloads.append(plan_payload(sessions=3, title="Strength Base"))
    form = {
        "goal": "Strength",
        "fitnessLevel": "Beginner",
        "daysPerWeek": 3,
        "equipment": "Bodyweight",
        "injuries": "",
    }

    body = client.post("/coach/plan", json=form).json()

    assert body["mode"] == "builder"
    assert body["stage"] == "result"
    assert body["form"] == form
    assert "- Fitness Level: Beginner" in fake_client.synthesis_calls[0]["prompt"]

    schedule = client.get("/coach/plan/schedule")
    assert schedule.status_code == 200
    assert schedule.headers["content-type"].startswith("text/markdown")
    assert 'filename="strength_base_schedule.md"' in schedule.headers["content-disposition"]
    assert "## 1. Day 1: Focus 1" in schedule.text

    analysis = client.get("/coach/plan/analysis")
    assert analysis.status_code == 200
    assert "Program Analysis" in analysis.text


def test_submit_failure_keeps_form(client, fake_client):
    fake_client.payloads.append(TransportError("offline"))

    body = client.post("/coach/plan").json()

    assert body["stage"] == "input"
    assert body["notice"] == PLAN_FAILURE_NOTICE
    assert body["plan"] is None

    dismissed = client.post("/coach/notice/dismiss").json()
    assert dismissed["notice"] is None


def test_invalid_form_is_rejected(client):
    response = client.put(
        "/coach/plan/form",
        json={"goal": "Strength", "fitnessLevel": "Beginner", "daysPerWeek": 9, "equipment": "Bodyweight"},
    )

    assert response.status_code == 422


def test_update_form(client):
    body = client.put(
        "/coach/plan/form",
        json={"goal": "Marathon", "fitnessLevel": "advanced", "daysPerWeek": 5, "equipment": "Road"},
    ).json()

    assert body["form"]["goal"] == "Marathon"
    assert body["form"]["fitnessLevel"] == "Advanced"
    assert body["stage"] == "input"


@pytest.mark.parametrize("path", ["/coach/plan/schedule", "/coach/plan/analysis"])
def test_download_without_plan_is_404(client, path):
    assert client.get(path).status_code == 404


def test_reset_and_mode_change(client, fake_client, plan_payload):
    fake_client.payloads.append(plan_payload())
    client.post("/coach/plan")

    reset = client.post("/coach/plan/reset").json()
    assert reset["plan"] is None
    assert reset["stage"] == "input"

    chat = client.post("/coach/mode", json={"mode": "chat"}).json()
    assert chat["mode"] == "chat"

    assert client.post("/coach/mode", json={"mode": "settings"}).status_code == 422
