"""Plan export.

Renders a PlanDocument into two independent downloadable artifacts: the
training schedule and the scientific analysis. Rendering is a pure function
of the plan; nothing flows back into the coach.
"""

import re
from dataclasses import dataclass
from typing import Protocol

from hybrid_coach.coach.schemas.plan_document import PlanDocument, WorkoutSession

MARKDOWN_MEDIA_TYPE = "text/markdown"


@dataclass(frozen=True)
class PlanArtifact:
    filename: str
    content: str
    media_type: str = MARKDOWN_MEDIA_TYPE


class PlanRenderer(Protocol):
    def render_schedule(self, plan: PlanDocument) -> PlanArtifact: ...

    def render_analysis(self, plan: PlanDocument) -> PlanArtifact: ...


def plan_slug(title: str) -> str:
    """File-name-safe slug for a plan title."""
    slug = re.sub(r"[^a-z0-9]+", "_", title.lower()).strip("_")
    return slug or "workout_plan"


def _format_block(heading: str, items: list[str]) -> list[str]:
    lines = [f"**{heading}**", ""]
    if items:
        lines.extend(f"- {item}" for item in items)
    else:
        lines.append("- (none)")
    lines.append("")
    return lines


def _format_session(index: int, session: WorkoutSession) -> list[str]:
    lines = [f"## {index}. {session.day}: {session.focus}", ""]
    lines.extend(_format_block("Warm-up", session.warmup))
    lines.extend(_format_block("Main Work", session.main_work))
    lines.extend(_format_block("Accessory", session.accessory))
    if session.notes:
        lines.extend([f"> {session.notes}", ""])
    return lines


class MarkdownPlanRenderer:
    """Renders plans as Markdown documents, sessions in plan order."""

    def render_schedule(self, plan: PlanDocument) -> PlanArtifact:
        lines = [
            f"# {plan.title}",
            "",
            f"**Goal:** {plan.goal}  ",
            f"**Duration:** {plan.duration_weeks} weeks  ",
            f"**Sessions per week:** {len(plan.sessions)}",
            "",
        ]
        for index, session in enumerate(plan.sessions, start=1):
            lines.extend(_format_session(index, session))

        return PlanArtifact(
            filename=f"{plan_slug(plan.title)}_schedule.md",
            content="\n".join(lines).rstrip() + "\n",
        )

    def render_analysis(self, plan: PlanDocument) -> PlanArtifact:
        lines = [
            f"# {plan.title}: Program Analysis",
            "",
            f"**Goal:** {plan.goal}  ",
            f"**Duration:** {plan.duration_weeks} weeks",
            "",
            plan.analysis.strip(),
        ]
        return PlanArtifact(
            filename=f"{plan_slug(plan.title)}_analysis.md",
            content="\n".join(lines).rstrip() + "\n",
        )
