"""
Context Summary

Builds the compact workspace digest that precedes the user request in the
classifier prompt. Both skill lists always render (with an explicit "none")
so the classifier only sees skill ids that actually exist.
"""

from datetime import datetime
from typing import Optional

from app.config import MAX_THREAD_CONTEXT_CHARS
from core.routing.formatting import get_relative_time
from core.schemas import RouterContext, WorkspaceStateIndex


def build_context_summary(
    state: WorkspaceStateIndex,
    context: Optional[RouterContext] = None,
    now: Optional[datetime] = None
) -> str:
    """
    Summarize workspace evidence state for the classifier.

    Args:
        state: Workspace snapshot
        context: Optional UI scope and thread context
        now: Reference time for relative ages (defaults to current time)

    Returns:
        Multi-line digest string
    """
    with_evidence = []
    without_evidence = []

    for skill_id, skill in state.skill_states.items():
        if skill.has_evidence:
            age = get_relative_time(skill.last_run, now) if skill.last_run else "never"
            with_evidence.append(f"{skill_id} ({age}, {skill.claim_count} findings)")
        else:
            without_evidence.append(skill_id)

    coverage = state.data_coverage

    lines = [
        "Available workspace context:",
        f"- CRM: {coverage.crm_type or 'not connected'} "
        f"({coverage.deals_total} deals, {coverage.deals_closed_won} won, "
        f"{coverage.deals_closed_lost} lost)",
        f"- Skills with evidence: {', '.join(with_evidence) or 'none'}",
        f"- Skills without evidence: {', '.join(without_evidence) or 'none'}",
    ]

    if context and context.scope_type:
        scope = context.scope_type
        if context.scope_entity:
            scope += f" ({context.scope_entity})"
        lines.append(f"- Current UI scope: {scope}")

    if context and context.thread_context:
        thread = context.thread_context.strip()
        if len(thread) > MAX_THREAD_CONTEXT_CHARS:
            thread = thread[:MAX_THREAD_CONTEXT_CHARS].rstrip() + "..."
        lines.append(f"- Thread context: {thread}")

    return "\n".join(lines)
