"""
Freshness Resolution

Turns a first-pass classification into a routing decision by checking the
workspace snapshot: which evidence is missing, which is stale and must be
recomputed first, whether a deliverable is ready, and how long the user
should expect to wait.

The classification is never edited; every branch builds a new decision
from it. The only branch that changes the request type is an evidence
inquiry about a skill that has never run.
"""

from typing import Any, Dict, List, Optional

from app.config import (
    CLARIFICATION_MESSAGES,
    WAIT_INSTANT,
    WAIT_SHORT,
    WAIT_RERUN,
    WAIT_DELIVERABLE,
)
from core.routing.formatting import format_skill_name
from core.routing.scope import infer_consult_skills
from core.schemas import Classification, RouterDecision, TemplateReadiness, WorkspaceStateIndex
from infra.logger import logger_freshness, log_decision_revised, LogContext


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════════

class UnknownTemplateReadiness(Exception):
    """Raised when a deliverable has no readiness record in the snapshot"""
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ═══════════════════════════════════════════════════════════════════════════════

def resolve_freshness(
    classification: Classification,
    state: WorkspaceStateIndex
) -> RouterDecision:
    """
    Resolve staleness, readiness and wait time for a classification.

    Args:
        classification: Frozen first-pass classifier output
        state: Workspace snapshot for this call

    Returns:
        RouterDecision with stale_skills_to_rerun and estimated_wait set
    """
    fields = classification.model_dump()
    fields["stale_skills_to_rerun"] = []

    if classification.type == "evidence_inquiry":
        _resolve_evidence_inquiry(classification, state, fields)

    elif classification.type == "scoped_analysis":
        _resolve_scoped_analysis(classification, state, fields)

    elif classification.type == "deliverable_request":
        _resolve_deliverable_request(classification, state, fields)

    elif classification.type == "skill_execution":
        fields["estimated_wait"] = WAIT_RERUN

    if fields["type"] != classification.type:
        fields["first_pass_type"] = classification.type

    decision = RouterDecision(workspace_state=state, **fields)

    log_data = {
        "first_pass": classification.type,
        "final": decision.type,
        "stale": LogContext.format_skills(decision.stale_skills_to_rerun),
        "wait": decision.estimated_wait,
    }
    logger_freshness.debug(f"RESOLVED | {LogContext.format_dict(log_data)}")

    return decision


# ═══════════════════════════════════════════════════════════════════════════════
# BRANCHES
# ═══════════════════════════════════════════════════════════════════════════════

def _resolve_evidence_inquiry(
    classification: Classification,
    state: WorkspaceStateIndex,
    fields: Dict[str, Any]
):
    fields["estimated_wait"] = WAIT_INSTANT

    skill_id = classification.target_skill
    if not skill_id:
        return

    skill_state = state.skill_states.get(skill_id)
    if skill_state is not None and skill_state.has_evidence:
        return

    # Nothing to show yet: offer to run the skill instead
    fields["type"] = "skill_execution"
    fields["skill_id"] = skill_id
    fields["needs_clarification"] = True
    fields["clarification_question"] = CLARIFICATION_MESSAGES["run_first"].format(
        skill_name=format_skill_name(skill_id)
    )
    log_decision_revised(classification.type, "skill_execution", f"no_evidence:{skill_id}")


def _resolve_scoped_analysis(
    classification: Classification,
    state: WorkspaceStateIndex,
    fields: Dict[str, Any]
):
    consult = classification.skills_to_consult or infer_consult_skills(classification.scope_type)
    consult = _ordered_unique(consult)
    fields["skills_to_consult"] = consult

    stale = [
        skill_id for skill_id in consult
        if skill_id in state.skill_states and state.skill_states[skill_id].is_stale
    ]

    if stale:
        fields["stale_skills_to_rerun"] = stale
        fields["estimated_wait"] = WAIT_RERUN
    else:
        fields["estimated_wait"] = WAIT_SHORT


def _resolve_deliverable_request(
    classification: Classification,
    state: WorkspaceStateIndex,
    fields: Dict[str, Any]
):
    fields["estimated_wait"] = WAIT_DELIVERABLE

    template_id = classification.deliverable_type or classification.template_id
    if not template_id:
        logger_freshness.warning("DELIVERABLE_UNRESOLVED | no deliverable id in classification")
        return

    fields["template_id"] = fields.get("template_id") or template_id

    try:
        readiness = lookup_readiness(state, template_id)
    except UnknownTemplateReadiness as e:
        # Fail open: the deliverable pipeline validates the template itself
        logger_freshness.warning(f"READINESS_UNKNOWN | template={template_id} | error={e}")
        return

    if not readiness.ready:
        fields["needs_clarification"] = True
        if (readiness.reason or "").strip():
            fields["clarification_question"] = readiness.reason
        else:
            fields["clarification_question"] = (
                f"{readiness.template_name or template_id} isn't ready to generate yet."
            )

    fields["stale_skills_to_rerun"] = _ordered_unique(readiness.stale_skills)


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def lookup_readiness(state: WorkspaceStateIndex, template_id: str) -> TemplateReadiness:
    """
    Find the readiness record for a deliverable.

    Raises:
        UnknownTemplateReadiness: If the snapshot has no record for it
    """
    readiness: Optional[TemplateReadiness] = state.template_readiness.get(template_id)
    if readiness is None:
        raise UnknownTemplateReadiness(f"No readiness record for '{template_id}'")
    return readiness


def _ordered_unique(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))
