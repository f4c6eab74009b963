"""
Workspace State Index Builder

Derives the router's view of a workspace from the latest successful run of
each skill:
1. Skill states - evidence present, last run, staleness against per-skill thresholds
2. Template readiness - which deliverables can be generated right now, and why not

Pure functions only; fetching run records and connector counts is the
caller's job.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, NamedTuple, Optional

from pydantic import BaseModel, Field

from core.routing.formatting import as_utc, format_skill_name
from core.schemas import DataCoverage, SkillState, TemplateReadiness, WorkspaceStateIndex
from infra.logger import logger_state


# ═══════════════════════════════════════════════════════════════════════════════
# STALENESS THRESHOLDS
# ═══════════════════════════════════════════════════════════════════════════════

DAY = timedelta(days=1)
WEEK = timedelta(days=7)
MONTH = timedelta(days=30)

# Evidence older than this should be refreshed
STALENESS_THRESHOLDS: Dict[str, timedelta] = {
    "pipeline-hygiene": DAY,
    "single-thread-alert": DAY,
    "data-quality-audit": WEEK,
    "pipeline-coverage": DAY,
    "icp-discovery": MONTH,
    "lead-scoring": DAY,
    "workspace-config-audit": WEEK,
    "forecast-rollup": DAY,
    "conversation-intelligence": WEEK,
    "pipeline-waterfall": WEEK,
    "rep-scorecard": WEEK,
    "deal-risk-review": DAY,
    "weekly-recap": WEEK,
    "custom-field-discovery": MONTH,
    "contact-role-resolution": WEEK,
    "bowtie-analysis": WEEK,
    "pipeline-goals": WEEK,
    "project-recap": WEEK,
    "strategy-insights": WEEK,
}

DEFAULT_STALENESS = WEEK


# ═══════════════════════════════════════════════════════════════════════════════
# TEMPLATE REQUIREMENTS
# ═══════════════════════════════════════════════════════════════════════════════

class TemplateRequirement(NamedTuple):
    template_id: str
    template_name: str
    required_skills: List[str]     # must have evidence (any age)
    preferred_skills: List[str]    # better with evidence, not required
    freshness_critical: List[str]  # must not be stale


TEMPLATE_REQUIREMENTS: List[TemplateRequirement] = [
    TemplateRequirement(
        "sales_process_map", "Sales Process Map",
        ["workspace-config-audit", "pipeline-hygiene"],
        ["pipeline-waterfall", "icp-discovery", "data-quality-audit"],
        ["workspace-config-audit"],
    ),
    TemplateRequirement(
        "lead_scoring", "Lead Scoring Report",
        ["lead-scoring"],
        ["icp-discovery"],
        ["lead-scoring"],
    ),
    TemplateRequirement(
        "icp_profile", "ICP Profile",
        ["icp-discovery"],
        [],
        ["icp-discovery"],
    ),
    TemplateRequirement(
        "gtm_blueprint", "GTM Blueprint",
        ["workspace-config-audit", "pipeline-hygiene", "icp-discovery", "lead-scoring"],
        ["data-quality-audit", "pipeline-waterfall"],
        ["pipeline-hygiene", "lead-scoring"],
    ),
    TemplateRequirement(
        "pipeline_audit", "Pipeline Audit",
        ["pipeline-hygiene", "single-thread-alert", "data-quality-audit"],
        ["pipeline-coverage"],
        ["pipeline-hygiene"],
    ),
    TemplateRequirement(
        "forecast_report", "Forecast Report",
        ["forecast-rollup"],
        ["pipeline-hygiene", "pipeline-coverage"],
        ["forecast-rollup"],
    ),
]

# Deliverable dimensions that degrade when a preferred skill has no evidence
SKILL_TO_DIMENSION_MAP: Dict[str, List[str]] = {
    "icp-discovery": ["PLG Signals", "Channel/Partner", "Team Selling"],
    "pipeline-waterfall": ["Typical Duration", "Stage Regression"],
    "data-quality-audit": ["Closed Lost Capture"],
}


# ═══════════════════════════════════════════════════════════════════════════════
# INPUT RECORDS
# ═══════════════════════════════════════════════════════════════════════════════

class SkillRunRecord(BaseModel):
    """Latest successful run of a skill, as read from the run store."""
    skill_id: str
    completed_at: datetime
    duration_ms: Optional[int] = None
    claim_count: int = Field(default=0, ge=0)
    record_count: int = Field(default=0, ge=0)


# ═══════════════════════════════════════════════════════════════════════════════
# BUILDERS
# ═══════════════════════════════════════════════════════════════════════════════

def get_staleness_threshold(skill_id: str) -> timedelta:
    return STALENESS_THRESHOLDS.get(skill_id, DEFAULT_STALENESS)


def build_skill_states(
    runs: Iterable[SkillRunRecord],
    now: Optional[datetime] = None,
    known_skills: Optional[Iterable[str]] = None
) -> Dict[str, SkillState]:
    """
    Build a state entry for every known skill.

    Skills without a run have no evidence and count as stale. When several
    runs share a skill id, the most recent one wins.

    Args:
        runs: Latest successful runs
        now: Reference time (defaults to current UTC time)
        known_skills: Skill ids to report (defaults to STALENESS_THRESHOLDS keys)

    Returns:
        Mapping of skill id → SkillState
    """
    now = as_utc(now or datetime.now(timezone.utc))

    latest: Dict[str, SkillRunRecord] = {}
    for run in runs:
        current = latest.get(run.skill_id)
        if current is None or as_utc(run.completed_at) > as_utc(current.completed_at):
            latest[run.skill_id] = run

    skill_ids = list(known_skills) if known_skills is not None else list(STALENESS_THRESHOLDS)
    states: Dict[str, SkillState] = {}

    for skill_id in skill_ids:
        run = latest.get(skill_id)

        if run is None:
            states[skill_id] = SkillState(
                skill_id=skill_id,
                skill_name=format_skill_name(skill_id),
                has_evidence=False,
                is_stale=True,
            )
            continue

        age = now - as_utc(run.completed_at)
        states[skill_id] = SkillState(
            skill_id=skill_id,
            skill_name=format_skill_name(skill_id),
            has_evidence=True,
            last_run=run.completed_at,
            is_stale=age > get_staleness_threshold(skill_id),
            claim_count=run.claim_count,
            record_count=run.record_count,
            run_duration_ms=run.duration_ms,
        )

    return states


def build_template_readiness(
    skill_states: Dict[str, SkillState],
    requirements: Optional[List[TemplateRequirement]] = None
) -> Dict[str, TemplateReadiness]:
    """
    Decide which deliverable templates can be generated.

    A template is ready when every required skill has evidence. The reason
    reports, in order of precedence: missing skills, stale
    freshness-critical skills, degraded dimensions.
    """
    readiness: Dict[str, TemplateReadiness] = {}

    for template in requirements if requirements is not None else TEMPLATE_REQUIREMENTS:
        missing = [s for s in template.required_skills if not _has_evidence(skill_states, s)]
        stale = [s for s in template.freshness_critical if _is_stale(skill_states, s)]

        degraded: List[str] = []
        for skill_id in template.preferred_skills:
            if not _has_evidence(skill_states, skill_id):
                degraded.extend(SKILL_TO_DIMENSION_MAP.get(skill_id, []))
        degraded = list(dict.fromkeys(degraded))

        ready = not missing

        reason = None
        if missing:
            reason = f"Missing required skills: {', '.join(missing)}. Run these skills first."
        elif stale:
            reason = f"Evidence is stale for: {', '.join(stale)}. Results may not reflect recent changes."
        elif degraded:
            reason = f"Some dimensions will be limited: {', '.join(degraded)}."

        readiness[template.template_id] = TemplateReadiness(
            template_id=template.template_id,
            template_name=template.template_name,
            ready=ready,
            reason=reason,
            missing_skills=missing,
            stale_skills=stale,
            degraded_dimensions=degraded,
        )

    return readiness


def build_workspace_state_index(
    workspace_id: str,
    runs: Iterable[SkillRunRecord],
    data_coverage: Optional[DataCoverage] = None,
    now: Optional[datetime] = None
) -> WorkspaceStateIndex:
    """
    Assemble a complete state index for one workspace.

    Args:
        workspace_id: Workspace identifier
        runs: Latest successful skill runs
        data_coverage: Connector and record counts (defaults to empty coverage)
        now: Reference time (defaults to current UTC time)

    Returns:
        WorkspaceStateIndex ready to hand to the router
    """
    now = as_utc(now or datetime.now(timezone.utc))

    skill_states = build_skill_states(runs, now)
    template_readiness = build_template_readiness(skill_states)

    ready_count = sum(1 for t in template_readiness.values() if t.ready)
    stale_count = sum(1 for s in skill_states.values() if s.has_evidence and s.is_stale)
    logger_state.info(
        f"STATE_INDEX_BUILT | workspace={workspace_id} | skills={len(skill_states)} | "
        f"stale={stale_count} | templates_ready={ready_count}/{len(template_readiness)}"
    )

    return WorkspaceStateIndex(
        workspace_id=workspace_id,
        computed_at=now,
        skill_states=skill_states,
        data_coverage=data_coverage or DataCoverage(),
        template_readiness=template_readiness,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def _has_evidence(skill_states: Dict[str, SkillState], skill_id: str) -> bool:
    state = skill_states.get(skill_id)
    return bool(state and state.has_evidence)


def _is_stale(skill_states: Dict[str, SkillState], skill_id: str) -> bool:
    state = skill_states.get(skill_id)
    return bool(state and state.is_stale)


