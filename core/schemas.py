"""
Router Schemas and Type Definitions

Defines Pydantic schemas for the workspace state snapshot the router reads,
the caller-supplied UI context, the classifier's first-pass output, and the
final routing decision.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.config import EstimatedWait, RequestType


# ═══════════════════════════════════════════════════════════════════════════════
# WORKSPACE STATE INDEX
# ═══════════════════════════════════════════════════════════════════════════════

class SkillState(BaseModel):
    """
    Evidence state of a single skill in a workspace.

    Attributes:
        has_evidence: Whether a successful run with output exists
        last_run: Completion time of the latest successful run
        is_stale: Precomputed against the workspace freshness threshold
        claim_count: Number of findings in the latest evidence
    """
    skill_id: Optional[str] = None
    skill_name: Optional[str] = None
    has_evidence: bool = False
    last_run: Optional[datetime] = None
    is_stale: bool = False
    claim_count: int = Field(default=0, ge=0)
    record_count: int = Field(default=0, ge=0)
    run_duration_ms: Optional[int] = None


class DataCoverage(BaseModel):
    """Connected data sources and record counts for a workspace."""
    crm_type: Optional[str] = None
    deals_total: int = 0
    deals_closed_won: int = 0
    deals_closed_lost: int = 0

    crm_connected: bool = False
    conversation_connected: bool = False
    conversation_source: Optional[str] = None
    contacts_total: int = 0
    reps_count: int = 0
    calls_synced: int = 0


class TemplateReadiness(BaseModel):
    """
    Whether a deliverable template can be generated right now.

    `stale_skills` is ordered; `reason` is user-facing and is shown verbatim
    when the template is not ready.
    """
    template_id: Optional[str] = None
    template_name: Optional[str] = None
    ready: bool
    reason: Optional[str] = None
    missing_skills: List[str] = Field(default_factory=list)
    stale_skills: List[str] = Field(default_factory=list)
    degraded_dimensions: List[str] = Field(default_factory=list)


class WorkspaceStateIndex(BaseModel):
    """
    Read-only snapshot of a workspace's evidence state.

    Fetched once per routing call and never cached by the router.
    """
    workspace_id: Optional[str] = None
    computed_at: Optional[datetime] = None

    skill_states: Dict[str, SkillState] = Field(default_factory=dict)
    data_coverage: DataCoverage = Field(default_factory=DataCoverage)
    template_readiness: Dict[str, TemplateReadiness] = Field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════════
# CALLER CONTEXT
# ═══════════════════════════════════════════════════════════════════════════════

class RouterContext(BaseModel):
    """UI context supplied by the caller (command center, Slack, API)."""
    scope_type: Optional[str] = None
    scope_entity: Optional[str] = None
    source: Optional[Literal["command_center", "slack_thread", "slack_dm", "api"]] = None
    thread_context: Optional[str] = None


# ═══════════════════════════════════════════════════════════════════════════════
# CLASSIFIER OUTPUT
# ═══════════════════════════════════════════════════════════════════════════════

class Classification(BaseModel):
    """
    First-pass output from the classifier, exactly as the engine returned it.

    Frozen: the freshness resolver derives a revised decision from it
    instead of editing it.
    """
    model_config = ConfigDict(frozen=True)

    type: RequestType = Field(..., description="One of the four request types")
    confidence: float = Field(..., ge=0.0, le=1.0)

    target_skill: Optional[str] = None
    target_metric: Optional[str] = None

    scope_type: Optional[str] = None
    scope_entity: Optional[str] = None
    scope_question: Optional[str] = None
    skills_to_consult: Optional[List[str]] = None

    deliverable_type: Optional[str] = None
    template_id: Optional[str] = None

    skill_id: Optional[str] = None
    skill_params: Optional[Dict[str, Any]] = None

    needs_clarification: bool = False
    clarification_question: Optional[str] = None

    @field_validator("needs_clarification", mode="before")
    @classmethod
    def _null_means_false(cls, value):
        return False if value is None else value

    @field_validator("skills_to_consult", mode="before")
    @classmethod
    def _empty_list_means_unset(cls, value):
        # An empty list carries no scope; let scope inference decide
        if isinstance(value, list) and not value:
            return None
        return value


# ═══════════════════════════════════════════════════════════════════════════════
# ROUTER DECISION
# ═══════════════════════════════════════════════════════════════════════════════

class RouterDecision(BaseModel):
    """
    Final routing decision handed to the dispatch layer.

    Constructed once per call and immutable afterwards.
    """
    model_config = ConfigDict(frozen=True)

    type: RequestType
    confidence: float = Field(..., ge=0.0, le=1.0)

    # Evidence inquiry
    target_skill: Optional[str] = None
    target_metric: Optional[str] = None

    # Scoped analysis
    scope_type: Optional[str] = None
    scope_entity: Optional[str] = None
    scope_question: Optional[str] = None
    skills_to_consult: Optional[List[str]] = None

    # Deliverable request
    deliverable_type: Optional[str] = None
    template_id: Optional[str] = None

    # Skill execution
    skill_id: Optional[str] = None
    skill_params: Optional[Dict[str, Any]] = None

    needs_clarification: bool = False
    clarification_question: Optional[str] = None

    stale_skills_to_rerun: List[str] = Field(default_factory=list)
    estimated_wait: Optional[EstimatedWait] = None

    workspace_state: WorkspaceStateIndex

    first_pass_type: Optional[RequestType] = Field(
        None,
        description="Classifier's raw type when the resolver revised it"
    )
    pre_routed: bool = False

    @model_validator(mode="after")
    def _check_invariants(self):
        if self.needs_clarification and not (self.clarification_question or "").strip():
            raise ValueError("clarification_question is required when needs_clarification is set")

        if self.stale_skills_to_rerun and self.type not in ("scoped_analysis", "deliverable_request"):
            raise ValueError(f"stale_skills_to_rerun not allowed for {self.type}")

        if len(set(self.stale_skills_to_rerun)) != len(self.stale_skills_to_rerun):
            raise ValueError("stale_skills_to_rerun must not contain duplicates")

        return self
