"""
Stub collaborators for router tests
"""

import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.schemas import (
    DataCoverage,
    SkillState,
    TemplateReadiness,
    WorkspaceStateIndex,
)


NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


class StubLLMClient:
    """Engine client returning canned responses and recording every call."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    @property
    def call_count(self):
        return len(self.calls)

    def call(self, system_prompt, user_prompt, temperature=None, max_tokens=None):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0] if self.responses else ""


class StubStateProvider:
    """State provider returning a fixed snapshot and counting fetches."""

    def __init__(self, state):
        self.state = state
        self.fetches = []

    def __call__(self, workspace_id):
        self.fetches.append(workspace_id)
        return self.state


def classification_json(**fields):
    """Engine-style JSON with every schema field present."""
    payload = {
        "type": "scoped_analysis",
        "confidence": 0.8,
        "target_skill": None,
        "target_metric": None,
        "scope_type": None,
        "scope_entity": None,
        "scope_question": None,
        "skills_to_consult": None,
        "deliverable_type": None,
        "skill_id": None,
        "needs_clarification": False,
        "clarification_question": None,
    }
    payload.update(fields)
    return json.dumps(payload)


def make_state(stale=(), missing=(), readiness=None):
    """
    Workspace snapshot with the common pipeline skills.

    Args:
        stale: Skill ids whose evidence is stale
        missing: Skill ids with no evidence at all
        readiness: Template readiness records
    """
    skill_ids = [
        "pipeline-hygiene",
        "pipeline-coverage",
        "pipeline-waterfall",
        "forecast-rollup",
        "single-thread-alert",
        "icp-discovery",
        "rep-scorecard",
        "lead-scoring",
    ]

    skill_states = {}
    for index, skill_id in enumerate(skill_ids):
        if skill_id in missing:
            skill_states[skill_id] = SkillState(
                skill_id=skill_id, has_evidence=False, is_stale=True
            )
        else:
            skill_states[skill_id] = SkillState(
                skill_id=skill_id,
                has_evidence=True,
                last_run=NOW - timedelta(hours=2 + index),
                is_stale=skill_id in stale,
                claim_count=3 + index,
            )

    return WorkspaceStateIndex(
        workspace_id="ws-1",
        computed_at=NOW,
        skill_states=skill_states,
        data_coverage=DataCoverage(
            crm_type="hubspot",
            deals_total=120,
            deals_closed_won=30,
            deals_closed_lost=40,
        ),
        template_readiness=readiness or {
            "sales_process_map": TemplateReadiness(ready=True),
        },
    )
