"""
Scope Inference

Maps a scope category to the skills whose evidence answers questions
about it, and merges UI-supplied scope onto a resolved decision.
"""

from typing import List, Optional

from app.config import SCOPE_SKILL_MAP, DEFAULT_CONSULT_SKILLS
from core.schemas import RouterDecision, RouterContext


def infer_consult_skills(scope_type: Optional[str]) -> List[str]:
    """
    Default skills to consult for a scope.

    Unknown or missing scope types fall back to DEFAULT_CONSULT_SKILLS.
    """
    return list(SCOPE_SKILL_MAP.get(scope_type or "", DEFAULT_CONSULT_SKILLS))


def apply_ui_context(decision: RouterDecision, context: Optional[RouterContext]) -> RouterDecision:
    """
    Copy the caller's UI scope onto a decision that has none.

    Runs after freshness resolution; stale skills are not recomputed for
    the merged scope.
    """
    if not context or not context.scope_type or decision.scope_type:
        return decision

    return decision.model_copy(update={
        "scope_type": context.scope_type,
        "scope_entity": context.scope_entity or decision.scope_entity,
    })
