"""
Pre-Router

Deterministic pattern matching for explicit commands, run before any
LLM classification. A match produces a complete routing decision at zero
latency and zero cost; no match falls through to the classifier.

Handles: skill-run commands, deliverable-build commands, workspace status.
"""

from typing import Dict, List, Literal, NamedTuple, Optional

from app.config import (
    SKILL_RUN_CONFIDENCE,
    DELIVERABLE_CONFIDENCE,
    STATUS_CONFIDENCE,
    WAIT_RERUN,
    WAIT_DELIVERABLE,
    WAIT_INSTANT,
)
from core.schemas import RouterDecision, WorkspaceStateIndex
from infra.logger import logger_prerouter, log_pre_routed


# ═══════════════════════════════════════════════════════════════════════════
# EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════

class PatternTableError(Exception):
    """Raised when the pattern table is ambiguous"""
    pass


# ═══════════════════════════════════════════════════════════════════════════
# PATTERN MAPPING
# ═══════════════════════════════════════════════════════════════════════════

RUN_PATTERNS: Dict[str, str] = {
    "run pipeline hygiene": "pipeline-hygiene",
    "run pipeline-hygiene": "pipeline-hygiene",
    "run data quality": "data-quality-audit",
    "run single thread": "single-thread-alert",
    "run pipeline coverage": "pipeline-coverage",
    "run lead scoring": "lead-scoring",
    "run icp discovery": "icp-discovery",
    "run forecast": "forecast-rollup",
    "run waterfall": "pipeline-waterfall",
    "refresh lead scores": "lead-scoring",
    "refresh pipeline": "pipeline-hygiene",
}

DELIVERABLE_PATTERNS: Dict[str, str] = {
    "build me a sales process map": "sales_process_map",
    "create a sales process map": "sales_process_map",
    "generate sales process map": "sales_process_map",
    "export sales process map": "sales_process_map",
    "build me a gtm blueprint": "gtm_blueprint",
    "export pipeline audit": "pipeline_audit",
    "generate forecast report": "forecast_report",
}

STATUS_PATTERNS: List[str] = [
    "status",
    "workspace status",
    "what can you do",
]


Family = Literal["skill_run", "deliverable", "status"]
MatchMode = Literal["exact", "prefix"]


class PatternEntry(NamedTuple):
    phrase: str
    mode: MatchMode
    family: Family
    target: str


# ═══════════════════════════════════════════════════════════════════════════
# TABLE CONSTRUCTION
# ═══════════════════════════════════════════════════════════════════════════

def build_pattern_table(
    run_patterns: Dict[str, str],
    deliverable_patterns: Dict[str, str],
    status_patterns: List[str],
) -> List[PatternEntry]:
    """
    Build the ordered pattern table and check it for collisions.

    Order is run commands, then deliverables, then status queries.

    Raises:
        PatternTableError: If a phrase is duplicated, or a prefix phrase
            is a prefix of any other phrase in the table
    """
    table: List[PatternEntry] = []

    for phrase, skill_id in run_patterns.items():
        table.append(PatternEntry(_normalize(phrase), "prefix", "skill_run", skill_id))

    for phrase, template_id in deliverable_patterns.items():
        table.append(PatternEntry(_normalize(phrase), "prefix", "deliverable", template_id))

    for phrase in status_patterns:
        table.append(PatternEntry(_normalize(phrase), "exact", "status", "workspace_status"))

    _check_collisions(table)
    return table


def _check_collisions(table: List[PatternEntry]):
    seen = set()
    for entry in table:
        if entry.phrase in seen:
            raise PatternTableError(f"Duplicate pattern: '{entry.phrase}'")
        seen.add(entry.phrase)

    for entry in table:
        if entry.mode != "prefix":
            continue
        for other in table:
            if other is entry:
                continue
            if other.phrase.startswith(entry.phrase):
                raise PatternTableError(
                    f"Pattern '{entry.phrase}' is a prefix of '{other.phrase}'"
                )


def _normalize(text: str) -> str:
    return text.strip().lower()


PATTERN_TABLE: List[PatternEntry] = build_pattern_table(
    RUN_PATTERNS,
    DELIVERABLE_PATTERNS,
    STATUS_PATTERNS,
)


# ═══════════════════════════════════════════════════════════════════════════
# MATCHING
# ═══════════════════════════════════════════════════════════════════════════

def find_pattern(
    user_input: str,
    table: Optional[List[PatternEntry]] = None
) -> Optional[PatternEntry]:
    """
    Return the first table entry matching the input, or None.

    Examples:
        "Run pipeline hygiene" → skill_run / pipeline-hygiene
        "run forecast for Q3" → skill_run / forecast-rollup
        "status please" → None (status is exact-match only)
    """
    query = _normalize(user_input)

    for entry in table if table is not None else PATTERN_TABLE:
        if entry.mode == "exact" and query == entry.phrase:
            return entry
        if entry.mode == "prefix" and query.startswith(entry.phrase):
            return entry

    return None


def _decision_for(entry: PatternEntry, state: WorkspaceStateIndex) -> RouterDecision:
    if entry.family == "skill_run":
        return RouterDecision(
            type="skill_execution",
            confidence=SKILL_RUN_CONFIDENCE,
            skill_id=entry.target,
            estimated_wait=WAIT_RERUN,
            workspace_state=state,
            pre_routed=True,
        )

    if entry.family == "deliverable":
        return RouterDecision(
            type="deliverable_request",
            confidence=DELIVERABLE_CONFIDENCE,
            deliverable_type=entry.target,
            template_id=entry.target,
            estimated_wait=WAIT_DELIVERABLE,
            workspace_state=state,
            pre_routed=True,
        )

    return RouterDecision(
        type="evidence_inquiry",
        confidence=STATUS_CONFIDENCE,
        target_metric=entry.target,
        estimated_wait=WAIT_INSTANT,
        workspace_state=state,
        pre_routed=True,
    )


# ═══════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ═══════════════════════════════════════════════════════════════════════════

def pre_route(
    user_input: str,
    state: WorkspaceStateIndex,
    table: Optional[List[PatternEntry]] = None
) -> Optional[RouterDecision]:
    """
    Try to route a request without the classifier.

    Args:
        user_input: Raw user request
        state: Workspace snapshot to attach to the decision
        table: Pattern table override (defaults to PATTERN_TABLE)

    Returns:
        RouterDecision if a pattern matched, otherwise None
    """
    entry = find_pattern(user_input, table)

    if entry is None:
        logger_prerouter.debug(f"NO_MATCH | length={len(user_input)}")
        return None

    log_pre_routed(entry.phrase, entry.family, entry.target)
    return _decision_for(entry, state)
