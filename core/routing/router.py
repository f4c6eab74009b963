"""
Request Router - Main Entry Point

Classifies a free-text request into one of four execution paths:
1. evidence_inquiry     - "Show me how you calculated win rate"
2. scoped_analysis      - "Why did pipeline drop last week?"
3. deliverable_request  - "Build me a sales process map"
4. skill_execution      - "Run pipeline hygiene"

Flow:
    state fetch → pre-router (may return) → classifier →
    freshness resolution → UI-context merge

The router holds no state between calls. The workspace snapshot is fetched
on every call, and both collaborators (state provider, engine client) are
injected.
"""

import time
import uuid
from typing import Any, Callable, Dict, Optional, Union

from app.config import MIN_QUERY_LENGTH
from core.routing.classifier import ClassificationParseError, classify, fallback_decision
from core.routing.freshness import resolve_freshness
from core.routing.pre_router import pre_route
from core.routing.scope import apply_ui_context
from core.schemas import RouterContext, RouterDecision, WorkspaceStateIndex
from infra.logger import logger_api, log_route_start, log_route_complete
from llm.client import get_default_client


StateProvider = Callable[[str], Union[WorkspaceStateIndex, Dict[str, Any]]]


# ═══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ═══════════════════════════════════════════════════════════════════════════════

def classify_request(
    workspace_id: str,
    user_input: str,
    context: Optional[Union[RouterContext, Dict[str, Any]]] = None,
    *,
    get_workspace_state: StateProvider,
    llm_client=None,
    request_id: Optional[str] = None
) -> RouterDecision:
    """
    Route a user request.

    Args:
        workspace_id: Workspace the request belongs to
        user_input: Free-text request
        context: Optional UI context (scope_type, scope_entity, source, thread_context)
        get_workspace_state: Returns the workspace's current state index
        llm_client: Engine client; defaults to the shared LLMClient
        request_id: Optional request ID for tracking

    Returns:
        RouterDecision

    Raises:
        ValueError: If user_input is not a string or is empty
        ClassificationUnavailable: If the reasoning engine fails
    """
    if not request_id:
        request_id = str(uuid.uuid4())[:8]

    _validate_user_input(user_input)
    router_context = _coerce_context(context)

    log_route_start(workspace_id, user_input, request_id)
    start_time = time.perf_counter()

    state = _fetch_state(get_workspace_state, workspace_id)

    # Step 1: Deterministic patterns
    decision = pre_route(user_input, state)
    if decision is not None:
        _log_complete(decision, start_time, request_id)
        return decision

    # Step 2: Engine classification
    if llm_client is None:
        llm_client = get_default_client()

    try:
        classification = classify(
            user_input,
            state,
            llm_client,
            context=router_context,
            request_id=request_id,
        )
    except ClassificationParseError:
        decision = fallback_decision(user_input, state)
        _log_complete(decision, start_time, request_id)
        return decision

    # Step 3: Freshness and readiness
    decision = resolve_freshness(classification, state)

    # Step 4: UI scope
    decision = apply_ui_context(decision, router_context)

    _log_complete(decision, start_time, request_id)
    return decision


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def _validate_user_input(user_input: str):
    """Validate the request text before any work is done"""
    if not isinstance(user_input, str):
        raise ValueError("user_input must be a string")

    length = len(user_input.strip())
    if length < MIN_QUERY_LENGTH:
        raise ValueError("user_input must not be empty")


def _coerce_context(
    context: Optional[Union[RouterContext, Dict[str, Any]]]
) -> Optional[RouterContext]:
    if context is None or isinstance(context, RouterContext):
        return context
    return RouterContext.model_validate(context)


def _fetch_state(get_workspace_state: StateProvider, workspace_id: str) -> WorkspaceStateIndex:
    state = get_workspace_state(workspace_id)
    if isinstance(state, WorkspaceStateIndex):
        return state
    return WorkspaceStateIndex.model_validate(state)


def _log_complete(decision: RouterDecision, start_time: float, request_id: str):
    duration = time.perf_counter() - start_time
    if decision.first_pass_type:
        logger_api.debug(
            f"TYPE_REVISED | request_id={request_id} | "
            f"first_pass={decision.first_pass_type} | final={decision.type}"
        )
    log_route_complete(
        decision.type,
        decision.confidence,
        decision.needs_clarification,
        decision.stale_skills_to_rerun,
        duration,
        request_id,
    )
