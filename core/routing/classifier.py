"""
Request Classification Module

Classifies free-text requests with the reasoning engine when no
deterministic pattern matched. Owns the prompt, the call parameters and
the JSON extraction/validation of the engine's answer.
"""

import json
import re
import time
from typing import Any, Dict, Optional

from pydantic import ValidationError

from app.config import (
    CLASSIFIER_TEMPERATURE,
    CLASSIFIER_MAX_TOKENS,
    CLARIFICATION_MESSAGES,
    FALLBACK_CONFIDENCE,
    MAX_QUERY_LENGTH,
    WAIT_INSTANT,
)
from core.failure_classifier import FailureType, classify_failure
from core.routing.context_summary import build_context_summary
from core.schemas import Classification, RouterContext, RouterDecision, WorkspaceStateIndex
from infra.logger import logger_classifier, LogContext
from prompts.router_prompt import ROUTER_PROMPT, CLASSIFICATION_USER_PROMPT


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════════

class ClassificationParseError(Exception):
    """Raised when the engine's output is not a valid classification"""

    def __init__(self, message: str, raw_output: str = ""):
        super().__init__(message)
        self.raw_output = raw_output


class ClassificationUnavailable(Exception):
    """Raised when the reasoning engine cannot be reached or refuses the call"""

    def __init__(self, message: str, failure_type: FailureType = FailureType.STRUCTURAL):
        super().__init__(message)
        self.failure_type = failure_type


# ═══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ═══════════════════════════════════════════════════════════════════════════════

def classify(
    user_input: str,
    state: WorkspaceStateIndex,
    llm_client,
    context: Optional[RouterContext] = None,
    request_id: Optional[str] = None
) -> Classification:
    """
    Classify a request with the reasoning engine.

    Args:
        user_input: User's request
        state: Workspace snapshot summarized into the prompt
        llm_client: Object with call(system_prompt, user_prompt, temperature, max_tokens)
        context: Optional UI context
        request_id: Optional request ID for tracking

    Returns:
        First-pass Classification

    Raises:
        ClassificationUnavailable: If the engine call fails
        ClassificationParseError: If the engine output is malformed
    """
    start_time = time.perf_counter()

    system_prompt, user_prompt = _prepare_prompts(user_input, state, context)
    raw_output = _call_engine(llm_client, system_prompt, user_prompt, request_id) or ""

    try:
        classification = parse_classification(raw_output)
    except ClassificationParseError as e:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger_classifier.error(
            f"PARSE_ERROR | duration_ms={duration_ms:.2f} | error={str(e)[:100]} | "
            f"raw={raw_output[:200]!r}"
        )
        raise

    duration_ms = (time.perf_counter() - start_time) * 1000
    _log_classify_complete(classification, duration_ms, request_id)

    return classification


def fallback_decision(user_input: str, state: WorkspaceStateIndex) -> RouterDecision:
    """
    Low-confidence decision returned when the engine output can't be parsed.

    Asks the user to rephrase instead of acting; no freshness resolution
    is applied, so the wait is that of an instant reply.
    """
    return RouterDecision(
        type="scoped_analysis",
        confidence=FALLBACK_CONFIDENCE,
        scope_question=user_input,
        needs_clarification=True,
        clarification_question=CLARIFICATION_MESSAGES["rephrase"],
        estimated_wait=WAIT_INSTANT,
        workspace_state=state,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# PARSING
# ═══════════════════════════════════════════════════════════════════════════════

_FENCE_PATTERN = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


def strip_code_fences(raw_output: str) -> str:
    """
    Remove Markdown code-fence markers around a JSON payload.

    Examples:
        '```json\\n{"a": 1}\\n```' → '{"a": 1}'
    """
    return _FENCE_PATTERN.sub("", raw_output).strip()


def parse_classification(raw_output: str) -> Classification:
    """
    Decode and validate engine output.

    Raises:
        ClassificationParseError: On invalid JSON, non-object JSON or
            schema violations
    """
    cleaned = strip_code_fences(raw_output or "")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ClassificationParseError(f"Invalid JSON: {e}", raw_output) from e

    if not isinstance(data, dict):
        raise ClassificationParseError(
            f"Expected a JSON object, got {type(data).__name__}", raw_output
        )

    try:
        classification = Classification.model_validate(data)
    except ValidationError as e:
        raise ClassificationParseError(f"Schema violation: {e}", raw_output) from e

    if classification.needs_clarification and not (classification.clarification_question or "").strip():
        classification = classification.model_copy(
            update={"clarification_question": CLARIFICATION_MESSAGES["more_detail"]}
        )

    return classification


# ═══════════════════════════════════════════════════════════════════════════════
# PROMPT PREPARATION
# ═══════════════════════════════════════════════════════════════════════════════

def truncate_query(user_input: str) -> str:
    """
    Bound the request text sent to the engine.

    Requests over MAX_QUERY_LENGTH characters are cut and marked with "...";
    the full text is still used for pattern matching and the fallback.
    """
    if len(user_input) <= MAX_QUERY_LENGTH:
        return user_input

    logger_classifier.warning(
        f"QUERY_TRUNCATED | length={len(user_input)} | limit={MAX_QUERY_LENGTH}"
    )
    return user_input[:MAX_QUERY_LENGTH].rstrip() + "..."


def _prepare_prompts(
    user_input: str,
    state: WorkspaceStateIndex,
    context: Optional[RouterContext]
):
    context_summary = build_context_summary(state, context)
    user_prompt = CLASSIFICATION_USER_PROMPT.format(
        context_summary=context_summary,
        user_input=truncate_query(user_input),
    )

    logger_classifier.debug(
        f"CLASSIFY_PROMPT | summary_length={len(context_summary)} | query_length={len(user_input)}"
    )

    return ROUTER_PROMPT, user_prompt


# ═══════════════════════════════════════════════════════════════════════════════
# ENGINE INTERACTION
# ═══════════════════════════════════════════════════════════════════════════════

def _call_engine(
    llm_client,
    system_prompt: str,
    user_prompt: str,
    request_id: Optional[str]
) -> str:
    """
    Call the reasoning engine once. No retries.

    Raises:
        ClassificationUnavailable: Wrapping any client failure
    """
    try:
        return llm_client.call(
            system_prompt,
            user_prompt,
            temperature=CLASSIFIER_TEMPERATURE,
            max_tokens=CLASSIFIER_MAX_TOKENS,
        )
    except ClassificationUnavailable:
        raise
    except Exception as e:
        failure_type = classify_failure(error=e)
        log_data: Dict[str, Any] = {
            "failure_type": failure_type.value,
            "error": str(e)[:200],
        }
        if request_id:
            log_data["request_id"] = request_id
        logger_classifier.error(f"ENGINE_UNAVAILABLE | {LogContext.format_dict(log_data)}")
        raise ClassificationUnavailable(str(e), failure_type) from e


# ═══════════════════════════════════════════════════════════════════════════════
# LOGGING HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def _log_classify_complete(
    classification: Classification,
    duration_ms: float,
    request_id: Optional[str]
):
    """Log classification completion"""
    log_data = {
        "type": classification.type,
        "confidence": f"{classification.confidence:.2f}",
        "clarify": classification.needs_clarification,
        "duration_ms": f"{duration_ms:.2f}",
    }

    if request_id:
        log_data["request_id"] = request_id

    logger_classifier.info(f"CLASSIFY_COMPLETE | {LogContext.format_dict(log_data)}")
