"""
Router Configuration

Centralized configuration for the request router.
Environment variables and secrets should be loaded separately.
"""

from typing import Dict, List, Literal


# ═══════════════════════════════════════════════════════════════════════════════
# LLM CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

# Available Gemini models (in order of capability)
# - gemini-2.5-flash-lite: Fastest, cheapest
# - gemini-2.5-flash: Balanced speed and quality
AVAILABLE_MODELS = [
    "gemini-2.5-flash-lite",
    "gemini-2.5-flash",
]

# Model used for request classification
MODEL_NAME: str = "gemini-2.5-flash"

# Gemini API base URL (OpenAI-compatible endpoint)
BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"

# Classification is a structured label, not prose
CLASSIFIER_TEMPERATURE: float = 0.0
CLASSIFIER_MAX_TOKENS: int = 300

# Hard ceiling on a single classification call (seconds)
CLASSIFIER_TIMEOUT: float = 15.0


# ═══════════════════════════════════════════════════════════════════════════════
# REQUEST TYPES & CONFIDENCE
# ═══════════════════════════════════════════════════════════════════════════════

RequestType = Literal[
    "evidence_inquiry",
    "scoped_analysis",
    "deliverable_request",
    "skill_execution",
]

# Pre-routed matches never drop below this
MIN_PRE_ROUTED_CONFIDENCE: float = 0.95

SKILL_RUN_CONFIDENCE: float = 0.99
DELIVERABLE_CONFIDENCE: float = 0.95
STATUS_CONFIDENCE: float = 0.95

# Returned when the classifier output cannot be parsed
FALLBACK_CONFIDENCE: float = 0.3


# ═══════════════════════════════════════════════════════════════════════════════
# WAIT ESTIMATES
# ═══════════════════════════════════════════════════════════════════════════════

EstimatedWait = Literal["< 1 second", "3-5 seconds", "10-30 seconds", "30-60 seconds"]

WAIT_INSTANT: str = "< 1 second"
WAIT_SHORT: str = "3-5 seconds"
WAIT_RERUN: str = "10-30 seconds"
WAIT_DELIVERABLE: str = "30-60 seconds"


# ═══════════════════════════════════════════════════════════════════════════════
# SCOPE INFERENCE
# ═══════════════════════════════════════════════════════════════════════════════

# Skills consulted for a scoped question when the classifier names none
SCOPE_SKILL_MAP: Dict[str, List[str]] = {
    "deal": ["pipeline-hygiene", "single-thread-alert"],
    "account": ["single-thread-alert", "icp-discovery"],
    "rep": ["pipeline-coverage", "pipeline-hygiene", "rep-scorecard"],
    "pipeline": ["pipeline-hygiene", "pipeline-coverage", "pipeline-waterfall", "forecast-rollup"],
    "forecast": ["forecast-rollup", "pipeline-hygiene", "pipeline-coverage"],
    "segment": ["icp-discovery", "pipeline-hygiene"],
    "time_range": ["pipeline-hygiene", "pipeline-waterfall"],
}

DEFAULT_CONSULT_SKILLS: List[str] = ["pipeline-hygiene"]


# ═══════════════════════════════════════════════════════════════════════════════
# CLARIFICATION MESSAGES
# ═══════════════════════════════════════════════════════════════════════════════

CLARIFICATION_MESSAGES = {
    "rephrase": "I wasn't sure what you meant. Could you rephrase your question?",
    "more_detail": "Could you tell me a bit more about what you're looking for?",
    "run_first": "{skill_name} hasn't been run yet. Would you like me to run it now?",
}


# ═══════════════════════════════════════════════════════════════════════════════
# INPUT LIMITS
# ═══════════════════════════════════════════════════════════════════════════════

# Requests longer than this are truncated in the classifier prompt (characters)
MAX_QUERY_LENGTH: int = 2000

# Minimum request length (characters)
MIN_QUERY_LENGTH: int = 1

# Thread context is truncated to this many characters in the classifier digest
MAX_THREAD_CONTEXT_CHARS: int = 500


# ═══════════════════════════════════════════════════════════════════════════════
# LOGGING CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

# Log level for the application
LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL

# Log file path (None disables file logging)
LOG_FILE_PATH = None

# Log LLM requests and responses (for debugging)
LOG_LLM_CALLS: bool = False  # Set to True in development only


# ═══════════════════════════════════════════════════════════════════════════════
# HELPER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════════

def validate_config():
    """Validate configuration on startup"""
    assert MODEL_NAME in AVAILABLE_MODELS, f"Invalid MODEL_NAME: {MODEL_NAME}"
    assert CLASSIFIER_TEMPERATURE == 0.0, "Classifier must run deterministically"
    assert 0 < CLASSIFIER_MAX_TOKENS <= 1000, "CLASSIFIER_MAX_TOKENS must be small and positive"
    assert CLASSIFIER_TIMEOUT > 0, "CLASSIFIER_TIMEOUT must be positive"
    for value in (SKILL_RUN_CONFIDENCE, DELIVERABLE_CONFIDENCE, STATUS_CONFIDENCE):
        assert MIN_PRE_ROUTED_CONFIDENCE <= value <= 1.0, "Pre-routed confidence too low"
    assert 0.0 <= FALLBACK_CONFIDENCE < MIN_PRE_ROUTED_CONFIDENCE, "Invalid FALLBACK_CONFIDENCE"
    assert MAX_QUERY_LENGTH > MIN_QUERY_LENGTH, "Invalid query length limits"
    assert DEFAULT_CONSULT_SKILLS, "DEFAULT_CONSULT_SKILLS must not be empty"


# Validate on import
validate_config()
