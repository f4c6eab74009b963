"""
Centralized Logging Configuration

Provides structured logging for the request router with:
- Component-specific loggers
- Consistent formatting
- Timing information
- Decision audit trail
"""

import logging
import sys
from typing import Optional

from app.config import LOG_LEVEL, LOG_FILE_PATH


# ═══════════════════════════════════════════════════════════════════════════════
# LOGGER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure logging for the entire application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path to write logs to
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    console_formatter = logging.Formatter(
        fmt="%(asctime)s | %(name)-17s | %(levelname)-8s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    file_formatter = logging.Formatter(
        fmt="%(asctime)s | %(name)s | %(levelname)s | %(filename)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(console_formatter)

    root_logger = logging.getLogger()

    # Prevent duplicate logs if setup_logging() is called again
    if root_logger.handlers:
        root_logger.handlers.clear()

    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    # Silence noisy third-party loggers
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# ═══════════════════════════════════════════════════════════════════════════════
# COMPONENT LOGGERS
# ═══════════════════════════════════════════════════════════════════════════════

setup_logging(level=LOG_LEVEL, log_file=LOG_FILE_PATH)

logger_prerouter = logging.getLogger("router.prerouter")
logger_classifier = logging.getLogger("router.classifier")
logger_freshness = logging.getLogger("router.freshness")
logger_state = logging.getLogger("router.state")
logger_llm = logging.getLogger("router.llm")
logger_api = logging.getLogger("router.api")


# ═══════════════════════════════════════════════════════════════════════════════
# STRUCTURED LOGGING HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

class LogContext:
    """Helper for consistent structured logging"""

    @staticmethod
    def format_dict(data: dict) -> str:
        """Format dictionary for logging"""
        return " | ".join(f"{k}={v}" for k, v in data.items())

    @staticmethod
    def format_skills(skills) -> str:
        """Format a skill list compactly"""
        return ",".join(skills) if skills else "-"

    @staticmethod
    def format_timing(duration_seconds: float) -> str:
        """Format timing information"""
        return f"{duration_seconds * 1000:.2f}ms"


# ═══════════════════════════════════════════════════════════════════════════════
# LOGGING UTILITIES
# ═══════════════════════════════════════════════════════════════════════════════

def log_route_start(workspace_id: str, user_input: str, request_id: Optional[str] = None):
    """Log the start of request routing"""
    context = {"workspace": workspace_id, "query": user_input[:100]}
    if request_id:
        context["request_id"] = request_id
    logger_api.info(f"ROUTE_START | {LogContext.format_dict(context)}")


def log_pre_routed(pattern: str, request_type: str, target: str):
    """Log a deterministic pattern match"""
    context = {"pattern": pattern, "type": request_type, "target": target}
    logger_prerouter.info(f"PRE_ROUTED | {LogContext.format_dict(context)}")


def log_decision_revised(first_pass_type: str, final_type: str, reason: str):
    """Log a resolver revision of the classifier's type"""
    context = {"first_pass": first_pass_type, "final": final_type, "reason": reason}
    logger_freshness.info(f"DECISION_REVISED | {LogContext.format_dict(context)}")


def log_route_complete(
    request_type: str,
    confidence: float,
    needs_clarification: bool,
    stale_skills,
    duration_seconds: float,
    request_id: Optional[str] = None
):
    """Log routing completion"""
    context = {
        "type": request_type,
        "confidence": f"{confidence:.2f}",
        "clarify": needs_clarification,
        "stale": LogContext.format_skills(stale_skills),
        "duration": LogContext.format_timing(duration_seconds)
    }
    if request_id:
        context["request_id"] = request_id
    logger_api.info(f"ROUTE_COMPLETE | {LogContext.format_dict(context)}")
