"""
Presentation Helpers

Human-readable labels used in the classifier digest and clarification
questions. Relative ages are for display only; staleness always comes from
the precomputed `is_stale` flag.
"""

from datetime import datetime, timezone
from typing import Optional


def format_skill_name(skill_id: str) -> str:
    """
    Convert a hyphenated skill id to a Title Case label.

    Examples:
        "pipeline-hygiene" → "Pipeline Hygiene"
        "icp-discovery" → "Icp Discovery"
    """
    return " ".join(word[:1].upper() + word[1:] for word in skill_id.split("-"))


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def get_relative_time(timestamp: datetime, now: Optional[datetime] = None) -> str:
    """
    Describe how long ago a timestamp was.

    Buckets: "just now" (<1h), "N hours ago" (<24h), "N days ago" (<7d),
    "N weeks ago" otherwise. Naive datetimes are treated as UTC.
    """
    now = as_utc(now or datetime.now(timezone.utc))
    diff_seconds = (now - as_utc(timestamp)).total_seconds()

    hours = int(diff_seconds // 3600)
    if hours < 1:
        return "just now"
    if hours < 24:
        return f"{hours} hours ago"

    days = hours // 24
    if days < 7:
        return f"{days} days ago"

    return f"{days // 7} weeks ago"
