"""
Test suite for the classifier context digest and presentation helpers
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.config import MAX_THREAD_CONTEXT_CHARS
from core.routing.context_summary import build_context_summary
from core.routing.formatting import format_skill_name, get_relative_time
from core.schemas import RouterContext, WorkspaceStateIndex
from stubs import NOW, make_state


def test_format_skill_name():
    """Test hyphenated id → Title Case."""

    assert format_skill_name("pipeline-hygiene") == "Pipeline Hygiene"
    assert format_skill_name("single-thread-alert") == "Single Thread Alert"
    assert format_skill_name("icp-discovery") == "Icp Discovery"
    assert format_skill_name("forecast") == "Forecast"


def test_get_relative_time():
    """Test relative age buckets."""

    print("Testing get_relative_time...")

    assert get_relative_time(NOW - timedelta(minutes=59), NOW) == "just now"
    assert get_relative_time(NOW - timedelta(hours=1), NOW) == "1 hours ago"
    assert get_relative_time(NOW - timedelta(hours=23, minutes=59), NOW) == "23 hours ago"
    assert get_relative_time(NOW - timedelta(days=1), NOW) == "1 days ago"
    assert get_relative_time(NOW - timedelta(days=6, hours=23), NOW) == "6 days ago"
    assert get_relative_time(NOW - timedelta(days=7), NOW) == "1 weeks ago"
    assert get_relative_time(NOW - timedelta(days=30), NOW) == "4 weeks ago"

    # Naive timestamps are read as UTC
    naive = datetime(2026, 3, 2, 9, 0)
    assert get_relative_time(naive, NOW) == "3 hours ago"

    print("✓ get_relative_time tests passed")


def test_summary_lists_skills():
    """Skills with evidence carry age and finding count; missing ones are listed."""

    state = make_state(missing=("rep-scorecard",))
    summary = build_context_summary(state, now=NOW)

    assert summary.startswith("Available workspace context:")
    assert "- CRM: hubspot (120 deals, 30 won, 40 lost)" in summary
    assert "pipeline-hygiene (2 hours ago, 3 findings)" in summary
    assert "- Skills without evidence: rep-scorecard" in summary
    assert "rep-scorecard (" not in summary


def test_summary_renders_none_tokens():
    """Both skill lists render even when empty."""

    print("Testing empty workspace digest...")

    summary = build_context_summary(WorkspaceStateIndex(), now=NOW)

    assert "- CRM: not connected (0 deals, 0 won, 0 lost)" in summary
    assert "- Skills with evidence: none" in summary
    assert "- Skills without evidence: none" in summary

    everything_missing = make_state(missing=(
        "pipeline-hygiene", "pipeline-coverage", "pipeline-waterfall", "forecast-rollup",
        "single-thread-alert", "icp-discovery", "rep-scorecard", "lead-scoring",
    ))
    summary = build_context_summary(everything_missing, now=NOW)
    assert "- Skills with evidence: none" in summary

    print("✓ empty workspace digest tests passed")


def test_summary_includes_ui_context():
    """UI scope and thread context are appended when present."""

    state = make_state()

    summary = build_context_summary(
        state,
        RouterContext(scope_type="deal", scope_entity="Acme Renewal", thread_context="Q3 review"),
        now=NOW,
    )
    assert "- Current UI scope: deal (Acme Renewal)" in summary
    assert "- Thread context: Q3 review" in summary

    summary = build_context_summary(state, RouterContext(scope_type="pipeline"), now=NOW)
    assert "- Current UI scope: pipeline" in summary
    assert "Thread context" not in summary

    assert "Current UI scope" not in build_context_summary(state, now=NOW)


def test_thread_context_is_bounded():
    """Long thread context is truncated."""

    long_thread = "x" * (MAX_THREAD_CONTEXT_CHARS * 3)
    summary = build_context_summary(make_state(), RouterContext(thread_context=long_thread), now=NOW)

    thread_line = [line for line in summary.splitlines() if line.startswith("- Thread context:")][0]
    assert thread_line.endswith("...")
    assert len(thread_line) < MAX_THREAD_CONTEXT_CHARS + 30


def run_all_tests():
    """Run all test functions."""
    print("\n" + "="*60)
    print("Running Context Summary Tests")
    print("="*60 + "\n")

    test_format_skill_name()
    test_get_relative_time()
    test_summary_lists_skills()
    test_summary_renders_none_tokens()
    test_summary_includes_ui_context()
    test_thread_context_is_bounded()

    print("\n" + "="*60)
    print("✅ ALL TESTS PASSED!")
    print("="*60 + "\n")


if __name__ == "__main__":
    run_all_tests()
