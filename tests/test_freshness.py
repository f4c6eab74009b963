"""
Test suite for freshness resolution
"""

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.routing.freshness import UnknownTemplateReadiness, lookup_readiness, resolve_freshness
from core.routing.scope import infer_consult_skills
from core.schemas import Classification, RouterDecision, TemplateReadiness
from stubs import make_state


def test_evidence_inquiry_with_evidence():
    """Existing evidence is a pure read."""

    classification = Classification(type="evidence_inquiry", confidence=0.9, target_skill="pipeline-hygiene")
    decision = resolve_freshness(classification, make_state())

    assert decision.type == "evidence_inquiry"
    assert decision.target_skill == "pipeline-hygiene"
    assert decision.needs_clarification is False
    assert decision.estimated_wait == "< 1 second"
    assert decision.stale_skills_to_rerun == []
    assert decision.first_pass_type is None


def test_evidence_inquiry_without_evidence_becomes_skill_execution():
    """Asking about a skill that never ran offers to run it."""

    print("Testing evidence_inquiry revision...")

    classification = Classification(type="evidence_inquiry", confidence=0.85, target_skill="rep-scorecard")
    decision = resolve_freshness(classification, make_state(missing=("rep-scorecard",)))

    assert decision.type == "skill_execution"
    assert decision.skill_id == "rep-scorecard"
    assert decision.needs_clarification is True
    assert decision.clarification_question == (
        "Rep Scorecard hasn't been run yet. Would you like me to run it now?"
    )
    assert decision.first_pass_type == "evidence_inquiry"
    assert decision.stale_skills_to_rerun == []

    # First-pass classification is untouched
    assert classification.type == "evidence_inquiry"
    assert classification.skill_id is None

    # A skill absent from the index counts as never run
    unknown = Classification(type="evidence_inquiry", confidence=0.85, target_skill="weekly-recap")
    assert resolve_freshness(unknown, make_state()).type == "skill_execution"

    print("✓ evidence_inquiry revision tests passed")


def test_evidence_inquiry_without_target_skill():
    """No target skill means nothing to check."""

    classification = Classification(type="evidence_inquiry", confidence=0.9, target_metric="win_rate")
    decision = resolve_freshness(classification, make_state(missing=("pipeline-hygiene",)))

    assert decision.type == "evidence_inquiry"
    assert decision.target_metric == "win_rate"
    assert decision.estimated_wait == "< 1 second"


def test_scoped_analysis_flags_only_stale_skills():
    """Only stale members of the consulted set are rerun."""

    print("Testing scoped_analysis staleness...")

    classification = Classification(type="scoped_analysis", confidence=0.8, scope_type="pipeline")
    decision = resolve_freshness(classification, make_state(stale=("pipeline-waterfall",)))

    assert decision.skills_to_consult == [
        "pipeline-hygiene", "pipeline-coverage", "pipeline-waterfall", "forecast-rollup",
    ]
    assert decision.stale_skills_to_rerun == ["pipeline-waterfall"]
    assert decision.estimated_wait == "10-30 seconds"

    print("✓ scoped_analysis staleness tests passed")


def test_scoped_analysis_all_fresh():
    """Fresh evidence answers in a few seconds."""

    classification = Classification(type="scoped_analysis", confidence=0.8, scope_type="deal")
    decision = resolve_freshness(classification, make_state(stale=("icp-discovery",)))

    assert decision.skills_to_consult == ["pipeline-hygiene", "single-thread-alert"]
    assert decision.stale_skills_to_rerun == []
    assert decision.estimated_wait == "3-5 seconds"


def test_scoped_analysis_uses_classifier_skills():
    """Classifier-provided skills override scope inference."""

    classification = Classification(
        type="scoped_analysis",
        confidence=0.8,
        scope_type="pipeline",
        skills_to_consult=["lead-scoring", "icp-discovery", "lead-scoring"],
    )
    decision = resolve_freshness(classification, make_state(stale=("lead-scoring", "pipeline-hygiene")))

    assert decision.skills_to_consult == ["lead-scoring", "icp-discovery"]
    assert decision.stale_skills_to_rerun == ["lead-scoring"]


def test_scope_inference_table():
    """Test the scope → skills table and its default."""

    assert infer_consult_skills("account") == ["single-thread-alert", "icp-discovery"]
    assert infer_consult_skills("rep") == ["pipeline-coverage", "pipeline-hygiene", "rep-scorecard"]
    assert infer_consult_skills("forecast") == ["forecast-rollup", "pipeline-hygiene", "pipeline-coverage"]
    assert infer_consult_skills("segment") == ["icp-discovery", "pipeline-hygiene"]
    assert infer_consult_skills("time_range") == ["pipeline-hygiene", "pipeline-waterfall"]
    assert infer_consult_skills(None) == ["pipeline-hygiene"]
    assert infer_consult_skills("galaxy") == ["pipeline-hygiene"]

    # Callers get a copy
    infer_consult_skills("deal").append("mutated")
    assert infer_consult_skills("deal") == ["pipeline-hygiene", "single-thread-alert"]


def test_deliverable_not_ready_asks_with_reason():
    """A template that isn't ready is explained verbatim."""

    print("Testing deliverable readiness...")

    reason = "Missing required skills: workspace-config-audit. Run these skills first."
    state = make_state(readiness={
        "sales_process_map": TemplateReadiness(
            ready=False,
            reason=reason,
            stale_skills=["workspace-config-audit"],
        ),
    })

    classification = Classification(type="deliverable_request", confidence=0.9, deliverable_type="sales_process_map")
    decision = resolve_freshness(classification, state)

    assert decision.needs_clarification is True
    assert decision.clarification_question == reason
    assert decision.stale_skills_to_rerun == ["workspace-config-audit"]
    assert decision.template_id == "sales_process_map"
    assert decision.estimated_wait == "30-60 seconds"

    print("✓ deliverable readiness tests passed")


def test_deliverable_ready_still_reruns_stale():
    """Stale skills are copied even when the template is ready."""

    state = make_state(readiness={
        "forecast_report": TemplateReadiness(
            ready=True,
            reason="Evidence is stale for: forecast-rollup. Results may not reflect recent changes.",
            stale_skills=["forecast-rollup"],
        ),
    })

    classification = Classification(type="deliverable_request", confidence=0.9, template_id="forecast_report")
    decision = resolve_freshness(classification, state)

    assert decision.needs_clarification is False
    assert decision.stale_skills_to_rerun == ["forecast-rollup"]
    assert decision.template_id == "forecast_report"


def test_deliverable_unknown_template_fails_open():
    """Unknown templates proceed without clarification."""

    state = make_state()

    with pytest.raises(UnknownTemplateReadiness):
        lookup_readiness(state, "board_deck")

    classification = Classification(type="deliverable_request", confidence=0.9, deliverable_type="board_deck")
    decision = resolve_freshness(classification, state)

    assert decision.type == "deliverable_request"
    assert decision.needs_clarification is False
    assert decision.stale_skills_to_rerun == []
    assert decision.estimated_wait == "30-60 seconds"


def test_deliverable_blank_reason_uses_generic_question():
    """Whitespace-only reasons are replaced, keeping the decision valid."""

    state = make_state(readiness={
        "icp_profile": TemplateReadiness(template_name="ICP Profile", ready=False, reason="   "),
        "lead_scoring": TemplateReadiness(ready=False),
    })

    decision = resolve_freshness(
        Classification(type="deliverable_request", confidence=0.9, deliverable_type="icp_profile"),
        state,
    )
    assert decision.needs_clarification is True
    assert decision.clarification_question == "ICP Profile isn't ready to generate yet."

    decision = resolve_freshness(
        Classification(type="deliverable_request", confidence=0.9, template_id="lead_scoring"),
        state,
    )
    assert decision.clarification_question == "lead_scoring isn't ready to generate yet."


def test_decision_rejects_unknown_wait():
    """estimated_wait is limited to the four buckets."""

    with pytest.raises(ValidationError):
        RouterDecision(type="skill_execution", confidence=0.9, estimated_wait="soon", workspace_state=make_state())

    decision = RouterDecision(type="skill_execution", confidence=0.9, estimated_wait="10-30 seconds", workspace_state=make_state())
    assert decision.estimated_wait == "10-30 seconds"


def test_skill_execution():
    """Skill runs skip staleness checks."""

    classification = Classification(type="skill_execution", confidence=0.9, skill_id="pipeline-hygiene")
    decision = resolve_freshness(classification, make_state(stale=("pipeline-hygiene",)))

    assert decision.type == "skill_execution"
    assert decision.stale_skills_to_rerun == []
    assert decision.estimated_wait == "10-30 seconds"


def test_classifier_clarification_is_preserved():
    """A clarification requested by the classifier survives resolution."""

    classification = Classification(
        type="scoped_analysis",
        confidence=0.4,
        needs_clarification=True,
        clarification_question="Which account do you mean?",
    )
    decision = resolve_freshness(classification, make_state())

    assert decision.needs_clarification is True
    assert decision.clarification_question == "Which account do you mean?"


def run_all_tests():
    """Run all test functions."""
    print("\n" + "="*60)
    print("Running Freshness Resolution Tests")
    print("="*60 + "\n")

    test_evidence_inquiry_with_evidence()
    test_evidence_inquiry_without_evidence_becomes_skill_execution()
    test_evidence_inquiry_without_target_skill()
    test_scoped_analysis_flags_only_stale_skills()
    test_scoped_analysis_all_fresh()
    test_scoped_analysis_uses_classifier_skills()
    test_scope_inference_table()
    test_deliverable_not_ready_asks_with_reason()
    test_deliverable_ready_still_reruns_stale()
    test_deliverable_unknown_template_fails_open()
    test_deliverable_blank_reason_uses_generic_question()
    test_decision_rejects_unknown_wait()
    test_skill_execution()
    test_classifier_clarification_is_preserved()

    print("\n" + "="*60)
    print("✅ ALL TESTS PASSED!")
    print("="*60 + "\n")


if __name__ == "__main__":
    run_all_tests()
