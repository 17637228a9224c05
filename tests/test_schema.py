"""
Tests for the Policy Schema — verifies the Pydantic models.

Validates:
- Authored effect shapes coerce into the tagged effect union
- Aliases accepted on templates and requirements
- Political snapshot aggregates
- Discriminated event and result unions
"""

from __future__ import annotations

from uuid import uuid4

import pytest
from pydantic import TypeAdapter, ValidationError

from policy_engine.domain.schema import (
    Admitted,
    CapacityExceeded,
    CoalitionParty,
    EventType,
    PhaseChanged,
    PolicyCategory,
    PolicyComplexity,
    PolicyTemplate,
    PoliticalSnapshot,
    RangeEffect,
    ScalarEffect,
    SchedulerEvent,
    SubmissionOutcome,
    SubmissionResult,
)


class TestPolicyTemplate:
    """Test PolicyTemplate validation of authored catalog data."""

    def test_authored_range_effect(self):
        t = PolicyTemplate.model_validate(
            {
                "id": "p",
                "name": "P",
                "category": "economic",
                "complexity": "medium",
                "baseCost": 1e8,
                "duration": 12,
                "effects": {"approval": {"min": 1, "max": 5}},
                "requirements": {"approval": 30, "coalitionSupport": 40},
            }
        )
        assert t.effects["approval"] == RangeEffect(min=1, max=5)
        assert t.base_cost == 1e8
        assert t.requirements.coalition_support == 40
        assert t.category == PolicyCategory.ECONOMIC
        assert t.complexity == PolicyComplexity.MEDIUM

    def test_authored_scalar_effect(self):
        t = PolicyTemplate(
            id="p",
            name="P",
            category="social",
            complexity="low",
            duration=4,
            effects={"debt": 2.5},
        )
        assert isinstance(t.effects["debt"], ScalarEffect)
        assert t.effects["debt"].value == 2.5

    def test_tagged_effects_pass_through(self):
        t = PolicyTemplate(
            id="p",
            name="P",
            category="social",
            complexity="low",
            duration=4,
            effects={"gdp": {"kind": "scalar", "value": 1.0}},
        )
        assert t.effects["gdp"] == ScalarEffect(value=1.0)

    def test_non_finite_effect_rejected(self):
        with pytest.raises(ValidationError):
            PolicyTemplate(
                id="p",
                name="P",
                category="social",
                complexity="low",
                duration=4,
                effects={"gdp": {"min": 0, "max": float("inf")}},
            )

    def test_unknown_complexity_rejected(self):
        with pytest.raises(ValidationError):
            PolicyTemplate(id="p", name="P", category="social", complexity="extreme", duration=4)

    def test_missing_effects_and_requirements(self):
        t = PolicyTemplate(id="p", name="P", category="foreign", complexity="high", duration=4)
        assert t.effects == {}
        assert t.requirements is None

    def test_template_is_immutable(self):
        t = PolicyTemplate(id="p", name="P", category="foreign", complexity="high", duration=4)
        with pytest.raises(ValidationError):
            t.duration = 10


class TestPoliticalSnapshot:
    def test_coalition_support_is_sum_of_parties(self):
        s = PoliticalSnapshot(
            approval=50,
            coalition=[CoalitionParty(name="A", support=30), CoalitionParty(name="B", support=25)],
            week=1,
            year=1,
        )
        assert s.coalition_support == 55

    def test_coalition_support_defaults_to_zero(self):
        s = PoliticalSnapshot(approval=50, week=1, year=1)
        assert s.coalition_support == 0
        assert s.opposition_strength == 50

    def test_approval_bounded(self):
        with pytest.raises(ValidationError):
            PoliticalSnapshot(approval=120, week=1, year=1)


class TestDiscriminatedUnions:
    def test_event_union_dispatches_on_event(self):
        event = TypeAdapter(SchedulerEvent).validate_python(
            {
                "event": "phase_changed",
                "record_id": str(uuid4()),
                "policy_id": "p",
                "policy_name": "P",
                "week": 3,
                "year": 1,
                "previous_phase_index": 0,
                "phase_index": 1,
                "phase_name": "Initial Implementation",
            }
        )
        assert isinstance(event, PhaseChanged)
        assert event.event == EventType.PHASE_CHANGED

    def test_result_union_dispatches_on_outcome(self):
        result = TypeAdapter(SubmissionResult).validate_python(
            {
                "outcome": "capacity_exceeded",
                "policy_id": "p",
                "current_load": 90,
                "policy_load": 30,
                "available": 10,
                "capacity": 100,
            }
        )
        assert isinstance(result, CapacityExceeded)
        assert not result.is_admitted

    def test_admitted_reports_admission(self):
        assert Admitted.model_fields["outcome"].default == SubmissionOutcome.ADMITTED
