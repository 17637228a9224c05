"""
Tests for the pure implementation models.

Validates:
- Load units per complexity and category (half-up rounding)
- Political requirement checks and reasons
- Timeline estimation
- Opposition resistance and challenge generation
- Phase lookup and phase table validation
- Immediate, ongoing and final effects
"""

from __future__ import annotations

import pytest

from policy_engine.domain.schema import (
    ChallengeType,
    CoalitionParty,
    ImplementationPhase,
    PolicyTemplate,
    PoliticalSnapshot,
)
from policy_engine.implementation.effects import (
    final_effects,
    immediate_effects,
    ongoing_effects,
)
from policy_engine.implementation.load import policy_load, total_load
from policy_engine.implementation.phases import DEFAULT_PHASES, PhaseTable
from policy_engine.implementation.requirements import check_requirements
from policy_engine.implementation.resistance import (
    challenge_probability,
    compute_resistance,
    maybe_generate_challenge,
)
from policy_engine.implementation.timeline import compute_timeline


class SequenceRandom:
    """Random source returning a fixed sequence of draws."""

    def __init__(self, *values: float) -> None:
        self.values = list(values)

    def random(self) -> float:
        return self.values.pop(0)


def _make_template(**overrides) -> PolicyTemplate:
    fields = {
        "id": "stimulus",
        "name": "Stimulus Package",
        "category": "economic",
        "complexity": "medium",
        "baseCost": 1e8,
        "duration": 12,
        "effects": {"approval": {"min": 1, "max": 5}},
        "requirements": {"approval": 30, "coalitionSupport": 40},
    }
    fields.update(overrides)
    return PolicyTemplate.model_validate(fields)


def _make_snapshot(approval=50, coalition=50, opposition=50, week=1, year=1) -> PoliticalSnapshot:
    return PoliticalSnapshot(
        approval=approval,
        coalition=[CoalitionParty(name="Coalition", support=coalition)],
        opposition_strength=opposition,
        week=week,
        year=year,
    )


class TestLoad:
    @pytest.mark.parametrize(
        "complexity, category, expected",
        [
            ("low", "social", 15),
            ("medium", "economic", 30),
            ("high", "foreign", 52),
            ("high", "economic", 48),
            ("low", "environmental", 17),  # 16.5 rounds up
            ("medium", "environmental", 28),  # 27.5 rounds up
            ("low", "foreign", 20),  # 19.5 rounds up
        ],
    )
    def test_policy_load(self, complexity, category, expected):
        assert policy_load(_make_template(complexity=complexity, category=category)) == expected

    def test_total_load(self):
        templates = [_make_template(), _make_template(complexity="low", category="social")]
        assert total_load(templates) == 45


class TestRequirements:
    def test_requirements_met(self):
        check = check_requirements(_make_template(), _make_snapshot())
        assert check.allowed
        assert check.unmet_reasons == []

    def test_low_approval_fails(self):
        check = check_requirements(_make_template(), _make_snapshot(approval=20))
        assert not check.allowed
        assert check.unmet_reasons == ["Need 30% approval (currently 20.0%)"]

    def test_each_failure_contributes_a_reason(self):
        check = check_requirements(_make_template(), _make_snapshot(approval=20, coalition=10))
        assert len(check.unmet_reasons) == 2
        assert "coalition support" in check.unmet_reasons[1]
        assert check.message.startswith("Political requirements not met")

    def test_missing_coalition_counts_as_zero(self):
        snapshot = PoliticalSnapshot(approval=90, week=1, year=1)
        check = check_requirements(_make_template(), snapshot)
        assert not check.allowed
        assert check.unmet_reasons == ["Need 40% coalition support (currently 0.0%)"]

    def test_no_requirements_always_allowed(self):
        template = _make_template(requirements=None)
        assert check_requirements(template, _make_snapshot(approval=0, coalition=0)).allowed


class TestTimeline:
    def test_concrete_estimate(self):
        timeline = compute_timeline(_make_template(), 21, _make_snapshot())
        # 12 * 1.0 * 1.21 / 0.7 = 20.74
        assert timeline.planned == 12
        assert timeline.estimated == 21
        assert timeline.factors.approval == 0.7
        assert timeline.factors.opposition == pytest.approx(1.21)

    def test_high_approval_speeds_up(self):
        template = _make_template(complexity="low", duration=10)
        timeline = compute_timeline(template, 0, _make_snapshot(approval=100))
        assert timeline.estimated == 8

    def test_high_complexity_and_resistance(self):
        template = _make_template(complexity="high", duration=10)
        timeline = compute_timeline(template, 50, _make_snapshot(approval=35))
        # 10 * 1.3 * 1.5 / 0.7 = 27.86
        assert timeline.estimated == 28

    def test_estimate_at_least_one_week(self):
        template = _make_template(duration=0)
        assert compute_timeline(template, 0, _make_snapshot(approval=100)).estimated == 1


class TestResistance:
    def test_concrete_resistance(self):
        assert compute_resistance(_make_template(), _make_snapshot()) == pytest.approx(21)

    def test_cost_contribution_capped(self):
        template = _make_template(category="foreign", baseCost=5e9)
        assert compute_resistance(template, _make_snapshot(opposition=100)) == pytest.approx(75)

    def test_clamped_at_zero(self):
        template = _make_template(baseCost=0)
        assert compute_resistance(template, _make_snapshot(opposition=0)) == 0

    def test_challenge_probability(self):
        assert challenge_probability(100) == 0.5
        assert challenge_probability(21) == pytest.approx(0.105)

    def test_challenge_generated_below_threshold(self):
        rng = SequenceRandom(0.1, 0.5, 0.9)
        challenge = maybe_generate_challenge(
            _make_template(), 21, _make_snapshot(week=7, year=2), rng
        )
        assert challenge is not None
        assert challenge.type == ChallengeType.LEGAL_CHALLENGE
        assert challenge.severity == 3
        assert challenge.description == (
            "Legal challenge filed against Stimulus Package on constitutional grounds"
        )
        assert (challenge.week, challenge.year) == (7, 2)
        assert challenge.resolved is False

    def test_no_challenge_above_threshold(self):
        rng = SequenceRandom(0.99)
        assert maybe_generate_challenge(_make_template(), 21, _make_snapshot(), rng) is None
        assert rng.values == []

    def test_lowest_draws_give_first_type_and_severity(self):
        rng = SequenceRandom(0.0, 0.0, 0.0)
        challenge = maybe_generate_challenge(_make_template(), 21, _make_snapshot(), rng)
        assert challenge.type == ChallengeType.PARLIAMENTARY_QUESTION
        assert challenge.severity == 1


class TestPhaseTable:
    def setup_method(self):
        self.table = PhaseTable()

    def test_default_phases(self):
        assert [p.name for p in self.table.phases] == [
            "Planning & Preparation",
            "Initial Implementation",
            "Full Deployment",
            "Stabilization",
        ]
        assert len(self.table) == 4

    @pytest.mark.parametrize(
        "progress, expected",
        [(0, 0), (20, 0), (20.1, 1), (50, 1), (75, 2), (90, 2), (95, 3), (100, 3)],
    )
    def test_phase_at(self, progress, expected):
        assert self.table.phase_at(progress) == expected

    def test_thresholds(self):
        assert self.table.thresholds() == pytest.approx([20, 50, 90, 100])

    def test_fractions_must_sum_to_one(self):
        with pytest.raises(ValueError):
            PhaseTable(DEFAULT_PHASES[:3])

    def test_empty_table_rejected(self):
        with pytest.raises(ValueError):
            PhaseTable([])

    def test_custom_table(self):
        table = PhaseTable(
            [
                ImplementationPhase(name="Draft", fraction=0.5),
                ImplementationPhase(name="Enact", fraction=0.5),
            ]
        )
        assert table.phase_at(60) == 1


class TestEffects:
    def setup_method(self):
        self.template = _make_template(
            effects={"approval": {"min": 1, "max": 5}, "debt": 2.0}
        )

    def test_immediate(self):
        effects = immediate_effects(self.template)
        assert effects["approval"] == pytest.approx(0.2)
        assert effects["debt"] == pytest.approx(0.4)

    def test_ongoing_interpolates_and_scales_by_delta(self):
        effects = ongoing_effects(self.template, 0, 50)
        # (1 + 4 * 0.5) * 0.5
        assert effects["approval"] == pytest.approx(1.5)
        assert effects["debt"] == pytest.approx(1.0)

    def test_ongoing_without_progress_is_empty(self):
        assert ongoing_effects(self.template, 50, 50) == {}

    def test_ongoing_omits_zero_deltas(self):
        template = _make_template(effects={"approval": {"min": -1, "max": 1}, "gdp": 0})
        assert ongoing_effects(template, 0, 50) == {}

    def test_single_step_ongoing_reaches_max(self):
        assert ongoing_effects(self.template, 0, 100)["approval"] == pytest.approx(5)

    def test_final(self):
        assert final_effects(self.template) == {"approval": 5, "debt": 2.0}
