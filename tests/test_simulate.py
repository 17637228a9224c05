"""
Tests for the simulation runner and its command-line entrypoint.
"""

from __future__ import annotations

from policy_engine.catalog import get_policy
from policy_engine.domain.schema import PhaseChanged, PolicyCompleted
from policy_engine.implementation.scheduler import ImplementationScheduler
from policy_engine.simulate import advance_clock, main, run_simulation
from policy_engine.storage.state_store import JSONStateStore

DEFAULT_POLICIES = ["small_business_support", "unemployment_benefits", "trade_agreement"]


class NeverRandom:
    def random(self) -> float:
        return 0.99


class TestAdvanceClock:
    def test_within_year(self):
        assert advance_clock(10, 3) == (11, 3)

    def test_year_rollover(self):
        assert advance_clock(52, 3) == (1, 4)


class TestRunSimulation:
    def setup_method(self):
        self.policies = [get_policy(policy_id) for policy_id in DEFAULT_POLICIES]

    def test_default_policies_complete(self):
        scheduler = ImplementationScheduler(rng=NeverRandom())
        report = run_simulation(scheduler, self.policies, weeks=30)

        assert report.pending == []
        assert {r.template.id for r in scheduler.history()} == set(DEFAULT_POLICIES)
        completed = [e for e in report.events if isinstance(e, PolicyCompleted)]
        assert len(completed) == 3
        assert report.applied_effects["approval"] > 0
        assert (report.final_week, report.final_year) == (31, 1)

    def test_phase_changes_are_logged_and_reported(self):
        scheduler = ImplementationScheduler(rng=NeverRandom())
        report = run_simulation(scheduler, [get_policy("small_business_support")], weeks=3)
        assert any(isinstance(e, PhaseChanged) for e in report.events)

    def test_queued_until_capacity_frees(self):
        scheduler = ImplementationScheduler(capacity=40, rng=NeverRandom())
        report = run_simulation(scheduler, self.policies, weeks=2)
        assert report.pending == ["unemployment_benefits", "trade_agreement"]
        assert scheduler.current_load() == 30

    def test_never_admitted_without_support(self):
        scheduler = ImplementationScheduler(rng=NeverRandom())
        report = run_simulation(scheduler, self.policies, weeks=3, coalition_support=10)
        assert report.pending == DEFAULT_POLICIES
        assert report.events == []


class TestMain:
    def test_save_then_resume(self, tmp_path):
        state_file = str(tmp_path / "policies.json")
        assert main(["--weeks", "3", "--seed", "1", "--state-file", state_file, "--save"]) == 0

        state = JSONStateStore(state_file).load()
        assert len(state.active) == 3

        assert main(
            ["--weeks", "30", "--seed", "1", "--state-file", state_file, "--resume", "--save"]
        ) == 0
        state = JSONStateStore(state_file).load()
        assert state.active == []
        assert len(state.history) == 3
