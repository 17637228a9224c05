"""
Implementation Scheduler — admits policies and advances them week by week.

The scheduler owns the set of in-flight implementations and the history of
completed ones. It is the only component that mutates an
ImplementationRecord.

Admission (``submit``) checks, in order:
1. TEMPLATE   — duration must be positive
2. CAPACITY   — combined load of in-flight policies plus the new one must
                fit within the implementation capacity
3. POLITICS   — approval and coalition requirements
4. GATE       — optional caller-supplied admission gate (e.g., feature gating)

Rejections are returned as typed results, never raised: they are expected,
frequent outcomes. Admission is all-or-nothing.

Advancement (``tick``) recomputes progress from absolute elapsed weeks, so a
repeated tick for the same (week, year) cannot double-advance a policy or
re-emit its effects. Events are returned to the caller as a batch; the
scheduler has no event bus and owns no global game state.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Iterable
from uuid import UUID

from policy_engine.domain.schema import (
    ActiveSummary,
    Admitted,
    CapacityExceeded,
    CapacityStatus,
    EffectLedger,
    ExternallyRejected,
    ImplementationCosts,
    ImplementationRecord,
    ImplementationStatus,
    InvalidTemplate,
    OngoingEffectsComputed,
    OppositionChallengeRaised,
    OppositionState,
    PhaseChanged,
    PolicyAdmitted,
    PolicyCompleted,
    PolicyComplexity,
    PolicyTemplate,
    PoliticalSnapshot,
    RequirementsNotMet,
    SchedulerEvent,
    SchedulerState,
    SubmissionResult,
)
from policy_engine.implementation.effects import (
    final_effects,
    immediate_effects,
    ongoing_effects,
)
from policy_engine.implementation.load import policy_load, total_load
from policy_engine.implementation.numeric import round_half_up
from policy_engine.implementation.phases import PhaseTable, phase_index_for
from policy_engine.implementation.requirements import check_requirements
from policy_engine.implementation.resistance import (
    RandomSource,
    compute_resistance,
    maybe_generate_challenge,
)
from policy_engine.implementation.timeline import compute_timeline

logger = logging.getLogger(__name__)

DEFAULT_IMPLEMENTATION_CAPACITY = 100
WEEKS_PER_YEAR = 52

POLITICAL_COST_MULTIPLIERS: dict[PolicyComplexity, float] = {
    PolicyComplexity.LOW: 1.0,
    PolicyComplexity.MEDIUM: 1.5,
    PolicyComplexity.HIGH: 2.0,
}


@dataclass
class GateDecision:
    """Verdict of an external admission gate."""

    allowed: bool
    reason: str = ""
    upgrade_prompt: str | None = None


AdmissionGate = Callable[[PolicyTemplate, "ImplementationScheduler"], "GateDecision | None"]


def absolute_week(week: int, year: int) -> int:
    return year * WEEKS_PER_YEAR + week


def political_cost(template: PolicyTemplate, resistance: float) -> int:
    """Political capital spent to enact ``template``; one unit per 100M, scaled."""
    return round_half_up(
        template.base_cost
        / 1e8
        * POLITICAL_COST_MULTIPLIERS[template.complexity]
        * (1 + resistance / 200)
    )


class ImplementationScheduler:
    """
    Capacity-bounded, multi-phase scheduler of policy implementations.

    Each instance holds its own state and random source, so independent
    schedulers can run side by side and tests can be fully deterministic.
    The clock is not owned here: every call receives the current week and
    year inside a PoliticalSnapshot.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_IMPLEMENTATION_CAPACITY,
        rng: RandomSource | None = None,
        phase_table: PhaseTable | None = None,
        admission_gate: AdmissionGate | None = None,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            capacity: Total implementation capacity in load units.
            rng: Uniform random source for opposition challenges.
            phase_table: Phase sequence given to newly admitted policies.
            admission_gate: Extra precondition checked after capacity and politics.
        """
        if capacity <= 0:
            raise ValueError(f"Implementation capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.rng: RandomSource = rng if rng is not None else random.Random()
        self.phase_table = phase_table or PhaseTable()
        self.admission_gate = admission_gate
        self._active: dict[UUID, ImplementationRecord] = {}
        self._history: list[ImplementationRecord] = []

    # ── Admission ──────────────────────────────────────────────

    def submit(
        self,
        template: PolicyTemplate,
        snapshot: PoliticalSnapshot,
    ) -> SubmissionResult:
        """
        Try to start implementing ``template``.

        Args:
            template: Catalog policy to enact.
            snapshot: Current political situation and clock.

        Returns:
            Admitted with the new record and a PolicyAdmitted event, or one
            of CapacityExceeded, RequirementsNotMet, ExternallyRejected,
            InvalidTemplate. Nothing changes unless the result is Admitted.
        """
        if template.duration <= 0:
            reasons = [f"Duration must be a positive number of weeks, got {template.duration}"]
            logger.warning("Rejected invalid template %s: %s", template.id, reasons[0])
            return InvalidTemplate(
                policy_id=template.id,
                reasons=reasons,
                message=f"Invalid policy template: {reasons[0]}",
            )

        current = self.current_load()
        needed = policy_load(template)
        if current + needed > self.capacity:
            logger.info(
                "Capacity exceeded for %s: %d + %d > %d",
                template.id, current, needed, self.capacity,
            )
            return CapacityExceeded(
                policy_id=template.id,
                current_load=current,
                policy_load=needed,
                available=self.capacity - current,
                capacity=self.capacity,
                message=(
                    f"Implementation capacity exceeded. Would exceed capacity "
                    f"({current + needed}/{self.capacity})"
                ),
            )

        requirement_check = check_requirements(template, snapshot)
        if not requirement_check.allowed:
            logger.info("Requirements not met for %s", template.id)
            return RequirementsNotMet(
                policy_id=template.id,
                reasons=requirement_check.unmet_reasons,
                message=requirement_check.message,
            )

        if self.admission_gate is not None:
            decision = self.admission_gate(template, self)
            if decision is not None and not decision.allowed:
                logger.info("Admission gate rejected %s: %s", template.id, decision.reason)
                return ExternallyRejected(
                    policy_id=template.id,
                    reason=decision.reason,
                    upgrade_prompt=decision.upgrade_prompt,
                    message=decision.reason,
                )

        record = self._create_record(template, snapshot)
        self._active[record.id] = record

        logger.info(
            "Policy admitted: %s [%s/%s] load=%d resistance=%.1f estimated=%d weeks",
            template.name,
            template.category.value,
            template.complexity.value,
            needed,
            record.opposition.resistance,
            record.timeline.estimated,
        )

        event = PolicyAdmitted(
            record_id=record.id,
            policy_id=template.id,
            policy_name=template.name,
            week=snapshot.week,
            year=snapshot.year,
            resistance=record.opposition.resistance,
            timeline=record.timeline,
            immediate_effects=dict(record.effects.immediate),
        )
        return Admitted(
            policy_id=template.id,
            record=record,
            events=[event],
            message=f"Successfully started implementing {template.name}",
        )

    def _create_record(
        self,
        template: PolicyTemplate,
        snapshot: PoliticalSnapshot,
    ) -> ImplementationRecord:
        resistance = compute_resistance(template, snapshot)
        return ImplementationRecord(
            template=template,
            start_week=snapshot.week,
            start_year=snapshot.year,
            timeline=compute_timeline(template, resistance, snapshot),
            phases=list(self.phase_table.phases),
            effects=EffectLedger(immediate=immediate_effects(template)),
            opposition=OppositionState(resistance=resistance),
            costs=ImplementationCosts(
                financial=template.base_cost,
                political=political_cost(template, resistance),
            ),
            last_observed_week=snapshot.week,
            last_observed_year=snapshot.year,
        )

    # ── Advancement ────────────────────────────────────────────

    def tick(self, snapshot: PoliticalSnapshot) -> list[SchedulerEvent]:
        """
        Advance every in-flight policy to the snapshot's week.

        Records already processed at (or after) this week are skipped, so
        calling tick twice with the same snapshot emits nothing new.

        Returns:
            Events in record order: PhaseChanged, OngoingEffectsComputed,
            OppositionChallengeRaised, PolicyCompleted.
        """
        events: list[SchedulerEvent] = []
        for record in list(self._active.values()):
            events.extend(self._advance(record, snapshot))
        return events

    def _advance(
        self,
        record: ImplementationRecord,
        snapshot: PoliticalSnapshot,
    ) -> list[SchedulerEvent]:
        now = absolute_week(snapshot.week, snapshot.year)
        if now <= absolute_week(record.last_observed_week, record.last_observed_year):
            return []

        template = record.template
        common: dict[str, Any] = {
            "record_id": record.id,
            "policy_id": template.id,
            "policy_name": template.name,
            "week": snapshot.week,
            "year": snapshot.year,
        }
        events: list[SchedulerEvent] = []

        weeks_elapsed = now - absolute_week(record.start_week, record.start_year)
        progress_before = record.progress
        progress_after = min(100.0, weeks_elapsed / record.timeline.estimated * 100)
        progress_after = max(progress_before, progress_after)

        record.progress = progress_after
        record.last_observed_week = snapshot.week
        record.last_observed_year = snapshot.year

        phase_index = phase_index_for(record.phases, progress_after)
        if phase_index > record.current_phase_index:
            previous = record.current_phase_index
            record.current_phase_index = phase_index
            logger.info(
                "Phase change: %s → %s (%.1f%%)",
                template.name, record.phases[phase_index].name, progress_after,
            )
            events.append(
                PhaseChanged(
                    **common,
                    previous_phase_index=previous,
                    phase_index=phase_index,
                    phase_name=record.phases[phase_index].name,
                )
            )

        ongoing = ongoing_effects(template, progress_before, progress_after)
        record.effects.ongoing = ongoing
        if ongoing:
            events.append(
                OngoingEffectsComputed(
                    **common,
                    progress_before=progress_before,
                    progress_after=progress_after,
                    effects=dict(ongoing),
                )
            )

        challenge = maybe_generate_challenge(
            template, record.opposition.resistance, snapshot, self.rng
        )
        if challenge is not None:
            record.opposition.challenges.append(challenge)
            events.append(OppositionChallengeRaised(**common, challenge=challenge))

        if progress_after >= 100:
            events.append(self._complete(record, snapshot, common))

        return events

    def _complete(
        self,
        record: ImplementationRecord,
        snapshot: PoliticalSnapshot,
        common: dict[str, Any],
    ) -> PolicyCompleted:
        record.effects.final = final_effects(record.template)
        record.status = ImplementationStatus.COMPLETED
        record.completed_week = snapshot.week
        record.completed_year = snapshot.year

        del self._active[record.id]
        self._history.append(record)

        logger.info(
            "Policy implementation completed: %s (challenges=%d)",
            record.template.name,
            len(record.opposition.challenges),
        )
        return PolicyCompleted(**common, final_effects=dict(record.effects.final))

    # ── Views ──────────────────────────────────────────────────

    def current_load(self) -> int:
        return total_load(record.template for record in self._active.values())

    def capacity_status(self) -> CapacityStatus:
        used = self.current_load()
        return CapacityStatus(
            used=used,
            total=self.capacity,
            available=self.capacity - used,
            percentage=used / self.capacity * 100,
        )

    def active_summaries(self) -> list[ActiveSummary]:
        summaries = []
        for record in self._active.values():
            estimated = record.timeline.estimated
            summaries.append(
                ActiveSummary(
                    id=record.id,
                    name=record.template.name,
                    category=record.template.category,
                    progress=record.progress,
                    current_phase=record.current_phase,
                    time_remaining=max(0.0, estimated - estimated * record.progress / 100),
                    resistance=record.opposition.resistance,
                )
            )
        return summaries

    def get_record(self, record_id: UUID) -> ImplementationRecord | None:
        """Retrieve an in-flight or completed record."""
        record = self._active.get(record_id)
        if record is not None:
            return record
        return next((r for r in self._history if r.id == record_id), None)

    def active_records(self) -> list[ImplementationRecord]:
        return list(self._active.values())

    def history(self) -> list[ImplementationRecord]:
        return list(self._history)

    # ── Persistence support ────────────────────────────────────

    def snapshot(self) -> SchedulerState:
        """Deep, plain-data copy of the scheduler's state."""
        return SchedulerState(
            capacity=self.capacity,
            active=[record.model_copy(deep=True) for record in self._active.values()],
            history=[record.model_copy(deep=True) for record in self._history],
        )

    def restore(self, records: Iterable[ImplementationRecord | dict[str, Any]]) -> None:
        """
        Reload records without admission checks (trusted reload path).

        Completed records go to history; the rest rejoin the active set.
        Capacity is not re-checked.

        Raises:
            ValueError: If a record id is already known to this scheduler.
            pydantic.ValidationError: If a plain-data record is malformed.
        """
        loaded = [
            record.model_copy(deep=True)
            if isinstance(record, ImplementationRecord)
            else ImplementationRecord.model_validate(record)
            for record in records
        ]

        known = set(self._active) | {record.id for record in self._history}
        for record in loaded:
            if record.id in known:
                raise ValueError(f"Implementation record {record.id} already loaded")
            known.add(record.id)

        for record in loaded:
            if record.is_completed:
                self._history.append(record)
            else:
                self._active[record.id] = record

        logger.info(
            "Restored %d implementation records (active=%d history=%d)",
            len(loaded), len(self._active), len(self._history),
        )

    @classmethod
    def from_state(cls, state: SchedulerState, **kwargs: Any) -> ImplementationScheduler:
        """Build a scheduler from a saved snapshot."""
        scheduler = cls(capacity=state.capacity, **kwargs)
        scheduler.restore([*state.active, *state.history])
        return scheduler
