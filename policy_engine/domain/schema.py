"""
Policy Schema — Pydantic models for every policy implementation entity.

These models are the canonical data structures shared by the load, timeline,
resistance, phase and effect models and by the implementation scheduler.
They also form the plain-data snapshot handed to an external persistence
layer, so every field of an in-flight implementation is representable here.

Lifecycle overview:
    PolicyTemplate      — authored catalog data, never mutated
    PoliticalSnapshot   — supplied by the caller on every operation, read-only
    ImplementationRecord — created at admission, mutated only by the scheduler,
                           moved to history exactly once on completion
    Challenge           — created by the resistance model, never removed
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


# ════════════════════════════════════════════════════════════════
# Enumerations
# ════════════════════════════════════════════════════════════════


class PolicyCategory(str, enum.Enum):
    """Policy areas; each carries its own load multiplier and base resistance."""

    ECONOMIC = "economic"
    SOCIAL = "social"
    ENVIRONMENTAL = "environmental"
    FOREIGN = "foreign"


class PolicyComplexity(str, enum.Enum):
    """Implementation complexity of a policy."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ImplementationStatus(str, enum.Enum):
    """Status of an implementation record. COMPLETED is terminal."""

    IMPLEMENTING = "implementing"
    COMPLETED = "completed"


class ChallengeType(str, enum.Enum):
    """Kinds of opposition action raised against an in-flight policy."""

    PARLIAMENTARY_QUESTION = "parliamentary_question"
    MEDIA_CAMPAIGN = "media_campaign"
    LEGAL_CHALLENGE = "legal_challenge"
    PUBLIC_PROTEST = "public_protest"
    COALITION_PRESSURE = "coalition_pressure"


class SubmissionOutcome(str, enum.Enum):
    """Outcome of submitting a policy to the scheduler."""

    ADMITTED = "admitted"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    REQUIREMENTS_NOT_MET = "requirements_not_met"
    EXTERNALLY_REJECTED = "externally_rejected"
    INVALID_TEMPLATE = "invalid_template"


class EventType(str, enum.Enum):
    """Events surfaced by the scheduler for the caller to react to."""

    POLICY_ADMITTED = "policy_admitted"
    PHASE_CHANGED = "phase_changed"
    ONGOING_EFFECTS_COMPUTED = "ongoing_effects_computed"
    OPPOSITION_CHALLENGE_RAISED = "opposition_challenge_raised"
    POLICY_COMPLETED = "policy_completed"


# ════════════════════════════════════════════════════════════════
# Policy Templates (authored catalog data)
# ════════════════════════════════════════════════════════════════


class ScalarEffect(BaseModel):
    """An effect with a single fixed magnitude."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["scalar"] = "scalar"
    value: float = Field(allow_inf_nan=False)


class RangeEffect(BaseModel):
    """An effect realised somewhere between ``min`` and ``max`` as a policy matures."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["range"] = "range"
    min: float = Field(allow_inf_nan=False)
    max: float = Field(allow_inf_nan=False)


Effect = Annotated[Union[ScalarEffect, RangeEffect], Field(discriminator="kind")]


class PolicyRequirements(BaseModel):
    """Political preconditions for admitting a policy (percentages, 0–100)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    approval: float = Field(default=0, description="Minimum public approval")
    coalition_support: float = Field(
        default=0,
        alias="coalitionSupport",
        description="Minimum aggregate coalition support",
    )


class PolicyTemplate(BaseModel):
    """
    An enactable policy as authored in the catalog.

    Effects may be written in their authored shape: a bare number is a
    scalar effect, a ``{"min": ..., "max": ...}`` mapping is a range effect.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="Stable catalog identifier (e.g., 'tax_reform')")
    name: str
    description: str = ""
    category: PolicyCategory
    complexity: PolicyComplexity
    base_cost: float = Field(
        default=0, ge=0, alias="baseCost", description="Financial cost in currency units"
    )
    duration: int = Field(description="Planned implementation duration in weeks")
    effects: dict[str, Effect] = Field(default_factory=dict)
    requirements: PolicyRequirements | None = None

    @field_validator("effects", mode="before")
    @classmethod
    def _coerce_authored_effects(cls, value: object) -> object:
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        coerced: dict[str, object] = {}
        for name, effect in value.items():
            if isinstance(effect, (int, float)) and not isinstance(effect, bool):
                coerced[name] = {"kind": "scalar", "value": effect}
            elif isinstance(effect, dict) and "kind" not in effect:
                coerced[name] = {"kind": "range", **effect}
            else:
                coerced[name] = effect
        return coerced


# ════════════════════════════════════════════════════════════════
# Political State (supplied by the caller)
# ════════════════════════════════════════════════════════════════


class CoalitionParty(BaseModel):
    """A party in the governing coalition and the support it contributes."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    support: float = 0


class PoliticalSnapshot(BaseModel):
    """Read-only view of the political situation at the current simulated week."""

    model_config = ConfigDict(frozen=True)

    approval: float = Field(ge=0, le=100, description="Public approval percentage")
    coalition: list[CoalitionParty] = Field(default_factory=list)
    opposition_strength: float = Field(default=50, ge=0, le=100)
    week: int = Field(description="Current simulated week of the year")
    year: int = Field(description="Current simulated year")

    @computed_field
    @property
    def coalition_support(self) -> float:
        """Aggregate coalition support: the sum of every party's support."""
        return sum(party.support for party in self.coalition)


# ════════════════════════════════════════════════════════════════
# Implementation Records
# ════════════════════════════════════════════════════════════════


class TimelineFactors(BaseModel):
    """Multipliers that turned the planned duration into the estimate."""

    complexity: float
    opposition: float
    approval: float


class Timeline(BaseModel):
    """Planned versus adjusted duration of an implementation, in weeks."""

    planned: int
    estimated: int = Field(ge=1)
    factors: TimelineFactors


class ImplementationPhase(BaseModel):
    """One stage of rollout and the share of total duration it occupies."""

    model_config = ConfigDict(frozen=True)

    name: str
    fraction: float = Field(gt=0, le=1)
    description: str = ""
    intensity: str = Field(default="", description="How strongly effects are felt")


class Challenge(BaseModel):
    """An opposition action recorded against an in-flight policy."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    type: ChallengeType
    severity: int = Field(ge=1, le=3)
    description: str
    week: int
    year: int
    resolved: bool = False


class EffectLedger(BaseModel):
    """Effect payloads of an implementation."""

    immediate: dict[str, float] = Field(
        default_factory=dict, description="Realised the instant the policy was admitted"
    )
    ongoing: dict[str, float] = Field(
        default_factory=dict, description="Incremental contribution emitted by the latest tick"
    )
    final: dict[str, float] = Field(
        default_factory=dict, description="Full realisation, set on completion"
    )


class OppositionState(BaseModel):
    """Opposition pressure on an implementation."""

    resistance: float = Field(ge=0, le=100, description="Fixed at admission")
    challenges: list[Challenge] = Field(default_factory=list)


class ImplementationCosts(BaseModel):
    financial: float = 0
    political: int = 0
    ongoing: float = 0


class ImplementationRecord(BaseModel):
    """
    A policy in flight (or, once completed, in history).

    Progress is recomputed from absolute elapsed weeks on every tick, never
    accumulated. ``last_observed_week``/``last_observed_year`` hold the clock
    position most recently processed so that a repeated tick is a no-op.
    """

    id: UUID = Field(default_factory=uuid4)
    template: PolicyTemplate
    start_week: int
    start_year: int
    timeline: Timeline
    status: ImplementationStatus = ImplementationStatus.IMPLEMENTING
    progress: float = Field(default=0.0, ge=0, le=100)
    phases: list[ImplementationPhase]
    current_phase_index: int = Field(default=0, ge=0)
    effects: EffectLedger = Field(default_factory=EffectLedger)
    opposition: OppositionState
    costs: ImplementationCosts = Field(default_factory=ImplementationCosts)
    last_observed_week: int
    last_observed_year: int
    completed_week: int | None = None
    completed_year: int | None = None

    @property
    def current_phase(self) -> ImplementationPhase:
        return self.phases[self.current_phase_index]

    @property
    def is_completed(self) -> bool:
        return self.status == ImplementationStatus.COMPLETED


# ════════════════════════════════════════════════════════════════
# Scheduler Events
# ════════════════════════════════════════════════════════════════


class _PolicyEvent(BaseModel):
    """Fields common to every scheduler event."""

    model_config = ConfigDict(frozen=True)

    record_id: UUID
    policy_id: str
    policy_name: str
    week: int
    year: int


class PolicyAdmitted(_PolicyEvent):
    event: Literal[EventType.POLICY_ADMITTED] = EventType.POLICY_ADMITTED
    resistance: float
    timeline: Timeline
    immediate_effects: dict[str, float]


class PhaseChanged(_PolicyEvent):
    event: Literal[EventType.PHASE_CHANGED] = EventType.PHASE_CHANGED
    previous_phase_index: int
    phase_index: int
    phase_name: str


class OngoingEffectsComputed(_PolicyEvent):
    event: Literal[EventType.ONGOING_EFFECTS_COMPUTED] = EventType.ONGOING_EFFECTS_COMPUTED
    progress_before: float
    progress_after: float
    effects: dict[str, float]


class OppositionChallengeRaised(_PolicyEvent):
    event: Literal[EventType.OPPOSITION_CHALLENGE_RAISED] = (
        EventType.OPPOSITION_CHALLENGE_RAISED
    )
    challenge: Challenge


class PolicyCompleted(_PolicyEvent):
    event: Literal[EventType.POLICY_COMPLETED] = EventType.POLICY_COMPLETED
    final_effects: dict[str, float]


SchedulerEvent = Annotated[
    Union[
        PolicyAdmitted,
        PhaseChanged,
        OngoingEffectsComputed,
        OppositionChallengeRaised,
        PolicyCompleted,
    ],
    Field(discriminator="event"),
]


# ════════════════════════════════════════════════════════════════
# Submission Results
# ════════════════════════════════════════════════════════════════


class _SubmissionResult(BaseModel):
    """Fields common to every submission result."""

    outcome: SubmissionOutcome
    policy_id: str
    message: str = ""

    @property
    def is_admitted(self) -> bool:
        return self.outcome == SubmissionOutcome.ADMITTED


class Admitted(_SubmissionResult):
    outcome: Literal[SubmissionOutcome.ADMITTED] = SubmissionOutcome.ADMITTED
    record: ImplementationRecord
    events: list[SchedulerEvent] = Field(default_factory=list)


class CapacityExceeded(_SubmissionResult):
    outcome: Literal[SubmissionOutcome.CAPACITY_EXCEEDED] = SubmissionOutcome.CAPACITY_EXCEEDED
    current_load: int
    policy_load: int
    available: int
    capacity: int


class RequirementsNotMet(_SubmissionResult):
    outcome: Literal[SubmissionOutcome.REQUIREMENTS_NOT_MET] = (
        SubmissionOutcome.REQUIREMENTS_NOT_MET
    )
    reasons: list[str]


class ExternallyRejected(_SubmissionResult):
    outcome: Literal[SubmissionOutcome.EXTERNALLY_REJECTED] = (
        SubmissionOutcome.EXTERNALLY_REJECTED
    )
    reason: str
    upgrade_prompt: str | None = None


class InvalidTemplate(_SubmissionResult):
    outcome: Literal[SubmissionOutcome.INVALID_TEMPLATE] = SubmissionOutcome.INVALID_TEMPLATE
    reasons: list[str]


SubmissionResult = Annotated[
    Union[Admitted, CapacityExceeded, RequirementsNotMet, ExternallyRejected, InvalidTemplate],
    Field(discriminator="outcome"),
]


# ════════════════════════════════════════════════════════════════
# Read-only Views
# ════════════════════════════════════════════════════════════════


class CapacityStatus(BaseModel):
    used: int
    total: int
    available: int
    percentage: float


class ActiveSummary(BaseModel):
    """Display-oriented view of one in-flight implementation."""

    id: UUID
    name: str
    category: PolicyCategory
    progress: float
    current_phase: ImplementationPhase
    time_remaining: float = Field(description="Weeks remaining, floored at 0")
    resistance: float


class SchedulerState(BaseModel):
    """Plain-data snapshot of a scheduler, sufficient to reconstruct it."""

    capacity: int
    active: list[ImplementationRecord] = Field(default_factory=list)
    history: list[ImplementationRecord] = Field(default_factory=list)
