"""
Implementation Timeline — planned versus adjusted duration.

The planned duration is stretched by complexity and opposition resistance
and compressed (or stretched) by public approval. Approval below 70% is
treated as 70% so a deeply unpopular government is slowed, not stalled.
The computation is deterministic given resistance and the snapshot.
"""

from __future__ import annotations

from policy_engine.domain.schema import (
    PolicyComplexity,
    PolicyTemplate,
    PoliticalSnapshot,
    Timeline,
    TimelineFactors,
)
from policy_engine.implementation.numeric import round_half_up

COMPLEXITY_DURATION_FACTORS: dict[PolicyComplexity, float] = {
    PolicyComplexity.LOW: 0.8,
    PolicyComplexity.MEDIUM: 1.0,
    PolicyComplexity.HIGH: 1.3,
}

MIN_APPROVAL_FACTOR = 0.7


def compute_timeline(
    template: PolicyTemplate,
    resistance: float,
    snapshot: PoliticalSnapshot,
) -> Timeline:
    """
    Compute the timeline of ``template`` under the given resistance and politics.

    Args:
        template: The policy being admitted.
        resistance: Opposition resistance score (0–100).
        snapshot: Current political situation.

    Returns:
        Timeline with ``estimated`` rounded half-up and never below one week.
    """
    planned = template.duration
    complexity_factor = COMPLEXITY_DURATION_FACTORS[template.complexity]
    resistance_factor = 1 + resistance / 100
    approval_factor = max(MIN_APPROVAL_FACTOR, snapshot.approval / 100)

    estimated = round_half_up(
        planned * complexity_factor * resistance_factor / approval_factor
    )

    return Timeline(
        planned=planned,
        estimated=max(1, estimated),
        factors=TimelineFactors(
            complexity=complexity_factor,
            opposition=resistance_factor,
            approval=approval_factor,
        ),
    )
