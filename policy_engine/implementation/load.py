"""
Implementation Load — capacity units a policy consumes while in flight.

Load is fixed by the template alone: a complexity weight scaled by a
category multiplier. Capacity is only checked at admission, so the load of
an admitted policy never changes mid-flight.
"""

from __future__ import annotations

from policy_engine.domain.schema import PolicyCategory, PolicyComplexity, PolicyTemplate
from policy_engine.implementation.numeric import round_half_up

COMPLEXITY_WEIGHTS: dict[PolicyComplexity, int] = {
    PolicyComplexity.LOW: 15,
    PolicyComplexity.MEDIUM: 25,
    PolicyComplexity.HIGH: 40,
}

CATEGORY_MULTIPLIERS: dict[PolicyCategory, float] = {
    PolicyCategory.ECONOMIC: 1.2,
    PolicyCategory.SOCIAL: 1.0,
    PolicyCategory.ENVIRONMENTAL: 1.1,
    PolicyCategory.FOREIGN: 1.3,
}


def policy_load(template: PolicyTemplate) -> int:
    """Capacity units consumed by ``template`` while it is being implemented."""
    return round_half_up(
        COMPLEXITY_WEIGHTS[template.complexity] * CATEGORY_MULTIPLIERS[template.category]
    )


def total_load(templates) -> int:
    """Combined load of an iterable of templates."""
    return sum(policy_load(template) for template in templates)
