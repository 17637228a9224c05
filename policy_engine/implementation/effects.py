"""
Effect Accumulation — immediate, ongoing and final effect payloads.

All three computations are pure. The scheduler surfaces their results as
events; applying them to game state is the caller's job.

- immediate: 20% of the lower bound (or of the scalar) on admission
- ongoing:   the range interpolated at current progress, scaled by the
             progress made since the previous tick
- final:     the upper bound (or the scalar) on completion
"""

from __future__ import annotations

from policy_engine.domain.schema import PolicyTemplate, RangeEffect, ScalarEffect

IMMEDIATE_SHARE = 0.2


def immediate_effects(template: PolicyTemplate) -> dict[str, float]:
    effects: dict[str, float] = {}
    for name, effect in template.effects.items():
        match effect:
            case RangeEffect(min=low):
                effects[name] = low * IMMEDIATE_SHARE
            case ScalarEffect(value=value):
                effects[name] = value * IMMEDIATE_SHARE
    return effects


def ongoing_effects(
    template: PolicyTemplate,
    progress_before: float,
    progress_after: float,
) -> dict[str, float]:
    """
    Incremental effects attributable to progress made since the last tick.

    Args:
        template: The policy being implemented.
        progress_before: Progress stored before this tick (0–100).
        progress_after: Progress after this tick (0–100).

    Returns:
        Effect deltas by name. Zero deltas are omitted; no progress means
        an empty map.
    """
    delta = (progress_after - progress_before) / 100
    if delta <= 0:
        return {}

    fraction = progress_after / 100
    effects: dict[str, float] = {}
    for name, effect in template.effects.items():
        match effect:
            case RangeEffect(min=low, max=high):
                value = (low + (high - low) * fraction) * delta
            case ScalarEffect(value=scalar):
                value = scalar * delta
        if value != 0:
            effects[name] = value
    return effects


def final_effects(template: PolicyTemplate) -> dict[str, float]:
    effects: dict[str, float] = {}
    for name, effect in template.effects.items():
        match effect:
            case RangeEffect(max=high):
                effects[name] = high
            case ScalarEffect(value=value):
                effects[name] = value
    return effects
