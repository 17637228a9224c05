"""
Opposition Resistance — how hard the opposition contests a policy.

Resistance (0–100) is fixed at admission from the policy area, the current
opposition strength and the size of the bill. It lengthens the timeline and
sets the per-tick chance of an opposition challenge.

Challenge generation is the only stochastic step of the engine. The random
source is injected: anything with a ``random() -> float`` method returning
values in [0, 1) will do, so ``random.Random`` instances and test stubs are
interchangeable.
"""

from __future__ import annotations

import logging
from typing import Protocol

from policy_engine.domain.schema import (
    Challenge,
    ChallengeType,
    PolicyCategory,
    PolicyTemplate,
    PoliticalSnapshot,
)

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def random(self) -> float: ...


CATEGORY_BASE_RESISTANCE: dict[PolicyCategory, float] = {
    PolicyCategory.ECONOMIC: 20,
    PolicyCategory.SOCIAL: 30,
    PolicyCategory.ENVIRONMENTAL: 25,
    PolicyCategory.FOREIGN: 35,
}

OPPOSITION_BASELINE = 50
OPPOSITION_WEIGHT = 0.4
COST_RESISTANCE_CAP = 20

# Order matters: a uniform draw indexes into this tuple.
CHALLENGE_TYPES: tuple[ChallengeType, ...] = (
    ChallengeType.PARLIAMENTARY_QUESTION,
    ChallengeType.MEDIA_CAMPAIGN,
    ChallengeType.LEGAL_CHALLENGE,
    ChallengeType.PUBLIC_PROTEST,
    ChallengeType.COALITION_PRESSURE,
)

CHALLENGE_DESCRIPTIONS: dict[ChallengeType, str] = {
    ChallengeType.PARLIAMENTARY_QUESTION: (
        "Opposition demands parliamentary answers about {policy} implementation"
    ),
    ChallengeType.MEDIA_CAMPAIGN: "Media campaign criticizing the effectiveness of {policy}",
    ChallengeType.LEGAL_CHALLENGE: (
        "Legal challenge filed against {policy} on constitutional grounds"
    ),
    ChallengeType.PUBLIC_PROTEST: "Public protests organized against {policy}",
    ChallengeType.COALITION_PRESSURE: "Coalition partners express concerns about {policy}",
}


def compute_resistance(template: PolicyTemplate, snapshot: PoliticalSnapshot) -> float:
    """Opposition resistance to ``template``, clamped to [0, 100]."""
    resistance = CATEGORY_BASE_RESISTANCE[template.category]
    resistance += (snapshot.opposition_strength - OPPOSITION_BASELINE) * OPPOSITION_WEIGHT
    # Every billion of cost adds 10 points, up to the cap.
    resistance += min(COST_RESISTANCE_CAP, template.base_cost / 1e9 * 10)
    return max(0.0, min(100.0, resistance))


def challenge_probability(resistance: float) -> float:
    """Per-tick probability of a challenge; 50% at maximum resistance."""
    return resistance / 200


def describe_challenge(challenge_type: ChallengeType, policy_name: str) -> str:
    return CHALLENGE_DESCRIPTIONS[challenge_type].format(policy=policy_name)


def maybe_generate_challenge(
    template: PolicyTemplate,
    resistance: float,
    snapshot: PoliticalSnapshot,
    rng: RandomSource,
) -> Challenge | None:
    """
    Roll for an opposition challenge against ``template``.

    Draws once to decide whether a challenge occurs; only when it does are
    two further draws made for the type and the severity (1–3).

    Returns:
        The new Challenge, or None when the roll fails.
    """
    if rng.random() >= challenge_probability(resistance):
        return None

    type_index = min(int(rng.random() * len(CHALLENGE_TYPES)), len(CHALLENGE_TYPES) - 1)
    challenge_type = CHALLENGE_TYPES[type_index]
    severity = min(int(rng.random() * 3) + 1, 3)

    challenge = Challenge(
        type=challenge_type,
        severity=severity,
        description=describe_challenge(challenge_type, template.name),
        week=snapshot.week,
        year=snapshot.year,
    )

    logger.info(
        "Opposition challenge raised: policy=%s type=%s severity=%d",
        template.id,
        challenge_type.value,
        severity,
    )
    return challenge
