"""
Implementation Phases — the ordered stages every policy passes through.

A phase table is a fixed sequence of phases, each owning a fraction of the
total implementation time. Fractions must sum to 1.0. The active phase for a
given progress is the first phase whose cumulative threshold (fraction × 100,
accumulated) reaches that progress.

Default sequence:
1. Planning & Preparation   — 20%
2. Initial Implementation   — 30%
3. Full Deployment          — 40%
4. Stabilization            — 10%
"""

from __future__ import annotations

import math
from typing import Sequence

from policy_engine.domain.schema import ImplementationPhase

DEFAULT_PHASES: tuple[ImplementationPhase, ...] = (
    ImplementationPhase(
        name="Planning & Preparation",
        fraction=0.2,
        description="Developing implementation strategy and preparing resources",
        intensity="minimal",
    ),
    ImplementationPhase(
        name="Initial Implementation",
        fraction=0.3,
        description="Beginning policy rollout and initial changes",
        intensity="moderate",
    ),
    ImplementationPhase(
        name="Full Deployment",
        fraction=0.4,
        description="Complete policy implementation across all affected areas",
        intensity="significant",
    ),
    ImplementationPhase(
        name="Stabilization",
        fraction=0.1,
        description="Monitoring effects and making final adjustments",
        intensity="full",
    ),
)


def phase_index_for(phases: Sequence[ImplementationPhase], progress: float) -> int:
    """Index of the phase active at ``progress`` (0–100)."""
    cumulative = 0.0
    for index, phase in enumerate(phases):
        cumulative += phase.fraction * 100
        if progress <= cumulative:
            return index
    # Accumulated float error can leave the final threshold a hair under 100.
    return len(phases) - 1


class PhaseTable:
    """
    Validated, read-only sequence of implementation phases.

    Shared by every record a scheduler admits; records keep their own copy of
    the phase definitions so a restored record is self-describing.
    """

    def __init__(self, phases: Sequence[ImplementationPhase] = DEFAULT_PHASES) -> None:
        if not phases:
            raise ValueError("A phase table needs at least one phase")
        total = sum(phase.fraction for phase in phases)
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Phase fractions must sum to 1.0, got {total:.6f}")
        self._phases: tuple[ImplementationPhase, ...] = tuple(phases)

    @property
    def phases(self) -> tuple[ImplementationPhase, ...]:
        return self._phases

    def __len__(self) -> int:
        return len(self._phases)

    def __getitem__(self, index: int) -> ImplementationPhase:
        return self._phases[index]

    def phase_at(self, progress: float) -> int:
        return phase_index_for(self._phases, progress)

    def thresholds(self) -> list[float]:
        """Cumulative progress threshold at which each phase ends."""
        result = []
        cumulative = 0.0
        for phase in self._phases:
            cumulative += phase.fraction * 100
            result.append(cumulative)
        return result
