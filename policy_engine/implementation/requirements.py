"""
Political Requirements — admission preconditions for a policy.

A policy may demand a minimum public approval and a minimum aggregate
coalition support. Every unmet condition contributes one human-readable
reason; the check itself never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from policy_engine.domain.schema import PolicyTemplate, PoliticalSnapshot

logger = logging.getLogger(__name__)


@dataclass
class RequirementCheck:
    """Result of checking a template against the current political situation."""

    allowed: bool
    unmet_reasons: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.allowed:
            return "All political requirements met"
        return f"Political requirements not met: {', '.join(self.unmet_reasons)}"


def check_requirements(
    template: PolicyTemplate,
    snapshot: PoliticalSnapshot,
) -> RequirementCheck:
    """
    Check whether ``snapshot`` satisfies the admission preconditions of ``template``.

    A template without requirements, or with a requirement of zero, is
    always allowed on that condition.
    """
    requirements = template.requirements
    if requirements is None:
        return RequirementCheck(allowed=True)

    reasons: list[str] = []
    coalition_support = snapshot.coalition_support

    if requirements.approval and snapshot.approval < requirements.approval:
        reasons.append(
            f"Need {requirements.approval:g}% approval "
            f"(currently {snapshot.approval:.1f}%)"
        )

    if requirements.coalition_support and coalition_support < requirements.coalition_support:
        reasons.append(
            f"Need {requirements.coalition_support:g}% coalition support "
            f"(currently {coalition_support:.1f}%)"
        )

    if reasons:
        logger.debug("Requirements unmet for %s: %s", template.id, "; ".join(reasons))
        return RequirementCheck(allowed=False, unmet_reasons=reasons)

    return RequirementCheck(allowed=True)
