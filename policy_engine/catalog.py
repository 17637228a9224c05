"""
Policy Catalog — the stock set of enactable policies.

Templates are authored in the game's content format (camelCase keys, effect
ranges as ``{"min", "max"}`` mappings) and validated into PolicyTemplate
models at import time, so a malformed entry fails at load, never mid-game.
"""

from __future__ import annotations

from typing import Any

from policy_engine.domain.schema import PolicyCategory, PolicyTemplate

_AUTHORED_POLICIES: list[dict[str, Any]] = [
    # ── Economic ───────────────────────────────────────────────
    {
        "id": "tax_reform",
        "name": "Tax Reform Package",
        "description": "Comprehensive reform of the taxation system",
        "category": "economic",
        "baseCost": 500_000_000,
        "duration": 12,
        "effects": {
            "gdp": {"min": -0.5, "max": 2.0},
            "approval": {"min": -8, "max": 12},
            "debt": {"min": -1.0, "max": 0.5},
            "unemployment": {"min": -0.2, "max": 0.3},
        },
        "requirements": {"approval": 45, "coalitionSupport": 60},
        "complexity": "high",
    },
    {
        "id": "infrastructure_investment",
        "name": "Infrastructure Investment Program",
        "description": "Major investment in roads, bridges, and digital infrastructure",
        "category": "economic",
        "baseCost": 2_000_000_000,
        "duration": 24,
        "effects": {
            "gdp": {"min": 0.5, "max": 3.0},
            "approval": {"min": 2, "max": 8},
            "debt": {"min": 1.0, "max": 3.0},
            "unemployment": {"min": -1.5, "max": -0.5},
        },
        "requirements": {"approval": 35, "coalitionSupport": 55},
        "complexity": "high",
    },
    {
        "id": "small_business_support",
        "name": "Small Business Support Package",
        "description": "Tax incentives and grants for small businesses",
        "category": "economic",
        "baseCost": 100_000_000,
        "duration": 6,
        "effects": {
            "gdp": {"min": 0.2, "max": 1.0},
            "approval": {"min": 1, "max": 5},
            "debt": {"min": 0.1, "max": 0.5},
            "unemployment": {"min": -0.5, "max": -0.1},
        },
        "requirements": {"approval": 30, "coalitionSupport": 40},
        "complexity": "medium",
    },
    # ── Social ─────────────────────────────────────────────────
    {
        "id": "healthcare_expansion",
        "name": "Healthcare System Expansion",
        "description": "Expand healthcare coverage and improve access",
        "category": "social",
        "baseCost": 1_500_000_000,
        "duration": 18,
        "effects": {
            "approval": {"min": 5, "max": 15},
            "debt": {"min": 1.5, "max": 2.5},
            "gdp": {"min": -0.2, "max": 0.8},
        },
        "requirements": {"approval": 40, "coalitionSupport": 65},
        "complexity": "high",
    },
    {
        "id": "education_reform",
        "name": "Education System Reform",
        "description": "Modernize education curriculum and infrastructure",
        "category": "social",
        "baseCost": 800_000_000,
        "duration": 36,
        "effects": {
            "approval": {"min": 3, "max": 10},
            "debt": {"min": 0.8, "max": 1.5},
            "gdp": {"min": 0.5, "max": 2.0},
        },
        "requirements": {"approval": 35, "coalitionSupport": 50},
        "complexity": "high",
    },
    {
        "id": "unemployment_benefits",
        "name": "Enhanced Unemployment Benefits",
        "description": "Increase unemployment benefits and extend duration",
        "category": "social",
        "baseCost": 300_000_000,
        "duration": 3,
        "effects": {
            "approval": {"min": 2, "max": 8},
            "debt": {"min": 0.3, "max": 0.8},
            "unemployment": {"min": 0.1, "max": 0.3},
        },
        "requirements": {"approval": 25, "coalitionSupport": 45},
        "complexity": "low",
    },
    # ── Environmental ──────────────────────────────────────────
    {
        "id": "carbon_tax",
        "name": "Carbon Tax Implementation",
        "description": "Implement carbon pricing to reduce emissions",
        "category": "environmental",
        "baseCost": 50_000_000,
        "duration": 6,
        "effects": {
            "approval": {"min": -5, "max": 8},
            "gdp": {"min": -0.8, "max": 0.2},
            "debt": {"min": -0.5, "max": 0.1},
        },
        "requirements": {"approval": 45, "coalitionSupport": 60},
        "complexity": "medium",
    },
    {
        "id": "renewable_energy",
        "name": "Renewable Energy Transition",
        "description": "Massive investment in renewable energy infrastructure",
        "category": "environmental",
        "baseCost": 3_000_000_000,
        "duration": 48,
        "effects": {
            "approval": {"min": 3, "max": 12},
            "gdp": {"min": 0.2, "max": 2.5},
            "debt": {"min": 2.0, "max": 4.0},
            "unemployment": {"min": -2.0, "max": -0.5},
        },
        "requirements": {"approval": 40, "coalitionSupport": 55},
        "complexity": "high",
    },
    # ── Foreign ────────────────────────────────────────────────
    {
        "id": "trade_agreement",
        "name": "New Trade Agreement",
        "description": "Negotiate comprehensive trade agreement with key partners",
        "category": "foreign",
        "baseCost": 10_000_000,
        "duration": 12,
        "effects": {
            "gdp": {"min": 0.5, "max": 2.0},
            "approval": {"min": -3, "max": 6},
            "unemployment": {"min": -0.5, "max": 0.2},
        },
        "requirements": {"approval": 35, "coalitionSupport": 50},
        "complexity": "medium",
    },
    {
        "id": "defense_spending",
        "name": "Defense Budget Adjustment",
        "description": "Adjust military spending and modernize equipment",
        "category": "foreign",
        "baseCost": 1_000_000_000,
        "duration": 12,
        "effects": {
            "approval": {"min": -2, "max": 8},
            "debt": {"min": 0.5, "max": 1.5},
            "gdp": {"min": 0.1, "max": 0.8},
        },
        "requirements": {"approval": 30, "coalitionSupport": 45},
        "complexity": "medium",
    },
]

POLICY_CATALOG: dict[str, PolicyTemplate] = {
    template.id: template
    for template in (PolicyTemplate.model_validate(raw) for raw in _AUTHORED_POLICIES)
}


def get_policy(policy_id: str) -> PolicyTemplate:
    """
    Look up a catalog policy by id.

    Raises:
        KeyError: If no policy has that id.
    """
    try:
        return POLICY_CATALOG[policy_id]
    except KeyError:
        raise KeyError(f"Unknown policy: {policy_id}") from None


def policies_by_category(category: PolicyCategory | str) -> list[PolicyTemplate]:
    category = PolicyCategory(category)
    return [t for t in POLICY_CATALOG.values() if t.category == category]
