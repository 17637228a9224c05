"""
Policy Engine — simulation runner.

Drives an ImplementationScheduler the way the game loop does:
1. Queues the requested catalog policies
2. Each simulated week, retries queued policies until they are admitted
3. Ticks the scheduler and applies surfaced effects to a running tally
4. Prints capacity, in-flight and completed policies

Usage:
    python -m policy_engine.simulate
    python -m policy_engine.simulate --policies tax_reform carbon_tax --weeks 40
    python -m policy_engine.simulate --seed 7 --save
    python -m policy_engine.simulate --resume
"""

from __future__ import annotations

import argparse
import logging
import random
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Sequence

import structlog
from rich.console import Console
from rich.table import Table

from policy_engine.catalog import POLICY_CATALOG, get_policy
from policy_engine.config import EngineSettings, settings
from policy_engine.domain.schema import (
    CoalitionParty,
    OngoingEffectsComputed,
    PolicyAdmitted,
    PolicyTemplate,
    PoliticalSnapshot,
    SchedulerEvent,
)
from policy_engine.implementation.scheduler import WEEKS_PER_YEAR, ImplementationScheduler
from policy_engine.storage.state_store import JSONStateStore

console = Console()


def configure_logging(config: EngineSettings = settings) -> None:
    """Configure structured logging."""
    logging.basicConfig(level=config.log_level.upper(), format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.dev.ConsoleRenderer()
                if config.log_format != "json"
                else structlog.processors.JSONRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def advance_clock(week: int, year: int) -> tuple[int, int]:
    """Next simulated week; week 52 rolls over to week 1 of the next year."""
    if week >= WEEKS_PER_YEAR:
        return 1, year + 1
    return week + 1, year


@dataclass
class SimulationReport:
    """Outcome of a simulation run."""

    scheduler: ImplementationScheduler
    events: list[SchedulerEvent] = field(default_factory=list)
    applied_effects: dict[str, float] = field(default_factory=dict)
    pending: list[str] = field(default_factory=list)
    final_week: int = 1
    final_year: int = 1


def run_simulation(
    scheduler: ImplementationScheduler,
    policies: Sequence[PolicyTemplate],
    weeks: int,
    approval: float = 50,
    coalition_support: float = 60,
    opposition_strength: float = 50,
    start_week: int = 1,
    start_year: int = 1,
) -> SimulationReport:
    """
    Run ``weeks`` simulated weeks against ``scheduler``.

    Queued policies are submitted every week until admitted. Approval drifts
    with the approval effects the scheduler surfaces, clamped to 0–100.
    """
    log = structlog.get_logger()
    report = SimulationReport(scheduler=scheduler)
    applied: dict[str, float] = defaultdict(float)
    queue = list(policies)
    week, year = start_week, start_year

    def snapshot() -> PoliticalSnapshot:
        return PoliticalSnapshot(
            approval=max(0.0, min(100.0, approval + applied.get("approval", 0.0))),
            coalition=[CoalitionParty(name="Governing coalition", support=coalition_support)],
            opposition_strength=opposition_strength,
            week=week,
            year=year,
        )

    for _ in range(weeks):
        still_queued = []
        for template in queue:
            result = scheduler.submit(template, snapshot())
            if result.is_admitted:
                report.events.extend(result.events)
                for name, value in result.record.effects.immediate.items():
                    applied[name] += value
                log.info(
                    "policy_engine.simulate.admitted",
                    policy=template.id,
                    week=week,
                    year=year,
                    estimated_weeks=result.record.timeline.estimated,
                )
            else:
                still_queued.append(template)
        queue = still_queued

        week, year = advance_clock(week, year)
        events = scheduler.tick(snapshot())
        for event in events:
            if isinstance(event, OngoingEffectsComputed):
                for name, value in event.effects.items():
                    applied[name] += value
            elif not isinstance(event, PolicyAdmitted):
                log.info(
                    "policy_engine.simulate.event",
                    event_type=event.event.value,
                    policy=event.policy_id,
                    week=event.week,
                    year=event.year,
                )
        report.events.extend(events)

    report.applied_effects = dict(applied)
    report.pending = [template.id for template in queue]
    report.final_week, report.final_year = week, year
    return report


def render_report(report: SimulationReport) -> None:
    scheduler = report.scheduler
    status = scheduler.capacity_status()
    console.print(
        f"\n[bold blue]═══ Policy Implementation — week {report.final_week}, "
        f"year {report.final_year} ═══[/bold blue]"
    )
    console.print(
        f"  Capacity: [bold]{status.used}/{status.total}[/bold] "
        f"({status.percentage:.0f}% used, {status.available} available)"
    )

    active = Table(title="In flight", show_lines=True)
    active.add_column("Policy", style="cyan")
    active.add_column("Category", style="green")
    active.add_column("Progress", justify="right")
    active.add_column("Phase", style="yellow")
    active.add_column("Weeks left", justify="right")
    active.add_column("Resistance", justify="right")
    for summary in scheduler.active_summaries():
        active.add_row(
            summary.name,
            summary.category.value,
            f"{summary.progress:.1f}%",
            summary.current_phase.name,
            f"{summary.time_remaining:.1f}",
            f"{summary.resistance:.1f}",
        )
    console.print(active)

    completed = Table(title="Completed", show_lines=True)
    completed.add_column("Policy", style="cyan")
    completed.add_column("Completed", style="dim")
    completed.add_column("Challenges", justify="right")
    completed.add_column("Final effects")
    for record in scheduler.history():
        completed.add_row(
            record.template.name,
            f"week {record.completed_week}, year {record.completed_year}",
            str(len(record.opposition.challenges)),
            ", ".join(f"{k} {v:+g}" for k, v in record.effects.final.items()),
        )
    console.print(completed)

    if report.pending:
        console.print(f"[yellow]⚠ Never admitted: {', '.join(report.pending)}[/yellow]")


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Simulate policy implementation week by week")
    parser.add_argument(
        "--policies",
        nargs="+",
        default=["small_business_support", "unemployment_benefits", "trade_agreement"],
        choices=sorted(POLICY_CATALOG),
        help="Catalog policy ids to enact, in submission order",
    )
    parser.add_argument("--weeks", type=int, default=30, help="Simulated weeks to run")
    parser.add_argument("--approval", type=float, default=50)
    parser.add_argument("--coalition", type=float, default=60, help="Coalition support")
    parser.add_argument("--opposition", type=float, default=50, help="Opposition strength")
    parser.add_argument("--seed", type=int, default=settings.random_seed)
    parser.add_argument("--capacity", type=int, default=settings.implementation_capacity)
    parser.add_argument("--state-file", default=settings.state_file)
    parser.add_argument("--save", action="store_true", help="Save state after the run")
    parser.add_argument("--resume", action="store_true", help="Resume from saved state")
    args = parser.parse_args(argv)

    configure_logging()
    log = structlog.get_logger()

    store = JSONStateStore(args.state_file)
    rng = random.Random(args.seed)
    start_week, start_year = 1, 1

    state = store.load() if args.resume else None
    if state is not None:
        scheduler = ImplementationScheduler.from_state(state, rng=rng)
        observed = [
            (r.last_observed_year, r.last_observed_week)
            for r in [*state.active, *state.history]
        ]
        if observed:
            start_year, start_week = max(observed)
        log.info("policy_engine.simulate.resumed", state_file=args.state_file)
    else:
        scheduler = ImplementationScheduler(capacity=args.capacity, rng=rng)

    enacted = {r.template.id for r in [*scheduler.active_records(), *scheduler.history()]}
    report = run_simulation(
        scheduler,
        [get_policy(policy_id) for policy_id in args.policies if policy_id not in enacted],
        weeks=args.weeks,
        approval=args.approval,
        coalition_support=args.coalition,
        opposition_strength=args.opposition,
        start_week=start_week,
        start_year=start_year,
    )
    render_report(report)

    if args.save:
        store.save(scheduler.snapshot())
        log.info("policy_engine.simulate.saved", state_file=args.state_file)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
