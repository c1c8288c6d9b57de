"""
Timer Simulator — runs the focus timer through an accelerated day in-process
so you can see cycles, long breaks, pauses and suspended-host recovery
without waiting in real time.

Usage:
    python scripts/simulate.py                       # default: cycle all scenarios
    python scripts/simulate.py --scenario suspended  # specific scenario
    python scripts/simulate.py --work 50 --cycles 3  # custom settings
"""

from __future__ import annotations

import argparse
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from focusflow.alerts.dispatcher import AlertDispatcher  # noqa: E402
from focusflow.sessions.store import SessionLogStore  # noqa: E402
from focusflow.settings import TimerSettings  # noqa: E402
from focusflow.timer.machine import FocusTimer  # noqa: E402
from focusflow.timer.state import TimerPhase  # noqa: E402


class SimClock:
    """Manually advanced wall clock."""

    def __init__(self):
        self.now = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


# ---------------------------------------------------------------------------
# Scenarios — each drives a fresh timer
# ---------------------------------------------------------------------------

def _run_until_idle(timer: FocusTimer, clock: SimClock, step_s: int) -> None:
    """Tick every *step_s* seconds until the timer is back to idle."""
    while timer.state.phase is not TimerPhase.IDLE:
        timer.tick(clock.advance(step_s))


def scenario_standard(timer: FocusTimer, clock: SimClock) -> None:
    """Four full work→break rounds; the fourth earns a long break."""
    for _ in range(timer.settings.cycles_until_long):
        timer.start()
        _run_until_idle(timer, clock, step_s=1)


def scenario_interrupted(timer: FocusTimer, clock: SimClock) -> None:
    """A work interval paused for a coffee, then resumed."""
    timer.start(category="active-coding")
    timer.tick(clock.advance(600))
    timer.pause()
    clock.advance(20 * 60)                      # pause length does not matter
    timer.resume()
    _run_until_idle(timer, clock, step_s=1)


def scenario_suspended(timer: FocusTimer, clock: SimClock) -> None:
    """Laptop lid closed mid-interval: ticks stop, wall clock keeps going."""
    timer.start(category="deep-learning")
    timer.tick(clock.advance(300))
    clock.advance(3 * 3600)                     # no ticks at all while asleep
    for _ in range(5):                          # redundant re-evaluation on wake
        timer.tick()
    _run_until_idle(timer, clock, step_s=60)


def scenario_skip(timer: FocusTimer, clock: SimClock) -> None:
    """Skip straight through a work interval and its break."""
    timer.start()
    timer.tick(clock.advance(90))
    timer.skip()
    timer.skip()


SCENARIOS: Dict[str, Callable[[FocusTimer, SimClock], None]] = {
    "standard": scenario_standard,
    "interrupted": scenario_interrupted,
    "suspended": scenario_suspended,
    "skip": scenario_skip,
}


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

def run_scenario(name: str, settings: TimerSettings, data_dir: Path) -> None:
    print(f"\n{'─' * 60}")
    print(f"  SCENARIO: {name.upper()}")
    print(f"{'─' * 60}")

    clock = SimClock()
    store = SessionLogStore(data_dir / f"{name}.db")
    timer = FocusTimer(settings, store, AlertDispatcher(settings), clock=clock)
    SCENARIOS[name](timer, clock)

    for r in store.read_all():
        mark = "✓" if r.completed else "✗"
        minutes = ((r.ended_at or r.started_at) - r.started_at).total_seconds() / 60.0
        print(
            f"  {mark} {r.kind.value:<10} {r.started_at:%H:%M:%S} → "
            f"{(r.ended_at or r.started_at):%H:%M:%S}  {minutes:6.1f} min  "
            f"{r.category or ''}"
        )
    s = timer.state
    print(f"  final: phase={s.phase.value} cycle={s.current_cycle}")


def main() -> None:
    parser = argparse.ArgumentParser(description="FocusFlow Timer Simulator")
    parser.add_argument(
        "--scenario",
        choices=list(SCENARIOS.keys()) + ["cycle"],
        default="cycle",
        help="Which scenario to run (default: cycle through all)",
    )
    parser.add_argument("--work", type=int, default=25, help="Work minutes")
    parser.add_argument("--short", type=int, default=5, help="Break minutes")
    parser.add_argument("--long", type=int, default=15, help="Long break minutes")
    parser.add_argument("--cycles", type=int, default=4, help="Cycles until long break")
    args = parser.parse_args()

    settings = TimerSettings.from_mapping({
        "workMinutes": args.work,
        "breakMinutes": args.short,
        "longBreakMinutes": args.long,
        "cyclesUntilLong": args.cycles,
    })
    sequence = list(SCENARIOS) if args.scenario == "cycle" else [args.scenario]

    with tempfile.TemporaryDirectory() as tmp:
        for name in sequence:
            run_scenario(name, settings, Path(tmp))

    print("\n[✓] Simulation complete.")


if __name__ == "__main__":
    main()
