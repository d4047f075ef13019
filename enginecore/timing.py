"""Fixed-step simulation timing: turns elapsed system time into whole simulation updates."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "TICKS_PER_SECOND",
    "DEFAULT_UPDATE_PERIOD",
    "DEFAULT_SIMULATION_RATE",
    "MAX_ELAPSED_PER_ITERATION",
    "MAX_UPDATES_PER_ITERATION",
    "FrameStep",
    "FixedStepClock",
    "seconds_to_ticks",
    "ticks_to_seconds",
]

TICKS_PER_SECOND = 1_000_000_000
DEFAULT_UPDATE_PERIOD = 1.0 / 15.0
DEFAULT_SIMULATION_RATE = 1.0
# A single loop iteration never uses more system time than this,
# so that e.g. a pause in a debugger doesn't move things enormous distances.
MAX_ELAPSED_PER_ITERATION = 0.5
# Frames must keep being rendered however far behind the simulation is.
MAX_UPDATES_PER_ITERATION = 5


def seconds_to_ticks(seconds: float) -> int:
    """Convert seconds to whole ticks, rounding towards zero."""
    return int(seconds * TICKS_PER_SECOND)


def ticks_to_seconds(ticks: int) -> float:
    """Convert ticks to seconds."""
    return ticks / TICKS_PER_SECOND


@dataclass(frozen=True)
class FrameStep:
    """What one iteration of the application loop should do, and the times it saw."""

    elapsed_system_ticks: int
    update_count: int
    update_period: float
    system_ticks: int
    simulation_ticks: int
    unsimulated_ticks: int

    @property
    def elapsed_system_seconds(self) -> float:
        """Allowed system time since the previous iteration."""
        return ticks_to_seconds(self.elapsed_system_ticks)

    @property
    def system_seconds(self) -> float:
        """Total allowed system time since the clock started."""
        return ticks_to_seconds(self.system_ticks)

    @property
    def simulation_seconds(self) -> float:
        """Total simulation time that has been consumed by updates."""
        return ticks_to_seconds(self.simulation_ticks)

    @property
    def unsimulated_seconds(self) -> float:
        """Simulation time that has passed but not yet been used by an update."""
        return ticks_to_seconds(self.unsimulated_ticks)

    @property
    def simulation_seconds_to_render(self) -> float:
        """Simulation time to render at, including the part not yet simulated."""
        return ticks_to_seconds(self.simulation_ticks + self.unsimulated_ticks)


class FixedStepClock:
    """Accumulates elapsed system time and hands it out in fixed-size simulation updates."""

    def __init__(
        self,
        update_period: float = DEFAULT_UPDATE_PERIOD,
        simulation_rate: float = DEFAULT_SIMULATION_RATE,
        max_elapsed_per_iteration: float = MAX_ELAPSED_PER_ITERATION,
        max_updates_per_iteration: int = MAX_UPDATES_PER_ITERATION,
    ) -> None:
        ticks_per_update = seconds_to_ticks(update_period)
        if ticks_per_update <= 0:
            raise ValueError("update_period must be at least one tick long")
        if max_elapsed_per_iteration < 0:
            raise ValueError("max_elapsed_per_iteration must not be negative")
        if max_updates_per_iteration < 1:
            raise ValueError("max_updates_per_iteration must be at least 1")
        self.update_period = update_period
        self.ticks_per_update = ticks_per_update
        self.max_elapsed_ticks = seconds_to_ticks(max_elapsed_per_iteration)
        self.max_updates_per_iteration = max_updates_per_iteration
        self.simulation_rate = simulation_rate
        self.system_ticks = 0
        self.simulation_ticks = 0
        self.unsimulated_ticks = 0

    @property
    def simulation_rate(self) -> float:
        """How fast simulation time passes relative to system time."""
        return self._simulation_rate

    @simulation_rate.setter
    def simulation_rate(self, rate: float) -> None:
        if rate < 0:
            raise ValueError("simulation_rate must not be negative")
        self._simulation_rate = float(rate)

    def advance(self, elapsed_ticks: int) -> FrameStep:
        """Account for ``elapsed_ticks`` of system time and say how many updates to run."""
        if elapsed_ticks < 0:
            raise ValueError("elapsed_ticks must not be negative")
        allowed = min(int(elapsed_ticks), self.max_elapsed_ticks)
        self.system_ticks += allowed
        self.unsimulated_ticks += int(allowed * self._simulation_rate)

        update_count = 0
        while (
            self.unsimulated_ticks >= self.ticks_per_update
            and update_count < self.max_updates_per_iteration
        ):
            update_count += 1
            self.simulation_ticks += self.ticks_per_update
            self.unsimulated_ticks -= self.ticks_per_update

        return FrameStep(
            elapsed_system_ticks=allowed,
            update_count=update_count,
            update_period=self.update_period,
            system_ticks=self.system_ticks,
            simulation_ticks=self.simulation_ticks,
            unsimulated_ticks=self.unsimulated_ticks,
        )