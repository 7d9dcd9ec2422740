from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StepContext:
    scenario_name: str
    step_index: int


class StepLifecycleTracker:
    """
    Step cursor for one execution lane.

    The tracker is plain mutable state with no locking: every lane that runs
    scenarios concurrently must own its own instance.
    """

    def __init__(self) -> None:
        self._scenario_name = ""
        self._step_index = 0

    def start_scenario(self, name: str) -> None:
        self._scenario_name = name
        self._step_index = 0

    def complete_step(self) -> int:
        """Advance the cursor after a step (passed or failed) and return the new index."""
        self._step_index += 1
        return self._step_index

    def current(self) -> StepContext:
        return StepContext(scenario_name=self._scenario_name, step_index=self._step_index)

    def reset(self) -> None:
        self.start_scenario("")
