"""
Sequential steps with compensation.

Each step is an async action plus an optional compensator that receives the
action's result. When a step raises, compensators of the completed steps run
in reverse and the step's exception is re-raised wrapped in SagaFailed.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

Action = Callable[[Any], Awaitable[Any]]
Compensator = Callable[[Any], Awaitable[None]]


@dataclass(frozen=True)
class SagaStep:
    name: str
    action: Action
    compensate: Optional[Compensator] = None


@dataclass
class SagaResult:
    value: Any
    steps_executed: int
    compensators_recorded: int


class SagaFailed(Exception):
    def __init__(self, error: Exception, step_failed: str, compensators_run: int, compensators_failed: int) -> None:
        super().__init__(str(error))
        self.error = error
        self.step_failed = step_failed
        self.compensators_run = compensators_run
        self.compensators_failed = compensators_failed

    @property
    def rollback_complete(self) -> bool:
        return self.compensators_failed == 0


@dataclass
class Saga:
    steps: list[SagaStep] = field(default_factory=list)

    def step(self, name: str, action: Action, compensate: Optional[Compensator] = None) -> "Saga":
        self.steps.append(SagaStep(name, action, compensate))
        return self

    async def run(self, value: Any = None) -> SagaResult:
        """Run steps in order, feeding each the previous step's result."""
        recorded: list[tuple[SagaStep, Any]] = []
        executed = 0
        for s in self.steps:
            try:
                value = await s.action(value)
            except Exception as e:
                logger.warning("saga step %r failed: %s; rolling back %d step(s)", s.name, e, len(recorded))
                comp_run, comp_failed = await _run_compensators(recorded)
                raise SagaFailed(e, s.name, comp_run, comp_failed) from e
            executed += 1
            if s.compensate is not None:
                recorded.append((s, value))
        return SagaResult(value=value, steps_executed=executed, compensators_recorded=len(recorded))


async def _run_compensators(recorded: list[tuple[SagaStep, Any]]) -> tuple[int, int]:
    """Run compensators in reverse. Returns (run, failed)."""
    comp_run = 0
    comp_failed = 0
    for s, value in reversed(recorded):
        try:
            await s.compensate(value)
            comp_run += 1
        except Exception:
            logger.exception("compensation for saga step %r failed", s.name)
            comp_failed += 1
    return comp_run, comp_failed
