"""Background task driving alert cycles at a fixed delay.

The scheduler is a two-state machine (IDLE, RUNNING). A tick moves it to
RUNNING for the duration of one cycle and back to IDLE afterwards, whatever
the outcome. It sleeps the poll interval *after* each cycle, so a slow fetch
pushes the next cycle back instead of overlapping it.
"""

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from enum import Enum
from typing import Optional

from app.price_alerts.application.use_cases.run_alert_cycle import (
    CycleResult,
    RunAlertCycleUseCase,
)

logger = logging.getLogger(__name__)

# Builds the use case for one cycle, with its own rule-store session
CycleFactory = Callable[[], AbstractAsyncContextManager[RunAlertCycleUseCase]]


class SchedulerState(Enum):
    """Whether a cycle is in flight."""

    IDLE = "idle"
    RUNNING = "running"


class AlertScheduler:
    """Runs alert cycles one at a time on the event loop.

    Attributes:
        _cycle_factory: Opens the unit of work for one cycle.
        _poll_interval_seconds: Delay between the end of a cycle and the next.
        _state: Current state of the machine.
        _task: Background loop task, None until started.
    """

    def __init__(self, cycle_factory: CycleFactory, poll_interval_seconds: float) -> None:
        self._cycle_factory = cycle_factory
        self._poll_interval_seconds = poll_interval_seconds
        self._state = SchedulerState.IDLE
        self._task: Optional[asyncio.Task] = None
        self._cycles_completed = 0
        self._last_result: Optional[CycleResult] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        """True while the background loop task is alive."""
        return self._task is not None and not self._task.done()

    @property
    def cycles_completed(self) -> int:
        """Cycles that returned a summary; crashed cycles are not counted."""
        return self._cycles_completed

    @property
    def last_result(self) -> Optional[CycleResult]:
        return self._last_result

    async def run_once(self) -> Optional[CycleResult]:
        """Run a single cycle unless one is already in flight.

        Returns:
            The cycle summary, or None if the cycle was refused or crashed.
        """
        if self._state is SchedulerState.RUNNING:
            logger.warning("Alert cycle still running, skipping this tick")
            return None

        self._state = SchedulerState.RUNNING
        try:
            async with self._cycle_factory() as cycle:
                result = await cycle.execute()
            self._last_result = result
            self._cycles_completed += 1
            return result
        except Exception as e:
            logger.exception(f"Alert cycle failed: {e}")
            return None
        finally:
            self._state = SchedulerState.IDLE

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self._poll_interval_seconds)

    def start(self) -> None:
        """Start the background loop; the first cycle runs immediately."""
        if self.is_running:
            return
        logger.info(
            f"Starting alert scheduler (every {self._poll_interval_seconds:g}s after each cycle)"
        )
        self._task = asyncio.create_task(self._loop(), name="alert-scheduler")

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            logger.info("Alert scheduler task cancelled")
        finally:
            self._task = None
