"""
Sort controller: owns the source array and serializes generate / resize /
sort requests against one engine.
"""
import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Callable

from observasort.cancel import CancelToken, SortCancelled
from observasort.engine import ObservableArray
from observasort.settings import (
    ARRAY_SIZE_MAX, ARRAY_SIZE_MIN, VALUE_MAX, VALUE_MIN, SortConfig, clamp,
)
from observasort.stats import Stats

logger = logging.getLogger(__name__)


class ControllerBusyError(RuntimeError):
    pass


@dataclass
class RunOutcome:
    sorter_name: str
    completed: bool
    cancelled: bool
    stats: dict


class SortController:
    def __init__(self,
                 config: SortConfig,
                 array: ObservableArray,
                 sorters: dict,
                 rng: random.Random | None = None):
        if config.sorter_name not in sorters:
            config.sorter_name = next(iter(sorters))
        self.config  = config
        self.array   = array
        self.sorters = sorters
        self._rng    = rng or random.Random()
        self._source: list = []
        self._task: asyncio.Task | None = None
        self._busy_listeners: list[Callable[[bool], None]] = []

    # ---- state ----

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def source_array(self) -> list:
        return list(self._source)

    @property
    def stats(self) -> Stats:
        return self.array.stats

    def on_busy_changed(self, fn: Callable[[bool], None]):
        self._busy_listeners.append(fn)

    def _notify_busy(self, busy: bool):
        for fn in self._busy_listeners:
            fn(busy)

    def _ensure_idle(self, what: str):
        if self.busy:
            raise ControllerBusyError(f"cannot {what} while a sort is running")

    # ---- array management ----

    def _random_value(self) -> int:
        return self._rng.randint(VALUE_MIN, VALUE_MAX)

    def load_array(self, values):
        self._ensure_idle("load an array")
        self._source = list(values)
        self.array.visualizer.rebuild_array(self._source)

    def generate_array(self) -> list:
        self._ensure_idle("generate an array")
        self.load_array(self._random_value() for _ in range(self.config.array_size))
        logger.debug("Generated %d values", len(self._source))
        return self.source_array

    def resize_array(self, size: int) -> list:
        """Trim or extend the source array, keeping the existing prefix."""
        self._ensure_idle("resize the array")
        size = clamp(int(size), ARRAY_SIZE_MIN, ARRAY_SIZE_MAX)
        self.config.array_size = size
        values = self._source[:size]
        while len(values) < size:
            values.append(self._random_value())
        self.load_array(values)
        return self.source_array

    def select(self, name: str):
        self._ensure_idle("change sorter")
        if name not in self.sorters:
            raise KeyError(f"Unknown sorter: {name}")
        self.config.sorter_name = name

    def cycle_sorter(self, step: int = 1) -> str:
        names = list(self.sorters)
        idx = names.index(self.config.sorter_name)
        self.select(names[(idx + step) % len(names)])
        return self.config.sorter_name

    # ---- running ----

    def start(self) -> asyncio.Task:
        """Schedule ``run_sort`` on the running loop and return its task."""
        self._ensure_idle("start a sort")
        self._task = asyncio.ensure_future(self._run())
        return self._task

    async def run_sort(self) -> RunOutcome:
        return await self.start()

    async def _run(self) -> RunOutcome:
        name   = self.config.sorter_name
        sorter = self.sorters[name]
        token  = CancelToken()
        self.config.cancel_token = token
        self.array.stats.reset()
        self._notify_busy(True)
        logger.info("Starting %s on %d values (delay %s ms)", name, self.array.length, self.config.delay)
        try:
            await sorter.sort(self.array, token)
        except SortCancelled:
            logger.info("%s cancelled after %s", name, self.array.stats.snapshot())
            return RunOutcome(name, completed=False, cancelled=True, stats=self.array.stats.snapshot())
        except Exception:
            logger.exception("%s failed", name)
            raise
        finally:
            self._notify_busy(False)
        logger.info("%s finished: %s", name, self.array.stats.snapshot())
        return RunOutcome(name, completed=True, cancelled=False, stats=self.array.stats.snapshot())

    def cancel(self) -> bool:
        if not self.busy:
            return False
        self.config.cancel_token.cancel()
        return True

    async def reset(self):
        """Cancel any active run, wait for it to unwind, restore the source array."""
        task = self._task
        try:
            if self.cancel():
                await task
        finally:
            self._task = None
            self.load_array(self._source)
