"""
Observable array engine.

Every access a sorter makes to the array goes through ``ObservableArray``:
the two primitives ``_read`` / ``_write`` are the only code that touches the
visualizer's values, and they are only reachable through the
``OperationContext`` handed to a ``command`` body. That makes each operation

  - counted   (``Stats``)
  - audible   (``AudioPort.sound``)
  - paced     (``pause`` sleeps ``config.delay`` ms, read fresh every time)
  - cancellable (the run's ``CancelToken`` is polled at read, write, pause)

Sorters only ever see ``compare``, ``compare_with_val``, ``swap``, ``set``
and ``get`` (plus ``compare_values`` for comparisons on values they already
hold, and ``command`` for building new operations).
"""
import asyncio
import contextlib
import logging
from enum import Enum
from typing import Awaitable, Callable, Protocol, Sequence, TypeVar

from observasort.cancel import CancelToken
from observasort.operators import CompareOp
from observasort.settings import READ_NOTE_OFFSET, WRITE_NOTE_OFFSET
from observasort.stats import Stats
from observasort.trace import NullTraceRenderer, TraceRenderer

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StyleKind(str, Enum):
    COMPARE_A = "compareA"
    COMPARE_B = "compareB"
    SWAP_A    = "swapA"
    SWAP_B    = "swapB"
    READ      = "read"
    WRITE     = "write"


class Waveform(str, Enum):
    SINE     = "sine"
    SQUARE   = "square"
    TRIANGLE = "triangle"
    SAWTOOTH = "sawtooth"


# ============================================================
# ========================== PORTS ===========================
# ============================================================

class VisualizerPort(Protocol):
    def get_value(self, index: int) -> float: ...
    def set_value(self, index: int, value: float) -> None: ...
    def get_length(self) -> int: ...
    def set_style(self, index: int, kind: StyleKind) -> None: ...
    def clear_styles(self) -> None: ...
    def rebuild_array(self, values: Sequence[float]) -> None: ...


class AudioPort(Protocol):
    def sound(self, tone_index: int, shape: Waveform) -> None: ...


class EngineConfig(Protocol):
    delay: float
    cancel_token: CancelToken
    read_shape: str
    write_shape: str


# ============================================================
# ========================= ENGINE ===========================
# ============================================================

class OperationContext:
    """
    Capabilities handed to one command body: ``read``, ``write``, ``pause``.

    Only valid while that body runs; the command closes it afterwards and any
    later use raises ``RuntimeError``.
    """
    __slots__ = ('_read', '_write', '_pause', '_live')

    def __init__(self, read, write, pause):
        self._read  = read
        self._write = write
        self._pause = pause
        self._live  = True

    def _check(self):
        if not self._live:
            raise RuntimeError("OperationContext used outside of its command")

    def read(self, index: int, sound: bool = True):
        self._check()
        return self._read(index, sound)

    def write(self, index: int, value, sound: bool = True):
        self._check()
        self._write(index, value, sound)

    async def pause(self):
        self._check()
        await self._pause()

    def close(self):
        self._live = False


class ObservableArray:
    def __init__(self,
                 config: EngineConfig,
                 visualizer: VisualizerPort,
                 audio: AudioPort,
                 tracer: TraceRenderer | None = None):
        self._config    = config
        self._stats     = Stats()
        self.visualizer = visualizer
        self.audio      = audio
        self.tracer     = tracer if tracer is not None else NullTraceRenderer()
        self._run_token: CancelToken | None = None

    @property
    def stats(self) -> Stats:
        return self._stats

    @property
    def cancel_token(self) -> CancelToken:
        """The token bound for the current run, else the config's."""
        if self._run_token is not None:
            return self._run_token
        return self._config.cancel_token

    @contextlib.contextmanager
    def bind_token(self, token: CancelToken):
        """Poll ``token`` at every read, write and pause while the block runs."""
        previous, self._run_token = self._run_token, token
        try:
            yield token
        finally:
            self._run_token = previous

    @property
    def length(self) -> int:
        return self.visualizer.get_length()

    def __len__(self):
        return self.length

    # ---- primitives ----

    def _check_cancel(self):
        self._config.cancel_token.raise_if_cancelled()
        if self._run_token is not None:
            self._run_token.raise_if_cancelled()

    def _read(self, index: int, sound: bool = True):
        self._check_cancel()
        self._stats.reads += 1
        if sound:
            self.audio.sound(index + READ_NOTE_OFFSET, Waveform(self._config.read_shape))
        return self.visualizer.get_value(index)

    def _write(self, index: int, value, sound: bool = True):
        self._check_cancel()
        self._stats.writes += 1
        if sound:
            self.audio.sound(index + WRITE_NOTE_OFFSET, Waveform(self._config.write_shape))
        self.visualizer.set_value(index, value)

    async def _sleep(self, ms: float):
        await asyncio.sleep(max(0.0, ms) / 1000.0)
        self._check_cancel()

    async def _pause(self):
        await self._sleep(self._config.delay)

    async def command(self,
                      description: str,
                      body: Callable[[OperationContext], Awaitable[T]]) -> T:
        """
        Run ``body`` as one atomic, labelled unit of work.

        Records ``description`` as the current action, clears every highlight
        left by the previous command and passes a fresh ``OperationContext``.
        """
        self._check_cancel()
        self._stats.action = description
        self.visualizer.clear_styles()
        ctx = OperationContext(self._read, self._write, self._pause)
        try:
            return await body(ctx)
        finally:
            ctx.close()

    # ---- derived operations ----

    async def compare(self, index1: int, op, index2: int) -> bool:
        op = CompareOp.parse(op)

        async def body(ctx: OperationContext) -> bool:
            self._stats.comparisons += 1
            self.visualizer.set_style(index1, StyleKind.COMPARE_A)
            self.visualizer.set_style(index2, StyleKind.COMPARE_B)
            value1 = ctx.read(index1)
            await self._sleep(self._config.delay / 2)
            value2 = ctx.read(index2)
            await self._sleep(self._config.delay / 2)
            return op.apply(value1, value2)

        return await self.command(f"Compare a[{index1}] {op} a[{index2}]", body)

    async def compare_with_val(self, index: int, op, value, tally: bool = True) -> bool:
        """
        Compare ``a[index]`` against a literal.

        ``tally=False`` leaves ``Stats.comparisons`` alone; bucket sorters use
        it for their extremum scan, which is not an ordering comparison.
        """
        op = CompareOp.parse(op)

        async def body(ctx: OperationContext) -> bool:
            if tally:
                self._stats.comparisons += 1
            self.visualizer.set_style(index, StyleKind.COMPARE_A)
            value1 = ctx.read(index)
            await ctx.pause()
            return op.apply(value1, value)

        return await self.command(f"Compare a[{index}] {op} {value}", body)

    async def compare_values(self, a, op, b) -> bool:
        """Counted comparison of two values the sorter already read."""
        op = CompareOp.parse(op)

        async def body(ctx: OperationContext) -> bool:
            self._stats.comparisons += 1
            return op.apply(a, b)

        return await self.command(f"Compare {a} {op} {b}", body)

    async def swap(self, index1: int, index2: int):
        async def body(ctx: OperationContext):
            self._stats.swaps += 1
            self.visualizer.set_style(index1, StyleKind.SWAP_A)
            self.visualizer.set_style(index2, StyleKind.SWAP_B)

            tmp1 = ctx.read(index1)
            # second read and write repeat what was just sounded
            tmp2 = ctx.read(index2, sound=False)
            await self._sleep(self._config.delay / 2)

            ctx.write(index1, tmp2)
            ctx.write(index2, tmp1, sound=False)

            self.visualizer.set_style(index1, StyleKind.SWAP_B)
            self.visualizer.set_style(index2, StyleKind.SWAP_A)
            await self._sleep(self._config.delay / 2)

        await self.command(f"Swap {index1} and {index2}", body)

    async def set(self, index: int, value):
        async def body(ctx: OperationContext):
            self.visualizer.set_style(index, StyleKind.WRITE)
            ctx.write(index, value)
            await ctx.pause()

        await self.command(f"Set {index} to {value}", body)

    async def get(self, index: int):
        async def body(ctx: OperationContext):
            self.visualizer.set_style(index, StyleKind.READ)
            value = ctx.read(index)
            await ctx.pause()
            return value

        return await self.command(f"Get {index}", body)
