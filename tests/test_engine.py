import asyncio
import time

import pytest

from observasort.cancel import CancelToken, SortCancelled
from observasort.operators import CompareOp, InvalidOperatorError
from observasort.sorters import BubbleSort, InsertionSort, PigeonholeSort, ShellSort


def test_compare_counts_reads_and_highlights(make_array, run):
    array, vis, audio = make_array([5, 3])

    assert run(array.compare(0, ">", 1)) is True
    assert array.stats.comparisons == 1
    assert array.stats.reads == 2
    assert array.stats.writes == 0
    assert vis.styles == {0: "compareA", 1: "compareB"}
    assert array.stats.action == "Compare a[0] > a[1]"
    # reads sound index + 60 with the read shape
    assert audio.tones == [(60, "sine"), (61, "sine")]


@pytest.mark.parametrize("op, expected", [
    (">", False), (">=", True), ("<", False), ("<=", True), ("==", True), ("!=", False),
    (CompareOp.EQ, True),
])
def test_compare_with_val_operators(make_array, run, op, expected):
    array, vis, _ = make_array([7])
    assert run(array.compare_with_val(0, op, 7)) is expected
    assert array.stats.comparisons == 1
    assert vis.styles == {0: "compareA"}


def test_compare_with_val_untallied(make_array, run):
    array, _, _ = make_array([7])
    run(array.compare_with_val(0, "<", 9, tally=False))
    assert array.stats.comparisons == 0
    assert array.stats.reads == 1


def test_unknown_operator_fails_before_anything_is_counted(make_array, run):
    array, vis, _ = make_array([1, 2])
    with pytest.raises(InvalidOperatorError):
        run(array.compare(0, "<>", 1))
    with pytest.raises(ValueError):
        run(array.compare_with_val(0, "=>", 1))
    assert array.stats.snapshot() == {"reads": 0, "writes": 0, "comparisons": 0, "swaps": 0, "action": ""}
    assert vis.events == []


def test_swap_exchanges_values_and_styles(make_array, run):
    array, vis, audio = make_array([10, 20, 30])
    run(array.swap(0, 2))

    assert vis.values == [30, 20, 10]
    assert array.stats.swaps == 1
    assert array.stats.reads == 2
    assert array.stats.writes == 2
    # styles are exchanged after the write phase
    assert vis.styles == {0: "swapB", 2: "swapA"}
    # second read and second write are silent
    assert audio.tones == [(60, "sine"), (40, "sawtooth")]


def test_get_and_set(make_array, run):
    array, vis, audio = make_array([4, 8])
    assert run(array.get(1)) == 8
    assert vis.styles == {1: "read"}
    run(array.set(0, 99))
    assert vis.values == [99, 8]
    assert vis.styles == {0: "write"}
    assert array.stats.reads == 1
    assert array.stats.writes == 1
    assert array.stats.action == "Set 0 to 99"
    assert audio.tones[-1] == (40, "sawtooth")


def test_compare_values_does_not_touch_the_array(make_array, run):
    array, vis, audio = make_array([1])
    assert run(array.compare_values(1, "<=", 2)) is True
    assert array.stats.comparisons == 1
    assert array.stats.reads == 0
    assert audio.tones == []
    assert [e for e in vis.events if e[0] != "clear"] == []


def test_every_command_clears_previous_highlights(make_array, run):
    array, vis, _ = make_array([1, 2, 3])

    async def two_commands():
        await array.compare(0, "<", 1)
        await array.get(2)

    run(two_commands())

    assert vis.styles == {2: "read"}
    clears = [i for i, e in enumerate(vis.events) if e == ("clear",)]
    styles = [i for i, e in enumerate(vis.events) if e[0] == "style"]
    assert len(clears) == 2
    # the second command's clear comes after every style of the first
    assert all(i < clears[1] for i in styles[:2])
    assert all(i > clears[1] for i in styles[2:])


def test_command_records_action_and_passes_context(make_array, run):
    array, vis, _ = make_array([1, 2])

    async def body(ctx):
        value = ctx.read(0)
        ctx.write(1, value + 40)
        await ctx.pause()
        return value

    assert run(array.command("Custom op", body)) == 1
    assert array.stats.action == "Custom op"
    assert vis.values == [1, 41]


def test_context_is_dead_after_its_command(make_array, run):
    array, _, _ = make_array([1, 2])
    kept = []

    async def body(ctx):
        kept.append(ctx)

    run(array.command("keep", body))
    with pytest.raises(RuntimeError):
        kept[0].read(0)


def test_cancelled_token_stops_before_any_mutation(config, make_array, run):
    array, vis, audio = make_array([2, 1])
    config.cancel_token.cancel()

    with pytest.raises(SortCancelled):
        run(array.swap(0, 1))
    assert vis.values == [2, 1]
    assert array.stats.swaps == 0
    assert array.stats.reads == 0
    assert audio.tones == []


def test_read_inside_command_observes_cancellation(config, make_array, run):
    array, vis, _ = make_array([2, 1])

    async def body(ctx):
        ctx.read(0)
        config.cancel_token.cancel()
        ctx.write(1, 5)

    with pytest.raises(SortCancelled):
        run(array.command("cancel mid-way", body))
    # the write never happened, the earlier read stays counted
    assert vis.values == [2, 1]
    assert array.stats.reads == 1
    assert array.stats.writes == 0


def test_cancellation_is_not_a_generic_runtime_error():
    assert not issubclass(SortCancelled, (RuntimeError, ValueError))


def test_delay_is_read_fresh_on_every_pause(config, make_array):
    array, _, _ = make_array([1])

    async def timed_get():
        start = time.monotonic()
        await array.get(0)
        return time.monotonic() - start

    async def scenario():
        fast = await timed_get()
        config.delay = 60
        slow = await timed_get()
        return fast, slow

    fast, slow = asyncio.run(scenario())
    assert fast < 0.03
    assert slow >= 0.05


def test_cancel_during_pause_halts_within_one_operation(config, make_array):
    config.delay = 20
    array, vis, _ = make_array(list(range(30, 0, -1)))

    async def scenario():
        token = CancelToken()
        config.cancel_token = token
        task = asyncio.ensure_future(BubbleSort().sort(array, token))
        await asyncio.sleep(0.1)
        token.cancel()
        at_cancel = array.stats.snapshot()
        values_at_cancel = list(vis.values)
        cancelled_at = time.monotonic()
        with pytest.raises(SortCancelled):
            await task
        return at_cancel, values_at_cancel, time.monotonic() - cancelled_at

    at_cancel, values_at_cancel, latency = asyncio.run(scenario())
    assert at_cancel["comparisons"] > 0
    assert array.stats.snapshot() == at_cancel
    assert vis.values == values_at_cancel
    # one pause window (20 ms) plus scheduling slack
    assert latency < 0.2


@pytest.mark.parametrize("sorter_cls", [BubbleSort, ShellSort, PigeonholeSort])
def test_token_passed_to_sort_is_honoured(sorter_cls, config, make_array, run):
    array, vis, _ = make_array([4, 3, 2, 1])
    token = CancelToken()
    token.cancel()

    with pytest.raises(SortCancelled):
        run(sorter_cls().sort(array, token))
    assert vis.values == [4, 3, 2, 1]
    assert array.stats.reads == 0
    assert not config.cancel_token.cancelled


def test_run_token_cancelled_mid_sort_stops_it(config, make_array):
    config.delay = 5
    array, vis, _ = make_array(list(range(40, 0, -1)))

    async def scenario():
        token = CancelToken()
        task = asyncio.ensure_future(InsertionSort().sort(array, token))
        await asyncio.sleep(0.05)
        token.cancel()
        with pytest.raises(SortCancelled):
            await task
        assert array.cancel_token is config.cancel_token

    asyncio.run(scenario())
    assert vis.values != sorted(vis.values)
