import asyncio
import random

import pytest

from observasort.controller import ControllerBusyError, SortController
from observasort.engine import ObservableArray
from observasort.settings import ARRAY_SIZE_MAX, ARRAY_SIZE_MIN, SortConfig
from observasort.sorters import build_registry

from conftest import FakeAudio, FakeVisualizer


@pytest.fixture
def controller():
    config = SortConfig(delay=0, array_size=20, sorter_name="Quick Sort")
    array = ObservableArray(config, FakeVisualizer(), FakeAudio())
    return SortController(config, array, build_registry(), rng=random.Random(7))


def test_generate_array_fills_size_in_value_range(controller):
    values = controller.generate_array()
    assert len(values) == 20
    assert all(1 <= v <= 100 for v in values)
    assert controller.array.visualizer.values == values


def test_resize_keeps_prefix_and_clamps(controller):
    values = controller.generate_array()
    assert controller.resize_array(15) == values[:15]
    grown = controller.resize_array(30)
    assert grown[:15] == values[:15]
    assert len(grown) == 30
    assert len(controller.resize_array(1)) == ARRAY_SIZE_MIN
    assert len(controller.resize_array(10_000)) == ARRAY_SIZE_MAX
    assert controller.config.array_size == ARRAY_SIZE_MAX


def test_select_validates_name(controller):
    controller.select("Heap Sort")
    assert controller.config.sorter_name == "Heap Sort"
    with pytest.raises(KeyError):
        controller.select("Bogo Sort")
    assert controller.cycle_sorter(+1) == "Radix Sort"


def test_unknown_configured_sorter_falls_back_to_first():
    config = SortConfig(delay=0, sorter_name="Nope")
    array = ObservableArray(config, FakeVisualizer(), FakeAudio())
    SortController(config, array, build_registry())
    assert config.sorter_name == "Bubble Sort"


def test_run_sort_completes_and_notifies(controller):
    busy_events = []
    controller.on_busy_changed(busy_events.append)
    source = controller.generate_array()
    controller.array.stats.reads = 999

    outcome = asyncio.run(controller.run_sort())

    assert outcome.completed and not outcome.cancelled
    assert outcome.sorter_name == "Quick Sort"
    assert controller.array.visualizer.values == sorted(source)
    # stats were reset at the start of the run
    assert outcome.stats["reads"] < 999
    assert busy_events == [True, False]
    assert not controller.busy


def test_each_run_gets_a_new_token(controller):
    controller.generate_array()
    first = controller.config.cancel_token
    asyncio.run(controller.run_sort())
    assert controller.config.cancel_token is not first


def test_cancel_returns_cancelled_outcome_not_a_fault(controller, caplog):
    controller.config.delay = 5
    controller.config.sorter_name = "Bubble Sort"
    controller.generate_array()

    async def scenario():
        task = controller.start()
        await asyncio.sleep(0.05)
        assert controller.busy
        assert controller.cancel() is True
        return await task

    with caplog.at_level("INFO", logger="observasort"):
        outcome = asyncio.run(scenario())
    assert outcome.cancelled and not outcome.completed
    assert not any(r.levelname == "ERROR" for r in caplog.records)
    assert controller.cancel() is False


def test_busy_controller_rejects_array_changes(controller):
    controller.config.delay = 5
    controller.generate_array()

    async def scenario():
        task = controller.start()
        await asyncio.sleep(0)
        with pytest.raises(ControllerBusyError):
            controller.generate_array()
        with pytest.raises(ControllerBusyError):
            controller.resize_array(50)
        with pytest.raises(ControllerBusyError):
            controller.start()
        controller.cancel()
        await task

    asyncio.run(scenario())


def test_reset_restores_source_array(controller):
    controller.config.delay = 5
    controller.config.sorter_name = "Bubble Sort"
    source = controller.generate_array()

    async def scenario():
        controller.start()
        await asyncio.sleep(0.05)
        await controller.reset()

    asyncio.run(scenario())
    assert not controller.busy
    assert controller.array.visualizer.values == source


def test_fault_is_logged_and_reraised_with_controls_restored(controller, caplog):
    busy_events = []
    controller.on_busy_changed(busy_events.append)
    controller.generate_array()

    def broken(index, kind):
        raise RuntimeError("renderer exploded")

    controller.array.visualizer.set_style = broken
    with pytest.raises(RuntimeError, match="renderer exploded"):
        asyncio.run(controller.run_sort())
    assert busy_events == [True, False]
    assert any(r.levelname == "ERROR" for r in caplog.records)
