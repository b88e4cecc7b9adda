# tests/conftest.py
import asyncio
import random

import pytest

from observasort.engine import ObservableArray
from observasort.settings import SortConfig


class FakeVisualizer:
    """Visualizer port that keeps values in a list and records every call."""

    def __init__(self, values=()):
        self.values = list(values)
        self.styles = {}
        self.events = []

    def get_value(self, index):
        self.events.append(("get", index))
        return self.values[index]

    def set_value(self, index, value):
        self.events.append(("set", index, value))
        self.values[index] = value

    def get_length(self):
        return len(self.values)

    def set_style(self, index, kind):
        self.events.append(("style", index, str(kind.value)))
        self.styles[index] = str(kind.value)

    def clear_styles(self):
        self.events.append(("clear",))
        self.styles.clear()

    def rebuild_array(self, values):
        self.events.append(("rebuild", len(values)))
        self.values = list(values)
        self.styles.clear()


class FakeAudio:
    def __init__(self):
        self.tones = []

    def sound(self, tone_index, shape):
        self.tones.append((tone_index, str(shape.value)))


class RecordingTracer:
    def __init__(self):
        self.live = {}
        self.calls = []

    def show_var(self, name, value):
        self.calls.append(("show", name))
        self.live[name] = value

    def remove_var(self, name):
        self.calls.append(("remove", name))
        self.live.pop(name, None)

    def clear_vars(self):
        self.calls.append(("clear",))
        self.live.clear()


@pytest.fixture
def config():
    return SortConfig(delay=0)


@pytest.fixture
def make_array(config):
    def _make(values=(), tracer=None):
        vis = FakeVisualizer(values)
        audio = FakeAudio()
        return ObservableArray(config, vis, audio, tracer=tracer), vis, audio
    return _make


@pytest.fixture
def run():
    return asyncio.run


@pytest.fixture(scope="session")
def random_arrays():
    """Fixed-seed arrays with plenty of duplicates."""
    rng = random.Random(1234)
    return [[rng.randint(1, 100) for _ in range(n)] for n in (10, 37, 200)]
