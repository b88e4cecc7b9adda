import pygame
import pytest

from observasort.engine import ObservableArray, StyleKind
from observasort.render import BarVisualizer, value_to_color
from observasort.settings import STYLE_COLORS, WINDOW_HEIGHT, WINDOW_WIDTH, SortConfig
from observasort.sorters import QuickSort

from conftest import FakeAudio


def test_port_calls_work_without_a_display():
    vis = BarVisualizer([4, 2, 9])
    assert vis.get_length() == 3
    vis.set_value(1, 7)
    assert vis.get_value(1) == 7
    vis.set_style(0, StyleKind.SWAP_A)
    vis.set_style(2, "read")
    assert vis.styles == {0: "swapA", 2: "read"}
    vis.clear_styles()
    assert vis.styles == {}
    with pytest.raises(IndexError):
        vis.set_style(5, StyleKind.READ)


def test_rebuild_replaces_values_and_drops_styles():
    vis = BarVisualizer([1, 2])
    vis.set_style(0, StyleKind.WRITE)
    vis.rebuild_array([5, 6, 7])
    assert vis.values == [5, 6, 7]
    assert vis.styles == {}


def test_trace_rendering_state():
    vis = BarVisualizer()
    vis.show_var("i", 1)
    vis.show_var("L", [1, 2])
    vis.remove_var("i")
    assert vis.variables == {"L": [1, 2]}
    vis.clear_vars()
    assert vis.variables == {}


def test_value_to_color_gradient_ends():
    assert value_to_color(0, 100) == (0, 0, 255)
    assert value_to_color(100, 100) == (255, 0, 0)


def test_draw_paints_highlights_and_variables():
    pygame.font.init()
    font = pygame.font.Font(None, 14)
    fonts = dict(big=font, mid=font, small=font, mono_sm=font)
    screen = pygame.Surface((WINDOW_WIDTH, WINDOW_HEIGHT))

    vis = BarVisualizer([100, 50])
    vis.set_style(0, StyleKind.COMPARE_A)
    vis.show_var("pivotValue", 50)
    array = ObservableArray(SortConfig(delay=0), vis, FakeAudio(), tracer=vis)
    vis.draw(screen, fonts, array.stats, header="Quick Sort")

    # bottom-left pixel belongs to the highlighted first bar
    assert tuple(screen.get_at((2, WINDOW_HEIGHT - 2)))[:3] == STYLE_COLORS["compareA"]


def test_sorting_through_the_renderer(run):
    vis = BarVisualizer([9, 4, 4, 1, 7])
    array = ObservableArray(SortConfig(delay=0), vis, FakeAudio(), tracer=vis)
    run(QuickSort().sort(array))
    assert vis.values == [1, 4, 4, 7, 9]
    assert vis.variables == {}
