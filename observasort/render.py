import pygame

from observasort.settings import (
    BACKGROUND_COLOR, BAR_SPACING, STYLE_COLORS, TOP_MARGIN, UI_ACCENT,
    UI_BORDER, UI_KEYWORD, UI_NUMBER, UI_PANEL, UI_STRING, UI_SUBTEXT,
    UI_TEXT, VALUE_MAX, WINDOW_HEIGHT, WINDOW_WIDTH,
)
from observasort.trace import format_value


def value_to_color(value, max_value):
    r = max(0.0, min(1.0, value / max_value)) if max_value else 0.0
    if r < 0.25: return (0, int(255 * r * 4), 255)
    if r < 0.5:  return (0, 255, int(255 * (1 - (r - 0.25) * 4)))
    if r < 0.75: return (int(255 * (r - 0.5) * 4), 255, 0)
    return (255, int(255 * (1 - (r - 0.75) * 4)), 0)


def _value_color(value):
    if isinstance(value, str):
        return UI_STRING
    if isinstance(value, bool):
        return UI_KEYWORD
    if isinstance(value, list):
        return UI_SUBTEXT
    return UI_NUMBER


class BarVisualizer:
    """
    In-memory bar model plus its pygame painter.

    Implements the engine's visualizer port (values and per-bar styles) and
    the trace renderer (live variables). Port calls never touch pygame; only
    ``draw`` does, so the model works headless.
    """

    def __init__(self, values=(), max_value=VALUE_MAX):
        self.max_value = max_value
        self._values: list = []
        self._styles: dict = {}
        self._vars: dict = {}
        self.rebuild_array(values)

    # ---- visualizer port ----

    def get_value(self, index):
        return self._values[index]

    def set_value(self, index, value):
        self._values[index] = value

    def get_length(self):
        return len(self._values)

    def set_style(self, index, kind):
        if not 0 <= index < len(self._values):
            raise IndexError(f"bar index {index} out of range")
        self._styles[index] = str(getattr(kind, "value", kind))

    def clear_styles(self):
        self._styles.clear()

    def rebuild_array(self, values):
        self._values = list(values)
        self._styles.clear()
        if self._values:
            self.max_value = max(self.max_value, max(self._values))

    @property
    def values(self) -> list:
        return list(self._values)

    @property
    def styles(self) -> dict:
        return dict(self._styles)

    # ---- trace renderer ----

    def show_var(self, name, value):
        self._vars[name] = value

    def remove_var(self, name):
        self._vars.pop(name, None)

    def clear_vars(self):
        self._vars.clear()

    @property
    def variables(self) -> dict:
        return dict(self._vars)

    # ---- painting ----

    def draw(self, screen, fonts, stats=None, header=""):
        screen.fill(BACKGROUND_COLOR)
        n = len(self._values)
        if n:
            bw = WINDOW_WIDTH / n
            usable = WINDOW_HEIGHT - TOP_MARGIN
            for i, v in enumerate(self._values):
                h = (v / self.max_value) * usable
                style = self._styles.get(i)
                c = STYLE_COLORS[style] if style else value_to_color(v, self.max_value)
                pygame.draw.rect(screen, c, (i * bw, WINDOW_HEIGHT - h, max(1, bw - BAR_SPACING), h))

        if header:
            screen.blit(fonts['mid'].render(header, True, UI_TEXT), (12, 10))
        if stats is not None:
            self._draw_stats(screen, fonts, stats)
        self._draw_vars(screen, fonts)

    def _draw_stats(self, screen, fonts, stats):
        line = (f"reads {stats.reads}   writes {stats.writes}   "
                f"comparisons {stats.comparisons}   swaps {stats.swaps}")
        screen.blit(fonts['mono_sm'].render(line, True, UI_SUBTEXT), (12, 36))
        if stats.action:
            screen.blit(fonts['mono_sm'].render(stats.action, True, UI_ACCENT), (12, 54))

    def _draw_vars(self, screen, fonts):
        if not self._vars:
            return
        x, y = WINDOW_WIDTH - 330, 10
        panel = pygame.Rect(x - 8, y - 4, 326, 18 * len(self._vars) + 8)
        pygame.draw.rect(screen, UI_PANEL, panel, border_radius=5)
        pygame.draw.rect(screen, UI_BORDER, panel, 1, border_radius=5)
        font = fonts['mono_sm']
        for name, value in self._vars.items():
            cx = x
            for text, col in (("var ", UI_KEYWORD), (name, UI_TEXT), (" = ", UI_SUBTEXT),
                              (format_value(value), _value_color(value))):
                surf = font.render(text, True, col)
                screen.blit(surf, (cx, y))
                cx += surf.get_width()
            y += 18
