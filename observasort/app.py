import argparse
import asyncio
import logging
import random
import sys
import zipfile

import pygame

from observasort.controller import SortController
from observasort.engine import ObservableArray
from observasort.loader import load_path
from observasort.logging_config import setup_logging
from observasort.render import BarVisualizer
from observasort.settings import (
    ARRAY_SIZE_DEFAULT, DELAY_DEFAULT, FPS, WAVEFORMS, WINDOW_HEIGHT,
    WINDOW_WIDTH, SortConfig,
)
from observasort.sorters import build_registry
from observasort.sound import NullAudio, SoundEngine

logger = logging.getLogger(__name__)

RESIZE_STEP = 10

HELP_LINE = ("SPACE sort   ESC cancel/quit   G new array   LEFT/RIGHT sorter   "
             "UP/DOWN delay   -/= size   M sound")


def build_fonts():
    def tf(names, sz):
        for n in names:
            try:
                return pygame.font.SysFont(n, sz)
            except (OSError, pygame.error):
                continue
        return pygame.font.SysFont(None, sz)
    mono = ["Consolas", "Courier New", "Lucida Console"]
    sans = ["Segoe UI", "Tahoma", "Arial"]
    return dict(big=tf(sans, 22), mid=tf(sans, 17), small=tf(sans, 13), mono_sm=tf(mono, 13))


def build_app(config, audio, sorters, seed=None):
    visualizer = BarVisualizer()
    array      = ObservableArray(config, visualizer, audio, tracer=visualizer)
    controller = SortController(config, array, sorters, rng=random.Random(seed))
    return controller, visualizer


# ============================================================
# ======================= INTERACTIVE ========================
# ============================================================

class InteractiveApp:
    def __init__(self, controller: SortController, visualizer: BarVisualizer):
        self.controller = controller
        self.visualizer = visualizer
        self.config     = controller.config
        self.task       = None
        self.message    = ""
        self.controls_enabled = True
        controller.on_busy_changed(self._on_busy_changed)

    def _on_busy_changed(self, busy):
        self.controls_enabled = not busy

    def _header(self):
        state = "sorting" if self.controller.busy else "idle"
        snd   = "on" if self.config.sound else "off"
        head  = (f"{self.config.sorter_name}  |  {len(self.visualizer.values)} values  |  "
                 f"delay {self.config.delay:.0f} ms  |  sound {snd}  |  {state}")
        return f"{head}  |  {self.message}" if self.message else head

    def _collect_finished(self):
        if self.task is None or not self.task.done():
            return
        task, self.task = self.task, None
        if task.exception() is not None:
            self.message = f"error: {task.exception()}"
            return
        outcome = task.result()
        self.message = "cancelled" if outcome.cancelled else "sorted"

    async def handle_key(self, key) -> bool:
        """Returns False when the app should quit."""
        c = self.controller
        if key == pygame.K_ESCAPE:
            if not c.busy:
                return False
            await c.reset()
            self.task    = None
            self.message = "reset"
        elif key == pygame.K_UP:
            self.config.nudge_delay(+1)
        elif key == pygame.K_DOWN:
            self.config.nudge_delay(-1)
        elif key == pygame.K_m:
            self.config.sound = not self.config.sound
        elif not self.controls_enabled:
            return True
        elif key == pygame.K_SPACE:
            self.message = ""
            self.task = c.start()
        elif key == pygame.K_g:
            c.generate_array()
        elif key == pygame.K_RIGHT:
            c.cycle_sorter(+1)
        elif key == pygame.K_LEFT:
            c.cycle_sorter(-1)
        elif key == pygame.K_EQUALS:
            c.resize_array(self.config.array_size + RESIZE_STEP)
        elif key == pygame.K_MINUS:
            c.resize_array(self.config.array_size - RESIZE_STEP)
        return True

    async def run(self):
        screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
        pygame.display.set_caption("ObservaSort")
        fonts = build_fonts()
        self.controller.generate_array()

        running = True
        while running:
            for ev in pygame.event.get():
                if ev.type == pygame.QUIT:
                    running = False
                elif ev.type == pygame.KEYDOWN:
                    running = await self.handle_key(ev.key) and running
            self._collect_finished()
            self.visualizer.draw(screen, fonts, self.controller.stats, self._header())
            screen.blit(fonts['small'].render(HELP_LINE, True, (105, 105, 130)),
                        (12, WINDOW_HEIGHT - 20))
            pygame.display.flip()
            await asyncio.sleep(1 / FPS)

        if self.controller.busy:
            await self.controller.reset()


# ============================================================
# ========================= HEADLESS =========================
# ============================================================

async def run_headless(controller: SortController, visualizer: BarVisualizer) -> bool:
    source = controller.generate_array()
    outcome = await controller.run_sort()
    ok = visualizer.values == sorted(source)
    logger.info("%s: %s (%s)", outcome.sorter_name,
                "sorted" if ok else "NOT sorted", outcome.stats)
    return ok


# ============================================================
# =========================== CLI ============================
# ============================================================

def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="observasort",
                                description="Animated, audible sorting algorithm visualizer.")
    p.add_argument("--sorter", default=None, help="sorter display name (see --list)")
    p.add_argument("--size", type=int, default=ARRAY_SIZE_DEFAULT, help="array size (10-100)")
    p.add_argument("--delay", type=float, default=None,
                   help=f"per-operation delay in ms (default {DELAY_DEFAULT}, 0 when headless)")
    p.add_argument("--seed", type=int, default=None, help="random seed for array generation")
    p.add_argument("--read-shape", choices=WAVEFORMS, default="sine")
    p.add_argument("--write-shape", choices=WAVEFORMS, default="sawtooth")
    p.add_argument("--mute", action="store_true", help="start with sound off")
    p.add_argument("--load", action="append", default=[], metavar="PATH",
                   help="custom sorter .py or SortPack .zip (repeatable)")
    p.add_argument("--headless", action="store_true", help="run one sort without a window")
    p.add_argument("--list", action="store_true", help="list sorters and exit")
    p.add_argument("--log-level", default="INFO",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    p.add_argument("--log-file", default=None)
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(getattr(logging, args.log_level), args.log_file)

    sorters = build_registry()
    for path in args.load:
        try:
            load_path(path, sorters)
        except (OSError, ValueError, zipfile.BadZipFile) as e:
            logger.error("Could not load %s: %s", path, e)
            return 2

    if args.list:
        for name in sorters:
            print(name)
        return 0

    if args.sorter is not None and args.sorter not in sorters:
        logger.error("Unknown sorter %r, choose from: %s", args.sorter, ", ".join(sorters))
        return 2

    delay = args.delay if args.delay is not None else (0 if args.headless else DELAY_DEFAULT)
    config = SortConfig(delay=delay, array_size=args.size,
                        sorter_name=args.sorter or next(iter(sorters)),
                        read_shape=args.read_shape, write_shape=args.write_shape,
                        sound=not args.mute)

    if args.headless:
        controller, visualizer = build_app(config, NullAudio(), sorters, args.seed)
        return 0 if asyncio.run(run_headless(controller, visualizer)) else 1

    pygame.init()
    audio = SoundEngine(config)
    try:
        audio.start()
    except pygame.error as e:
        logger.warning("Audio unavailable, running silent: %s", e)
        audio = NullAudio()
    controller, visualizer = build_app(config, audio, sorters, args.seed)
    try:
        asyncio.run(InteractiveApp(controller, visualizer).run())
    finally:
        if isinstance(audio, SoundEngine):
            audio.stop()
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
