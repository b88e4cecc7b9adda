from dataclasses import dataclass, field

from observasort.cancel import CancelToken

# ============================================================
# ===================== USER SETTINGS ========================
# ============================================================

WINDOW_WIDTH   = 1100
WINDOW_HEIGHT  = 680
FPS            = 60

ARRAY_SIZE_MIN     = 10
ARRAY_SIZE_MAX     = 100
ARRAY_SIZE_DEFAULT = 100
VALUE_MIN          = 1
VALUE_MAX          = 100

DELAY_MIN     = 0
DELAY_MAX     = 500
DELAY_STEP    = 5
DELAY_DEFAULT = 30

BACKGROUND_COLOR = (5, 5, 10)
BAR_SPACING      = 1
TOP_MARGIN       = 150

# Highlight colours per style kind, same defaults as the web build
STYLE_COLORS = {
    "compareA": (0xff, 0x66, 0x00),
    "compareB": (0xf4, 0x43, 0x36),
    "swapA":    (0x18, 0xbe, 0xff),
    "swapB":    (0x00, 0xbc, 0xd4),
    "read":     (0xff, 0xeb, 0x3b),
    "write":    (0x4c, 0xaf, 0x50),
}

# ============================================================
# ====================== SOUND SETTINGS ======================
# ============================================================
#
# READ_NOTE_OFFSET / WRITE_NOTE_OFFSET: a read of a[i] plays note
#   i + READ_NOTE_OFFSET, a write plays i + WRITE_NOTE_OFFSET.
#   Notes use MIDI numbering, 69 = A4 = 440 Hz.
READ_NOTE_OFFSET  = 60
WRITE_NOTE_OFFSET = 40
#
SAMPLE_RATE = 44100
CHUNK_SIZE  = 512
#
# SOUND_SUSTAIN: how long each tone rings out, in seconds.
SOUND_SUSTAIN = 0.12
# SOUND_ATTACK / SOUND_RELEASE: raised-cosine fade in and out, in seconds.
SOUND_ATTACK  = 0.008
SOUND_RELEASE = 0.050
#
# MAX_VOICES: simultaneous oscillators before the oldest is stolen.
MAX_VOICES       = 24
VOICE_STEAL_FADE = 64
#
GAIN_DEFAULT = 0.2
GAIN_MAX     = 0.5

WAVEFORMS = ("sine", "square", "triangle", "sawtooth")

# ============================================================
# ========================= UI THEME =========================
# ============================================================

UI_PANEL   = (14, 14,  22)
UI_BORDER  = (38, 38,  58)
UI_TEXT    = (215, 215, 228)
UI_SUBTEXT = (105, 105, 130)
UI_ACCENT  = (255, 55,  55)
UI_KEYWORD = (198, 120, 221)
UI_NUMBER  = (209, 154, 102)
UI_STRING  = (152, 195, 121)


def clamp(value, lo, hi):
    return max(lo, min(hi, value))


@dataclass
class SortConfig:
    """
    Runtime configuration shared by the engine, the controller and the UI.

    Built once at startup and passed by reference. ``delay`` is read fresh
    by every pause, so changing it mid-run affects the next operation.
    """
    delay: float = DELAY_DEFAULT
    array_size: int = ARRAY_SIZE_DEFAULT
    sorter_name: str = "Bubble Sort"
    read_shape: str = "sine"
    write_shape: str = "sawtooth"
    gain: float = GAIN_DEFAULT
    sound: bool = True
    cancel_token: CancelToken = field(default_factory=CancelToken)

    def __post_init__(self):
        for shape in (self.read_shape, self.write_shape):
            if shape not in WAVEFORMS:
                raise ValueError(f"Unknown waveform: {shape!r}")
        self.delay = clamp(self.delay, DELAY_MIN, DELAY_MAX)
        self.array_size = clamp(int(self.array_size), ARRAY_SIZE_MIN, ARRAY_SIZE_MAX)
        self.gain = clamp(self.gain, 0.0, GAIN_MAX)

    def nudge_delay(self, steps: int):
        self.delay = clamp(self.delay + steps * DELAY_STEP, DELAY_MIN, DELAY_MAX)
        return self.delay
