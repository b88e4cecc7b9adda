"""
Oscillator-bank audio player for array operations.

HOW IT WORKS
============

Each ``sound(note, shape)`` call creates an ``_Osc`` voice. A daemon thread
mixes every live voice into one chunk at a time and queues it on a
``pygame.mixer.Channel``.

WAVEFORM, phase p in [0, 1) advancing by freq / sample_rate per sample:
  sine      sin(2pi * p)
  square    +1 for p < 0.5, -1 otherwise
  triangle  1 - 4 * |p - 0.5|
  sawtooth  2p - 1

ENVELOPE, raised-cosine (Hann) attack and release:
  Attack:  env[t] = 0.5 * (1 - cos(pi * t / A))          t in [0, A)
  Release: env[t] = 0.5 * (1 + cos(pi * (t - start) / R)) t in [max_age - R, max_age)

VOICE STEALING: past MAX_VOICES the oldest voice is clamped to a
VOICE_STEAL_FADE-sample release so it fades out without a click.

NORMALIZATION: the mix is divided by sqrt(n_voices) and scaled by gain.
"""
import logging
import math
import threading
import time

import numpy as np
import pygame

from observasort.settings import (
    CHUNK_SIZE, MAX_VOICES, SAMPLE_RATE, SOUND_ATTACK, SOUND_RELEASE,
    SOUND_SUSTAIN, VOICE_STEAL_FADE,
)

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi
TRIGGER_MIN_INTERVAL = 0.004


def note_to_freq(note: float) -> float:
    """MIDI note number to Hz (69 = A4 = 440 Hz)."""
    return 440.0 * 2.0 ** ((note - 69) / 12.0)


def waveform(shape: str, phases: np.ndarray) -> np.ndarray:
    shape = str(getattr(shape, "value", shape))
    if shape == "sine":
        return np.sin(TWO_PI * phases)
    if shape == "square":
        return np.where(phases < 0.5, 1.0, -1.0)
    if shape == "triangle":
        return 1.0 - 4.0 * np.abs(phases - 0.5)
    if shape == "sawtooth":
        return 2.0 * phases - 1.0
    raise ValueError(f"Unknown waveform: {shape!r}")


class _Osc:
    """
    Single oscillator voice.

    Attributes
    ----------
    freq      : float  frequency in Hz
    shape     : str    waveform name
    phase     : float  current phase in [0, 1)
    age       : int    samples rendered so far
    max_age   : int    total lifetime in samples
    attack    : int    attack length in samples
    release   : int    release length in samples
    """
    __slots__ = ('freq', 'shape', 'phase', 'age', 'max_age', 'attack', 'release')

    def __init__(self, freq, shape, max_age, attack, release):
        self.freq    = freq
        self.shape   = shape
        self.phase   = 0.0
        self.age     = 0
        self.max_age = max_age
        self.attack  = attack
        self.release = release


class SoundEngine:
    """
    Audio player for the engine. ``config`` supplies ``gain`` and the
    ``sound`` on/off flag, both read on every call.
    """

    def __init__(self, config, sample_rate=SAMPLE_RATE, chunk_size=CHUNK_SIZE):
        self.config       = config
        self.sample_rate  = sample_rate
        self.chunk_size   = chunk_size
        self.sustain_smp  = int(SOUND_SUSTAIN * sample_rate)
        self.attack_smp   = max(1, int(SOUND_ATTACK * sample_rate))
        self.release_smp  = max(1, int(SOUND_RELEASE * sample_rate))
        self._oscs        = []
        self._lock        = threading.Lock()
        self._running     = False
        self._thread      = None
        self._channel     = None
        self._last_trigger = 0.0

    @property
    def voices(self) -> int:
        with self._lock:
            return len(self._oscs)

    def start(self):
        pygame.mixer.pre_init(self.sample_rate, -16, 2, self.chunk_size)
        pygame.mixer.init()
        self._channel = pygame.mixer.Channel(1)
        self._running = True
        self._thread  = threading.Thread(target=self._loop, daemon=True)
        self._thread.start()
        logger.debug("Sound engine started at %d Hz", self.sample_rate)

    def stop(self):
        self._running = False
        if self._channel:
            self._channel.stop()
        if self._thread:
            self._thread.join(timeout=1.0)
            self._thread = None

    def sound(self, tone_index, shape):
        """Queue a voice for ``tone_index`` (a MIDI note) with ``shape``."""
        if not self.config.sound:
            return
        now = time.monotonic()
        if now - self._last_trigger < TRIGGER_MIN_INTERVAL:
            return
        self._last_trigger = now
        self.trigger(note_to_freq(tone_index), shape)

    def trigger(self, freq: float, shape):
        osc = _Osc(freq, str(getattr(shape, "value", shape)),
                   self.sustain_smp, self.attack_smp, self.release_smp)
        with self._lock:
            if len(self._oscs) >= MAX_VOICES:
                oldest = self._oscs[0]
                steal_release  = min(VOICE_STEAL_FADE, oldest.release)
                oldest.max_age = min(oldest.max_age, oldest.age + steal_release)
                oldest.release = steal_release
            self._oscs.append(osc)

    def _gen_chunk(self) -> np.ndarray:
        """Mix one chunk of all live voices, returned as float64 in [-gain, gain]."""
        buf = np.zeros(self.chunk_size, dtype=np.float64)
        idx = np.arange(self.chunk_size, dtype=np.float64)

        with self._lock:
            alive = []
            for o in self._oscs:
                abs_age = idx + o.age
                phases  = (o.phase + idx * (o.freq / self.sample_rate)) % 1.0
                wave    = waveform(o.shape, phases)

                env = np.ones(self.chunk_size, dtype=np.float64)
                a_mask = abs_age < o.attack
                if np.any(a_mask):
                    env[a_mask] = 0.5 * (1.0 - np.cos(math.pi * abs_age[a_mask] / o.attack))

                rel_start = o.max_age - o.release
                r_mask = abs_age >= rel_start
                if np.any(r_mask):
                    env[r_mask] = np.maximum(0.0, 0.5 * (1.0 + np.cos(
                        math.pi * (abs_age[r_mask] - rel_start) / o.release
                    )))
                env[abs_age >= o.max_age] = 0.0

                buf += wave * env

                o.phase = (o.phase + self.chunk_size * (o.freq / self.sample_rate)) % 1.0
                o.age  += self.chunk_size
                if o.age < o.max_age:
                    alive.append(o)

            self._oscs = alive
            n_voices = max(1, len(alive))

        buf /= math.sqrt(n_voices)
        return np.clip(buf, -1.0, 1.0) * self.config.gain

    def _loop(self):
        chunk_secs = self.chunk_size / self.sample_rate
        while self._running:
            mono   = self._gen_chunk()
            pcm    = (mono * 32767).astype(np.int16)
            stereo = np.column_stack((pcm, pcm))
            snd    = pygame.mixer.Sound(buffer=stereo.tobytes())
            deadline = time.monotonic() + chunk_secs * 4
            while self._channel.get_queue() is not None and self._running:
                time.sleep(0.001)
                if time.monotonic() > deadline:
                    break
            if self._running:
                self._channel.queue(snd)
            time.sleep(chunk_secs * 0.75)


class NullAudio:
    """Silent audio port, used headless and when the mixer is unavailable."""

    def sound(self, tone_index, shape):
        pass
