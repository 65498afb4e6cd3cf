from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from rsvp_words import (
    START,
    TextBuffer,
    WordRange,
    advance,
    context_after,
    context_before,
    retreat,
    word_text,
)

logger = logging.getLogger(__name__)

MIN_MS_PER_WORD = 25
MAX_MS_PER_WORD = 1000
MS_PER_WORD_STEP = 25
DEFAULT_MS_PER_WORD = 150
DEFAULT_SPEED_FACTOR = 100  # percent

# input poll / pacing tick
TICK_MS = 10


class EmptyTextError(ValueError):
    """The buffer holds no words to show."""


class Phase(Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    DONE = "done"


class Command(Enum):
    TOGGLE_PAUSE = "toggle_pause"
    TOGGLE_HELP = "toggle_help"
    TOGGLE_CONTEXT = "toggle_context"
    QUIT = "quit"
    RESET = "reset"
    STEP_BACK = "step_back"
    STEP_FORWARD = "step_forward"
    FASTER = "faster"
    SLOWER = "slower"
    FOCUS_LOST = "focus_lost"


def clamp_ms_per_word(value: int) -> int:
    return max(MIN_MS_PER_WORD, min(MAX_MS_PER_WORD, int(value)))


def wpm_to_ms(wpm: int) -> int:
    if wpm <= 0:
        return MAX_MS_PER_WORD
    return clamp_ms_per_word(60_000 // wpm)


@dataclass
class PlaybackState:
    ms_per_word: int = DEFAULT_MS_PER_WORD
    word_speed_factor: int = DEFAULT_SPEED_FACTOR
    paused: bool = False
    show_context_when_playing: bool = False
    show_help: bool = False
    exit: bool = False

    def __post_init__(self) -> None:
        self.ms_per_word = clamp_ms_per_word(self.ms_per_word)

    @property
    def wpm(self) -> int:
        return 60_000 // self.ms_per_word

    @property
    def phase(self) -> Phase:
        if self.exit:
            return Phase.DONE
        return Phase.PAUSED if self.paused else Phase.PLAYING

    @property
    def word_interval_ms(self) -> int:
        return self.ms_per_word * self.word_speed_factor // 100

    @property
    def context_visible(self) -> bool:
        return self.paused or self.show_context_when_playing

    def faster(self) -> None:
        self.ms_per_word = clamp_ms_per_word(self.ms_per_word - MS_PER_WORD_STEP)

    def slower(self) -> None:
        self.ms_per_word = clamp_ms_per_word(self.ms_per_word + MS_PER_WORD_STEP)


@dataclass(frozen=True)
class Frame:
    """What the renderer paints for one tick."""

    before: str
    word: str
    after: str
    wpm: int

    @property
    def line(self) -> str:
        return self.before + self.word + self.after


class Playback:
    """
    Drives the word cursor over a buffer:
    - tick() advances when the word interval has elapsed (unless paused)
    - dispatch() applies one user command and restarts the interval
    Construction loads the first word.
    """

    def __init__(
        self,
        text: TextBuffer,
        state: Optional[PlaybackState] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not text.has_words():
            raise EmptyTextError("text contains no words")
        self.text = text
        self.state = state if state is not None else PlaybackState()
        self.cursor: WordRange = START
        self.finished = False
        self._clock = clock
        self._timer = self._now_ms()
        self._advance()

    def _now_ms(self) -> int:
        return int(round(self._clock() * 1000))

    def restart_timer(self) -> None:
        """Start the current word's interval from now."""
        self._timer = self._now_ms()

    def _advance(self) -> None:
        cursor, done = advance(self.text, self.cursor)
        # keep the last real word on screen rather than the empty tail range
        if not cursor.is_empty:
            self.cursor = cursor
        if done:
            self.finished = True
            self.state.exit = True
            logger.debug("Reached end of text at %d", self.cursor.end)

    def _retreat(self) -> None:
        self.cursor, _ = retreat(self.text, self.cursor)

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def wpm(self) -> int:
        return self.state.wpm

    def boost(self, percent: int) -> None:
        """Scale the interval of the current word only; the next advance resets it."""
        self.state.word_speed_factor = max(1, int(percent))

    def tick(self) -> bool:
        """Returns True when the word changed."""
        if self.state.phase is not Phase.PLAYING:
            return False
        now = self._now_ms()
        if now - self._timer < self.state.word_interval_ms:
            return False
        self._advance()
        self.state.word_speed_factor = DEFAULT_SPEED_FACTOR
        self._timer = now
        return True

    def dispatch(self, command: Command) -> None:
        state = self.state
        if state.exit:
            return
        self.restart_timer()

        if command is Command.TOGGLE_PAUSE:
            state.paused = not state.paused
        elif command is Command.TOGGLE_HELP:
            state.show_help = not state.show_help
        elif command is Command.TOGGLE_CONTEXT:
            state.show_context_when_playing = not state.show_context_when_playing
        elif command is Command.QUIT:
            state.exit = True
        elif command is Command.RESET:
            state.paused = True
            self.cursor, _ = advance(self.text, START)
        elif command is Command.STEP_FORWARD:
            self._advance()
        elif command is Command.STEP_BACK:
            self._retreat()
        elif command is Command.FASTER:
            state.faster()
        elif command is Command.SLOWER:
            state.slower()
        elif command is Command.FOCUS_LOST:
            state.paused = True
        logger.debug("%s -> %s at %s", command.value, state.phase.value, self.cursor)

    def frame(self, width: int) -> Frame:
        word = word_text(self.text, self.cursor)
        if not self.state.context_visible:
            return Frame("", word, "", self.wpm)
        spare = max(0, width - len(word))
        left = spare // 2
        right = spare - left
        return Frame(
            context_before(self.text, self.cursor, left),
            word,
            context_after(self.text, self.cursor, right),
            self.wpm,
        )
