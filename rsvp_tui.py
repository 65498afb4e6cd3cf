from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

try:
    from rich.text import Text
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Container
    from textual.widgets import Static
except ModuleNotFoundError as exc:
    missing = getattr(exc, "name", "")
    hint = "python3 -m pip install -U rich textual"
    print(f"Missing dependency '{missing}'. Install with: {hint}")
    raise SystemExit(1) from exc

from rsvp_playback import (
    DEFAULT_MS_PER_WORD,
    TICK_MS,
    Command,
    Frame,
    Phase,
    Playback,
    PlaybackState,
    clamp_ms_per_word,
    wpm_to_ms,
)
from rsvp_words import TextBuffer, load_text

logger = logging.getLogger(__name__)


# ---------------------------
# Config
# ---------------------------

CONFIG_PATH = Path(__file__).resolve().parent / "rsvp_tui.config.json"
DEFAULT_TEXT_PATH = "text.txt"

THEMES: Dict[str, Dict[str, str]] = {
    "slate": {
        "screen_bg": "transparent",
        "card_bg": "#0f172a",
        "border": "#1f2937",
        "title": "#e5e7eb",
        "muted": "#64748b",
        "hint": "#93c5fd",
        "word": "#e5e7eb",
        "context": "#60a5fa",
    },
    "ember": {
        "screen_bg": "transparent",
        "card_bg": "#21140e",
        "border": "#3b1d14",
        "title": "#fef3c7",
        "muted": "#d6a08a",
        "hint": "#fbbf24",
        "word": "#fde68a",
        "context": "#f97316",
    },
    "mint": {
        "screen_bg": "transparent",
        "card_bg": "#0b1c22",
        "border": "#12323a",
        "title": "#d1fae5",
        "muted": "#7dd3c7",
        "hint": "#5eead4",
        "word": "#d1fae5",
        "context": "#34d399",
    },
}


def load_config(path: Path = CONFIG_PATH) -> Dict[str, object]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: expected a JSON object", path)
        return {}
    return data


def state_from_config(config: Dict[str, object]) -> PlaybackState:
    raw_ms = config.get("ms_per_word", DEFAULT_MS_PER_WORD)
    # JSON true/false would pass int() as 1/0
    if isinstance(raw_ms, bool):
        raw_ms = None
    try:
        ms_per_word = clamp_ms_per_word(raw_ms)
    except (TypeError, ValueError):
        logger.warning("Bad ms_per_word %r, using %d", config.get("ms_per_word"), DEFAULT_MS_PER_WORD)
        ms_per_word = DEFAULT_MS_PER_WORD

    show_context = config.get("show_context_when_playing", False)
    if not isinstance(show_context, bool):
        logger.warning("Bad show_context_when_playing %r, using false", show_context)
        show_context = False
    return PlaybackState(
        ms_per_word=ms_per_word,
        show_context_when_playing=show_context,
    )


# ---------------------------
# Rendering helpers
# ---------------------------

HELP_KEYS = [
    ("p", "pause"),
    ("c", "context"),
    ("q", "quit"),
    ("r", "reset"),
    ("↑/↓", "speed"),
    ("←/→", "move"),
    ("ctrl+t", "theme"),
]


def render_line(frame: Frame, palette: Dict[str, str]) -> Text:
    text = Text(justify="center", no_wrap=True)
    if frame.before:
        text.append(frame.before, style=palette["context"])
    text.append(frame.word, style=f"bold {palette['word']}")
    if frame.after:
        text.append(frame.after, style=palette["context"])
    return text


def reader_title(frame: Frame) -> str:
    return f" {frame.wpm}wpm "


# ---------------------------
# UI widgets
# ---------------------------

class HelpBar(Static):
    """Help / status line."""
    pass


class ReaderView(Static):
    """Context, current word, context."""
    pass


# ---------------------------
# App
# ---------------------------

class RsvpTUI(App):
    CSS = """
    Screen {
        background: transparent;
    }

    #root {
        height: 100%;
        padding: 1 2;
        align: center bottom;
    }

    HelpBar {
        background: #0f172a;
        border: round #1f2937;
        padding: 0 2;
        height: 3;
        width: 50%;
    }

    ReaderView {
        background: #0f172a;
        border: round #1f2937;
        border-title-align: center;
        padding: 1 1;
        height: 5;
        width: 50%;
        content-align: center middle;
    }
    """

    TITLE = "RSVP TUI"
    SUB_TITLE = "speed reading, one word at a time"

    BINDINGS = [
        ("space", "toggle_pause", "Pause"),
        ("enter", "toggle_pause", "Pause"),
        ("p", "toggle_pause", "Pause"),
        ("h", "toggle_help", "Help"),
        ("c", "toggle_context", "Context"),
        ("q", "request_quit", "Quit"),
        ("r", "reset", "Reset"),
        ("left", "step_back", "Back"),
        ("right", "step_forward", "Forward"),
        ("up", "faster", "Faster"),
        ("down", "slower", "Slower"),
        ("ctrl+t", "cycle_theme", "Theme"),
    ]

    def __init__(
        self,
        text: TextBuffer,
        config: Optional[Dict[str, object]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        if config is None:
            config = load_config()
        self.palettes = THEMES.copy()
        extra_themes = config.get("themes")
        if isinstance(extra_themes, dict):
            for name, colors in extra_themes.items():
                if isinstance(colors, dict):
                    self.palettes[name] = {**self.palettes["slate"], **colors}
        self.theme_name = str(config.get("theme", "slate"))
        if self.theme_name not in self.palettes:
            self.theme_name = "slate"
        self.palette = self.palettes[self.theme_name]
        self.playback = Playback(text, state_from_config(config), clock=clock)
        self.finishing = False

    def compose(self) -> ComposeResult:
        with Container(id="root"):
            self.help_bar = HelpBar()
            self.reader_view = ReaderView()
            yield self.help_bar
            yield self.reader_view

    def on_mount(self) -> None:
        self.apply_theme()
        self._render_all()
        # widths are only known after the first layout pass
        self.call_after_refresh(self._render_reader)
        # terminal setup time must not count against the first word
        self.playback.restart_timer()
        self.set_interval(TICK_MS / 1000.0, self._tick)
        if self.playback.phase is Phase.DONE:
            self._finish()

    def on_resize(self, event) -> None:
        self._render_reader()

    def on_app_blur(self, event: events.AppBlur) -> None:
        self._dispatch(Command.FOCUS_LOST)

    def apply_theme(self) -> None:
        palette = self.palette
        self.screen.styles.background = palette["screen_bg"]
        self.help_bar.styles.background = palette["card_bg"]
        self.reader_view.styles.background = palette["card_bg"]
        border_def = ("round", palette["border"])
        self.help_bar.styles.border = border_def
        self.reader_view.styles.border = border_def

    # playback plumbing

    def _tick(self) -> None:
        if self.finishing:
            return
        if self.playback.tick():
            self._render_reader()
        if self.playback.phase is Phase.DONE:
            self._finish()

    def _dispatch(self, command: Command) -> None:
        if self.finishing:
            return
        self.playback.dispatch(command)
        self._render_all()
        if self.playback.phase is Phase.DONE:
            self._finish()

    def _finish(self) -> None:
        if self.finishing:
            return
        self.finishing = True
        self._render_all()
        if self.playback.finished:
            # leave the last word up for one interval
            self.set_timer(self.playback.state.ms_per_word / 1000.0, self.exit)
        else:
            self.exit()

    # actions

    def action_toggle_pause(self) -> None:
        self._dispatch(Command.TOGGLE_PAUSE)

    def action_toggle_help(self) -> None:
        self._dispatch(Command.TOGGLE_HELP)

    def action_toggle_context(self) -> None:
        self._dispatch(Command.TOGGLE_CONTEXT)

    def action_request_quit(self) -> None:
        self._dispatch(Command.QUIT)

    def action_reset(self) -> None:
        self._dispatch(Command.RESET)

    def action_step_back(self) -> None:
        self._dispatch(Command.STEP_BACK)

    def action_step_forward(self) -> None:
        self._dispatch(Command.STEP_FORWARD)

    def action_faster(self) -> None:
        self._dispatch(Command.FASTER)

    def action_slower(self) -> None:
        self._dispatch(Command.SLOWER)

    def action_cycle_theme(self) -> None:
        self.theme_name = self._cycle_value(self.theme_name, list(self.palettes.keys()))
        self.playback.restart_timer()
        self.palette = self.palettes[self.theme_name]
        self.apply_theme()
        self._render_all()

    def _cycle_value(self, current: str, options: List[str]) -> str:
        if current not in options:
            return options[0]
        idx = options.index(current)
        return options[(idx + 1) % len(options)]

    # rendering

    def _render_all(self) -> None:
        self._render_help()
        self._render_reader()

    def current_frame(self) -> Frame:
        return self.playback.frame(self.reader_view.size.width)

    def _render_reader(self) -> None:
        frame = self.current_frame()
        self.reader_view.border_title = reader_title(frame)
        self.reader_view.update(render_line(frame, self.palette))

    def _render_help(self) -> None:
        theme = self.palette
        state = self.playback.state
        text = Text()
        if self.playback.finished:
            text.append("done!", style=f"bold {theme['title']}")
        elif state.show_help:
            text.append("h", style=theme["hint"])
            text.append(" help ", style=theme["muted"])
            for key, label in HELP_KEYS:
                text.append(f" {key}", style=theme["hint"])
                text.append(f" {label}", style=theme["muted"])
        else:
            label = "Paused" if state.paused else "Playing"
            text.append(label, style=f"bold {theme['title']}")
            if state.show_context_when_playing:
                text.append("  context on", style=theme["muted"])
            text.append("  h help", style=theme["hint"])
        self.help_bar.update(text)


# ---------------------------
# Entry point
# ---------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rsvp-tui",
        description="Read a text file one word at a time in the terminal.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help=f"Text file to read (default: config text_path or {DEFAULT_TEXT_PATH}).",
    )
    parser.add_argument(
        "--wpm",
        type=int,
        default=None,
        help="Starting speed in words per minute.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Write debug logs to this file.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            force=True,
        )

    config = load_config()
    path = Path(args.path or str(config.get("text_path") or DEFAULT_TEXT_PATH))
    try:
        text = load_text(path)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Cannot read {path}: {exc}", file=sys.stderr)
        return 1
    if not text.has_words():
        print(f"{path} contains no words.", file=sys.stderr)
        return 1
    logger.info("Reading %s: %d words", path, sum(1 for _ in text.words()))
    if args.wpm is not None:
        config["ms_per_word"] = wpm_to_ms(args.wpm)

    app = RsvpTUI(text, config=config)
    app.run()
    if app.playback.finished:
        print("done!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
