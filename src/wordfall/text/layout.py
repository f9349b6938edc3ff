from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from wordfall.log import get_logger

logger = get_logger(__name__)

Measure = Callable[[str], float]

# --- Font-derived defaults ---
LINE_SPACING = 1.25
SPACE_SCALE = 0.68
TAB_SPACES = 5
OVERFLOW_FRACTION = 0.05


class KeyKind(str, Enum):
    PRINTABLE = "printable"
    BACKSPACE = "backspace"
    SPACE = "space"
    TAB = "tab"
    ENTER = "enter"


class LayoutState(str, Enum):
    EDITING = "editing"
    REGION_FULL = "region_full"


@dataclass(frozen=True)
class KeyEvent:
    kind: KeyKind
    char: str = ""

    @classmethod
    def printable(cls, char: str) -> "KeyEvent":
        return cls(kind=KeyKind.PRINTABLE, char=char)


BACKSPACE = KeyEvent(KeyKind.BACKSPACE)
SPACE = KeyEvent(KeyKind.SPACE)
TAB = KeyEvent(KeyKind.TAB)
ENTER = KeyEvent(KeyKind.ENTER)

_CONTROL_KEYS = {" ": SPACE, "\t": TAB, "\n": ENTER, "\b": BACKSPACE}


@dataclass(frozen=True)
class Word:
    """A committed word.

    ``origin_x``/``origin_y`` are the top-left corner of the box the word was
    typed in. ``height`` is the height of that box; the text is drawn with its
    bottom edge on ``y_max``.
    """

    text: str
    origin_x: float
    origin_y: float
    width: float
    height: float

    @classmethod
    def create(cls, text: str, origin_x: float, origin_y: float, height: float, measure: Measure) -> "Word":
        if not text:
            raise ValueError("cannot create a word from empty text")
        return cls(text=text, origin_x=origin_x, origin_y=origin_y, width=measure(text), height=height)

    @property
    def x_max(self) -> float:
        return self.origin_x + self.width

    @property
    def y_max(self) -> float:
        return self.origin_y + self.height


class Region:
    """A rectangular area of the surface that lays out typed words.

    Keystrokes arrive one at a time through :meth:`handle_key`. Completed words
    are appended to :attr:`words`; the word being typed lives in
    :attr:`edit_buffer` until whitespace or an overflow commits it.
    """

    def __init__(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        measure: Measure,
        line_height: float,
        space_width: float,
        tab_width: Optional[float] = None,
        overflow_allowance: Optional[float] = None,
        word_height: Optional[float] = None,
    ) -> None:
        self.measure = measure
        self.width = width
        self.height = height
        self.x_min = x
        self.y_min = y
        self.x_max = math.floor(x + width)
        self.y_max = math.floor(y + height)
        self.line_height = line_height
        self.space_width = space_width
        self.tab_width = TAB_SPACES * space_width if tab_width is None else tab_width
        self.overflow_allowance = (
            math.floor(width * OVERFLOW_FRACTION) if overflow_allowance is None else overflow_allowance
        )
        self.word_height = line_height if word_height is None else word_height

        self.cursor_x = self.x_min
        self.cursor_y = self.y_min
        self.words: List[Word] = []
        self.edit_buffer = ""
        self.accepting_input = True
        self.idle_ticks = 0

    @classmethod
    def from_font(
        cls,
        x: float,
        y: float,
        width: float,
        height: float,
        measure: Measure,
        font_size: int,
        *,
        line_spacing: float = LINE_SPACING,
        space_scale: float = SPACE_SCALE,
        tab_spaces: int = TAB_SPACES,
        overflow_fraction: float = OVERFLOW_FRACTION,
        word_height: Optional[float] = None,
    ) -> "Region":
        space_width = measure("s") * space_scale
        return cls(
            x,
            y,
            width,
            height,
            measure=measure,
            line_height=font_size * line_spacing,
            space_width=space_width,
            tab_width=tab_spaces * space_width,
            overflow_allowance=math.floor(width * overflow_fraction),
            word_height=word_height,
        )

    def fresh(self) -> "Region":
        return Region(
            self.x_min,
            self.y_min,
            self.width,
            self.height,
            measure=self.measure,
            line_height=self.line_height,
            space_width=self.space_width,
            tab_width=self.tab_width,
            overflow_allowance=self.overflow_allowance,
            word_height=self.word_height,
        )

    @property
    def state(self) -> LayoutState:
        return LayoutState.EDITING if self.accepting_input else LayoutState.REGION_FULL

    def buffer_width(self) -> float:
        return self.measure(self.edit_buffer) if self.edit_buffer else 0

    def snapshot(self) -> Tuple[Word, ...]:
        return tuple(self.words)

    def tick(self) -> int:
        self.idle_ticks += 1
        return self.idle_ticks

    # --- Overflow predicates ---

    def line_fits(self) -> bool:
        return self.cursor_y + self.line_height <= self.y_max

    def fits_full_line(self, width: float) -> bool:
        return width >= self.width + self.overflow_allowance

    def overflows_right_margin(self, width: float, buffer_empty: bool) -> bool:
        limit = self.x_max if buffer_empty else self.x_max + self.overflow_allowance
        return self.cursor_x + width > limit

    # --- Dispatch ---

    def handle_key(self, event: KeyEvent) -> None:
        self.idle_ticks = 0
        if event.kind == KeyKind.BACKSPACE:
            self._backspace()
            return
        if not self.accepting_input:
            return
        if event.kind in (KeyKind.SPACE, KeyKind.TAB, KeyKind.ENTER):
            self._whitespace(event.kind)
        elif event.kind == KeyKind.PRINTABLE:
            self._printable(event.char)

    def _backspace(self) -> None:
        if self.edit_buffer:
            self.edit_buffer = self.edit_buffer[:-1]
        elif self.words:
            self.rewind()
        self.accepting_input = True

    def _whitespace(self, kind: KeyKind) -> None:
        pending_width = self.buffer_width()
        pending_empty = not self.edit_buffer
        if not pending_empty:
            self.commit()
            self.edit_buffer = ""
            self.cursor_x += pending_width

        if kind == KeyKind.ENTER:
            if self.line_fits():
                self.new_line()
            elif not self.overflows_right_margin(pending_width, pending_empty):
                # Never past the in-progress overflow slack.
                self.cursor_x = min(self.cursor_x + self.space_width, self.x_max + self.overflow_allowance)
            else:
                self._disable()
            return

        advance = self.space_width if kind == KeyKind.SPACE else self.tab_width
        if self.cursor_x + advance <= self.x_max:
            self.cursor_x += advance
        elif self.line_fits():
            self.new_line()
        else:
            self._disable()

    def _printable(self, char: str) -> None:
        self.edit_buffer += char
        width = self.buffer_width()
        if self.fits_full_line(width):
            self.commit()
            self.edit_buffer = ""
            if self.line_fits():
                self.new_line()
            else:
                self._disable()
        elif self.overflows_right_margin(width, len(self.edit_buffer) == 1):
            if self.line_fits():
                # The word moves down whole; nothing is committed.
                self.new_line()
            else:
                self.commit()
                self.edit_buffer = ""
                self._disable()

    # --- Mutations ---

    def new_line(self) -> None:
        self.cursor_x = self.x_min
        self.cursor_y += self.line_height

    def commit(self) -> Word:
        """Store the edit buffer as a word at the cursor."""
        word = Word.create(self.edit_buffer, self.cursor_x, self.cursor_y, self.word_height, self.measure)
        self.words.append(word)
        logger.debug("committed %r at (%s, %s)", word.text, word.origin_x, word.origin_y)
        return word

    def rewind(self) -> str:
        """Un-commit the last word and return its text to the edit buffer."""
        if not self.words:
            raise RuntimeError("no committed word to rewind")
        if self.edit_buffer:
            raise RuntimeError("cannot rewind while the edit buffer holds text")
        word = self.words.pop()
        self.cursor_x = word.origin_x
        self.cursor_y = word.origin_y
        self.edit_buffer = word.text
        self.accepting_input = True
        logger.debug("rewound %r", word.text)
        return word.text

    def _disable(self) -> None:
        self.accepting_input = False
        logger.debug("region full after %d words", len(self.words))


def key_for_char(char: str) -> Optional[KeyEvent]:
    event = _CONTROL_KEYS.get(char)
    if event is not None:
        return event
    if len(char) == 1 and char.isprintable() and not char.isspace():
        return KeyEvent.printable(char)
    return None


def append_text(region: Region, text: str) -> Region:
    for char in text:
        event = key_for_char(char)
        if event is not None:
            region.handle_key(event)
    return region


def replace_text(region: Region, text: str) -> Region:
    return append_text(region.fresh(), text)


def region_bounds(surface_width: int, surface_height: int, fraction: float = 0.625) -> Tuple[int, int, int, int]:
    width = math.floor(fraction * surface_width)
    height = math.floor(fraction * surface_height)
    x = math.floor((surface_width - width) / 2)
    y = math.floor((surface_height - height) / 2)
    return x, y, width, height


def font_size_for_height(height: int, *, scale: float = 0.022, minimum: int = 14, maximum: int = 24) -> int:
    return min(max(minimum, math.floor(height * scale)), maximum)
