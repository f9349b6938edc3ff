from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

import pygame

from wordfall.config import load_config
from wordfall.log import get_logger, set_level
from wordfall.paths import ensure_directories, get_data_root
from wordfall.text.handoff import Handoff, archive_handoff, build_handoff
from wordfall.text.layout import (
    BACKSPACE,
    ENTER,
    SPACE,
    TAB,
    KeyEvent,
    Region,
    font_size_for_height,
    region_bounds,
)
from wordfall.ui.common import (
    Button,
    create_window,
    draw_edit_box,
    draw_word,
    is_escape_chord,
    is_primary_pointer_event,
    pointer_event_pos,
)

logger = get_logger(__name__)

BACKGROUND = (255, 255, 255)
CHORD_MODS = pygame.KMOD_CTRL | pygame.KMOD_ALT | pygame.KMOD_META | pygame.KMOD_GUI

_KEY_EVENTS = {
    pygame.K_BACKSPACE: BACKSPACE,
    pygame.K_SPACE: SPACE,
    pygame.K_TAB: TAB,
    pygame.K_RETURN: ENTER,
    pygame.K_KP_ENTER: ENTER,
}


def key_event_from_pygame(event: pygame.event.Event) -> Optional[KeyEvent]:
    if event.type != pygame.KEYDOWN:
        return None
    mapped = _KEY_EVENTS.get(event.key)
    if mapped is not None:
        return mapped
    if getattr(event, "mod", 0) & CHORD_MODS:
        return None
    char = getattr(event, "unicode", "")
    if len(char) == 1 and char.isprintable() and not char.isspace():
        return KeyEvent.printable(char)
    return None


def is_reset_shortcut(event: pygame.event.Event) -> bool:
    return (
        event.type == pygame.KEYDOWN
        and event.key == pygame.K_n
        and bool(getattr(event, "mod", 0) & pygame.KMOD_CTRL)
    )


class WordfallApp:
    def __init__(
        self,
        *,
        config: Optional[Dict[str, Any]] = None,
        screen: Optional[pygame.Surface] = None,
        screen_rect: Optional[pygame.Rect] = None,
        clock: Optional[pygame.time.Clock] = None,
        on_handoff: Optional[Callable[[Handoff], None]] = None,
    ) -> None:
        self.config = config if config is not None else load_config()
        self.data_root = get_data_root(self.config)
        dirs = ensure_directories(self.data_root)
        self.handoff_path = dirs["handoff"] / "handoffs.jsonl"

        display = self.config["display"]
        if screen is None:
            self.screen, self.screen_rect = create_window(
                (int(display["width"]), int(display["height"])),
                fullscreen=bool(display["fullscreen"]),
            )
        else:
            self.screen = screen
            self.screen_rect = screen_rect or screen.get_rect()
        self.clock = clock or pygame.time.Clock()
        self.fps = int(display["fps"])

        self.text_config = self.config["text"]
        self.handoff_config = self.config["handoff"]
        self.idle_timeout = int(self.handoff_config["idle_ticks"])
        self.on_handoff = on_handoff

        self.ui_font = pygame.font.SysFont("sans", 18)
        self.new_button = Button(
            rect=pygame.Rect(self.screen_rect.right - 110, 20, 90, self.ui_font.get_height() + 16),
            label="New",
            fill=(240, 240, 240),
        )

        self.font: Optional[pygame.font.Font] = None
        self.font_size = 0
        self.region: Optional[Region] = None
        self.handoff: Optional[Handoff] = None
        self._setup()
        pygame.key.set_repeat(400, 30)

    def _measure(self, text: str) -> float:
        return self.font.size(text)[0]

    def _setup(self) -> None:
        """Build a region for the current window size.

        Keeps the existing region once it holds words, so resizing mid-session
        never re-flows committed text.
        """
        if self.region is not None and self.region.words:
            return
        width, height = self.screen_rect.size
        self.font_size = font_size_for_height(
            height,
            scale=float(self.text_config["font_scale"]),
            minimum=int(self.text_config["min_font_size"]),
            maximum=int(self.text_config["max_font_size"]),
        )
        self.font = pygame.font.SysFont(str(self.text_config["font_name"]), self.font_size)
        x, y, region_w, region_h = region_bounds(width, height, float(self.text_config["region_fraction"]))
        self.region = Region.from_font(
            x,
            y,
            region_w,
            region_h,
            self._measure,
            self.font_size,
            line_spacing=float(self.text_config["line_spacing"]),
            space_scale=float(self.text_config["space_scale"]),
            tab_spaces=int(self.text_config["tab_spaces"]),
            overflow_fraction=float(self.text_config["overflow_fraction"]),
            word_height=self.font.get_height(),
        )
        logger.debug("Region %sx%s at (%s, %s), font size %s", region_w, region_h, x, y, self.font_size)

    def _reset(self) -> None:
        self.region = None
        self.handoff = None
        self._setup()
        logger.info("Region reset")

    def _resize(self, size: Tuple[int, int]) -> None:
        surface = pygame.display.get_surface()
        if surface is not None:
            self.screen = surface
        self.screen_rect = pygame.Rect((0, 0), size)
        self.new_button.rect.right = self.screen_rect.right - 20
        self._setup()

    def _handle_key(self, event: pygame.event.Event) -> None:
        if self.handoff is not None or self.region is None:
            return
        key = key_event_from_pygame(event)
        if key is not None:
            self.region.handle_key(key)

    def _tick(self) -> None:
        if self.handoff is not None or self.region is None:
            return
        ticks = self.region.tick()
        if ticks >= self.idle_timeout and self.region.words:
            self._hand_off()

    def _hand_off(self) -> Handoff:
        words = self.region.snapshot()
        handoff = build_handoff(
            words,
            self.screen_rect.width,
            self.screen_rect.height,
            wall_thickness=float(self.handoff_config["wall_thickness"]),
            wall_margin=float(self.handoff_config["wall_margin"]),
        )
        self.handoff = handoff
        archive_handoff(handoff, self.handoff_path)
        logger.info("Handed off %d words", len(words))
        if self.on_handoff is not None:
            self.on_handoff(handoff)
        return handoff

    def _render(self) -> None:
        self.screen.fill(BACKGROUND)
        region = self.region
        if region is not None:
            for word in region.words:
                draw_word(self.screen, self.font, word)
            if self.handoff is None and region.accepting_input:
                draw_edit_box(
                    self.screen,
                    self.font,
                    region.edit_buffer,
                    (region.cursor_x, region.cursor_y),
                    region.buffer_width() + self.font_size,
                    region.word_height,
                )
        self.new_button.draw(self.screen, self.ui_font)
        pygame.display.flip()

    def run(self, *, quit_on_exit: bool = True) -> None:
        running = True
        logger.info("Starting typing session")
        self._render()
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif is_escape_chord(event):
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    self._resize(event.size)
                elif is_reset_shortcut(event):
                    self._reset()
                elif event.type == pygame.KEYDOWN:
                    self._handle_key(event)
                elif is_primary_pointer_event(event, is_down=True):
                    pos = pointer_event_pos(event, self.screen_rect)
                    if pos is not None and self.new_button.hit(pos):
                        self._reset()

            self._tick()
            self._render()
            self.clock.tick(self.fps)

        if quit_on_exit:
            pygame.quit()


def main() -> None:
    config = load_config()
    set_level(config.get("log_level", "INFO"))
    try:
        WordfallApp(config=config).run(quit_on_exit=True)
    except Exception:
        logger.exception("wordfall crashed")
        pygame.quit()


if __name__ == "__main__":
    main()
