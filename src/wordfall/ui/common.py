from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import pygame

from wordfall.text.layout import Word

Color = Tuple[int, int, int]
Point = Tuple[int, int]

FINGERDOWN = getattr(pygame, "FINGERDOWN", None)
FINGERUP = getattr(pygame, "FINGERUP", None)
FINGER_EVENTS = {event for event in (FINGERDOWN, FINGERUP) if event is not None}

WORD_COLOR: Color = (0, 0, 0)
EDIT_COLOR: Color = (102, 102, 102)
EDIT_BORDER: Color = (190, 190, 190)


@dataclass
class Button:
    rect: pygame.Rect
    label: str = ""
    fill: Optional[Color] = None
    border_color: Optional[Color] = (30, 30, 30)
    border_width: int = 0

    def draw(self, surface: pygame.Surface, font: Optional[pygame.font.Font] = None) -> None:
        if self.fill is not None:
            pygame.draw.rect(surface, self.fill, self.rect, border_radius=12)
        if self.border_color is not None and self.border_width > 0:
            pygame.draw.rect(
                surface,
                self.border_color,
                self.rect,
                width=self.border_width,
                border_radius=12,
            )
        if self.label and font is not None:
            text = font.render(self.label, True, (20, 20, 20))
            text_rect = text.get_rect(center=self.rect.center)
            surface.blit(text, text_rect)

    def hit(self, pos: Tuple[int, int]) -> bool:
        return self.rect.collidepoint(pos)


def create_window(size: Tuple[int, int], *, fullscreen: bool = False) -> Tuple[pygame.Surface, pygame.Rect]:
    pygame.init()
    if fullscreen:
        screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
    else:
        screen = pygame.display.set_mode(size, pygame.RESIZABLE)
    pygame.display.set_caption("wordfall")
    pygame.mouse.set_visible(True)
    return screen, screen.get_rect()


def draw_word(surface: pygame.Surface, font: pygame.font.Font, word: Word, color: Color = WORD_COLOR) -> None:
    # Glyphs sit on the bottom edge of the box they were typed in.
    text = font.render(word.text, True, color)
    text_rect = text.get_rect(bottomleft=(round(word.origin_x), round(word.y_max)))
    surface.blit(text, text_rect)


def draw_edit_box(
    surface: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    pos: Tuple[float, float],
    width: float,
    height: float,
) -> pygame.Rect:
    rect = pygame.Rect(round(pos[0]), round(pos[1]), max(1, round(width)), max(1, round(height)))
    pygame.draw.rect(surface, EDIT_BORDER, rect, width=1)
    if text:
        rendered = font.render(text, True, EDIT_COLOR)
        surface.blit(rendered, rendered.get_rect(bottomleft=rect.bottomleft))
    return rect


def is_escape_chord(event: pygame.event.Event) -> bool:
    if event.type != pygame.KEYDOWN:
        return False
    if event.key != pygame.K_HOME:
        return False
    mods = event.mod
    has_ctrl = bool(mods & pygame.KMOD_CTRL)
    has_alt = bool(mods & pygame.KMOD_ALT)
    disallowed = (
        pygame.KMOD_SHIFT
        | pygame.KMOD_META
        | pygame.KMOD_GUI
        | getattr(pygame, "KMOD_ALTGR", 0)
    )
    return has_ctrl and has_alt and (mods & disallowed) == 0


def is_primary_pointer_event(event: pygame.event.Event, *, is_down: bool) -> bool:
    expected_type = pygame.MOUSEBUTTONDOWN if is_down else pygame.MOUSEBUTTONUP
    if event.type == expected_type:
        button = getattr(event, "button", 1)
        if button in {0, 1}:
            return True
        return bool(getattr(event, "touch", False))
    finger_type = FINGERDOWN if is_down else FINGERUP
    return finger_type is not None and event.type == finger_type


def pointer_event_pos(event: pygame.event.Event, screen_rect: pygame.Rect) -> Optional[Point]:
    if hasattr(event, "pos"):
        return event.pos
    if event.type in FINGER_EVENTS:
        return (
            int(event.x * screen_rect.width),
            int(event.y * screen_rect.height),
        )
    return None
