"""Typing effect for AI-generated text in the terminal."""

from __future__ import annotations

import time
from typing import Callable, Iterator

DEFAULT_SPEED_MS = 15
FINDING_STAGGER_MS = 200


def typing_frames(text: str, speed_ms: int = DEFAULT_SPEED_MS) -> Iterator[tuple[int, str]]:
    """Yield ``(delay_ms, visible_text)`` revealing one more character per frame."""
    for index in range(1, len(text) + 1):
        yield speed_ms, text[:index]


def stagger_delays(count: int, step_ms: int = FINDING_STAGGER_MS) -> list[int]:
    """Start offsets for revealing ``count`` items one after another."""
    return [index * step_ms for index in range(count)]


def play(
    text: str,
    write: Callable[[str], object],
    speed_ms: int = DEFAULT_SPEED_MS,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Write ``text`` one character at a time."""
    shown = 0
    for delay_ms, visible in typing_frames(text, speed_ms):
        sleep(delay_ms / 1000)
        write(visible[shown:])
        shown = len(visible)
