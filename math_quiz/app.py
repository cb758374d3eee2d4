"""Pygame UI shell for the arithmetic quiz.

All timing, scoring and problem generation live in ``round_state`` and
``problems``; this module only renders the current ``RoundState`` and turns
key presses into session calls.
"""

from __future__ import annotations

import logging
import os
import random
from collections.abc import Callable

import pygame

from .clock import RealClock
from .round_state import Phase, QuizConfig, QuizSession, build_quiz_session

logger = logging.getLogger(__name__)

WINDOW_SIZE = (400, 600)
TARGET_FPS = 60

SEED_ENV = "MATH_QUIZ_SEED"
DURATION_ENV = "MATH_QUIZ_DURATION_S"

_BG = (10, 10, 14)
_TEXT = (235, 235, 245)
_DIM = (140, 140, 150)
_GOOD = (180, 220, 180)
_BAD = (220, 180, 180)


class QuizScreen:
    """The whole window: start prompt, running round, game-over summary.

    Owns the typed input buffer and the quit flag that ends ``run()``.
    """

    def __init__(self, session: QuizSession) -> None:
        self._session = session
        self._input = ""
        self._running = True
        self._hint_font = pygame.font.Font(None, 36)
        self._heading_font = pygame.font.Font(None, 52)
        self._problem_font = pygame.font.Font(None, 64)
        self._input_font = pygame.font.Font(None, 58)
        self._small_font = pygame.font.Font(None, 26)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def input_text(self) -> str:
        return self._input

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if event.type != pygame.KEYDOWN:
            return
        state = self._session.state

        if event.key == pygame.K_ESCAPE:
            self.quit()
            return

        if state.phase is Phase.NOT_STARTED:
            if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                self._session.start()
            return

        if state.phase is Phase.GAME_OVER:
            if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_r):
                self._session.reset()
                self._input = ""
            return

        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._session.submit_answer(self._input)
            self._input = ""
        elif event.key in (pygame.K_BACKSPACE, pygame.K_DELETE):
            self._input = self._input[:-1]
        elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            if not self._input:
                self._input = "-"
        elif event.unicode and event.unicode in "0123456789":
            self._input += event.unicode

    def render(self, surface: pygame.Surface) -> None:
        self._session.update()
        surface.fill(_BG)
        if self._session.state.game_over:
            self._render_game_over(surface)
        else:
            self._render_round(surface)

    def _blit_centered(self, surface: pygame.Surface, font: pygame.font.Font, text: str, y: int, color: tuple[int, int, int]) -> int:
        img = font.render(text, True, color)
        surface.blit(img, ((surface.get_width() - img.get_width()) // 2, y))
        return y + img.get_height()

    def _render_round(self, surface: pygame.Surface) -> None:
        state = self._session.state
        y = self._blit_centered(surface, self._heading_font, "Math Quiz", 30, _TEXT) + 20
        y = self._blit_centered(surface, self._small_font, f"Time Remaining: {state.remaining_whole_s} seconds", y, _TEXT) + 6
        y = self._blit_centered(surface, self._small_font, f"Score: {state.score}", y, _TEXT) + 30
        y = self._blit_centered(surface, self._problem_font, state.problem.expression, y, _TEXT) + 20

        box = pygame.Rect(40, y, surface.get_width() - 80, 64)
        pygame.draw.rect(surface, (40, 40, 52), box)
        pygame.draw.rect(surface, _DIM, box, 2)
        if self._input:
            shown, color = self._input, _TEXT
        else:
            shown, color = "Enter your answer", _DIM
        img = (self._input_font if self._input else self._small_font).render(shown, True, color)
        surface.blit(img, (box.x + 12, box.centery - img.get_height() // 2))
        y = box.bottom + 20

        fb = state.feedback
        fb_color = _GOOD if fb.startswith("Correct") else _BAD if fb.startswith(("Wrong", "Invalid")) else _TEXT
        self._blit_centered(surface, self._small_font, fb, y, fb_color)

        if state.phase is Phase.NOT_STARTED:
            hint = "Press Enter to start"
        else:
            hint = "Type answer then Enter"
        self._blit_centered(surface, self._hint_font, hint, surface.get_height() - 50, _DIM)

    def _render_game_over(self, surface: pygame.Surface) -> None:
        s = self._session.summary()
        y = self._blit_centered(surface, self._heading_font, "Game Over", 60, _TEXT) + 30
        for line in (
            f"Final Score: {s.score}",
            f"Correct Answers: {s.correct}",
            f"Wrong Answers: {s.wrong}",
            f"Accuracy: {s.accuracy * 100:.0f}%",
        ):
            y = self._blit_centered(surface, self._small_font, line, y, _TEXT) + 10
        self._blit_centered(surface, self._small_font, "Press Enter to restart, Esc to quit", surface.get_height() - 50, _DIM)


def _env_seed() -> int:
    raw = os.environ.get(SEED_ENV, "").strip()
    if raw:
        try:
            return int(raw)
        except ValueError:
            logger.warning("ignoring %s=%r (not an integer)", SEED_ENV, raw)
    return random.SystemRandom().randint(1, 2**31 - 1)


def _env_config() -> QuizConfig:
    raw = os.environ.get(DURATION_ENV, "").strip()
    if raw:
        try:
            return QuizConfig(start_time_s=float(raw))
        except ValueError:
            logger.warning("ignoring %s=%r (expected a positive number)", DURATION_ENV, raw)
    return QuizConfig()


def run(*, max_frames: int | None = None, event_injector: Callable[[int], None] | None = None) -> int:
    pygame.init()

    pygame.display.set_caption("Math Quiz")
    surface = pygame.display.set_mode(WINDOW_SIZE)

    clock = pygame.time.Clock()

    seed = _env_seed()
    logger.info("starting math quiz (seed=%d)", seed)
    session = build_quiz_session(clock=RealClock(), seed=seed, config=_env_config())
    screen = QuizScreen(session)

    frame = 0
    try:
        while screen.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                screen.handle_event(event)

            screen.render(surface)

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
