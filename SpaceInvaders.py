import argparse
import logging
import random

import pygame

import invaders_core as core

# Space Invaders front end implemented with PyGame.
# The simulation lives in invaders_core; this module turns pygame
# events into controls, owns the session lifecycle (start, restart,
# resize) and draws the world plus the end-of-game overlay.

log = logging.getLogger(__name__)

DEFAULT_W, DEFAULT_H = 800, 600
FPS = 60

# Colors (RGB). Barricade colors step from green to amber to red as
# the blocks lose health.
BG_COLOR = (0, 0, 0)
PLAYER_COLOR = (60, 220, 220)
INVADER_COLOR = (180, 90, 220)
BULLET_COLOR = (0, 255, 0)
INVADER_BULLET_COLOR = (255, 0, 0)
BARRICADE_FULL = (51, 204, 153)
BARRICADE_MID = (255, 153, 0)
BARRICADE_LOW = (255, 0, 0)
TEXT_COLOR = (255, 255, 255)
ACCENT_COLOR = (76, 175, 80)  # overlay title and button

RESTART_KEYS = (pygame.K_r, pygame.K_RETURN)


def read_controls(keys, fire_pressed):
    """Translate a pygame key state into the controls dict for one frame.

    Arrow keys or A/D move. Fire is not read from the held keys: the
    session latches a KEYDOWN for the space bar and passes it in here,
    so one press is one shot.
    """
    return {
        "left": bool(keys[pygame.K_LEFT] or keys[pygame.K_a]),
        "right": bool(keys[pygame.K_RIGHT] or keys[pygame.K_d]),
        "fire": bool(fire_pressed),
    }


class GameSession:
    """Owns the world and the frame-loop state for one window.

    `active` is the scheduling flag: it is set by start/restart and
    cleared when the world reaches a terminal state or the session is
    stopped. While inactive, tick() does not step the simulation.
    """

    def __init__(self, rng=random):
        self.rng = rng
        self.world = None
        self.width = 0
        self.height = 0
        self.active = False
        self.button_rect = None  # set by the renderer while the overlay is up
        self._fire_pressed = False

    @property
    def score(self):
        return self.world["score"] if self.world else 0

    @property
    def game_over(self):
        return bool(self.world and self.world["game_over"])

    @property
    def message(self):
        return self.world["message"] if self.world else ""

    def start(self, width, height):
        self.width, self.height = width, height
        self.world = core.create_world(width, height)
        self.button_rect = None
        self._fire_pressed = False
        self.active = True
        log.info("session started at %dx%d", width, height)

    def stop(self):
        self.active = False

    def restart(self):
        log.info("restart (previous score %d)", self.score)
        self.start(self.width, self.height)

    def resize(self, width, height):
        # a new viewport means a new game; score is not carried over
        if (width, height) == (self.width, self.height):
            return
        log.info("viewport resized to %dx%d", width, height)
        self.start(width, height)

    def handle_event(self, event):
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_SPACE:
                self._fire_pressed = True
            elif event.key in RESTART_KEYS and self.game_over:
                self.restart()
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.game_over and self.button_rect and self.button_rect.collidepoint(event.pos):
                self.restart()
        elif event.type == pygame.VIDEORESIZE:
            self.resize(*event.size)

    def tick(self, keys):
        """Run one simulation step if the session is active.

        Returns the score earned this frame.
        """
        if not self.active:
            return 0
        controls = read_controls(keys, self._fire_pressed)
        self._fire_pressed = False
        earned = core.step(self.world, controls, self.width, self.height, self.rng)
        if self.world["game_over"]:
            self.stop()
            log.info("%s final score %d", self.world["message"], self.world["score"])
        return earned


def barricade_color(health):
    if health >= core.BARRICADE_HEALTH:
        return BARRICADE_FULL
    if health == 2:
        return BARRICADE_MID
    return BARRICADE_LOW


def _rect(ent):
    return pygame.Rect(int(ent["x"]), int(ent["y"]), ent["w"], ent["h"])


def draw_invader(surface, inv):
    # simple two-tone alien: body plus two darker "eyes"
    r = _rect(inv)
    pygame.draw.rect(surface, INVADER_COLOR, r)
    eye_w = max(1, r.width // 5)
    eye_y = r.y + r.height // 3
    pygame.draw.rect(surface, BG_COLOR, (r.x + eye_w, eye_y, eye_w, eye_w))
    pygame.draw.rect(surface, BG_COLOR, (r.right - 2 * eye_w, eye_y, eye_w, eye_w))


def draw_player(surface, player):
    # flat hull with a cannon in the middle
    r = _rect(player)
    hull = pygame.Rect(r.x, r.y + r.height // 2, r.width, r.height - r.height // 2)
    cannon = pygame.Rect(r.centerx - 3, r.y, 6, r.height // 2)
    pygame.draw.rect(surface, PLAYER_COLOR, hull)
    pygame.draw.rect(surface, PLAYER_COLOR, cannon)


def draw_world(surface, world, font):
    """Draw every entity of `world` and the score onto `surface`."""
    surface.fill(BG_COLOR)

    for b in world["bullets"]:
        pygame.draw.rect(surface, BULLET_COLOR, _rect(b))
    for b in world["invader_bullets"]:
        pygame.draw.rect(surface, INVADER_BULLET_COLOR, _rect(b))
    for inv in world["invaders"]:
        draw_invader(surface, inv)
    for block in world["barricades"]:
        pygame.draw.rect(surface, barricade_color(block["health"]), _rect(block))
    draw_player(surface, world["player"])

    hud = font.render(f"Score: {world['score']}", True, TEXT_COLOR)
    surface.blit(hud, (10, 10))


def draw_overlay(surface, message, title_font, button_font):
    """Draw the end-of-game message and the restart button.

    Returns the button rectangle so clicks can be matched against it.
    """
    w, h = surface.get_size()
    shade = pygame.Surface((w, h), pygame.SRCALPHA)
    shade.fill((0, 0, 0, 160))
    surface.blit(shade, (0, 0))

    title = title_font.render(message, True, ACCENT_COLOR)
    surface.blit(title, (w // 2 - title.get_width() // 2, h // 2 - title.get_height()))

    label = button_font.render("Play Again", True, BG_COLOR)
    button = pygame.Rect(0, 0, label.get_width() + 40, label.get_height() + 20)
    button.center = (w // 2, h // 2 + 40)
    pygame.draw.rect(surface, ACCENT_COLOR, button)
    surface.blit(label, label.get_rect(center=button.center))
    return button


def positive_int(value):
    n = int(value)
    if n <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return n


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Space Invaders (PyGame)")
    parser.add_argument("--width", type=positive_int, default=DEFAULT_W, help="Initial window width")
    parser.add_argument("--height", type=positive_int, default=DEFAULT_H, help="Initial window height")
    parser.add_argument("--fps", type=positive_int, default=FPS, help="Frames per second")
    parser.add_argument("--seed", type=int, default=None, help="Seed for invader fire")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    pygame.init()
    try:
        pygame.display.set_caption("Space Invaders (PyGame)")
        window = pygame.display.set_mode((args.width, args.height), pygame.RESIZABLE)
        clock = pygame.time.Clock()
        font = pygame.font.Font(None, 28)
        title_font = pygame.font.Font(None, 64)
        button_font = pygame.font.Font(None, 24)

        rng = random.Random(args.seed) if args.seed is not None else random
        session = GameSession(rng)
        session.start(*window.get_size())

        running = True
        while running:
            clock.tick(args.fps)

            # --- Events ---
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                else:
                    session.handle_event(event)

            # --- Update ---
            session.tick(pygame.key.get_pressed())

            # --- Render ---
            # pygame 2 resizes the display surface itself on VIDEORESIZE
            window = pygame.display.get_surface()
            draw_world(window, session.world, font)
            if session.game_over:
                session.button_rect = draw_overlay(window, session.message, title_font, button_font)
            pygame.display.flip()
    finally:
        pygame.quit()


if __name__ == "__main__":
    main()
