"""
Tests for the pygame front end: session lifecycle, input and drawing.
"""

import pygame
import pytest

import invaders_core as core
import SpaceInvaders as game


@pytest.fixture
def session(quiet_rng):
    s = game.GameSession(quiet_rng)
    s.start(800, 600)
    return s


def key_down(key):
    return pygame.event.Event(pygame.KEYDOWN, key=key)


class TestReadControls:
    """Key state to controls translation."""

    def test_arrows_and_wasd(self, keys):
        assert game.read_controls(keys({pygame.K_LEFT: True}), False)["left"] is True
        assert game.read_controls(keys({pygame.K_a: True}), False)["left"] is True
        assert game.read_controls(keys({pygame.K_d: True}), False)["right"] is True
        assert game.read_controls(keys(), False) == {"left": False, "right": False, "fire": False}

    def test_fire_comes_from_latched_edge(self, keys):
        # holding space is not enough; only the latched press fires
        assert game.read_controls(keys({pygame.K_SPACE: True}), False)["fire"] is False
        assert game.read_controls(keys(), True)["fire"] is True


class TestGameSession:
    """Session lifecycle."""

    def test_start_builds_world(self, session):
        assert session.active is True
        assert session.score == 0
        assert session.game_over is False
        assert session.world == core.create_world(800, 600)

    def test_fire_is_edge_triggered(self, session, keys):
        session.handle_event(key_down(pygame.K_SPACE))
        held = keys({pygame.K_SPACE: True})
        session.tick(held)
        assert len(session.world["bullets"]) == 1
        for _ in range(3):
            session.tick(held)
        assert len(session.world["bullets"]) == 1

        session.handle_event(key_down(pygame.K_SPACE))
        session.tick(held)
        assert len(session.world["bullets"]) == 2

    def test_restart_matches_fresh_world(self, session, keys):
        for _ in range(10):
            session.handle_event(key_down(pygame.K_SPACE))
            session.tick(keys({pygame.K_RIGHT: True}))
        session.world["score"] = 70
        session.world["invader_speed"] = 3.0

        session.restart()
        assert session.world == core.create_world(800, 600)
        assert session.score == 0
        assert session.game_over is False
        assert session.active is True

    def test_stops_on_terminal_state(self, session, keys):
        session.world["invaders"] = []
        session.tick(keys())
        assert session.game_over is True
        assert session.message == core.MSG_WIN
        assert session.active is False

        # further ticks do not touch the world
        x = session.world["player"]["x"]
        assert session.tick(keys({pygame.K_LEFT: True})) == 0
        assert session.world["player"]["x"] == x

    def test_restart_key_only_after_game_over(self, session, keys):
        session.world["score"] = 40
        session.handle_event(key_down(pygame.K_r))
        assert session.score == 40

        session.world["invaders"] = []
        session.tick(keys())
        session.handle_event(key_down(pygame.K_r))
        assert session.score == 0
        assert session.active is True
        assert session.game_over is False

    def test_restart_button_click(self, session, keys):
        session.world["invaders"] = []
        session.tick(keys())
        session.button_rect = pygame.Rect(100, 100, 80, 30)

        miss = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(10, 10))
        session.handle_event(miss)
        assert session.game_over is True

        hit = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(120, 110))
        session.handle_event(hit)
        assert session.game_over is False
        assert session.active is True

    def test_resize_restarts_at_new_size(self, session):
        session.world["score"] = 30
        event = pygame.event.Event(pygame.VIDEORESIZE, size=(1024, 768), w=1024, h=768)
        session.handle_event(event)
        assert (session.width, session.height) == (1024, 768)
        assert session.world == core.create_world(1024, 768)
        assert session.score == 0

    def test_resize_to_same_size_keeps_game(self, session):
        session.world["score"] = 30
        session.resize(800, 600)
        assert session.score == 30

    def test_stop(self, session, keys):
        session.stop()
        bullets_before = list(session.world["bullets"])
        session.handle_event(key_down(pygame.K_SPACE))
        session.tick(keys())
        assert session.world["bullets"] == bullets_before


class TestDrawing:
    """Rendering onto an off-screen surface."""

    def test_barricade_colors(self):
        assert game.barricade_color(3) == game.BARRICADE_FULL
        assert game.barricade_color(2) == game.BARRICADE_MID
        assert game.barricade_color(1) == game.BARRICADE_LOW

    def test_draw_world(self, world, fonts):
        font, _, _ = fonts
        surface = pygame.Surface((800, 600))
        block = world["barricades"][0]
        block["health"] = 2
        center = (int(block["x"]) + 4, int(block["y"]) + 4)

        game.draw_world(surface, world, font)
        assert tuple(surface.get_at(center))[:3] == game.BARRICADE_MID

        inv = world["invaders"][0]
        assert tuple(surface.get_at((int(inv["x"]), int(inv["y"]))))[:3] == game.INVADER_COLOR

        player = world["player"]
        bottom_left = (int(player["x"]), int(player["y"]) + core.PLAYER_H - 1)
        assert tuple(surface.get_at(bottom_left))[:3] == game.PLAYER_COLOR

    def test_draw_overlay_returns_button(self, fonts):
        _, title_font, button_font = fonts
        surface = pygame.Surface((800, 600))
        button = game.draw_overlay(surface, core.MSG_LOSE, title_font, button_font)
        assert button.center == (400, 340)
        assert surface.get_rect().contains(button)


class TestParseArgs:
    """Command line options."""

    def test_defaults(self):
        args = game.parse_args([])
        assert (args.width, args.height) == (game.DEFAULT_W, game.DEFAULT_H)
        assert args.fps == game.FPS
        assert args.seed is None

    def test_rejects_non_positive_size(self):
        with pytest.raises(SystemExit):
            game.parse_args(["--width", "0"])
